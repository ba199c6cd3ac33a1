from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from gsync import cli
from gsync.configuration import Configuration
from gsync.database import Database

runner = CliRunner()


def _stored(config_dir: Path) -> Configuration:
    return Configuration.load(Database(config_dir / "gsync.db"))


def test_set_merges_over_stored(isolated_environment: Path) -> None:
    result = runner.invoke(cli.app, ["set", "--client-id", "id", "--input-files", "*.md"])
    assert result.exit_code == 0, result.output
    assert "'client_secret' is empty" in result.output

    result = runner.invoke(cli.app, ["set", "--client-secret", "secret"])
    assert result.exit_code == 0, result.output

    assert _stored(isolated_environment) == Configuration(
        client_id="id", client_secret="secret", input_files="*.md"
    )


def test_set_without_flags_writes_nothing(isolated_environment: Path) -> None:
    result = runner.invoke(cli.app, ["set"])

    assert result.exit_code == 0
    assert "Nothing to set" in result.output
    assert _stored(isolated_environment).is_empty()


def test_set_logs_without_secret(isolated_environment: Path) -> None:
    runner.invoke(cli.app, ["set", "--client-secret", "do-not-print-me"])

    log_text = (isolated_environment / "gsync.log").read_text(encoding="utf-8")
    assert "Configuration stored" in log_text
    assert "do-not-print-me" not in log_text


def test_check_fails_with_reason_when_incomplete() -> None:
    result = runner.invoke(cli.app, ["check"])

    assert result.exit_code == 1
    assert "'client_id' is empty" in result.output


def test_check_passes_when_complete(isolated_environment: Path) -> None:
    Configuration(client_id="a", client_secret="b", input_files="c").store(
        Database(isolated_environment / "gsync.db")
    )

    result = runner.invoke(cli.app, ["check"])

    assert result.exit_code == 0
    assert "Configuration complete." in result.output


def test_check_uses_environment_over_stored(
    isolated_environment: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    Configuration(client_id="a", client_secret="b").store(Database(isolated_environment / "gsync.db"))
    monkeypatch.setenv("GSYNC_INPUT_FILES", "*.txt")

    result = runner.invoke(cli.app, ["check"])

    assert result.exit_code == 0
    assert _stored(isolated_environment).input_files is None


def test_show_masks_secret_unless_revealed(isolated_environment: Path) -> None:
    Configuration(client_id="a", client_secret="abcdefghijkl").store(
        Database(isolated_environment / "gsync.db")
    )

    masked = runner.invoke(cli.app, ["show"])
    revealed = runner.invoke(cli.app, ["show", "--reveal"])

    assert masked.exit_code == 0
    assert "****ijkl" in masked.output
    assert "abcdefghijkl" not in masked.output
    assert "abcdefghijkl" in revealed.output


def test_default_command_reports_without_prompting(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail_prompt(reason: str) -> bool:
        raise AssertionError("prompted without a terminal")

    monkeypatch.setattr(cli, "prompt_configure_missing", fail_prompt)

    result = runner.invoke(cli.app, [])

    assert result.exit_code == 0
    assert "Configuration incomplete" in result.output


def test_default_command_stores_prompted_answers(
    isolated_environment: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    Configuration(client_id="a", drive_id="shared").store(Database(isolated_environment / "gsync.db"))
    asked = []

    def answer(names):
        asked.extend(names)
        return Configuration(client_secret="b", input_files="*.md")

    monkeypatch.setattr(cli, "_is_interactive", lambda: True)
    monkeypatch.setattr(cli, "prompt_configure_missing", lambda reason: True)
    monkeypatch.setattr(cli, "prompt_missing_fields", answer)

    result = runner.invoke(cli.app, [])

    assert result.exit_code == 0, result.output
    assert asked == ["client_secret", "input_files"]
    assert _stored(isolated_environment) == Configuration(
        client_id="a", client_secret="b", input_files="*.md", drive_id="shared"
    )


def test_reset_with_yes_clears_configuration(isolated_environment: Path) -> None:
    Configuration(client_id="a").store(Database(isolated_environment / "gsync.db"))

    result = runner.invoke(cli.app, ["reset", "--yes"])

    assert result.exit_code == 0
    assert _stored(isolated_environment).is_empty()
    assert "Configuration reset" in (isolated_environment / "gsync.log").read_text(encoding="utf-8")


def test_reset_cancelled_keeps_configuration(
    isolated_environment: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    Configuration(client_id="a").store(Database(isolated_environment / "gsync.db"))
    monkeypatch.setattr(cli, "confirm_reset", lambda: False)

    result = runner.invoke(cli.app, ["reset"])

    assert result.exit_code == 0
    assert "Reset cancelled" in result.output
    assert _stored(isolated_environment) == Configuration(client_id="a")


def test_database_error_exits_with_location(isolated_environment: Path) -> None:
    isolated_environment.mkdir(parents=True, exist_ok=True)
    (isolated_environment / "gsync.db").write_bytes(b"garbage" * 200)

    result = runner.invoke(cli.app, ["show"])

    assert result.exit_code == 1
    assert "Database error" in result.output
    assert "ERROR:" in (isolated_environment / "gsync.log").read_text(encoding="utf-8")


def test_corrupt_log_does_not_block_commands(isolated_environment: Path) -> None:
    isolated_environment.mkdir(parents=True, exist_ok=True)
    (isolated_environment / "gsync.log").write_bytes(b"\xff\xfe bad\n" * 20_000)

    result = runner.invoke(cli.app, ["check"])

    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "'client_id' is empty" in result.output
