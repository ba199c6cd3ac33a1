from __future__ import annotations

import sys
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape

from gsync.config_logger import ConfigLogger
from gsync.configuration import Configuration
from gsync.database import Database, DatabaseError
from gsync.global_config import GlobalConfig
from gsync.interactive import confirm_reset, prompt_configure_missing, prompt_missing_fields
from gsync.report import ConfigReport

app = typer.Typer(help="Manage the gsync Google Drive sync configuration")
console = Console()


def _fail(exc: DatabaseError, logger: ConfigLogger, context: str) -> NoReturn:
    console.print(f"[red]Database error: {escape(exc.message)}[/red]")
    console.print(f"[red]  at {escape(str(exc.location))}[/red]")
    logger.log_error(str(exc), context=context)
    raise typer.Exit(code=1)


def _is_interactive() -> bool:
    return sys.stdin.isatty()


def _effective(db: Database) -> Configuration:
    return Configuration.merge(Configuration.from_env(), Configuration.load(db))


def _store(config: Configuration, db: Database, logger: ConfigLogger) -> None:
    config.store(db)
    logger.log_config_stored(config)


def _fill_missing(db: Database, logger: ConfigLogger, effective: Configuration) -> None:
    complete, reason = effective.is_complete()
    if complete or not _is_interactive():
        return
    if not prompt_configure_missing(reason):
        return
    answers = prompt_missing_fields(effective.missing_fields())
    if answers is None:
        console.print("Aborted; nothing stored.")
        return
    updated = Configuration.merge(answers, Configuration.load(db))
    _store(updated, db, logger)
    ConfigReport(Configuration.merge(answers, effective), source="effective").display(console)


@app.callback(invoke_without_command=True)
def entrypoint(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand:
        return

    global_config = GlobalConfig()
    logger = ConfigLogger(global_config.log_path)
    db = global_config.open_database()
    try:
        effective = _effective(db)
        ConfigReport(effective, source="effective").display(console)
        _fill_missing(db, logger, effective)
    except DatabaseError as exc:
        _fail(exc, logger, "interactive")


@app.command()
def show(reveal: bool = typer.Option(False, "--reveal", help="Print the client secret in clear")) -> None:
    """Show the stored configuration merged with GSYNC_* environment values."""
    global_config = GlobalConfig()
    logger = ConfigLogger(global_config.log_path)
    db = global_config.open_database()
    try:
        effective = _effective(db)
    except DatabaseError as exc:
        _fail(exc, logger, "show")
    ConfigReport(effective, source="effective", reveal=reveal).display(console)


@app.command("set")
def set_config(
    client_id: Optional[str] = typer.Option(None, "--client-id", help="Google OAuth client ID"),
    client_secret: Optional[str] = typer.Option(None, "--client-secret", help="Google OAuth client secret"),
    input_files: Optional[str] = typer.Option(None, "--input-files", help="Glob pattern of local files to sync"),
    drive_id: Optional[str] = typer.Option(None, "--drive-id", help="Shared Drive ID; omit to use My Drive"),
) -> None:
    """Merge the given settings over the stored configuration and save it."""
    overrides = Configuration(
        client_id=client_id,
        client_secret=client_secret,
        input_files=input_files,
        drive_id=drive_id,
    )
    if overrides.is_empty():
        console.print("Nothing to set. Pass at least one of --client-id, --client-secret, --input-files, --drive-id.")
        return

    global_config = GlobalConfig()
    logger = ConfigLogger(global_config.log_path)
    db = global_config.open_database()
    try:
        updated = Configuration.merge(overrides, Configuration.load(db))
        _store(updated, db, logger)
    except DatabaseError as exc:
        _fail(exc, logger, "set")

    console.print(f"Configuration stored at {global_config.database_path}.")
    complete, reason = updated.is_complete()
    if not complete:
        console.print(f"[yellow]Still incomplete: {escape(reason)}[/yellow]")


@app.command()
def check() -> None:
    """Exit with status 1 unless every required setting is present."""
    global_config = GlobalConfig()
    logger = ConfigLogger(global_config.log_path)
    db = global_config.open_database()
    try:
        effective = _effective(db)
    except DatabaseError as exc:
        _fail(exc, logger, "check")

    complete, reason = effective.is_complete()
    if not complete:
        console.print(f"[red]Configuration incomplete: {escape(reason)}[/red]")
        raise typer.Exit(code=1)
    console.print("Configuration complete.")


@app.command()
def reset(yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt")) -> None:
    """Erase the stored configuration."""
    if not yes and not confirm_reset():
        console.print("Reset cancelled.")
        raise typer.Exit(code=0)

    global_config = GlobalConfig()
    logger = ConfigLogger(global_config.log_path)
    db = global_config.open_database()
    try:
        Configuration.empty().store(db)
    except DatabaseError as exc:
        _fail(exc, logger, "reset")
    logger.log_config_reset()
    console.print("Configuration reset.")


if __name__ == "__main__":  # pragma: no cover
    app()
