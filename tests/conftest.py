from __future__ import annotations

from pathlib import Path

import pytest

from gsync.configuration import ENV_PREFIX, FIELDS
from gsync.database import Database


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    for name in FIELDS:
        monkeypatch.delenv(ENV_PREFIX + name.upper(), raising=False)
    config_dir = tmp_path / "config"
    monkeypatch.setenv("GSYNC_CONFIG_DIR", str(config_dir))
    monkeypatch.chdir(tmp_path)
    return config_dir


@pytest.fixture
def db():
    database = Database()
    yield database
    database.close()
