"""Global configuration directory stored in ~/.config/gsync.

This module locates the database and log file used across the CLI.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from gsync.database import Database

CONFIG_DIR_ENV = "GSYNC_CONFIG_DIR"
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "gsync"


class GlobalConfig:
    """Represents the per-user gsync directory."""

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        if config_dir is None:
            override = os.getenv(CONFIG_DIR_ENV)
            config_dir = Path(override).expanduser() if override else DEFAULT_CONFIG_DIR
        self.config_dir = config_dir
        self.database_path = self.config_dir / "gsync.db"
        self.log_path = self.config_dir / "gsync.log"
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def open_database(self) -> Database:
        return Database(self.database_path)
