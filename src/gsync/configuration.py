"""User-configurable aspects of gsync.

The configuration is a single row of four optional strings. Absent values
are ``None`` and are kept distinct from the empty string.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from dotenv import dotenv_values
from sqlalchemy import text

from gsync.database import Database, text_column

FIELDS: Tuple[str, ...] = ("client_id", "client_secret", "input_files", "drive_id")
REQUIRED_FIELDS: Tuple[str, ...] = ("client_id", "client_secret", "input_files")

ENV_PREFIX = "GSYNC_"

SELECT_CONFIG = text("SELECT client_id, client_secret, input_files, drive_id FROM config")
DELETE_CONFIG = text("DELETE FROM config")
INSERT_CONFIG = text(
    "INSERT INTO config (client_id, client_secret, input_files, drive_id) "
    "VALUES (:client_id, :client_secret, :input_files, :drive_id)"
)


def mask_secret(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if len(value) > 8:
        return "****" + value[-4:]
    return "****"


@dataclass(frozen=True)
class Configuration:
    """Configuration for a gsync installation.

    Attributes:
        client_id: Google OAuth client ID
        client_secret: Google OAuth client secret
        input_files: Pattern of local files to sync
        drive_id: Shared Drive to sync into; None targets My Drive
    """

    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    input_files: Optional[str] = None
    drive_id: Optional[str] = None

    @classmethod
    def empty(cls) -> "Configuration":
        return cls()

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in FIELDS)

    def is_complete(self) -> Tuple[bool, str]:
        """Check that every required field is set.

        Returns:
            (True, "") when complete, otherwise (False, reason) naming the
            first missing field in the order client_id, client_secret,
            input_files. drive_id is never required.
        """
        for name in REQUIRED_FIELDS:
            if getattr(self, name) is None:
                return False, f"'{name}' is empty"
        return True, ""

    def missing_fields(self) -> Tuple[str, ...]:
        return tuple(name for name in REQUIRED_FIELDS if getattr(self, name) is None)

    @classmethod
    def merge(cls, primary: "Configuration", secondary: "Configuration") -> "Configuration":
        """Combine two configurations field by field; ``primary`` wins where set."""
        values = {}
        for field in fields(cls):
            value = getattr(primary, field.name)
            values[field.name] = value if value is not None else getattr(secondary, field.name)
        return cls(**values)

    @classmethod
    def load(cls, db: Database) -> "Configuration":
        """Read the stored configuration.

        Returns the empty configuration when nothing has been stored yet.

        Raises:
            DatabaseError: If a database operation fails or a column is not TEXT
        """
        row = db.query_single_row(SELECT_CONFIG)
        if row is None:
            return cls.empty()
        values = {}
        for name in FIELDS:
            values[name] = text_column(row, name)
        return cls(**values)

    def store(self, db: Database) -> None:
        """Replace the stored configuration with this one.

        Raises:
            DatabaseError: If a database operation fails; the previous row is kept
        """
        with db.transaction() as conn:
            conn.execute(DELETE_CONFIG)
            conn.execute(INSERT_CONFIG, self.as_dict(mask=False))

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[Path] = None,
    ) -> "Configuration":
        """Build a configuration from GSYNC_* variables.

        Values from a .env file are used only where the environment does not
        already define the variable. Unset variables stay None.
        """
        env: Dict[str, Optional[str]] = {}
        if dotenv_path is None:
            dotenv_path = Path(".env")
        if dotenv_path.exists():
            env.update(dotenv_values(dotenv_path))
        env.update(os.environ if environ is None else environ)

        values = {}
        for name in FIELDS:
            values[name] = env.get(ENV_PREFIX + name.upper())
        return cls(**values)

    def as_dict(self, mask: bool = True) -> Dict[str, Optional[str]]:
        data = {name: getattr(self, name) for name in FIELDS}
        if mask:
            data["client_secret"] = mask_secret(self.client_secret)
        return data
