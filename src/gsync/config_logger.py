"""Activity log for configuration changes."""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console

from gsync.configuration import Configuration

console = Console(stderr=True)

MAX_LOG_SIZE = 100_000
ROTATED_MARKER = "... [log rotated] ...\n\n"


class ConfigLogger:
    """Manages timestamped logging to gsync.log in the config directory."""

    def __init__(self, log_file: Path):
        """Initialize config logger.

        Args:
            log_file: Path of the log file; its directory is created if missing
        """
        self.log_file = log_file
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        self._rotate_if_needed()

    def _rotate_if_needed(self, max_size: int = MAX_LOG_SIZE) -> None:
        """Keep the newest half of the log once it grows past max_size bytes."""
        try:
            if not self.log_file.exists() or self.log_file.stat().st_size <= max_size:
                return

            with open(self.log_file, "r", encoding="utf-8", errors="replace") as f:
                lines = f.readlines()

            keep_lines = lines[len(lines) // 2:]

            with open(self.log_file, "w", encoding="utf-8") as f:
                f.write(ROTATED_MARKER)
                f.writelines(keep_lines)
        except (OSError, UnicodeError) as exc:
            console.print(f"[yellow]Warning: Failed to rotate log: {exc}[/yellow]")

    def log_config_stored(self, config: Configuration) -> None:
        """Log a stored configuration with the client secret masked.

        Args:
            config: Configuration that was written to the database
        """
        message = f"[{self._timestamp()}] Configuration stored\n"
        for name, value in config.as_dict(mask=True).items():
            shown = "<unset>" if value is None else repr(value)
            message += f"  {name:<14} {shown}\n"
        complete, reason = config.is_complete()
        message += f"  complete:      {'yes' if complete else 'no (' + reason + ')'}\n"
        self._write(message)

    def log_config_reset(self) -> None:
        self._write(f"[{self._timestamp()}] Configuration reset\n")

    def log_error(self, error: str, context: Optional[str] = None) -> None:
        """Log an error.

        Args:
            error: Error message
            context: Optional context information
        """
        message = f"[{self._timestamp()}] ERROR: {error}\n"
        if context:
            message += f"           Context: {context}\n"
        self._write(message)

    def _timestamp(self) -> str:
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    def _write(self, message: str) -> None:
        try:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(message)
        except OSError as exc:
            # A failed log write must not abort the command
            console.print(f"[yellow]Warning: Failed to write to log: {exc}[/yellow]")
