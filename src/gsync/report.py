"""Configuration report for the CLI."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gsync.configuration import FIELDS, REQUIRED_FIELDS, Configuration


@dataclass
class ConfigReport:
    config: Configuration
    source: str
    reveal: bool = False

    def display(self, console: Optional[Console] = None) -> None:
        console = console or Console()
        table = Table(title=f"gsync configuration ({self.source})")
        table.add_column("Setting")
        table.add_column("Value")
        table.add_column("Required", justify="center")

        values = self.config.as_dict(mask=not self.reveal)
        for name in FIELDS:
            value = values[name]
            shown = "[dim]<unset>[/dim]" if value is None else escape(value)
            table.add_row(name, shown, "yes" if name in REQUIRED_FIELDS else "no")
        console.print(table)

        complete, reason = self.config.is_complete()
        if complete:
            console.print("[green]Configuration complete.[/green]")
        else:
            console.print(f"[yellow]Configuration incomplete: {escape(reason)}[/yellow]")
