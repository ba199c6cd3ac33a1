"""Interactive prompts powered by questionary."""
from __future__ import annotations

from typing import Iterable, Optional

import questionary
from rich.console import Console

from gsync.configuration import Configuration

console = Console()

FIELD_PROMPTS = {
    "client_id": "Google OAuth client ID:",
    "client_secret": "Google OAuth client secret:",
    "input_files": "Files to sync (glob pattern, e.g. ~/notes/*.md):",
}


def prompt_configure_missing(reason: str) -> bool:
    console.print(f"The configuration is incomplete: {reason}\n")
    choice = questionary.select(
        "What would you like to do?",
        choices=[
            "Fill in the missing settings",
            "Exit",
        ],
    ).ask()
    return choice == "Fill in the missing settings"


def prompt_missing_fields(names: Iterable[str]) -> Optional[Configuration]:
    """Ask for each named field; returns None if the user aborts."""
    values = {}
    for name in names:
        if name == "client_secret":
            answer = questionary.password(FIELD_PROMPTS[name]).ask()
        else:
            answer = questionary.text(FIELD_PROMPTS[name]).ask()
        if answer is None:
            return None
        values[name] = answer
    return Configuration(**values)


def confirm_reset() -> bool:
    return bool(questionary.confirm("Erase the stored gsync configuration?", default=False).ask())
