# ABOUTME: Interactive file chooser that asks for backup paths on the terminal.
# ABOUTME: Stands in for a save/open dialog; Ctrl-C or an empty answer cancels.

from pathlib import Path

import click


class PromptFileChooser:
    """FileChooser that prompts for paths with click.prompt."""

    def choose_save_path(self, suggested_name: str, extension: str) -> Path | None:
        try:
            answer = click.prompt("Save backup to", default=suggested_name, show_default=True)
        except click.Abort:
            return None
        answer = answer.strip()
        if not answer:
            return None
        path = Path(answer).expanduser()
        if not path.suffix:
            path = path.with_suffix(f".{extension}")
        return path

    def choose_open_path(self, extension: str) -> Path | None:
        try:
            answer = click.prompt(
                f"Backup file (.{extension}) to restore", default="", show_default=False
            )
        except click.Abort:
            return None
        answer = answer.strip()
        return Path(answer).expanduser() if answer else None
