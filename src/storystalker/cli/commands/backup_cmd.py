# ABOUTME: The `storystalker export` and `storystalker restore` commands.
# ABOUTME: Write the whole library to a JSON backup, or replace it from one.

from pathlib import Path

import click
from rich.console import Console

from storystalker.backup.chooser import FileChooser, FixedPathChooser
from storystalker.backup.service import DEFAULT_BACKUP_NAME, BackupService
from storystalker.cli.chooser import PromptFileChooser
from storystalker.cli.options import db_option
from storystalker.db.connection import LibraryStore
from storystalker.errors import StoryStalkerError

console = Console()


def _chooser_for(path: Path | None) -> FileChooser:
    return FixedPathChooser(path) if path is not None else PromptFileChooser()


@click.command("export")
@click.argument("path", type=click.Path(path_type=Path, dir_okay=False), required=False)
@db_option
def export(path: Path | None, db_path: Path | None) -> None:
    """Export the whole library to a JSON backup file."""
    try:
        with LibraryStore(db_path) as store:
            written = BackupService(store).export_backup(
                _chooser_for(path), suggested_name=DEFAULT_BACKUP_NAME
            )
    except (StoryStalkerError, OSError) as exc:
        console.print(f"[red]Export failed: {exc}[/red]")
        raise SystemExit(1) from exc

    if written is None:
        console.print("[yellow]Export cancelled.[/yellow]")
        return
    console.print(f"Backup written to [bold]{written}[/bold].")


@click.command("restore")
@click.argument(
    "path", type=click.Path(path_type=Path, dir_okay=False, exists=True), required=False
)
@click.option("--yes", "-y", is_flag=True, help="Don't ask before replacing the library.")
@db_option
def restore(path: Path | None, yes: bool, db_path: Path | None) -> None:
    """Replace the whole library with a JSON backup. Current data is deleted."""
    if not yes and not click.confirm(
        "Restoring replaces everything in your library. Continue?", default=False
    ):
        console.print("[yellow]Restore cancelled.[/yellow]")
        return

    try:
        with LibraryStore(db_path) as store:
            restored = BackupService(store).restore_backup(_chooser_for(path))
    except StoryStalkerError as exc:
        console.print(f"[red]Restore failed: {exc}[/red]")
        raise SystemExit(1) from exc

    if restored is None:
        console.print("[yellow]Restore cancelled.[/yellow]")
        return
    console.print(f"Library restored from [bold]{restored}[/bold].")
