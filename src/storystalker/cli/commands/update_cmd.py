# ABOUTME: The `storystalker update` command for editing a vault entry.
# ABOUTME: Changes status, progress, or notes; only the options given are touched.

from pathlib import Path

import click
from rich.console import Console

from storystalker.cli.options import STATUS, db_option
from storystalker.db.connection import LibraryStore
from storystalker.db.vault import UNSET, VaultEntryPatch, VaultRepository
from storystalker.errors import NotFoundError, StoryStalkerError
from storystalker.metadata.types import ReadingStatus

console = Console()


@click.command("update")
@click.argument("user_book_id", type=int)
@click.option("--status", type=STATUS, default=None, help="New reading status.")
@click.option("--progress", type=int, default=None, help="Progress percent (clamped to 0-100).")
@click.option("--notes", default=None, help="Replace the notes.")
@click.option("--clear-notes", is_flag=True, help="Remove the notes.")
@db_option
def update(
    user_book_id: int,
    status: ReadingStatus | None,
    progress: int | None,
    notes: str | None,
    clear_notes: bool,
    db_path: Path | None,
) -> None:
    """Update status, progress, or notes for a vault entry."""
    if notes is not None and clear_notes:
        raise click.UsageError("--notes and --clear-notes are mutually exclusive.")

    patch = VaultEntryPatch(
        status=UNSET if status is None else status,
        progress_percent=UNSET if progress is None else progress,
        notes=None if clear_notes else (UNSET if notes is None else notes),
    )

    try:
        with LibraryStore(db_path) as store:
            entry = VaultRepository(store).update_vault_entry(user_book_id, patch)
    except NotFoundError as exc:
        console.print(f"[red]Vault entry {user_book_id} not found.[/red]")
        raise SystemExit(1) from exc
    except StoryStalkerError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    console.print(
        f"Updated [bold]{entry.title}[/bold]: [cyan]{entry.status.label}[/cyan], "
        f"{entry.progress_percent}%."
    )
