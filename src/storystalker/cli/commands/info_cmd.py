# ABOUTME: The `storystalker info` command for displaying one vault entry in detail.
# ABOUTME: Shows book metadata, tracking state, and timestamps.

from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from storystalker.cli.options import db_option
from storystalker.db.connection import LibraryStore
from storystalker.db.vault import VaultRepository
from storystalker.errors import StoryStalkerError

console = Console()


def _format_ms(value: int | None) -> str:
    if value is None:
        return "-"
    return datetime.fromtimestamp(value / 1000).strftime("%Y-%m-%d %H:%M")


@click.command("info")
@click.argument("user_book_id", type=int)
@db_option
def info(user_book_id: int, db_path: Path | None) -> None:
    """Show details for a vault entry by ID."""
    try:
        with LibraryStore(db_path) as store:
            entry = VaultRepository(store).get_vault_book(user_book_id)
    except StoryStalkerError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    if entry is None:
        console.print(f"[red]Vault entry {user_book_id} not found.[/red]")
        raise SystemExit(1)

    book = entry.book
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")

    table.add_row("ID", str(entry.user_book_id))
    table.add_row("Title", book.title)
    table.add_row("Author", book.author or "unknown")
    if book.year is not None:
        table.add_row("Year", str(book.year))
    if book.genres:
        table.add_row("Genres", book.genres)
    if book.description:
        table.add_row("Description", book.description)
    if book.isbn13 or book.isbn10:
        table.add_row("ISBN", book.isbn13 or book.isbn10 or "")
    if book.external_source and book.external_id:
        table.add_row("Source", f"{book.external_source}:{book.external_id}")
    table.add_row("Status", entry.status.label)
    table.add_row("Progress", f"{entry.progress_percent}%")
    if entry.notes:
        table.add_row("Notes", entry.notes)
    table.add_row("Added", _format_ms(entry.added_at))
    table.add_row("Started", _format_ms(entry.started_at))
    table.add_row("Finished", _format_ms(entry.finished_at))
    table.add_row("Updated", _format_ms(entry.updated_at))

    console.print(table)
