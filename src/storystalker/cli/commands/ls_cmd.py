# ABOUTME: The `storystalker ls` command for listing vault entries.
# ABOUTME: Displays a Rich table filtered by status, title/author text, and genre.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from storystalker.cli.options import STATUS, db_option
from storystalker.db.connection import LibraryStore
from storystalker.db.vault import VaultRepository
from storystalker.errors import StoryStalkerError
from storystalker.metadata.types import ReadingStatus

console = Console()


@click.command("ls")
@db_option
@click.option("--status", type=STATUS, default=None, help="Only books with this status.")
@click.option("-q", "--query", default=None, help="Match title or author (case-insensitive).")
@click.option("--genre", "genre_filter", default=None, help="Match genre text.")
def ls(
    db_path: Path | None,
    status: ReadingStatus | None,
    query: str | None,
    genre_filter: str | None,
) -> None:
    """List books in the vault, most recently updated first."""
    try:
        with LibraryStore(db_path) as store:
            entries = VaultRepository(store).get_vault_books(
                status=status, query=query, genre_contains=genre_filter
            )
    except StoryStalkerError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    if not entries:
        console.print("[yellow]No books in the vault.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("Status", style="cyan")
    table.add_column("Progress", justify="right")
    table.add_column("Genres", style="dim")

    for entry in entries:
        table.add_row(
            str(entry.user_book_id),
            entry.title,
            entry.author or "[dim]unknown[/dim]",
            entry.status.label,
            f"{entry.progress_percent}%",
            entry.book.genres or "",
        )

    console.print(table)
    console.print(f"\n[dim]{len(entries)} book(s)[/dim]")
