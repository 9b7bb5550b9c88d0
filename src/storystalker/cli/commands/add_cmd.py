# ABOUTME: The `storystalker add` command for putting a book in the vault.
# ABOUTME: Builds a BookDraft from options and upserts it through the vault repository.

from pathlib import Path

import click
from rich.console import Console

from storystalker.cli.options import STATUS, db_option
from storystalker.db.connection import LibraryStore
from storystalker.db.vault import VaultRepository
from storystalker.errors import StoryStalkerError
from storystalker.metadata.normalize import parse_year
from storystalker.metadata.types import BookDraft, ReadingStatus

console = Console()


@click.command("add")
@click.argument("title")
@click.option("--author", default=None, help="Author name.")
@click.option("--year", default=None, help="Publication year.")
@click.option("--genres", default=None, help='Comma-separated genres, e.g. "horror, fantasy".')
@click.option("--description", default=None, help="Short description.")
@click.option("--cover-url", default=None, help="Cover image URL.")
@click.option("--isbn10", default=None, help="ISBN-10.")
@click.option("--isbn13", default=None, help="ISBN-13.")
@click.option("--source", "external_source", default=None, help="External catalog name.")
@click.option("--external-id", default=None, help="ID of the book in the external catalog.")
@click.option(
    "--status",
    type=STATUS,
    default="want",
    show_default=True,
    help="Initial reading status (want, reading, finished).",
)
@db_option
def add(
    title: str,
    author: str | None,
    year: str | None,
    genres: str | None,
    description: str | None,
    cover_url: str | None,
    isbn10: str | None,
    isbn13: str | None,
    external_source: str | None,
    external_id: str | None,
    status: ReadingStatus,
    db_path: Path | None,
) -> None:
    """Add a book to the vault (or show it if it's already there)."""
    try:
        draft = BookDraft(
            title=title,
            author=author,
            year=parse_year(year),
            description=description,
            genres=genres,
            cover_url=cover_url,
            isbn10=isbn10,
            isbn13=isbn13,
            external_source=external_source,
            external_id=external_id,
        )
        with LibraryStore(db_path) as store:
            entry = VaultRepository(store).add_to_vault(draft, status)
    except StoryStalkerError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    console.print(
        f"[bold]{entry.title}[/bold] is in your vault as #{entry.user_book_id} "
        f"([cyan]{entry.status.label}[/cyan])."
    )
