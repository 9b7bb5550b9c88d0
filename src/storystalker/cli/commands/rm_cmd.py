# ABOUTME: The `storystalker rm` command for removing a book from the vault.
# ABOUTME: Deletes the vault entry only; the book's metadata stays cached.

from pathlib import Path

import click
from rich.console import Console

from storystalker.cli.options import db_option
from storystalker.db.connection import LibraryStore
from storystalker.db.vault import VaultRepository
from storystalker.errors import StoryStalkerError

console = Console()


@click.command("rm")
@click.argument("user_book_id", type=int)
@db_option
def rm(user_book_id: int, db_path: Path | None) -> None:
    """Remove a vault entry by ID."""
    try:
        with LibraryStore(db_path) as store:
            removed = VaultRepository(store).remove_from_vault(user_book_id)
    except StoryStalkerError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc

    if removed:
        console.print(f"Removed vault entry {user_book_id}.")
    else:
        console.print(f"[yellow]Vault entry {user_book_id} was not in the vault.[/yellow]")
