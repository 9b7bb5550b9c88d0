# ABOUTME: Shared pytest fixtures for Story Stalker tests.
# ABOUTME: Provides an isolated store per test, a controllable clock, and sample drafts.

from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest

from storystalker.backup.service import BackupService
from storystalker.db.connection import LibraryStore
from storystalker.db.vault import VaultRepository
from storystalker.metadata.types import BookDraft


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1000) -> int:
        self.now += ms
        return self.now


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path."""
    return tmp_path / "library.db"


@pytest.fixture()
def store(db_path: Path) -> Iterator[LibraryStore]:
    """An opened store backed by a throwaway database file."""
    handle = LibraryStore(db_path)
    handle.open()
    yield handle
    handle.close()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def repo(store: LibraryStore, clock: FakeClock) -> VaultRepository:
    """A VaultRepository on the test store with a fake clock."""
    return VaultRepository(store, clock=clock)


@pytest.fixture()
def backup(store: LibraryStore) -> BackupService:
    """A BackupService on the test store with a fixed export timestamp."""
    return BackupService(store, clock=lambda: datetime(2024, 5, 1, 12, 30, tzinfo=UTC))


@pytest.fixture()
def dune() -> BookDraft:
    """A fully-populated draft from an external catalog."""
    return BookDraft(
        title="Dune",
        author="Frank Herbert",
        year=1965,
        description="Spice, sand, and politics on Arrakis.",
        genres="Classic, Science Fiction",
        cover_url="https://covers.example.org/dune.jpg",
        isbn10="0441013597",
        isbn13="9780441013593",
        external_source="openlibrary",
        external_id="OL893415W",
    )


@pytest.fixture()
def hobbit() -> BookDraft:
    """A manual draft with no external identity."""
    return BookDraft(title="The Hobbit", author="J.R.R. Tolkien", genres="Fantasy")


def table_rows(store: LibraryStore) -> dict[str, set[tuple]]:
    """Every row of every user table, as sets of sorted (column, value) tuples."""
    conn = store.connection
    tables = [
        row[0]
        for row in conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
        )
    ]
    return {
        table: {tuple(sorted(dict(row).items())) for row in conn.execute(f"SELECT * FROM {table}")}
        for table in tables
    }


@pytest.fixture()
def snapshot_rows():
    """Helper for comparing whole-store contents before and after an operation."""
    return table_rows
