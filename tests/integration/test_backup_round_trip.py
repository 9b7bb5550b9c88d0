# ABOUTME: Integration tests for export-then-restore across real database files.
# ABOUTME: Validates that a round trip reproduces every table's rows, including prompt tables.

from pathlib import Path

from storystalker.backup.service import BackupService
from storystalker.db.connection import LibraryStore
from storystalker.db.vault import VaultEntryPatch, VaultRepository
from storystalker.metadata.types import BookDraft, ReadingStatus


def _populate(store: LibraryStore, clock) -> VaultRepository:
    repo = VaultRepository(store, clock=clock)
    dune = repo.add_to_vault(
        BookDraft(
            title="Dune",
            author="Frank Herbert",
            year=1965,
            genres="science fiction",
            external_source="openlibrary",
            external_id="OL893415W",
        )
    )
    clock.advance()
    hobbit = repo.add_to_vault(BookDraft(title="The Hobbit", author="J.R.R. Tolkien"))
    clock.advance()
    repo.update_vault_entry(
        dune.user_book_id, VaultEntryPatch(status=ReadingStatus.READING, progress_percent=35)
    )
    clock.advance()
    repo.update_vault_entry(hobbit.user_book_id, VaultEntryPatch(status=2, notes="Cozy."))
    removed = repo.add_to_vault(BookDraft(title="Cached Only"))
    repo.remove_from_vault(removed.user_book_id)

    conn = store.connection
    conn.execute(
        "INSERT INTO prompts (text, milestone_type, is_active, created_at, updated_at) "
        "VALUES ('What drew you in?', 0, 1, 1, 1)"
    )
    conn.execute(
        "INSERT INTO user_book_prompts (user_book_id, prompt_id, slot, selected_at, updated_at) "
        "VALUES (?, 1, 1, 1, 1)",
        (dune.user_book_id,),
    )
    conn.execute(
        "INSERT INTO prompt_responses (user_book_prompt_id, response_text, created_at) "
        "VALUES (1, 'The desert.', 1)"
    )
    return repo


class TestRoundTrip:
    """Export followed by restore reproduces the library."""

    def test_same_store_round_trip(
        self, store: LibraryStore, backup: BackupService, clock, tmp_path: Path, snapshot_rows
    ) -> None:
        """Restoring into the source store undoes changes made after export."""
        repo = _populate(store, clock)
        before = snapshot_rows(store)
        views_before = repo.get_vault_books()

        path = backup.export_to(tmp_path / "backup.json")
        repo.add_to_vault(BookDraft(title="Added after export"))
        backup.restore_from(path)

        assert snapshot_rows(store) == before
        assert repo.get_vault_books() == views_before

    def test_restore_into_fresh_database(
        self, store: LibraryStore, backup: BackupService, clock, tmp_path: Path, snapshot_rows
    ) -> None:
        """A backup restores into a brand new database file."""
        _populate(store, clock)
        before = snapshot_rows(store)
        path = backup.export_to(tmp_path / "backup.json")

        with LibraryStore(tmp_path / "other" / "fresh.db") as fresh:
            BackupService(fresh).restore_from(path)
            assert snapshot_rows(fresh) == before

            restored = VaultRepository(fresh).get_vault_books(query="dune")
            assert len(restored) == 1
            assert restored[0].status is ReadingStatus.READING
            assert restored[0].progress_percent == 35

    def test_restored_store_survives_reopen(
        self, db_path: Path, store: LibraryStore, backup: BackupService, clock, tmp_path: Path,
        snapshot_rows,
    ) -> None:
        """Restored rows persist across a reopen with foreign keys intact."""
        _populate(store, clock)
        path = backup.export_to(tmp_path / "backup.json")
        before = snapshot_rows(store)
        backup.restore_from(path)
        store.close()

        with LibraryStore(db_path) as reopened:
            assert snapshot_rows(reopened) == before
            assert reopened.connection.execute("PRAGMA foreign_keys").fetchone()[0] == 1
            assert reopened.connection.execute("PRAGMA foreign_key_check").fetchall() == []
