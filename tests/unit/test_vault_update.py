# ABOUTME: Unit tests for VaultRepository.update_vault_entry and remove_from_vault.
# ABOUTME: Validates partial patches, status timestamps, progress clamping, and removal.

import pytest

from storystalker.db.connection import LibraryStore
from storystalker.db.vault import UNSET, VaultEntryPatch, VaultRepository, clamp_progress
from storystalker.errors import InvalidInputError, NotFoundError
from storystalker.metadata.types import BookDraft, ReadingStatus


@pytest.fixture()
def entry_id(repo: VaultRepository, clock) -> int:
    """A fresh Want entry for "Dune"; the clock is advanced past its creation."""
    entry = repo.add_to_vault(BookDraft(title="Dune", author="Frank Herbert"))
    clock.advance()
    return entry.user_book_id


class TestVaultEntryPatch:
    """Tests for the tri-state patch object."""

    def test_empty_patch_has_nothing_present(self) -> None:
        """A default patch supplies no fields."""
        assert VaultEntryPatch().present() == set()

    def test_none_notes_is_present(self) -> None:
        """notes=None counts as supplied, since it clears the notes."""
        assert VaultEntryPatch(notes=None).present() == {"notes"}

    def test_zero_progress_is_present(self) -> None:
        """A falsy progress of 0 still counts as supplied."""
        assert VaultEntryPatch(progress_percent=0).present() == {"progress_percent"}

    def test_unset_is_falsy_singleton(self) -> None:
        """UNSET is falsy and there is only ever one of it."""
        assert not UNSET
        assert repr(UNSET) == "UNSET"
        assert type(UNSET)() is UNSET


class TestStatusTransitions:
    """Status changes stamp timestamps once and never clear them."""

    def test_reading_sets_started_at(self, repo: VaultRepository, entry_id: int, clock) -> None:
        """Moving to Reading stamps started_at."""
        entry = repo.update_vault_entry(entry_id, VaultEntryPatch(status=ReadingStatus.READING))
        assert entry.status is ReadingStatus.READING
        assert entry.started_at == clock.now
        assert entry.finished_at is None
        assert entry.progress_percent == 0

    def test_started_at_not_overwritten(
        self, repo: VaultRepository, entry_id: int, clock
    ) -> None:
        """started_at keeps its first value across later status changes."""
        started = repo.update_vault_entry(entry_id, VaultEntryPatch(status=1)).started_at
        clock.advance()
        repo.update_vault_entry(entry_id, VaultEntryPatch(notes="Great opening"))
        clock.advance()
        repo.update_vault_entry(entry_id, VaultEntryPatch(status=0))
        clock.advance()
        entry = repo.update_vault_entry(entry_id, VaultEntryPatch(status=1))
        assert entry.started_at == started

    def test_finished_forces_progress_100(
        self, repo: VaultRepository, entry_id: int, clock
    ) -> None:
        """Finishing without a progress value sets progress to 100."""
        entry = repo.update_vault_entry(entry_id, VaultEntryPatch(status=ReadingStatus.FINISHED))
        assert entry.status is ReadingStatus.FINISHED
        assert entry.progress_percent == 100
        assert entry.finished_at == clock.now

    def test_skip_straight_to_finished_leaves_started_at(
        self, repo: VaultRepository, entry_id: int
    ) -> None:
        """Finishing from Want does not invent a start time."""
        entry = repo.update_vault_entry(entry_id, VaultEntryPatch(status="finished"))
        assert entry.started_at is None
        assert entry.finished_at is not None
        assert entry.progress_percent == 100

    def test_finished_with_explicit_progress(
        self, repo: VaultRepository, entry_id: int
    ) -> None:
        """An explicit progress wins over the implied 100 on finish."""
        entry = repo.update_vault_entry(
            entry_id, VaultEntryPatch(status=ReadingStatus.FINISHED, progress_percent=80)
        )
        assert entry.progress_percent == 80
        assert entry.finished_at is not None

    def test_refinishing_keeps_progress_and_finished_at(
        self, repo: VaultRepository, entry_id: int, clock
    ) -> None:
        """Finishing a second time changes neither finished_at nor progress."""
        finished_at = repo.update_vault_entry(entry_id, VaultEntryPatch(status=2)).finished_at
        clock.advance()
        repo.update_vault_entry(entry_id, VaultEntryPatch(progress_percent=40))
        clock.advance()
        entry = repo.update_vault_entry(entry_id, VaultEntryPatch(status=2))
        assert entry.finished_at == finished_at
        assert entry.progress_percent == 40

    def test_leaving_finished_keeps_finished_at(
        self, repo: VaultRepository, entry_id: int
    ) -> None:
        """Moving back out of Finished does not clear finished_at."""
        repo.update_vault_entry(entry_id, VaultEntryPatch(status=ReadingStatus.FINISHED))
        entry = repo.update_vault_entry(entry_id, VaultEntryPatch(status=ReadingStatus.READING))
        assert entry.status is ReadingStatus.READING
        assert entry.finished_at is not None
        assert entry.progress_percent == 100

    def test_unknown_status_rejected(self, repo: VaultRepository, entry_id: int) -> None:
        """An unknown status code is rejected and the entry is untouched."""
        with pytest.raises(InvalidInputError):
            repo.update_vault_entry(entry_id, VaultEntryPatch(status=5))
        assert repo.get_vault_book(entry_id).status is ReadingStatus.WANT


class TestProgressAndNotes:
    """Progress and notes are independent, deliberate edits."""

    @pytest.mark.parametrize(("given", "stored"), [(-20, 0), (0, 0), (55, 55), (100, 100), (250, 100)])
    def test_progress_clamped(
        self, repo: VaultRepository, entry_id: int, given: int, stored: int
    ) -> None:
        """Out-of-range progress is clamped into 0-100."""
        entry = repo.update_vault_entry(entry_id, VaultEntryPatch(progress_percent=given))
        assert entry.progress_percent == stored

    def test_full_progress_does_not_finish(self, repo: VaultRepository, entry_id: int) -> None:
        """Reaching 100% progress does not change the status."""
        entry = repo.update_vault_entry(entry_id, VaultEntryPatch(progress_percent=100))
        assert entry.status is ReadingStatus.WANT
        assert entry.finished_at is None

    def test_non_integer_progress_rejected(self, repo: VaultRepository, entry_id: int) -> None:
        """Progress must be an integer."""
        with pytest.raises(InvalidInputError) as excinfo:
            repo.update_vault_entry(entry_id, VaultEntryPatch(progress_percent="50"))  # type: ignore[arg-type]
        assert excinfo.value.field == "progress_percent"

    def test_notes_replaced_verbatim(self, repo: VaultRepository, entry_id: int) -> None:
        """Notes are stored exactly as given, whitespace included."""
        repo.update_vault_entry(entry_id, VaultEntryPatch(notes="first"))
        entry = repo.update_vault_entry(entry_id, VaultEntryPatch(notes="  second\n"))
        assert entry.notes == "  second\n"

    def test_notes_cleared_with_none(self, repo: VaultRepository, entry_id: int) -> None:
        """notes=None clears existing notes."""
        repo.update_vault_entry(entry_id, VaultEntryPatch(notes="keep?"))
        entry = repo.update_vault_entry(entry_id, VaultEntryPatch(notes=None))
        assert entry.notes is None

    def test_absent_fields_untouched(self, repo: VaultRepository, entry_id: int) -> None:
        """Fields left out of the patch keep their values."""
        repo.update_vault_entry(
            entry_id, VaultEntryPatch(status=1, progress_percent=30, notes="hooked")
        )
        entry = repo.update_vault_entry(entry_id, VaultEntryPatch(progress_percent=35))
        assert entry.status is ReadingStatus.READING
        assert entry.notes == "hooked"
        assert entry.progress_percent == 35

    def test_empty_patch_refreshes_updated_at(
        self, repo: VaultRepository, entry_id: int, clock
    ) -> None:
        """Even an empty patch bumps updated_at."""
        before = repo.get_vault_book(entry_id)
        entry = repo.update_vault_entry(entry_id, VaultEntryPatch())
        assert entry.updated_at == clock.now
        assert entry.updated_at > before.updated_at
        assert entry.added_at == before.added_at

    def test_clamp_progress(self) -> None:
        """clamp_progress bounds values to 0-100."""
        assert clamp_progress(-1) == 0
        assert clamp_progress(101) == 100
        assert clamp_progress(42) == 42


class TestUpdateMissing:
    """Updates aimed at entries that don't exist."""

    def test_missing_entry_raises_not_found(
        self, repo: VaultRepository, store: LibraryStore
    ) -> None:
        """Updating an unknown entry raises NotFoundError and leaves no open transaction."""
        with pytest.raises(NotFoundError):
            repo.update_vault_entry(999, VaultEntryPatch(status=1))
        assert not store.connection.in_transaction


class TestRemoveFromVault:
    """Tests for remove_from_vault."""

    def test_removes_entry_keeps_book(self, repo: VaultRepository, entry_id: int) -> None:
        """Removing an entry keeps the book row as cached metadata."""
        book_id = repo.get_vault_book(entry_id).book.id
        assert repo.remove_from_vault(entry_id) is True
        assert repo.get_vault_book(entry_id) is None
        assert repo.get_book(book_id) is not None

    def test_missing_id_is_not_an_error(self, repo: VaultRepository) -> None:
        """Removing an unknown id returns False."""
        assert repo.remove_from_vault(999) is False

    def test_remove_twice(self, repo: VaultRepository, entry_id: int) -> None:
        """The second removal of the same entry reports nothing deleted."""
        assert repo.remove_from_vault(entry_id) is True
        assert repo.remove_from_vault(entry_id) is False
