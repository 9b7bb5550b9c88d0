# ABOUTME: Vault repository: add, query, update, and remove tracked books.
# ABOUTME: Enforces status/progress/timestamp rules for vault entries inside single transactions.

import logging
import sqlite3
from dataclasses import dataclass, fields
from typing import Any, Final

from storystalker.clock import MillisClock, now_ms
from storystalker.db.connection import LibraryStore
from storystalker.db.mapping import (
    VAULT_BOOK_SELECT,
    BookRecord,
    VaultBook,
    draft_to_row,
    row_to_book,
    row_to_vault_book,
)
from storystalker.errors import InvalidInputError, NotFoundError
from storystalker.metadata.types import BookDraft, ReadingStatus

logger = logging.getLogger(__name__)


class _Unset:
    """Marker type for patch fields the caller did not supply."""

    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


@dataclass(frozen=True)
class VaultEntryPatch:
    """A partial update to a vault entry.

    Fields left as UNSET are not touched. notes=None is a real value: it
    clears the notes.
    """

    status: ReadingStatus | int | str | _Unset = UNSET
    progress_percent: int | _Unset = UNSET
    notes: str | None | _Unset = UNSET

    def present(self) -> set[str]:
        """Names of the fields the caller supplied."""
        return {f.name for f in fields(self) if getattr(self, f.name) is not UNSET}


def _like_pattern(text: str) -> str:
    """A LIKE pattern matching text literally as a substring (escape character: backslash)."""
    escaped = text.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def clamp_progress(value: int) -> int:
    """Clamp a progress percentage into [0, 100]."""
    return max(0, min(100, value))


class VaultRepository:
    """Typed access to books and vault entries (user_books)."""

    def __init__(self, store: LibraryStore, clock: MillisClock = now_ms) -> None:
        self._store = store
        self._clock = clock

    # --- Public API ---

    def add_to_vault(
        self,
        draft: BookDraft,
        initial_status: ReadingStatus | int = ReadingStatus.WANT,
    ) -> VaultBook:
        """Add a book to the vault.

        Upserts the book (reusing the stored row when the draft's external
        source/id pair is already known), then creates its vault entry. If the
        book already has a vault entry it is returned unchanged and
        initial_status is ignored. Everything happens in one transaction.

        Returns:
            The vault entry joined with its book.

        Raises:
            InvalidInputError: If the draft or initial status is invalid.
            StorageConflictError: If the store rejects the write.
        """
        draft.validate()
        status = ReadingStatus.parse(initial_status)
        now = self._clock()

        with self._store.transaction() as conn:
            book_id = self._upsert_book(conn, draft, now)

            existing_id = self._find_user_book_id(conn, book_id)
            if existing_id is not None:
                logger.debug("Book %d already in vault as entry %d", book_id, existing_id)
                return self._load(conn, existing_id)

            cursor = conn.execute(
                "INSERT INTO user_books "
                "(book_id, status, progress_percent, notes, added_at, "
                "started_at, finished_at, updated_at) "
                "VALUES (?, ?, 0, NULL, ?, NULL, NULL, ?)",
                (book_id, int(status), now, now),
            )
            user_book_id = cursor.lastrowid
            logger.debug("Added book %d to vault as entry %d (%s)",
                         book_id, user_book_id, status.label)
            return self._load(conn, user_book_id)  # type: ignore[arg-type]

    def get_vault_books(
        self,
        status: ReadingStatus | int | None = None,
        query: str | None = None,
        genre_contains: str | None = None,
    ) -> list[VaultBook]:
        """Return vault entries joined with their books, most recently updated first.

        Args:
            status: Only entries with exactly this status.
            query: Substring of the title or the author.
            genre_contains: Substring of the stored genres string.

        Filters combine with AND; blank strings are ignored. Text filters match
        literally (% and _ are not wildcards) and ignore case for ASCII letters
        only, since SQLite's LIKE does not fold other characters.
        """
        where: list[str] = []
        params: list[Any] = []

        if status is not None:
            where.append("ub.status = ?")
            params.append(int(ReadingStatus.parse(status)))

        if query is not None and query.strip():
            pattern = _like_pattern(query)
            where.append("(b.title LIKE ? ESCAPE '\\' OR b.author LIKE ? ESCAPE '\\')")
            params.extend([pattern, pattern])

        if genre_contains is not None and genre_contains.strip():
            where.append("b.genres LIKE ? ESCAPE '\\'")
            params.append(_like_pattern(genre_contains))

        sql = VAULT_BOOK_SELECT
        if where:
            sql += "WHERE " + " AND ".join(where) + "\n"
        sql += "ORDER BY ub.updated_at DESC, ub.id DESC"

        cursor = self._store.connection.execute(sql, params)
        return [row_to_vault_book(row) for row in cursor.fetchall()]

    def get_vault_book(self, user_book_id: int) -> VaultBook | None:
        """Retrieve one vault entry by its user_books id, or None if absent."""
        cursor = self._store.connection.execute(
            VAULT_BOOK_SELECT + "WHERE ub.id = ?", (user_book_id,)
        )
        row = cursor.fetchone()
        return row_to_vault_book(row) if row else None

    def get_book(self, book_id: int) -> BookRecord | None:
        """Retrieve a stored book by its row ID, whether or not it is in the vault."""
        cursor = self._store.connection.execute("SELECT * FROM books WHERE id = ?", (book_id,))
        row = cursor.fetchone()
        return row_to_book(row) if row else None

    def update_vault_entry(self, user_book_id: int, patch: VaultEntryPatch) -> VaultBook:
        """Apply a deliberate edit to a vault entry.

        - status: moving to Reading stamps started_at the first time only.
          Moving to Finished stamps finished_at the first time only and, when
          the patch carries no progress, sets progress to 100.
        - progress_percent: clamped to [0, 100]. Never changes status.
        - notes: replaced as given.

        updated_at is refreshed on every call. Timestamps are never cleared.

        Returns:
            The refreshed vault entry.

        Raises:
            NotFoundError: If no vault entry has this id.
            InvalidInputError: If the status or progress is malformed.
        """
        present = patch.present()
        new_status = ReadingStatus.parse(patch.status) if "status" in present else None
        new_progress: int | None = None
        if "progress_percent" in present:
            if isinstance(patch.progress_percent, bool) or not isinstance(
                patch.progress_percent, int
            ):
                raise InvalidInputError(
                    "progress_percent",
                    f"progress must be an integer, got {patch.progress_percent!r}",
                )
            new_progress = patch.progress_percent
        if "notes" in present and patch.notes is not None and not isinstance(patch.notes, str):
            raise InvalidInputError("notes", "notes must be text")

        now = self._clock()

        with self._store.transaction() as conn:
            current = conn.execute(
                "SELECT started_at, finished_at FROM user_books WHERE id = ?",
                (user_book_id,),
            ).fetchone()
            if current is None:
                raise NotFoundError(f"Vault entry {user_book_id} not found")

            updates: dict[str, Any] = {}
            progress_value = new_progress

            if new_status is not None:
                updates["status"] = int(new_status)
                if new_status is ReadingStatus.READING and current["started_at"] is None:
                    updates["started_at"] = now
                if new_status is ReadingStatus.FINISHED and current["finished_at"] is None:
                    updates["finished_at"] = now
                    if progress_value is None:
                        progress_value = 100

            if progress_value is not None:
                updates["progress_percent"] = clamp_progress(progress_value)

            if "notes" in present:
                updates["notes"] = patch.notes

            updates["updated_at"] = now

            set_clause = ", ".join(f"{column} = ?" for column in updates)
            conn.execute(
                f"UPDATE user_books SET {set_clause} WHERE id = ?",
                [*updates.values(), user_book_id],
            )
            logger.debug("Updated vault entry %d: %s", user_book_id, sorted(updates))
            return self._load(conn, user_book_id)

    def remove_from_vault(self, user_book_id: int) -> bool:
        """Delete a vault entry. The book row is kept as cached metadata.

        Returns:
            True if an entry was deleted, False if none had this id.
        """
        with self._store.transaction() as conn:
            cursor = conn.execute("DELETE FROM user_books WHERE id = ?", (user_book_id,))
        removed = cursor.rowcount > 0
        logger.debug("Remove vault entry %d: %s", user_book_id, "deleted" if removed else "absent")
        return removed

    # --- Internals ---

    def _upsert_book(self, conn: sqlite3.Connection, draft: BookDraft, now: int) -> int:
        """Insert the draft's book, or update the row already holding its external pair."""
        row = draft_to_row(draft)
        key = draft.external_key

        if key is not None:
            existing = conn.execute(
                "SELECT id FROM books WHERE external_source = ? AND external_id = ?",
                key,
            ).fetchone()
            if existing is not None:
                book_id = existing["id"]
                set_clause = ", ".join(f"{column} = ?" for column in row)
                conn.execute(
                    f"UPDATE books SET {set_clause}, updated_at = ? WHERE id = ?",
                    [*row.values(), now, book_id],
                )
                logger.debug("Updated book %d from %s:%s", book_id, *key)
                return book_id

        row["created_at"] = now
        row["updated_at"] = now
        columns = ", ".join(row)
        placeholders = ", ".join("?" for _ in row)
        cursor = conn.execute(
            f"INSERT INTO books ({columns}) VALUES ({placeholders})",
            list(row.values()),
        )
        return cursor.lastrowid  # type: ignore[return-value]

    @staticmethod
    def _find_user_book_id(conn: sqlite3.Connection, book_id: int) -> int | None:
        row = conn.execute("SELECT id FROM user_books WHERE book_id = ?", (book_id,)).fetchone()
        return row["id"] if row else None

    @staticmethod
    def _load(conn: sqlite3.Connection, user_book_id: int) -> VaultBook:
        row = conn.execute(VAULT_BOOK_SELECT + "WHERE ub.id = ?", (user_book_id,)).fetchone()
        if row is None:
            raise NotFoundError(f"Vault entry {user_book_id} not found")
        return row_to_vault_book(row)
