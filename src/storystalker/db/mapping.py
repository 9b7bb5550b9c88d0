# ABOUTME: Converts between BookDraft / typed records and SQLite row dictionaries.
# ABOUTME: Row extraction is validated so loosely-typed rows never leave the db layer.

from dataclasses import dataclass
from typing import Any

from storystalker.errors import InvalidFormatError
from storystalker.metadata.normalize import normalize_genres
from storystalker.metadata.types import BookDraft, ReadingStatus

BOOK_COLUMNS = (
    "title",
    "author",
    "year",
    "description",
    "genres",
    "cover_url",
    "isbn10",
    "isbn13",
    "external_source",
    "external_id",
)


@dataclass(frozen=True)
class BookRecord:
    """A stored book row."""

    id: int
    title: str
    author: str | None
    year: int | None
    description: str | None
    genres: str | None
    cover_url: str | None
    isbn10: str | None
    isbn13: str | None
    external_source: str | None
    external_id: str | None
    created_at: int
    updated_at: int

    @property
    def genre_list(self) -> list[str]:
        return [g.strip() for g in self.genres.split(",") if g.strip()] if self.genres else []


@dataclass(frozen=True)
class VaultBook:
    """A vault entry joined with its book: the read-only view handed to callers."""

    user_book_id: int
    status: ReadingStatus
    progress_percent: int
    notes: str | None
    added_at: int
    started_at: int | None
    finished_at: int | None
    updated_at: int
    book: BookRecord

    @property
    def title(self) -> str:
        return self.book.title

    @property
    def author(self) -> str | None:
        return self.book.author


def draft_to_row(draft: BookDraft) -> dict[str, Any]:
    """Convert a BookDraft to a dict of books columns suitable for INSERT or UPDATE.

    Strips surrounding whitespace from text fields, storing blanks as NULL, and
    normalizes genres. Timestamps are left to the caller.
    """

    def _clean(value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    return {
        "title": draft.title.strip(),
        "author": _clean(draft.author),
        "year": draft.year,
        "description": _clean(draft.description),
        "genres": normalize_genres(draft.genres),
        "cover_url": _clean(draft.cover_url),
        "isbn10": _clean(draft.isbn10),
        "isbn13": _clean(draft.isbn13),
        "external_source": _clean(draft.external_source),
        "external_id": _clean(draft.external_id),
    }


def _field(row: Any, key: str, kind: type, *, nullable: bool = False) -> Any:
    """Pull one column out of a row, checking its type."""
    try:
        value = row[key]
    except (IndexError, KeyError) as exc:
        raise InvalidFormatError(f"Row is missing column {key!r}") from exc
    if value is None:
        if nullable:
            return None
        raise InvalidFormatError(f"Column {key!r} must not be NULL")
    # bool is an int subclass; SQLite never hands one back, so reject it outright.
    if isinstance(value, bool) or not isinstance(value, kind):
        raise InvalidFormatError(
            f"Column {key!r} expected {kind.__name__}, got {type(value).__name__}"
        )
    return value


def row_to_book(row: Any, *, prefix: str = "") -> BookRecord:
    """Convert a books row (dict-like) to a BookRecord.

    Args:
        row: A sqlite3.Row or mapping.
        prefix: Column alias prefix used when the row comes from a join.
    """
    return BookRecord(
        id=_field(row, f"{prefix}id", int),
        title=_field(row, f"{prefix}title", str),
        author=_field(row, f"{prefix}author", str, nullable=True),
        year=_field(row, f"{prefix}year", int, nullable=True),
        description=_field(row, f"{prefix}description", str, nullable=True),
        genres=_field(row, f"{prefix}genres", str, nullable=True),
        cover_url=_field(row, f"{prefix}cover_url", str, nullable=True),
        isbn10=_field(row, f"{prefix}isbn10", str, nullable=True),
        isbn13=_field(row, f"{prefix}isbn13", str, nullable=True),
        external_source=_field(row, f"{prefix}external_source", str, nullable=True),
        external_id=_field(row, f"{prefix}external_id", str, nullable=True),
        created_at=_field(row, f"{prefix}created_at", int),
        updated_at=_field(row, f"{prefix}updated_at", int),
    )


def row_to_vault_book(row: Any) -> VaultBook:
    """Convert a row from VAULT_BOOK_SELECT to a VaultBook."""
    status = _field(row, "status", int)
    try:
        status = ReadingStatus(status)
    except ValueError as exc:
        raise InvalidFormatError(f"Column 'status' has unknown value {status}") from exc

    return VaultBook(
        user_book_id=_field(row, "user_book_id", int),
        status=status,
        progress_percent=_field(row, "progress_percent", int),
        notes=_field(row, "notes", str, nullable=True),
        added_at=_field(row, "added_at", int),
        started_at=_field(row, "started_at", int, nullable=True),
        finished_at=_field(row, "finished_at", int, nullable=True),
        updated_at=_field(row, "user_updated_at", int),
        book=row_to_book(row, prefix="book_"),
    )


VAULT_BOOK_SELECT = """
SELECT
    ub.id               AS user_book_id,
    ub.status           AS status,
    ub.progress_percent AS progress_percent,
    ub.notes            AS notes,
    ub.added_at         AS added_at,
    ub.started_at       AS started_at,
    ub.finished_at      AS finished_at,
    ub.updated_at       AS user_updated_at,
    b.id                AS book_id,
    b.title             AS book_title,
    b.author            AS book_author,
    b.year              AS book_year,
    b.description       AS book_description,
    b.genres            AS book_genres,
    b.cover_url         AS book_cover_url,
    b.isbn10            AS book_isbn10,
    b.isbn13            AS book_isbn13,
    b.external_source   AS book_external_source,
    b.external_id       AS book_external_id,
    b.created_at        AS book_created_at,
    b.updated_at        AS book_updated_at
FROM user_books ub
JOIN books b ON b.id = ub.book_id
"""
