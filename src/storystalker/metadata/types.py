# ABOUTME: Core input data structures: the BookDraft upsert payload and ReadingStatus enum.
# ABOUTME: BookDraft is what a caller hands the vault repository when adding a book.

from dataclasses import dataclass
from enum import IntEnum

from storystalker.errors import InvalidInputError


class ReadingStatus(IntEnum):
    """Tracking state of a vault entry. Stored as its integer value."""

    WANT = 0
    READING = 1
    FINISHED = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value: "int | str | ReadingStatus") -> "ReadingStatus":
        """Coerce an int, digit string, or case-insensitive label to a status.

        Raises:
            InvalidInputError: If the value names no known status.
        """
        if isinstance(value, bool):
            raise InvalidInputError("status", f"unknown status {value!r}")
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                value = int(text)
            else:
                try:
                    return cls[text.upper()]
                except KeyError:
                    raise InvalidInputError("status", f"unknown status {value!r}") from None
        try:
            return cls(value)
        except ValueError:
            raise InvalidInputError("status", f"unknown status {value!r}") from None


@dataclass
class BookDraft:
    """Metadata for a book about to be added to the vault.

    Only title is required. When both external_source and external_id are
    non-blank, the pair identifies the book in an external catalog and
    repeated adds update the same stored book instead of creating a new one.
    """

    title: str
    author: str | None = None
    year: int | None = None
    description: str | None = None
    genres: str | None = None
    cover_url: str | None = None
    isbn10: str | None = None
    isbn13: str | None = None
    external_source: str | None = None
    external_id: str | None = None

    @property
    def external_key(self) -> tuple[str, str] | None:
        """The trimmed (source, id) pair, or None when either half is blank."""
        source = (self.external_source or "").strip()
        ext_id = (self.external_id or "").strip()
        if source and ext_id:
            return source, ext_id
        return None

    def validate(self) -> None:
        """Check preconditions for storing this draft.

        Raises:
            InvalidInputError: If title is blank or year is not a non-negative int.
        """
        if not isinstance(self.title, str) or not self.title.strip():
            raise InvalidInputError("title", "title must not be empty")
        if self.year is not None:
            if isinstance(self.year, bool) or not isinstance(self.year, int):
                raise InvalidInputError("year", f"year must be an integer, got {self.year!r}")
            if self.year < 0:
                raise InvalidInputError("year", f"year must not be negative, got {self.year}")
