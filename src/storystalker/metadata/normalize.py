# ABOUTME: Normalization of free-text book fields before they reach the database.
# ABOUTME: Tidies comma-separated genre lists and parses user-typed years.

import re
from collections.abc import Iterable

from storystalker.errors import InvalidInputError

_WHITESPACE_RE = re.compile(r"\s+")

GENRE_SEPARATOR = ", "


def _title_case_genre(genre: str) -> str:
    """Capitalize each word: "science  FICTION" -> "Science Fiction"."""
    words = _WHITESPACE_RE.split(genre.strip())
    return " ".join(word[:1].upper() + word[1:].lower() for word in words if word)


def normalize_genres(raw: str | Iterable[str] | None) -> str | None:
    """Normalize genres into the stored comma-joined form.

    Accepts either a comma-separated string or an iterable of genre names
    (whose items may themselves contain commas). Each genre is trimmed and
    title-cased, duplicates are dropped case-insensitively, and the result
    is sorted.

    Returns:
        A string like "Fantasy, Horror", or None when no genres remain.
    """
    if raw is None:
        return None
    items = [raw] if isinstance(raw, str) else list(raw)

    seen: dict[str, str] = {}
    for item in items:
        for part in item.split(","):
            genre = _title_case_genre(part)
            if genre:
                seen.setdefault(genre.casefold(), genre)

    if not seen:
        return None
    return GENRE_SEPARATOR.join(sorted(seen.values()))


def parse_year(text: str | None) -> int | None:
    """Parse a year typed by the user.

    Blank input means "no year". Anything else must be a non-negative integer.

    Raises:
        InvalidInputError: If the text is not a non-negative integer.
    """
    if text is None or not text.strip():
        return None
    try:
        year = int(text.strip())
    except ValueError:
        raise InvalidInputError("year", f"not a number: {text.strip()!r}") from None
    if year < 0:
        raise InvalidInputError("year", f"year must not be negative, got {year}")
    return year
