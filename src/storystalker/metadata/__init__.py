# ABOUTME: Input-side book data for Story Stalker: drafts, reading status, and normalization.
# ABOUTME: Re-exports the types callers need to build an add-to-vault request.

from storystalker.metadata.normalize import normalize_genres, parse_year
from storystalker.metadata.types import BookDraft, ReadingStatus

__all__ = ["BookDraft", "ReadingStatus", "normalize_genres", "parse_year"]
