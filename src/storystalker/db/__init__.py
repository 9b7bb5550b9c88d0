# ABOUTME: Public API for the Story Stalker database layer.
# ABOUTME: Exports the store handle, the vault repository, and the record types.

from storystalker.db.connection import DEFAULT_DB_PATH, LibraryStore, open_library
from storystalker.db.mapping import BookRecord, VaultBook
from storystalker.db.vault import UNSET, VaultEntryPatch, VaultRepository

__all__ = [
    "DEFAULT_DB_PATH",
    "UNSET",
    "BookRecord",
    "LibraryStore",
    "VaultBook",
    "VaultEntryPatch",
    "VaultRepository",
    "open_library",
]
