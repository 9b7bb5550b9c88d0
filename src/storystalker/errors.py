# ABOUTME: Typed failure taxonomy shared by the vault repository and backup engine.
# ABOUTME: Every error the library raises on purpose derives from StoryStalkerError.


class StoryStalkerError(Exception):
    """Base class for all Story Stalker errors."""


class InvalidInputError(StoryStalkerError, ValueError):
    """Raised when caller-supplied data fails a precondition."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class NotFoundError(StoryStalkerError, LookupError):
    """Raised when an operation targets a vault entry that does not exist."""


class StorageError(StoryStalkerError):
    """Base class for failures reported by the underlying store."""


class StorageConflictError(StorageError):
    """Raised when the store rejects a write (constraint or uniqueness violation)."""


class StorageUnavailableError(StorageError):
    """Raised when the store cannot be opened or is corrupt."""


class BackupError(StoryStalkerError):
    """Base class for backup document failures."""


class InvalidFormatError(BackupError):
    """Raised when a backup document or stored row is missing required structure."""


class IncompatibleBackupError(BackupError):
    """Raised when a backup was written by another app or an unsupported format version."""
