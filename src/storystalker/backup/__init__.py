# ABOUTME: Public API for whole-library JSON backup and replace-only restore.
# ABOUTME: Exports the backup service, format constants, and file chooser protocol.

from storystalker.backup.chooser import FileChooser, FixedPathChooser
from storystalker.backup.service import (
    APP_ID,
    BACKUP_VERSION,
    DEFAULT_BACKUP_NAME,
    BackupService,
    parse_backup,
)

__all__ = [
    "APP_ID",
    "BACKUP_VERSION",
    "DEFAULT_BACKUP_NAME",
    "BackupService",
    "FileChooser",
    "FixedPathChooser",
    "parse_backup",
]
