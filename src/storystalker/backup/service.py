# ABOUTME: Whole-library JSON backup and replace-only restore at the raw table level.
# ABOUTME: Dumps every user table to a versioned document and replays one back atomically.

import json
import logging
import os
import sqlite3
import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from storystalker.backup.chooser import FileChooser
from storystalker.clock import UtcClock, utc_now
from storystalker.db.connection import LibraryStore
from storystalker.errors import IncompatibleBackupError, InvalidFormatError

logger = logging.getLogger(__name__)

APP_ID = "story_stalker"
BACKUP_VERSION = 1
DEFAULT_BACKUP_NAME = "story_stalker_backup.json"
BACKUP_EXTENSION = "json"

# SQLite INTEGER is a signed 64-bit value.
_SQLITE_INT_MIN = -(2**63)
_SQLITE_INT_MAX = 2**63 - 1

BackupData = dict[str, list[dict[str, Any]]]


def _quote(identifier: str) -> str:
    """Quote an SQL identifier (table or column name)."""
    return '"' + identifier.replace('"', '""') + '"'


def _user_tables(conn: sqlite3.Connection) -> list[str]:
    """Names of all user-defined tables, sorted by name. SQLite's own tables are excluded."""
    cursor = conn.execute(
        "SELECT name FROM sqlite_master "
        "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' "
        "ORDER BY name"
    )
    return [row[0] for row in cursor.fetchall() if isinstance(row[0], str) and row[0].strip()]


def _table_columns(conn: sqlite3.Connection, table: str) -> set[str]:
    cursor = conn.execute(f"PRAGMA table_info({_quote(table)})")
    return {row["name"] for row in cursor.fetchall()}


def _format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    text = moment.astimezone(UTC).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def normalize_value(value: Any) -> Any:
    """Coerce a JSON value into something SQLite stores.

    Booleans become 0/1, numbers and strings pass through, null stays NULL,
    and anything else (lists, objects) is stored as its JSON text.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, int | float | str):
        return value
    return json.dumps(value)


def _check_integer_range(table: str, row: dict[str, Any]) -> None:
    """Reject integers SQLite cannot store instead of letting the driver overflow."""
    for key, value in row.items():
        if isinstance(value, int) and not _SQLITE_INT_MIN <= value <= _SQLITE_INT_MAX:
            raise InvalidFormatError(
                f"Backup value for {table}.{key} is too large to store as an integer."
            )


def parse_backup(text: str) -> BackupData:
    """Parse and validate a backup document.

    Checks, in order: valid JSON, an object at the root, the app identifier,
    the backup format version, and a "data" object. Inside "data", entries
    that are not lists and list items that are not objects are skipped.

    Returns:
        Table name -> list of rows, each row keyed by column name.

    Raises:
        InvalidFormatError: If the document is not JSON or is missing structure.
        IncompatibleBackupError: If it belongs to another app or format version.
    """
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidFormatError("That file isn't valid JSON.") from exc

    if not isinstance(decoded, dict):
        raise InvalidFormatError("Backup file format is invalid (root must be an object).")

    app = decoded.get("app")
    if not isinstance(app, str) or not app.strip():
        raise IncompatibleBackupError('Backup file is missing the "app" field.')
    if app != APP_ID:
        raise IncompatibleBackupError(f'That backup is for "{app}", not Story Stalker.')

    version = decoded.get("backupVersion")
    if isinstance(version, bool) or not isinstance(version, int):
        raise IncompatibleBackupError('Backup file is missing "backupVersion".')
    if version != BACKUP_VERSION:
        raise IncompatibleBackupError(f"Unsupported backup version ({version}).")

    data = decoded.get("data")
    if not isinstance(data, dict):
        raise InvalidFormatError('Backup file is missing "data".')

    backup: BackupData = {}
    for table, rows in data.items():
        if not isinstance(rows, list):
            continue
        backup[str(table)] = [
            {str(key): value for key, value in row.items()}
            for row in rows
            if isinstance(row, dict)
        ]
    return backup


class BackupService:
    """Exports and restores the entire library database as a single JSON document.

    Works on raw tables and rows, so it knows nothing about vault rules: any
    table present in the store is dumped, and restore replays whatever the
    current schema can hold.
    """

    def __init__(self, store: LibraryStore, clock: UtcClock = utc_now) -> None:
        self._store = store
        self._clock = clock

    # --- Export ---

    def build_snapshot(self) -> dict[str, Any]:
        """Read every user table into a backup document (as a dict).

        All reads happen in one transaction so the snapshot is consistent.
        """
        with self._store.transaction(immediate=False) as conn:
            schema_version = conn.execute("PRAGMA user_version").fetchone()[0]
            tables = _user_tables(conn)
            data = {
                table: [dict(row) for row in conn.execute(f"SELECT * FROM {_quote(table)}")]
                for table in tables
            }

        return {
            "app": APP_ID,
            "backupVersion": BACKUP_VERSION,
            "schemaVersion": schema_version,
            "exportedAt": _format_timestamp(self._clock()),
            "tables": tables,
            "data": data,
        }

    def export_to(self, path: Path) -> Path:
        """Write a backup document to path, replacing any existing file.

        The document goes to a temporary file next to the target first and is
        renamed into place, so a failed write never leaves a truncated backup.

        Returns:
            The path written.
        """
        snapshot = self.build_snapshot()
        payload = json.dumps(snapshot, indent=2, ensure_ascii=False)

        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        counts = {table: len(rows) for table, rows in snapshot["data"].items()}
        logger.info("Exported backup to %s: %s", path, counts)
        return path

    def export_backup(
        self,
        chooser: FileChooser,
        suggested_name: str = DEFAULT_BACKUP_NAME,
    ) -> Path | None:
        """Ask the chooser for a destination and export there.

        Returns:
            The written path, or None if the user cancelled.
        """
        path = chooser.choose_save_path(suggested_name, BACKUP_EXTENSION)
        if path is None:
            logger.debug("Export cancelled")
            return None
        return self.export_to(path)

    # --- Restore ---

    def restore_from(self, path: Path) -> Path:
        """Replace the whole library with the contents of a backup file.

        Returns:
            The path restored from.

        Raises:
            InvalidFormatError: If the file can't be read or is malformed.
            IncompatibleBackupError: If the backup is for another app or version.
            StorageConflictError: If the store rejects the restored rows.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise InvalidFormatError(f"Could not read backup file {path}: {exc}") from exc

        backup = parse_backup(text)
        self.replace_contents(backup)
        return path

    def restore_backup(self, chooser: FileChooser) -> Path | None:
        """Ask the chooser for a backup file and restore from it.

        Returns:
            The restored path, or None if the user cancelled.
        """
        path = chooser.choose_open_path(BACKUP_EXTENSION)
        if path is None:
            logger.debug("Restore cancelled")
            return None
        return self.restore_from(path)

    def replace_contents(self, backup: BackupData) -> dict[str, int]:
        """Delete every row in every current table, then insert the backup rows.

        Runs as one transaction with foreign-key enforcement suspended; either
        the whole replacement commits or the store is left untouched. Tables
        and columns the current schema doesn't have are ignored.

        Returns:
            Number of rows inserted per restored table.
        """
        conn = self._store.open()
        tables = _user_tables(conn)
        columns = {table: _table_columns(conn, table) for table in tables}

        skipped = sorted(set(backup) - set(tables))
        if skipped:
            logger.debug("Ignoring tables not in the current schema: %s", skipped)

        inserted: dict[str, int] = {}
        with self._store.foreign_keys_disabled(), self._store.transaction() as txn:
            for table in reversed(tables):
                txn.execute(f"DELETE FROM {_quote(table)}")

            for table in sorted(set(backup) & set(tables)):
                count = 0
                for row in backup[table]:
                    filtered = {
                        key: normalize_value(value)
                        for key, value in row.items()
                        if key in columns[table]
                    }
                    if not filtered:
                        continue
                    _check_integer_range(table, filtered)
                    column_list = ", ".join(_quote(key) for key in filtered)
                    placeholders = ", ".join("?" for _ in filtered)
                    txn.execute(
                        f"INSERT OR REPLACE INTO {_quote(table)} ({column_list}) "
                        f"VALUES ({placeholders})",
                        list(filtered.values()),
                    )
                    count += 1
                inserted[table] = count

        dangling = conn.execute("PRAGMA foreign_key_check").fetchall()
        if dangling:
            logger.warning("Restored data has %d dangling foreign key reference(s)", len(dangling))

        logger.info("Restored backup: %s", inserted)
        return inserted
