# ABOUTME: SQLite store handle for the Story Stalker library database.
# ABOUTME: Opens or creates the database, applies schema and migrations, and scopes transactions.

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from storystalker.db.schema import MIGRATIONS, SCHEMA_V1, SCHEMA_VERSION
from storystalker.errors import StorageConflictError, StorageUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".storystalker" / "story_stalker.db"


def _get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the schema version stamped in the database header."""
    return conn.execute("PRAGMA user_version").fetchone()[0]


def _run_script(conn: sqlite3.Connection, script: str) -> None:
    """Run a BEGIN ... COMMIT script, rolling back if any statement fails."""
    try:
        conn.executescript(script)
    except sqlite3.Error:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        raise


def _apply_schema(conn: sqlite3.Connection) -> None:
    """Create every table and index, then stamp the current version, in one transaction."""
    _run_script(
        conn,
        f"BEGIN;\n{SCHEMA_V1}\nPRAGMA user_version = {SCHEMA_VERSION};\nCOMMIT;",
    )


def upgrade(
    conn: sqlite3.Connection,
    old_version: int,
    new_version: int,
    migrations: list[tuple[int, str]] | None = None,
) -> None:
    """Apply forward-only migrations taking the schema from old_version to new_version.

    Each migration whose target version is in (old_version, new_version] runs
    in ascending order, all inside a single transaction that also restamps the
    version. No-op when old_version >= new_version.
    """
    if old_version >= new_version:
        return
    pending = sorted(
        (version, sql)
        for version, sql in (MIGRATIONS if migrations is None else migrations)
        if old_version < version <= new_version
    )
    body = "\n".join(sql for _, sql in pending)
    logger.info("Upgrading schema from v%d to v%d (%d migration(s))",
                old_version, new_version, len(pending))
    _run_script(conn, f"BEGIN;\n{body}\nPRAGMA user_version = {new_version};\nCOMMIT;")


class LibraryStore:
    """Owns the lifecycle of one SQLite connection to the library database.

    The connection is opened lazily on first use and reused until close().
    It runs in autocommit mode; multi-statement work goes through
    transaction(), which commits on success and rolls back on any exception.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or DEFAULT_DB_PATH
        self._conn: sqlite3.Connection | None = None

    def open(self) -> sqlite3.Connection:
        """Return the live connection, opening and bootstrapping the database if needed.

        Creates the database file and parent directories if they don't exist,
        applies the schema on first creation, and runs pending migrations.

        Raises:
            StorageUnavailableError: If the file cannot be created, opened, or read.
        """
        if self._conn is not None:
            return self._conn

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.path), isolation_level=None)
        except (OSError, sqlite3.Error) as exc:
            raise StorageUnavailableError(f"Cannot open database at {self.path}: {exc}") from exc

        try:
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA foreign_keys=ON")

            version = _get_schema_version(conn)
            if version == 0:
                logger.info("Creating schema v%d at %s", SCHEMA_VERSION, self.path)
                _apply_schema(conn)
            elif version < SCHEMA_VERSION:
                upgrade(conn, version, SCHEMA_VERSION)
        except sqlite3.Error as exc:
            conn.close()
            raise StorageUnavailableError(f"Cannot open database at {self.path}: {exc}") from exc

        self._conn = conn
        return conn

    @property
    def connection(self) -> sqlite3.Connection:
        return self.open()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def close(self) -> None:
        """Close the connection. The next operation reopens it."""
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None

    @contextmanager
    def transaction(self, *, immediate: bool = True) -> Iterator[sqlite3.Connection]:
        """Run a block inside one transaction.

        Commits when the block exits normally and rolls back on any exception.
        sqlite3 integrity and operational errors are re-raised as
        StorageConflictError; other exceptions propagate unchanged.

        Args:
            immediate: Take the write lock at BEGIN (use False for read-only work).
        """
        conn = self.open()
        conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
        try:
            yield conn
            conn.execute("COMMIT")
        except (sqlite3.IntegrityError, sqlite3.OperationalError) as exc:
            self._rollback(conn)
            raise StorageConflictError(str(exc)) from exc
        except BaseException:
            self._rollback(conn)
            raise

    @staticmethod
    def _rollback(conn: sqlite3.Connection) -> None:
        # SQLite may already have rolled back on its own (e.g. disk full).
        if conn.in_transaction:
            conn.execute("ROLLBACK")

    @contextmanager
    def foreign_keys_disabled(self) -> Iterator[sqlite3.Connection]:
        """Suspend foreign-key enforcement for the duration of the block.

        SQLite ignores PRAGMA foreign_keys inside a transaction, so this must
        wrap transaction() rather than run inside it. Enforcement is switched
        back on when the block exits, whether it committed or rolled back.
        """
        conn = self.open()
        if conn.in_transaction:
            raise RuntimeError("foreign keys cannot be toggled inside a transaction")
        conn.execute("PRAGMA foreign_keys=OFF")
        try:
            yield conn
        finally:
            conn.execute("PRAGMA foreign_keys=ON")

    def __enter__(self) -> "LibraryStore":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_library(path: Path | None = None) -> LibraryStore:
    """Open or create the library database and return its store handle."""
    store = LibraryStore(path)
    store.open()
    return store
