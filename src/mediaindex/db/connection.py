# ABOUTME: SQLite connection management for the media index databases.
# ABOUTME: Opens or creates a database, registers trigger hooks and migrates it to a target version.

import logging
import sqlite3
from collections.abc import Callable
from pathlib import Path

from mediaindex.db.engine import SchemaBuilder, migrate
from mediaindex.db.hooks import LoggingHooks, MediaHooks, register_hooks
from mediaindex.db.migrations import MigrationOptions
from mediaindex.db.schema import VERSION_LATEST

logger = logging.getLogger(__name__)

DEFAULT_DB_DIR = Path.home() / ".mediaindex"
INTERNAL_DATABASE_NAME = "internal.db"
EXTERNAL_DATABASE_NAME = "external.db"

_COMPANION_SUFFIXES = ("", "-wal", "-shm", "-journal")


def resolve_database_path(name: str | Path, base_dir: Path | None = None) -> Path:
    """Resolve a database name against the base directory unless it is absolute."""
    path = Path(name)
    if path.is_absolute():
        return path
    return (base_dir or DEFAULT_DB_DIR) / path


def is_corruption_error(exc: sqlite3.Error) -> bool:
    """Whether SQLite reported the file as corrupt or not a database at all."""
    code = getattr(exc, "sqlite_errorcode", None)
    if code is None:
        return False
    return (code & 0xFF) in (sqlite3.SQLITE_CORRUPT, sqlite3.SQLITE_NOTADB)


def connect(path: Path, hooks: MediaHooks | None = None) -> sqlite3.Connection:
    """Open a configured connection without touching the schema.

    Creates parent directories if needed. Sets WAL journal mode, the
    sqlite3.Row factory and the trigger hook functions.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path))
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        register_hooks(conn, hooks or LoggingHooks())
    except BaseException:
        conn.close()
        raise
    return conn


def _connect_and_migrate(
    path: Path,
    target_version: int,
    options: MigrationOptions,
    hooks: MediaHooks | None,
    on_create: SchemaBuilder | None,
) -> sqlite3.Connection:
    conn = connect(path, hooks)
    try:
        migrate(conn, target_version, options, on_create)
    except BaseException:
        conn.close()
        raise
    return conn


def open_database(
    name: str | Path,
    target_version: int = VERSION_LATEST,
    *,
    internal: bool = False,
    lower_case: bool = True,
    base_dir: Path | None = None,
    error_handler: Callable[[Path], None] | None = None,
    hooks: MediaHooks | None = None,
    on_create: SchemaBuilder | None = None,
) -> sqlite3.Connection:
    """Open a media index database, migrated to the target schema version.

    The caller must hold exclusive access to the database until this returns.

    Args:
        name: Database file name, resolved against base_dir, or an absolute path.
        target_version: Schema version to migrate to.
        internal: Build the internal-partition schema (no playlists or genres).
        lower_case: Fold collation keys to lower case when they are rebuilt.
        base_dir: Directory for relative names. Defaults to ~/.mediaindex.
        error_handler: Called with the database path when the file is corrupt;
            the open is retried once afterwards. Without one the error propagates.
        hooks: Receives trigger notifications. Defaults to LoggingHooks.
        on_create: Schema builder used for fresh creation and downgrades.

    Returns:
        A configured sqlite3.Connection.
    """
    db_path = resolve_database_path(name, base_dir)
    options = MigrationOptions(internal=internal, lower_case=lower_case)

    try:
        return _connect_and_migrate(db_path, target_version, options, hooks, on_create)
    except sqlite3.DatabaseError as exc:
        if error_handler is None or not is_corruption_error(exc):
            raise
        logger.warning("Database %s is corrupt (%s); invoking error handler", db_path, exc)
        error_handler(db_path)

    return _connect_and_migrate(db_path, target_version, options, hooks, on_create)


def delete_database(path: Path) -> bool:
    """Delete a database file and its journal companions.

    Returns:
        True if any file was removed.
    """
    removed = False
    for suffix in _COMPANION_SUFFIXES:
        candidate = Path(f"{path}{suffix}")
        if candidate.exists():
            candidate.unlink()
            removed = True
    if removed:
        logger.warning("Deleted database %s", path)
    return removed
