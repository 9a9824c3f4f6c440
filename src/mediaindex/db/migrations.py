# ABOUTME: Version boundary transformations, keyed by the version each one produces.
# ABOUTME: Each boundary adds columns, backfills derived attributes or rewrites rows.

import logging
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass

from mediaindex.core.keys import key_for
from mediaindex.core.paths import (
    extract_owner_package_name,
    extract_relative_path,
    extract_volume_name,
    is_download_path,
)
from mediaindex.db.pristine import quote_identifier
from mediaindex.db.schema import FILES_COLUMN_ADDITIONS, find_object

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationOptions:
    """Per-database settings threaded through every boundary."""

    internal: bool = False
    lower_case: bool = True


Boundary = Callable[[sqlite3.Connection, MigrationOptions], None]


def _column_names(conn: sqlite3.Connection, table: str) -> set[str]:
    cursor = conn.execute(f"PRAGMA table_info({quote_identifier(table)})")
    return {row[1] for row in cursor.fetchall()}


def _add_files_columns(conn: sqlite3.Connection, version: int) -> None:
    """Add the files columns introduced at a version, skipping any already present."""
    existing = _column_names(conn, "files")
    for addition in FILES_COLUMN_ADDITIONS:
        if addition.version == version and addition.name not in existing:
            conn.execute(f"ALTER TABLE files ADD COLUMN {addition.definition}")


def _backfill_from_path(
    conn: sqlite3.Connection, column: str, derive: Callable[[object], object]
) -> int:
    """Recompute a derived files column from _data for every row."""
    rows = conn.execute("SELECT _id, _data FROM files").fetchall()
    conn.executemany(
        f"UPDATE files SET {column} = ? WHERE _id = ?",
        [(derive(row[1]), row[0]) for row in rows],
    )
    logger.debug("Backfilled files.%s for %d row(s)", column, len(rows))
    return len(rows)


def _ensure_index(conn: sqlite3.Connection, name: str, internal: bool) -> None:
    cursor = conn.execute("SELECT 1 FROM sqlite_master WHERE type='index' AND name=?", (name,))
    if cursor.fetchone() is None:
        conn.execute(find_object(name, internal).sql)


def add_owner_package_name(conn: sqlite3.Connection, options: MigrationOptions) -> None:
    _add_files_columns(conn, 1000)
    _backfill_from_path(conn, "owner_package_name", extract_owner_package_name)


def add_color_spaces(conn: sqlite3.Connection, options: MigrationOptions) -> None:
    _add_files_columns(conn, 1003)


def add_hash_and_pending(conn: sqlite3.Connection, options: MigrationOptions) -> None:
    _add_files_columns(conn, 1004)


def add_download_info(conn: sqlite3.Connection, options: MigrationOptions) -> None:
    _add_files_columns(conn, 1005)


def add_audiobook(conn: sqlite3.Connection, options: MigrationOptions) -> None:
    _add_files_columns(conn, 1006)


def set_is_download(conn: sqlite3.Connection, options: MigrationOptions) -> None:
    """Flag rows stored under a Download directory; other rows keep their value."""
    rows = conn.execute("SELECT _id, _data FROM files").fetchall()
    conn.executemany(
        "UPDATE files SET is_download = 1 WHERE _id = ?",
        [(row[0],) for row in rows if is_download_path(row[1])],
    )


def add_expires_and_trashed(conn: sqlite3.Connection, options: MigrationOptions) -> None:
    _add_files_columns(conn, 1010)


def add_relative_path(conn: sqlite3.Connection, options: MigrationOptions) -> None:
    _add_files_columns(conn, 1018)
    _backfill_from_path(conn, "relative_path", extract_relative_path)


def add_volume_name(conn: sqlite3.Connection, options: MigrationOptions) -> None:
    _add_files_columns(conn, 1020)
    _backfill_from_path(conn, "volume_name", extract_volume_name)
    _ensure_index(conn, "volume_path_idx", options.internal)


def update_title_keys(conn: sqlite3.Connection, options: MigrationOptions) -> None:
    """Rebuild files.title_key with the current collation key rules."""
    rows = conn.execute("SELECT _id, title FROM files WHERE title IS NOT NULL").fetchall()
    conn.executemany(
        "UPDATE files SET title_key = ? WHERE _id = ?",
        [(key_for(row[1], options.lower_case), row[0]) for row in rows],
    )


BOUNDARIES: dict[int, Boundary] = {
    1000: add_owner_package_name,
    1003: add_color_spaces,
    1004: add_hash_and_pending,
    1005: add_download_info,
    1006: add_audiobook,
    1008: set_is_download,
    1010: add_expires_and_trashed,
    1018: add_relative_path,
    1020: add_volume_name,
    1021: update_title_keys,
}
