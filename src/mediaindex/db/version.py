# ABOUTME: Reads and writes the schema version marker stored in the database header.
# ABOUTME: Uses SQLite's PRAGMA user_version, which commits with the enclosing transaction.

import sqlite3

from mediaindex.db.errors import UnreadableVersionError
from mediaindex.db.pristine import list_user_objects


def read_version(conn: sqlite3.Connection) -> int | None:
    """Read the stored schema version.

    SQLite reports 0 for a file that was never stamped. That is reported as
    None (no marker) when the database holds no schema objects, and as 0 when
    objects exist without a version.

    Raises:
        UnreadableVersionError: If the stored marker is negative.
    """
    raw = conn.execute("PRAGMA user_version").fetchone()[0]
    if not isinstance(raw, int) or raw < 0:
        raise UnreadableVersionError(raw)
    if raw == 0:
        return 0 if list_user_objects(conn) else None
    return raw


def write_version(conn: sqlite3.Connection, version: int) -> None:
    """Stamp the database with a schema version.

    Raises:
        ValueError: If the version is not a positive integer.
    """
    if isinstance(version, bool) or not isinstance(version, int) or version < 1:
        raise ValueError(f"Schema version must be a positive integer, got {version!r}")
    # PRAGMA arguments cannot be bound as parameters.
    conn.execute(f"PRAGMA user_version = {version:d}")
