# ABOUTME: Pristine reset: drops every user-defined schema object from a database.
# ABOUTME: Drops triggers and views before the tables they reference, retrying on failure.

import logging
import sqlite3
from collections.abc import Sequence

from mediaindex.db.errors import PristineResetError
from mediaindex.db.schema import INDEX, TABLE, TRIGGER, VIEW

logger = logging.getLogger(__name__)

DROP_ORDER: tuple[str, ...] = (TRIGGER, VIEW, INDEX, TABLE)

# Primary result codes of a drop blocked by another object or by referencing rows.
_DEFERRABLE_CODES = (sqlite3.SQLITE_ERROR, sqlite3.SQLITE_CONSTRAINT)


def quote_identifier(name: str) -> str:
    """Quote a schema object name for use in DDL."""
    return '"' + name.replace('"', '""') + '"'


def is_reserved(name: str) -> bool:
    """Engine bookkeeping objects (sqlite_sequence, autoindexes) are never dropped."""
    return name.lower().startswith("sqlite_")


def list_user_objects(
    conn: sqlite3.Connection, kinds: Sequence[str] = DROP_ORDER
) -> list[tuple[str, str]]:
    """Return (kind, name) for every user-defined object, in drop order."""
    placeholders = ", ".join("?" for _ in kinds)
    cursor = conn.execute(
        f"SELECT type, name FROM sqlite_master WHERE type IN ({placeholders})",
        tuple(kinds),
    )
    objects = [(row[0], row[1]) for row in cursor.fetchall() if not is_reserved(row[1])]
    return sorted(objects, key=lambda obj: (kinds.index(obj[0]), obj[1]))


def make_pristine(conn: sqlite3.Connection, kinds: Sequence[str] = DROP_ORDER) -> int:
    """Drop every user-defined schema object of the given kinds.

    Objects are dropped triggers first, then views, indexes and tables. A drop
    that fails with a logic error, or because foreign keys still reference its
    rows, is deferred to another pass so its dependents get dropped first.
    Storage errors (locked, I/O, read-only) propagate immediately. Running
    this on an empty database is a no-op.

    Args:
        conn: Open connection. Runs inside whatever transaction is active.
        kinds: Object kinds to drop, in the order to drop them.

    Returns:
        The number of objects dropped.

    Raises:
        PristineResetError: If a full pass drops nothing while objects remain.
    """
    dropped = 0
    while True:
        pending = list_user_objects(conn, kinds)
        if not pending:
            return dropped

        progress = False
        last_error: sqlite3.DatabaseError | None = None
        for kind, name in pending:
            try:
                conn.execute(f"DROP {kind.upper()} IF EXISTS {quote_identifier(name)}")
            except (sqlite3.OperationalError, sqlite3.IntegrityError) as exc:
                if (exc.sqlite_errorcode & 0xFF) not in _DEFERRABLE_CODES:
                    raise
                logger.debug("Deferring drop of %s %s: %s", kind, name, exc)
                last_error = exc
                continue
            logger.debug("Dropped %s %s", kind, name)
            dropped += 1
            progress = True

        if not progress:
            raise PristineResetError([name for _, name in pending]) from last_error
