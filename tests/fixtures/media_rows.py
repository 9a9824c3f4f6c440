# ABOUTME: Helpers for inserting media rows in tests.
# ABOUTME: Writes only columns that exist in every schema version.

import sqlite3
import time

from mediaindex.db.schema import MediaType


def insert_file(
    conn: sqlite3.Connection,
    path: str,
    display_name: str,
    media_type: MediaType = MediaType.IMAGE,
    **extra: object,
) -> int:
    """Insert a files row and commit. Returns its _id."""
    now = int(time.time() * 1000)
    row = {
        "_data": path,
        "date_added": now,
        "date_modified": now,
        "_display_name": display_name,
        "media_type": int(media_type),
        **extra,
    }
    columns = ", ".join(row.keys())
    placeholders = ", ".join("?" for _ in row)
    cursor = conn.execute(
        f"INSERT INTO files ({columns}) VALUES ({placeholders})", list(row.values())
    )
    conn.commit()
    return cursor.lastrowid  # type: ignore[return-value]
