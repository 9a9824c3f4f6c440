# ABOUTME: Structural snapshots of a live database for schema comparison.
# ABOUTME: Describes tables, indexes, views and triggers without re-parsing CREATE text.

import sqlite3
from typing import Any

from mediaindex.db.pristine import is_reserved, quote_identifier
from mediaindex.db.schema import INDEX, TABLE

ObjectKey = tuple[str, str]


def _normalize_sql(sql: str | None) -> str:
    return " ".join((sql or "").split())


def _describe_table(conn: sqlite3.Connection, name: str) -> tuple[Any, ...]:
    # (name, declared type, notnull, default, pk) in column order
    cursor = conn.execute(f"PRAGMA table_info({quote_identifier(name)})")
    return tuple((row[1], row[2], row[3], row[4], row[5]) for row in cursor.fetchall())


def _describe_index(conn: sqlite3.Connection, name: str, table: str) -> tuple[Any, ...]:
    unique = 0
    for row in conn.execute(f"PRAGMA index_list({quote_identifier(table)})").fetchall():
        if row[1] == name:
            unique = row[2]
    cursor = conn.execute(f"PRAGMA index_xinfo({quote_identifier(name)})")
    # Key columns only: (column name, descending, collation)
    columns = tuple((row[2], row[3], row[4]) for row in cursor.fetchall() if row[5])
    return (table, unique, columns)


def describe_schema(conn: sqlite3.Connection) -> dict[ObjectKey, tuple[Any, ...]]:
    """Snapshot every user-defined schema object, keyed by (kind, name).

    Tables are described by their column metadata and indexes by table,
    uniqueness and key columns, so a table grown through ALTER TABLE compares
    equal to one created in a single statement. Views and triggers are
    described by their whitespace-normalised SQL.
    """
    cursor = conn.execute("SELECT type, name, tbl_name, sql FROM sqlite_master")
    snapshot: dict[ObjectKey, tuple[Any, ...]] = {}
    for kind, name, table, sql in (tuple(row) for row in cursor.fetchall()):
        if is_reserved(name):
            continue
        if kind == TABLE:
            snapshot[(kind, name)] = _describe_table(conn, name)
        elif kind == INDEX:
            snapshot[(kind, name)] = _describe_index(conn, name, table)
        else:
            snapshot[(kind, name)] = (table, _normalize_sql(sql))
    return snapshot


def diff_schemas(
    expected: dict[ObjectKey, tuple[Any, ...]],
    actual: dict[ObjectKey, tuple[Any, ...]],
) -> list[str]:
    """List the differences between two snapshots, one line per object."""
    problems = []
    for key in sorted(expected.keys() | actual.keys()):
        kind, name = key
        if key not in actual:
            problems.append(f"missing {kind} {name}")
        elif key not in expected:
            problems.append(f"unexpected {kind} {name}")
        elif expected[key] != actual[key]:
            problems.append(f"{kind} {name} differs")
    return problems
