# ABOUTME: Unit tests for the pristine reset.
# ABOUTME: Validates that every user object is dropped, idempotently and in dependency order.

import sqlite3

import pytest

from mediaindex.db.errors import PristineResetError
from mediaindex.db.pristine import (
    list_user_objects,
    make_pristine,
    quote_identifier,
)
from mediaindex.db.schema import TRIGGER, VIEW, create_latest_schema, latest_schema


@pytest.fixture()
def conn() -> sqlite3.Connection:
    connection = sqlite3.connect(":memory:")
    yield connection
    connection.close()


class TestMakePristine:
    """Tests for make_pristine()."""

    def test_empty_database_is_noop(self, conn: sqlite3.Connection) -> None:
        assert make_pristine(conn) == 0

    def test_drops_everything(self, conn: sqlite3.Connection) -> None:
        create_latest_schema(conn)
        make_pristine(conn)
        assert list_user_objects(conn) == []

    def test_second_run_drops_nothing(self, conn: sqlite3.Connection) -> None:
        create_latest_schema(conn)
        assert make_pristine(conn) > 0
        assert make_pristine(conn) == 0

    def test_keeps_engine_bookkeeping(self, conn: sqlite3.Connection) -> None:
        create_latest_schema(conn)
        conn.execute("INSERT INTO files (_data) VALUES ('/a.jpg')")
        assert conn.execute(
            "SELECT name FROM sqlite_master WHERE name='sqlite_sequence'"
        ).fetchone()
        make_pristine(conn)
        assert conn.execute(
            "SELECT name FROM sqlite_master WHERE name='sqlite_sequence'"
        ).fetchone()

    def test_schema_can_be_recreated_afterwards(self, conn: sqlite3.Connection) -> None:
        create_latest_schema(conn)
        make_pristine(conn)
        create_latest_schema(conn)
        assert ("table", "files") in list_user_objects(conn)

    def test_only_requested_kinds(self, conn: sqlite3.Connection) -> None:
        create_latest_schema(conn)
        make_pristine(conn, kinds=(TRIGGER, VIEW))
        kinds = {kind for kind, _ in list_user_objects(conn)}
        assert kinds == {"table", "index"}

    def test_drops_views_that_depend_on_views(self, conn: sqlite3.Connection) -> None:
        conn.execute("CREATE TABLE base (id INTEGER)")
        conn.execute("CREATE VIEW level1 AS SELECT id FROM base")
        conn.execute("CREATE VIEW level2 AS SELECT id FROM level1")
        conn.execute("CREATE TRIGGER base_cleanup DELETE ON base BEGIN SELECT 1;END")
        make_pristine(conn)
        assert list_user_objects(conn) == []

    def test_awkward_names_are_quoted(self, conn: sqlite3.Connection) -> None:
        name = quote_identifier('odd "name" table')
        conn.execute(f"CREATE TABLE {name} (id INTEGER)")
        make_pristine(conn)
        assert list_user_objects(conn) == []


class TestDeferredDrops:
    """Drops blocked by referencing rows are retried on a later pass."""

    def test_parent_table_dropped_after_its_children(self, conn: sqlite3.Connection) -> None:
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("CREATE TABLE a (id INTEGER PRIMARY KEY)")
        conn.execute("CREATE TABLE b (id INTEGER PRIMARY KEY, a_id INTEGER REFERENCES a(id))")
        conn.execute("INSERT INTO a VALUES (1)")
        conn.execute("INSERT INTO b VALUES (1, 1)")
        conn.commit()

        assert make_pristine(conn) == 2
        assert list_user_objects(conn) == []

    def test_foreign_key_cycle_raises(self, conn: sqlite3.Connection) -> None:
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("CREATE TABLE a (id INTEGER PRIMARY KEY, b_id INTEGER REFERENCES b(id))")
        conn.execute("CREATE TABLE b (id INTEGER PRIMARY KEY, a_id INTEGER REFERENCES a(id))")
        conn.execute("INSERT INTO a VALUES (1, NULL)")
        conn.execute("INSERT INTO b VALUES (1, 1)")
        conn.execute("UPDATE a SET b_id = 1 WHERE id = 1")
        conn.commit()

        with pytest.raises(PristineResetError) as excinfo:
            make_pristine(conn)

        assert excinfo.value.remaining == ["a", "b"]
        assert isinstance(excinfo.value.__cause__, sqlite3.IntegrityError)
        assert [name for _, name in list_user_objects(conn)] == ["a", "b"]


class TestListUserObjects:
    """Tests for list_user_objects()."""

    def test_lists_in_drop_order(self, conn: sqlite3.Connection) -> None:
        create_latest_schema(conn)
        kinds = [kind for kind, _ in list_user_objects(conn)]
        order = ["trigger", "view", "index", "table"]
        assert kinds == sorted(kinds, key=order.index)

    def test_counts_match_schema(self, conn: sqlite3.Connection) -> None:
        create_latest_schema(conn)
        assert len(list_user_objects(conn)) == len(latest_schema())
