# ABOUTME: Unit tests for the declarative schema definition.
# ABOUTME: Validates object naming, internal partition filtering and conflict detection.

import sqlite3

import pytest

from mediaindex.db.errors import StructuralConflictError
from mediaindex.db.schema import (
    FILES_BASE_COLUMNS,
    FILES_COLUMN_ADDITIONS,
    INDEX,
    TABLE,
    TRIGGER,
    VERSION_LATEST,
    VERSION_LEGACY,
    VIEW,
    create_latest_schema,
    find_object,
    latest_schema,
)


@pytest.fixture()
def conn() -> sqlite3.Connection:
    connection = sqlite3.connect(":memory:")
    yield connection
    connection.close()


def _names(kind: str, internal: bool = False) -> set[str]:
    return {obj.name for obj in latest_schema(internal) if obj.kind == kind}


class TestLatestSchema:
    """Tests for the latest_schema() object list."""

    def test_external_tables(self) -> None:
        assert _names(TABLE) == {
            "files",
            "thumbnails",
            "videothumbnails",
            "artists",
            "albums",
            "album_art",
            "audio_genres",
            "audio_genres_map",
            "audio_playlists_map",
            "log",
        }

    def test_external_views(self) -> None:
        assert _names(VIEW) == {
            "audio",
            "audio_meta",
            "video",
            "images",
            "album_info",
            "artist_info",
            "search",
            "audio_playlists",
            "artists_albums_map",
            "audio_genres_map_noid",
            "searchhelpertitle",
        }

    def test_external_triggers(self) -> None:
        assert _names(TRIGGER) == {
            "files_cleanup",
            "audio_genres_cleanup",
            "audio_playlists_cleanup",
            "albumart_cleanup1",
            "albumart_cleanup2",
        }

    def test_internal_drops_playlist_and_genre_objects(self) -> None:
        internal = {obj.name for obj in latest_schema(internal=True)}
        for name in (
            "audio_genres",
            "audio_genres_map",
            "audio_playlists_map",
            "audio_playlists",
            "audio_genres_map_noid",
            "audio_genres_cleanup",
            "audio_playlists_cleanup",
            "files_cleanup",
        ):
            assert name not in internal
        assert {"files", "albumart_cleanup1", "albumart_cleanup2", "search"} <= internal

    def test_names_are_unique(self) -> None:
        names = [obj.name for obj in latest_schema()]
        assert len(names) == len(set(names))

    def test_tables_precede_other_objects(self) -> None:
        kinds = [obj.kind for obj in latest_schema()]
        order = [TABLE, INDEX, VIEW, TRIGGER]
        assert kinds == sorted(kinds, key=order.index)

    def test_column_additions_are_ordered_and_in_range(self) -> None:
        versions = [c.version for c in FILES_COLUMN_ADDITIONS]
        assert versions == sorted(versions)
        assert all(VERSION_LEGACY < v <= VERSION_LATEST for v in versions)

    def test_find_object(self) -> None:
        assert find_object("volume_path_idx").kind == INDEX
        with pytest.raises(KeyError):
            find_object("files_cleanup", internal=True)


class TestCreateLatestSchema:
    """Tests for create_latest_schema()."""

    def test_files_columns_in_declared_order(self, conn: sqlite3.Connection) -> None:
        create_latest_schema(conn)
        columns = [row[1] for row in conn.execute("PRAGMA table_info(files)")]
        expected = [c.split()[0] for c in FILES_BASE_COLUMNS]
        expected += [c.name for c in FILES_COLUMN_ADDITIONS]
        assert columns == expected

    def test_creates_every_object(self, conn: sqlite3.Connection) -> None:
        create_latest_schema(conn)
        rows = conn.execute("SELECT name FROM sqlite_master").fetchall()
        present = {row[0] for row in rows}
        assert {obj.name for obj in latest_schema()} <= present

    def test_path_is_unique_case_insensitively(self, conn: sqlite3.Connection) -> None:
        create_latest_schema(conn)
        conn.execute("INSERT INTO files (_data) VALUES ('/storage/emulated/0/DCIM/a.jpg')")
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute("INSERT INTO files (_data) VALUES ('/STORAGE/EMULATED/0/dcim/A.JPG')")

    def test_year_rejects_zero(self, conn: sqlite3.Connection) -> None:
        create_latest_schema(conn)
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute("INSERT INTO files (_data, year) VALUES ('/a.mp3', 0)")
        conn.execute("INSERT INTO files (_data, year) VALUES ('/b.mp3', 1999)")

    def test_new_columns_have_defaults(self, conn: sqlite3.Connection) -> None:
        create_latest_schema(conn)
        conn.execute("INSERT INTO files (_data) VALUES ('/a.jpg')")
        row = conn.execute(
            "SELECT owner_package_name, is_pending, is_trashed, is_download FROM files"
        ).fetchone()
        assert row == (None, 0, 0, 0)

    def test_second_create_raises_structural_conflict(self, conn: sqlite3.Connection) -> None:
        create_latest_schema(conn)
        with pytest.raises(StructuralConflictError) as excinfo:
            create_latest_schema(conn)
        assert excinfo.value.name == "thumbnails"

    def test_search_view_unions_artists_albums_and_titles(
        self, conn: sqlite3.Connection
    ) -> None:
        create_latest_schema(conn)
        conn.execute("INSERT INTO artists VALUES (1, 'beatles', 'The Beatles')")
        conn.execute("INSERT INTO albums VALUES (1, 'abbey road', 'Abbey Road')")
        conn.execute(
            "INSERT INTO files (_data, title, title_key, artist_id, album_id, is_music,"
            " media_type, mime_type) VALUES ('/s/a.mp3', 'Something', 'something', 1, 1, 1, 2,"
            " 'audio/mpeg')"
        )
        rows = conn.execute("SELECT mime_type, text1 FROM search ORDER BY grouporder").fetchall()
        assert rows == [
            ("artist", "The Beatles"),
            ("album", "Abbey Road"),
            ("audio/mpeg", "Something"),
        ]
