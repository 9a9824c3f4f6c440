# ABOUTME: Declarative description of the latest media index schema.
# ABOUTME: Tables, indexes, views and triggers as SchemaObject records, plus creation helpers.

import sqlite3
from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum

from mediaindex.db.errors import StructuralConflictError

VERSION_LEGACY = 900
VERSION_LATEST = 1021

TABLE = "table"
INDEX = "index"
VIEW = "view"
TRIGGER = "trigger"


class MediaType(IntEnum):
    """Values stored in files.media_type."""

    NONE = 0
    IMAGE = 1
    AUDIO = 2
    VIDEO = 3
    PLAYLIST = 4


@dataclass(frozen=True)
class SchemaObject:
    """One structural object: its kind, name and the SQL that creates it.

    Objects flagged external_only are skipped for the internal storage
    partition, which carries no playlists or genres.
    """

    kind: str
    name: str
    sql: str
    external_only: bool = False


@dataclass(frozen=True)
class ColumnAddition:
    """A files column introduced by a later schema version."""

    version: int
    name: str
    declaration: str

    @property
    def definition(self) -> str:
        return f"{self.name} {self.declaration}"


FILES_BASE_COLUMNS: tuple[str, ...] = (
    "_id INTEGER PRIMARY KEY AUTOINCREMENT",
    "_data TEXT UNIQUE COLLATE NOCASE",
    "_size INTEGER",
    "format INTEGER",
    "parent INTEGER",
    "date_added INTEGER",
    "date_modified INTEGER",
    "mime_type TEXT",
    "title TEXT",
    "description TEXT",
    "_display_name TEXT",
    "picasa_id TEXT",
    "orientation INTEGER",
    "latitude DOUBLE",
    "longitude DOUBLE",
    "datetaken INTEGER",
    "mini_thumb_magic INTEGER",
    "bucket_id TEXT",
    "bucket_display_name TEXT",
    "isprivate INTEGER",
    "title_key TEXT",
    "artist_id INTEGER",
    "album_id INTEGER",
    "composer TEXT",
    "track INTEGER",
    "year INTEGER CHECK(year!=0)",
    "is_ringtone INTEGER",
    "is_music INTEGER",
    "is_alarm INTEGER",
    "is_notification INTEGER",
    "is_podcast INTEGER",
    "album_artist TEXT",
    "duration INTEGER",
    "bookmark INTEGER",
    "artist TEXT",
    "album TEXT",
    "resolution TEXT",
    "tags TEXT",
    "category TEXT",
    "language TEXT",
    "mini_thumb_data TEXT",
    "name TEXT",
    "media_type INTEGER",
    "old_id INTEGER",
    "is_drm INTEGER",
    "width INTEGER",
    "height INTEGER",
    "title_resource_uri TEXT",
)

# Appended to files in this order, both by upgrades and by fresh creation.
FILES_COLUMN_ADDITIONS: tuple[ColumnAddition, ...] = (
    ColumnAddition(1000, "owner_package_name", "TEXT DEFAULT NULL"),
    ColumnAddition(1003, "color_standard", "INTEGER"),
    ColumnAddition(1003, "color_transfer", "INTEGER"),
    ColumnAddition(1003, "color_range", "INTEGER"),
    ColumnAddition(1004, "_hash", "BLOB DEFAULT NULL"),
    ColumnAddition(1004, "is_pending", "INTEGER DEFAULT 0"),
    ColumnAddition(1005, "is_download", "INTEGER DEFAULT 0"),
    ColumnAddition(1005, "download_uri", "TEXT DEFAULT NULL"),
    ColumnAddition(1005, "referer_uri", "TEXT DEFAULT NULL"),
    ColumnAddition(1006, "is_audiobook", "INTEGER DEFAULT 0"),
    ColumnAddition(1010, "date_expires", "INTEGER DEFAULT NULL"),
    ColumnAddition(1010, "is_trashed", "INTEGER DEFAULT 0"),
    ColumnAddition(1018, "relative_path", "TEXT DEFAULT NULL"),
    ColumnAddition(1020, "volume_name", "TEXT DEFAULT NULL"),
)


def _files_table_sql() -> str:
    columns = [*FILES_BASE_COLUMNS, *(c.definition for c in FILES_COLUMN_ADDITIONS)]
    return "CREATE TABLE files (" + ",".join(columns) + ")"


_TABLES = (
    SchemaObject(
        TABLE,
        "thumbnails",
        "CREATE TABLE thumbnails (_id INTEGER PRIMARY KEY,_data TEXT,image_id INTEGER,"
        "kind INTEGER,width INTEGER,height INTEGER)",
    ),
    SchemaObject(
        TABLE,
        "artists",
        "CREATE TABLE artists (artist_id INTEGER PRIMARY KEY,"
        "artist_key TEXT NOT NULL UNIQUE,artist TEXT NOT NULL)",
    ),
    SchemaObject(
        TABLE,
        "albums",
        "CREATE TABLE albums (album_id INTEGER PRIMARY KEY,"
        "album_key TEXT NOT NULL UNIQUE,album TEXT NOT NULL)",
    ),
    SchemaObject(
        TABLE, "album_art", "CREATE TABLE album_art (album_id INTEGER PRIMARY KEY,_data TEXT)"
    ),
    SchemaObject(
        TABLE,
        "videothumbnails",
        "CREATE TABLE videothumbnails (_id INTEGER PRIMARY KEY,_data TEXT,"
        "video_id INTEGER,kind INTEGER,width INTEGER,height INTEGER)",
    ),
    SchemaObject(TABLE, "files", _files_table_sql()),
    SchemaObject(TABLE, "log", "CREATE TABLE log (time DATETIME, message TEXT)"),
    SchemaObject(
        TABLE,
        "audio_genres",
        "CREATE TABLE audio_genres (_id INTEGER PRIMARY KEY,name TEXT NOT NULL)",
        external_only=True,
    ),
    SchemaObject(
        TABLE,
        "audio_genres_map",
        "CREATE TABLE audio_genres_map (_id INTEGER PRIMARY KEY,"
        "audio_id INTEGER NOT NULL,genre_id INTEGER NOT NULL,"
        "UNIQUE (audio_id,genre_id) ON CONFLICT IGNORE)",
        external_only=True,
    ),
    SchemaObject(
        TABLE,
        "audio_playlists_map",
        "CREATE TABLE audio_playlists_map (_id INTEGER PRIMARY KEY,"
        "audio_id INTEGER NOT NULL,playlist_id INTEGER NOT NULL,"
        "play_order INTEGER NOT NULL)",
        external_only=True,
    ),
)

_INDEXES = (
    SchemaObject(INDEX, "image_id_index", "CREATE INDEX image_id_index on thumbnails(image_id)"),
    SchemaObject(INDEX, "album_idx", "CREATE INDEX album_idx on albums(album)"),
    SchemaObject(INDEX, "albumkey_index", "CREATE INDEX albumkey_index on albums(album_key)"),
    SchemaObject(INDEX, "artist_idx", "CREATE INDEX artist_idx on artists(artist)"),
    SchemaObject(INDEX, "artistkey_index", "CREATE INDEX artistkey_index on artists(artist_key)"),
    SchemaObject(
        INDEX, "video_id_index", "CREATE INDEX video_id_index on videothumbnails(video_id)"
    ),
    SchemaObject(INDEX, "album_id_idx", "CREATE INDEX album_id_idx ON files(album_id)"),
    SchemaObject(INDEX, "artist_id_idx", "CREATE INDEX artist_id_idx ON files(artist_id)"),
    SchemaObject(
        INDEX,
        "bucket_index",
        "CREATE INDEX bucket_index on files(bucket_id,media_type,datetaken, _id)",
    ),
    SchemaObject(
        INDEX,
        "bucket_name",
        "CREATE INDEX bucket_name on files(bucket_id,media_type,bucket_display_name)",
    ),
    SchemaObject(INDEX, "format_index", "CREATE INDEX format_index ON files(format)"),
    SchemaObject(INDEX, "media_type_index", "CREATE INDEX media_type_index ON files(media_type)"),
    SchemaObject(INDEX, "parent_index", "CREATE INDEX parent_index ON files(parent)"),
    SchemaObject(INDEX, "path_index", "CREATE INDEX path_index ON files(_data)"),
    SchemaObject(
        INDEX, "sort_index", "CREATE INDEX sort_index ON files(datetaken ASC, _id ASC)"
    ),
    SchemaObject(INDEX, "title_idx", "CREATE INDEX title_idx ON files(title)"),
    SchemaObject(INDEX, "titlekey_index", "CREATE INDEX titlekey_index ON files(title_key)"),
    SchemaObject(
        INDEX,
        "volume_path_idx",
        "CREATE INDEX volume_path_idx ON files(volume_name, relative_path)",
    ),
)

# Ordered so that every view is created after the views it selects from.
_VIEWS = (
    SchemaObject(
        VIEW,
        "audio_playlists",
        "CREATE VIEW audio_playlists AS SELECT _id,_data,name,date_added,date_modified,"
        "owner_package_name,volume_name,relative_path"
        f" FROM files WHERE media_type={MediaType.PLAYLIST:d}",
        external_only=True,
    ),
    SchemaObject(
        VIEW,
        "audio_meta",
        "CREATE VIEW audio_meta AS SELECT _id,_data,_display_name,_size,mime_type,"
        "date_added,is_drm,date_modified,title,title_key,duration,artist_id,composer,"
        "album_id,track,year,is_ringtone,is_music,is_alarm,is_notification,is_podcast,"
        "bookmark,album_artist,owner_package_name,_hash,is_pending,is_audiobook,"
        "date_expires,is_trashed,volume_name,relative_path"
        f" FROM files WHERE media_type={MediaType.AUDIO:d}",
    ),
    SchemaObject(
        VIEW,
        "artists_albums_map",
        "CREATE VIEW artists_albums_map AS SELECT DISTINCT artist_id, album_id FROM audio_meta",
    ),
    SchemaObject(
        VIEW,
        "audio",
        "CREATE VIEW audio as SELECT * FROM audio_meta LEFT OUTER JOIN artists"
        " ON audio_meta.artist_id=artists.artist_id LEFT OUTER JOIN albums"
        " ON audio_meta.album_id=albums.album_id",
    ),
    SchemaObject(
        VIEW,
        "album_info",
        "CREATE VIEW album_info AS SELECT audio.album_id AS _id, album, album_key,"
        " MIN(year) AS minyear, MAX(year) AS maxyear, artist, artist_id, artist_key,"
        " count(*) AS numsongs,album_art._data AS album_art FROM audio"
        " LEFT OUTER JOIN album_art ON audio.album_id=album_art.album_id WHERE is_music=1"
        " GROUP BY audio.album_id",
    ),
    SchemaObject(
        VIEW,
        "searchhelpertitle",
        "CREATE VIEW searchhelpertitle AS SELECT * FROM audio ORDER BY title_key",
    ),
    SchemaObject(
        VIEW,
        "artist_info",
        "CREATE VIEW artist_info AS SELECT artist_id AS _id, artist, artist_key,"
        " COUNT(DISTINCT album_key) AS number_of_albums, COUNT(*) AS number_of_tracks"
        " FROM audio WHERE is_music=1 GROUP BY artist_key",
    ),
    SchemaObject(
        VIEW,
        "search",
        "CREATE VIEW search AS SELECT _id,'artist' AS mime_type,artist,NULL AS album,"
        "NULL AS title,artist AS text1,NULL AS text2,number_of_albums AS data1,"
        "number_of_tracks AS data2,artist_key AS match,"
        "'content://media/external/audio/artists/'||_id AS suggest_intent_data,"
        "1 AS grouporder FROM artist_info WHERE (artist!='<unknown>')"
        " UNION ALL SELECT _id,'album' AS mime_type,artist,album,"
        "NULL AS title,album AS text1,artist AS text2,NULL AS data1,"
        "NULL AS data2,artist_key||' '||album_key AS match,"
        "'content://media/external/audio/albums/'||_id AS suggest_intent_data,"
        "2 AS grouporder FROM album_info WHERE (album!='<unknown>')"
        " UNION ALL SELECT searchhelpertitle._id AS _id,mime_type,artist,album,title,"
        "title AS text1,artist AS text2,NULL AS data1,"
        "NULL AS data2,artist_key||' '||album_key||' '||title_key AS match,"
        "'content://media/external/audio/media/'||searchhelpertitle._id"
        " AS suggest_intent_data,"
        "3 AS grouporder FROM searchhelpertitle WHERE (title != '')",
    ),
    SchemaObject(
        VIEW,
        "audio_genres_map_noid",
        "CREATE VIEW audio_genres_map_noid AS SELECT audio_id,genre_id FROM audio_genres_map",
        external_only=True,
    ),
    SchemaObject(
        VIEW,
        "images",
        "CREATE VIEW images AS SELECT _id,_data,_size,_display_name,mime_type,title,"
        "date_added,date_modified,description,picasa_id,isprivate,latitude,longitude,"
        "datetaken,orientation,mini_thumb_magic,bucket_id,bucket_display_name,width,"
        "height,owner_package_name,color_standard,color_transfer,color_range,_hash,"
        "is_pending,is_download,date_expires,is_trashed,volume_name,relative_path"
        f" FROM files WHERE media_type={MediaType.IMAGE:d}",
    ),
    SchemaObject(
        VIEW,
        "video",
        "CREATE VIEW video AS SELECT _id,_data,_display_name,_size,mime_type,"
        "date_added,date_modified,title,duration,artist,album,resolution,description,"
        "isprivate,tags,category,language,mini_thumb_data,latitude,longitude,datetaken,"
        "mini_thumb_magic,bucket_id,bucket_display_name,bookmark,width,height,"
        "owner_package_name,color_standard,color_transfer,color_range,_hash,is_pending,"
        "is_download,date_expires,is_trashed,volume_name,relative_path"
        f" FROM files WHERE media_type={MediaType.VIDEO:d}",
    ),
)

_TRIGGERS = (
    SchemaObject(
        TRIGGER,
        "audio_genres_cleanup",
        "CREATE TRIGGER audio_genres_cleanup DELETE ON audio_genres BEGIN DELETE"
        " FROM audio_genres_map WHERE genre_id = old._id;END",
        external_only=True,
    ),
    SchemaObject(
        TRIGGER,
        "audio_playlists_cleanup",
        "CREATE TRIGGER audio_playlists_cleanup DELETE ON files"
        f" WHEN old.media_type={MediaType.PLAYLIST:d}"
        " BEGIN DELETE FROM audio_playlists_map WHERE playlist_id = old._id;"
        "SELECT _DELETE_FILE(old._data);END",
        external_only=True,
    ),
    SchemaObject(
        TRIGGER,
        "files_cleanup",
        "CREATE TRIGGER files_cleanup DELETE ON files BEGIN SELECT _OBJECT_REMOVED(old._id);END",
        external_only=True,
    ),
    SchemaObject(
        TRIGGER,
        "albumart_cleanup1",
        "CREATE TRIGGER albumart_cleanup1 DELETE ON albums BEGIN DELETE FROM album_art"
        " WHERE album_id = old.album_id;END",
    ),
    SchemaObject(
        TRIGGER,
        "albumart_cleanup2",
        "CREATE TRIGGER albumart_cleanup2 DELETE ON album_art"
        " BEGIN SELECT _DELETE_FILE(old._data);END",
    ),
)


def latest_schema(internal: bool = False) -> list[SchemaObject]:
    """Return every object of the latest schema, in creation order.

    Tables come first, then indexes, views and triggers.
    """
    objects = [*_TABLES, *_INDEXES, *_VIEWS, *_TRIGGERS]
    return [obj for obj in objects if not (internal and obj.external_only)]


def find_object(name: str, internal: bool = False) -> SchemaObject:
    """Look up a single latest-schema object by name.

    Raises:
        KeyError: If no object of that name exists for the partition.
    """
    for obj in latest_schema(internal):
        if obj.name == name:
            return obj
    raise KeyError(name)


def create_schema(conn: sqlite3.Connection, objects: Iterable[SchemaObject]) -> None:
    """Execute the CREATE statement of each object, in order.

    Raises:
        StructuralConflictError: If an object already exists in the database.
    """
    for obj in objects:
        try:
            conn.execute(obj.sql)
        except sqlite3.OperationalError as exc:
            if "already exists" in str(exc):
                raise StructuralConflictError(obj.name) from exc
            raise


def create_latest_schema(conn: sqlite3.Connection, internal: bool = False) -> None:
    """Build the complete latest schema on an empty database."""
    create_schema(conn, latest_schema(internal))
