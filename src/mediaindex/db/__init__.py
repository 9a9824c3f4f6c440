# ABOUTME: Public API for the media index schema lifecycle layer.
# ABOUTME: Exports handle acquisition, the migration engine, schema definition and errors.

from mediaindex.db.connection import (
    DEFAULT_DB_DIR,
    EXTERNAL_DATABASE_NAME,
    INTERNAL_DATABASE_NAME,
    delete_database,
    open_database,
)
from mediaindex.db.engine import MigrationPlan, MigrationState, migrate, plan_migration
from mediaindex.db.errors import (
    BoundaryTransformError,
    MediaIndexError,
    PristineResetError,
    StructuralConflictError,
    UnreadableVersionError,
)
from mediaindex.db.hooks import LoggingHooks, MediaHooks, RecordingHooks
from mediaindex.db.pristine import make_pristine
from mediaindex.db.schema import (
    VERSION_LATEST,
    VERSION_LEGACY,
    MediaType,
    create_latest_schema,
    latest_schema,
)
from mediaindex.db.version import read_version, write_version

__all__ = [
    "DEFAULT_DB_DIR",
    "EXTERNAL_DATABASE_NAME",
    "INTERNAL_DATABASE_NAME",
    "VERSION_LATEST",
    "VERSION_LEGACY",
    "BoundaryTransformError",
    "LoggingHooks",
    "MediaHooks",
    "MediaIndexError",
    "MediaType",
    "MigrationPlan",
    "MigrationState",
    "PristineResetError",
    "RecordingHooks",
    "StructuralConflictError",
    "UnreadableVersionError",
    "create_latest_schema",
    "delete_database",
    "latest_schema",
    "make_pristine",
    "migrate",
    "open_database",
    "plan_migration",
    "read_version",
    "write_version",
]
