# ABOUTME: Shared pytest fixtures for mediaindex tests.
# ABOUTME: Provides temporary database paths, recording hooks and a legacy-version database.

from pathlib import Path

import pytest

from mediaindex.db.connection import open_database
from mediaindex.db.hooks import RecordingHooks
from mediaindex.db.schema import VERSION_LEGACY
from tests.fixtures.legacy_schema import create_legacy_schema


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def hooks() -> RecordingHooks:
    """Hooks that remember every trigger notification."""
    return RecordingHooks()


@pytest.fixture
def legacy_db(db_path: Path) -> Path:
    """Create an empty database at the oldest upgradable version and return its path."""
    conn = open_database(db_path, VERSION_LEGACY, on_create=create_legacy_schema)
    conn.close()
    return db_path
