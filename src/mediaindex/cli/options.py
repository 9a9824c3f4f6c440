# ABOUTME: Shared Click options for mediaindex CLI commands.
# ABOUTME: Provides reusable decorators for --db and --internal and resolves the database path.

from pathlib import Path

import click

from mediaindex.db.connection import DEFAULT_DB_DIR, EXTERNAL_DATABASE_NAME, INTERNAL_DATABASE_NAME

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path),
    default=None,
    help=f"Path to the database (default: {DEFAULT_DB_DIR / EXTERNAL_DATABASE_NAME}).",
)

internal_option = click.option(
    "--internal",
    is_flag=True,
    default=False,
    help="Use the internal storage partition schema (no playlists or genres).",
)


def resolve_db_path(db_path: Path | None, internal: bool = False) -> Path:
    """Pick the explicit --db path, or the default database for the partition."""
    if db_path is not None:
        return db_path
    return DEFAULT_DB_DIR / (INTERNAL_DATABASE_NAME if internal else EXTERNAL_DATABASE_NAME)
