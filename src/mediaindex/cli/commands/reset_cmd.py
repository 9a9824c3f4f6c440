# ABOUTME: The `mediaindex reset` command for discarding a database's contents.
# ABOUTME: Runs a pristine reset and rebuilds the latest schema in one transaction.

from pathlib import Path

import click
from rich.console import Console

from mediaindex.cli.options import db_option, internal_option, resolve_db_path
from mediaindex.db.connection import connect
from mediaindex.db.engine import transaction
from mediaindex.db.pristine import make_pristine
from mediaindex.db.schema import VERSION_LATEST, create_latest_schema
from mediaindex.db.version import write_version

console = Console()


@click.command("reset")
@db_option
@internal_option
@click.confirmation_option(prompt="This deletes every row in the index. Continue?")
def reset(db_path: Path | None, internal: bool) -> None:
    """Drop all schema objects and rebuild an empty latest schema."""
    conn = connect(resolve_db_path(db_path, internal))
    try:
        with transaction(conn):
            dropped = make_pristine(conn)
            create_latest_schema(conn, internal)
            write_version(conn, VERSION_LATEST)
    finally:
        conn.close()

    console.print(f"Dropped {dropped} object(s); rebuilt schema at version {VERSION_LATEST}.")
