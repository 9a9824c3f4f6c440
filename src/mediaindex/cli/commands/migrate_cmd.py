# ABOUTME: The `mediaindex migrate` command for opening a database at a target version.
# ABOUTME: Reports whether the database was created, upgraded, downgraded or left alone.

from pathlib import Path

import click
from rich.console import Console

from mediaindex.cli.options import db_option, internal_option, resolve_db_path
from mediaindex.db.connection import connect
from mediaindex.db.engine import MigrationState, migrate
from mediaindex.db.errors import BoundaryTransformError
from mediaindex.db.migrations import MigrationOptions
from mediaindex.db.schema import VERSION_LATEST

console = Console()

_MESSAGES = {
    MigrationState.UNINITIALIZED: "[green]Created schema at version {target}.[/green]",
    MigrationState.UNSUPPORTED: (
        "[yellow]Version {stored} is too old to upgrade; rebuilt at {target}.[/yellow]"
    ),
    MigrationState.STALE: "[green]Upgraded from version {stored} to {target}.[/green]",
    MigrationState.AHEAD: (
        "[yellow]Downgraded from version {stored} to {target}; all rows discarded.[/yellow]"
    ),
    MigrationState.CURRENT: "Already at version {target}.",
}


@click.command("migrate")
@db_option
@internal_option
@click.option(
    "--target",
    type=click.IntRange(min=1),
    default=VERSION_LATEST,
    show_default=True,
    help="Schema version to migrate to.",
)
def migrate_db(db_path: Path | None, internal: bool, target: int) -> None:
    """Create or migrate a database to the target schema version."""
    conn = connect(resolve_db_path(db_path, internal))
    try:
        plan = migrate(conn, target, MigrationOptions(internal=internal))
    except BoundaryTransformError as exc:
        console.print(f"[red]{exc}: {exc.__cause__}[/red]")
        raise SystemExit(1) from exc
    finally:
        conn.close()

    console.print(_MESSAGES[plan.state].format(stored=plan.stored, target=plan.target))
    if plan.boundaries:
        console.print(f"  Boundaries applied: {', '.join(str(v) for v in plan.boundaries)}")
