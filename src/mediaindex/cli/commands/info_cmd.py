# ABOUTME: The `mediaindex info` command for inspecting a database without migrating it.
# ABOUTME: Shows the stored version, the pending transition and schema object counts.

from collections import Counter
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from mediaindex.cli.options import db_option, internal_option, resolve_db_path
from mediaindex.db.connection import connect
from mediaindex.db.engine import plan_migration
from mediaindex.db.errors import UnreadableVersionError
from mediaindex.db.pristine import list_user_objects
from mediaindex.db.schema import VERSION_LATEST
from mediaindex.db.version import read_version

console = Console()


@click.command("info")
@db_option
@internal_option
def info(db_path: Path | None, internal: bool) -> None:
    """Show the schema version and structure of a database."""
    path = resolve_db_path(db_path, internal)
    if not path.exists():
        console.print(f"[red]No database at {path}.[/red]")
        raise SystemExit(1)

    conn = connect(path)
    try:
        try:
            stored = read_version(conn)
            marker = "none" if stored is None else str(stored)
        except UnreadableVersionError as exc:
            stored = None
            marker = f"unreadable ({exc.raw})"
        plan = plan_migration(stored, VERSION_LATEST)
        objects = list_user_objects(conn)
        counts = Counter(kind for kind, _ in objects)
        rows = None
        if ("table", "files") in objects:
            rows = conn.execute("SELECT COUNT(*) FROM files").fetchone()[0]
    finally:
        conn.close()

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")

    table.add_row("Path", str(path))
    table.add_row("Version", marker)
    table.add_row("Latest", str(VERSION_LATEST))
    table.add_row("State", plan.state.value)
    if plan.boundaries:
        table.add_row("Pending", ", ".join(str(v) for v in plan.boundaries))
    for kind in ("table", "index", "view", "trigger"):
        table.add_row(kind.capitalize() + "s", str(counts.get(kind, 0)))
    table.add_row("Files rows", "n/a" if rows is None else str(rows))

    console.print(table)
