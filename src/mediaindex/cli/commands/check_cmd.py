# ABOUTME: The `mediaindex check` command for detecting schema drift.
# ABOUTME: Compares a database's structure against a freshly built latest schema.

import sqlite3
from pathlib import Path

import click
from rich.console import Console

from mediaindex.cli.options import db_option, internal_option, resolve_db_path
from mediaindex.db.connection import connect
from mediaindex.db.introspect import describe_schema, diff_schemas
from mediaindex.db.schema import create_latest_schema

console = Console()


def _reference_snapshot(internal: bool):
    reference = sqlite3.connect(":memory:")
    try:
        create_latest_schema(reference, internal)
        return describe_schema(reference)
    finally:
        reference.close()


@click.command("check")
@db_option
@internal_option
def check(db_path: Path | None, internal: bool) -> None:
    """Verify that a database matches the latest schema exactly."""
    path = resolve_db_path(db_path, internal)
    if not path.exists():
        console.print(f"[red]No database at {path}.[/red]")
        raise SystemExit(1)

    conn = connect(path)
    try:
        actual = describe_schema(conn)
    finally:
        conn.close()

    problems = diff_schemas(_reference_snapshot(internal), actual)
    if not problems:
        console.print(
            f"[green]Schema matches the latest definition ({len(actual)} objects).[/green]"
        )
        return

    console.print(f"[red]{len(problems)} schema difference(s):[/red]")
    for problem in problems:
        console.print(f"  {problem}")
    raise SystemExit(1)
