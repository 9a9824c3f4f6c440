# ABOUTME: The `mediaindex schema` command for listing the declarative schema.
# ABOUTME: Prints each object's kind and name, or the SQL that creates it.

import click
from rich.console import Console
from rich.table import Table

from mediaindex.cli.options import internal_option
from mediaindex.db.schema import VERSION_LATEST, latest_schema

console = Console()


@click.command("schema")
@internal_option
@click.option("--sql", "show_sql", is_flag=True, default=False, help="Print CREATE statements.")
def schema(internal: bool, show_sql: bool) -> None:
    """List the objects of the latest schema."""
    objects = latest_schema(internal)

    if show_sql:
        for obj in objects:
            click.echo(f"{obj.sql};")
        return

    table = Table(title=f"Schema version {VERSION_LATEST}")
    table.add_column("Kind", style="bold")
    table.add_column("Name")
    for obj in objects:
        table.add_row(obj.kind, obj.name)
    console.print(table)
