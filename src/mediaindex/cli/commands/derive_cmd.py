# ABOUTME: The `mediaindex derive` command for previewing path-derived attributes.
# ABOUTME: Shows the owner, volume, relative path and download flag computed for each path.

import click
from rich.console import Console
from rich.table import Table

from mediaindex.core.paths import derive_path_attributes

console = Console()


@click.command("derive")
@click.argument("paths", nargs=-1, required=True)
def derive(paths: tuple[str, ...]) -> None:
    """Show the attributes derived from stored file paths."""
    for path in paths:
        attrs = derive_path_attributes(path)

        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("Field", style="bold", width=14)
        table.add_column("Value")

        table.add_row("Path", path)
        table.add_row("Owner", attrs.owner_package_name or "none")
        table.add_row("Volume", attrs.volume_name)
        table.add_row("Relative Path", attrs.relative_path or "none")
        table.add_row("Download", "yes" if attrs.is_download else "no")

        console.print(table)
