# ABOUTME: CLI package for mediaindex, built on Click.
# ABOUTME: Defines the root command group, logging setup and registers subcommands.

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from mediaindex.cli.commands import (
    check_cmd,
    derive_cmd,
    info_cmd,
    migrate_cmd,
    reset_cmd,
    schema_cmd,
)


@click.group()
@click.version_option(package_name="mediaindex")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log schema changes to stderr.")
def cli(verbose: bool) -> None:
    """mediaindex - schema lifecycle manager for the media metadata index."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


cli.add_command(migrate_cmd.migrate_db)
cli.add_command(info_cmd.info)
cli.add_command(check_cmd.check)
cli.add_command(schema_cmd.schema)
cli.add_command(reset_cmd.reset)
cli.add_command(derive_cmd.derive)
