# ABOUTME: CLI package for Story Stalker, built on Click.
# ABOUTME: Defines the root command group, logging setup, and registers subcommands.

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from storystalker.cli.commands import (
    add_cmd,
    backup_cmd,
    info_cmd,
    ls_cmd,
    rm_cmd,
    update_cmd,
)


def _configure_logging(verbose: bool) -> None:
    """Send package logs to stderr through Rich; debug level when verbose."""
    package_logger = logging.getLogger("storystalker")
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        package_logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


@click.group()
@click.version_option(package_name="storystalker")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Story Stalker - track the books you want, are reading, and have finished."""
    _configure_logging(verbose)


cli.add_command(add_cmd.add)
cli.add_command(ls_cmd.ls)
cli.add_command(info_cmd.info)
cli.add_command(update_cmd.update)
cli.add_command(rm_cmd.rm)
cli.add_command(backup_cmd.export)
cli.add_command(backup_cmd.restore)
