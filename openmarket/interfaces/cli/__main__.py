"""Entry point for running the OpenMarket CLI.

This module defines a top-level Click group that aggregates all subcommands
defined in the ``openmarket.interfaces.cli`` package. Executing
``python -m openmarket.interfaces.cli`` will invoke this group and present the
available commands.
"""

import logging

import click

from openmarket.infrastructure.observability import configure_logging

from .browse import browse
from .detail import detail


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """OpenMarket command-line interface."""
    configure_logging(level=logging.DEBUG if verbose else logging.WARNING)


cli.add_command(browse)
cli.add_command(detail)


if __name__ == "__main__":
    cli()
