"""CLI entry point for gql-usage."""

from __future__ import annotations

import logging

import click
from dotenv import load_dotenv
from rich.logging import RichHandler

from gql_usage.commands.collect.cmd import collect
from gql_usage.commands.report.cmd import report
from gql_usage.config import PACKAGE_VERSION
from gql_usage.helpers.console import console

load_dotenv()


@click.group()
@click.version_option(version=PACKAGE_VERSION, prog_name="gql-usage")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logs")
def cli(verbose: bool) -> None:
    """Track which parts of a GraphQL schema operations use."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


cli.add_command(collect)
cli.add_command(report)


if __name__ == "__main__":
    cli()
