"""CLI entry point for prsuggest.

Commands:
  review   — generate suggestions for a pull request and post them as one review
  extract  — print the commentable change records of a local diff file
"""

from __future__ import annotations

import importlib.metadata
import logging

import click

from prsuggest_cli.commands.extract import extract_cmd
from prsuggest_cli.commands.review import review_cmd


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("prsuggest"),
    prog_name="prsuggest",
)
@click.option(
    "--config",
    "config_path",
    default=".prsuggest.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRSUGGEST_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """AI-generated inline suggestions for GitHub pull requests."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(review_cmd)
main.add_command(extract_cmd)
