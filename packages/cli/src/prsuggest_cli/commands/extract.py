"""extract command: show the change records a diff produces, offline."""

from __future__ import annotations

import json

import click

from prsuggest_core.diff.parser import parse_diff
from prsuggest_core.diff.positions import extract_change_records
from prsuggest_core.exceptions import DiffParseError
from prsuggest_core.utils.globs import filter_ignored, parse_patterns


@click.command("extract")
@click.argument("diff_file", type=click.File("r"))
@click.option(
    "--files-to-ignore",
    default=None,
    help="Comma-separated glob patterns of paths to leave out.",
)
def extract_cmd(diff_file, files_to_ignore: str | None):
    """Print the change records of DIFF_FILE as JSON (use - for stdin)."""
    try:
        parsed = parse_diff(diff_file.read())
    except DiffParseError as e:
        raise click.ClickException(str(e))

    records = filter_ignored(extract_change_records(parsed), parse_patterns(files_to_ignore))
    click.echo(json.dumps([r.to_dict() for r in records], indent=2))
