"""``agentport validate <dir>`` -- Validate steering rule documents.

Exit Codes:
    0 -- Every rule document is valid (warnings allowed).
    1 -- One or more rule documents are invalid.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from agentport.cli.output import print_validation_report
from agentport.core.steering import validate_directory


@click.command("validate")
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
def validate_command(directory: str, output_format: str) -> None:
    """Validate the steering rule documents in DIRECTORY."""
    report = validate_directory(Path(directory))

    if output_format == "json":
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        print_validation_report(report)

    sys.exit(0 if report.valid else 1)
