"""``agentport steering <dir> --agent ID`` -- Merge steering rules for one agent.

Loads every rule document in DIR, keeps the valid and applicable ones,
merges them by precedence and reports same-rank conflicts. With
``--guide OUT`` the combined conflict resolution guide is written into
the OUT directory.

Exit Codes:
    0 -- Rules merged without high-severity conflicts or invalid documents.
    1 -- A high-severity conflict was found or a document was excluded.
    2 -- The configuration is invalid.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from agentport.cli.common import resolve_config
from agentport.cli.output import print_steering_resolution
from agentport.core.steering import ProjectContext, SteeringResolver, write_guidance_document


@click.command("steering")
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--agent", "agent_id", required=True, help="Agent id to resolve rules for.")
@click.option("--file", "current_file", default=None, help="Current file, for fileMatch rules.")
@click.option("--project-type", default=None, help="Project type, for projectType rules.")
@click.option(
    "--include",
    "includes",
    multiple=True,
    help="Force a manual rule document in by file name (repeatable).",
)
@click.option(
    "--guide",
    "guide_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory to write CONFLICT_RESOLUTION_GUIDE.md into.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.pass_context
def steering_command(
    ctx: click.Context,
    directory: str,
    agent_id: str,
    current_file: str | None,
    project_type: str | None,
    includes: tuple[str, ...],
    guide_dir: str | None,
    output_format: str,
) -> None:
    """Merge the steering rules in DIRECTORY for one agent."""
    config = resolve_config(ctx, None)
    resolver = SteeringResolver(config)
    context = ProjectContext(
        current_file=current_file,
        project_type=project_type,
        manual_includes=frozenset(includes),
    )
    resolution = resolver.resolve_directory(Path(directory), agent_id, context)

    guide_path = None
    if guide_dir and resolution.guidance:
        out = Path(guide_dir)
        out.mkdir(parents=True, exist_ok=True)
        guide_path = write_guidance_document(out, agent_id, resolution.conflicts, resolver.table)

    if output_format == "json":
        data = resolution.to_dict()
        data["guide"] = str(guide_path) if guide_path else None
        click.echo(json.dumps(data, indent=2))
    else:
        print_steering_resolution(resolution)
        if guide_path:
            click.echo(f"Conflict resolution guide written to {guide_path}")

    failed = resolution.has_high_severity or bool(resolution.invalid_documents)
    sys.exit(1 if failed else 0)
