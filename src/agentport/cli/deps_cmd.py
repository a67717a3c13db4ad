"""``agentport deps <root>`` -- Resolve every agent's artifact dependencies.

Discovers base-framework and extension agents under ROOT, resolves their
declared and implicit dependencies across scopes, and reports missing
artifacts with suggestions plus circular dependency warnings.

Exit Codes:
    0 -- Every agent's dependencies resolved.
    1 -- One or more dependencies are missing (or the filesystem failed).
    2 -- No agents found (or the configuration is invalid).
"""

from __future__ import annotations

import dataclasses
import json
import sys
from pathlib import Path

import click

from agentport.cli.common import resolve_config
from agentport.cli.output import print_dependency_reports
from agentport.core.artifacts import ArtifactResolver
from agentport.exceptions import ArtifactIOError
from agentport.parsers import discover_agents


@click.command("deps")
@click.argument("root", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--agent",
    "agent_ids",
    multiple=True,
    help="Only scan these agent ids (repeatable).",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Worker threads for parallel resolution (overrides configuration).",
)
@click.pass_context
def deps_command(
    ctx: click.Context,
    root: str,
    agent_ids: tuple[str, ...],
    output_format: str,
    workers: int | None,
) -> None:
    """Resolve agent artifact dependencies under ROOT."""
    target = Path(root)
    config = resolve_config(ctx, target)
    if workers is not None:
        config = dataclasses.replace(config, max_workers=workers)

    agents = discover_agents(target, config.layout)
    if agent_ids:
        agents = [a for a in agents if a.agent_id in agent_ids]

    if not agents:
        if output_format == "json":
            click.echo(json.dumps({"agents": [], "summary": "No agents found"}))
        else:
            click.echo("No agents found in the target directory.")
        sys.exit(2)

    resolver = ArtifactResolver(target, config)
    try:
        reports = [resolver.scan_dependencies(agent) for agent in agents]
    except ArtifactIOError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if output_format == "json":
        stats = resolver.get_cache_statistics()
        click.echo(json.dumps({
            "agents": [r.to_dict() for r in reports],
            "summary": {
                "agents": len(reports),
                "complete": sum(1 for r in reports if r.is_complete),
                "cache": dataclasses.asdict(stats),
            },
        }, indent=2))
    else:
        print_dependency_reports(reports)

    sys.exit(0 if all(r.is_complete for r in reports) else 1)
