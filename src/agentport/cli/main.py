"""agentport CLI -- Inspect agent dependency and steering rule resolution.

Entry point for the ``agentport`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    deps      -- Resolve every agent's artifact dependencies.
    steering  -- Merge steering rules for one agent and report conflicts.
    validate  -- Validate steering rule documents.

Usage::

    agentport deps ./project
    agentport deps ./project --agent dev --format json
    agentport steering ./project/.kiro/steering --agent dev --guide ./out
    agentport validate ./project/.kiro/steering
    agentport --config agentport.yaml --verbose deps ./project
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from agentport import __version__
from agentport.cli.deps_cmd import deps_command
from agentport.cli.steering_cmd import steering_command
from agentport.cli.validate_cmd import validate_command


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Configuration file (default: agentport.yaml in the target root).",
)
@click.option("--verbose", is_flag=True, help="Log resolution details to stderr.")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """agentport: dependency and steering rule resolution for agent conversion.

    Resolves the artifacts agents depend on across framework, shared and
    extension scopes, and merges layered steering rules into one
    effective rule set per agent.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    _configure_logging(verbose)


# Register all subcommands
cli.add_command(deps_command)
cli.add_command(steering_command)
cli.add_command(validate_command)
