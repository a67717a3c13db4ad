"""Helpers shared by the agentport subcommands."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from agentport.config import AgentPortConfig, load_config
from agentport.exceptions import ConfigError


def resolve_config(ctx: click.Context, root: Path | None) -> AgentPortConfig:
    """Load the configuration for a command run against *root*.

    An explicit ``--config`` wins; otherwise ``agentport.yaml`` is looked
    up in *root* (when given). An invalid configuration exits with code 2.
    """
    explicit = (ctx.obj or {}).get("config_path")
    try:
        return load_config(Path(explicit) if explicit else None, root=root)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)
