"""Discovery of agent definitions under a project root.

Base-framework agents live in ``<root>/<base_dir>/agents/*.md``; extension
agents in ``<root>/<extensions_dir>/<extension>/agents/*.md`` and are
tagged with their extension name. Files that fail to parse are logged and
skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path

from agentport.config import ScopeLayout
from agentport.exceptions import AgentDefinitionError
from agentport.parsers.agent_definition import AgentDefinition, parse_agent_file

logger = logging.getLogger(__name__)

AGENTS_DIR = "agents"


def _parse_dir(directory: Path, extension: str | None) -> list[AgentDefinition]:
    agents: list[AgentDefinition] = []
    if not directory.is_dir():
        return agents
    for path in sorted(directory.glob("*.md")):
        try:
            agents.append(parse_agent_file(path, extension))
        except AgentDefinitionError:
            logger.warning("Skipping agent file: %s", path, exc_info=True)
    return agents


def discover_agents(root: Path, layout: ScopeLayout | None = None) -> list[AgentDefinition]:
    """Return every agent under *root*: base-framework agents first, then
    extension agents grouped by extension name."""
    layout = layout or ScopeLayout()
    agents = _parse_dir(root / layout.base_dir / AGENTS_DIR, None)

    extensions_root = root / layout.extensions_dir
    if extensions_root.is_dir():
        for extension_dir in sorted(p for p in extensions_root.iterdir() if p.is_dir()):
            agents.extend(_parse_dir(extension_dir / AGENTS_DIR, extension_dir.name))

    logger.debug("Discovered %d agents under %s", len(agents), root)
    return agents
