"""Parsers for agent definitions and Markdown front matter."""

from agentport.parsers.frontmatter import FrontMatter, find_yaml_block, split_front_matter
from agentport.parsers.agent_definition import (
    AgentDefinition,
    parse_agent_file,
    parse_agent_text,
)
from agentport.parsers.discovery import discover_agents

__all__ = [
    "AgentDefinition",
    "FrontMatter",
    "discover_agents",
    "find_yaml_block",
    "parse_agent_file",
    "parse_agent_text",
    "split_front_matter",
]
