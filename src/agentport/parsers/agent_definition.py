"""Parser for agent definition files.

An agent is a Markdown file that carries its definition as YAML, either
as front matter or as the first fenced ```yaml block::

    agent:
      id: dev
      name: James
      title: Full Stack Developer
    commands:
      - help: Show available commands
      - develop-story
    dependencies:
      tasks:
        - develop-story.md
      templates:
        - story-tmpl.yaml

Dependency groups are keyed by type name or type directory name
(``procedure`` and ``tasks`` are the same). Groups with an unknown key are
not resolved; their entries are kept in ``AgentDefinition.skipped`` so
the dependency report can surface them.

If the YAML carries no ``agent.id``, the file name stem is used.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from agentport.core.artifacts.types import ArtifactReference, ArtifactType
from agentport.exceptions import AgentDefinitionError, UnknownArtifactTypeError
from agentport.parsers.frontmatter import find_yaml_block


@dataclass
class AgentDefinition:
    """One parsed agent.

    Attributes:
        agent_id: Unique agent identifier; root of its dependency graph.
        name: Persona name, if declared.
        title: Persona title, if declared.
        path: The file the agent was read from.
        extension: Name of the extension scope the agent belongs to, or
            None for a base-framework agent.
        commands: Command names, in declaration order.
        dependencies: Declared artifact references, in declaration order.
        skipped: ``(type key, name)`` entries under unknown type keys.
    """

    agent_id: str
    name: str = ""
    title: str = ""
    path: Path | None = None
    extension: str | None = None
    commands: list[str] = field(default_factory=list)
    dependencies: list[ArtifactReference] = field(default_factory=list)
    skipped: list[tuple[str, str]] = field(default_factory=list)


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _command_names(raw: Any) -> list[str]:
    if isinstance(raw, dict):
        return [str(key) for key in raw]
    names: list[str] = []
    for entry in _as_list(raw):
        if isinstance(entry, dict):
            names.extend(str(key) for key in entry)
        elif isinstance(entry, str):
            names.append(entry.split(":", 1)[0].strip())
    return [n for n in names if n]


def _dependency_entries(
    raw: Any,
) -> tuple[list[ArtifactReference], list[tuple[str, str]]]:
    references: list[ArtifactReference] = []
    skipped: list[tuple[str, str]] = []
    if not isinstance(raw, dict):
        return references, skipped
    for type_key, names in raw.items():
        items = [str(n).strip() for n in _as_list(names) if n is not None and str(n).strip()]
        try:
            artifact_type = ArtifactType.parse(str(type_key))
        except UnknownArtifactTypeError:
            skipped.extend((str(type_key), item) for item in items)
            continue
        references.extend(ArtifactReference(artifact_type, item) for item in items)
    return references, skipped


def parse_agent_text(
    text: str,
    *,
    path: Path | None = None,
    extension: str | None = None,
) -> AgentDefinition:
    """Parse the text of an agent file.

    Raises:
        AgentDefinitionError: If the text has no YAML mapping, or neither
            an ``agent.id`` nor a path to derive the id from.
    """
    data = find_yaml_block(text)
    where = str(path) if path else "<text>"
    if data is None:
        raise AgentDefinitionError(f"No YAML definition block in {where}")

    agent = data.get("agent") if isinstance(data.get("agent"), dict) else {}
    agent_id = agent.get("id") or (path.stem if path else None)
    if not agent_id:
        raise AgentDefinitionError(f"Agent in {where} has no id")

    dependencies, skipped = _dependency_entries(data.get("dependencies"))
    return AgentDefinition(
        agent_id=str(agent_id),
        name=str(agent.get("name") or ""),
        title=str(agent.get("title") or ""),
        path=path,
        extension=extension,
        commands=_command_names(data.get("commands")),
        dependencies=dependencies,
        skipped=skipped,
    )


def parse_agent_file(path: Path, extension: str | None = None) -> AgentDefinition:
    """Read and parse the agent at *path*.

    Raises:
        AgentDefinitionError: If the file cannot be read or parsed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise AgentDefinitionError(f"Cannot read agent file {path}: {exc}") from exc
    return parse_agent_text(text, path=path, extension=extension)
