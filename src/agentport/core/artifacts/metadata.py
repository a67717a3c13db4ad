"""Metadata extraction for resolved artifacts.

Once an artifact file is found, three things are pulled out of it:

- **front matter**: the leading ``---`` YAML block, if any;
- **declared sub-dependencies**: names listed under the front matter's
  ``dependencies`` key, merged with inline reference markers found in the
  text;
- **exports**: what the artifact provides, by type (headings of a
  procedure, the ``name`` of a template, the items of a checklist).

Inline references are a best-effort heuristic. Four marker conventions are
recognized, one regex each::

    [[name]]      {{name}}      @include name      **name**

Every convention contributes its own names and the union is de-duplicated
by exact string match only. When two different spellings normalize to the
same artifact (``create-story`` vs ``create_story.md``) both are kept and
the pair is reported as ambiguous rather than silently merged.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import yaml

from agentport.core.artifacts.scopes import canonical_stem
from agentport.core.artifacts.types import ArtifactType
from agentport.parsers.frontmatter import split_front_matter

# ---------------------------------------------------------------------------
# Inline reference patterns, one per convention
# ---------------------------------------------------------------------------

_REFERENCE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\[\[([^\]]+)\]\]"),
    re.compile(r"\{\{([^}]+)\}\}"),
    re.compile(r"@include\s+(\S+)"),
    re.compile(r"\*\*([^*]+)\*\*"),
)

_HEADING_PATTERN = re.compile(r"^#+\s+(.+)$", re.MULTILINE)
_CHECKLIST_ITEM_PATTERN = re.compile(r"^\s*-\s+\[.\]\s+(.+)$", re.MULTILINE)


@dataclass(frozen=True)
class ArtifactMetadata:
    """Metadata extracted from one artifact file.

    Attributes:
        front_matter: Parsed front matter mapping, or None.
        dependencies: Declared sub-dependency names, front matter first,
            then inline references, exact duplicates removed.
        exports: Type-specific exported names.
        ambiguous_references: Pairs of distinct spellings that normalize
            to the same artifact stem.
        size: File size in bytes.
    """

    front_matter: dict[str, Any] | None = None
    dependencies: tuple[str, ...] = ()
    exports: tuple[str, ...] = ()
    ambiguous_references: tuple[tuple[str, str], ...] = ()
    size: int = 0


def extract_references(text: str) -> list[str]:
    """Return inline reference names found in *text*, in discovery order.

    Pure function. Names are stripped and de-duplicated by exact match.
    """
    found: list[str] = []
    for pattern in _REFERENCE_PATTERNS:
        for match in pattern.finditer(text):
            name = match.group(1).strip()
            if name and name not in found:
                found.append(name)
    return found


def _front_matter_dependencies(declared: Any) -> list[str]:
    names: list[str] = []
    if isinstance(declared, list):
        names.extend(str(item) for item in declared if item is not None)
    elif isinstance(declared, dict):
        for value in declared.values():
            if isinstance(value, list):
                names.extend(str(item) for item in value if item is not None)
            elif isinstance(value, str):
                names.append(value)
    elif isinstance(declared, str):
        names.append(declared)
    return names


def _normalized(name: str) -> str:
    return canonical_stem(name).lower().replace("_", "-")


def find_ambiguous(names: list[str]) -> list[tuple[str, str]]:
    """Return pairs of names that differ in spelling but not in identity."""
    first_by_key: dict[str, str] = {}
    pairs: list[tuple[str, str]] = []
    for name in names:
        key = _normalized(name)
        if key in first_by_key:
            pairs.append((first_by_key[key], name))
        else:
            first_by_key[key] = name
    return pairs


def extract_exports(text: str, artifact_type: ArtifactType) -> list[str]:
    """Return what an artifact exports, according to its type."""
    match artifact_type:
        case ArtifactType.PROCEDURE:
            return [m.group(1).strip() for m in _HEADING_PATTERN.finditer(text)]
        case ArtifactType.TEMPLATE:
            try:
                parsed = yaml.safe_load(text)
            except yaml.YAMLError:
                return []
            if not isinstance(parsed, dict):
                return []
            name = parsed.get("name")
            if name is None and isinstance(parsed.get("template"), dict):
                name = parsed["template"].get("name")
            return [str(name)] if name is not None else []
        case ArtifactType.CHECKLIST:
            return [m.group(1).strip() for m in _CHECKLIST_ITEM_PATTERN.finditer(text)]
        case ArtifactType.DATA_FILE | ArtifactType.UTILITY:
            return []


def extract_metadata(text: str, artifact_type: ArtifactType, size: int = 0) -> ArtifactMetadata:
    """Build the ``ArtifactMetadata`` of an artifact's raw text."""
    front = split_front_matter(text)

    dependencies: list[str] = []
    if front.data and "dependencies" in front.data:
        for name in _front_matter_dependencies(front.data["dependencies"]):
            if name not in dependencies:
                dependencies.append(name)
    for name in extract_references(front.body):
        if name not in dependencies:
            dependencies.append(name)

    export_source = text if artifact_type is ArtifactType.TEMPLATE else front.body
    return ArtifactMetadata(
        front_matter=front.data,
        dependencies=tuple(dependencies),
        exports=tuple(extract_exports(export_source, artifact_type)),
        ambiguous_references=tuple(find_ambiguous(dependencies)),
        size=size,
    )
