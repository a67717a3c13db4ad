"""Artifact types and references.

An agent names its auxiliary files by ``(type, name)`` pairs. The type
decides two things: the subdirectory searched inside every scope root and
the canonical file extension the name is normalized to.

The mapping is a closed enumeration rather than a free-form string table,
so an unknown type is rejected up front instead of silently defaulting.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from agentport.exceptions import UnknownArtifactTypeError


class ArtifactType(Enum):
    """Recognized artifact types.

    Values are the public type names. Each member carries the scope
    subdirectory it lives in and its canonical extension.
    """

    PROCEDURE = "procedure"
    TEMPLATE = "template"
    CHECKLIST = "checklist"
    DATA_FILE = "data-file"
    UTILITY = "utility"

    @property
    def directory(self) -> str:
        """Subdirectory name of this type inside a scope root."""
        match self:
            case ArtifactType.PROCEDURE:
                return "tasks"
            case ArtifactType.TEMPLATE:
                return "templates"
            case ArtifactType.CHECKLIST:
                return "checklists"
            case ArtifactType.DATA_FILE:
                return "data"
            case ArtifactType.UTILITY:
                return "utils"

    @property
    def extension(self) -> str:
        """Canonical file extension, including the leading dot."""
        match self:
            case ArtifactType.TEMPLATE:
                return ".yaml"
            case ArtifactType.PROCEDURE | ArtifactType.CHECKLIST:
                return ".md"
            case ArtifactType.DATA_FILE | ArtifactType.UTILITY:
                return ".md"

    @classmethod
    def parse(cls, value: str | ArtifactType) -> ArtifactType:
        """Parse a type name or a scope directory name.

        Both ``"procedure"`` and ``"tasks"`` map to ``PROCEDURE``.

        Raises:
            UnknownArtifactTypeError: If *value* names no known type.
        """
        if isinstance(value, ArtifactType):
            return value
        key = value.strip().lower()
        for member in cls:
            if key in (member.value, member.directory):
                return member
        raise UnknownArtifactTypeError(f"Unknown artifact type: {value!r}")

    @classmethod
    def from_extension(cls, extension: str) -> ArtifactType | None:
        """Return the only type using *extension*, or None when ambiguous."""
        matches = [m for m in cls if m.extension == extension.lower()]
        return matches[0] if len(matches) == 1 else None


@dataclass(frozen=True)
class ArtifactReference:
    """A ``(type, name)`` dependency declared by an agent.

    Attributes:
        type: The artifact type.
        name: The name as written by the agent author (may or may not
            carry an extension).
    """

    type: ArtifactType
    name: str

    def __str__(self) -> str:
        return f"{self.type.value}:{self.name}"
