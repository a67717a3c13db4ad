"""Data models for dependency resolution results.

These are pure data holders with no resolution logic, so that callers
(the conversion pipeline, the CLI formatters) can import them without
pulling in the resolver or touching the filesystem.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from agentport.core.artifacts.metadata import ArtifactMetadata
from agentport.core.artifacts.types import ArtifactType


class SuggestionKind(Enum):
    """How a suggestion proposes to fix a missing artifact."""

    SIMILAR_FILE = "similar-file"
    CREATE_NEW = "create-new"


@dataclass(frozen=True)
class Suggestion:
    """One ranked proposal for a missing artifact.

    Attributes:
        kind: Similar existing file, or create a new file.
        candidate_name: File name of the candidate (or of the file to create).
        candidate_dir: Directory the candidate lives in (or should be created in).
        confidence: Similarity in ``[0, 1]``; 0.0 for create-new.
    """

    kind: SuggestionKind
    candidate_name: str
    candidate_dir: Path
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "candidate_name": self.candidate_name,
            "candidate_dir": str(self.candidate_dir),
            "confidence": round(self.confidence, 4),
        }


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of resolving one artifact reference.

    Immutable once created; cached results are shared between callers.

    Attributes:
        type: The artifact type that was looked up.
        name: The name as requested.
        found: True if some candidate path existed.
        resolved_path: The first existing path in ``searched_paths``.
        raw_content: The artifact's text when found.
        metadata: Extracted metadata when found.
        searched_paths: Every path checked, in order, existing or not.
        suggestions: Ranked suggestions when not found.
    """

    type: ArtifactType
    name: str
    found: bool
    resolved_path: Path | None = None
    raw_content: str | None = None
    metadata: ArtifactMetadata | None = None
    searched_paths: tuple[Path, ...] = ()
    suggestions: tuple[Suggestion, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type.value,
            "name": self.name,
            "found": self.found,
            "resolved_path": str(self.resolved_path) if self.resolved_path else None,
            "searched_paths": [str(p) for p in self.searched_paths],
        }
        if self.metadata is not None:
            data["dependencies"] = list(self.metadata.dependencies)
            data["exports"] = list(self.metadata.exports)
        if self.suggestions:
            data["suggestions"] = [s.to_dict() for s in self.suggestions]
        return data


@dataclass(frozen=True)
class MissingDependency:
    """A reference that could not be resolved, with diagnostics."""

    name: str
    searched_paths: tuple[Path, ...]
    suggestions: tuple[Suggestion, ...]
    implicit: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "implicit": self.implicit,
            "searched_paths": [str(p) for p in self.searched_paths],
            "suggestions": [s.to_dict() for s in self.suggestions],
        }


@dataclass(frozen=True)
class CycleWarning:
    """A circular dependency chain, first node repeated at the end."""

    cycle: tuple[str, ...]

    def __str__(self) -> str:
        return " -> ".join(self.cycle)


@dataclass
class ResolutionReport:
    """Everything ``scan_dependencies`` learned about one agent.

    The report is always complete: nothing here is an exception, even
    when no dependency resolved at all.

    Attributes:
        agent_id: The agent the report is about.
        resolved: type -> name -> result, for references that resolved.
        missing: type -> missing dependencies with suggestions.
        cycles: Circular dependency chains (warnings, not errors).
        errors: Human-readable error lines (one per missing dependency).
        warnings: Human-readable warning lines (cycles, ambiguous
            references, skipped reference types).
        skipped: Declared references whose type is not recognized.
    """

    agent_id: str
    resolved: dict[ArtifactType, dict[str, ResolutionResult]] = field(default_factory=dict)
    missing: dict[ArtifactType, list[MissingDependency]] = field(default_factory=dict)
    cycles: list[CycleWarning] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    skipped: list[tuple[str, str]] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """True when no declared or implicit dependency is missing."""
        return not any(self.missing.values())

    def statistics(self) -> dict[str, int]:
        resolved = sum(len(v) for v in self.resolved.values())
        missing = sum(len(v) for v in self.missing.values())
        return {
            "total": resolved + missing,
            "resolved": resolved,
            "missing": missing,
            "cycles": len(self.cycles),
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        return {
            "agent_id": self.agent_id,
            "is_complete": self.is_complete,
            "statistics": self.statistics(),
            "resolved": {
                t.value: {name: r.to_dict() for name, r in by_name.items()}
                for t, by_name in self.resolved.items()
            },
            "missing": {
                t.value: [m.to_dict() for m in items]
                for t, items in self.missing.items()
            },
            "cycles": [list(c.cycle) for c in self.cycles],
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "skipped": [{"type": t, "name": n} for t, n in self.skipped],
        }


@dataclass(frozen=True)
class CacheStatistics:
    """Introspection counters of a resolver's cache."""

    size: int
    hits: int
    misses: int
    graph_size: int
