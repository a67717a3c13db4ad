"""Data models for steering rule resolution.

Rule documents, effective rules, conflict records and validation reports.
They carry no merge or classification logic so that the CLI formatters and
the steering-file writer can import them on their own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, Union

# A section value: free text, or the items of a bullet list.
SectionValue = Union[str, tuple[str, ...]]


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class InclusionMode(Enum):
    """When a rule document takes part in an agent's merge."""

    ALWAYS = "always"
    CONDITIONAL = "conditional"
    MANUAL = "manual"

    @classmethod
    def parse(cls, value: str | None) -> InclusionMode | None:
        """Parse a front matter ``inclusion`` value.

        A missing value means ``ALWAYS``. ``fileMatch`` is accepted as the
        conventional spelling of ``CONDITIONAL``. Returns None for an
        unrecognized value.
        """
        if value is None:
            return cls.ALWAYS
        if value == "fileMatch":
            return cls.CONDITIONAL
        for member in cls:
            if member.value == value:
                return member
        return None


class PrecedenceClass(Enum):
    """Role of a rule document in the precedence ladder."""

    FRAMEWORK = "framework"
    GENERAL = "general"
    STRUCTURE = "structure"
    TECH = "tech"
    PRODUCT = "product"
    PROJECT = "project"
    AGENT = "agent"
    DIAGNOSTIC = "diagnostic"
    UNLISTED = "unlisted"


class ConflictSeverity(IntEnum):
    """How much a conflict matters. Integer order allows comparison."""

    NONE = 0
    MEDIUM = 1
    HIGH = 2

    @property
    def label(self) -> str:
        return self.name.lower()


class ConflictType(Enum):
    """Which kinds of documents collided."""

    FRAMEWORK_VS_PROJECT = "framework-vs-project"
    TECH_VS_PRODUCT = "tech-vs-product"
    GENERAL_VS_SPECIFIC = "general-vs-specific"
    MULTIPLE_SOURCES = "multiple-sources"


class ResolutionStrategy(Enum):
    """How the value kept for a key was chosen."""

    FIRST_SEEN = "first-seen"
    PROJECT_OVERRIDE = "project-override"


class SteeringState(Enum):
    """States of one agent's merge pass."""

    UNPROCESSED = "unprocessed"
    LOADING = "loading"
    MERGING = "merging"
    CONFLICT_DETECTED = "conflict-detected"
    RESOLVED = "resolved"


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RuleDocument:
    """One parsed steering rule document.

    Attributes:
        source_name: File name used for precedence lookup (e.g. ``tech.md``).
        inclusion: The raw ``inclusion`` front matter value, or None.
        file_match_pattern: Glob matched against the current file path.
        agent_filter: Glob matched against the agent id.
        project_type: Project type the document applies to.
        sections: Section key -> value, in document order.
        path: Where the document was loaded from, if anywhere.
        front_matter_present: Whether a ``---`` block was found.
        parse_error: Why the front matter could not be parsed, if it could not.
        body: The text after the front matter.
    """

    source_name: str
    inclusion: str | None = None
    file_match_pattern: str | None = None
    agent_filter: str | None = None
    project_type: str | None = None
    sections: dict[str, SectionValue] = field(default_factory=dict)
    path: Path | None = None
    front_matter_present: bool = False
    parse_error: str | None = None
    body: str = ""

    @property
    def mode(self) -> InclusionMode | None:
        """The parsed inclusion mode, None when the value is not recognized."""
        return InclusionMode.parse(self.inclusion)

    @property
    def has_predicate(self) -> bool:
        return any((self.file_match_pattern, self.agent_filter, self.project_type))


@dataclass(frozen=True)
class ProjectContext:
    """What is known about the project when rules are selected.

    Attributes:
        current_file: Path of the file being worked on, for file-pattern
            predicates.
        project_type: Project type, for project-type predicates.
        manual_includes: Source names of manual documents forced in.
    """

    current_file: str | None = None
    project_type: str | None = None
    manual_includes: frozenset[str] = frozenset()


# ---------------------------------------------------------------------------
# Merge results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ContributingSource:
    """One document's value for a key."""

    source: str
    value: Any
    rank: int
    precedence_class: PrecedenceClass = PrecedenceClass.UNLISTED

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "value": _jsonable(self.value),
            "rank": self.rank,
            "class": self.precedence_class.value,
        }


@dataclass(frozen=True)
class EffectiveRule:
    """The winning value of one key."""

    value: Any
    winning_source: str
    rank: int
    inclusion_mode: InclusionMode

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": _jsonable(self.value),
            "winning_source": self.winning_source,
            "rank": self.rank,
            "inclusion_mode": self.inclusion_mode.value,
        }


@dataclass(frozen=True)
class ResolutionDecision:
    """Which value a conflict settled on, and why."""

    strategy: ResolutionStrategy
    chosen_source: str
    chosen_value: Any
    reason: str
    requires_review: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "strategy": self.strategy.value,
            "chosen_source": self.chosen_source,
            "chosen_value": _jsonable(self.chosen_value),
            "reason": self.reason,
            "requires_review": self.requires_review,
        }


@dataclass
class ConflictRecord:
    """Two or more equal-rank documents defining one key differently.

    Attributes:
        section_key: The contested key.
        agent_id: The agent whose merge produced the record.
        contributing_sources: Every equal-rank contributor, in merge order.
        severity: Computed by classification.
        conflict_type: Computed by classification.
        decision: The value the contributors settled on.
        overridden_by: Higher-ranked source that later set the key, if any.
            The decision then no longer decides the effective value.
    """

    section_key: str
    agent_id: str
    contributing_sources: list[ContributingSource]
    severity: ConflictSeverity
    conflict_type: ConflictType
    decision: ResolutionDecision
    overridden_by: str | None = None

    @property
    def is_actionable(self) -> bool:
        """False for conflicts whose values only differ cosmetically."""
        return self.severity is not ConflictSeverity.NONE

    @property
    def sources(self) -> list[str]:
        return [c.source for c in self.contributing_sources]

    def to_dict(self) -> dict[str, Any]:
        return {
            "section_key": self.section_key,
            "agent_id": self.agent_id,
            "contributing_sources": [c.to_dict() for c in self.contributing_sources],
            "severity": self.severity.label,
            "conflict_type": self.conflict_type.value,
            "decision": self.decision.to_dict(),
            "overridden_by": self.overridden_by,
        }


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class FileValidation:
    """Validation outcome of one rule document."""

    source_name: str
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


@dataclass
class ValidationReport:
    """Validation outcome of a set of rule documents.

    ``files`` holds one entry per document. Entries are keyed by source
    name; a later document with an already reported name is keyed by its
    path instead (or ``name#n`` when it has none), so no outcome is lost.
    """

    files: dict[str, FileValidation] = field(default_factory=dict)

    def add(self, outcome: FileValidation, path: Path | None = None) -> str:
        """Record *outcome* under a key unique in this report and return it."""
        key = outcome.source_name
        if key in self.files and path is not None:
            key = str(path)
        counter = 2
        while key in self.files:
            key = f"{outcome.source_name}#{counter}"
            counter += 1
        self.files[key] = outcome
        return key

    @property
    def valid(self) -> bool:
        return all(f.valid for f in self.files.values())

    @property
    def error_count(self) -> int:
        return sum(len(f.errors) for f in self.files.values())

    @property
    def warning_count(self) -> int:
        return sum(len(f.warnings) for f in self.files.values())

    @property
    def invalid_sources(self) -> list[str]:
        return [name for name, f in self.files.items() if not f.valid]

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "files": {
                name: {"valid": f.valid, "errors": f.errors, "warnings": f.warnings}
                for name, f in self.files.items()
            },
        }


# ---------------------------------------------------------------------------
# Orchestration result
# ---------------------------------------------------------------------------


@dataclass
class SteeringResolution:
    """Everything one agent's steering resolution produced.

    Attributes:
        agent_id: The agent resolved for.
        state: Final state (``RESOLVED`` or ``CONFLICT_DETECTED``).
        history: Every state passed through, in order.
        effective: Key -> winning rule.
        conflicts: Conflict records, including cosmetic (severity none) ones.
        invalid_documents: Source names excluded by validation.
        applicable_documents: Source names that took part in the merge.
        validation: The validation report of all given documents.
        guidance: The combined guidance document (empty when there is
            nothing actionable).
    """

    agent_id: str
    state: SteeringState
    history: list[SteeringState] = field(default_factory=list)
    effective: dict[str, EffectiveRule] = field(default_factory=dict)
    conflicts: list[ConflictRecord] = field(default_factory=list)
    invalid_documents: list[str] = field(default_factory=list)
    applicable_documents: list[str] = field(default_factory=list)
    validation: ValidationReport | None = None
    guidance: str = ""

    @property
    def actionable_conflicts(self) -> list[ConflictRecord]:
        return [c for c in self.conflicts if c.is_actionable]

    @property
    def has_high_severity(self) -> bool:
        return any(c.severity is ConflictSeverity.HIGH for c in self.conflicts)

    def values(self) -> dict[str, Any]:
        """Return the plain key -> value map."""
        return {key: rule.value for key, rule in self.effective.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "state": self.state.value,
            "history": [s.value for s in self.history],
            "effective": {k: r.to_dict() for k, r in self.effective.items()},
            "conflicts": [c.to_dict() for c in self.conflicts],
            "actionable_conflicts": len(self.actionable_conflicts),
            "invalid_documents": list(self.invalid_documents),
            "applicable_documents": list(self.applicable_documents),
            "validation": self.validation.to_dict() if self.validation else None,
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    return value
