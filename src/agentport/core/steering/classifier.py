"""Severity and type classification of rule conflicts.

Severity:

- ``none`` when all contributed values are equal after normalization
  (case and whitespace are ignored);
- ``high`` when the key is structurally sensitive (code style,
  architecture and similar) and the values differ;
- ``medium`` otherwise.

Sensitive keys are compared after lower-casing and dropping every
non-alphanumeric character, so ``codeStyle``, ``code_style`` and
``Code Style`` all name the same key.

Conflict type is decided by the precedence classes of the two highest
contributing sources.
"""

from __future__ import annotations

import re
from typing import Any

from agentport.core.steering.models import (
    ConflictRecord,
    ConflictSeverity,
    ConflictType,
    ContributingSource,
    PrecedenceClass,
    ResolutionDecision,
    ResolutionStrategy,
)

DEFAULT_SENSITIVE_KEYS: tuple[str, ...] = (
    "code_style",
    "indentation",
    "naming_conventions",
    "architecture_patterns",
    "security_practices",
)

_SPECIFIC_CLASSES = {
    PrecedenceClass.STRUCTURE,
    PrecedenceClass.TECH,
    PrecedenceClass.PRODUCT,
    PrecedenceClass.PROJECT,
    PrecedenceClass.AGENT,
}


def normalize_key(key: str) -> str:
    return re.sub(r"[^a-z0-9]", "", key.lower())


def normalize_value(value: Any) -> Any:
    """Case- and whitespace-insensitive form of a section value."""
    if isinstance(value, (tuple, list)):
        return tuple(normalize_value(item) for item in value)
    if isinstance(value, str):
        return " ".join(value.split()).lower()
    return value


class ConflictClassifier:
    """Computes severity, type and the resolution decision of conflicts.

    Args:
        sensitive_keys: Extra structurally sensitive keys, added to
            ``DEFAULT_SENSITIVE_KEYS``.
    """

    def __init__(self, sensitive_keys: tuple[str, ...] | list[str] = ()) -> None:
        self._sensitive = {normalize_key(k) for k in (*DEFAULT_SENSITIVE_KEYS, *sensitive_keys)}

    def is_sensitive(self, key: str) -> bool:
        return normalize_key(key) in self._sensitive

    def severity(self, key: str, sources: list[ContributingSource]) -> ConflictSeverity:
        distinct = {repr(normalize_value(s.value)) for s in sources}
        if len(distinct) <= 1:
            return ConflictSeverity.NONE
        if self.is_sensitive(key):
            return ConflictSeverity.HIGH
        return ConflictSeverity.MEDIUM

    def conflict_type(self, sources: list[ContributingSource]) -> ConflictType:
        top = sorted(sources, key=lambda s: -s.rank)[:2]
        classes = {s.precedence_class for s in top}
        framework = PrecedenceClass.FRAMEWORK
        if framework in classes and len(classes) > 1:
            return ConflictType.FRAMEWORK_VS_PROJECT
        if classes == {PrecedenceClass.TECH, PrecedenceClass.PRODUCT}:
            return ConflictType.TECH_VS_PRODUCT
        if PrecedenceClass.GENERAL in classes and classes & _SPECIFIC_CLASSES:
            return ConflictType.GENERAL_VS_SPECIFIC
        return ConflictType.MULTIPLE_SOURCES

    def classify(
        self, key: str, sources: list[ContributingSource]
    ) -> tuple[ConflictSeverity, ConflictType]:
        """Return ``(severity, conflict type)`` for contributors of *key*."""
        return self.severity(key, sources), self.conflict_type(sources)

    def decide(self, record: ConflictRecord) -> ResolutionDecision:
        """Choose the value a conflict settles on.

        Framework-vs-project collisions adopt the first non-framework
        value. Everything else keeps the first value seen.
        """
        review = record.severity is ConflictSeverity.HIGH
        if record.conflict_type is ConflictType.FRAMEWORK_VS_PROJECT:
            chosen = next(
                s
                for s in record.contributing_sources
                if s.precedence_class is not PrecedenceClass.FRAMEWORK
            )
            return ResolutionDecision(
                strategy=ResolutionStrategy.PROJECT_OVERRIDE,
                chosen_source=chosen.source,
                chosen_value=chosen.value,
                reason="Project-specific rules override framework defaults",
                requires_review=review,
            )
        return first_seen_decision(record.contributing_sources, requires_review=review)


def first_seen_decision(
    sources: list[ContributingSource], *, requires_review: bool = False
) -> ResolutionDecision:
    first = sources[0]
    return ResolutionDecision(
        strategy=ResolutionStrategy.FIRST_SEEN,
        chosen_source=first.source,
        chosen_value=first.value,
        reason=f"Equal precedence ({first.rank}); kept the value of {first.source}, seen first",
        requires_review=requires_review,
    )
