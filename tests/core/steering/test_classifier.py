"""Tests for conflict severity, type and decisions."""

from __future__ import annotations

import pytest

from agentport.core.steering.classifier import (
    ConflictClassifier,
    normalize_key,
    normalize_value,
)
from agentport.core.steering.models import (
    ConflictRecord,
    ConflictSeverity,
    ConflictType,
    ContributingSource,
    PrecedenceClass,
    ResolutionStrategy,
)


def _source(name: str, value: object, cls: PrecedenceClass, rank: int = 3) -> ContributingSource:
    return ContributingSource(name, value, rank, cls)


class TestNormalization:
    """Tests for key and value normalization."""

    @pytest.mark.parametrize("key", ["codeStyle", "code_style", "Code Style", "CODE-STYLE"])
    def test_key_spellings(self, key: str) -> None:
        assert normalize_key(key) == "codestyle"

    def test_value_whitespace_and_case(self) -> None:
        assert normalize_value("  Four   Spaces ") == "four spaces"
        assert normalize_value(("A ", "b")) == ("a", "b")


class TestSeverity:
    """Tests for the severity rule."""

    def test_sensitive_key(self) -> None:
        classifier = ConflictClassifier()
        sources = [
            _source("a.md", "x", PrecedenceClass.UNLISTED),
            _source("b.md", "y", PrecedenceClass.UNLISTED),
        ]
        assert classifier.severity("Naming Conventions", sources) is ConflictSeverity.HIGH

    def test_configured_sensitive_key(self) -> None:
        classifier = ConflictClassifier(["error_handling"])
        assert classifier.is_sensitive("errorHandling")
        assert not ConflictClassifier().is_sensitive("errorHandling")

    def test_ordinary_key(self) -> None:
        sources = [
            _source("a.md", "x", PrecedenceClass.UNLISTED),
            _source("b.md", "y", PrecedenceClass.UNLISTED),
        ]
        assert ConflictClassifier().severity("testing", sources) is ConflictSeverity.MEDIUM

    def test_cosmetic_difference(self) -> None:
        sources = [
            _source("a.md", "X", PrecedenceClass.UNLISTED),
            _source("b.md", " x ", PrecedenceClass.UNLISTED),
        ]
        assert ConflictClassifier().severity("code_style", sources) is ConflictSeverity.NONE

    def test_severities_are_ordered(self) -> None:
        assert ConflictSeverity.NONE < ConflictSeverity.MEDIUM < ConflictSeverity.HIGH


class TestConflictType:
    """Tests for conflict type classification."""

    @pytest.mark.parametrize(
        ("classes", "expected"),
        [
            ((PrecedenceClass.FRAMEWORK, PrecedenceClass.PROJECT), ConflictType.FRAMEWORK_VS_PROJECT),
            ((PrecedenceClass.TECH, PrecedenceClass.PRODUCT), ConflictType.TECH_VS_PRODUCT),
            ((PrecedenceClass.GENERAL, PrecedenceClass.STRUCTURE), ConflictType.GENERAL_VS_SPECIFIC),
            ((PrecedenceClass.UNLISTED, PrecedenceClass.UNLISTED), ConflictType.MULTIPLE_SOURCES),
            ((PrecedenceClass.FRAMEWORK, PrecedenceClass.FRAMEWORK), ConflictType.MULTIPLE_SOURCES),
        ],
    )
    def test_type(self, classes: tuple[PrecedenceClass, PrecedenceClass], expected: ConflictType) -> None:
        sources = [_source(f"{i}.md", str(i), cls) for i, cls in enumerate(classes)]
        assert ConflictClassifier().conflict_type(sources) is expected


class TestDecide:
    """Tests for resolution decisions."""

    def _record(self, first: PrecedenceClass, second: PrecedenceClass, key: str = "testing") -> ConflictRecord:
        classifier = ConflictClassifier()
        sources = [_source("first.md", "one", first), _source("second.md", "two", second)]
        severity, conflict_type = classifier.classify(key, sources)
        return ConflictRecord(
            section_key=key,
            agent_id="dev",
            contributing_sources=sources,
            severity=severity,
            conflict_type=conflict_type,
            decision=None,  # type: ignore[arg-type]
        )

    def test_project_override(self) -> None:
        record = self._record(PrecedenceClass.FRAMEWORK, PrecedenceClass.PROJECT)
        decision = ConflictClassifier().decide(record)
        assert decision.strategy is ResolutionStrategy.PROJECT_OVERRIDE
        assert decision.chosen_source == "second.md"
        assert decision.chosen_value == "two"

    def test_first_seen(self) -> None:
        record = self._record(PrecedenceClass.UNLISTED, PrecedenceClass.UNLISTED)
        decision = ConflictClassifier().decide(record)
        assert decision.strategy is ResolutionStrategy.FIRST_SEEN
        assert decision.chosen_source == "first.md"
        assert "seen first" in decision.reason
        assert not decision.requires_review

    def test_high_severity_requires_review(self) -> None:
        record = self._record(PrecedenceClass.UNLISTED, PrecedenceClass.UNLISTED, key="indentation")
        assert ConflictClassifier().decide(record).requires_review
