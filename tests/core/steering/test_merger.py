"""Tests for the precedence merge and conflict detection."""

from __future__ import annotations

from agentport.core.steering.merger import merge
from agentport.core.steering.models import (
    ConflictSeverity,
    ConflictType,
    InclusionMode,
    ResolutionStrategy,
    RuleDocument,
)
from agentport.core.steering.precedence import PrecedenceTable


def _doc(source: str, inclusion: str | None = "always", **sections: object) -> RuleDocument:
    return RuleDocument(source, inclusion=inclusion, sections=dict(sections))


class TestPrecedenceMerge:
    """Tests for rank-ordered folding."""

    def test_highest_rank_wins_without_conflict(self) -> None:
        table = PrecedenceTable({"base.md": (1, "framework"), "project.md": (6, "project")})
        docs = [
            _doc("base.md", codeStyle="4 spaces"),
            _doc("tech.md", codeStyle="2 spaces"),
            _doc("project.md", codeStyle="tabs"),
        ]
        result = merge(docs, "dev", table=table)
        rule = result.effective["codeStyle"]
        assert rule.value == "tabs"
        assert rule.winning_source == "project.md"
        assert rule.rank == 6
        assert result.conflicts == []

    def test_input_order_does_not_matter(self) -> None:
        docs = [_doc("project-specific.md", a="p"), _doc("bmad-method.md", a="b", b="only")]
        result = merge(docs, "dev")
        assert result.effective["a"].winning_source == "project-specific.md"
        assert result.effective["b"].value == "only"

    def test_agent_document_beats_everything(self) -> None:
        docs = [_doc("dev.md", a="agent"), _doc("project-specific.md", a="project")]
        assert merge(docs, "dev").effective["a"].value == "agent"

    def test_diagnostic_document_loses_to_unlisted(self) -> None:
        docs = [_doc("random.md", a="unlisted"), _doc("conflict.md", a="diagnostic")]
        rule = merge(docs, "dev").effective["a"]
        assert rule.value == "unlisted"
        assert rule.rank == 0

    def test_inclusion_mode_recorded(self) -> None:
        docs = [_doc("tech.md", inclusion="fileMatch", a="x")]
        assert merge(docs, "dev").effective["a"].inclusion_mode is InclusionMode.CONDITIONAL

    def test_unrecognized_inclusion_skipped(self) -> None:
        docs = [_doc("tech.md", a="x"), _doc("product.md", inclusion="sometimes", a="y")]
        assert merge(docs, "dev").effective["a"].value == "x"

    def test_empty_input(self) -> None:
        result = merge([], "dev")
        assert result.effective == {}
        assert result.conflicts == []


class TestConflictDetection:
    """Tests for equal-rank disagreements."""

    def test_equal_rank_sensitive_key_is_high(self) -> None:
        docs = [_doc("one.md", codeStyle="4 spaces"), _doc("two.md", codeStyle="tabs")]
        result = merge(docs, "dev")
        assert len(result.conflicts) == 1
        conflict = result.conflicts[0]
        assert conflict.section_key == "codeStyle"
        assert conflict.severity is ConflictSeverity.HIGH
        assert conflict.sources == ["one.md", "two.md"]
        assert result.effective["codeStyle"].value == "4 spaces"

    def test_first_seen_decision(self) -> None:
        docs = [_doc("one.md", testing="pytest"), _doc("two.md", testing="unittest")]
        conflict = merge(docs, "dev").conflicts[0]
        assert conflict.severity is ConflictSeverity.MEDIUM
        assert conflict.conflict_type is ConflictType.MULTIPLE_SOURCES
        assert conflict.decision.strategy is ResolutionStrategy.FIRST_SEEN
        assert conflict.decision.chosen_source == "one.md"

    def test_identical_values_no_conflict(self) -> None:
        docs = [_doc("one.md", a="same"), _doc("two.md", a="same")]
        assert merge(docs, "dev").conflicts == []

    def test_cosmetic_difference_is_severity_none(self) -> None:
        docs = [_doc("one.md", a="Use  Tabs"), _doc("two.md", a="use tabs")]
        conflict = merge(docs, "dev").conflicts[0]
        assert conflict.severity is ConflictSeverity.NONE
        assert not conflict.is_actionable

    def test_three_way_conflict_is_one_record(self) -> None:
        docs = [_doc("a.md", k="1"), _doc("b.md", k="2"), _doc("c.md", k="3")]
        result = merge(docs, "dev")
        assert len(result.conflicts) == 1
        assert result.conflicts[0].sources == ["a.md", "b.md", "c.md"]

    def test_outranked_conflict_is_kept(self) -> None:
        """An equal-rank collision stays recorded after a higher rank wins."""
        docs = [
            _doc("a.md", code_style="tabs"),
            _doc("b.md", code_style="spaces"),
            _doc("project-specific.md", code_style="2 spaces"),
        ]
        result = merge(docs, "dev")
        assert len(result.conflicts) == 1
        conflict = result.conflicts[0]
        assert conflict.sources == ["a.md", "b.md"]
        assert conflict.overridden_by == "project-specific.md"
        assert conflict.contributing_sources[0].rank == 0
        rule = result.effective["code_style"]
        assert rule.value == "2 spaces"
        assert rule.winning_source == "project-specific.md"

    def test_outranked_and_winning_conflicts_both_recorded(self) -> None:
        docs = [
            _doc("a.md", k="1"),
            _doc("b.md", k="2"),
            _doc("tech.md", k="3"),
            _doc("team.md", k="4"),
        ]
        table = PrecedenceTable({"team.md": (4, "product")})
        result = merge(docs, "dev", table=table)
        assert [c.sources for c in result.conflicts] == [["a.md", "b.md"], ["tech.md", "team.md"]]
        assert [c.overridden_by for c in result.conflicts] == ["tech.md", None]
        assert result.effective["k"].value == "3"

    def test_agreeing_outranked_group_is_not_a_conflict(self) -> None:
        docs = [_doc("a.md", k="same"), _doc("b.md", k="same"), _doc("tech.md", k="final")]
        assert merge(docs, "dev").conflicts == []

    def test_conflict_type_from_classes(self) -> None:
        table = PrecedenceTable({"team.md": (4, "product")})
        docs = [_doc("tech.md", stack="django"), _doc("team.md", stack="rails")]
        conflict = merge(docs, "dev", table=table).conflicts[0]
        assert conflict.conflict_type is ConflictType.TECH_VS_PRODUCT

    def test_conflict_records_agent(self) -> None:
        docs = [_doc("a.md", k="1"), _doc("b.md", k="2")]
        assert merge(docs, "qa").conflicts[0].agent_id == "qa"
