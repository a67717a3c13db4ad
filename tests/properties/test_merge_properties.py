"""Property-based tests for the steering rule merge.

Verifies:
- Every effective value comes from a highest-ranked contributor of its key.
- The merge does not depend on the order documents are given in when
  ranks are distinct.
- Conflicts only ever involve contributors of one equal rank, and every
  disagreeing equal-rank group is recorded, outranked or not.
- At most one conflict record exists per key and rank.
"""
from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from agentport.core.steering.merger import merge
from agentport.core.steering.models import RuleDocument
from agentport.core.steering.precedence import PrecedenceTable

SOURCES = [
    "bmad-method.md",
    "tech-preferences.md",
    "structure.md",
    "tech.md",
    "product.md",
    "project-specific.md",
    "dev.md",
    "conflict.md",
    "notes.md",
    "misc.md",
]

keys = st.sampled_from(["code_style", "testing", "naming", "review"])
values = st.sampled_from(["a", "b", "c"])


@st.composite
def document_sets(draw: st.DrawFn) -> list[RuleDocument]:
    """Generate 1-6 documents with unique source names and random sections."""
    names = draw(st.lists(st.sampled_from(SOURCES), min_size=1, max_size=6, unique=True))
    return [
        RuleDocument(name, sections=draw(st.dictionaries(keys, values, max_size=4)))
        for name in names
    ]


class TestMergeProperties:
    """Invariants of ``merge``."""

    @given(docs=document_sets())
    def test_winner_has_maximal_rank(self, docs: list[RuleDocument]) -> None:
        table = PrecedenceTable()
        result = merge(docs, "dev", table=table)
        for key, rule in result.effective.items():
            ranks = [table.rank_of(d.source_name, "dev") for d in docs if key in d.sections]
            assert rule.rank == max(ranks)
            winner = next(d for d in docs if d.source_name == rule.winning_source)
            assert winner.sections[key] == rule.value

    @given(docs=document_sets())
    def test_every_key_is_present(self, docs: list[RuleDocument]) -> None:
        result = merge(docs, "dev")
        assert set(result.effective) == {k for d in docs for k in d.sections}

    @given(docs=document_sets(), data=st.data())
    def test_order_independent_for_distinct_ranks(self, docs: list[RuleDocument], data: st.DataObject) -> None:
        table = PrecedenceTable()
        ranks = [table.rank_of(d.source_name, "dev") for d in docs]
        shuffled = data.draw(st.permutations(docs))
        if len(set(ranks)) == len(ranks):
            assert merge(docs, "dev").effective == merge(list(shuffled), "dev").effective

    @given(docs=document_sets())
    def test_conflicts_are_equal_rank_groups(self, docs: list[RuleDocument]) -> None:
        result = merge(docs, "dev")
        groups = [(c.section_key, c.contributing_sources[0].rank) for c in result.conflicts]
        assert len(groups) == len(set(groups))
        for conflict in result.conflicts:
            rank = conflict.contributing_sources[0].rank
            winner = result.effective[conflict.section_key]
            assert len({s.rank for s in conflict.contributing_sources}) == 1
            assert len({s.value for s in conflict.contributing_sources}) >= 2
            if conflict.overridden_by is None:
                assert rank == winner.rank
            else:
                assert rank < winner.rank

    @given(docs=document_sets())
    def test_every_disagreeing_rank_group_is_recorded(self, docs: list[RuleDocument]) -> None:
        table = PrecedenceTable()
        result = merge(docs, "dev", table=table)
        expected = set()
        for key in {k for d in docs for k in d.sections}:
            by_rank: dict[int, set[object]] = {}
            for d in docs:
                if key in d.sections:
                    by_rank.setdefault(table.rank_of(d.source_name, "dev"), set()).add(d.sections[key])
            expected |= {(key, rank) for rank, found in by_rank.items() if len(found) > 1}
        assert {(c.section_key, c.contributing_sources[0].rank) for c in result.conflicts} == expected
