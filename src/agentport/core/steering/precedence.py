"""Precedence ranks of rule documents.

Ranks are looked up by source file name; higher wins. The default ladder::

    conflict.md            -1  diagnostic (lowest)
    <unlisted>              0
    bmad-method.md          1  framework
    tech-preferences.md     2  general
    structure.md            3  structure
    tech.md                 4  tech
    product.md              5  product
    project-specific.md     6  project
    <agent-id>.md           7  agent (always highest)

The diagnostic document ranks strictly below unlisted documents, so an
unknown file can never be outranked by the test/diagnostic fixture. When
extra entries push the table above 6, the agent-specific document moves
to one above the highest entry.
"""

from __future__ import annotations

from agentport.core.steering.models import PrecedenceClass, RuleDocument

DIAGNOSTIC_SOURCE = "conflict.md"
DIAGNOSTIC_RANK = -1
UNLISTED_RANK = 0
AGENT_RANK = 7

DEFAULT_PRECEDENCE: dict[str, tuple[int, PrecedenceClass]] = {
    "bmad-method.md": (1, PrecedenceClass.FRAMEWORK),
    "tech-preferences.md": (2, PrecedenceClass.GENERAL),
    "structure.md": (3, PrecedenceClass.STRUCTURE),
    "tech.md": (4, PrecedenceClass.TECH),
    "product.md": (5, PrecedenceClass.PRODUCT),
    "project-specific.md": (6, PrecedenceClass.PROJECT),
}


class PrecedenceTable:
    """Static source-name -> (rank, class) lookup.

    Args:
        extra: Additional or overriding entries, as ``(rank, class name)``
            pairs (the form used in configuration files).

    Raises:
        ValueError: If an extra entry names an unknown precedence class.
    """

    def __init__(self, extra: dict[str, tuple[int, str]] | None = None) -> None:
        self._entries: dict[str, tuple[int, PrecedenceClass]] = dict(DEFAULT_PRECEDENCE)
        for source, (rank, class_name) in (extra or {}).items():
            self._entries[source] = (rank, PrecedenceClass(class_name))

    @property
    def agent_rank(self) -> int:
        """Rank of agent-specific documents: above every table entry."""
        highest = max(rank for rank, _ in self._entries.values())
        return max(AGENT_RANK, highest + 1)

    def lookup(self, source_name: str, agent_id: str) -> tuple[int, PrecedenceClass]:
        """Return ``(rank, class)`` of *source_name* for *agent_id*."""
        if source_name == f"{agent_id}.md":
            return self.agent_rank, PrecedenceClass.AGENT
        if source_name == DIAGNOSTIC_SOURCE:
            return DIAGNOSTIC_RANK, PrecedenceClass.DIAGNOSTIC
        if source_name in self._entries:
            return self._entries[source_name]
        return UNLISTED_RANK, PrecedenceClass.UNLISTED

    def rank_of(self, source_name: str, agent_id: str) -> int:
        return self.lookup(source_name, agent_id)[0]

    def class_of(self, source_name: str, agent_id: str) -> PrecedenceClass:
        return self.lookup(source_name, agent_id)[1]

    def ladder(self, agent_id: str = "{agent-id}") -> list[tuple[int, str, PrecedenceClass]]:
        """Return every known rank, highest first, for display."""
        rows = [(rank, source, cls) for source, (rank, cls) in self._entries.items()]
        rows.append((self.agent_rank, f"{agent_id}.md", PrecedenceClass.AGENT))
        rows.append((UNLISTED_RANK, "(unlisted documents)", PrecedenceClass.UNLISTED))
        rows.append((DIAGNOSTIC_RANK, DIAGNOSTIC_SOURCE, PrecedenceClass.DIAGNOSTIC))
        return sorted(rows, key=lambda row: -row[0])


def compute_precedence(
    document: RuleDocument, agent_id: str, table: PrecedenceTable | None = None
) -> int:
    """Return the precedence rank of *document* when merging for *agent_id*."""
    return (table or PrecedenceTable()).rank_of(document.source_name, agent_id)
