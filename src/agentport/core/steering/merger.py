"""Precedence merge of applicable rule documents.

Documents are folded in ascending precedence order (stable, so equal
ranks keep their input order). For every section key:

- unseen: the document becomes the winner;
- seen at a strictly lower rank: the document overwrites the winner and
  the key's contributor group is closed;
- seen at the same rank with a different value: the document joins the
  key's contributors and the earlier value is kept.

Every contributor group holding two or more differing values yields
exactly one ``ConflictRecord`` listing all of them. A group closed by a
higher-ranked document still yields its record, marked ``overridden_by``
that document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from agentport.core.steering.classifier import ConflictClassifier, first_seen_decision
from agentport.core.steering.models import (
    ConflictRecord,
    ContributingSource,
    EffectiveRule,
    RuleDocument,
)
from agentport.core.steering.precedence import PrecedenceTable

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    """Effective rule map and conflicts of one merge."""

    effective: dict[str, EffectiveRule] = field(default_factory=dict)
    conflicts: list[ConflictRecord] = field(default_factory=list)


def merge(
    documents: list[RuleDocument],
    agent_id: str,
    *,
    table: PrecedenceTable | None = None,
    classifier: ConflictClassifier | None = None,
) -> MergeResult:
    """Merge *documents* into one effective rule map for *agent_id*.

    Pure: the result depends only on the arguments.

    Args:
        documents: Applicable rule documents, in load order.
        agent_id: The agent being resolved (decides the agent-specific rank).
        table: Precedence table (defaults to the built-in ladder).
        classifier: Conflict classifier (defaults to the built-in
            sensitive keys).
    """
    table = table or PrecedenceTable()
    classifier = classifier or ConflictClassifier()

    ranked = sorted(
        ((table.lookup(doc.source_name, agent_id), doc) for doc in documents),
        key=lambda item: item[0][0],
    )

    result = MergeResult()
    contributors: dict[str, list[ContributingSource]] = {}
    # (key, group, overriding source) in the order groups were closed
    groups: list[tuple[str, list[ContributingSource], str | None]] = []

    for (rank, precedence_class), doc in ranked:
        mode = doc.mode
        if mode is None:
            logger.warning("Skipping %s: unrecognized inclusion %r", doc.source_name, doc.inclusion)
            continue
        for key, value in doc.sections.items():
            source = ContributingSource(doc.source_name, value, rank, precedence_class)
            current = result.effective.get(key)
            if current is None or rank > current.rank:
                if current is not None:
                    groups.append((key, contributors[key], doc.source_name))
                result.effective[key] = EffectiveRule(value, doc.source_name, rank, mode)
                contributors[key] = [source]
            elif rank == current.rank:
                contributors[key].append(source)

    groups.extend((key, sources, None) for key, sources in contributors.items())

    for key, sources, overridden_by in groups:
        if len(sources) < 2 or all(s.value == sources[0].value for s in sources[1:]):
            continue
        severity, conflict_type = classifier.classify(key, sources)
        result.conflicts.append(
            ConflictRecord(
                section_key=key,
                agent_id=agent_id,
                contributing_sources=sources,
                severity=severity,
                conflict_type=conflict_type,
                decision=first_seen_decision(sources),
                overridden_by=overridden_by,
            )
        )
        logger.debug(
            "Conflict on %s for %s between %s (%s)",
            key,
            agent_id,
            ", ".join(s.source for s in sources),
            severity.label,
        )
    return result
