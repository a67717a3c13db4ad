"""Per-agent steering rule resolution.

``SteeringResolver.resolve`` drives one agent's merge pass through its
states::

    UNPROCESSED -> LOADING -> MERGING -> CONFLICT_DETECTED | RESOLVED

Validation runs first and excludes invalid documents; that is the only
failure mode and it never aborts the pass. ``CONFLICT_DETECTED`` is not
terminal in any blocking sense: the effective map is complete either way
and the conflicts annotate it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from agentport.config import AgentPortConfig
from agentport.core.steering.applicability import load_applicable_documents
from agentport.core.steering.classifier import ConflictClassifier
from agentport.core.steering.guidance import build_guidance_document
from agentport.core.steering.merger import merge
from agentport.core.steering.models import (
    EffectiveRule,
    InclusionMode,
    ProjectContext,
    ResolutionStrategy,
    RuleDocument,
    SteeringResolution,
    SteeringState,
)
from agentport.core.steering.parser import load_rule_documents
from agentport.core.steering.precedence import PrecedenceTable
from agentport.core.steering.validation import partition_documents

logger = logging.getLogger(__name__)


class SteeringResolver:
    """Merges rule documents into one effective rule map per agent.

    Stateless between calls: each ``resolve`` is independent, so the same
    instance can serve every agent of a run.

    Args:
        config: Supplies extra precedence entries and sensitive keys.
    """

    def __init__(self, config: AgentPortConfig | None = None) -> None:
        config = config or AgentPortConfig()
        self.table = PrecedenceTable(config.precedence)
        self.classifier = ConflictClassifier(config.sensitive_keys)

    def resolve(
        self,
        documents: list[RuleDocument],
        agent_id: str,
        context: ProjectContext | None = None,
    ) -> SteeringResolution:
        """Resolve *documents* for *agent_id*.

        Args:
            documents: Every rule document visible to the agent.
            agent_id: The agent being resolved.
            context: Project facts used by conditional documents.

        Returns:
            A ``SteeringResolution`` with the effective map, conflicts and
            combined guidance.
        """
        history = [SteeringState.UNPROCESSED]

        validation, valid_documents, invalid = partition_documents(documents)

        history.append(SteeringState.LOADING)
        applicable = load_applicable_documents(valid_documents, agent_id, context)

        history.append(SteeringState.MERGING)
        merged = merge(applicable, agent_id, table=self.table, classifier=self.classifier)

        modes = {d.source_name: d.mode or InclusionMode.ALWAYS for d in applicable}
        for conflict in merged.conflicts:
            conflict.decision = self.classifier.decide(conflict)
            if (
                conflict.decision.strategy is ResolutionStrategy.PROJECT_OVERRIDE
                and conflict.overridden_by is None
            ):
                current = merged.effective[conflict.section_key]
                merged.effective[conflict.section_key] = EffectiveRule(
                    value=conflict.decision.chosen_value,
                    winning_source=conflict.decision.chosen_source,
                    rank=current.rank,
                    inclusion_mode=modes[conflict.decision.chosen_source],
                )
            if conflict.is_actionable:
                logger.warning(
                    "Agent %s: %s conflict on '%s' between %s",
                    agent_id,
                    conflict.severity.label,
                    conflict.section_key,
                    ", ".join(conflict.sources),
                )

        resolution = SteeringResolution(
            agent_id=agent_id,
            state=SteeringState.RESOLVED,
            effective=merged.effective,
            conflicts=merged.conflicts,
            invalid_documents=sorted(d.source_name for d in invalid),
            applicable_documents=[d.source_name for d in applicable],
            validation=validation,
        )
        if resolution.actionable_conflicts:
            resolution.state = SteeringState.CONFLICT_DETECTED
            resolution.guidance = build_guidance_document(
                agent_id, resolution.conflicts, self.table
            )
        history.append(resolution.state)
        resolution.history = history

        logger.info(
            "Agent %s: %d rules from %d documents, %d conflicts, %d invalid",
            agent_id,
            len(resolution.effective),
            len(applicable),
            len(resolution.actionable_conflicts),
            len(invalid),
        )
        return resolution

    def resolve_directory(
        self,
        directory: Path,
        agent_id: str,
        context: ProjectContext | None = None,
    ) -> SteeringResolution:
        """Load every rule document in *directory* and resolve them."""
        return self.resolve(load_rule_documents(directory), agent_id, context)
