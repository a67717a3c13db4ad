"""Human-readable guidance for rule conflicts.

Guidance is plain template expansion and fully deterministic (no
timestamps), so regenerating it for unchanged inputs yields identical
text. Per-conflict sections are aggregated per agent into one Markdown
guide, written next to the rule documents as
``CONFLICT_RESOLUTION_GUIDE.md``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from agentport.core.steering.models import ConflictRecord, ConflictSeverity
from agentport.core.steering.parser import GUIDE_FILENAME
from agentport.core.steering.precedence import PrecedenceTable

logger = logging.getLogger(__name__)


def format_value(value: Any) -> str:
    if isinstance(value, (tuple, list)):
        return "; ".join(str(item) for item in value)
    return str(value)


def generate_guidance(conflict: ConflictRecord) -> str:
    """Return the Markdown guidance section of one conflict."""
    decision = conflict.decision
    lines = [
        f"## Steering Rule Conflict: {conflict.section_key}",
        "",
        f"**Severity:** {conflict.severity.label.upper()}",
        f"**Type:** {conflict.conflict_type.value}",
        "",
        "**Conflicting Rules:**",
    ]
    for index, source in enumerate(conflict.contributing_sources, start=1):
        lines.append(f"{index}. **{source.source}** (precedence: {source.rank})")
        lines.append(f"   - {format_value(source.value)}")
    lines += [
        "",
        "**Current Resolution:**",
        f"Using the value of **{decision.chosen_source}**: {format_value(decision.chosen_value)}",
        f"Reason: {decision.reason}.",
    ]
    if conflict.overridden_by:
        lines.append(
            f"Overridden by **{conflict.overridden_by}** (higher precedence), "
            "which sets the effective value."
        )
    lines += [
        "",
        "**Options:**",
        "1. Accept current resolution (recommended)",
        "2. Create a project-specific override in `project-specific.md`",
        "3. Modify the conflicting rule files to align values",
        f"4. Add agent-specific rules in `{conflict.agent_id}.md`",
    ]
    if conflict.severity is ConflictSeverity.HIGH:
        lines += [
            "",
            "**HIGH SEVERITY CONFLICT**",
            "",
            "This conflict involves critical development standards that could affect:",
            "- Code consistency across the project",
            "- Team collaboration and code reviews",
            "- Build and deployment processes",
            "",
            "**Recommended Actions:**",
            "1. Review both conflicting rules with your team",
            "2. Establish a project-wide standard",
            "3. Update the appropriate steering rule file",
            "4. Communicate the decision to all team members",
        ]
    return "\n".join(lines) + "\n"


def build_guidance_document(
    agent_id: str,
    conflicts: list[ConflictRecord],
    table: PrecedenceTable | None = None,
) -> str:
    """Aggregate the guidance of every actionable conflict of *agent_id*.

    Conflicts of severity ``none`` are left out. Sections are grouped by
    severity, highest first, keeping merge order inside each group.
    """
    table = table or PrecedenceTable()
    actionable = [c for c in conflicts if c.severity is not ConflictSeverity.NONE]
    high = [c for c in actionable if c.severity is ConflictSeverity.HIGH]
    medium = [c for c in actionable if c.severity is ConflictSeverity.MEDIUM]

    parts = [
        "# Steering Rule Conflict Resolution Guide",
        "",
        f"Agent: `{agent_id}`",
        "",
        "This guide helps you understand and resolve conflicts between steering rules.",
        "",
        "## Summary",
        "",
        f"- **Total Conflicts:** {len(actionable)}",
        f"- **High Severity:** {len(high)}",
        f"- **Medium Severity:** {len(medium)}",
        "",
    ]
    for severity, group in ((ConflictSeverity.HIGH, high), (ConflictSeverity.MEDIUM, medium)):
        if not group:
            continue
        parts += [f"# {severity.label.upper()} Severity Conflicts", ""]
        for conflict in group:
            parts += [generate_guidance(conflict), "---", ""]

    parts += ["## Precedence Ladder", "", "Higher ranks override lower ones:", ""]
    for rank, source, precedence_class in table.ladder(agent_id):
        parts.append(f"- {rank:>2}  `{source}` ({precedence_class.value})")
    return "\n".join(parts) + "\n"


def write_guidance_document(
    directory: Path,
    agent_id: str,
    conflicts: list[ConflictRecord],
    table: PrecedenceTable | None = None,
) -> Path:
    """Write the combined guide into *directory* and return its path."""
    path = directory / GUIDE_FILENAME
    path.write_text(build_guidance_document(agent_id, conflicts, table), encoding="utf-8")
    logger.info("Wrote conflict resolution guide: %s", path)
    return path
