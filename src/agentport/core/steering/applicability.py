"""Selection of the rule documents that apply to one agent.

- ``always`` documents always apply.
- ``conditional`` documents apply when any one of their predicates
  matches: the file pattern (a glob) against the current file, the agent
  filter (a glob) against the agent id, or the project type by equality.
- ``manual`` documents apply only when forced in by name.

A document whose inclusion value is not recognized never applies.
"""

from __future__ import annotations

from fnmatch import fnmatchcase
from pathlib import PurePosixPath

from agentport.core.steering.models import InclusionMode, ProjectContext, RuleDocument


def _file_matches(pattern: str, current_file: str | None) -> bool:
    if not current_file:
        return False
    normalized = current_file.replace("\\", "/")
    return fnmatchcase(normalized, pattern) or fnmatchcase(PurePosixPath(normalized).name, pattern)


def matches_context(document: RuleDocument, agent_id: str, context: ProjectContext) -> bool:
    """Return True if any predicate of *document* matches."""
    if document.file_match_pattern and _file_matches(
        document.file_match_pattern, context.current_file
    ):
        return True
    if document.agent_filter and fnmatchcase(agent_id, document.agent_filter):
        return True
    if document.project_type and context.project_type is not None:
        return document.project_type == context.project_type
    return False


def is_applicable(document: RuleDocument, agent_id: str, context: ProjectContext) -> bool:
    if document.source_name in context.manual_includes:
        return document.mode is not None
    match document.mode:
        case InclusionMode.ALWAYS:
            return True
        case InclusionMode.CONDITIONAL:
            return matches_context(document, agent_id, context)
        case InclusionMode.MANUAL | None:
            return False


def load_applicable_documents(
    documents: list[RuleDocument],
    agent_id: str,
    context: ProjectContext | None = None,
) -> list[RuleDocument]:
    """Filter *documents* to those applicable to *agent_id*, keeping order."""
    ctx = context or ProjectContext()
    return [doc for doc in documents if is_applicable(doc, agent_id, ctx)]
