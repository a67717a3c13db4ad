"""Steering rule precedence and conflict resolution.

Merges layered rule documents into one effective rule map per agent,
using a static precedence ladder, and reports equal-rank disagreements
as classified conflict records with generated guidance.
"""

from agentport.core.steering.applicability import is_applicable, load_applicable_documents
from agentport.core.steering.classifier import ConflictClassifier
from agentport.core.steering.guidance import (
    build_guidance_document,
    generate_guidance,
    write_guidance_document,
)
from agentport.core.steering.merger import MergeResult, merge
from agentport.core.steering.models import (
    ConflictRecord,
    ConflictSeverity,
    ConflictType,
    ContributingSource,
    EffectiveRule,
    FileValidation,
    InclusionMode,
    PrecedenceClass,
    ProjectContext,
    ResolutionDecision,
    ResolutionStrategy,
    RuleDocument,
    SteeringResolution,
    SteeringState,
    ValidationReport,
)
from agentport.core.steering.parser import (
    load_rule_document,
    load_rule_documents,
    parse_rule_document,
)
from agentport.core.steering.precedence import (
    DIAGNOSTIC_RANK,
    UNLISTED_RANK,
    PrecedenceTable,
    compute_precedence,
)
from agentport.core.steering.resolver import SteeringResolver
from agentport.core.steering.validation import (
    partition_documents,
    validate_consistency,
    validate_directory,
    validate_document,
)

__all__ = [
    "ConflictClassifier",
    "ConflictRecord",
    "ConflictSeverity",
    "ConflictType",
    "ContributingSource",
    "DIAGNOSTIC_RANK",
    "EffectiveRule",
    "FileValidation",
    "InclusionMode",
    "MergeResult",
    "PrecedenceClass",
    "PrecedenceTable",
    "ProjectContext",
    "ResolutionDecision",
    "ResolutionStrategy",
    "RuleDocument",
    "SteeringResolution",
    "SteeringResolver",
    "SteeringState",
    "UNLISTED_RANK",
    "ValidationReport",
    "build_guidance_document",
    "compute_precedence",
    "generate_guidance",
    "is_applicable",
    "load_applicable_documents",
    "load_rule_document",
    "load_rule_documents",
    "merge",
    "parse_rule_document",
    "partition_documents",
    "validate_consistency",
    "validate_directory",
    "validate_document",
    "write_guidance_document",
]
