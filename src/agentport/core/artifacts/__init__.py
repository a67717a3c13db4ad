"""Artifact dependency resolution.

Resolves the ``(type, name)`` references an agent declares to concrete
files across its scope hierarchy (own extension scope, shared scope,
base-framework scope), with naming-variant normalization, ranked
suggestions for missing artifacts, caching and cycle detection.
"""

from agentport.core.artifacts.fs import FileSystem, LocalFileSystem
from agentport.core.artifacts.graph import DependencyGraph
from agentport.core.artifacts.manifests import BUILTIN_MANIFESTS, ManifestRegistry
from agentport.core.artifacts.metadata import (
    ArtifactMetadata,
    extract_metadata,
    extract_references,
)
from agentport.core.artifacts.models import (
    CacheStatistics,
    CycleWarning,
    MissingDependency,
    ResolutionReport,
    ResolutionResult,
    Suggestion,
    SuggestionKind,
)
from agentport.core.artifacts.resolver import ArtifactResolver
from agentport.core.artifacts.scopes import (
    ScopeContext,
    ScopeKind,
    SearchScope,
    canonical_name,
    naming_variants,
)
from agentport.core.artifacts.similarity import levenshtein, similarity, suggest
from agentport.core.artifacts.types import ArtifactReference, ArtifactType

__all__ = [
    "ArtifactMetadata",
    "ArtifactReference",
    "ArtifactResolver",
    "ArtifactType",
    "BUILTIN_MANIFESTS",
    "CacheStatistics",
    "CycleWarning",
    "DependencyGraph",
    "FileSystem",
    "LocalFileSystem",
    "ManifestRegistry",
    "MissingDependency",
    "ResolutionReport",
    "ResolutionResult",
    "ScopeContext",
    "ScopeKind",
    "SearchScope",
    "Suggestion",
    "SuggestionKind",
    "canonical_name",
    "extract_metadata",
    "extract_references",
    "levenshtein",
    "naming_variants",
    "similarity",
    "suggest",
]
