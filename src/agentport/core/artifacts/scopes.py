"""Search scopes and naming-convention normalization.

An agent sees artifacts through up to three scope roots, searched in a
fixed priority order:

1. its own scope: the extension scope for extension agents, the
   base-framework scope otherwise;
2. the shared (common) scope;
3. the base-framework scope, as a fallback for extension agents only.
   Base-framework agents never fall back into an extension.

For a given reference the resolver walks the canonical file name through
all scopes first, then each alternative naming convention through all
scopes again, so scope priority is preserved inside every naming variant.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath

from agentport.config import NamingConventions, ScopeLayout
from agentport.core.artifacts.types import ArtifactType


class ScopeKind(Enum):
    """The role a scope root plays for an agent."""

    EXTENSION = "extension"
    COMMON = "common"
    BASE = "base"


@dataclass(frozen=True)
class SearchScope:
    """One scope root searched for artifacts."""

    kind: ScopeKind
    root: Path

    def directory_for(self, artifact_type: ArtifactType) -> Path:
        """Return the directory holding *artifact_type* files in this scope."""
        return self.root / artifact_type.directory


@dataclass(frozen=True)
class ScopeContext:
    """Everything that decides where an agent's artifacts are looked up.

    Hashable; two agents with equal contexts share cache entries.

    Attributes:
        root: Project root holding the scope directories.
        extension: Name of the agent's extension scope, or None for a
            base-framework agent.
        layout: Scope directory names.
    """

    root: Path
    extension: str | None = None
    layout: ScopeLayout = ScopeLayout()

    @property
    def base(self) -> SearchScope:
        return SearchScope(ScopeKind.BASE, self.root / self.layout.base_dir)

    @property
    def common(self) -> SearchScope:
        return SearchScope(ScopeKind.COMMON, self.root / self.layout.common_dir)

    @property
    def own(self) -> SearchScope:
        """The agent's own scope (extension or base)."""
        if self.extension:
            return SearchScope(
                ScopeKind.EXTENSION,
                self.root / self.layout.extensions_dir / self.extension,
            )
        return self.base

    def scopes(self) -> list[SearchScope]:
        """Return the scopes in search-priority order."""
        ordered = [self.own, self.common]
        if self.extension:
            ordered.append(self.base)
        return ordered


# ---------------------------------------------------------------------------
# Naming normalization
# ---------------------------------------------------------------------------


ARTIFACT_SUFFIXES = frozenset({t.extension for t in ArtifactType} | {".yml"})


def split_name(name: str) -> tuple[str, str]:
    """Split a reference into ``(stem, extension)``, dropping any directory.

    Only artifact extensions (``ARTIFACT_SUFFIXES``) are split off, so a
    dotted name such as ``v1.2-notes`` keeps its dots: ``("v1.2-notes", "")``.
    """
    pure = PurePosixPath(name.strip().replace("\\", "/"))
    if pure.suffix.lower() in ARTIFACT_SUFFIXES:
        return pure.stem, pure.suffix
    return pure.name, ""


def canonical_name(artifact_type: ArtifactType, name: str) -> str:
    """Normalize *name* to its canonical file name for *artifact_type*.

    Any artifact extension is stripped and the type's canonical extension
    is appended: ``canonical_name(TEMPLATE, "prd.md") == "prd.yaml"``.
    """
    stem, _ = split_name(name)
    return stem + artifact_type.extension


def canonical_stem(name: str) -> str:
    """Return the graph identity of a reference: its stem without extension."""
    stem, _ = split_name(name)
    return stem


def naming_variants(file_name: str, conventions: NamingConventions) -> list[str]:
    """Return alternative spellings of *file_name*, canonical name excluded.

    Order: kebab/snake swap, then each prefix stripped-or-added, then each
    suffix stripped-or-added. Duplicates are removed keeping first
    occurrence.
    """
    stem, ext = split_name(file_name)
    candidates: list[str] = []

    if "-" in stem:
        candidates.append(stem.replace("-", "_"))
    if "_" in stem:
        candidates.append(stem.replace("_", "-"))

    for prefix in conventions.prefixes:
        if stem.startswith(prefix):
            candidates.append(stem[len(prefix):])
        else:
            candidates.append(prefix + stem)

    for suffix in conventions.suffixes:
        if stem.endswith(suffix):
            candidates.append(stem[: -len(suffix)])
        else:
            candidates.append(stem + suffix)

    seen = {stem}
    variants: list[str] = []
    for candidate in candidates:
        if candidate and candidate not in seen:
            seen.add(candidate)
            variants.append(candidate + ext)
    return variants


def candidate_paths(
    context: ScopeContext,
    artifact_type: ArtifactType,
    name: str,
    conventions: NamingConventions,
) -> list[Path]:
    """Build the ordered list of paths tried for one reference."""
    canonical = canonical_name(artifact_type, name)
    scopes = context.scopes()
    paths: list[Path] = []
    for file_name in [canonical, *naming_variants(canonical, conventions)]:
        for scope in scopes:
            paths.append(scope.directory_for(artifact_type) / file_name)
    return paths
