"""Dependency resolution engine for agent artifacts.

This module implements the ``ArtifactResolver`` class, which turns an
agent's ``(type, name)`` references into resolved files or actionable
diagnostics:

1. **Lookup** -- the ordered candidate paths (scope priority inside each
   naming variant) are checked; the first existing path wins.
2. **Metadata extraction** -- front matter, declared sub-dependencies and
   type-specific exports are read from the resolved file.
3. **Suggestions** -- on failure, every existing scope directory that was
   searched contributes similarity-ranked candidates, followed by a
   create-new fallback.
4. **Cycle detection** -- ``scan_dependencies`` follows sub-dependencies
   transitively, builds a dependency graph rooted at the agent id and
   reports circular chains as warnings.

Unresolvable references are data (``found=False``). The only exception
that escapes ``resolve`` and ``scan_dependencies`` is ``ArtifactIOError``.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from agentport.config import AgentPortConfig
from agentport.core.artifacts.cache import ResolutionCache
from agentport.core.artifacts.fs import FileSystem, LocalFileSystem
from agentport.core.artifacts.graph import DependencyGraph, artifact_node
from agentport.core.artifacts.manifests import ManifestRegistry
from agentport.core.artifacts.metadata import extract_metadata
from agentport.core.artifacts.models import (
    CacheStatistics,
    CycleWarning,
    MissingDependency,
    ResolutionReport,
    ResolutionResult,
    Suggestion,
)
from agentport.core.artifacts.scopes import (
    ScopeContext,
    candidate_paths,
    canonical_stem,
)
from agentport.core.artifacts.similarity import (
    create_new_suggestion,
    rank_candidates,
    suggest,
)
from agentport.core.artifacts.types import ArtifactReference, ArtifactType
from agentport.exceptions import UnknownArtifactTypeError

if TYPE_CHECKING:
    from agentport.parsers.agent_definition import AgentDefinition

logger = logging.getLogger(__name__)


class ArtifactResolver:
    """Resolves artifact references across scopes, with caching.

    The resolver owns its cache and its dependency graph. Lifecycle:
    construct, call ``resolve`` / ``scan_dependencies`` any number of
    times, then ``clear_cache`` or drop the instance. Results are cached
    per ``(scope context, type, name)``; a cached lookup never touches the
    filesystem again until the cache is cleared.

    Usage::

        resolver = ArtifactResolver(Path("project"))
        result = resolver.resolve(resolver.context_for(None), ArtifactType.PROCEDURE, "create-story")
        if not result.found:
            for s in result.suggestions:
                print(s.candidate_name, s.confidence)

    Args:
        root: Project root holding the scope directories.
        config: Layout, naming and suggestion settings.
        fs: Filesystem seam (defaults to the local filesystem).
        manifests: Implicit extension dependencies (defaults to the
            built-in manifests plus those in *config*).
    """

    def __init__(
        self,
        root: Path,
        config: AgentPortConfig | None = None,
        *,
        fs: FileSystem | None = None,
        manifests: ManifestRegistry | None = None,
    ) -> None:
        self.root = Path(root)
        self.config = config or AgentPortConfig()
        self._fs = fs or LocalFileSystem()
        self._manifests = manifests or ManifestRegistry(self.config.manifests)
        self._cache: ResolutionCache[ResolutionResult] = ResolutionCache()
        self._graph = DependencyGraph()
        self._graph_lock = threading.Lock()

    def context_for(self, extension: str | None) -> ScopeContext:
        """Return the scope context of an agent in *extension* (None = base)."""
        return ScopeContext(self.root, extension, self.config.layout)

    # -- Single lookups --

    def resolve(
        self,
        context: ScopeContext,
        artifact_type: ArtifactType | str,
        name: str,
    ) -> ResolutionResult:
        """Resolve one artifact reference.

        Args:
            context: The scope context of the requesting agent.
            artifact_type: An ``ArtifactType`` or a type/directory name.
            name: The artifact name, with or without extension.

        Returns:
            The (possibly cached) ``ResolutionResult``.

        Raises:
            UnknownArtifactTypeError: If *artifact_type* is not recognized.
            ArtifactIOError: On a genuine filesystem fault.
        """
        resolved_type = ArtifactType.parse(artifact_type)
        key = (context, resolved_type, name)
        return self._cache.get_or_compute(
            key, lambda: self._resolve_uncached(context, resolved_type, name)
        )

    def _resolve_uncached(
        self, context: ScopeContext, artifact_type: ArtifactType, name: str
    ) -> ResolutionResult:
        searched: list[Path] = []
        for path in candidate_paths(context, artifact_type, name, self.config.naming):
            searched.append(path)
            if not self._fs.exists(path):
                continue
            content = self._fs.read_text(path)
            metadata = extract_metadata(content, artifact_type, size=self._fs.size(path))
            logger.debug("Resolved %s:%s -> %s", artifact_type.value, name, path)
            return ResolutionResult(
                type=artifact_type,
                name=name,
                found=True,
                resolved_path=path,
                raw_content=content,
                metadata=metadata,
                searched_paths=tuple(searched),
            )

        logger.debug(
            "Could not resolve %s:%s after %d paths", artifact_type.value, name, len(searched)
        )
        return ResolutionResult(
            type=artifact_type,
            name=name,
            found=False,
            searched_paths=tuple(searched),
            suggestions=tuple(self._suggest_from_searched(context, artifact_type, name, searched)),
        )

    def _suggest_from_searched(
        self,
        context: ScopeContext,
        artifact_type: ArtifactType,
        name: str,
        searched: list[Path],
    ) -> list[Suggestion]:
        directories: list[Path] = []
        for path in searched:
            if path.parent not in directories:
                directories.append(path.parent)

        candidates: list[tuple[str, Path]] = []
        for directory in directories:
            if self._fs.is_dir(directory):
                candidates.extend((f, directory) for f in self._fs.list_files(directory))

        ranked = rank_candidates(
            name,
            candidates,
            limit=self.config.suggestions.limit,
            min_confidence=self.config.suggestions.min_confidence,
        )
        fallback = create_new_suggestion(
            artifact_type, name, context.own.directory_for(artifact_type)
        )
        return [*ranked, fallback]

    def suggest(
        self,
        artifact_type: ArtifactType | str,
        name: str,
        candidate_files: list[str],
        directory: Path | None = None,
    ) -> list[Suggestion]:
        """Rank *candidate_files* as replacements for a missing *name*.

        Uses the configured limit and similarity floor. The create-new
        fallback is always the last element.
        """
        return suggest(
            ArtifactType.parse(artifact_type),
            name,
            candidate_files,
            directory,
            limit=self.config.suggestions.limit,
            min_confidence=self.config.suggestions.min_confidence,
        )

    def resolve_many(
        self, context: ScopeContext, references: list[ArtifactReference]
    ) -> list[ResolutionResult]:
        """Resolve several references, in parallel when configured.

        Results come back in the order of *references*. Each reference
        keeps its own path-walk order regardless of parallelism.
        """
        workers = self.config.max_workers
        if workers <= 1 or len(references) <= 1:
            return [self.resolve(context, ref.type, ref.name) for ref in references]
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(
                executor.map(lambda ref: self.resolve(context, ref.type, ref.name), references)
            )

    # -- Whole-agent scans --

    def scan_dependencies(self, agent: AgentDefinition) -> ResolutionReport:
        """Resolve every declared and implicit dependency of *agent*.

        Declared references come first, then the agent's extension
        manifest (references already declared are not repeated). Resolved
        artifacts are then expanded transitively up to ``max_depth``
        levels to build the dependency graph, which is checked for cycles.

        Args:
            agent: The parsed agent definition.

        Returns:
            A complete ``ResolutionReport``; missing dependencies, cycles
            and ambiguous references are recorded on it.
        """
        report = ResolutionReport(agent_id=agent.agent_id)
        context = self.context_for(agent.extension)

        for type_key, name in agent.skipped:
            report.skipped.append((type_key, name))
            report.warnings.append(f"Skipped '{name}': unknown dependency type '{type_key}'")

        declared = list(agent.dependencies)
        seen = {(ref.type, canonical_stem(ref.name)) for ref in declared}
        implicit: list[ArtifactReference] = []
        for ref in self._manifests.references_for(agent.extension):
            key = (ref.type, canonical_stem(ref.name))
            if key not in seen:
                seen.add(key)
                implicit.append(ref)

        references = declared + implicit
        implicit_start = len(declared)
        results = self.resolve_many(context, references)

        graph = DependencyGraph()
        graph.add_node(agent.agent_id)
        for index, (ref, result) in enumerate(zip(references, results)):
            if result.found:
                report.resolved.setdefault(ref.type, {})[ref.name] = result
                graph.add_edge(agent.agent_id, artifact_node(ref.type, ref.name))
                continue
            is_implicit = index >= implicit_start
            report.missing.setdefault(ref.type, []).append(
                MissingDependency(
                    name=ref.name,
                    searched_paths=result.searched_paths,
                    suggestions=result.suggestions,
                    implicit=is_implicit,
                )
            )
            kind = "implicit " if is_implicit else ""
            report.errors.append(
                f"Missing {kind}{ref.type.value} '{ref.name}' "
                f"({len(result.searched_paths)} paths searched)"
            )
            logger.warning("Agent %s: missing %s %s", agent.agent_id, ref.type.value, ref.name)

        self._expand(context, [r for r in results if r.found], graph, report)

        for cycle in graph.detect_cycles(agent.agent_id):
            warning = CycleWarning(tuple(cycle))
            report.cycles.append(warning)
            report.warnings.append(f"Circular dependency: {warning}")
            logger.warning("Agent %s: circular dependency %s", agent.agent_id, warning)

        with self._graph_lock:
            for node in graph.nodes:
                self._graph.add_node(node)
                for child in graph.successors(node):
                    self._graph.add_edge(node, child)

        stats = report.statistics()
        logger.info(
            "Agent %s: %d/%d dependencies resolved, %d cycles",
            agent.agent_id,
            stats["resolved"],
            stats["total"],
            stats["cycles"],
        )
        return report

    def _expand(
        self,
        context: ScopeContext,
        roots: list[ResolutionResult],
        graph: DependencyGraph,
        report: ResolutionReport,
    ) -> None:
        """Follow sub-dependencies level by level, adding graph edges."""
        expanded = {(r.type, canonical_stem(r.name)) for r in roots}
        level = roots
        depth = 0
        while level and depth < self.config.max_depth:
            pending: list[ArtifactReference] = []
            for parent in level:
                if parent.metadata is None:
                    continue
                for first, second in parent.metadata.ambiguous_references:
                    report.warnings.append(
                        f"Ambiguous references in {parent.name}: "
                        f"'{first}' and '{second}' name the same artifact"
                    )
                parent_id = artifact_node(parent.type, parent.name)
                for dependency in parent.metadata.dependencies:
                    ref = sub_reference(dependency, parent.type)
                    stem = canonical_stem(ref.name)
                    if not stem:
                        continue
                    graph.add_edge(parent_id, artifact_node(ref.type, stem))
                    key = (ref.type, stem)
                    if key not in expanded:
                        expanded.add(key)
                        pending.append(ref)
            level = [r for r in self.resolve_many(context, pending) if r.found]
            depth += 1

    # -- Introspection --

    def get_cache_statistics(self) -> CacheStatistics:
        with self._graph_lock:
            graph_size = self._graph.node_count
        return CacheStatistics(
            size=len(self._cache),
            hits=self._cache.hits,
            misses=self._cache.misses,
            graph_size=graph_size,
        )

    def clear_cache(self) -> None:
        """Drop every cached result and the accumulated dependency graph."""
        self._cache.clear()
        with self._graph_lock:
            self._graph.clear()


def sub_reference(dependency: str, parent_type: ArtifactType) -> ArtifactReference:
    """Infer the type of a sub-dependency named inside an artifact.

    An explicit ``type/`` or ``directory/`` prefix wins, then a type-unique
    extension, then the referencing artifact's own type.
    """
    pure = PurePosixPath(dependency.strip().replace("\\", "/"))
    if len(pure.parts) > 1:
        try:
            return ArtifactReference(ArtifactType.parse(pure.parts[-2]), pure.name)
        except UnknownArtifactTypeError:
            pass
    by_extension = ArtifactType.from_extension(pure.suffix) if pure.suffix else None
    return ArtifactReference(by_extension or parent_type, pure.name)
