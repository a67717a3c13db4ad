"""Artifact dependency graph and cycle detection.

Nodes are artifact identities, ``<type>:<stem>`` (see ``artifact_node``),
plus the agent id as the root. The type keeps a procedure and a checklist
sharing a stem apart. An edge ``u -> v`` means artifact ``u`` declares
``v`` as a sub-dependency. The graph is built incrementally while an agent's
dependencies are scanned and is used for cycle detection only.
"""

from __future__ import annotations

from collections import defaultdict, deque

from agentport.core.artifacts.scopes import canonical_stem
from agentport.core.artifacts.types import ArtifactType


def artifact_node(artifact_type: ArtifactType, name: str) -> str:
    """Return the graph identity of a reference: ``procedure:create-story``."""
    return f"{artifact_type.value}:{canonical_stem(name)}"


# ---------------------------------------------------------------------------
# DependencyGraph
# ---------------------------------------------------------------------------


class DependencyGraph:
    """Directed graph of artifact identities.

    Adding an edge implicitly adds both endpoints. Traversals never mutate
    the graph and keep all traversal state local, so several traversals
    may run over the same graph concurrently once it is built.

    Thread safety: building the graph is NOT thread-safe. External
    synchronization is required while edges are being added.
    """

    def __init__(self) -> None:
        self._edges: dict[str, set[str]] = defaultdict(set)

    @property
    def nodes(self) -> set[str]:
        """Return every node that appears in the graph."""
        found = set(self._edges)
        for targets in self._edges.values():
            found |= targets
        return found

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return sum(len(targets) for targets in self._edges.values())

    def add_node(self, node: str) -> None:
        self._edges.setdefault(node, set())

    def add_edge(self, source: str, target: str) -> None:
        """Record that *source* depends on *target*."""
        self._edges[source].add(target)
        self._edges.setdefault(target, set())

    def successors(self, node: str) -> list[str]:
        """Return the direct dependencies of *node*, sorted."""
        return sorted(self._edges.get(node, ()))

    def detect_cycles(self, root: str) -> list[list[str]]:
        """Detect circular dependencies reachable from *root*.

        Iterative depth-first traversal. Each stack entry carries the
        immutable path that led to it; when a node is reached that is
        already on its own path, the cycle is the path slice from that
        node's first occurrence through the current node, closed by the
        node itself. Children are visited in sorted order so the result
        is deterministic.

        Args:
            root: The node to start from (the agent id).

        Returns:
            Cycles as node lists whose first and last element are equal,
            e.g. ``["A", "B", "C", "A"]``. Empty if there are none.
        """
        cycles: list[list[str]] = []
        seen_cycles: set[tuple[str, ...]] = set()
        visited: set[str] = set()
        stack: list[tuple[str, tuple[str, ...]]] = [(root, ())]

        while stack:
            node, path = stack.pop()
            if node in path:
                cycle = path[path.index(node):] + (node,)
                if cycle not in seen_cycles:
                    seen_cycles.add(cycle)
                    cycles.append(list(cycle))
                continue
            if node in visited:
                continue
            visited.add(node)

            here = path + (node,)
            for child in reversed(self.successors(node)):
                stack.append((child, here))

        return cycles

    def transitive_dependencies(self, node: str) -> set[str]:
        """Return every node reachable from *node*, excluding *node* itself.

        Uses BFS over the dependency edges.
        """
        visited: set[str] = set()
        queue: deque[str] = deque([node])
        while queue:
            current = queue.popleft()
            for child in self._edges.get(current, ()):
                if child not in visited:
                    visited.add(child)
                    queue.append(child)
        visited.discard(node)
        return visited

    def clear(self) -> None:
        self._edges.clear()
