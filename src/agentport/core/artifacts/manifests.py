"""Implicit dependency manifests of extension scopes.

Some extensions ship artifacts that every one of their agents relies on
without declaring them. A manifest lists those artifacts per type; they
are resolved in addition to an agent's declared dependencies and reported
with ``implicit=True`` when missing.
"""

from __future__ import annotations

from agentport.core.artifacts.types import ArtifactReference, ArtifactType

# Keyed by scope directory name, as written in the extensions themselves.
BUILTIN_MANIFESTS: dict[str, dict[str, list[str]]] = {
    "bmad-2d-phaser-game-dev": {
        "templates": ["game-architecture-tmpl.yaml", "game-design-doc-tmpl.yaml"],
        "tasks": ["create-game-story.md", "game-design-brainstorming.md"],
        "checklists": ["game-design-checklist.md", "game-story-dod-checklist.md"],
        "data": ["development-guidelines.md"],
    },
    "bmad-2d-unity-game-dev": {
        "templates": ["game-architecture-tmpl.yaml", "game-design-doc-tmpl.yaml"],
        "tasks": ["create-game-story.md", "game-design-brainstorming.md"],
        "checklists": ["game-architect-checklist.md", "game-design-checklist.md"],
        "data": ["development-guidelines.md"],
    },
    "bmad-infrastructure-devops": {
        "templates": ["infrastructure-architecture-tmpl.yaml"],
        "tasks": ["review-infrastructure.md", "validate-infrastructure.md"],
        "checklists": ["infrastructure-checklist.md"],
        "data": ["bmad-kb.md"],
    },
}


class ManifestRegistry:
    """Extension name -> implicit artifact references.

    Args:
        manifests: Extra manifests merged over the built-in ones. Type keys
            may be type names or directory names.
        include_builtin: Whether to start from ``BUILTIN_MANIFESTS``.

    Raises:
        UnknownArtifactTypeError: If a manifest uses an unknown type key.
    """

    def __init__(
        self,
        manifests: dict[str, dict[str, list[str]]] | None = None,
        *,
        include_builtin: bool = True,
    ) -> None:
        self._manifests: dict[str, list[ArtifactReference]] = {}
        if include_builtin:
            for name, manifest in BUILTIN_MANIFESTS.items():
                self.register(name, manifest)
        for name, manifest in (manifests or {}).items():
            self.register(name, manifest)

    def register(self, extension: str, manifest: dict[str, list[str]]) -> None:
        """Register (or replace) the manifest of *extension*."""
        references: list[ArtifactReference] = []
        for type_key, names in manifest.items():
            artifact_type = ArtifactType.parse(type_key)
            references.extend(ArtifactReference(artifact_type, name) for name in names)
        self._manifests[extension] = references

    def references_for(self, extension: str | None) -> list[ArtifactReference]:
        """Return the implicit references of *extension* (empty if unknown)."""
        if extension is None:
            return []
        return list(self._manifests.get(extension, ()))

    def __contains__(self, extension: str) -> bool:
        return extension in self._manifests

    @property
    def extensions(self) -> list[str]:
        return sorted(self._manifests)
