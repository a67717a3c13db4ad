"""Shared fixtures for agentport tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.helpers import agent_markdown, write_file


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Create a framework tree with base, shared and one extension scope.

    Layout::

        bmad-core/tasks/create-story.md          (also in game-pack)
        bmad-core/tasks/create-epic.md
        bmad-core/templates/story-tmpl.yaml
        bmad-core/checklists/story-dod-checklist.md
        bmad-core/agents/dev.md
        common/utils/workflow-management.md
        expansion-packs/game-pack/tasks/create-story.md
        expansion-packs/game-pack/agents/designer.md
    """
    root = tmp_path / "project"
    write_file(
        root / "bmad-core" / "tasks" / "create-story.md",
        "# Create Story\n\n## Inputs\n\nRead the epic first.\n",
    )
    write_file(root / "bmad-core" / "tasks" / "create-epic.md", "# Create Epic\n")
    write_file(
        root / "bmad-core" / "templates" / "story-tmpl.yaml",
        "name: Story Template\nsections:\n  - id: summary\n",
    )
    write_file(
        root / "bmad-core" / "checklists" / "story-dod-checklist.md",
        "# Definition of Done\n\n- [ ] Tests pass\n- [x] Docs updated\n",
    )
    write_file(
        root / "common" / "utils" / "workflow-management.md",
        "# Workflow Management\n",
    )
    write_file(
        root / "expansion-packs" / "game-pack" / "tasks" / "create-story.md",
        "# Create Game Story\n",
    )
    write_file(
        root / "bmad-core" / "agents" / "dev.md",
        agent_markdown(
            "dev",
            {
                "tasks": ["create-story.md"],
                "templates": ["story-tmpl.yaml"],
                "checklists": ["story-dod-checklist.md"],
            },
        ),
    )
    write_file(
        root / "expansion-packs" / "game-pack" / "agents" / "designer.md",
        agent_markdown(
            "designer",
            {"tasks": ["create-story.md", "create-epic.md"], "utils": ["workflow-management.md"]},
        ),
    )
    return root


@pytest.fixture
def steering_dir(tmp_path: Path) -> Path:
    """Create a steering directory with a conflict-free precedence ladder."""
    directory = tmp_path / "steering"
    write_file(
        directory / "bmad-method.md",
        "---\ninclusion: always\n---\n## Code Style\n4 spaces\n\n## Testing\n- unit tests\n",
    )
    write_file(
        directory / "tech.md",
        "---\ninclusion: always\n---\n## Code Style\n2 spaces\n",
    )
    write_file(
        directory / "project-specific.md",
        "---\ninclusion: always\n---\n## Code Style\ntabs\n",
    )
    return directory
