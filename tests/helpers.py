"""Shared test helpers for building artifact trees and counting filesystem calls."""

from __future__ import annotations

from collections import Counter
from pathlib import Path

from agentport.core.artifacts import LocalFileSystem
from agentport.exceptions import ArtifactIOError


def write_file(path: Path, text: str = "") -> Path:
    """Write *text* to *path*, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def agent_markdown(agent_id: str, dependencies: dict[str, list[str]]) -> str:
    """Render an agent definition file with a fenced YAML block."""
    lines = [
        f"# {agent_id}",
        "",
        "```yaml",
        "agent:",
        f"  id: {agent_id}",
        f"  name: {agent_id.title()}",
        "commands:",
        "  - help: Show commands",
        "dependencies:",
    ]
    for type_key, names in dependencies.items():
        lines.append(f"  {type_key}:")
        lines.extend(f"    - {name}" for name in names)
    lines.append("```")
    return "\n".join(lines) + "\n"


class CountingFileSystem(LocalFileSystem):
    """``LocalFileSystem`` that counts every call, per method."""

    def __init__(self) -> None:
        self.calls: Counter[str] = Counter()

    def exists(self, path: Path) -> bool:
        self.calls["exists"] += 1
        return super().exists(path)

    def is_dir(self, path: Path) -> bool:
        self.calls["is_dir"] += 1
        return super().is_dir(path)

    def read_text(self, path: Path) -> str:
        self.calls["read_text"] += 1
        return super().read_text(path)

    def list_files(self, path: Path) -> list[str]:
        self.calls["list_files"] += 1
        return super().list_files(path)

    @property
    def total(self) -> int:
        return sum(self.calls.values())


class DeniedReadFileSystem(LocalFileSystem):
    """``LocalFileSystem`` whose reads fail as if permission were denied."""

    def __init__(self) -> None:
        self.reads = 0

    def read_text(self, path: Path) -> str:
        self.reads += 1
        raise ArtifactIOError(path, PermissionError(13, "Permission denied"))
