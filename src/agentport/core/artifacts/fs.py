"""Read-only filesystem seam used by the artifact resolver.

Every existence check, directory listing and file read performed during
resolution goes through a ``FileSystem`` object. Tests substitute a
counting or in-memory implementation; production code uses
``LocalFileSystem``.

Only genuine I/O faults escape as ``ArtifactIOError``. A missing path is
reported as ``False`` / empty, never raised.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from agentport.exceptions import ArtifactIOError

logger = logging.getLogger(__name__)


class FileSystem(ABC):
    """Minimal read-only view of a filesystem."""

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Return True if *path* exists as a regular file."""

    @abstractmethod
    def is_dir(self, path: Path) -> bool:
        """Return True if *path* exists as a directory."""

    @abstractmethod
    def read_text(self, path: Path) -> str:
        """Return the UTF-8 text of *path*."""

    @abstractmethod
    def list_files(self, path: Path) -> list[str]:
        """Return the sorted names of regular files directly under *path*."""

    def size(self, path: Path) -> int:
        """Return the byte size of *path* (0 when unknown)."""
        return len(self.read_text(path).encode("utf-8"))


class LocalFileSystem(FileSystem):
    """``FileSystem`` backed by ``pathlib``."""

    def exists(self, path: Path) -> bool:
        try:
            return path.is_file()
        except PermissionError as exc:
            raise ArtifactIOError(path, exc) from exc

    def is_dir(self, path: Path) -> bool:
        try:
            return path.is_dir()
        except PermissionError as exc:
            raise ArtifactIOError(path, exc) from exc

    def read_text(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ArtifactIOError(path, OSError(str(exc))) from exc
        except OSError as exc:
            raise ArtifactIOError(path, exc) from exc

    def list_files(self, path: Path) -> list[str]:
        try:
            return sorted(entry.name for entry in path.iterdir() if entry.is_file())
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise ArtifactIOError(path, exc) from exc

    def size(self, path: Path) -> int:
        try:
            return path.stat().st_size
        except OSError as exc:
            raise ArtifactIOError(path, exc) from exc
