"""agentport exception hierarchy.

All public exceptions inherit from AgentPortError, giving callers a single
base class to catch when they want to handle any agentport-specific failure
without swallowing unrelated errors.

Missing artifacts, rule conflicts, dependency cycles and invalid rule
documents are *not* exceptions: they are reported as data on the result
objects. Only genuine faults cross the API boundary.
"""

from __future__ import annotations

from pathlib import Path


class AgentPortError(Exception):
    """Base exception for all agentport errors."""


class ArtifactIOError(AgentPortError):
    """Raised when the filesystem itself fails underneath a lookup.

    Covers permission denied, disk errors and unreadable files. A path
    that simply does not exist is never reported this way; it is an
    ordinary unresolved lookup.

    Attributes:
        path: The path whose access failed.
    """

    def __init__(self, path: Path | str, cause: OSError) -> None:
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"I/O failure on {self.path}: {cause}")


class UnknownArtifactTypeError(AgentPortError, ValueError):
    """Raised when an artifact type string is not a recognized type."""


class RuleDocumentError(AgentPortError):
    """Raised by strict loaders when a rule document cannot be parsed.

    The default loading path records malformed documents as invalid
    instead of raising.
    """


class AgentDefinitionError(AgentPortError):
    """Raised when an agent definition file has no usable YAML block."""


class ConfigError(AgentPortError):
    """Raised for an unreadable or invalid configuration file."""
