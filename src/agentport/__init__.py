"""agentport: dependency and steering-rule resolution for agent conversion."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
