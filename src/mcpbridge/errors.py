"""Error types shared across the bridge sync package.

Malformed catalog categories are tolerated (skipped) rather than raised, so
there is no catalog validation error here.
"""

from __future__ import annotations

from typing import Optional


class BridgeError(Exception):
    """Base class for errors surfaced by sync operations."""
    pass


class TransportError(BridgeError):
    """Network failure or non-2xx response from the MCP bridge."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ToolInvocationError(TransportError):
    """A generated tool stub received a non-success response."""

    def __init__(self, status_code: int, reason: str):
        super().__init__(reason or f"HTTP {status_code}", status_code=status_code)
        self.reason = reason


class PersistenceError(BridgeError):
    """The key-value store could not be read or written."""
    pass
