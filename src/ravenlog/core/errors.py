"""ravenlog error hierarchy.

All ravenlog-specific errors inherit from RavenlogError for easy catching.
None of these ever escape into the host application through
``RavenClient.capture_*``; they exist for the inner seams and for callers that
use the building blocks directly.
"""

from __future__ import annotations


class RavenlogError(Exception):
    """Base error for all ravenlog operations."""


class ConfigError(RavenlogError):
    """Invalid or missing configuration (e.g. incomplete credentials)."""


class ParseError(RavenlogError, ValueError):
    """A stack-trace line whose line-number segment is not an integer."""

    def __init__(self, line: str) -> None:
        super().__init__(f"Invalid line number in stack frame: {line!r}")
        self.line = line


class EncodeError(RavenlogError):
    """An event record could not be serialized to the wire format."""


class TransportError(RavenlogError):
    """Network/IO failure while delivering one event."""


__all__ = ["RavenlogError", "ConfigError", "ParseError", "EncodeError", "TransportError"]
