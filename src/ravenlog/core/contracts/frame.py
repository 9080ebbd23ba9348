"""StackFrame and StackTrace contracts.

A frame is one call site (file, function, line). Frames are immutable once
built. A trace is stored *outermost call first*: the last element is the
innermost (deepest) frame, which is the order the ingestion endpoint expects.

Unparseable lines are represented by a sentinel frame: ``lineno == -1``,
``filename == "unknown"`` and ``function`` holding the raw line text.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_FILENAME = "unknown"
UNPARSED_LINENO = -1


class StackFrame(BaseModel):
    """A single, immutable stack frame."""

    model_config = ConfigDict(frozen=True)

    filename: str
    function: str
    lineno: int

    @classmethod
    def unparsed(cls, line: str) -> StackFrame:
        """Build the sentinel frame used for a line that could not be parsed."""
        return cls(filename=UNKNOWN_FILENAME, function=line, lineno=UNPARSED_LINENO)

    @property
    def is_unparsed(self) -> bool:
        return self.lineno == UNPARSED_LINENO


class StackTrace(BaseModel):
    """Ordered frames, outermost call first. An empty trace is valid."""

    frames: list[StackFrame] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.frames)

    def __bool__(self) -> bool:
        return bool(self.frames)


__all__ = ["StackFrame", "StackTrace", "UNKNOWN_FILENAME", "UNPARSED_LINENO"]
