"""EventRecord: the in-memory representation of one error event.

Contract notes
--------------
- ``event_id`` is a uuid4 rendered as 32 lowercase hex characters. It is
  assigned once at construction and cannot be reassigned.
- ``timestamp`` is the UTC construction instant, also frozen. Later edits to
  other fields (logger, tags, culprit...) never touch it.
- ``level`` always carries a concrete value and defaults to ``error``.
- ``project`` comes from the transport credentials, not from the caller.

Assignment is validated (``validate_assignment=True``) so that a client can
stamp its logger name onto the record right before dispatch without being able
to smuggle in an invalid level.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .frame import StackTrace

DEFAULT_LOGGER = "root"
DEFAULT_PLATFORM = "csharp"


class Level(str, Enum):
    """Event severity as understood by the ingestion endpoint."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


def _new_event_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ExceptionDescriptor(BaseModel):
    """Exception type, message (``value``) and optional module."""

    type: str = ""
    value: str = ""
    module: str | None = None


class EventRecord(BaseModel):
    """One captured error event, ready to be encoded for the wire."""

    model_config = ConfigDict(validate_assignment=True)

    event_id: str = Field(
        default_factory=_new_event_id,
        frozen=True,
        pattern=r"^[0-9a-f]{32}$",
        description="uuid4 hex without hyphens.",
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        frozen=True,
        description="UTC instant at which the record was built.",
    )
    project: str = ""
    culprit: str | None = None
    level: Level = Level.ERROR
    logger: str = DEFAULT_LOGGER
    platform: str = DEFAULT_PLATFORM
    message: str = ""
    tags: dict[str, str] = Field(default_factory=dict)
    exception: ExceptionDescriptor | None = None
    stacktrace: StackTrace | None = None


__all__ = [
    "DEFAULT_LOGGER",
    "DEFAULT_PLATFORM",
    "EventRecord",
    "ExceptionDescriptor",
    "Level",
]
