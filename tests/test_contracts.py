"""Contract tests for EventRecord and its parts.

Guarantees checked here:
1) `event_id` is a fresh 32-char lowercase hex string per record and cannot
   be reassigned.
2) `timestamp` is UTC, set at construction and frozen.
3) `level` defaults to `error` and assignments are validated.
4) Frames are immutable.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from ravenlog.core.contracts.credentials import Credentials
from ravenlog.core.contracts.event import EventRecord, ExceptionDescriptor, Level
from ravenlog.core.contracts.frame import StackFrame, StackTrace

HEX32 = re.compile(r"^[0-9a-f]{32}$")


def test_event_id_is_unique_hex() -> None:
    """Each record gets its own uuid4 hex id without hyphens."""
    ids = {EventRecord().event_id for _ in range(50)}
    assert len(ids) == 50
    assert all(HEX32.match(i) for i in ids)


def test_event_id_and_timestamp_are_frozen() -> None:
    """Identity and creation time cannot be changed after construction."""
    record = EventRecord(message="boom")
    with pytest.raises(ValidationError):
        record.event_id = "0" * 32
    with pytest.raises(ValidationError):
        record.timestamp = datetime(2000, 1, 1, tzinfo=UTC)


def test_timestamp_is_utc_and_untouched_by_later_edits() -> None:
    """Mutating other fields never moves the timestamp."""
    before = datetime.now(UTC)
    record = EventRecord()
    after = datetime.now(UTC)

    assert record.timestamp.tzinfo is not None
    assert before - timedelta(seconds=1) <= record.timestamp <= after + timedelta(seconds=1)

    stamp = record.timestamp
    record.logger = "game.ui"
    record.tags = {"scene": "menu"}
    record.level = Level.FATAL
    assert record.timestamp == stamp


def test_level_defaults_to_error_and_validates_assignment() -> None:
    """`level` is never unset; unknown values are rejected, names are coerced."""
    record = EventRecord()
    assert record.level is Level.ERROR

    record.level = "warning"  # type: ignore[assignment]
    assert record.level is Level.WARNING

    with pytest.raises(ValidationError):
        record.level = "catastrophic"  # type: ignore[assignment]


def test_defaults_match_wire_expectations() -> None:
    """Defaults: root logger, no tags, no exception, no trace."""
    record = EventRecord()
    assert record.logger == "root"
    assert record.platform == "csharp"
    assert record.tags == {}
    assert record.exception is None
    assert record.stacktrace is None


def test_stack_frame_is_immutable() -> None:
    frame = StackFrame(filename="A.cs", function="A.a ()", lineno=1)
    with pytest.raises(ValidationError):
        frame.lineno = 2


def test_unparsed_sentinel_frame() -> None:
    frame = StackFrame.unparsed("native frame 0x1234")
    assert frame.is_unparsed
    assert frame.filename == "unknown"
    assert frame.lineno == -1
    assert frame.function == "native frame 0x1234"


def test_stack_trace_truthiness_follows_frames() -> None:
    assert not StackTrace()
    assert StackTrace(frames=[StackFrame(filename="a.cs", function="f", lineno=1)])


def test_exception_descriptor_module_is_optional() -> None:
    desc = ExceptionDescriptor(type="DivideByZeroException", value="Division by zero")
    assert desc.module is None


def test_credentials_reject_empty_fields() -> None:
    with pytest.raises(ValidationError):
        Credentials(ingestion_uri="", public_key="p", private_key="s", project_id="1")
