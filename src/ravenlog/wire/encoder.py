"""
Wire encoder for event records (Sentry protocol v2.0 JSON).

Field presence and order
------------------------
Keys are emitted in a fixed order and optional values are *omitted*, never
written as ``null``:

1.  ``event_id``                      omit if empty
2.  ``project``                       omit if empty
3.  ``culprit``                       omit if empty
4.  ``level``                         always, lowercase level name
5.  ``timestamp``                     always, ``YYYY-MM-DDTHH:MM:SS`` (UTC)
6.  ``logger``                        omit if empty
7.  ``platform``                      omit if empty
8.  ``message``                       omit if empty
9.  ``tags``                          omit if empty, else ``[[key, value], ...]``
10. ``sentry.interfaces.Exception``   always an object; inner keys omit-if-empty
11. ``sentry.interfaces.Stacktrace``  omit if there are no frames

Frame line numbers are sent as decimal strings (``"57"``, not ``57``); the
ingestion side of this protocol version expects that.

Every call builds its own dict and string, so the encoder can be used from any
number of threads at once.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from ravenlog.core.contracts.event import EventRecord, ExceptionDescriptor
from ravenlog.core.contracts.frame import StackTrace
from ravenlog.core.errors import EncodeError

EXCEPTION_INTERFACE = "sentry.interfaces.Exception"
STACKTRACE_INTERFACE = "sentry.interfaces.Stacktrace"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _put(out: dict[str, Any], key: str, value: str | None) -> None:
    if value:
        out[key] = value


def format_timestamp(ts: datetime) -> str:
    """Render ``ts`` in UTC with second precision and no zone suffix."""
    if ts.tzinfo is not None:
        ts = ts.astimezone(UTC)
    return ts.strftime(TIMESTAMP_FORMAT)


def _exception_to_wire(exc: ExceptionDescriptor | None) -> dict[str, str]:
    out: dict[str, Any] = {}
    if exc is not None:
        _put(out, "type", exc.type)
        _put(out, "value", exc.value)
        _put(out, "module", exc.module)
    return out


def _stacktrace_to_wire(trace: StackTrace) -> dict[str, Any]:
    frames = []
    for frame in trace.frames:
        entry: dict[str, Any] = {}
        _put(entry, "filename", frame.filename)
        _put(entry, "function", frame.function)
        entry["lineno"] = str(frame.lineno)
        frames.append(entry)
    return {"frames": frames}


def to_wire(record: EventRecord) -> dict[str, Any]:
    """Return the ordered wire dict for ``record`` (no ``None`` values)."""
    out: dict[str, Any] = {}
    _put(out, "event_id", record.event_id)
    _put(out, "project", record.project)
    _put(out, "culprit", record.culprit)
    out["level"] = record.level.value
    out["timestamp"] = format_timestamp(record.timestamp)
    _put(out, "logger", record.logger)
    _put(out, "platform", record.platform)
    _put(out, "message", record.message)

    if record.tags:
        out["tags"] = [[key, value] for key, value in record.tags.items()]

    out[EXCEPTION_INTERFACE] = _exception_to_wire(record.exception)

    if record.stacktrace is not None and record.stacktrace.frames:
        out[STACKTRACE_INTERFACE] = _stacktrace_to_wire(record.stacktrace)

    return out


def serialize(payload: Mapping[str, Any]) -> bytes:
    """Dump a wire dict as compact UTF-8 JSON.

    Raises
    ------
    EncodeError
        If ``payload`` contains values JSON cannot represent (typically
        introduced by a scrubber).
    """
    try:
        text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise EncodeError(f"Event payload is not JSON serialisable: {exc}") from exc
    return text.encode("utf-8")


def encode(record: EventRecord) -> bytes:
    """Encode ``record`` to the JSON request body."""
    return serialize(to_wire(record))


__all__ = [
    "EXCEPTION_INTERFACE",
    "STACKTRACE_INTERFACE",
    "encode",
    "format_timestamp",
    "serialize",
    "to_wire",
]
