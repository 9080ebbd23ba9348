"""
Bridge from the stdlib ``logging`` module into :class:`RavenClient`.

This is the host adapter: it classifies each ``LogRecord`` into a
:class:`SeverityHint` and forwards it through the narrow capture interface.

Mapping
-------
- ERROR/CRITICAL with ``exc_info``  -> ``capture_exception`` (level error/fatal)
- ERROR/CRITICAL                    -> ``SeverityHint.ERROR`` (level error/fatal)
- WARNING                           -> ``SeverityHint.WARNING``
- anything lower                    -> ``SeverityHint.LOG``

Records emitted by ravenlog's own loggers are ignored so that a failing send
can never feed back into another send.
"""

from __future__ import annotations

import logging

from ravenlog.client import RavenClient
from ravenlog.core.contracts.event import Level
from ravenlog.core.severity import SeverityHint

_OWN_LOGGER_PREFIX = "ravenlog"


def hint_for_record(record: logging.LogRecord) -> SeverityHint:
    """Classify a log record into a severity hint."""
    if record.levelno >= logging.ERROR:
        has_exc = bool(record.exc_info) and record.exc_info[1] is not None
        return SeverityHint.EXCEPTION if has_exc else SeverityHint.ERROR
    if record.levelno >= logging.WARNING:
        return SeverityHint.WARNING
    return SeverityHint.LOG


class RavenHandler(logging.Handler):
    """``logging.Handler`` that reports records through a :class:`RavenClient`.

    The default threshold is ``logging.ERROR``, matching what an error tracker
    usually wants; lower it to ship warnings or plain logs too.
    """

    def __init__(self, client: RavenClient, level: int = logging.ERROR) -> None:
        super().__init__(level)
        self.client = client

    def emit(self, record: logging.LogRecord) -> None:
        if record.name.split(".", 1)[0] == _OWN_LOGGER_PREFIX:
            return
        try:
            message = record.getMessage()
            exc = record.exc_info[1] if record.exc_info else None
            fatal = record.levelno >= logging.CRITICAL
            if exc is not None:
                level = Level.FATAL if fatal else Level.ERROR
                self.client.capture_exception(
                    exc,
                    message=message,
                    level=level,
                    tags={"logger": record.name},
                )
                return

            self.client.capture_event(
                message,
                None,
                hint_for_record(record),
                level=Level.FATAL if fatal else None,
            )
        except Exception:
            self.handleError(record)


__all__ = ["RavenHandler", "hint_for_record"]
