"""Pydantic contracts for ravenlog events, frames and credentials."""

from __future__ import annotations

from .credentials import Credentials
from .event import EventRecord, ExceptionDescriptor, Level
from .frame import UNKNOWN_FILENAME, UNPARSED_LINENO, StackFrame, StackTrace

__all__ = [
    "Credentials",
    "EventRecord",
    "ExceptionDescriptor",
    "Level",
    "StackFrame",
    "StackTrace",
    "UNKNOWN_FILENAME",
    "UNPARSED_LINENO",
]
