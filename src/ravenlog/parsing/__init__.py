from __future__ import annotations

from .stacktrace import from_traceback, parse, parse_frame

__all__ = ["parse", "parse_frame", "from_traceback"]
