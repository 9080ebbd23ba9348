"""
Stack-trace text parser.

Turns an engine-style textual trace into a :class:`StackTrace`. Each line is
expected to look like::

    ExceptionGenerator.ThrowNestedB () (at Assets/Script/ExceptionGenerator.cs:26)

i.e. ``<function> (at <filename>.cs:<lineno>)``. Traces arrive innermost call
first; frames are produced outermost first, so lines are walked in reverse.

Lines that do not have that shape (native frames, ``UnityEngine.Debug:Log``
style lines, free text) become sentinel frames with ``lineno == -1`` and
``filename == "unknown"``. They are kept by default; pass
``keep_unparsed=False`` to drop them instead.

The parser is pure and total: it never raises on arbitrary input.
"""

from __future__ import annotations

import re
import traceback
from types import TracebackType

from ravenlog.core.contracts.frame import StackFrame, StackTrace
from ravenlog.core.errors import ParseError

# Either marker splits the line; empty pieces are discarded.
_SEGMENT_MARKERS = re.compile(r" \(at |\.cs:")
_SOURCE_SUFFIX = ".cs"
# Optional sign and ASCII digits only; surrounding whitespace is tolerated.
_LINENO = re.compile(r"\s*[+-]?[0-9]+\s*")


def parse_frame(line: str) -> StackFrame | None:
    """Parse a single trace line.

    Returns
    -------
    StackFrame | None
        The parsed frame, or ``None`` if the line does not split into exactly
        three non-empty segments.

    Raises
    ------
    ParseError
        If the line has the expected shape but the line-number segment is not
        a plain decimal integer.
    """
    parts = [p for p in _SEGMENT_MARKERS.split(line) if p]
    if len(parts) != 3:
        return None

    function, filename, lineno = parts
    digits = lineno.replace(")", "")
    if not _LINENO.fullmatch(digits):
        raise ParseError(line)
    number = int(digits)

    return StackFrame(filename=filename + _SOURCE_SUFFIX, function=function, lineno=number)


def parse(raw: str | None, *, keep_unparsed: bool = True) -> StackTrace:
    """Parse ``raw`` into a trace ordered outermost frame first.

    Parameters
    ----------
    raw:
        Multi-line trace text, innermost call on the first line. ``None`` and
        the empty string yield an empty trace.
    keep_unparsed:
        Append a sentinel frame for every line that cannot be parsed. When
        ``False`` such lines are skipped.
    """
    trace = StackTrace()
    if not raw:
        return trace

    lines = [line for line in raw.split("\n") if line]
    for line in reversed(lines):
        try:
            frame = parse_frame(line)
        except ParseError:
            frame = None

        if frame is None:
            if not keep_unparsed:
                continue
            frame = StackFrame.unparsed(line)
        trace.frames.append(frame)

    return trace


def from_traceback(tb: TracebackType | None) -> StackTrace:
    """Build a trace from a Python traceback object.

    ``traceback.extract_tb`` already yields frames outermost first, which is
    the stored order, so no reversal is needed.
    """
    trace = StackTrace()
    if tb is None:
        return trace

    for summary in traceback.extract_tb(tb):
        trace.frames.append(
            StackFrame(
                filename=summary.filename,
                function=summary.name,
                lineno=summary.lineno if summary.lineno is not None else -1,
            )
        )
    return trace


__all__ = ["parse", "parse_frame", "from_traceback"]
