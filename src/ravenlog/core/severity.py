"""Host severity hints and their fixed mapping onto event levels.

The host boundary (a logging handler, an engine callback, ...) only has to
classify what it saw into a :class:`SeverityHint`; everything downstream works
with :class:`~ravenlog.core.contracts.event.Level`.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType

from .contracts.event import Level


class SeverityHint(str, Enum):
    """What kind of host message triggered the event."""

    ASSERT = "assert"
    ERROR = "error"
    EXCEPTION = "exception"
    WARNING = "warning"
    LOG = "log"

    @property
    def display_name(self) -> str:
        """Name used as the exception ``type`` for host-captured events."""
        return self.value.capitalize()


LEVEL_BY_HINT: Mapping[SeverityHint, Level] = MappingProxyType(
    {
        SeverityHint.ASSERT: Level.ERROR,
        SeverityHint.ERROR: Level.ERROR,
        SeverityHint.EXCEPTION: Level.ERROR,
        SeverityHint.WARNING: Level.WARNING,
        SeverityHint.LOG: Level.INFO,
    }
)


def coerce_hint(value: SeverityHint | str) -> SeverityHint:
    """Return ``value`` as a :class:`SeverityHint`.

    Strings are accepted case-insensitively (``"Warning"`` -> warning) so that
    the CLI and adapters can pass raw names through.

    Raises
    ------
    ValueError
        If ``value`` is not a known severity hint.
    """
    if isinstance(value, SeverityHint):
        return value
    return SeverityHint(value.strip().lower())


def level_for(hint: SeverityHint | str) -> Level:
    """Return the event level for ``hint`` using the fixed table."""
    return LEVEL_BY_HINT[coerce_hint(hint)]


__all__ = ["SeverityHint", "LEVEL_BY_HINT", "coerce_hint", "level_for"]
