"""Core package for ravenlog: settings, errors, severity mapping and contracts.

Downstream code imports the concrete modules directly, e.g.:
    from ravenlog.core.settings import settings, load_settings, Settings, get_logger
"""

from __future__ import annotations

__all__ = ["__doc__"]
