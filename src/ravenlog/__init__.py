"""ravenlog: best-effort error event reporting for Sentry-compatible endpoints.

The public surface is intentionally small:

- :class:`ravenlog.client.RavenClient` builds and dispatches events.
- :class:`ravenlog.logging_handler.RavenHandler` bridges the stdlib ``logging``
  module into the client.
"""

from __future__ import annotations

__all__ = ["__version__", "CLIENT_NAME"]
__version__ = "0.1.0"

#: Client identifier sent as ``User-Agent`` and ``sentry_client``.
CLIENT_NAME = f"ravenlog/{__version__}"
