# -----------------------------------------------------------------------------
# A transport handle is one reusable "request slot". Each handle owns its own
# urllib opener, so handles never share connection state with each other.
#
# The implementation uses only the Python standard library (`urllib.request`).
# Unit tests are expected to *mock* the internal `_open()` method so that no
# real HTTP calls are made during CI.
# -----------------------------------------------------------------------------
from __future__ import annotations

import urllib.error
import urllib.request
from collections.abc import Mapping

from ravenlog.core.errors import TransportError


class TransportHandle:
    """A reusable HTTP POST resource checked out of a :class:`TransportPool`.

    Handles are created once by their pool and recycled forever; callers must
    not keep a reference after releasing one.
    """

    __slots__ = ("slot", "_opener")

    def __init__(self, slot: int) -> None:
        self.slot = slot
        self._opener = urllib.request.build_opener()

    def __repr__(self) -> str:  # pragma: no cover - trivial representation
        return f"TransportHandle(slot={self.slot})"

    def post(
        self,
        url: str,
        body: bytes,
        headers: Mapping[str, str],
        *,
        timeout: float,
    ) -> int:
        """POST ``body`` to ``url`` and return the HTTP status code.

        HTTP error statuses (4xx/5xx) are returned, not raised: the endpoint
        answered, and the caller only logs the outcome.

        ``timeout`` is handed to the socket layer, so it bounds each blocking
        connect, send and recv on its own. It does not cover DNS resolution,
        and a peer that keeps trickling bytes can hold the handle for longer
        than ``timeout`` in total.

        Raises
        ------
        TransportError
            If the request could not be completed (DNS, connection refused,
            TLS failure, timeout, ...).
        """
        request = urllib.request.Request(
            url=url,
            data=body,
            headers=dict(headers),
            method="POST",
        )
        try:
            return self._open(request, timeout=timeout)
        except urllib.error.HTTPError as exc:
            return exc.code
        except (urllib.error.URLError, OSError) as exc:
            raise TransportError(f"Event delivery to {url} failed: {exc}") from exc

    # --------------------------------------------------------------------- #
    # Internal helpers (test seams)
    # --------------------------------------------------------------------- #
    def _open(self, request: urllib.request.Request, *, timeout: float) -> int:
        """Send ``request`` and drain the response; the body is not inspected."""
        with self._opener.open(request, timeout=timeout) as resp:
            resp.read()
            return int(resp.status)


__all__ = ["TransportHandle"]
