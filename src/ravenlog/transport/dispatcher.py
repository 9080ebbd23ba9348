"""
Event dispatcher: encode, authenticate, acquire a handle, send asynchronously.

Per-send state machine
----------------------
``Built -> Encoded -> (Dropped | Dispatched) -> Completed``

- **Dropped** (terminal): encoding failed, or the pool had no idle handle.
  Nothing is raised; the drop is only visible in :class:`DispatchStats` and
  in DEBUG/ERROR diagnostics.
- **Dispatched**: the POST runs on a worker thread. ``send()`` has already
  returned a :class:`~concurrent.futures.Future` to the caller.
- **Completed** (terminal): the request finished (any status), failed, or
  timed out. The handle is released in a ``finally`` block on every path.

There is no retry transition and no cancellation.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, fields
from datetime import UTC, datetime
from typing import Any

from ravenlog import CLIENT_NAME
from ravenlog.core.contracts.credentials import Credentials
from ravenlog.core.contracts.event import EventRecord
from ravenlog.core.errors import TransportError
from ravenlog.core.settings import DEFAULT_TIMEOUT_SECONDS, get_logger
from ravenlog.wire.auth import build_auth_header
from ravenlog.wire.encoder import serialize, to_wire

from .handle import TransportHandle
from .pool import DEFAULT_CAPACITY, TransportPool

Scrubber = Callable[[dict[str, Any]], dict[str, Any]]
Clock = Callable[[], datetime]

log = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class DispatchStats:
    """Point-in-time delivery counters.

    Attributes
    ----------
    dispatched : int
        Sends handed to a worker thread.
    dropped : int
        Events abandoned because the pool had no idle handle.
    rejected : int
        Events abandoned because they could not be encoded.
    delivered : int
        Requests answered with a 2xx status.
    refused : int
        Requests answered with any other status.
    failed : int
        Requests that raised a transport error (including timeouts).
    """

    dispatched: int = 0
    dropped: int = 0
    rejected: int = 0
    delivered: int = 0
    refused: int = 0
    failed: int = 0


class Dispatcher:
    """Fire-and-forget sender bounded by a :class:`TransportPool`."""

    def __init__(
        self,
        credentials: Credentials,
        *,
        pool: TransportPool | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        scrubber: Scrubber | None = None,
        client: str = CLIENT_NAME,
        clock: Clock = _utcnow,
    ) -> None:
        self.credentials = credentials
        self.pool = pool if pool is not None else TransportPool(DEFAULT_CAPACITY)
        self.timeout_seconds = timeout_seconds
        self.scrubber = scrubber
        self.client = client
        self._clock = clock

        # One worker per handle: the pool already bounds concurrency, so the
        # executor queue never holds more than `capacity` pending sends.
        self._executor = ThreadPoolExecutor(
            max_workers=self.pool.capacity,
            thread_name_prefix="ravenlog-send",
        )
        self._counts_lock = threading.Lock()
        self._counts: dict[str, int] = {f.name: 0 for f in fields(DispatchStats)}

    # --------------------------------------------------------------------- #
    # Public API
    # --------------------------------------------------------------------- #
    def send(self, record: EventRecord) -> Future[int | None] | None:
        """Dispatch ``record`` without blocking.

        Returns
        -------
        Future | None
            A future resolving to the HTTP status code (or ``None`` when the
            transport failed), or ``None`` if the event was dropped.
        """
        try:
            body = self._encode(record)
        except Exception:
            log.exception("Dropping event %s: encoding failed", record.event_id)
            self._bump("rejected")
            return None

        headers = self.headers()

        handle = self.pool.try_acquire()
        if handle is None:
            log.debug("Dropping event %s: all transport handles are busy", record.event_id)
            self._bump("dropped")
            return None

        try:
            future = self._executor.submit(self._deliver, handle, record.event_id, body, headers)
        except RuntimeError:
            # Executor already shut down.
            self.pool.release(handle)
            log.debug("Dropping event %s: dispatcher is closed", record.event_id)
            self._bump("dropped")
            return None

        self._bump("dispatched")
        return future

    def headers(self) -> dict[str, str]:
        """Build the request headers for one send (fresh dict every call)."""
        auth = build_auth_header(
            self.credentials.public_key,
            self.credentials.private_key,
            self._clock(),
            client=self.client,
        )
        return {
            "Content-Type": "application/json",
            "User-Agent": self.client,
            "X-Sentry-Auth": auth,
        }

    def stats(self) -> DispatchStats:
        """Return a snapshot of the delivery counters."""
        with self._counts_lock:
            return DispatchStats(**self._counts)

    def close(self, wait: bool = True) -> None:
        """Stop accepting sends; optionally wait for in-flight ones to finish."""
        self._executor.shutdown(wait=wait)

    # --------------------------------------------------------------------- #
    # Internals
    # --------------------------------------------------------------------- #
    def _encode(self, record: EventRecord) -> bytes:
        payload = to_wire(record)
        if self.scrubber is not None:
            payload = self.scrubber(payload)
        return serialize(payload)

    def _deliver(
        self,
        handle: TransportHandle,
        event_id: str,
        body: bytes,
        headers: Mapping[str, str],
    ) -> int | None:
        try:
            status = handle.post(
                self.credentials.ingestion_uri,
                body,
                headers,
                timeout=self.timeout_seconds,
            )
        except TransportError as exc:
            log.warning("Failed to send event %s: %s", event_id, exc)
            self._bump("failed")
            return None
        except Exception:
            log.exception("Unexpected error while sending event %s", event_id)
            self._bump("failed")
            return None
        finally:
            self.pool.release(handle)

        if 200 <= status < 300:
            log.debug("Event %s accepted (HTTP %d)", event_id, status)
            self._bump("delivered")
        else:
            log.warning("Event %s refused by ingestion endpoint (HTTP %d)", event_id, status)
            self._bump("refused")
        return status

    def _bump(self, counter: str) -> None:
        with self._counts_lock:
            self._counts[counter] += 1


__all__ = ["Clock", "DispatchStats", "Dispatcher", "Scrubber"]
