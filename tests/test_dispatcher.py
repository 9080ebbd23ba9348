"""Tests for the dispatcher: request shape, drop policy and handle recycling.

No network I/O happens here: `TransportHandle._open` is the single seam that
talks to the network, and every test patches it at class level.
"""

from __future__ import annotations

import json
import threading
import urllib.error
import urllib.request
from datetime import UTC, datetime
from typing import Any

import pytest

from ravenlog import CLIENT_NAME
from ravenlog.core.contracts.credentials import Credentials
from ravenlog.core.contracts.event import EventRecord
from ravenlog.transport.dispatcher import DispatchStats, Dispatcher
from ravenlog.transport.handle import TransportHandle
from ravenlog.transport.pool import TransportPool

CREDS = Credentials(
    ingestion_uri="https://sentry.example.com/api/79295/store/",
    public_key="pub",
    private_key="priv",
    project_id="79295",
)
FIXED_NOW = datetime(2024, 1, 1, tzinfo=UTC)


@pytest.fixture  # type: ignore[misc]
def captured(monkeypatch: Any) -> list[dict[str, Any]]:
    """Patch the network seam with a fake that records requests and returns 200."""
    calls: list[dict[str, Any]] = []

    def fake_open(self: TransportHandle, request: urllib.request.Request, *, timeout: float) -> int:
        calls.append(
            {
                "url": request.full_url,
                "method": request.get_method(),
                "headers": dict(request.header_items()),
                "body": request.data,
                "timeout": timeout,
            }
        )
        return 200

    monkeypatch.setattr(TransportHandle, "_open", fake_open)
    return calls


def _dispatcher(capacity: int = 4, **kwargs: Any) -> Dispatcher:
    return Dispatcher(
        CREDS,
        pool=TransportPool(capacity),
        clock=lambda: FIXED_NOW,
        timeout_seconds=2.5,
        **kwargs,
    )


def test_send_posts_encoded_body_with_headers(captured: list[dict[str, Any]]) -> None:
    dispatcher = _dispatcher()
    record = EventRecord(project="79295", message="Division by zero")

    future = dispatcher.send(record)
    assert future is not None
    assert future.result(timeout=5) == 200
    dispatcher.close()

    assert len(captured) == 1
    call = captured[0]
    assert call["url"] == CREDS.ingestion_uri
    assert call["method"] == "POST"
    assert call["timeout"] == 2.5

    # urllib normalises header names with str.capitalize().
    headers = call["headers"]
    assert headers["Content-type"] == "application/json"
    assert headers["User-agent"] == CLIENT_NAME
    assert headers["X-sentry-auth"] == (
        "Sentry sentry_version=2.0, sentry_timestamp=1704067200, "
        f"sentry_key=pub, sentry_secret=priv, sentry_client={CLIENT_NAME}"
    )

    body = json.loads(call["body"])
    assert body["event_id"] == record.event_id
    assert body["message"] == "Division by zero"

    assert dispatcher.stats() == DispatchStats(dispatched=1, delivered=1)
    assert dispatcher.pool.idle == 4


def test_drop_when_pool_is_exhausted(monkeypatch: Any) -> None:
    """With every handle busy, send() returns None at once and takes nothing."""
    gate = threading.Event()
    started = threading.Semaphore(0)

    def blocking_open(
        self: TransportHandle, request: urllib.request.Request, *, timeout: float
    ) -> int:
        started.release()
        gate.wait(timeout=5)
        return 200

    monkeypatch.setattr(TransportHandle, "_open", blocking_open)
    dispatcher = _dispatcher(capacity=2)

    futures = [dispatcher.send(EventRecord()) for _ in range(2)]
    assert all(f is not None for f in futures)
    assert started.acquire(timeout=5) and started.acquire(timeout=5)

    assert dispatcher.send(EventRecord()) is None
    assert dispatcher.pool.in_flight == 2
    assert dispatcher.pool.idle == 0

    gate.set()
    for f in futures:
        assert f is not None
        assert f.result(timeout=5) == 200
    dispatcher.close()

    stats = dispatcher.stats()
    assert stats.dropped == 1
    assert stats.dispatched == 2
    assert dispatcher.pool.idle == 2


def test_handle_released_after_network_error(monkeypatch: Any) -> None:
    """Transport failures resolve to None and still return the handle."""

    def failing_open(
        self: TransportHandle, request: urllib.request.Request, *, timeout: float
    ) -> int:
        raise urllib.error.URLError("connection refused")

    monkeypatch.setattr(TransportHandle, "_open", failing_open)
    dispatcher = _dispatcher(capacity=1)

    for _ in range(3):
        future = dispatcher.send(EventRecord())
        assert future is not None
        assert future.result(timeout=5) is None

    dispatcher.close()
    assert dispatcher.stats().failed == 3
    assert dispatcher.pool.idle == 1


def test_handle_released_after_timeout(monkeypatch: Any) -> None:
    def timing_out(self: TransportHandle, request: urllib.request.Request, *, timeout: float) -> int:
        raise TimeoutError("timed out")

    monkeypatch.setattr(TransportHandle, "_open", timing_out)
    dispatcher = _dispatcher(capacity=1)
    future = dispatcher.send(EventRecord())
    assert future is not None
    assert future.result(timeout=5) is None
    dispatcher.close()
    assert dispatcher.pool.idle == 1


def test_handle_released_after_unexpected_error(monkeypatch: Any) -> None:
    def broken(self: TransportHandle, request: urllib.request.Request, *, timeout: float) -> int:
        raise KeyError("bug in transport")

    monkeypatch.setattr(TransportHandle, "_open", broken)
    dispatcher = _dispatcher(capacity=1)
    future = dispatcher.send(EventRecord())
    assert future is not None
    assert future.result(timeout=5) is None
    dispatcher.close()
    assert dispatcher.pool.idle == 1
    assert dispatcher.stats().failed == 1


def test_http_error_status_is_reported_not_raised(monkeypatch: Any) -> None:
    def refusing(self: TransportHandle, request: urllib.request.Request, *, timeout: float) -> int:
        raise urllib.error.HTTPError(request.full_url, 429, "Too Many Requests", {}, None)  # type: ignore[arg-type]

    monkeypatch.setattr(TransportHandle, "_open", refusing)
    dispatcher = _dispatcher(capacity=1)
    future = dispatcher.send(EventRecord())
    assert future is not None
    assert future.result(timeout=5) == 429
    dispatcher.close()

    stats = dispatcher.stats()
    assert stats.refused == 1
    assert stats.delivered == 0
    assert dispatcher.pool.idle == 1


def test_scrubber_rewrites_payload(captured: list[dict[str, Any]]) -> None:
    def scrub(payload: dict[str, Any]) -> dict[str, Any]:
        payload["message"] = "[redacted]"
        return payload

    dispatcher = _dispatcher(scrubber=scrub)
    future = dispatcher.send(EventRecord(message="password=hunter2"))
    assert future is not None
    future.result(timeout=5)
    dispatcher.close()

    assert json.loads(captured[0]["body"])["message"] == "[redacted]"


def test_encoding_failure_drops_without_taking_a_handle(captured: list[dict[str, Any]]) -> None:
    def bad_scrubber(payload: dict[str, Any]) -> dict[str, Any]:
        payload["oops"] = object()
        return payload

    dispatcher = _dispatcher(capacity=1, scrubber=bad_scrubber)
    assert dispatcher.send(EventRecord()) is None
    dispatcher.close()

    assert dispatcher.stats().rejected == 1
    assert dispatcher.pool.idle == 1
    assert captured == []


def test_send_after_close_is_dropped(captured: list[dict[str, Any]]) -> None:
    dispatcher = _dispatcher(capacity=1)
    dispatcher.close()

    assert dispatcher.send(EventRecord()) is None
    assert dispatcher.pool.idle == 1
    assert dispatcher.stats().dropped == 1


def test_headers_are_fresh_per_call() -> None:
    """Each call returns a new dict; mutating one does not leak into the next."""
    dispatcher = _dispatcher()
    first = dispatcher.headers()
    first["X-Sentry-Auth"] = "tampered"
    assert dispatcher.headers()["X-Sentry-Auth"].startswith("Sentry sentry_version=2.0")
    dispatcher.close()
