"""Builder for the ``X-Sentry-Auth`` request header.

The header is rebuilt for every request from immutable inputs, so concurrent
senders never share a buffer.
"""

from __future__ import annotations

from datetime import UTC, datetime

from ravenlog import CLIENT_NAME

SENTRY_PROTOCOL_VERSION = "2.0"
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def unix_seconds(now: datetime) -> int:
    """Whole seconds since the epoch, truncated. Naive values are taken as UTC."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return int((now - _EPOCH).total_seconds())


def build_auth_header(
    public_key: str,
    private_key: str,
    now: datetime | None = None,
    *,
    client: str = CLIENT_NAME,
) -> str:
    """Return the ``X-Sentry-Auth`` header value.

    Example
    -------
    >>> build_auth_header("pub", "priv", datetime(2024, 1, 1, tzinfo=UTC), client="x/1")
    'Sentry sentry_version=2.0, sentry_timestamp=1704067200, sentry_key=pub, sentry_secret=priv, sentry_client=x/1'
    """
    timestamp = unix_seconds(now if now is not None else datetime.now(UTC))
    return ", ".join(
        (
            f"Sentry sentry_version={SENTRY_PROTOCOL_VERSION}",
            f"sentry_timestamp={timestamp}",
            f"sentry_key={public_key}",
            f"sentry_secret={private_key}",
            f"sentry_client={client}",
        )
    )


__all__ = ["SENTRY_PROTOCOL_VERSION", "build_auth_header", "unix_seconds"]
