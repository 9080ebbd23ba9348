"""
RavenClient: the host-facing entry point.

The client turns host events into :class:`EventRecord` objects and hands them
to a :class:`Dispatcher`. Every ``capture_*`` call is best-effort: it returns
``None`` when the event was dropped and never lets an exception escape into
the host's control flow.

Usage
-----
    client = RavenClient.from_settings()
    client.capture_event("NullReferenceException: ...", raw_trace, SeverityHint.EXCEPTION)

    try:
        risky()
    except Exception as exc:
        client.capture_exception(exc, tags={"scene": "menu"})
"""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import Future
from types import TracebackType

from ravenlog.core.contracts.credentials import Credentials
from ravenlog.core.contracts.event import (
    DEFAULT_LOGGER,
    DEFAULT_PLATFORM,
    EventRecord,
    ExceptionDescriptor,
    Level,
)
from ravenlog.core.settings import (
    DEFAULT_POOL_CAPACITY,
    DEFAULT_TIMEOUT_SECONDS,
    Settings,
    get_logger,
    load_settings,
)
from ravenlog.core.severity import SeverityHint, coerce_hint, level_for
from ravenlog.parsing.stacktrace import from_traceback, parse
from ravenlog.transport.dispatcher import DispatchStats, Dispatcher, Scrubber
from ravenlog.transport.pool import TransportPool

log = get_logger(__name__)


class RavenClient:
    """Builds event records and dispatches them through a bounded pool.

    Parameters
    ----------
    credentials:
        Decoded DSN fields (ingestion URI, keys, project id).
    logger:
        Logger name stamped on every event at send time. Defaults to ``"root"``.
    platform:
        Platform literal sent with every event.
    pool_capacity:
        Maximum number of concurrent in-flight sends; extra events are dropped.
    timeout_seconds:
        Per-request network timeout.
    scrubber:
        Optional callable that receives the wire dict and returns a cleaned
        copy, used to strip sensitive data before serialization.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        logger: str = DEFAULT_LOGGER,
        platform: str = DEFAULT_PLATFORM,
        pool_capacity: int = DEFAULT_POOL_CAPACITY,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        scrubber: Scrubber | None = None,
    ) -> None:
        self.credentials = credentials
        self.logger = logger
        self.platform = platform
        self.dispatcher = Dispatcher(
            credentials,
            pool=TransportPool(pool_capacity),
            timeout_seconds=timeout_seconds,
            scrubber=scrubber,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, *, scrubber: Scrubber | None = None
    ) -> RavenClient:
        """Construct a client from :class:`Settings` (env / ``.env`` files).

        Raises
        ------
        ConfigError
            If the credentials are incomplete.
        """
        cfg = settings if settings is not None else load_settings()
        return cls(
            cfg.credentials(),
            logger=cfg.logger,
            platform=cfg.platform,
            pool_capacity=cfg.pool_capacity,
            timeout_seconds=cfg.timeout_seconds,
            scrubber=scrubber,
        )

    # --------------------------------------------------------------------- #
    # Event construction
    # --------------------------------------------------------------------- #
    def create_event(
        self,
        message: str,
        raw_trace: str | None,
        severity: SeverityHint | str = SeverityHint.ERROR,
        *,
        level: Level | None = None,
    ) -> EventRecord:
        """Build an event record from a host log message and its trace text.

        ``level`` overrides the level the severity table derives from the hint;
        the exception type still names the hint.
        """
        hint = coerce_hint(severity)
        return EventRecord(
            project=self.credentials.project_id,
            level=level if level is not None else level_for(hint),
            platform=self.platform,
            message=message,
            exception=ExceptionDescriptor(type=hint.display_name, value=message),
            stacktrace=parse(raw_trace),
        )

    def create_exception_event(
        self,
        exc: BaseException,
        *,
        message: str | None = None,
        level: Level = Level.ERROR,
        tags: Mapping[str, str] | None = None,
    ) -> EventRecord:
        """Build an event record from a Python exception and its traceback."""
        exc_type = type(exc)
        module = exc_type.__module__
        value = str(exc)
        return EventRecord(
            project=self.credentials.project_id,
            level=level,
            platform=self.platform,
            message=message or value or exc_type.__name__,
            tags=dict(tags or {}),
            exception=ExceptionDescriptor(
                type=exc_type.__name__,
                value=value,
                module=None if module == "builtins" else module,
            ),
            stacktrace=from_traceback(exc.__traceback__),
        )

    # --------------------------------------------------------------------- #
    # Capture API (never raises)
    # --------------------------------------------------------------------- #
    def capture_event(
        self,
        message: str,
        raw_trace: str | None = None,
        severity: SeverityHint | str = SeverityHint.ERROR,
        *,
        level: Level | None = None,
    ) -> Future[int | None] | None:
        """Build and send one event. Returns the send future, or None if dropped."""
        try:
            record = self.create_event(message, raw_trace, severity, level=level)
        except Exception:
            log.exception("Dropping host event: could not build event record")
            return None
        return self.send(record)

    def capture_exception(
        self,
        exc: BaseException,
        *,
        message: str | None = None,
        level: Level = Level.ERROR,
        tags: Mapping[str, str] | None = None,
    ) -> Future[int | None] | None:
        """Build and send one event describing ``exc``."""
        try:
            record = self.create_exception_event(exc, message=message, level=level, tags=tags)
        except Exception:
            log.exception("Dropping exception event: could not build event record")
            return None
        return self.send(record)

    def send(self, record: EventRecord) -> Future[int | None] | None:
        """Stamp this client's logger name onto ``record`` and dispatch it."""
        try:
            record.logger = self.logger
            return self.dispatcher.send(record)
        except Exception:
            log.exception("Dropping event %s: dispatch failed", record.event_id)
            return None

    # --------------------------------------------------------------------- #
    # Lifecycle
    # --------------------------------------------------------------------- #
    def stats(self) -> DispatchStats:
        return self.dispatcher.stats()

    def close(self, wait: bool = True) -> None:
        """Shut down the dispatcher; pending sends finish when ``wait`` is True."""
        self.dispatcher.close(wait=wait)

    def __enter__(self) -> RavenClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


__all__ = ["RavenClient"]
