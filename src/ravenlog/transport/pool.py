"""
Fixed-capacity pool of transport handles.

The pool is the client's only backpressure mechanism: when every handle is
checked out, :meth:`TransportPool.try_acquire` returns ``None`` immediately and
the caller drops the event. The pool never blocks and never grows.

Invariant: ``idle + in_flight == capacity`` at all times. Handles are created
eagerly in ``__init__`` and never created or destroyed afterwards.
"""

from __future__ import annotations

import threading
from collections import deque

from .handle import TransportHandle

DEFAULT_CAPACITY = 16


class TransportPool:
    """Mutex-guarded idle set of :class:`TransportHandle` objects."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"Pool capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._lock = threading.Lock()
        self._idle: deque[TransportHandle] = deque(TransportHandle(i) for i in range(capacity))
        self._in_flight: set[int] = set()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def idle(self) -> int:
        """Number of handles currently available."""
        with self._lock:
            return len(self._idle)

    @property
    def in_flight(self) -> int:
        """Number of handles currently checked out."""
        with self._lock:
            return len(self._in_flight)

    def try_acquire(self) -> TransportHandle | None:
        """Check out an idle handle, or return ``None`` if there is none."""
        with self._lock:
            if not self._idle:
                return None
            handle = self._idle.popleft()
            self._in_flight.add(id(handle))
            return handle

    def release(self, handle: TransportHandle) -> None:
        """Return ``handle`` to the idle set.

        Raises
        ------
        ValueError
            If ``handle`` is not currently checked out of this pool (double
            release or a foreign handle), which would break the size invariant.
        """
        with self._lock:
            if id(handle) not in self._in_flight:
                raise ValueError(f"{handle!r} is not checked out of this pool")
            self._in_flight.discard(id(handle))
            self._idle.append(handle)


__all__ = ["DEFAULT_CAPACITY", "TransportPool"]
