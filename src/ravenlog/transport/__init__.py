from __future__ import annotations

from .dispatcher import DispatchStats, Dispatcher
from .handle import TransportHandle
from .pool import DEFAULT_CAPACITY, TransportPool

__all__ = [
    "DEFAULT_CAPACITY",
    "DispatchStats",
    "Dispatcher",
    "TransportHandle",
    "TransportPool",
]
