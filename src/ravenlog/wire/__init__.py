from __future__ import annotations

from .auth import SENTRY_PROTOCOL_VERSION, build_auth_header
from .encoder import encode, serialize, to_wire

__all__ = ["SENTRY_PROTOCOL_VERSION", "build_auth_header", "encode", "serialize", "to_wire"]
