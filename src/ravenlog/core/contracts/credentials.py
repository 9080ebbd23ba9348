"""Credentials: the four decoded fields of a DSN the core depends on.

Decoding a DSN string is the caller's business; the client only needs to know
where to POST and which keys to put into the ``X-Sentry-Auth`` header.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Credentials(BaseModel):
    """Ingestion address and authentication keys for one Sentry project."""

    model_config = ConfigDict(frozen=True)

    ingestion_uri: str = Field(min_length=1, description="Full store endpoint URL.")
    public_key: str = Field(min_length=1, description="DSN public key (sentry_key).")
    private_key: str = Field(min_length=1, description="DSN secret key (sentry_secret).")
    project_id: str = Field(min_length=1, description="Project identifier sent as `project`.")


__all__ = ["Credentials"]
