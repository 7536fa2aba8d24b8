"""Common schemas used across services."""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Standard health check response.

    Services that report their identity fill in ``service``, ``version``
    and ``timestamp``; the bare form is just ``{"status": "ok"}``.
    """

    status: str = "ok"
    service: str | None = None
    version: str | None = None
    timestamp: str | None = None
