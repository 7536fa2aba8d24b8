"""Notification event schemas published via Redis pub/sub."""

from __future__ import annotations

from pydantic import BaseModel


class NotificationEvent(BaseModel):
    """Emitted after a notification has been delivered to a platform."""

    event_name: str = "notification_sent"
    platform: str = "slack"
    channel_type: str  # "dm" | "channel"
    org_id: str | None = None
    message_id: str | None = None  # platform message id (Slack ts)
    timestamp: str  # ISO-8601, UTC
