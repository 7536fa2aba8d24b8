"""Delivery events published on Redis pub/sub (fire-and-forget)."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from shared.schemas.notifications import NotificationEvent

logger = structlog.get_logger()


class EventSink:
    """Publish delivery events.  A no-op when Redis is unavailable."""

    def __init__(self, redis_client=None, channel: str = "notifications:events"):
        self._redis = redis_client
        self.channel = channel

    async def emit(
        self,
        event_name: str,
        *,
        channel_type: str,
        org_id: str | None = None,
        message_id: str | None = None,
    ) -> None:
        """Publish an event.  Never raises."""
        if self._redis is None:
            return

        event = NotificationEvent(
            event_name=event_name,
            channel_type=channel_type,
            org_id=org_id or None,
            message_id=message_id,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        try:
            await self._redis.publish(self.channel, event.model_dump_json())
            logger.debug("event_emitted", event_name=event_name, channel=self.channel)
        except Exception as e:
            logger.warning("event_emit_error", event_name=event_name, error=str(e))
