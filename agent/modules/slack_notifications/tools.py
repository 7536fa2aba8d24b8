"""Slack notification delivery: resolve destination, format, send."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog

from modules.slack_notifications.client import SlackClient
from modules.slack_notifications.credentials import SecretProvider
from modules.slack_notifications.errors import MissingCredentialError, UpstreamFailure
from modules.slack_notifications.events import EventSink
from modules.slack_notifications.formatting import format_message, markdown_enabled
from modules.slack_notifications.models import (
    DeliveryResult,
    Destination,
    DirectDestination,
    NotificationRequest,
    ValidationResult,
)

logger = structlog.get_logger()


class SlackNotificationTools:
    """Delivers notifications to Slack.

    Holds no per-request state; one instance serves concurrent requests.
    At most two Slack calls per request (``conversations.open`` then
    ``chat.postMessage`` for DMs), issued sequentially.  Nothing is retried
    here: a rate-limited failure carries ``retry_after_seconds`` back to the
    caller.
    """

    def __init__(
        self,
        client: SlackClient,
        secrets: SecretProvider,
        events: EventSink | None = None,
        token_name: str = "SLACK_BOT_TOKEN",
        org_id: str | None = None,
    ):
        self.client = client
        self.secrets = secrets
        self.events = events or EventSink()
        self.token_name = token_name
        self.org_id = org_id

    def _token(self) -> str:
        token = self.secrets.get_secret(self.token_name)
        if not token:
            raise MissingCredentialError(self.token_name)
        return token

    async def notify(self, request: NotificationRequest) -> DeliveryResult | UpstreamFailure:
        """Send a notification.

        Raises:
            MissingCredentialError: If no bot token is configured.  Raised
                before any network call.
        """
        token = self._token()
        destination = request.destination

        if isinstance(destination, DirectDestination):
            channel = await self.client.open_conversation(token, destination.recipient_id)
            if isinstance(channel, UpstreamFailure):
                logger.warning(
                    "slack_open_conversation_failed",
                    recipient_id=destination.recipient_id,
                    kind=channel.kind.value,
                )
                return channel
        else:
            channel = destination.channel_id

        payload = self._message_payload(channel, request)
        ts = await self.client.post_message(token, payload)
        if isinstance(ts, UpstreamFailure):
            return ts

        result = DeliveryResult(message_id=ts, delivered_at=datetime.now(timezone.utc))
        logger.info(
            "notification_sent",
            channel_type=destination.channel_type,
            channel=channel,
            message_id=ts,
            threaded=request.thread_id is not None,
        )
        await self.events.emit(
            "notification_sent",
            channel_type=destination.channel_type,
            org_id=self.org_id,
            message_id=ts,
        )
        return result

    async def validate(self, destination: Destination) -> ValidationResult:
        """Check that a user or channel exists.

        Upstream failures become ``valid=False``; only a missing token raises.
        """
        token = self._token()

        if isinstance(destination, DirectDestination):
            result = await self.client.user_info(token, destination.recipient_id)
        else:
            result = await self.client.conversation_info(token, destination.channel_id)

        if isinstance(result, UpstreamFailure):
            return ValidationResult(valid=False, detail=result.message)
        return ValidationResult(valid=True)

    @staticmethod
    def _message_payload(channel: str, request: NotificationRequest) -> dict[str, Any]:
        """Build the ``chat.postMessage`` body.

        ``thread_ts`` and ``attachments`` are left out entirely when unset.
        """
        payload: dict[str, Any] = {
            "channel": channel,
            "text": format_message(request.message, request.format),
            "mrkdwn": markdown_enabled(request.format),
        }
        if request.thread_id:
            payload["thread_ts"] = request.thread_id
        if request.attachments:
            payload["attachments"] = list(request.attachments)
        return payload
