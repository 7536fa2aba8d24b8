"""Slack Web API client."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from modules.slack_notifications.errors import FailureKind, UpstreamFailure
from modules.slack_notifications.normalizer import SlackResult, normalize_http_response

logger = structlog.get_logger()

SLACK_API_URL = "https://slack.com/api"


def _missing_field(method: str, field: str) -> UpstreamFailure:
    logger.warning("slack_response_missing_field", method=method, field=field)
    return UpstreamFailure(FailureKind.UNKNOWN, "Slack error: invalid_response")


class SlackClient:
    """Async client for the handful of Slack Web API methods we call.

    Every method returns the normalized result: the decoded body (or the
    field of interest) on success, an ``UpstreamFailure`` otherwise.
    Network errors from httpx are not classified and propagate.
    """

    def __init__(
        self,
        base_url: str = SLACK_API_URL,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def open_conversation(self, token: str, user_id: str) -> str | UpstreamFailure:
        """Open (or reuse) a DM with ``user_id`` and return its channel id."""
        result = await self._post(token, "conversations.open", {"users": user_id})
        if isinstance(result, UpstreamFailure):
            return result
        channel = result.get("channel")
        channel_id = channel.get("id") if isinstance(channel, dict) else None
        if not channel_id:
            return _missing_field("conversations.open", "channel.id")
        return channel_id

    async def post_message(self, token: str, payload: dict[str, Any]) -> str | UpstreamFailure:
        """Post a message and return its ``ts``."""
        result = await self._post(token, "chat.postMessage", payload)
        if isinstance(result, UpstreamFailure):
            return result
        ts = result.get("ts")
        if not ts:
            return _missing_field("chat.postMessage", "ts")
        return ts

    async def user_info(self, token: str, user_id: str) -> SlackResult:
        return await self._get(token, "users.info", {"user": user_id})

    async def conversation_info(self, token: str, channel_id: str) -> SlackResult:
        return await self._get(token, "conversations.info", {"channel": channel_id})

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _post(self, token: str, method: str, payload: dict[str, Any]) -> SlackResult:
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json; charset=utf-8",
        }
        async with self._client() as client:
            resp = await client.post(f"{self.base_url}/{method}", json=payload, headers=headers)
        logger.debug("slack_api_call", method=method, status=resp.status_code)
        return normalize_http_response(resp)

    async def _get(self, token: str, method: str, params: dict[str, str]) -> SlackResult:
        headers = {"Authorization": f"Bearer {token}"}
        async with self._client() as client:
            resp = await client.get(f"{self.base_url}/{method}", params=params, headers=headers)
        logger.debug("slack_api_call", method=method, status=resp.status_code)
        return normalize_http_response(resp)
