"""Tests for SlackNotificationTools — Slack calls are mocked at the client."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from modules.slack_notifications.client import SlackClient
from modules.slack_notifications.credentials import MappingSecretProvider
from modules.slack_notifications.errors import (
    FailureKind,
    MissingCredentialError,
    UpstreamFailure,
)
from modules.slack_notifications.events import EventSink
from modules.slack_notifications.models import (
    ChannelDestination,
    DeliveryResult,
    DirectDestination,
    NotificationRequest,
    ValidationResult,
)
from modules.slack_notifications.tests.fixtures import (
    BOT_TOKEN,
    CONVERSATION_INFO_RESPONSE,
    USER_INFO_RESPONSE,
)
from modules.slack_notifications.tools import SlackNotificationTools

NOT_FOUND = UpstreamFailure(FailureKind.NOT_FOUND, "Not found: user_not_found")


@pytest.fixture
def mock_client():
    client = MagicMock(spec=SlackClient)
    client.open_conversation = AsyncMock(return_value="D069C7QFK")
    client.post_message = AsyncMock(return_value="1503435956.000247")
    client.user_info = AsyncMock(return_value=USER_INFO_RESPONSE)
    client.conversation_info = AsyncMock(return_value=CONVERSATION_INFO_RESPONSE)
    return client


@pytest.fixture
def tools(mock_client, secrets, mock_events):
    return SlackNotificationTools(mock_client, secrets, events=mock_events, org_id="org-42")


def _request(destination, **kwargs) -> NotificationRequest:
    return NotificationRequest(message=kwargs.pop("message", "hello"), destination=destination, **kwargs)


# ---------------------------------------------------------------------------
# notify
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_notify_channel(tools, mock_client):
    result = await tools.notify(_request(ChannelDestination("C123"), message="**hi**", format="markdown"))

    assert isinstance(result, DeliveryResult)
    assert result.message_id == "1503435956.000247"
    assert result.delivered_at.tzinfo is not None
    mock_client.open_conversation.assert_not_awaited()
    mock_client.post_message.assert_awaited_once_with(
        BOT_TOKEN, {"channel": "C123", "text": "*hi*", "mrkdwn": True}
    )


@pytest.mark.asyncio
async def test_notify_dm_opens_conversation_first(tools, mock_client):
    result = await tools.notify(_request(DirectDestination("W012A3CDE")))

    assert isinstance(result, DeliveryResult)
    mock_client.open_conversation.assert_awaited_once_with(BOT_TOKEN, "W012A3CDE")
    payload = mock_client.post_message.await_args.args[1]
    assert payload["channel"] == "D069C7QFK"


@pytest.mark.asyncio
async def test_notify_dm_open_failure_skips_send(tools, mock_client):
    mock_client.open_conversation.return_value = NOT_FOUND

    result = await tools.notify(_request(DirectDestination("W0")))

    assert result is NOT_FOUND
    mock_client.post_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_notify_send_failure_returned(tools, mock_client, mock_events):
    limited = UpstreamFailure(FailureKind.RATE_LIMITED, "Rate limit exceeded", retry_after_seconds=30)
    mock_client.post_message.return_value = limited

    result = await tools.notify(_request(ChannelDestination("C1")))

    assert result is limited
    mock_events.emit.assert_not_awaited()


@pytest.mark.asyncio
async def test_notify_plain_disables_mrkdwn(tools, mock_client):
    await tools.notify(_request(ChannelDestination("C1"), message="**raw**", format="plain"))

    payload = mock_client.post_message.await_args.args[1]
    assert payload["text"] == "**raw**"
    assert payload["mrkdwn"] is False


@pytest.mark.asyncio
async def test_notify_optional_fields_omitted(tools, mock_client):
    await tools.notify(_request(ChannelDestination("C1")))

    payload = mock_client.post_message.await_args.args[1]
    assert "thread_ts" not in payload
    assert "attachments" not in payload


@pytest.mark.asyncio
async def test_notify_thread_and_attachments(tools, mock_client):
    attachments = ({"color": "danger", "text": "stack trace"},)

    await tools.notify(_request(
        ChannelDestination("C1"), thread_id="1503435956.000247", attachments=attachments,
    ))

    payload = mock_client.post_message.await_args.args[1]
    assert payload["thread_ts"] == "1503435956.000247"
    assert payload["attachments"] == [{"color": "danger", "text": "stack trace"}]


@pytest.mark.asyncio
async def test_notify_emits_event(tools, mock_events):
    await tools.notify(_request(DirectDestination("W1")))

    mock_events.emit.assert_awaited_once_with(
        "notification_sent",
        channel_type="dm",
        org_id="org-42",
        message_id="1503435956.000247",
    )


@pytest.mark.asyncio
async def test_notify_without_event_sink(mock_client, secrets):
    tools = SlackNotificationTools(mock_client, secrets)
    assert isinstance(tools.events, EventSink)

    result = await tools.notify(_request(ChannelDestination("C1")))

    assert isinstance(result, DeliveryResult)


@pytest.mark.asyncio
@pytest.mark.parametrize("secret_map", [{}, {"SLACK_BOT_TOKEN": ""}])
async def test_notify_missing_token(mock_client, secret_map):
    tools = SlackNotificationTools(mock_client, MappingSecretProvider(secret_map))

    with pytest.raises(MissingCredentialError, match="Missing SLACK_BOT_TOKEN"):
        await tools.notify(_request(DirectDestination("W1")))

    mock_client.open_conversation.assert_not_awaited()
    mock_client.post_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_custom_token_name(mock_client):
    tools = SlackNotificationTools(
        mock_client,
        MappingSecretProvider({"ACME_SLACK_TOKEN": "xoxb-acme"}),
        token_name="ACME_SLACK_TOKEN",
    )

    await tools.notify(_request(ChannelDestination("C1")))

    assert mock_client.post_message.await_args.args[0] == "xoxb-acme"


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_validate_user(tools, mock_client):
    result = await tools.validate(DirectDestination("W012A3CDE"))

    assert result == ValidationResult(valid=True)
    mock_client.user_info.assert_awaited_once_with(BOT_TOKEN, "W012A3CDE")
    mock_client.conversation_info.assert_not_awaited()


@pytest.mark.asyncio
async def test_validate_channel(tools, mock_client):
    result = await tools.validate(ChannelDestination("C012AB3CD"))

    assert result.valid is True
    mock_client.conversation_info.assert_awaited_once_with(BOT_TOKEN, "C012AB3CD")


@pytest.mark.asyncio
async def test_validate_failure_is_soft(tools, mock_client):
    mock_client.conversation_info.return_value = UpstreamFailure(
        FailureKind.NOT_FOUND, "Not found: channel_not_found"
    )

    result = await tools.validate(ChannelDestination("C0"))

    assert result == ValidationResult(valid=False, detail="Not found: channel_not_found")


@pytest.mark.asyncio
async def test_validate_missing_token(mock_client):
    tools = SlackNotificationTools(mock_client, MappingSecretProvider({}))

    with pytest.raises(MissingCredentialError):
        await tools.validate(ChannelDestination("C1"))

    mock_client.conversation_info.assert_not_awaited()
