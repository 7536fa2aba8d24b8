"""Shared fixtures for slack_notifications tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from modules.slack_notifications.client import SlackClient
from modules.slack_notifications.credentials import MappingSecretProvider
from modules.slack_notifications.tests.fixtures import BOT_TOKEN, RecordingTransport
from modules.slack_notifications.tools import SlackNotificationTools
from shared.config import get_settings


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch):
    """Run every test against default settings (no service auth)."""
    monkeypatch.delenv("SERVICE_AUTH_TOKEN", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def secrets():
    return MappingSecretProvider({"SLACK_BOT_TOKEN": BOT_TOKEN})


@pytest.fixture
def mock_events():
    events = AsyncMock()
    events.emit = AsyncMock()
    return events


@pytest.fixture
def live_tools(transport, secrets, mock_events):
    """Real tools wired to the recording transport."""
    client = SlackClient(base_url="https://slack.test/api", transport=transport)
    return SlackNotificationTools(client, secrets, events=mock_events)
