"""Configuration management using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = "redis://redis:6379"

    # Inter-service auth (empty = dev mode, no checks)
    service_auth_token: str = ""

    # Slack
    slack_bot_token: str = ""
    # Name the bot token is looked up under in the secret provider
    slack_bot_token_secret_name: str = "SLACK_BOT_TOKEN"
    slack_api_base_url: str = "https://slack.com/api"
    # Transport timeout in seconds for Slack Web API calls
    slack_http_timeout: float = 15.0

    # Delivery events (Redis pub/sub)
    notification_events_channel: str = "notifications:events"
    notification_org_id: str = ""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
