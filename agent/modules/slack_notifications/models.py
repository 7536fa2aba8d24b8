"""Request/response models for the Slack notifications module."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from modules.slack_notifications.errors import InvalidRequestError

CHANNEL_TYPE_DM = "dm"
CHANNEL_TYPE_CHANNEL = "channel"


@dataclass(frozen=True)
class DirectDestination:
    """A user; the message goes to the DM conversation opened with them."""

    recipient_id: str
    channel_type: str = field(default=CHANNEL_TYPE_DM, init=False)


@dataclass(frozen=True)
class ChannelDestination:
    """A channel the bot posts to directly."""

    channel_id: str
    channel_type: str = field(default=CHANNEL_TYPE_CHANNEL, init=False)


Destination = DirectDestination | ChannelDestination


@dataclass(frozen=True)
class NotificationRequest:
    message: str
    destination: Destination
    format: str | None = None
    thread_id: str | None = None
    attachments: tuple[dict[str, Any], ...] = ()


@dataclass(frozen=True)
class DeliveryResult:
    message_id: str
    delivered_at: datetime


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    detail: str | None = None


# ---------------------------------------------------------------------------
# Wire payloads
# ---------------------------------------------------------------------------


class NotifyPayload(BaseModel):
    """Raw ``/notify`` body.  Everything is optional here; presence rules
    live in ``build_notification_request`` so error messages stay stable."""

    model_config = ConfigDict(extra="ignore")

    message: str | None = None
    channel_type: str | None = None
    recipient_id: str | None = None
    channel_id: str | None = None
    # Any value is accepted; non-strings fall back to the native dialect.
    format: Any = None
    thread_id: str | None = None
    attachments: list[dict[str, Any]] | None = None


class ValidatePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    channel_type: str | None = None
    recipient_id: str | None = None
    channel_id: str | None = None


class NotifyResponse(BaseModel):
    success: bool
    message_id: str | None = None
    delivered_at: str | None = None
    error: str | None = None
    retry_after: int | None = None


class ValidateResponse(BaseModel):
    valid: bool
    message: str | None = None
    error: str | None = None


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(part) for part in err.get("loc", ())) or "body"
    return f"Invalid {loc}: {err.get('msg', 'invalid value')}"


def _coerce(model: type[BaseModel], payload: Any) -> Any:
    if not isinstance(payload, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise InvalidRequestError(_first_error(e)) from e


def parse_destination(
    channel_type: str | None,
    recipient_id: str | None = None,
    channel_id: str | None = None,
) -> Destination:
    """Build a destination from the wire ``channel_type`` tag.

    Raises:
        InvalidRequestError: If the tag is missing or unsupported, or the
            identifier it requires is missing.
    """
    if channel_type is None:
        raise InvalidRequestError("channel_type is required")
    if channel_type == CHANNEL_TYPE_DM:
        if not recipient_id:
            raise InvalidRequestError("recipient_id is required for DM")
        return DirectDestination(recipient_id=recipient_id)
    if channel_type == CHANNEL_TYPE_CHANNEL:
        if not channel_id:
            raise InvalidRequestError("channel_id is required for channel")
        return ChannelDestination(channel_id=channel_id)
    raise InvalidRequestError(f"Unsupported channel_type: {channel_type}")


def build_notification_request(payload: Any) -> NotificationRequest:
    """Validate a raw ``/notify`` body and build a ``NotificationRequest``."""
    data: NotifyPayload = _coerce(NotifyPayload, payload)

    if not data.message:
        raise InvalidRequestError("message is required")

    destination = parse_destination(data.channel_type, data.recipient_id, data.channel_id)
    return NotificationRequest(
        message=data.message,
        destination=destination,
        format=data.format if isinstance(data.format, str) else None,
        thread_id=data.thread_id or None,
        attachments=tuple(data.attachments or ()),
    )


def build_destination(payload: Any) -> Destination:
    """Validate a raw ``/validate`` body and return its destination."""
    data: ValidatePayload = _coerce(ValidatePayload, payload)
    return parse_destination(data.channel_type, data.recipient_id, data.channel_id)
