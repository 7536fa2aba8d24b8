"""Slack notifications module — FastAPI service."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from modules.slack_notifications.client import SlackClient
from modules.slack_notifications.credentials import SettingsSecretProvider
from modules.slack_notifications.errors import InvalidRequestError, UpstreamFailure
from modules.slack_notifications.events import EventSink
from modules.slack_notifications.manifest import MANIFEST
from modules.slack_notifications.models import (
    NotifyResponse,
    ValidateResponse,
    build_destination,
    build_notification_request,
)
from modules.slack_notifications.tools import SlackNotificationTools
from shared.auth import require_service_auth
from shared.config import get_settings
from shared.redis import close_redis, get_redis
from shared.schemas.common import HealthResponse
from shared.schemas.tools import ModuleManifest, ToolCall, ToolResult

structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
)

logger = structlog.get_logger()

SERVICE_NAME = "slack-notifications"
SERVICE_VERSION = "1.0.0"
INVALID_JSON = "Invalid JSON in request body"
INTERNAL_ERROR = "Internal server error"

app = FastAPI(title="Slack Notifications Module", version=SERVICE_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

tools: SlackNotificationTools | None = None


@app.on_event("startup")
async def startup():
    global tools
    settings = get_settings()

    # Delivery events are optional; run without them if Redis is down.
    redis_client = await get_redis()
    if redis_client is not None:
        logger.info("slack_notifications_redis_connected")

    tools = SlackNotificationTools(
        client=SlackClient(
            base_url=settings.slack_api_base_url,
            timeout=settings.slack_http_timeout,
        ),
        secrets=SettingsSecretProvider(settings),
        events=EventSink(redis_client, channel=settings.notification_events_channel),
        token_name=settings.slack_bot_token_secret_name,
        org_id=settings.notification_org_id or None,
    )
    logger.info("slack_notifications_module_ready")


@app.on_event("shutdown")
async def shutdown():
    await close_redis()


def _iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


async def _read_json(request: Request) -> Any:
    """Decode the request body.  Raises ValueError on malformed JSON."""
    return json.loads(await request.body())


async def _notify(payload: Any) -> tuple[int, NotifyResponse]:
    """Run a notification end to end and map the outcome to (status, body)."""
    try:
        request = build_notification_request(payload)
        result = await tools.notify(request)
    except InvalidRequestError as e:
        logger.error("notify_validation_error", error=str(e))
        return 400, NotifyResponse(success=False, error=str(e))
    except Exception:
        logger.error("notify_unexpected_error", exc_info=True)
        return 500, NotifyResponse(success=False, error=INTERNAL_ERROR)

    if isinstance(result, UpstreamFailure):
        logger.error(
            "notify_slack_api_error",
            kind=result.kind.value,
            error=result.message,
            retry_after=result.retry_after_seconds,
        )
        return 502, NotifyResponse(
            success=False,
            error=f"Slack API error: {result.message}",
            retry_after=result.retry_after_seconds,
        )

    return 200, NotifyResponse(
        success=True,
        message_id=result.message_id,
        delivered_at=_iso(result.delivered_at),
    )


async def _validate(payload: Any) -> tuple[int, ValidateResponse]:
    """Check a destination; Slack failures are a soft ``valid: false``."""
    try:
        destination = build_destination(payload)
        result = await tools.validate(destination)
    except InvalidRequestError as e:
        return 400, ValidateResponse(valid=False, error=str(e))
    except Exception:
        logger.error("validate_unexpected_error", exc_info=True)
        return 500, ValidateResponse(valid=False, error=INTERNAL_ERROR)

    if not result.valid:
        logger.info("validate_destination_invalid", detail=result.detail)
        return 200, ValidateResponse(valid=False, error=result.detail)
    return 200, ValidateResponse(valid=True, message="Channel configuration is valid")


@app.post("/notify")
async def notify(request: Request, _=Depends(require_service_auth)):
    """Send a notification to a Slack user or channel."""
    if tools is None:
        return JSONResponse(status_code=503, content={"success": False, "error": "Module not ready"})

    try:
        payload = await _read_json(request)
    except ValueError as e:
        logger.error("notify_invalid_json", error=str(e))
        return JSONResponse(status_code=400, content={"success": False, "error": INVALID_JSON})

    status, body = await _notify(payload)
    return JSONResponse(status_code=status, content=body.model_dump(exclude_unset=True))


@app.post("/validate")
async def validate(request: Request, _=Depends(require_service_auth)):
    """Check that a Slack user or channel exists."""
    if tools is None:
        return JSONResponse(status_code=503, content={"valid": False, "error": "Module not ready"})

    try:
        payload = await _read_json(request)
    except ValueError:
        return JSONResponse(status_code=400, content={"valid": False, "error": INVALID_JSON})

    status, body = await _validate(payload)
    return JSONResponse(status_code=status, content=body.model_dump(exclude_unset=True))


@app.get("/manifest", response_model=ModuleManifest)
async def manifest(_=Depends(require_service_auth)):
    """Return the module manifest."""
    return MANIFEST


@app.post("/execute", response_model=ToolResult)
async def execute(call: ToolCall, _=Depends(require_service_auth)):
    """Execute a tool call."""
    if tools is None:
        return ToolResult(tool_name=call.tool_name, success=False, error="Module not ready")

    tool_name = call.tool_name.split(".")[-1]
    args = dict(call.arguments)

    if tool_name == "notify":
        _, body = await _notify(args)
        if not body.success:
            return ToolResult(
                tool_name=call.tool_name,
                success=False,
                error=body.error,
                retry_after=body.retry_after,
            )
        return ToolResult(
            tool_name=call.tool_name,
            success=True,
            result={"message_id": body.message_id, "delivered_at": body.delivered_at},
        )

    if tool_name == "validate":
        status, body = await _validate(args)
        if status != 200:
            return ToolResult(tool_name=call.tool_name, success=False, error=body.error)
        return ToolResult(
            tool_name=call.tool_name,
            success=True,
            result=body.model_dump(exclude_none=True),
        )

    return ToolResult(
        tool_name=call.tool_name,
        success=False,
        error=f"Unknown tool: {call.tool_name}",
    )


@app.get("/health", response_model=HealthResponse, response_model_exclude_none=True)
async def health():
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        timestamp=_iso(datetime.now(timezone.utc)),
    )
