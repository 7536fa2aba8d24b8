"""Slack Web API response normalizer.

Slack reports failures at two layers: the HTTP status line (429, 401, ...)
and the ``ok``/``error`` fields of a 200 JSON body.  Rate limits and auth
problems can show up at either layer, so both are checked, in order:

1. Transport: any non-2xx status is classified without looking at the
   body (error responses may not carry JSON).
2. Application: a 2xx body with a falsy ``ok`` is classified by its
   ``error`` code.

The result is either the JSON body (a dict) or an ``UpstreamFailure``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from modules.slack_notifications.errors import FailureKind, UpstreamFailure

logger = structlog.get_logger()

DEFAULT_RETRY_AFTER = 60

SlackResult = dict[str, Any] | UpstreamFailure

# Slack ``error`` code -> (kind, message template)
_APPLICATION_ERRORS: dict[str, tuple[FailureKind, str]] = {
    "token_revoked": (FailureKind.UNAUTHORIZED, "Authentication failed: {code}"),
    "invalid_auth": (FailureKind.UNAUTHORIZED, "Authentication failed: {code}"),
    "channel_not_found": (FailureKind.NOT_FOUND, "Not found: {code}"),
    "user_not_found": (FailureKind.NOT_FOUND, "Not found: {code}"),
    "not_in_channel": (FailureKind.BOT_NOT_MEMBER, "Bot not in channel"),
}


def _parse_retry_after(value: Any) -> int:
    """Parse a retry hint in seconds, falling back to the default."""
    if value is None or isinstance(value, bool):
        return DEFAULT_RETRY_AFTER
    if isinstance(value, (int, float)):
        seconds = int(value)
    else:
        try:
            seconds = int(str(value).strip())
        except ValueError:
            return DEFAULT_RETRY_AFTER
    return seconds if seconds >= 0 else DEFAULT_RETRY_AFTER


def _header(headers: Mapping[str, str], name: str) -> str | None:
    # httpx.Headers is case-insensitive already; plain dicts are not.
    if isinstance(headers, httpx.Headers):
        return headers.get(name)
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


def classify_status(
    status_code: int, headers: Mapping[str, str], reason: str = ""
) -> UpstreamFailure | None:
    """Stage 1: classify a non-2xx status.  Returns None for 2xx."""
    if 200 <= status_code < 300:
        return None

    if status_code == 429:
        return UpstreamFailure(
            FailureKind.RATE_LIMITED,
            "Rate limit exceeded",
            retry_after_seconds=_parse_retry_after(_header(headers, "Retry-After")),
        )
    if status_code == 401:
        return UpstreamFailure(
            FailureKind.UNAUTHORIZED, "Unauthorized: Invalid or expired token"
        )
    if status_code == 403:
        return UpstreamFailure(
            FailureKind.FORBIDDEN, "Forbidden: Insufficient permissions"
        )
    return UpstreamFailure(
        FailureKind.UNKNOWN, f"Slack API error: {status_code} {reason}".rstrip()
    )


def classify_body(body: Any) -> UpstreamFailure | None:
    """Stage 2: classify a 2xx JSON body.  Returns None when ``ok`` is truthy."""
    if not isinstance(body, dict):
        return UpstreamFailure(FailureKind.UNKNOWN, "Slack error: invalid_response")
    if body.get("ok"):
        return None

    code = body.get("error") or "unknown_error"
    if not isinstance(code, str):
        code = str(code)
    if code == "ratelimited":
        return UpstreamFailure(
            FailureKind.RATE_LIMITED,
            "Rate limit exceeded",
            retry_after_seconds=_parse_retry_after(body.get("retry_after")),
        )

    known = _APPLICATION_ERRORS.get(code)
    if known is None:
        return UpstreamFailure(FailureKind.UNKNOWN, f"Slack error: {code}")
    kind, template = known
    return UpstreamFailure(kind, template.format(code=code))


def normalize_response(
    status_code: int,
    headers: Mapping[str, str],
    body: Any,
    reason: str = "",
) -> SlackResult:
    """Return the Slack JSON body on success, or the classified failure."""
    failure = classify_status(status_code, headers, reason)
    if failure is None:
        failure = classify_body(body)
    if failure is not None:
        return failure
    return body


def normalize_http_response(response: httpx.Response) -> SlackResult:
    """Normalize an ``httpx.Response``.

    The body is only decoded once the status check passed; a 2xx body
    that is not JSON is classified as ``unknown``.
    """
    failure = classify_status(
        response.status_code, response.headers, response.reason_phrase
    )
    if failure is not None:
        logger.warning(
            "slack_http_failure",
            status=response.status_code,
            kind=failure.kind.value,
            retry_after=failure.retry_after_seconds,
        )
        return failure

    try:
        body = response.json()
    except ValueError:
        logger.warning("slack_invalid_json", status=response.status_code)
        body = None

    result = normalize_response(response.status_code, response.headers, body)
    if isinstance(result, UpstreamFailure):
        logger.warning(
            "slack_api_failure",
            kind=result.kind.value,
            error=result.message,
            retry_after=result.retry_after_seconds,
        )
    return result
