"""Error taxonomy for the Slack notifications module.

Two families:

* ``InvalidRequestError``: bad caller input (missing fields, unknown
  ``channel_type``, missing bot token).  Raised and caught at the HTTP/RPC
  boundary, surfaced as a 4xx.
* ``UpstreamFailure``: a Slack response classified into a closed set of
  kinds.  Returned as a value (never raised) so every call site handles it
  explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FailureKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    BOT_NOT_MEMBER = "bot_not_member"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class UpstreamFailure:
    """A classified Slack API failure.

    ``retry_after_seconds`` is only populated for ``RATE_LIMITED``.
    """

    kind: FailureKind
    message: str
    retry_after_seconds: int | None = None

    @property
    def retryable(self) -> bool:
        return self.kind is FailureKind.RATE_LIMITED


class InvalidRequestError(ValueError):
    """Caller input that can never succeed as sent."""


class MissingCredentialError(InvalidRequestError):
    """The bot token is absent or empty."""

    def __init__(self, secret_name: str):
        super().__init__(f"Missing {secret_name}")
        self.secret_name = secret_name
