"""Secret lookup for the Slack bot token.

Where the token lives is a deployment concern: a single-tenant install reads
it from settings/the environment, a multi-tenant one can hand in a
per-organization mapping.  Both satisfy ``SecretProvider``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Protocol

from shared.config import Settings


class SecretProvider(Protocol):
    def get_secret(self, name: str) -> str | None: ...


class SettingsSecretProvider:
    """Resolve secrets from ``Settings`` fields, then the process environment."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def get_secret(self, name: str) -> str | None:
        value = getattr(self.settings, name.lower(), None)
        if isinstance(value, str) and value:
            return value
        return os.environ.get(name)


class MappingSecretProvider:
    """Resolve secrets from a fixed mapping, e.g. one organization's secrets."""

    def __init__(self, secrets: Mapping[str, str]):
        self._secrets = dict(secrets)

    def get_secret(self, name: str) -> str | None:
        return self._secrets.get(name)
