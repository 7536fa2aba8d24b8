"""Pydantic schemas shared between services."""

from shared.schemas.common import HealthResponse
from shared.schemas.notifications import NotificationEvent
from shared.schemas.tools import (
    ModuleManifest,
    ToolCall,
    ToolDefinition,
    ToolParameter,
    ToolResult,
)

__all__ = [
    "HealthResponse",
    "ModuleManifest",
    "NotificationEvent",
    "ToolCall",
    "ToolDefinition",
    "ToolParameter",
    "ToolResult",
]
