"""Pydantic models and enums for the MCP server.

    from mcp_server.models import ToolName, ToolResult
"""

from .enums import McpMethod, RpsChoice, ToolName
from .health import HealthResponse, ServerInfo, ServiceStatus
from .tools import ToolCall, ToolDefinition, ToolResult

__all__ = [
    # Enums
    "McpMethod",
    "RpsChoice",
    "ToolName",
    # Health
    "HealthResponse",
    "ServerInfo",
    "ServiceStatus",
    # Tools
    "ToolCall",
    "ToolDefinition",
    "ToolResult",
]
