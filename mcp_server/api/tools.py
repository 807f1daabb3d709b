"""REST tool API endpoints.

Plain HTTP access to the built-in tools, alongside the JSON-RPC transport.

Base URL: /api/v1
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from ..config import Settings
from ..models import ServerInfo, ServiceStatus, ToolCall, ToolDefinition, ToolResult
from ..tools.registry import ToolExecutionError, ToolRegistry
from .deps import get_settings, get_tool_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Tools"])


@router.get("/tools", response_model=list[ToolDefinition])
async def list_tools(
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
) -> list[dict]:
    """List all available tools."""
    logger.info("Received request to list tools")
    return registry.list_tools()


@router.post("/tools/call", response_model=ToolResult)
def call_tool(
    tool_call: ToolCall,
    registry: Annotated[ToolRegistry, Depends(get_tool_registry)],
) -> ToolResult:
    """
    Execute a tool with the provided arguments.

    Tool failures are reported in the body (``isError: true``) with HTTP 200,
    never as an HTTP error.
    """
    logger.info(f"Received tool call request: {tool_call.name}")
    if not registry.has_tool(tool_call.name):
        logger.warning(f"Tool not found: {tool_call.name}")
        return ToolResult.failure(f"Tool not found: {tool_call.name}")

    try:
        content = registry.call(tool_call.name, tool_call.arguments)
    except ToolExecutionError as e:
        return ToolResult.failure(str(e))
    return ToolResult.success(content)


@router.get("/health", response_model=ServiceStatus)
async def service_health(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ServiceStatus:
    """Service status."""
    return ServiceStatus(
        status="UP", service=settings.server_name, version=settings.server_version
    )


@router.get("/info", response_model=ServerInfo)
async def server_info(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ServerInfo:
    """Server information."""
    return ServerInfo(
        name=settings.server_name,
        version=settings.server_version,
        description="A Model Context Protocol (MCP) server over Streamable HTTP",
        protocol=f"MCP {settings.protocol_version}",
        endpoints=[
            f"POST {settings.mcp_path} - Submit JSON-RPC messages",
            f"GET {settings.mcp_path} - Open an SSE stream",
            f"DELETE {settings.mcp_path} - Terminate a session",
            "GET /api/v1/tools - List available tools",
            "POST /api/v1/tools/call - Execute a tool",
            "GET /api/v1/health - Health check",
            "GET /api/v1/info - Server information",
        ],
    )
