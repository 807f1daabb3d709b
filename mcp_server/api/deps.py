"""FastAPI dependency injection functions.

This module contains shared dependencies for API endpoints:
- Accessors for the services attached to ``app.state`` by ``create_app``
- Client IP extraction for logging
"""

from fastapi import Request

from ..config import Settings
from ..mcp.dispatcher import ProtocolDispatcher
from ..services.session_manager import SessionManager
from ..services.stream_transport import StreamTransport
from ..tools.registry import ToolRegistry

# ============ SERVICE ACCESSORS ============


def get_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings


def get_session_manager(request: Request) -> SessionManager:
    """Session table owned by the running application."""
    return request.app.state.sessions


def get_stream_transport(request: Request) -> StreamTransport:
    """SSE stream registry owned by the running application."""
    return request.app.state.streams


def get_dispatcher(request: Request) -> ProtocolDispatcher:
    return request.app.state.dispatcher


def get_tool_registry(request: Request) -> ToolRegistry:
    return request.app.state.tools


# ============ HEADER EXTRACTORS ============


def get_client_ip(request: Request) -> str | None:
    """Extract client IP from X-Forwarded-For header or direct connection."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None
