"""API utilities and routers.

This package contains:
- deps: FastAPI dependency injection functions
- tools: REST tool API router
"""

from .deps import (
    get_client_ip,
    get_dispatcher,
    get_session_manager,
    get_settings,
    get_stream_transport,
    get_tool_registry,
)

__all__ = [
    "get_client_ip",
    "get_dispatcher",
    "get_session_manager",
    "get_settings",
    "get_stream_transport",
    "get_tool_registry",
]
