"""Stateful services owned by the application.

- session_manager: Live MCP sessions (create, lookup with expiry, terminate, sweep)
- stream_transport: Open SSE streams, one per session
"""

from .session_manager import Session, SessionManager
from .stream_transport import (
    StreamChannel,
    StreamEvent,
    StreamSetupError,
    StreamTransport,
)

__all__ = [
    "Session",
    "SessionManager",
    "StreamChannel",
    "StreamEvent",
    "StreamSetupError",
    "StreamTransport",
]
