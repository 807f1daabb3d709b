"""ASGI middleware for the FastAPI application.

This module provides:
- Origin validation for the MCP endpoint
"""

from .origin_guard import OriginGuardMiddleware, allow_origin

__all__ = [
    "OriginGuardMiddleware",
    "allow_origin",
]
