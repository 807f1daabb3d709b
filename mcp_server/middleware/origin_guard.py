"""Origin validation middleware.

Mitigates DNS-rebinding and cross-site requests against a locally running
server by comparing the Origin and Host headers before any MCP protocol work.

Policy:
    - No Origin header: allow (same-origin and non-browser clients)
    - Host is a local development host: Origin must also be local
    - Anything else: allow

The final rule is deliberately permissive; production deployments should put
an allow-list in front of the server.
"""

import logging
from urllib.parse import urlsplit

from ..config import settings

logger = logging.getLogger(__name__)

LOCAL_HOSTNAMES = frozenset({"localhost", "127.0.0.1", "::1"})


def _hostname(value: str) -> str | None:
    """Extract the bare hostname from a Host header or an Origin URL."""
    value = value.strip()
    if "://" not in value:
        value = f"//{value}"
    try:
        return urlsplit(value).hostname
    except ValueError:
        return None


def is_local_host(value: str | None) -> bool:
    if not value:
        return False
    return _hostname(value) in LOCAL_HOSTNAMES


def allow_origin(origin: str | None, host: str | None) -> bool:
    """Decide whether a request with these Origin/Host headers may proceed."""
    if origin is None:
        return True

    if is_local_host(host):
        return is_local_host(origin)

    return True


class OriginGuardMiddleware:
    """
    Reject MCP requests whose Origin fails ``allow_origin`` with 403.

    Only paths under the configured MCP prefix are checked; other endpoints
    pass straight through.
    """

    def __init__(self, app, path_prefix: str | None = None):
        self.app = app
        self.path_prefix = path_prefix or settings.mcp_path

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        if path != self.path_prefix and not path.startswith(self.path_prefix.rstrip("/") + "/"):
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        origin = headers.get(b"origin")
        host = headers.get(b"host")
        origin_value = origin.decode("latin-1") if origin is not None else None
        host_value = host.decode("latin-1") if host is not None else None

        if allow_origin(origin_value, host_value):
            await self.app(scope, receive, send)
            return

        client = scope.get("client")
        logger.warning(
            f"Invalid Origin header {origin_value!r} for host {host_value!r} "
            f"from: {client[0] if client else 'unknown'}"
        )
        await send(
            {
                "type": "http.response.start",
                "status": 403,
                "headers": [(b"content-length", b"0")],
            }
        )
        await send({"type": "http.response.body", "body": b""})
