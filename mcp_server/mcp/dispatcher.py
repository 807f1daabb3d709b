"""MCP protocol dispatcher.

Executes classified JSON-RPC requests and notifications against a session:

- initialize: Mark the session initialized and report server capabilities
- tools/list: List tool definitions from the tool provider
- tools/call: Execute a tool through the tool provider

No method is gated on the session's initialized flag. Every request yields a
response; internal faults are converted to JSON-RPC errors and never propagate.
Notifications never yield a response.
"""

import json
import logging
from typing import Any

from ..models import McpMethod
from ..services.session_manager import Session
from ..tools.registry import ToolExecutionError, ToolProvider
from .jsonrpc import (
    INTERNAL_ERROR,
    InternalError,
    InvalidParamsError,
    JsonRpcError,
    MethodNotFoundError,
)
from .messages import JsonRpcNotification, JsonRpcRequest, JsonRpcResponse

logger = logging.getLogger(__name__)

DEFAULT_PROTOCOL_VERSION = "2024-11-05"

# Session data keys written by initialize
CLIENT_PROTOCOL_VERSION_KEY = "client_protocol_version"
CLIENT_INFO_KEY = "client_info"


class ProtocolDispatcher:
    """Routes protocol methods to their handlers.

    Args:
        tools: Tool provider used by tools/list and tools/call
        server_name: Reported in serverInfo.name
        server_version: Reported in serverInfo.version
        protocol_version: Reported as protocolVersion
    """

    def __init__(
        self,
        tools: ToolProvider,
        server_name: str = "MCP Server",
        server_version: str = "1.0.0",
        protocol_version: str = DEFAULT_PROTOCOL_VERSION,
    ):
        self.tools = tools
        self.server_name = server_name
        self.server_version = server_version
        self.protocol_version = protocol_version

    # ============ REQUESTS ============

    def process_request(self, request: JsonRpcRequest, session: Session) -> JsonRpcResponse:
        """Execute a request and return its response. Never raises."""
        logger.debug(f"Processing request: {request.id} with method: {request.method}")

        try:
            if request.method == McpMethod.INITIALIZE:
                result = self._handle_initialize(request, session)
            elif request.method == McpMethod.TOOLS_LIST:
                result = self._handle_tools_list()
            elif request.method == McpMethod.TOOLS_CALL:
                result = self._handle_tools_call(request)
            else:
                raise MethodNotFoundError(f"Method not found: {request.method}")
        except JsonRpcError as e:
            return JsonRpcResponse.failure(request.id, e.code, e.message, e.data)
        except Exception as e:
            logger.error(f"Error processing request {request.id}: {e}", exc_info=True)
            return JsonRpcResponse.failure(request.id, INTERNAL_ERROR, "Internal error")

        return JsonRpcResponse.success(request.id, result)

    def _handle_initialize(self, request: JsonRpcRequest, session: Session) -> dict[str, Any]:
        params = request.params or {}
        if "protocolVersion" in params:
            session.put_data(CLIENT_PROTOCOL_VERSION_KEY, params["protocolVersion"])
        if "clientInfo" in params:
            session.put_data(CLIENT_INFO_KEY, params["clientInfo"])

        session.mark_initialized()
        logger.info(f"Initialized MCP session: {session.session_id}")

        return {
            "protocolVersion": self.protocol_version,
            "capabilities": {
                "tools": {"listChanged": False},
                "resources": {"subscribe": False, "listChanged": False},
            },
            "serverInfo": {"name": self.server_name, "version": self.server_version},
        }

    def _handle_tools_list(self) -> dict[str, Any]:
        return {"tools": self.tools.list_tools()}

    def _handle_tools_call(self, request: JsonRpcRequest) -> dict[str, Any]:
        params = request.params
        if params is None:
            raise InvalidParamsError("Invalid params")

        name = params.get("name")
        if name is None:
            raise InvalidParamsError("Missing tool name")
        if not isinstance(name, str):
            raise InvalidParamsError("Tool name must be a string")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        elif not isinstance(arguments, dict):
            raise InvalidParamsError("Tool arguments must be an object")

        try:
            value = self.tools.call(name, arguments)
        except ToolExecutionError as e:
            logger.error(f"Error calling tool {name}: {e}")
            raise InternalError(f"Tool execution failed: {e}") from e
        except Exception as e:
            logger.error(f"Error calling tool {name}: {e}", exc_info=True)
            raise InternalError(f"Tool execution failed: {e}") from e

        return _tool_content(value)

    # ============ NOTIFICATIONS ============

    def process_notification(self, notification: JsonRpcNotification, session: Session) -> None:
        """Handle a notification for its side effect only. Never raises."""
        logger.debug(f"Processing notification with method: {notification.method}")

        try:
            if notification.method in (
                McpMethod.NOTIFICATION_CANCEL,
                McpMethod.NOTIFICATION_CANCELLED,
            ):
                self._handle_cancel(notification, session)
            elif notification.method == McpMethod.NOTIFICATION_INITIALIZED:
                client_info = session.get_data(CLIENT_INFO_KEY)
                client_name = client_info.get("name") if isinstance(client_info, dict) else None
                logger.debug(
                    f"Client {client_name or 'unknown'} reported initialized "
                    f"for session: {session.session_id}"
                )
            else:
                logger.warning(f"Unknown notification method: {notification.method}")
        except Exception as e:
            logger.error(f"Error processing notification: {e}", exc_info=True)

    def _handle_cancel(self, notification: JsonRpcNotification, session: Session) -> None:
        # Requests run to completion; cancellation is acknowledged in the log only.
        params = notification.params or {}
        request_id = params.get("requestId")
        logger.info(
            f"Received cancel notification for request: {request_id} "
            f"in session: {session.session_id}"
        )


def _tool_content(value: Any) -> dict[str, Any]:
    """Wrap a tool's return value as an MCP tools/call result."""
    text = value if isinstance(value, str) else json.dumps(value, indent=2, default=str)
    return {"content": [{"type": "text", "text": text}], "isError": False}
