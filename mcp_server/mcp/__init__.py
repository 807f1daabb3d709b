"""MCP (Model Context Protocol) protocol module.

This module contains components for the MCP Streamable HTTP transport:
- JSON-RPC 2.0 helpers, error codes and exceptions
- Message models and the message classifier
- Tool definitions for tools/list
- The protocol dispatcher (depends on tools and sessions, import from
  .dispatcher directly)

The HTTP transport router lives in mcp_transport.py.
"""

from .jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SERVER_ERROR,
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    JsonRpcError,
    MethodNotFoundError,
    ParseError,
    jsonrpc_error,
    jsonrpc_response,
)
from .messages import (
    ErrorObject,
    JsonRpcMessage,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    classify_message,
)
from .tool_defs import TOOL_DEFINITIONS

# Note: ProtocolDispatcher pulls in the tool registry and is not imported at
# module level. Import directly when needed:
#   from mcp_server.mcp.dispatcher import ProtocolDispatcher

__all__ = [
    # Tool definitions
    "TOOL_DEFINITIONS",
    # JSON-RPC helpers
    "jsonrpc_response",
    "jsonrpc_error",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "SERVER_ERROR",
    # Exceptions
    "JsonRpcError",
    "ParseError",
    "InvalidRequestError",
    "MethodNotFoundError",
    "InvalidParamsError",
    "InternalError",
    # Messages
    "ErrorObject",
    "JsonRpcMessage",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "classify_message",
]
