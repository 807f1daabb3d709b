"""JSON-RPC 2.0 helpers for the MCP transport.

This module provides the wire-level building blocks shared by the classifier,
the dispatcher and the HTTP router: standard error codes, helpers that build
response envelopes, and the exception hierarchy used to carry an error code
from where a fault is detected to where the reply is assembled.

See: https://www.jsonrpc.org/specification
"""

from typing import Any

JSONRPC_VERSION = "2.0"

# Standard JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_ERROR = -32000  # Base for application-specific errors


def jsonrpc_response(id: Any, result: Any) -> dict:
    """Create a JSON-RPC 2.0 success response.

    Args:
        id: Request ID (must match the request)
        result: The result payload

    Returns:
        JSON-RPC 2.0 response dict
    """
    return {"jsonrpc": JSONRPC_VERSION, "id": id, "result": result}


def jsonrpc_error(id: Any, code: int, message: str, data: Any = None) -> dict:
    """Create a JSON-RPC 2.0 error response.

    Standard error codes:
        -32700: Parse error
        -32600: Invalid request
        -32601: Method not found
        -32602: Invalid params
        -32603: Internal error
        -32000 to -32099: Server errors (application-specific)

    Args:
        id: Request ID (can be None for parse errors)
        code: Error code (negative integer)
        message: Human-readable error message
        data: Optional structured payload, omitted from the envelope when None

    Returns:
        JSON-RPC 2.0 error response dict
    """
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": JSONRPC_VERSION, "id": id, "error": error}


# ============ EXCEPTIONS ============


class JsonRpcError(Exception):
    """Base class for faults that map onto a JSON-RPC error object."""

    code: int = INTERNAL_ERROR
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None, data: Any = None):
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)

    def to_response(self, id: Any = None) -> dict:
        """Render this error as a JSON-RPC error response for ``id``."""
        return jsonrpc_error(id, self.code, self.message, self.data)


class ParseError(JsonRpcError):
    """Malformed JSON or a JSON value that is not a recognisable message."""

    code = PARSE_ERROR
    default_message = "Parse error"


class InvalidRequestError(JsonRpcError):
    """Structurally valid JSON that is not a usable message."""

    code = INVALID_REQUEST
    default_message = "Invalid Request"


class MethodNotFoundError(JsonRpcError):
    code = METHOD_NOT_FOUND
    default_message = "Method not found"


class InvalidParamsError(JsonRpcError):
    code = INVALID_PARAMS
    default_message = "Invalid params"


class InternalError(JsonRpcError):
    code = INTERNAL_ERROR
    default_message = "Internal error"
