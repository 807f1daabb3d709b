"""JSON-RPC message models and the message classifier.

A decoded request body is either a single JSON object or a batch (array) of
objects. ``classify_message`` is the single authority that decides whether each
object is a request, a notification or a response:

- Request: non-null ``id`` and a ``method``
- Notification: a ``method`` and no ``id`` (absent or null)
- Response: non-null ``id``, no ``method``, exactly one of ``result``/``error``

Anything else raises ``ParseError``.
"""

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
)

from .jsonrpc import JSONRPC_VERSION, ParseError

# JSON scalar accepted as a message identifier
RequestId = StrictStr | StrictInt | StrictFloat | StrictBool


class ErrorObject(BaseModel):
    """Error member of a JSON-RPC response."""

    code: StrictInt = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    data: Any = Field(default=None, description="Optional structured payload")


class JsonRpcRequest(BaseModel):
    """A call that expects exactly one response."""

    model_config = ConfigDict(frozen=True)

    jsonrpc: str = JSONRPC_VERSION
    id: RequestId
    method: StrictStr
    params: dict[str, Any] | None = None


class JsonRpcNotification(BaseModel):
    """A one-way message; never answered."""

    model_config = ConfigDict(frozen=True)

    jsonrpc: str = JSONRPC_VERSION
    method: StrictStr
    params: dict[str, Any] | None = None


class JsonRpcResponse(BaseModel):
    """Carries either a result or an error for a previously sent request."""

    model_config = ConfigDict(frozen=True)

    jsonrpc: str = JSONRPC_VERSION
    id: RequestId | None
    result: Any = None
    error: ErrorObject | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialise with exactly one of ``result`` / ``error`` present."""
        payload: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error.model_dump(exclude_none=True)
        else:
            payload["result"] = self.result
        return payload

    @classmethod
    def success(cls, id: Any, result: Any) -> "JsonRpcResponse":
        return cls(id=id, result=result)

    @classmethod
    def failure(cls, id: Any, code: int, message: str, data: Any = None) -> "JsonRpcResponse":
        return cls(id=id, error=ErrorObject(code=code, message=message, data=data))


JsonRpcMessage = JsonRpcRequest | JsonRpcNotification | JsonRpcResponse


def _classify_object(obj: dict[str, Any]) -> JsonRpcMessage:
    has_id = obj.get("id") is not None
    has_method = "method" in obj
    has_result = "result" in obj
    has_error = obj.get("error") is not None

    try:
        if has_method and has_id:
            return JsonRpcRequest.model_validate(obj)
        if has_method:
            fields = {k: v for k, v in obj.items() if k != "id"}
            return JsonRpcNotification.model_validate(fields)
        if has_id and has_result != has_error:
            return JsonRpcResponse.model_validate(obj)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise ParseError(f"Failed to parse JSON-RPC message: {location}: {first['msg']}") from e

    if has_id and has_result and has_error:
        raise ParseError("Unable to determine JSON-RPC message type: both result and error set")
    raise ParseError("Unable to determine JSON-RPC message type")


def classify_message(value: Any) -> list[JsonRpcMessage]:
    """Turn a decoded JSON value into an ordered list of typed messages.

    Arrays are classified element by element (recursively) and the results
    concatenated in order. The input is never mutated.

    Raises:
        ParseError: If any object matches none of the three message shapes,
            or a non-object value appears where a message is expected.
    """
    if isinstance(value, list):
        messages: list[JsonRpcMessage] = []
        for item in value:
            messages.extend(classify_message(item))
        return messages

    if not isinstance(value, dict):
        raise ParseError(f"Expected a JSON-RPC object, got {type(value).__name__}")

    return [_classify_object(value)]
