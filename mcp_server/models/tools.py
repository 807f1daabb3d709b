"""Tool models for the REST tool API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ToolDefinition(BaseModel):
    """A tool as advertised by tools/list."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Unique tool name")
    description: str = Field(..., description="What the tool does")
    input_schema: dict[str, Any] = Field(
        default_factory=dict, alias="inputSchema", description="JSON schema of the arguments"
    )


class ToolCall(BaseModel):
    """Request body for POST /api/v1/tools/call."""

    name: str = Field(..., min_length=1, description="Tool to execute")
    arguments: dict[str, Any] = Field(default_factory=dict, description="Tool arguments")


class ToolResult(BaseModel):
    """Outcome of a tool execution."""

    model_config = ConfigDict(populate_by_name=True)

    content: Any = Field(default=None, description="Tool output on success")
    is_error: bool = Field(default=False, alias="isError", description="True if the call failed")
    error: str | None = Field(default=None, description="Error message on failure")

    @classmethod
    def success(cls, content: Any) -> "ToolResult":
        return cls(content=content)

    @classmethod
    def failure(cls, error: str) -> "ToolResult":
        return cls(is_error=True, error=error)
