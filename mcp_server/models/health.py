"""Health and server information models."""

from datetime import datetime

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Server version")
    timestamp: datetime = Field(..., description="Server time")
    active_sessions: int = Field(default=0, ge=0, description="Live MCP sessions")
    open_streams: int = Field(default=0, ge=0, description="Open SSE streams")


class ServiceStatus(BaseModel):
    """Lightweight status for GET /api/v1/health."""

    status: str = Field(default="UP", description="Service status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Server version")


class ServerInfo(BaseModel):
    """Server information for GET /api/v1/info."""

    name: str = Field(..., description="Server name")
    version: str = Field(..., description="Server version")
    description: str = Field(..., description="Server description")
    protocol: str = Field(..., description="MCP protocol version")
    endpoints: list[str] = Field(default_factory=list, description="Available endpoints")
