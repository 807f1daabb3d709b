"""Shared fixtures for the MCP server test-suite."""

from datetime import UTC, datetime, timedelta

import pytest

from mcp_server.config import Settings
from mcp_server.server import create_app


class FakeClock:
    """Manually advanced UTC clock for ageing sessions."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_settings() -> Settings:
    # Short idle timeout so SSE responses complete inside ASGITransport
    return Settings(_env_file=None, stream_timeout_seconds=0.2, cors_allowed_origins="*")


@pytest.fixture
def app(test_settings):
    return create_app(test_settings)
