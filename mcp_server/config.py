"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from . import __version__


class Settings(BaseSettings):
    """Runtime configuration for the MCP server.

    Every field can be overridden through an environment variable of the same
    name (case-insensitive) or a local ``.env`` file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # MCP protocol
    mcp_path: str = "/mcp"
    server_name: str = "MCP Server"
    server_version: str = __version__
    protocol_version: str = "2024-11-05"

    # Sessions and streams
    session_ttl_hours: float = 24
    session_sweep_interval_seconds: float = 300
    stream_timeout_seconds: float = 30.0

    # CORS
    cors_allowed_origins: str = "*"

    # Error tracking
    sentry_dsn: str | None = None

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse the comma-separated CORS origins into a list."""
        if self.cors_allowed_origins.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]


settings = Settings()
