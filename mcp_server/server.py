"""MCP Server - FastAPI application for the Streamable HTTP transport."""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from datetime import UTC, datetime, timedelta

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.tools import router as tools_router
from .config import Settings, settings
from .mcp.dispatcher import ProtocolDispatcher
from .mcp_transport import LAST_EVENT_ID_HEADER, MCP_SESSION_HEADER, create_router
from .middleware import OriginGuardMiddleware
from .models import HealthResponse
from .services.session_manager import SessionManager
from .services.stream_transport import StreamTransport
from .tools import default_registry

logger = logging.getLogger(__name__)

# ============ SENTRY INITIALIZATION ============


def _filter_sentry_event(event: dict) -> dict:
    """Remove sensitive data from Sentry events."""
    if "request" in event and "headers" in event["request"]:
        headers = event["request"]["headers"]
        for key in ["mcp-session-id", "cookie"]:
            if key in headers:
                headers[key] = "[REDACTED]"
    return event


# Initialize Sentry if DSN is configured
if settings.sentry_dsn:
    try:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
        from sentry_sdk.integrations.starlette import StarletteIntegration

        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1 if settings.environment == "production" else 1.0,
            integrations=[
                FastApiIntegration(),
                StarletteIntegration(),
            ],
            before_send=lambda event, hint: _filter_sentry_event(event),
        )
        logger.info("Sentry error tracking initialized")
    except ImportError:
        logger.warning("Sentry DSN configured but sentry-sdk not installed")
else:
    logger.debug("Sentry DSN not configured - error tracking disabled")


# ============ LIFESPAN ============


async def _sweep_sessions(sessions: SessionManager, interval_seconds: float) -> None:
    """Periodically evict expired sessions until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        removed = sessions.sweep_expired()
        if removed:
            logger.info(f"Swept {removed} expired session(s), {sessions.count()} active")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    app_settings: Settings = app.state.settings

    # Startup
    logger.info(f"Starting {app_settings.server_name} v{app_settings.server_version}")

    # Validate CORS configuration in production
    if not app_settings.debug and app_settings.cors_allowed_origins == "*":
        logger.warning(
            "SECURITY WARNING: CORS is configured to allow all origins ('*'). "
            "Set CORS_ALLOWED_ORIGINS to specific domains in production."
        )

    sweeper = asyncio.create_task(
        _sweep_sessions(app.state.sessions, app_settings.session_sweep_interval_seconds)
    )

    yield

    # Shutdown
    sweeper.cancel()
    with suppress(asyncio.CancelledError):
        await sweeper
    closed = app.state.streams.close_all()
    logger.info(f"Shutdown complete, closed {closed} SSE stream(s)")


# ============ APPLICATION FACTORY ============


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        app_settings: Settings to run with (defaults to the environment-loaded settings)

    Returns:
        Application with the session table, stream registry, tool registry and
        dispatcher attached to ``app.state``
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title=app_settings.server_name,
        description="Model Context Protocol server over the Streamable HTTP transport",
        version=app_settings.server_version,
        lifespan=lifespan,
    )

    tools = default_registry()
    app.state.settings = app_settings
    app.state.sessions = SessionManager(ttl=timedelta(hours=app_settings.session_ttl_hours))
    app.state.streams = StreamTransport(timeout_seconds=app_settings.stream_timeout_seconds)
    app.state.tools = tools
    app.state.dispatcher = ProtocolDispatcher(
        tools,
        server_name=app_settings.server_name,
        server_version=app_settings.server_version,
        protocol_version=app_settings.protocol_version,
    )

    # Origin validation for the MCP endpoint (DNS-rebinding protection)
    app.add_middleware(OriginGuardMiddleware, path_prefix=app_settings.mcp_path)

    # CORS middleware - browsers must be able to read the session header
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=app_settings.cors_origins_list != ["*"],
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", MCP_SESSION_HEADER, LAST_EVENT_ID_HEADER],
        expose_headers=[MCP_SESSION_HEADER],
    )

    # Mount MCP Streamable HTTP transport and the REST tool API
    app.include_router(create_router(app_settings.mcp_path))
    app.include_router(tools_router)

    _register_exception_handlers(app)
    _register_health_endpoints(app)

    return app


# ============ EXCEPTION HANDLERS ============


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions with consistent response format."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.detail},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions with sanitized error messages."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "An internal server error occurred. Please try again.",
            },
        )


# ============ HEALTH ENDPOINTS ============


def _register_health_endpoints(app: FastAPI) -> None:
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request) -> HealthResponse:
        """Health check endpoint (lightweight liveness check)."""
        state = request.app.state
        return HealthResponse(
            status="healthy",
            version=state.settings.server_version,
            timestamp=datetime.now(UTC),
            active_sessions=state.sessions.count(),
            open_streams=state.streams.count(),
        )

    @app.get("/", tags=["Health"])
    async def root(request: Request):
        """Root endpoint with API info."""
        app_settings: Settings = request.app.state.settings
        return {
            "name": app_settings.server_name,
            "version": app_settings.server_version,
            "mcp": app_settings.mcp_path,
            "docs": "/docs",
            "health": "/health",
        }


app = create_app()


# ============ MAIN ============


def main():
    """Run the server with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    uvicorn.run(
        "mcp_server.server:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
