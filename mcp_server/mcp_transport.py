"""MCP Streamable HTTP transport router.

Implements the three verbs of the transport on a single path (default /mcp):

    POST    Submit one JSON-RPC message or a batch
    GET     Open a Server-Sent Events stream for the session
    DELETE  Terminate the session and close its stream

Origin validation runs before these handlers (see middleware/origin_guard.py).
Sessions are resolved leniently: an unknown, expired or missing session ID
yields a fresh session rather than an error.

Client config example:
```json
{"mcpServers": {"local": {"type": "http", "url": "http://localhost:8080/mcp"}}}
```
"""

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.concurrency import run_in_threadpool

from .api.deps import (
    get_client_ip,
    get_dispatcher,
    get_session_manager,
    get_stream_transport,
)
from .mcp import (
    InternalError,
    InvalidRequestError,
    JsonRpcMessage,
    JsonRpcNotification,
    JsonRpcRequest,
    ParseError,
    classify_message,
)
from .mcp.dispatcher import ProtocolDispatcher
from .services.session_manager import Session, SessionManager
from .services.stream_transport import StreamSetupError, StreamTransport

logger = logging.getLogger(__name__)

# Header names
MCP_SESSION_HEADER = "Mcp-Session-Id"
LAST_EVENT_ID_HEADER = "Last-Event-ID"

CONTENT_TYPE_SSE = "text/event-stream"


def _process_messages(
    dispatcher: ProtocolDispatcher,
    messages: list[JsonRpcMessage],
    session: Session,
) -> list[dict]:
    """Process messages in order and collect one response per request."""
    responses = []
    for message in messages:
        if isinstance(message, JsonRpcRequest):
            responses.append(dispatcher.process_request(message, session).to_dict())
        elif isinstance(message, JsonRpcNotification):
            dispatcher.process_notification(message, session)
        else:
            # Client responses to server-initiated requests are accepted but unused
            logger.debug(f"Ignoring client response {message.id} in session {session.session_id}")
    return responses


# ============ HANDLERS ============


async def handle_post(
    request: Request,
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
    dispatcher: Annotated[ProtocolDispatcher, Depends(get_dispatcher)],
    mcp_session_id: Annotated[str | None, Header(alias=MCP_SESSION_HEADER)] = None,
) -> Response:
    """
    Submit JSON-RPC messages.

    Returns 202 with no body when the submission holds only notifications
    and/or responses (an empty batch included), otherwise 200 with one
    response object (single request) or an array of responses. Parse failures
    short-circuit to a single 400 error response with a null id.
    """
    logger.info(f"Received POST request to MCP endpoint from {get_client_ip(request)}")
    session = sessions.resolve(mcp_session_id)

    try:
        body = json.loads(await request.body())
        messages = classify_message(body)
    except ParseError as e:
        logger.warning(f"Rejected JSON-RPC submission: {e.message}")
        return JSONResponse(ParseError(f"Parse error: {e.message}").to_response(), status_code=400)
    except (ValueError, RecursionError) as e:
        logger.warning(f"Rejected malformed JSON body: {e}")
        return JSONResponse(ParseError(f"Parse error: {e}").to_response(), status_code=400)

    session_headers = {MCP_SESSION_HEADER: session.session_id}
    responses = await run_in_threadpool(_process_messages, dispatcher, messages, session)

    if not any(isinstance(message, JsonRpcRequest) for message in messages):
        return Response(status_code=202, headers=session_headers)

    content = responses[0] if len(responses) == 1 else responses
    return JSONResponse(content, headers=session_headers)


async def handle_get(
    request: Request,
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
    streams: Annotated[StreamTransport, Depends(get_stream_transport)],
    accept: Annotated[str, Header()] = "",
    mcp_session_id: Annotated[str | None, Header(alias=MCP_SESSION_HEADER)] = None,
    last_event_id: Annotated[str | None, Header(alias=LAST_EVENT_ID_HEADER)] = None,
) -> Response:
    """
    Open a Server-Sent Events stream for the session.

    The first event on the stream is always the heartbeat. The stream closes
    after a period of inactivity, on DELETE, or when the client disconnects.
    """
    logger.info(f"Received GET request to MCP endpoint from {get_client_ip(request)}")

    if CONTENT_TYPE_SSE not in accept.lower():
        logger.warning(f"Client does not accept SSE: {accept!r}")
        return JSONResponse(
            InvalidRequestError(
                f"Not Acceptable: Client must accept {CONTENT_TYPE_SSE}"
            ).to_response(),
            status_code=406,
        )

    session = sessions.resolve(mcp_session_id)

    try:
        channel = await streams.open(session.session_id, last_event_id=last_event_id)
    except StreamSetupError as e:
        logger.error(f"Error creating SSE stream: {e}")
        return JSONResponse(
            InternalError("Failed to create SSE stream").to_response(), status_code=500
        )

    logger.info(f"Created SSE stream for session: {session.session_id}")

    return StreamingResponse(
        channel.events(),
        media_type=CONTENT_TYPE_SSE,
        headers={
            "Cache-Control": "no-cache, no-store",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
            MCP_SESSION_HEADER: session.session_id,
        },
    )


async def handle_delete(
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
    streams: Annotated[StreamTransport, Depends(get_stream_transport)],
    mcp_session_id: Annotated[str | None, Header(alias=MCP_SESSION_HEADER)] = None,
) -> Response:
    """
    Terminate a session and close its SSE stream.

    Returns 405 when no valid, live session ID is supplied; "no session" and
    "session already gone" are not distinguished. A stream still registered
    under a syntactically valid ID is closed either way.
    """
    if not SessionManager.is_valid(mcp_session_id):
        return Response(status_code=405)

    streams.close(mcp_session_id)
    if sessions.get(mcp_session_id) is not None:
        sessions.terminate(mcp_session_id)
        logger.info(f"Session terminated: {mcp_session_id}")
        return Response(status_code=200)

    return Response(status_code=405)


def create_router(path: str = "/mcp") -> APIRouter:
    """Build the transport router with all three verbs mounted on ``path``."""
    router = APIRouter(tags=["MCP Transport"])
    router.add_api_route(path, handle_post, methods=["POST"])
    router.add_api_route(path, handle_get, methods=["GET"])
    router.add_api_route(path, handle_delete, methods=["DELETE"])
    return router
