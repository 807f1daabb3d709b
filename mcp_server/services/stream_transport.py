"""Server-Sent Events stream transport.

Each session may hold at most one open event stream. A stream is opened by the
subscribe verb, immediately receives a heartbeat event, and is torn down on
explicit close, idle timeout, client disconnect or session termination. Every
teardown path deregisters the channel; deregistration is idempotent.

Resumption via ``Last-Event-ID`` is accepted and logged, but missed events are
not replayed.
"""

import asyncio
import itertools
import json
import logging
import threading
from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_STREAM_TIMEOUT_SECONDS = 30.0

HEARTBEAT_EVENT = "heartbeat"
HEARTBEAT_DATA = "connected"


class StreamSetupError(Exception):
    """Raised when an event stream cannot be established."""


class StreamClosedError(Exception):
    """Raised when sending on a channel that has already been closed."""


@dataclass(frozen=True)
class StreamEvent:
    """A single SSE event."""

    data: str
    event: str | None = None
    id: str | None = None

    def encode(self) -> str:
        """Render the event in text/event-stream wire format."""
        lines = []
        if self.id is not None:
            lines.append(f"id: {self.id}")
        if self.event:
            lines.append(f"event: {self.event}")
        for line in self.data.splitlines() or [""]:
            lines.append(f"data: {line}")
        return "\n".join(lines) + "\n\n"


class StreamChannel:
    """One open event stream bound to a session.

    Events are buffered in an unbounded queue and drained by ``events()``,
    which is what the HTTP layer streams to the client. The idle timer runs on
    the event loop and is re-armed by every ``send``, so an unconsumed channel
    still closes and deregisters once it goes quiet.
    """

    def __init__(
        self,
        session_id: str,
        timeout_seconds: float = DEFAULT_STREAM_TIMEOUT_SECONDS,
        on_close: Callable[["StreamChannel"], None] | None = None,
    ):
        self.session_id = session_id
        self.timeout_seconds = timeout_seconds
        self._on_close = on_close
        self._queue: asyncio.Queue[StreamEvent | None] = asyncio.Queue()
        self._closed = False
        self._idle_timer: asyncio.TimerHandle | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, event: StreamEvent) -> None:
        if self._closed:
            raise StreamClosedError(f"Stream for session {self.session_id} is closed")
        self._queue.put_nowait(event)
        self._arm_idle_timer()

    def _arm_idle_timer(self) -> None:
        if self._idle_timer is not None:
            self._idle_timer.cancel()
        loop = asyncio.get_running_loop()
        self._idle_timer = loop.call_later(self.timeout_seconds, self._expire)

    def _expire(self) -> None:
        logger.debug(f"SSE stream timeout for session: {self.session_id}")
        self.close()

    def close(self) -> None:
        """Close the channel. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self._idle_timer is not None:
            self._idle_timer.cancel()
            self._idle_timer = None
        # Wake a consumer blocked on the queue
        self._queue.put_nowait(None)
        if self._on_close is not None:
            self._on_close(self)

    async def events(self) -> AsyncGenerator[str, None]:
        """Yield encoded SSE frames until the channel closes or goes idle."""
        try:
            while True:
                event = await self._queue.get()
                if event is None:
                    logger.debug(f"SSE stream completed for session: {self.session_id}")
                    break
                yield event.encode()
        except asyncio.CancelledError:
            logger.debug(f"SSE stream disconnected for session: {self.session_id}")
            raise
        finally:
            self.close()


class StreamTransport:
    """Registry of open event streams, keyed by session ID."""

    def __init__(self, timeout_seconds: float = DEFAULT_STREAM_TIMEOUT_SECONDS):
        self.timeout_seconds = timeout_seconds
        self._channels: dict[str, StreamChannel] = {}
        self._lock = threading.Lock()
        self._event_ids = itertools.count(1)
        self._event_id_lock = threading.Lock()

    def next_event_id(self) -> str:
        """Return the next value of the strictly increasing event counter."""
        with self._event_id_lock:
            return str(next(self._event_ids))

    async def open(self, session_id: str, last_event_id: str | None = None) -> StreamChannel:
        """Open and register a stream for ``session_id``.

        The heartbeat event is queued before this returns. An existing stream
        for the same session is replaced and closed.

        Raises:
            StreamSetupError: If the heartbeat cannot be sent. The channel is
                closed and deregistered before raising.
        """
        channel = StreamChannel(session_id, self.timeout_seconds, on_close=self._deregister)
        with self._lock:
            previous = self._channels.get(session_id)
            self._channels[session_id] = channel

        if previous is not None:
            logger.info(f"Replacing existing SSE stream for session: {session_id}")
            previous.close()

        try:
            await channel.send(
                StreamEvent(data=HEARTBEAT_DATA, event=HEARTBEAT_EVENT, id=HEARTBEAT_EVENT)
            )
        except Exception as e:
            logger.error(f"Error sending initial SSE heartbeat for session {session_id}: {e}")
            channel.close()
            raise StreamSetupError(f"Failed to create SSE stream: {e}") from e

        logger.debug(f"Sent heartbeat to session: {session_id}")

        # TODO: replay events after last_event_id once events are persisted per stream
        if last_event_id:
            logger.debug(
                f"Resuming SSE stream from event ID: {last_event_id} for session: {session_id}"
            )

        return channel

    async def send(self, session_id: str, payload: Any, event: str | None = None) -> bool:
        """Push a server-initiated event to a session's stream.

        Returns False when the session has no open stream.
        """
        channel = self.get(session_id)
        if channel is None or channel.closed:
            return False

        data = payload if isinstance(payload, str) else json.dumps(payload, default=str)
        event_id = self.next_event_id()
        try:
            await channel.send(StreamEvent(data=data, event=event, id=event_id))
        except StreamClosedError:
            return False

        logger.debug(f"Sent SSE message with ID {event_id} to session {session_id}")
        return True

    def get(self, session_id: str) -> StreamChannel | None:
        with self._lock:
            return self._channels.get(session_id)

    def close(self, session_id: str) -> bool:
        """Close and deregister a session's stream. Returns True if one was open."""
        with self._lock:
            channel = self._channels.pop(session_id, None)
        if channel is None:
            return False
        channel.close()
        logger.info(f"Closed SSE stream for session: {session_id}")
        return True

    def close_all(self) -> int:
        """Close every open stream (used at shutdown)."""
        with self._lock:
            channels = list(self._channels.values())
            self._channels.clear()
        for channel in channels:
            channel.close()
        return len(channels)

    def count(self) -> int:
        with self._lock:
            return len(self._channels)

    def _deregister(self, channel: StreamChannel) -> None:
        with self._lock:
            if self._channels.get(channel.session_id) is channel:
                del self._channels[channel.session_id]
