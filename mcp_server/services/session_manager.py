"""Session management for the MCP Streamable HTTP transport.

Owns the table of live sessions: creation, lookup with lazy expiry, explicit
termination, periodic sweeping and syntactic validation of externally supplied
session identifiers.

Sessions expire a fixed time after *creation*, not after last activity.
"""

import logging
import re
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(hours=24)

# Visible ASCII characters only (0x21-0x7E)
SESSION_ID_PATTERN = re.compile(r"^[\x21-\x7E]+$")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def generate_session_id() -> str:
    """Generate a collision-resistant session ID (128-bit random UUID)."""
    return str(uuid4())


@dataclass
class Session:
    """Server-side state for one logical client conversation."""

    session_id: str
    created_at: datetime = field(default_factory=_utcnow)
    initialized: bool = False
    data: dict[str, Any] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def is_expired(self, now: datetime, ttl: timedelta = DEFAULT_SESSION_TTL) -> bool:
        return now > self.created_at + ttl

    def mark_initialized(self) -> None:
        with self.lock:
            self.initialized = True

    def put_data(self, key: str, value: Any) -> None:
        with self.lock:
            self.data[key] = value

    def get_data(self, key: str, default: Any = None) -> Any:
        with self.lock:
            return self.data.get(key, default)


class SessionManager:
    """Thread-safe table of live sessions keyed by session ID.

    Args:
        ttl: Lifetime of a session measured from its creation time
        clock: Returns the current timezone-aware UTC time (injectable for tests)
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.ttl = ttl
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self) -> Session:
        """Create, register and return a fresh uninitialized session."""
        session = Session(session_id=generate_session_id(), created_at=self._clock())
        with self._lock:
            self._sessions[session.session_id] = session
        logger.info(f"Created new MCP session: {session.session_id}")
        return session

    def get(self, session_id: str | None) -> Session | None:
        """Look up a live session.

        Returns None for missing or syntactically invalid IDs and for unknown
        sessions. An expired session is removed from the table on lookup.
        """
        if not session_id or not self.is_valid(session_id):
            return None

        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if session.is_expired(self._clock(), self.ttl):
                del self._sessions[session_id]
                expired = True
            else:
                expired = False

        if expired:
            logger.info(f"Removed expired session: {session_id}")
            return None
        return session

    @staticmethod
    def is_valid(session_id: str | None) -> bool:
        """Check that a session ID contains only visible ASCII characters."""
        if not session_id:
            return False
        return SESSION_ID_PATTERN.fullmatch(session_id) is not None

    def terminate(self, session_id: str) -> bool:
        """Remove a session. Returns True if it was present.

        Associated event streams are not touched; closing them is the caller's
        responsibility.
        """
        with self._lock:
            removed = self._sessions.pop(session_id, None)
        if removed is not None:
            logger.info(f"Terminated MCP session: {session_id}")
            return True
        return False

    def sweep_expired(self) -> int:
        """Remove every expired session and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [
                sid for sid, session in self._sessions.items() if session.is_expired(now, self.ttl)
            ]
            for sid in expired:
                del self._sessions[sid]

        for sid in expired:
            logger.debug(f"Removing expired session: {sid}")
        if expired:
            logger.info(f"Swept {len(expired)} expired session(s)")
        return len(expired)

    def count(self) -> int:
        """Number of sessions currently in the table (diagnostic only)."""
        with self._lock:
            return len(self._sessions)

    def resolve(self, session_id: str | None) -> Session:
        """Return the live session for ``session_id`` or create a new one.

        A missing, invalid, unknown or expired ID never raises; a fresh session
        is created instead and nothing is carried over from the old one.
        """
        if session_id and self.is_valid(session_id):
            session = self.get(session_id)
            if session is not None:
                return session
            logger.info(f"Session {session_id} not found; creating a new session")
        return self.create()
