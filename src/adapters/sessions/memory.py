"""
In-memory registration session store.

Sessions live only in process memory: a restart sends every registrant back
to the first step. Sessions are kept in their serialized dict form.

A session untouched for longer than idle_timeout seconds counts as
abandoned and is evicted on the next create or get.
"""

import logging
import secrets
import threading
import time
from collections.abc import Callable

from src.domain.models import RegistrationSession
from src.domain.ports import RegistrationStage

logger = logging.getLogger(__name__)


class InMemorySessionStore:
    """
    Implements SessionStore protocol in process memory.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Sessions are keyed by an unguessable token.
    """

    def __init__(
        self,
        idle_timeout: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lock = threading.Lock()
        self._idle_timeout = idle_timeout
        self._clock = clock
        # session_id -> (last touched, serialized session)
        self._sessions: dict[str, tuple[float, dict]] = {}

    def create(self, session: RegistrationSession) -> str:
        session_id = secrets.token_urlsafe(24)
        with self._lock:
            now = self._clock()
            self._evict_idle(now)
            self._sessions[session_id] = (now, session.to_dict())
        return session_id

    def get(self, session_id: str) -> RegistrationSession | None:
        with self._lock:
            now = self._clock()
            self._evict_idle(now)
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            self._sessions[session_id] = (now, entry[1])
        return RegistrationSession.from_dict(entry[1])

    def save(self, session_id: str, session: RegistrationSession) -> None:
        """Store the new session value; a completed session is destroyed."""
        with self._lock:
            if session.stage is RegistrationStage.COMPLETE:
                self._sessions.pop(session_id, None)
            else:
                self._sessions[session_id] = (self._clock(), session.to_dict())

    def discard(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _evict_idle(self, now: float) -> None:
        expired = [
            session_id
            for session_id, (touched, _) in self._sessions.items()
            if now - touched > self._idle_timeout
        ]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            logger.info(f"Evicted {len(expired)} abandoned registration session(s)")
