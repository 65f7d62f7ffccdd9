# vehicle_booking/services/session_store.py
"""
In-process session store for bearer tokens.

Tokens are opaque random strings mapped to a user id and an expiry time.
One SessionStore instance lives on app.state and is handed to routes via
the get_session_store dependency, so tests can swap in their own.
Sessions do not survive a restart and are not shared between workers.
"""

import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from vehicle_booking.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Session:
    token: str
    user_id: int
    issued_at: datetime
    expires_at: datetime


class SessionStore:
    def __init__(self, ttl: timedelta, clock: Callable[[], datetime] = datetime.utcnow):
        self.ttl = ttl
        self._clock = clock
        self._sessions = {}
        self._lock = threading.Lock()

    def issue(self, user_id: int) -> Session:
        now = self._clock()
        session = Session(
            token=secrets.token_urlsafe(32),
            user_id=user_id,
            issued_at=now,
            expires_at=now + self.ttl,
        )
        with self._lock:
            self._sessions[session.token] = session
        logger.debug(f"Session issued for user {user_id}, expires {session.expires_at.isoformat()}")
        return session

    def resolve(self, token: str) -> Optional[Session]:
        """Return the live session for token, or None if unknown or expired."""
        if not token:
            return None
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if session.expires_at <= self._clock():
                del self._sessions[token]
                return None
            return session

    def revoke(self, token: str) -> bool:
        with self._lock:
            return self._sessions.pop(token, None) is not None

    def revoke_user(self, user_id: int) -> int:
        """Drop every session belonging to user_id (e.g. on deactivation)."""
        with self._lock:
            tokens = [t for t, s in self._sessions.items() if s.user_id == user_id]
            for token in tokens:
                del self._sessions[token]
        return len(tokens)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [t for t, s in self._sessions.items() if s.expires_at <= now]
            for token in expired:
                del self._sessions[token]
        return len(expired)

    def __len__(self):
        with self._lock:
            return len(self._sessions)
