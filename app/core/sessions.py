# app/core/sessions.py

"""
Server-side login sessions.

The client only holds an opaque session id in a cookie; the id is mapped to a
user id here. Sessions expire after `SESSION_MAX_AGE_SECONDS` of inactivity.
"""

import secrets
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

from fastapi import Request


class SessionStore(ABC):
    @abstractmethod
    async def create(self, user_id: int) -> str:
        """Bind a new session id to the user and return it."""

    @abstractmethod
    async def get(self, sid: str) -> Optional[int]:
        """User id bound to the session, or None when unknown or expired."""

    @abstractmethod
    async def delete(self, sid: str) -> None:
        """Forget the session. Unknown ids are ignored."""


class MemorySessionStore(SessionStore):
    def __init__(self, max_age_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.max_age_seconds = max_age_seconds
        self._clock = clock
        self._sessions: Dict[str, Tuple[int, float]] = {}

    async def create(self, user_id: int) -> str:
        sid = secrets.token_urlsafe(32)
        self._sessions[sid] = (user_id, self._clock() + self.max_age_seconds)
        return sid

    async def get(self, sid: str) -> Optional[int]:
        entry = self._sessions.get(sid)
        if entry is None:
            return None
        user_id, expires_at = entry
        now = self._clock()
        if expires_at <= now:
            del self._sessions[sid]
            return None
        # sliding expiry
        self._sessions[sid] = (user_id, now + self.max_age_seconds)
        return user_id

    async def delete(self, sid: str) -> None:
        self._sessions.pop(sid, None)


def get_session_store(request: Request) -> SessionStore:
    store = getattr(request.app.state, "session_store", None)
    if store is None:
        raise RuntimeError("Session store is not initialized")
    return store
