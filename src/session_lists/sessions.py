from __future__ import annotations

import copy
import logging
import secrets
import time
from abc import ABC, abstractmethod
from threading import RLock
from typing import Awaitable, Callable, Dict, Optional, Tuple

from fastapi import Request, Response

from .models import SessionState, new_session_state
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class SessionStore(ABC):
    """Abstract contract for per-user session state storage."""

    @abstractmethod
    def load(self, session_key: str) -> SessionState:
        """Return the state for session_key, or a fresh empty state if there is none."""

    @abstractmethod
    def save(self, session_key: str, state: SessionState) -> None:
        """Store state under session_key, replacing anything stored before."""

    @abstractmethod
    def clear(self, session_key: str) -> bool:
        """Drop a session. Return True if it existed."""

    def new_key(self) -> str:
        """Return a new random session key."""
        return secrets.token_urlsafe(32)


class InMemorySessionStore(SessionStore):
    """
    Thread-safe in-memory session store.

    Sessions idle for longer than max_age_seconds are discarded on the next load of
    their key and swept on every save;
    a max_age_seconds of 0 keeps sessions for the life of the process.
    """

    def __init__(self, max_age_seconds: int = 0) -> None:
        self._lock = RLock()
        self._sessions: Dict[str, Tuple[SessionState, float]] = {}
        self._max_age = max_age_seconds

    def _now(self) -> float:
        return time.monotonic()

    def _expired(self, last_access: float) -> bool:
        return self._max_age > 0 and self._now() - last_access > self._max_age

    def load(self, session_key: str) -> SessionState:
        with self._lock:
            entry = self._sessions.get(session_key)
            if entry is None:
                return new_session_state()
            state, last_access = entry
            if self._expired(last_access):
                del self._sessions[session_key]
                logger.info("Session expired after %ss idle", self._max_age)
                return new_session_state()
            loaded = copy.deepcopy(state)
        loaded.setdefault("lists", [])
        return loaded

    def save(self, session_key: str, state: SessionState) -> None:
        with self._lock:
            self.purge_expired()
            self._sessions[session_key] = (copy.deepcopy(state), self._now())

    def purge_expired(self) -> int:
        """Drop every expired session. Return how many were dropped."""
        with self._lock:
            expired = [key for key, (_, last_access) in self._sessions.items() if self._expired(last_access)]
            for key in expired:
                del self._sessions[key]
        if expired:
            logger.info("Purged %d expired sessions", len(expired))
        return len(expired)

    def clear(self, session_key: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_key, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


# PUBLIC_INTERFACE
def get_session_store(settings: Optional[Settings] = None) -> SessionStore:
    """
    Factory to return the configured session store based on settings.
    - memory: InMemorySessionStore
    """
    if settings is None:
        settings = get_settings()
    return InMemorySessionStore(max_age_seconds=settings.session_max_age)


def _is_blank(state: SessionState) -> bool:
    return not (state.get("lists") or state.get("error") or state.get("success"))


# PUBLIC_INTERFACE
def session_middleware(
    store: SessionStore, settings: Settings
) -> Callable[[Request, Callable[[Request], Awaitable[Response]]], Awaitable[Response]]:
    """
    Build an HTTP middleware that loads the caller's session before the handler runs
    and saves it afterwards.

    The state is exposed to handlers as request.state.session and mutated in place.
    Clients without a session cookie are issued a new key, but only once their
    session holds something; untouched blank sessions are neither stored nor sent.
    """
    cookie_name = settings.session_cookie_name

    async def _middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        session_key = request.cookies.get(cookie_name)
        has_cookie = bool(session_key)
        if not has_cookie:
            session_key = store.new_key()

        state = store.load(session_key)
        request.state.session = state

        response = await call_next(request)

        if not has_cookie and _is_blank(state):
            return response
        if not has_cookie:
            logger.debug("Issued new session key")
        store.save(session_key, state)
        response.set_cookie(
            cookie_name,
            session_key,
            max_age=settings.session_max_age or None,
            httponly=True,
            samesite="lax",
            secure=settings.session_cookie_secure,
            path="/",
        )
        return response

    return _middleware
