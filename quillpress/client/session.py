"""Client-side authentication session.

The session is a small state machine::

    anonymous ──start──▶ authenticating ──success──▶ authenticated
        ▲                     │                          │
        │                  failure                       │
        │                     ▼                          │
        └──clear_error──── error                         │
        └────────────────────logout──────────────────────┘

``success`` is also accepted from ``anonymous`` so a persisted session can
be restored without a round trip, and ``start`` from ``authenticated`` or
``error`` begins a fresh login. ``logout`` is valid from every state.
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Callable

import structlog

from quillpress.client.api import ApiError, BlogApiClient
from quillpress.config import ClientConfig

log = structlog.get_logger(__name__)


class SessionStatus(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    ERROR = "error"


class SessionEvent(str, Enum):
    START = "start"
    SUCCESS = "success"
    FAILURE = "failure"
    LOGOUT = "logout"
    CLEAR_ERROR = "clear_error"


class SessionTransitionError(ValueError):
    pass


@dataclass(frozen=True)
class SessionState:
    status: SessionStatus = SessionStatus.ANONYMOUS
    user: dict | None = None
    error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED

    @property
    def loading(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATING


_ALLOWED: dict[SessionEvent, frozenset[SessionStatus]] = {
    SessionEvent.START: frozenset({SessionStatus.ANONYMOUS, SessionStatus.AUTHENTICATED, SessionStatus.ERROR}),
    SessionEvent.SUCCESS: frozenset({SessionStatus.AUTHENTICATING, SessionStatus.ANONYMOUS}),
    SessionEvent.FAILURE: frozenset({SessionStatus.AUTHENTICATING}),
    SessionEvent.LOGOUT: frozenset(SessionStatus),
    SessionEvent.CLEAR_ERROR: frozenset(SessionStatus),
}


def transition(state: SessionState, event: SessionEvent, payload: Any = None) -> SessionState:
    """Return the state after ``event``; raise SessionTransitionError if it is not allowed."""
    if state.status not in _ALLOWED[event]:
        raise SessionTransitionError(f"cannot {event.value} while {state.status.value}")

    if event is SessionEvent.START:
        return SessionState(SessionStatus.AUTHENTICATING)
    if event is SessionEvent.SUCCESS:
        return SessionState(SessionStatus.AUTHENTICATED, user=payload)
    if event is SessionEvent.FAILURE:
        return SessionState(SessionStatus.ERROR, error=payload)
    if event is SessionEvent.LOGOUT:
        return SessionState(SessionStatus.ANONYMOUS)
    # CLEAR_ERROR
    if state.status is SessionStatus.ERROR:
        return SessionState(SessionStatus.ANONYMOUS)
    return replace(state, error=None)


class SessionStore:
    """Persists the logged-in user and session cookies as JSON."""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path is not None else ClientConfig.SESSION_FILE

    def load(self) -> tuple[dict | None, dict[str, str]]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None, {}
        except (OSError, ValueError) as e:
            log.warning("session_file_unreadable", path=str(self.path), error=str(e))
            return None, {}
        if not isinstance(raw, dict):
            return None, {}
        user = raw.get("user") if isinstance(raw.get("user"), dict) else None
        cookies = raw.get("cookies") if isinstance(raw.get("cookies"), dict) else {}
        return user, cookies

    def save(self, user: dict, cookies: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Owner-only from creation; fchmod also tightens a file that already existed
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        os.fchmod(fd, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump({"user": user, "cookies": cookies}, fh)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


Listener = Callable[[SessionState], None]


class AuthSession:
    """Process-wide session holder shared by every view.

    On construction the persisted session (if any) is restored. Views
    subscribe to be told about each state change.
    """

    def __init__(self, api: BlogApiClient, store: SessionStore | None = None):
        self.api = api
        self.store = store
        self.state = SessionState()
        self._listeners: list[Listener] = []
        if store is not None:
            user, cookies = store.load()
            if user:
                api.load_cookies(cookies)
                self.dispatch(SessionEvent.SUCCESS, user)

    @property
    def user(self) -> dict | None:
        return self.state.user

    @property
    def is_authenticated(self) -> bool:
        return self.state.is_authenticated

    @property
    def error(self) -> str | None:
        return self.state.error

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def dispatch(self, event: SessionEvent, payload: Any = None) -> SessionState:
        self.state = transition(self.state, event, payload)
        for listener in list(self._listeners):
            listener(self.state)
        return self.state

    def _persist(self) -> None:
        if self.store is not None and self.state.user:
            self.store.save(self.state.user, self.api.export_cookies())

    def login(self, email: str, password: str) -> bool:
        self.dispatch(SessionEvent.START)
        try:
            user = self.api.login(email, password)
        except ApiError as e:
            self.dispatch(SessionEvent.FAILURE, e.message or "Login failed")
            return False
        self.dispatch(SessionEvent.SUCCESS, user)
        self._persist()
        return True

    def register(self, name: str, email: str, password: str) -> bool:
        self.dispatch(SessionEvent.START)
        try:
            user = self.api.register(name, email, password)
        except ApiError as e:
            self.dispatch(SessionEvent.FAILURE, e.message or "Registration failed")
            return False
        self.dispatch(SessionEvent.SUCCESS, user)
        self._persist()
        return True

    def logout(self) -> None:
        try:
            self.api.logout()
        except ApiError as e:
            # The local session ends regardless of what the server says
            log.info("logout_request_failed", error=e.message)
        if self.store is not None:
            self.store.clear()
        self.dispatch(SessionEvent.LOGOUT)

    def clear_error(self) -> None:
        self.dispatch(SessionEvent.CLEAR_ERROR)
