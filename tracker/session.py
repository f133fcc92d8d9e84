"""Client-side session lifecycle.

The manager owns the access/refresh token pair and the cached user records.
It is created once per app session, loaded from the token store at startup,
and only mutated by ``login``, ``register``, ``refresh`` and ``logout``.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional

from tracker.constants import (
    ACCESS_TOKEN_KEY,
    EXPIRES_AT_KEY,
    PROFILE_KEY,
    REFRESH_TOKEN_KEY,
    REQUEST_TIMEOUT_SECONDS,
    USER_KEY,
)
from tracker.data.api_client import build_http_session, decode, send
from tracker.errors import (
    ApiError,
    AuthenticationError,
    NetworkError,
    SessionExpiredError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    LOADING = "loading"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"
    REFRESHING = "refreshing"


class FailureReason(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    NETWORK_ERROR = "network_error"
    SERVER_ERROR = "server_error"


@dataclass
class AuthResult:
    success: bool
    reason: Optional[FailureReason] = None
    message: str = ""


@dataclass
class Session:
    access_token: str
    refresh_token: str
    expires_at: Any = None
    user: Optional[dict] = None
    profile: Optional[dict] = field(default=None)


def _failure_from_error(exc: ApiError, default_message: str) -> AuthResult:
    if isinstance(exc, NetworkError):
        reason = FailureReason.NETWORK_ERROR
    elif isinstance(exc, (AuthenticationError, ValidationError)):
        reason = FailureReason.INVALID_CREDENTIALS
    else:
        reason = FailureReason.SERVER_ERROR
    return AuthResult(success=False, reason=reason, message=exc.message or default_message)


def _session_from_payload(payload) -> Session:
    if not isinstance(payload, dict) or not payload.get(ACCESS_TOKEN_KEY) or not payload.get(REFRESH_TOKEN_KEY):
        raise ApiError("Response did not include a token pair")
    return Session(
        access_token=payload[ACCESS_TOKEN_KEY],
        refresh_token=payload[REFRESH_TOKEN_KEY],
        expires_at=payload.get(EXPIRES_AT_KEY),
        user=payload.get(USER_KEY),
    )


class SessionManager:
    def __init__(self, base_url: str, store, http=None, timeout: float = REQUEST_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.store = store
        self.http = http if http is not None else build_http_session()
        self.timeout = timeout
        self._session: Optional[Session] = None
        self._state = AuthState.LOADING
        self._lock = threading.RLock()
        self._refresh_flight: Optional[Future] = None
        self._listeners: List[Callable[[AuthState, AuthState], None]] = []

    # -- state -------------------------------------------------------------

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state in (AuthState.AUTHENTICATED, AuthState.REFRESHING)

    @property
    def access_token(self) -> Optional[str]:
        session = self._session
        return session.access_token if session else None

    @property
    def user(self) -> Optional[dict]:
        session = self._session
        return session.user if session else None

    @property
    def profile(self) -> Optional[dict]:
        session = self._session
        return session.profile if session else None

    def add_listener(self, callback: Callable[[AuthState, AuthState], None]) -> None:
        self._listeners.append(callback)

    def _set_state(self, new_state: AuthState) -> None:
        old_state = self._state
        if old_state == new_state:
            return
        self._state = new_state
        logger.debug("Session state %s -> %s", old_state.value, new_state.value)
        for callback in list(self._listeners):
            try:
                callback(old_state, new_state)
            except Exception:
                logger.exception("Session state listener failed on %s -> %s", old_state.value, new_state.value)

    def authorization_headers(self) -> dict:
        token = self.access_token
        return {"Authorization": f"Bearer {token}"} if token else {}

    # -- persistence ---------------------------------------------------------

    def load(self) -> AuthState:
        stored = self.store.load()
        access_token = stored.get(ACCESS_TOKEN_KEY)
        refresh_token = stored.get(REFRESH_TOKEN_KEY)
        with self._lock:
            if access_token and refresh_token:
                self._session = Session(
                    access_token=access_token,
                    refresh_token=refresh_token,
                    user=stored.get(USER_KEY),
                    profile=stored.get(PROFILE_KEY),
                )
                self._set_state(AuthState.AUTHENTICATED)
            else:
                self._session = None
                self._set_state(AuthState.ANONYMOUS)
        return self._state

    def _persist(self, session: Session) -> None:
        try:
            self.store.save(
                {
                    ACCESS_TOKEN_KEY: session.access_token,
                    REFRESH_TOKEN_KEY: session.refresh_token,
                    USER_KEY: session.user,
                    PROFILE_KEY: session.profile,
                }
            )
        except OSError as exc:
            logger.warning("Failed to persist session, keeping it in memory only: %s", exc)

    def _clear(self) -> None:
        self._session = None
        try:
            self.store.clear()
        except OSError as exc:
            logger.warning("Failed to clear stored session: %s", exc)
        self._set_state(AuthState.ANONYMOUS)

    def _establish(self, session: Session) -> None:
        with self._lock:
            self._session = session
            self._persist(session)
            self._set_state(AuthState.AUTHENTICATED)

    def update_profile(self, profile: Optional[dict]) -> None:
        with self._lock:
            if self._session is None:
                return
            self._session.profile = profile
            self._persist(self._session)

    # -- unauthenticated calls ----------------------------------------------

    def _post(self, path: str, payload: dict):
        response = send(
            self.http,
            "POST",
            f"{self.base_url}{path}",
            json=payload,
            timeout=self.timeout,
        )
        return decode(response)

    def login(self, email: str, password: str) -> AuthResult:
        if not email or not password:
            return AuthResult(False, FailureReason.INVALID_CREDENTIALS, "Email and password are required")
        try:
            payload = self._post("/login", {"email": email, "password": password})
            session = _session_from_payload(payload)
        except ApiError as exc:
            logger.info("Login failed for %s: %s", email, exc.message)
            return _failure_from_error(exc, "Login failed")
        self._establish(session)
        return AuthResult(success=True)

    def register(self, username: str, password: str, email: str, phone: str | None = None, preferred_contact_method: str | None = None) -> AuthResult:
        body = {
            "username": username,
            "password": password,
            "email": email,
            "phone": phone,
            "preferred_contact_method": preferred_contact_method,
        }
        try:
            payload = self._post("/api/users", body)
        except ApiError as exc:
            logger.info("Registration failed for %s: %s", email, exc.message)
            return _failure_from_error(exc, "Registration failed")
        if isinstance(payload, dict) and payload.get(ACCESS_TOKEN_KEY):
            try:
                session = _session_from_payload(payload)
            except ApiError as exc:
                return _failure_from_error(exc, "Registration failed")
            self._establish(session)
            return AuthResult(success=True)
        return self.login(email, password)

    # -- refresh ------------------------------------------------------------

    def refresh(self, failed_access_token: Optional[str] = None) -> str:
        """Return a usable access token, exchanging the refresh token at most once.

        Callers that hit a 401 concurrently share a single exchange. A caller
        whose rejected token has already been replaced gets the current token
        straight away.
        """
        with self._lock:
            current = self._session
            if current is None:
                raise SessionExpiredError("Not signed in", 401)
            flight = self._refresh_flight
            if flight is None:
                if failed_access_token is not None and failed_access_token != current.access_token:
                    return current.access_token
                flight = Future()
                self._refresh_flight = flight
                refresh_token = current.refresh_token
                leader = True
                self._set_state(AuthState.REFRESHING)
            else:
                leader = False

        if not leader:
            return flight.result()

        try:
            return self._exchange(flight, refresh_token, current)
        finally:
            # Waiters must never be left on a pending future.
            with self._lock:
                if self._refresh_flight is flight:
                    self._refresh_flight = None
            if not flight.done():
                flight.set_exception(SessionExpiredError("Session expired", 401))

    def _exchange(self, flight: Future, refresh_token: str, current: Session) -> str:
        try:
            payload = self._post("/refresh", {"refreshToken": refresh_token})
            renewed = _session_from_payload(payload)
        except Exception as exc:
            logger.warning("Session refresh failed, signing out: %s", exc)
            error = SessionExpiredError("Session expired", 401, getattr(exc, "detail", None))
            with self._lock:
                self._refresh_flight = None
                self._session = None
            flight.set_exception(error)
            with self._lock:
                self._clear()
            raise error from exc

        renewed.user = renewed.user or current.user
        renewed.profile = current.profile
        with self._lock:
            self._session = renewed
            self._refresh_flight = None
        flight.set_result(renewed.access_token)
        with self._lock:
            self._persist(renewed)
            self._set_state(AuthState.AUTHENTICATED)
        return renewed.access_token

    # -- logout -------------------------------------------------------------

    def logout(self) -> None:
        with self._lock:
            refresh_token = self._session.refresh_token if self._session else None
        try:
            if refresh_token:
                self._post("/logout", {"refreshToken": refresh_token})
        except ApiError as exc:
            logger.warning("Server-side logout failed, clearing local session anyway: %s", exc.message)
        finally:
            with self._lock:
                self._clear()
