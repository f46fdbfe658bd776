"""Email/password authentication and the per-client auth session.

`AuthService` talks to the database: it registers users, checks passwords,
issues and revokes session tokens and maintains profiles. It never raises for
expected failures; every operation returns an `AuthResult` carrying either
data or an `AuthError`.

`AuthSession` is the state object the web layer works with. It starts
anonymous (or restored from a token), changes on sign-in / sign-up, and is torn
down on sign-out. Observers registered with `subscribe()` receive
``(event, session)`` on every change, where event is one of
INITIAL_SESSION, SIGNED_IN, SIGNED_OUT, USER_UPDATED.

Profiles are created lazily on the first sign-in using the name supplied at
sign-up, else the local part of the email, else "User".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from fxconvert.core.config import Settings
from fxconvert.db.dal import Database
from fxconvert.services.security import (
    hash_password,
    new_session_token,
    new_user_id,
    verify_password,
)

logger = logging.getLogger("fxconvert.auth")

T = TypeVar("T")

INITIAL_SESSION = "INITIAL_SESSION"
SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
USER_UPDATED = "USER_UPDATED"

DEFAULT_PROFILE_NAME = "User"


@dataclass(frozen=True)
class AuthError:
    code: str
    message: str


@dataclass(frozen=True)
class AuthResult(Generic[T]):
    data: Optional[T] = None
    error: Optional[AuthError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class SessionData:
    token: str
    user: Dict[str, Any]
    profile: Optional[Dict[str, Any]]
    expires_at: datetime


def _public_user(row: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": row["id"], "email": row["email"], "created_at": row["created_at"]}


def profile_name_for(user: Dict[str, Any]) -> str:
    if user.get("signup_name"):
        return user["signup_name"]
    local_part = (user.get("email") or "").split("@")[0]
    return local_part or DEFAULT_PROFILE_NAME


class AuthService:
    def __init__(
        self,
        db: Database,
        settings: Settings,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._db = db
        self._ttl = timedelta(days=settings.session_ttl_days)
        self._min_password = settings.password_min_length
        self._clock = clock

    # Internal --------------------------------------------------
    def _ensure_profile(self, user: Dict[str, Any]) -> Dict[str, Any]:
        profile = self._db.get_profile(user["id"])
        if profile is None:
            profile = self._db.create_profile(user["id"], profile_name_for(user), user["email"])
            logger.info("created profile for user %s", user["id"])
        return profile

    def _issue(self, user: Dict[str, Any]) -> SessionData:
        token = new_session_token()
        expires_at = self._clock() + self._ttl
        self._db.create_session(token, user["id"], expires_at)
        return SessionData(
            token=token,
            user=_public_user(user),
            profile=self._ensure_profile(user),
            expires_at=expires_at,
        )

    # Public API -----------------------------------------------
    def register(self, email: str, password: str, name: str = "") -> AuthResult[SessionData]:
        if len(password) < self._min_password:
            return AuthResult(
                error=AuthError(
                    "weak_password",
                    f"Password should be at least {self._min_password} characters",
                )
            )
        try:
            user = self._db.create_user(new_user_id(), email, hash_password(password), name.strip())
        except ValueError:
            return AuthResult(error=AuthError("email_taken", "User already registered"))
        logger.info("registered user %s", user["id"])
        return AuthResult(data=self._issue(user))

    def authenticate(self, email: str, password: str) -> AuthResult[SessionData]:
        user = self._db.get_user_by_email(email)
        if user is None or not verify_password(password, user["password_hash"]):
            logger.info("sign-in rejected")
            return AuthResult(error=AuthError("invalid_credentials", "Invalid login credentials"))
        return AuthResult(data=self._issue(user))

    def revoke(self, token: str) -> AuthResult[None]:
        if not self._db.delete_session(token):
            return AuthResult(error=AuthError("not_authenticated", "No active session"))
        return AuthResult()

    def load(self, token: Optional[str]) -> Optional[SessionData]:
        """Return the live session for ``token``; expired tokens are deleted."""
        if not token:
            return None
        row = self._db.get_session(token)
        if row is None:
            return None
        expires_at = datetime.fromisoformat(row["expires_at"])
        if expires_at <= self._clock():
            self._db.delete_session(token)
            return None
        user = self._db.get_user(row["user_id"])
        if user is None:
            return None
        return SessionData(
            token=token,
            user=_public_user(user),
            profile=self._ensure_profile(user),
            expires_at=expires_at,
        )

    def save_profile(
        self, user_id: str, name: Optional[str] = None, avatar_url: Optional[str] = None
    ) -> AuthResult[Dict[str, Any]]:
        profile = self._db.update_profile(user_id, name=name, avatar_url=avatar_url)
        if profile is None:
            return AuthResult(error=AuthError("not_found", "Profile not found"))
        return AuthResult(data=profile)

    def purge_expired(self) -> int:
        return self._db.purge_expired_sessions(self._clock())


Listener = Callable[[str, "AuthSession"], None]


class AuthSession:
    """Auth state for one client, mirroring sign-in / sign-out events."""

    def __init__(self, service: AuthService, token: Optional[str] = None):
        self._service = service
        self._data: Optional[SessionData] = service.load(token)
        self._listeners: List[Listener] = []

    @property
    def data(self) -> Optional[SessionData]:
        return self._data

    @property
    def is_authenticated(self) -> bool:
        return self._data is not None

    @property
    def token(self) -> Optional[str]:
        return self._data.token if self._data else None

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return self._data.user if self._data else None

    @property
    def profile(self) -> Optional[Dict[str, Any]]:
        return self._data.profile if self._data else None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register an observer; it is told the current state immediately."""
        self._listeners.append(listener)
        listener(INITIAL_SESSION, self)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: str) -> None:
        for listener in list(self._listeners):
            listener(event, self)

    def _replace(self, data: SessionData) -> None:
        # Switching accounts without signing out first drops the old token
        if self._data is not None and self._data.token != data.token:
            self._service.revoke(self._data.token)
        self._data = data
        self._emit(SIGNED_IN)

    def sign_up(self, email: str, password: str, name: str = "") -> AuthResult[SessionData]:
        result = self._service.register(email, password, name)
        if result.data is not None:
            self._replace(result.data)
        return result

    def sign_in(self, email: str, password: str) -> AuthResult[SessionData]:
        result = self._service.authenticate(email, password)
        if result.data is not None:
            self._replace(result.data)
        return result

    def sign_out(self) -> AuthResult[None]:
        if self._data is None:
            return AuthResult()
        result = self._service.revoke(self._data.token)
        self._data = None
        self._emit(SIGNED_OUT)
        self._listeners.clear()
        return result

    def update_profile(
        self, name: Optional[str] = None, avatar_url: Optional[str] = None
    ) -> AuthResult[Dict[str, Any]]:
        if self._data is None:
            return AuthResult(error=AuthError("not_authenticated", "Not signed in"))
        result = self._service.save_profile(self._data.user["id"], name=name, avatar_url=avatar_url)
        if result.data is not None:
            self._data = SessionData(
                token=self._data.token,
                user=self._data.user,
                profile=result.data,
                expires_at=self._data.expires_at,
            )
            self._emit(USER_UPDATED)
        return result
