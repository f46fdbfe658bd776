"""Shared FastAPI dependencies.

Settings and the rate resolver live on ``app.state`` (set by create_app) so a
test app built with ``settings_override`` never touches the cached defaults.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from fxconvert.core.config import Settings
from fxconvert.db.dal import Database
from fxconvert.services.auth import INITIAL_SESSION, AuthService, AuthSession
from fxconvert.services.rates.base import UnsupportedPairError
from fxconvert.services.rates.resolver import RateResolver

logger = logging.getLogger("fxconvert.auth")


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(settings: Settings = Depends(get_app_settings)) -> Database:
    return Database(settings.db_path)


def get_resolver(request: Request) -> RateResolver:
    return request.app.state.rate_resolver


def get_auth_service(
    db: Database = Depends(get_db), settings: Settings = Depends(get_app_settings)
) -> AuthService:
    return AuthService(db, settings)


def session_token(request: Request, settings: Settings) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get(settings.session_cookie_name)


def _log_auth_event(event: str, session: AuthSession) -> None:
    user_id = session.user["id"] if session.user else "-"
    # Every request opens a session, so its initial state is only debug noise
    level = logging.DEBUG if event == INITIAL_SESSION else logging.INFO
    logger.log(level, "auth event %s user=%s", event, user_id)


def get_auth_session(
    request: Request,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings),
) -> AuthSession:
    session = AuthSession(service, session_token(request, settings))
    session.subscribe(_log_auth_event)
    return session


def require_session(session: AuthSession = Depends(get_auth_session)) -> AuthSession:
    if not session.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "not_authenticated", "detail": "Sign in required"},
        )
    return session


def unsupported_pair(exc: UnsupportedPairError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"error": "unsupported_pair", "detail": str(exc)},
    )
