"""Authentication routes.

Successful sign-up / sign-in set an HTTP-only session cookie and also return
the token for API clients using ``Authorization: Bearer``.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from fxconvert.core.config import Settings
from fxconvert.models.auth import (
    AuthOut,
    ProfileOut,
    ProfileUpdateIn,
    SessionOut,
    SignInIn,
    SignUpIn,
)
from fxconvert.services.auth import AuthError, AuthSession, SessionData
from .deps import get_app_settings, get_auth_session, require_session

router = APIRouter(prefix="/auth", tags=["auth"])

_ERROR_STATUS = {
    "email_taken": status.HTTP_409_CONFLICT,
    "weak_password": status.HTTP_400_BAD_REQUEST,
    "invalid_credentials": status.HTTP_401_UNAUTHORIZED,
    "not_authenticated": status.HTTP_401_UNAUTHORIZED,
    "not_found": status.HTTP_404_NOT_FOUND,
}


def _raise_auth_error(error: AuthError) -> None:
    raise HTTPException(
        status_code=_ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail={"error": error.code, "detail": error.message},
    )


def session_out(session: AuthSession) -> SessionOut:
    if not session.is_authenticated:
        return SessionOut(authenticated=False)
    return SessionOut(authenticated=True, user=session.user, profile=session.profile)


def _auth_out(data: SessionData) -> AuthOut:
    return AuthOut(
        authenticated=True,
        user=data.user,
        profile=data.profile,
        access_token=data.token,
        expires_at=data.expires_at,
    )


def set_session_cookie(response: Response, data: SessionData, settings: Settings) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        data.token,
        max_age=settings.session_ttl_days * 86400,
        httponly=True,
        samesite="lax",
    )


@router.post("/sign-up", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
async def sign_up(
    payload: SignUpIn,
    response: Response,
    session: AuthSession = Depends(get_auth_session),
    settings: Settings = Depends(get_app_settings),
):
    result = session.sign_up(payload.email, payload.password, payload.name)
    if result.error:
        _raise_auth_error(result.error)
    set_session_cookie(response, result.data, settings)
    return _auth_out(result.data)


@router.post("/sign-in", response_model=AuthOut)
async def sign_in(
    payload: SignInIn,
    response: Response,
    session: AuthSession = Depends(get_auth_session),
    settings: Settings = Depends(get_app_settings),
):
    result = session.sign_in(payload.email, payload.password)
    if result.error:
        _raise_auth_error(result.error)
    set_session_cookie(response, result.data, settings)
    return _auth_out(result.data)


@router.post("/sign-out", response_model=SessionOut)
async def sign_out(
    response: Response,
    session: AuthSession = Depends(get_auth_session),
    settings: Settings = Depends(get_app_settings),
):
    session.sign_out()
    response.delete_cookie(settings.session_cookie_name)
    return SessionOut(authenticated=False)


@router.get("/session", response_model=SessionOut)
async def current_session(session: AuthSession = Depends(get_auth_session)):
    return session_out(session)


@router.patch("/profile", response_model=ProfileOut)
async def update_profile(
    payload: ProfileUpdateIn,
    session: AuthSession = Depends(require_session),
):
    result = session.update_profile(name=payload.name, avatar_url=payload.avatar_url)
    if result.error:
        _raise_auth_error(result.error)
    return result.data
