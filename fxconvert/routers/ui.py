import math
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from fxconvert.core.config import Settings
from fxconvert.db.dal import Database
from fxconvert.models.auth import SignInIn, SignUpIn
from fxconvert.models.constants import (
    CATALOGUE,
    DEFAULT_FROM_CURRENCY,
    DEFAULT_TO_CURRENCY,
    find_currency,
)
from fxconvert.services.auth import AuthSession
from fxconvert.services.history import list_conversions, record_result
from fxconvert.services.rates.base import UnsupportedPairError
from fxconvert.services.rates.conversion import ConversionResult, convert
from fxconvert.services.rates.resolver import RateResolver
from fxconvert.services.rates.trend import build_trend, chart_points
from .auth import set_session_cookie
from .deps import get_app_settings, get_auth_session, get_db, get_resolver

router = APIRouter(tags=["ui"])

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

TABS = ("converter", "rates", "history", "profile")
CHART_WIDTH = 320
CHART_HEIGHT = 160


def _code(value: Optional[str], default: str) -> str:
    """Known catalogue code or the default; the page only offers the catalogue."""
    if value and find_currency(value):
        return value.upper()
    return default


def _parse_amount(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    try:
        amount = float(raw)
    except ValueError:
        return None
    if amount < 0 or not math.isfinite(amount):
        return None
    return amount


def _home(**params: Any) -> RedirectResponse:
    query = urlencode({k: v for k, v in params.items() if v not in (None, "")})
    return RedirectResponse(url=f"/?{query}" if query else "/", status_code=303)


def _try_convert(
    amount: Optional[float], from_code: str, to_code: str, resolver: RateResolver
) -> Optional[ConversionResult]:
    if amount is None:
        return None
    try:
        return convert(amount, from_code, to_code, resolver)
    except UnsupportedPairError:
        return None


def _render(
    request: Request,
    settings: Settings,
    session: AuthSession,
    db: Database,
    resolver: RateResolver,
    *,
    tab: str,
    from_code: str,
    to_code: str,
    amount: str,
    result: Optional[ConversionResult],
    error: Optional[str] = None,
) -> HTMLResponse:
    context: Dict[str, Any] = {
        "request": request,
        "app_name": settings.app_name,
        "tab": tab,
        "tabs": TABS,
        "currencies": CATALOGUE,
        "from_currency": find_currency(from_code),
        "to_currency": find_currency(to_code),
        "amount": amount,
        "result": result,
        "error": error,
        "session": session,
        "trend": [],
        "chart": "",
        "history": [],
        "chart_width": CHART_WIDTH,
        "chart_height": CHART_HEIGHT,
    }

    if tab == "rates":
        try:
            series = build_trend(from_code, to_code, resolver, days=settings.trend_days)
        except UnsupportedPairError:
            series = []
        context["trend"] = series
        context["chart"] = " ".join(
            f"{x},{y}" for x, y in chart_points(series, CHART_WIDTH, CHART_HEIGHT)
        )
    elif tab == "history" and session.is_authenticated:
        context["history"] = list_conversions(db, session.user["id"])

    return templates.TemplateResponse(request, "index.html", context)


@router.get("/", response_class=HTMLResponse)
async def ui_home(
    request: Request,
    tab: str = Query("converter"),
    from_currency: Optional[str] = Query(None, alias="from"),
    to_currency: Optional[str] = Query(None, alias="to"),
    amount: Optional[str] = Query("100"),
    error: Optional[str] = Query(None),
    resolver: RateResolver = Depends(get_resolver),
    session: AuthSession = Depends(get_auth_session),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    from_code = _code(from_currency, DEFAULT_FROM_CURRENCY)
    to_code = _code(to_currency, DEFAULT_TO_CURRENCY)
    # Conversion is recomputed on every render, as when currencies change
    result = _try_convert(_parse_amount(amount), from_code, to_code, resolver)
    return _render(
        request,
        settings,
        session,
        db,
        resolver,
        tab=tab if tab in TABS else "converter",
        from_code=from_code,
        to_code=to_code,
        amount=amount or "",
        result=result,
        error=error,
    )


@router.post("/ui/convert", response_class=HTMLResponse)
async def ui_convert(
    request: Request,
    from_currency: str = Form(DEFAULT_FROM_CURRENCY),
    to_currency: str = Form(DEFAULT_TO_CURRENCY),
    amount: str = Form(""),
    resolver: RateResolver = Depends(get_resolver),
    session: AuthSession = Depends(get_auth_session),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    from_code = _code(from_currency, DEFAULT_FROM_CURRENCY)
    to_code = _code(to_currency, DEFAULT_TO_CURRENCY)
    parsed = _parse_amount(amount)
    if parsed is None:
        return _home(**{"from": from_code, "to": to_code, "amount": amount, "error": "Enter a valid amount"})
    result = _try_convert(parsed, from_code, to_code, resolver)
    if result is not None and session.is_authenticated:
        record_result(db, session.user["id"], result)
    # Rendered in place so the figure shown is the one that was stored
    return _render(
        request,
        settings,
        session,
        db,
        resolver,
        tab="converter",
        from_code=from_code,
        to_code=to_code,
        amount=amount,
        result=result,
    )


@router.post("/ui/swap")
async def ui_swap(
    from_currency: str = Form(DEFAULT_FROM_CURRENCY),
    to_currency: str = Form(DEFAULT_TO_CURRENCY),
    amount: str = Form(""),
    converted: str = Form(""),
):
    # The converted figure becomes the new amount when both are present
    new_amount = converted if (converted and amount) else amount
    return _home(**{"from": _code(to_currency, DEFAULT_TO_CURRENCY), "to": _code(from_currency, DEFAULT_FROM_CURRENCY), "amount": new_amount})


def _form_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    field = first["loc"][-1] if first.get("loc") else "form"
    return f"Invalid {field}: {first['msg']}"


@router.post("/ui/sign-in")
async def ui_sign_in(
    email: str = Form(...),
    password: str = Form(...),
    session: AuthSession = Depends(get_auth_session),
    settings: Settings = Depends(get_app_settings),
):
    try:
        form = SignInIn(email=email, password=password)
    except ValidationError as e:
        return _home(tab="profile", error=_form_error(e))
    result = session.sign_in(form.email, form.password)
    if result.error:
        return _home(tab="profile", error=result.error.message)
    response = _home(tab="profile")
    set_session_cookie(response, result.data, settings)
    return response


@router.post("/ui/sign-up")
async def ui_sign_up(
    name: str = Form(""),
    email: str = Form(...),
    password: str = Form(...),
    confirm_password: str = Form(...),
    session: AuthSession = Depends(get_auth_session),
    settings: Settings = Depends(get_app_settings),
):
    try:
        form = SignUpIn(email=email, password=password, name=name)
    except ValidationError as e:
        return _home(tab="profile", error=_form_error(e))
    if password != confirm_password:
        return _home(tab="profile", error="Passwords do not match")
    result = session.sign_up(form.email, form.password, form.name)
    if result.error:
        return _home(tab="profile", error=result.error.message)
    response = _home(tab="profile")
    set_session_cookie(response, result.data, settings)
    return response


@router.post("/ui/sign-out")
async def ui_sign_out(
    session: AuthSession = Depends(get_auth_session),
    settings: Settings = Depends(get_app_settings),
):
    session.sign_out()
    response = _home()
    response.delete_cookie(settings.session_cookie_name)
    return response
