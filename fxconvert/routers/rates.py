from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from fxconvert.models.constants import (
    DEFAULT_FROM_CURRENCY,
    DEFAULT_TO_CURRENCY,
    search_currencies,
)
from fxconvert.models.rates import (
    CODE_PATTERN,
    CurrencyOut,
    RateQuoteOut,
    TrendOut,
    TrendPointOut,
    TrendRequest,
)
from fxconvert.services.rates.base import UnsupportedPairError
from fxconvert.services.rates.resolver import RateResolver
from fxconvert.services.rates.trend import build_trend
from .deps import get_resolver, unsupported_pair

"""Rates router.

Endpoints:
    - GET /api/rates?from=USD&to=CNY  -> single resolved rate
    - POST /api/rates {from, to, days} -> synthetic daily trend for the chart
    - GET /api/currencies?q=           -> currency picker catalogue
"""

router = APIRouter(prefix="/api", tags=["rates"])


@router.get("/rates", response_model=RateQuoteOut, summary="Resolve a conversion rate")
async def get_rate(
    from_currency: str = Query(DEFAULT_FROM_CURRENCY, alias="from", pattern=CODE_PATTERN),
    to_currency: str = Query(DEFAULT_TO_CURRENCY, alias="to", pattern=CODE_PATTERN),
    resolver: RateResolver = Depends(get_resolver),
):
    from_currency, to_currency = from_currency.upper(), to_currency.upper()
    try:
        resolved = resolver.resolve(from_currency, to_currency)
    except UnsupportedPairError as e:
        raise unsupported_pair(e) from e
    return RateQuoteOut(
        rate=resolved.rate,
        from_currency=from_currency,
        to_currency=to_currency,
        last_updated=resolved.observed_at,
        provenance=resolved.provenance,
    )


@router.post("/rates", response_model=TrendOut, summary="Synthetic daily rate trend")
async def get_trend(
    payload: TrendRequest,
    resolver: RateResolver = Depends(get_resolver),
):
    try:
        series = build_trend(
            payload.from_currency, payload.to_currency, resolver, days=payload.days
        )
    except UnsupportedPairError as e:
        raise unsupported_pair(e) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return TrendOut(
        data=[TrendPointOut(date=p.date, rate=p.rate) for p in series],
        from_currency=payload.from_currency,
        to_currency=payload.to_currency,
        days=payload.days,
    )


@router.get("/currencies", response_model=List[CurrencyOut], summary="Search currencies")
async def list_currencies(q: str = Query("", max_length=40)):
    return [
        CurrencyOut(code=c.code, name=c.name, flag=c.flag, popular=c.popular)
        for c in search_currencies(q)
    ]
