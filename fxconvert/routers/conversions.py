from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from fxconvert.db.dal import Database
from fxconvert.models.history import ConversionIn, ConversionOut, ConversionRecord
from fxconvert.services.auth import AuthSession
from fxconvert.services.history import list_conversions, record_result
from fxconvert.services.rates.base import UnsupportedPairError
from fxconvert.services.rates.conversion import convert
from fxconvert.services.rates.resolver import RateResolver
from .deps import get_auth_session, get_db, get_resolver, require_session, unsupported_pair

router = APIRouter(prefix="/api/conversions", tags=["conversions"])


@router.post("", response_model=ConversionOut, summary="Convert an amount")
async def create_conversion(
    payload: ConversionIn,
    resolver: RateResolver = Depends(get_resolver),
    session: AuthSession = Depends(get_auth_session),
    db: Database = Depends(get_db),
):
    try:
        result = convert(
            payload.amount, payload.from_currency, payload.to_currency, resolver
        )
    except UnsupportedPairError as e:
        raise unsupported_pair(e) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    # History is kept for signed-in users only
    saved = False
    if session.is_authenticated:
        record_result(db, session.user["id"], result)
        saved = True

    return ConversionOut(
        from_currency=result.from_currency,
        to_currency=result.to_currency,
        from_amount=result.from_amount,
        to_amount=result.to_amount,
        rate=result.rate,
        last_updated=result.observed_at,
        provenance=result.provenance,
        saved=saved,
    )


@router.get("", response_model=List[ConversionRecord], summary="List saved conversions")
async def get_history(
    limit: int = Query(50, ge=1, le=500),
    session: AuthSession = Depends(require_session),
    db: Database = Depends(get_db),
):
    return list_conversions(db, session.user["id"], limit=limit)
