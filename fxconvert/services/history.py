from __future__ import annotations

"""Conversion history store.

Only signed-in users get history; callers check the session before saving.
"""
import logging
from typing import List

from fxconvert.db.dal import Database
from fxconvert.models.history import ConversionRecord
from fxconvert.services.rates.conversion import ConversionResult

logger = logging.getLogger("fxconvert.history")

DEFAULT_HISTORY_LIMIT = 50


def insert_conversion(
    db: Database,
    user_id: str,
    from_currency: str,
    to_currency: str,
    from_amount: float,
    to_amount: float,
    exchange_rate: float,
) -> ConversionRecord:
    if exchange_rate <= 0:
        raise ValueError("exchange_rate must be positive")
    row = db.insert_conversion(
        user_id, from_currency, to_currency, from_amount, to_amount, exchange_rate
    )
    logger.debug("saved conversion %s for user %s", row["id"], user_id)
    return ConversionRecord(**row)


def record_result(db: Database, user_id: str, result: ConversionResult) -> ConversionRecord:
    return insert_conversion(
        db,
        user_id,
        result.from_currency,
        result.to_currency,
        result.from_amount,
        result.to_amount,
        result.rate,
    )


def list_conversions(
    db: Database, user_id: str, limit: int = DEFAULT_HISTORY_LIMIT
) -> List[ConversionRecord]:
    if limit <= 0:
        raise ValueError("limit must be positive")
    return [ConversionRecord(**row) for row in db.list_conversions(user_id, limit)]
