"""Money / rounding helpers.

Centralized so conversions, the rate resolver and trend series use identical
rounding semantics.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP


def _quantize(value: float, exp: str) -> float:
    return float(Decimal(str(value)).quantize(Decimal(exp), rounding=ROUND_HALF_UP))


def round2(value: float) -> float:
    return _quantize(value, "0.01")


def round6(value: float) -> float:
    return _quantize(value, "0.000001")
