from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

from fxconvert.services.money import round2
from .base import Provenance, SupportsResolve

"""Amount conversion on top of the rate resolver.

Rounding of the converted amount happens once here (2 decimals, half-up) so
the JSON API, the page and the stored history all agree on the figure.
"""


@dataclass(frozen=True)
class ConversionResult:
    from_currency: str
    to_currency: str
    from_amount: float
    to_amount: float
    rate: float
    observed_at: datetime
    provenance: Provenance


def convert(
    amount: float, from_currency: str, to_currency: str, resolver: SupportsResolve
) -> ConversionResult:
    if not math.isfinite(amount):
        raise ValueError("amount must be a finite number")
    if amount < 0:
        raise ValueError("amount must not be negative")
    resolved = resolver.resolve(from_currency, to_currency)
    return ConversionResult(
        from_currency=from_currency,
        to_currency=to_currency,
        from_amount=amount,
        to_amount=round2(amount * resolved.rate),
        rate=resolved.rate,
        observed_at=resolved.observed_at,
        provenance=resolved.provenance,
    )
