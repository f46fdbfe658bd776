from __future__ import annotations

"""Synthetic rate trend for the chart tab.

There is no stored rate history: a trend is one resolution of the pair with an
independent +-5% wobble applied per day. Points run oldest first and end on
``today``.
"""
import random
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple

from fxconvert.services.money import round6
from .base import SupportsResolve

MAX_TREND_DAYS = 90
DAILY_VARIATION = 0.05


@dataclass(frozen=True)
class TrendPoint:
    date: date
    rate: float


def build_trend(
    from_currency: str,
    to_currency: str,
    resolver: SupportsResolve,
    days: int = 7,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> List[TrendPoint]:
    if not 1 <= days <= MAX_TREND_DAYS:
        raise ValueError(f"days must be within 1..{MAX_TREND_DAYS}")
    rng = rng or random.Random()
    today = today or date.today()
    base = resolver.resolve(from_currency, to_currency)
    points: List[TrendPoint] = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        if base.provenance == "local":
            rate = 1.0
        else:
            variation = rng.uniform(-DAILY_VARIATION, DAILY_VARIATION)
            rate = round6(base.rate * (1 + variation))
        points.append(TrendPoint(date=day, rate=rate))
    return points


def chart_points(
    series: Sequence[TrendPoint],
    width: int = 320,
    height: int = 160,
    padding: int = 12,
) -> List[Tuple[float, float]]:
    """Scale a series into SVG coordinates (y grows downwards)."""
    if not series:
        return []
    rates = [p.rate for p in series]
    low, high = min(rates), max(rates)
    span = high - low
    inner_w = width - 2 * padding
    inner_h = height - 2 * padding
    step = inner_w / (len(series) - 1) if len(series) > 1 else 0.0
    coords: List[Tuple[float, float]] = []
    for idx, rate in enumerate(rates):
        x = padding + idx * step if len(series) > 1 else width / 2
        if span == 0:
            y = height / 2
        else:
            y = padding + (high - rate) / span * inner_h
        coords.append((round(x, 1), round(y, 1)))
    return coords
