from __future__ import annotations

"""Rate resolver over the built-in rate table.

Lookup precedence for a pair FROM->TO:
    1. identity (FROM == TO) -> 1.0, provenance "local", never perturbed
    2. direct table entry "FROM-TO"
    3. inverse of the reverse entry "TO-FROM"
    4. bridge through the pivot currency (USD): (FROM->USD) * (USD->TO),
       each leg falling back to 1.0 when the table knows neither direction

Non-identity results receive a small cosmetic perturbation (at most 1%) made
of a slow sine drift over wall-clock time plus a uniform random term, then
get rounded to 6 decimals. The rates are illustrative only.
"""
import logging
import math
import random
import time
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, Mapping, Optional, Sequence, Tuple

from fxconvert.core.config import Settings, get_settings
from fxconvert.services.money import round6
from .base import Provenance, ResolvedRate, UnsupportedPairError
from .table import PIVOT_CURRENCY, RATE_TABLE, pair_key, validate_table

logger = logging.getLogger("fxconvert.rates")

# Each term contributes at most half of the 1% bound
DRIFT_AMPLITUDE = 0.005
NOISE_AMPLITUDE = 0.005
DRIFT_PERIOD_SECONDS = 10_000.0

Lookup = Tuple[float, Provenance]
Strategy = Callable[["RateResolver", str, str], Optional[Lookup]]


def _direct(resolver: "RateResolver", from_currency: str, to_currency: str) -> Optional[Lookup]:
    value = resolver.table.get(pair_key(from_currency, to_currency))
    if value is None:
        return None
    return value, "table"


def _reverse(resolver: "RateResolver", from_currency: str, to_currency: str) -> Optional[Lookup]:
    value = resolver.table.get(pair_key(to_currency, from_currency))
    if value is None:
        return None
    return 1 / value, "table"


def _bridged(resolver: "RateResolver", from_currency: str, to_currency: str) -> Optional[Lookup]:
    to_pivot = resolver.leg(from_currency, resolver.pivot)
    from_pivot = resolver.leg(resolver.pivot, to_currency)
    return to_pivot * from_pivot, "bridged"


DEFAULT_STRATEGIES: Sequence[Strategy] = (_direct, _reverse, _bridged)


class RateResolver:
    """Resolve conversion rates from a static table.

    ``clock`` returns epoch seconds and drives the slow drift; ``rng`` supplies
    the uniform noise. Both are injectable so tests can pin the perturbation,
    and ``jitter=False`` disables it entirely.
    """

    def __init__(
        self,
        table: Mapping[str, float] = RATE_TABLE,
        *,
        pivot: str = PIVOT_CURRENCY,
        jitter: bool = True,
        strict: bool = False,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
        strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
    ):
        self.table = validate_table(table)
        self.pivot = pivot
        self.jitter = jitter
        self.strict = strict
        self._clock = clock
        self._rng = rng or random.Random()
        self._strategies = tuple(strategies)

    # Internal --------------------------------------------------
    def leg(self, from_currency: str, to_currency: str) -> float:
        """Single bridge leg: direct, inverse, else neutral 1.0."""
        if from_currency == to_currency:
            return 1.0
        direct = self.table.get(pair_key(from_currency, to_currency))
        if direct is not None:
            return direct
        reverse = self.table.get(pair_key(to_currency, from_currency))
        if reverse is not None:
            return 1 / reverse
        if self.strict:
            raise UnsupportedPairError(from_currency, to_currency)
        return 1.0

    def perturbation(self) -> float:
        drift = DRIFT_AMPLITUDE * math.sin(self._clock() / DRIFT_PERIOD_SECONDS)
        noise = self._rng.uniform(-NOISE_AMPLITUDE, NOISE_AMPLITUDE)
        return drift + noise

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), tz=timezone.utc)

    # Public API -----------------------------------------------
    def base_rate(self, from_currency: str, to_currency: str) -> Lookup:
        """Unperturbed rate and provenance for a pair."""
        _require_code(from_currency, "from_currency")
        _require_code(to_currency, "to_currency")
        if from_currency == to_currency:
            return 1.0, "local"
        for strategy in self._strategies:
            found = strategy(self, from_currency, to_currency)
            if found is not None:
                return found
        # Only reachable with a custom strategy list lacking a bridge step
        if self.strict:
            raise UnsupportedPairError(from_currency, to_currency)
        return 1.0, "bridged"

    def resolve(self, from_currency: str, to_currency: str) -> ResolvedRate:
        base, provenance = self.base_rate(from_currency, to_currency)
        if provenance == "local":
            return ResolvedRate(rate=1.0, observed_at=self._now(), provenance="local")
        rate = base
        if self.jitter:
            rate = base * (1 + self.perturbation())
        rate = round6(rate)
        logger.debug(
            "resolved %s->%s rate=%s provenance=%s",
            from_currency,
            to_currency,
            rate,
            provenance,
        )
        return ResolvedRate(rate=rate, observed_at=self._now(), provenance=provenance)


def _require_code(code: str, field: str) -> None:
    if not isinstance(code, str) or not code.strip():
        raise ValueError(f"{field} must be a non-empty currency code")


def build_rate_resolver(settings: Settings) -> RateResolver:
    return RateResolver(
        pivot=settings.pivot_currency,
        jitter=settings.rate_jitter_enabled,
        strict=settings.strict_rate_pairs,
    )


@lru_cache
def get_rate_resolver() -> RateResolver:
    return build_rate_resolver(get_settings())


def resolve(from_currency: str, to_currency: str) -> ResolvedRate:
    """Resolve with the application's default resolver."""
    return get_rate_resolver().resolve(from_currency, to_currency)
