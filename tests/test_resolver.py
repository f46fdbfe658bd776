import itertools
import math
import random
from datetime import datetime

import pytest

from fxconvert.models.constants import CURRENCIES
from fxconvert.services.rates.base import PROVENANCES, UnsupportedPairError
from fxconvert.services.rates.resolver import (
    DRIFT_PERIOD_SECONDS,
    RateResolver,
    resolve,
)
from fxconvert.services.rates.table import RATE_TABLE

# Perturbation is at most 1%; rounding to 6 dp adds a hair on top
JITTER = 0.0101


class _FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__()
        self.value = value

    def uniform(self, a: float, b: float) -> float:  # type: ignore[override]
        return self.value


@pytest.mark.parametrize("code", sorted(CURRENCIES) + ["XYZ", "usd"])
def test_identity_is_exactly_one_and_local(jittered_resolver, code):
    for _ in range(5):
        result = jittered_resolver.resolve(code, code)
        assert result.rate == 1.0
        assert result.provenance == "local"


def test_identity_ignores_extreme_jitter():
    resolver = RateResolver(
        clock=lambda: DRIFT_PERIOD_SECONDS * math.pi / 2, rng=_FixedRandom(0.005)
    )
    assert resolver.resolve("CNY", "CNY").rate == 1.0


def test_usd_cny_example(jittered_resolver):
    result = jittered_resolver.resolve("USD", "CNY")
    assert result.provenance == "table"
    assert result.rate == pytest.approx(7.314, rel=JITTER)


@pytest.mark.parametrize("key", sorted(RATE_TABLE))
def test_direct_entries_without_jitter_match_table(exact_resolver, key):
    src, dst = key.split("-")
    result = exact_resolver.resolve(src, dst)
    assert result.provenance == "table"
    assert result.rate == pytest.approx(RATE_TABLE[key], abs=1e-6)


@pytest.mark.parametrize("key", sorted(RATE_TABLE))
def test_direct_entries_stay_within_jitter_bound(key):
    src, dst = key.split("-")
    for seed in range(20):
        resolver = RateResolver(clock=lambda s=seed: s * 997.0, rng=random.Random(seed))
        assert resolver.resolve(src, dst).rate == pytest.approx(RATE_TABLE[key], rel=JITTER)


def test_reverse_lookup_inverts_table_entry(exact_resolver):
    result = exact_resolver.resolve("CNY", "USD")
    assert result.provenance == "table"
    assert result.rate == pytest.approx(1 / 7.314, abs=1e-6)


@pytest.mark.parametrize("key", sorted(RATE_TABLE))
def test_symmetry(jittered_resolver, key):
    src, dst = key.split("-")
    forward = jittered_resolver.resolve(src, dst).rate
    backward = jittered_resolver.resolve(dst, src).rate
    assert forward * backward == pytest.approx(1.0, rel=2 * JITTER + 1e-4)


def test_krw_sgd_is_bridged_through_usd(exact_resolver):
    result = exact_resolver.resolve("KRW", "SGD")
    assert result.provenance == "bridged"
    assert result.rate == pytest.approx(1.35 / 1320.5, abs=1e-6)


def test_triangulation_consistency(jittered_resolver):
    bridged = jittered_resolver.resolve("KRW", "SGD").rate
    via_usd = (
        jittered_resolver.resolve("KRW", "USD").rate
        * jittered_resolver.resolve("USD", "SGD").rate
    )
    assert bridged == pytest.approx(via_usd, rel=3 * JITTER)


def test_bridge_uses_direct_leg_when_present(exact_resolver):
    # CHF-EUR is absent both ways; the legs come from USD-CHF and USD-EUR
    result = exact_resolver.resolve("CHF", "EUR")
    assert result.provenance == "bridged"
    assert result.rate == pytest.approx((1 / 0.88) * 0.85, abs=1e-6)


def test_unknown_pair_defaults_to_neutral_rate(exact_resolver):
    result = exact_resolver.resolve("XXX", "YYY")
    assert result.provenance == "bridged"
    assert result.rate == 1.0


def test_unknown_side_bridges_with_neutral_leg(exact_resolver):
    # Codes are case-sensitive: "usd" is not USD, so only the USD->CNY leg is known
    result = exact_resolver.resolve("usd", "CNY")
    assert result.provenance == "bridged"
    assert result.rate == pytest.approx(7.314, abs=1e-6)


def test_strict_mode_raises_for_unknown_pairs():
    resolver = RateResolver(jitter=False, strict=True)
    with pytest.raises(UnsupportedPairError) as excinfo:
        resolver.resolve("XXX", "CNY")
    assert excinfo.value.from_currency == "XXX"
    # Fully derivable pairs still resolve in strict mode
    assert resolver.resolve("KRW", "SGD").provenance == "bridged"


@pytest.mark.parametrize("pair", [("", "USD"), ("USD", ""), ("  ", "USD")])
def test_empty_codes_rejected(exact_resolver, pair):
    with pytest.raises(ValueError):
        exact_resolver.resolve(*pair)


def test_rates_rounded_to_six_decimals(jittered_resolver):
    rate = jittered_resolver.resolve("USD", "JPY").rate
    assert round(rate, 6) == rate


def test_results_always_well_formed():
    resolver = RateResolver(rng=random.Random(99))
    codes = sorted(CURRENCIES) + ["XYZ"]
    for src, dst in itertools.product(codes, repeat=2):
        result = resolver.resolve(src, dst)
        assert result.rate > 0
        assert isinstance(result.observed_at, datetime)
        assert result.observed_at.tzinfo is not None
        assert result.provenance in PROVENANCES


def test_custom_table_is_validated():
    with pytest.raises(ValueError):
        RateResolver({"USDCNY": 7.0})
    with pytest.raises(ValueError):
        RateResolver({"USD-CNY": 0})


def test_module_level_resolve_uses_default_resolver():
    result = resolve("GBP", "CNY")
    assert result.provenance == "table"
    assert result.rate == pytest.approx(9.28, rel=JITTER)
