"""Smoke script for the rate resolver.

Demonstrates:
 1. Identity pairs resolve to exactly 1.0 ("local").
 2. Direct and reverse table pairs ("table").
 3. Pairs derived through USD ("bridged"), including a wholly unknown pair.
 4. A 7-day trend for the chart tab.

NOTE: This is a lightweight diagnostic and not a formal test.
"""

from pprint import pprint

from fxconvert.services.rates.resolver import get_rate_resolver
from fxconvert.services.rates.trend import build_trend

PAIRS = (
    ("CNY", "CNY"),
    ("USD", "CNY"),
    ("CNY", "USD"),
    ("KRW", "SGD"),
    ("XXX", "YYY"),
)


def run():
    resolver = get_rate_resolver()
    out = {}
    for src, dst in PAIRS:
        resolved = resolver.resolve(src, dst)
        out[f"{src}->{dst}"] = {
            "rate": resolved.rate,
            "provenance": resolved.provenance,
            "observed_at": resolved.observed_at.isoformat(),
        }
    out["trend USD->JPY"] = [
        (p.date.isoformat(), p.rate) for p in build_trend("USD", "JPY", resolver)
    ]
    pprint(out)


if __name__ == "__main__":
    run()
