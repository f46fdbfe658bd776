"""Built-in exchange rate table.

Keys are ordered pairs ``"FROM-TO"``; a value is the amount of TO per 1 unit
of FROM. Each pair appears in one direction only; the resolver derives the
reverse by inversion and anything else through the pivot currency.
"""

from __future__ import annotations

from typing import Dict, Mapping

PIVOT_CURRENCY = "USD"

RATE_TABLE: Mapping[str, float] = {
    "USD-CNY": 7.314,
    "USD-EUR": 0.85,
    "USD-JPY": 150.3,
    "USD-GBP": 0.78,
    "USD-KRW": 1320.5,
    "USD-AUD": 1.52,
    "USD-CAD": 1.35,
    "USD-CHF": 0.88,
    "USD-SGD": 1.35,
    "EUR-CNY": 8.53,
    "EUR-JPY": 177.4,
    "EUR-GBP": 0.92,
    "GBP-CNY": 9.28,
    "JPY-CNY": 0.048,
}


def pair_key(from_currency: str, to_currency: str) -> str:
    return f"{from_currency}-{to_currency}"


def validate_table(table: Mapping[str, float]) -> Dict[str, float]:
    """Return a copy of ``table`` after checking keys and values."""
    checked: Dict[str, float] = {}
    for key, value in table.items():
        parts = key.split("-")
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"malformed rate table key '{key}'")
        if value <= 0:
            raise ValueError(f"rate for '{key}' must be positive")
        checked[key] = float(value)
    return checked
