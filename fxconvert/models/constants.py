"""Currency catalogue shown in the currency picker.

The rate resolver does not consult this list; it only drives display names,
flags and the picker's popular/other grouping.
"""

from dataclasses import dataclass
from typing import List, Optional, Set, Tuple


@dataclass(frozen=True)
class Currency:
    code: str
    name: str
    flag: str
    popular: bool = False


CATALOGUE: Tuple[Currency, ...] = (
    Currency("USD", "US Dollar", "🇺🇸", popular=True),
    Currency("CNY", "Chinese Yuan", "🇨🇳", popular=True),
    Currency("EUR", "Euro", "🇪🇺", popular=True),
    Currency("JPY", "Japanese Yen", "🇯🇵", popular=True),
    Currency("GBP", "British Pound", "🇬🇧", popular=True),
    Currency("KRW", "South Korean Won", "🇰🇷"),
    Currency("AUD", "Australian Dollar", "🇦🇺"),
    Currency("CAD", "Canadian Dollar", "🇨🇦"),
    Currency("CHF", "Swiss Franc", "🇨🇭"),
    Currency("SGD", "Singapore Dollar", "🇸🇬"),
)

CURRENCIES: Set[str] = {c.code for c in CATALOGUE}

DEFAULT_FROM_CURRENCY = "USD"
DEFAULT_TO_CURRENCY = "CNY"


def find_currency(code: str) -> Optional[Currency]:
    code = code.upper()
    return next((c for c in CATALOGUE if c.code == code), None)


def search_currencies(query: str = "") -> List[Currency]:
    needle = query.strip().lower()
    if not needle:
        return list(CATALOGUE)
    return [c for c in CATALOGUE if needle in c.code.lower() or needle in c.name.lower()]
