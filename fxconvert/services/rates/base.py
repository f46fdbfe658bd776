from __future__ import annotations

"""Rate resolution result types and the lookup protocol shared by services."""
from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Protocol, Tuple

Provenance = Literal["local", "table", "bridged"]
PROVENANCES: Tuple[str, ...] = ("local", "table", "bridged")


@dataclass(frozen=True)
class ResolvedRate:
    rate: float
    observed_at: datetime
    provenance: Provenance


class UnsupportedPairError(LookupError):
    """Raised in strict mode when a pair cannot be derived from the table."""

    def __init__(self, from_currency: str, to_currency: str):
        super().__init__(f"no rate available for {from_currency}->{to_currency}")
        self.from_currency = from_currency
        self.to_currency = to_currency


class SupportsResolve(Protocol):
    def resolve(self, from_currency: str, to_currency: str) -> ResolvedRate: ...
