"""Pydantic API models for the currency converter."""

from .constants import (
    CATALOGUE,
    CURRENCIES,
    Currency,
)  # re-export
from .rates import RateQuoteOut, TrendRequest, TrendOut, TrendPointOut, CurrencyOut
from .auth import SignUpIn, SignInIn, ProfileUpdateIn, SessionOut, AuthOut
from .history import ConversionIn, ConversionOut, ConversionRecord

__all__ = [
    "CATALOGUE",
    "CURRENCIES",
    "Currency",
    "RateQuoteOut",
    "TrendRequest",
    "TrendOut",
    "TrendPointOut",
    "CurrencyOut",
    "SignUpIn",
    "SignInIn",
    "ProfileUpdateIn",
    "SessionOut",
    "AuthOut",
    "ConversionIn",
    "ConversionOut",
    "ConversionRecord",
]
