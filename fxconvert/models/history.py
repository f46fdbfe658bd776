from __future__ import annotations
from datetime import datetime
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field

from .rates import _PairModel


class ConversionIn(_PairModel):
    amount: float = Field(..., ge=0, allow_inf_nan=False)


class ConversionRecord(BaseModel):
    id: int
    user_id: str
    from_currency: str
    to_currency: str
    from_amount: float
    to_amount: float
    exchange_rate: float = Field(..., gt=0)
    created_at: datetime


class ConversionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_currency: str = Field(..., alias="from")
    to_currency: str = Field(..., alias="to")
    from_amount: float
    to_amount: float
    rate: float
    last_updated: datetime = Field(..., alias="lastUpdated")
    provenance: Literal["local", "table", "bridged"]
    saved: bool = False
