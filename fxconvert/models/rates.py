from datetime import date, datetime
from typing import List, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator

CODE_PATTERN = r"^[A-Za-z]{3,5}$"


class _PairModel(BaseModel):
    # Wire names are "from"/"to"; python attributes get a suffix
    model_config = ConfigDict(populate_by_name=True)

    from_currency: str = Field("USD", alias="from", pattern=CODE_PATTERN)
    to_currency: str = Field("CNY", alias="to", pattern=CODE_PATTERN)

    @field_validator("from_currency", "to_currency")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return v.upper()


class RateQuoteOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    rate: float = Field(..., gt=0)
    from_currency: str = Field(..., alias="from")
    to_currency: str = Field(..., alias="to")
    last_updated: datetime = Field(..., alias="lastUpdated")
    source: str = "mock-data"
    provenance: Literal["local", "table", "bridged"]


class TrendRequest(_PairModel):
    days: int = Field(7, ge=1, le=90)


class TrendPointOut(BaseModel):
    date: date
    rate: float


class TrendOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    data: List[TrendPointOut]
    from_currency: str = Field(..., alias="from")
    to_currency: str = Field(..., alias="to")
    days: int


class CurrencyOut(BaseModel):
    code: str
    name: str
    flag: str
    popular: bool
