"""
Currency Schemas
"""
from pydantic import BaseModel, Field


class CurrencyResponse(BaseModel):
    code: str
    symbol: str
    name: str
    exchange_rate: float


class ConversionResponse(BaseModel):
    amount: float
    from_currency: str
    to_currency: str
    converted: float
    formatted: str


class CurrencyPreference(BaseModel):
    currency: str = Field(..., min_length=3, max_length=3)
