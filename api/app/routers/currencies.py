"""
Currency Endpoints - supported currencies, conversion and the client's preferred currency
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List

from app.schemas.currency import ConversionResponse, CurrencyPreference, CurrencyResponse
from app.services.currency import (
    SUPPORTED_CURRENCIES,
    convert_currency,
    format_currency,
    get_currency,
    get_user_preferred_currency,
    set_user_preferred_currency,
)
from app.services.preferences import PreferenceStore
from app.utils.redis import get_preference_store

router = APIRouter()


@router.get("/currencies", response_model=List[CurrencyResponse])
async def list_currencies():
    return [
        CurrencyResponse(code=c.code, symbol=c.symbol, name=c.name, exchange_rate=c.exchange_rate)
        for c in SUPPORTED_CURRENCIES
    ]


@router.get("/currencies/convert", response_model=ConversionResponse)
async def convert(
    amount: float = Query(...),
    from_currency: str = Query("USD", alias="from"),
    to_currency: str = Query(..., alias="to"),
):
    """
    Convert an amount and format it for display in the target currency
    """
    converted = convert_currency(amount, from_currency.upper(), to_currency.upper())
    return ConversionResponse(
        amount=amount,
        from_currency=from_currency.upper(),
        to_currency=to_currency.upper(),
        converted=converted,
        formatted=format_currency(converted, to_currency.upper()),
    )


@router.get("/preferences/currency", response_model=CurrencyPreference)
async def get_preferred_currency(store: PreferenceStore = Depends(get_preference_store)):
    return CurrencyPreference(currency=await get_user_preferred_currency(store))


@router.put("/preferences/currency", response_model=CurrencyPreference)
async def set_preferred_currency(
    preference: CurrencyPreference,
    store: PreferenceStore = Depends(get_preference_store),
):
    code = preference.currency.upper()
    if not get_currency(code):
        raise HTTPException(status_code=400, detail=f"Unsupported currency: {preference.currency}")

    await set_user_preferred_currency(store, code)
    return CurrencyPreference(currency=code)
