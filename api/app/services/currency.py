"""
Currency Display - exchange rates, conversion and price formatting
"""
from dataclasses import dataclass
from typing import List, Optional
import logging

from app.services.preferences import PreferenceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    name: str
    exchange_rate: float  # units per 1 USD


SUPPORTED_CURRENCIES: List[Currency] = [
    Currency("USD", "$", "US Dollar", 1.0),
    Currency("EUR", "€", "Euro", 0.85),
    Currency("GBP", "£", "British Pound", 0.73),
    Currency("JPY", "¥", "Japanese Yen", 110.0),
    Currency("CAD", "C$", "Canadian Dollar", 1.25),
    Currency("AUD", "A$", "Australian Dollar", 1.35),
    Currency("CHF", "CHF", "Swiss Franc", 0.92),
    Currency("CNY", "¥", "Chinese Yuan", 6.45),
    Currency("INR", "₹", "Indian Rupee", 74.5),
    Currency("SGD", "S$", "Singapore Dollar", 1.35),
]

DEFAULT_CURRENCY = "AUD"

PREFERRED_CURRENCY_KEY = "preferred-currency"

# Earlier defaults; a saved value equal to one of these was never chosen by the user
STALE_DEFAULTS = ("USD", "GBP")


def get_currency(code: str) -> Optional[Currency]:
    return next((c for c in SUPPORTED_CURRENCIES if c.code == code), None)


def convert_currency(amount: float, from_currency: str, to_currency: str) -> float:
    """Convert through USD; unknown codes are treated as USD"""
    if from_currency == to_currency:
        return amount

    source = get_currency(from_currency)
    target = get_currency(to_currency)
    from_rate = source.exchange_rate if source else 1
    to_rate = target.exchange_rate if target else 1

    return amount / from_rate * to_rate


def _group(amount: float, decimals: int) -> str:
    return f"{amount:,.{decimals}f}"


def format_currency(amount: float, currency_code: str) -> str:
    currency = get_currency(currency_code)
    if not currency:
        # Up to three fraction digits, trailing zeros dropped
        formatted = _group(amount, 3).rstrip("0").rstrip(".")
        return f"${formatted}"

    decimals = 0 if currency_code == "JPY" else 2
    return f"{currency.symbol}{_group(amount, decimals)}"


def get_currency_symbol(currency_code: str) -> str:
    currency = get_currency(currency_code)
    return currency.symbol if currency else "$"


def get_currency_name(currency_code: str) -> str:
    currency = get_currency(currency_code)
    return currency.name if currency else "US Dollar"


async def get_user_preferred_currency(store: PreferenceStore) -> str:
    """
    Saved currency for this client, or the default.

    A saved stale default is removed so the current default takes over.
    """
    saved = await store.get(PREFERRED_CURRENCY_KEY)
    logger.debug(f"Saved currency preference: {saved}")

    if saved in STALE_DEFAULTS:
        logger.debug(f"Clearing old currency preference: {saved}")
        await store.remove(PREFERRED_CURRENCY_KEY)
        return DEFAULT_CURRENCY

    if saved and get_currency(saved):
        return saved

    logger.debug(f"Using default currency: {DEFAULT_CURRENCY}")
    return DEFAULT_CURRENCY


async def set_user_preferred_currency(store: PreferenceStore, currency_code: str) -> None:
    await store.set(PREFERRED_CURRENCY_KEY, currency_code)
