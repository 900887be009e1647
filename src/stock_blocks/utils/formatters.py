"""Display formatting for prices, changes and timestamps."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "CA$",
    "AUD": "A$",
    "HKD": "HK$",
}


def format_price(price: float, currency: str = "USD") -> str:
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    sign = "-" if price < 0 else ""
    if symbol is None:
        return f"{sign}{currency.upper()} {abs(price):,.2f}"
    return f"{sign}{symbol}{abs(price):,.2f}"


def format_percentage(percent: float) -> str:
    sign = "+" if percent >= 0 else ""
    return f"{sign}{percent:.2f}%"


def format_timestamp(timestamp_ms: float, fmt: str = "%b %d", tz: Optional[timezone] = None) -> str:
    """Format epoch milliseconds, in local time unless *tz* is given."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=tz)
    return moment.strftime(fmt).replace(" 0", " ")
