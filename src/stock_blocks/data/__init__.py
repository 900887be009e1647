"""Data access layer."""

from .calendar import describe_window, is_trading_day, most_recent_trading_day, resolve_window
from .normalization import detect_currency, normalize_chart_payload
from .providers import SeriesProvider
from .yfinance_provider import YahooChartProvider

__all__ = [
    "SeriesProvider",
    "YahooChartProvider",
    "describe_window",
    "detect_currency",
    "is_trading_day",
    "most_recent_trading_day",
    "normalize_chart_payload",
    "resolve_window",
]
