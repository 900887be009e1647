"""Normalize Yahoo chart payloads into a canonical series."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any, Optional

import numpy as np
import pandas as pd

from ..domain import NormalizedSeries, OHLCBar, normalize_symbol
from ..utils import InvalidResponseError, NoDataError

OHLC_FIELDS = ("open", "high", "low", "close")

SUFFIX_CURRENCIES = {
    ".TO": "CAD",
    ".V": "CAD",
    ".L": "GBP",
    ".LON": "GBP",
    ".F": "EUR",
    ".DE": "EUR",
    ".T": "JPY",
    ".TYO": "JPY",
    ".AX": "AUD",
    ".ASX": "AUD",
    ".HK": "HKD",
}


def detect_currency(symbol: str) -> str:
    """Infer the trading currency from an exchange suffix, defaulting to USD."""
    upper = normalize_symbol(symbol)
    for suffix, currency in SUFFIX_CURRENCIES.items():
        if upper.endswith(suffix):
            return currency
    return "USD"


def normalize_chart_payload(
    payload: Mapping[str, Any],
    symbol: str,
    requested_days: int,
    include_ohlc: bool = False,
    tz: Optional[str] = None,
) -> NormalizedSeries:
    """Convert a raw chart response into a :class:`NormalizedSeries`."""
    clean_symbol = normalize_symbol(symbol)
    result = _extract_result(payload, clean_symbol)
    frame = _rows_frame(result["timestamp"], result["indicators"]["quote"][0])

    valid = frame[np.isfinite(frame["close"])]
    if valid.empty:
        raise NoDataError(clean_symbol)

    valid = valid.sort_values("timestamp", kind="mergesort").reset_index(drop=True)

    final = valid
    if len(valid) > requested_days * 2:
        final = _latest_per_day(valid, tz)
    if len(final) < 2 and len(valid) >= 2:
        final = valid

    return _build_series(final, clean_symbol, requested_days, include_ohlc, result.get("meta"))


def _extract_result(payload: Mapping[str, Any], symbol: str) -> Mapping[str, Any]:
    try:
        result = payload["chart"]["result"][0]
        timestamps = result["timestamp"]
        quote = result["indicators"]["quote"][0]
    except (KeyError, IndexError, TypeError) as err:
        raise InvalidResponseError(f"Invalid response format for {symbol}") from err

    if not isinstance(timestamps, Sequence) or not isinstance(quote, Mapping):
        raise InvalidResponseError(f"Invalid response format for {symbol}")
    if not isinstance(quote.get("close"), Sequence):
        raise InvalidResponseError(f"Missing close prices for {symbol}")
    return result


def _numeric_column(values: Optional[Sequence[Any]], length: int) -> np.ndarray:
    if values is None:
        return np.full(length, np.nan)
    column = pd.to_numeric(pd.Series(list(values), dtype="object"), errors="coerce")
    return column.reindex(range(length)).to_numpy(dtype=float)


def _rows_frame(timestamps: Sequence[Any], quote: Mapping[str, Any]) -> pd.DataFrame:
    length = len(timestamps)
    frame = pd.DataFrame({"timestamp": pd.to_numeric(pd.Series(list(timestamps)), errors="coerce")})
    for name in OHLC_FIELDS:
        frame[name] = _numeric_column(quote.get(name), length)
    frame = frame.dropna(subset=["timestamp"])
    frame["timestamp"] = frame["timestamp"].astype("int64") * 1000
    return frame


def _latest_per_day(frame: pd.DataFrame, tz: Optional[str]) -> pd.DataFrame:
    """Keep the last observation of each local calendar date."""
    if tz is None:
        days = frame["timestamp"].map(lambda ms: datetime.fromtimestamp(ms / 1000).date())
    else:
        days = pd.to_datetime(frame["timestamp"], unit="ms", utc=True).dt.tz_convert(tz).dt.date
    deduped = frame.assign(day=days.to_numpy()).drop_duplicates(subset="day", keep="last")
    return deduped.drop(columns="day").reset_index(drop=True)


def _bar_for(row: Any) -> Optional[OHLCBar]:
    values = [getattr(row, name) for name in OHLC_FIELDS]
    if not all(np.isfinite(values)):
        return None
    return OHLCBar(*(float(value) for value in values))


def _build_series(
    frame: pd.DataFrame,
    symbol: str,
    requested_days: int,
    include_ohlc: bool,
    meta: Optional[Mapping[str, Any]],
) -> NormalizedSeries:
    prices = tuple(float(price) for price in frame["close"])
    timestamps = tuple(int(ts) for ts in frame["timestamp"])

    first_price = prices[0]
    latest_price = prices[-1]
    change = latest_price - first_price
    change_percent = change / first_price * 100 if first_price != 0 else 0.0

    interval_change: Optional[float] = None
    interval_change_percent: Optional[float] = None
    if requested_days >= 2 and len(prices) >= 2:
        previous = prices[-2]
        interval_change = round(latest_price - previous, 2)
        interval_change_percent = round(interval_change / previous * 100, 2) if previous != 0 else 0.0

    ohlc = tuple(_bar_for(row) for row in frame.itertuples(index=False)) if include_ohlc else None

    currency = None
    if isinstance(meta, Mapping):
        currency = meta.get("currency")
    if not currency:
        currency = detect_currency(symbol)

    return NormalizedSeries(
        symbol=symbol,
        prices=prices,
        timestamps=timestamps,
        latest_price=latest_price,
        period_change=change,
        period_change_percent=change_percent,
        currency=str(currency),
        last_interval_change=interval_change,
        last_interval_change_percent=interval_change_percent,
        ohlc=ohlc,
    )
