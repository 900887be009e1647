from __future__ import annotations

"""Domain models and configuration types."""

import os
from dataclasses import dataclass, field
from typing import Literal, Optional

import pandas as pd

LinkStyle = Literal["none", "wikilink", "markdown"]
SortKey = Literal["symbol", "price", "changePercent", "todayChangePercent"]
SortOrder = Literal["asc", "desc"]


@dataclass(frozen=True, slots=True)
class PricePoint:
    timestamp: int
    price: float


@dataclass(frozen=True, slots=True)
class OHLCBar:
    open: float
    high: float
    low: float
    close: float

    @property
    def is_bullish(self) -> bool:
        return self.close >= self.open

    @property
    def low_bound(self) -> float:
        return min(self.open, self.high, self.low, self.close)

    @property
    def high_bound(self) -> float:
        return max(self.open, self.high, self.low, self.close)


@dataclass(frozen=True, slots=True)
class NormalizedSeries:
    """Canonical price history for one symbol.

    Timestamps are epoch milliseconds in ascending order. ``ohlc`` is ``None``
    when bars were not requested; otherwise it lines up with ``prices`` and
    holds ``None`` wherever the provider row was incomplete.
    """

    symbol: str
    prices: tuple[float, ...]
    timestamps: tuple[int, ...]
    latest_price: float
    period_change: float
    period_change_percent: float
    currency: str = "USD"
    last_interval_change: Optional[float] = None
    last_interval_change_percent: Optional[float] = None
    ohlc: Optional[tuple[Optional[OHLCBar], ...]] = None

    def __post_init__(self) -> None:
        if len(self.prices) != len(self.timestamps):
            raise ValueError("prices and timestamps must have the same length")
        if not self.prices:
            raise ValueError(f"series for {self.symbol} is empty")
        if self.ohlc is not None and len(self.ohlc) != len(self.prices):
            raise ValueError("ohlc must line up with prices")

    def __len__(self) -> int:
        return len(self.prices)

    def points(self) -> list[PricePoint]:
        return [PricePoint(ts, price) for ts, price in zip(self.timestamps, self.prices)]

    def candles(self) -> list[tuple[int, OHLCBar]]:
        """Timestamp/bar pairs for rows with a complete bar."""
        if self.ohlc is None:
            return []
        return [(ts, bar) for ts, bar in zip(self.timestamps, self.ohlc) if bar is not None]

    def to_frame(self) -> pd.DataFrame:
        frame = pd.DataFrame(
            {"price": self.prices},
            index=pd.to_datetime(list(self.timestamps), unit="ms", utc=True),
        )
        if self.ohlc is not None:
            for column in ("open", "high", "low", "close"):
                frame[column] = [getattr(bar, column) if bar is not None else float("nan") for bar in self.ohlc]
        frame.index.name = "date"
        return frame


@dataclass(frozen=True, slots=True)
class SeriesKey:
    symbol: str
    days: int
    business_days: bool
    include_ohlc: bool = False

    @classmethod
    def build(cls, symbol: str, days: int, business_days: bool, include_ohlc: bool = False) -> "SeriesKey":
        return cls(normalize_symbol(symbol), days, business_days, include_ohlc)


@dataclass(frozen=True, slots=True)
class CacheEntry:
    key: SeriesKey
    series: NormalizedSeries
    fetched_at: float

    def is_live(self, now: float, ttl_seconds: float) -> bool:
        return now - self.fetched_at < ttl_seconds


@dataclass(frozen=True, slots=True)
class DateWindow:
    """Range query bounds in epoch seconds."""

    start: int
    end: int
    covered_days: int


def normalize_symbol(symbol: str) -> str:
    return symbol.strip().upper()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.lower() in ("1", "true", "yes")


@dataclass(slots=True)
class Settings:
    cache_minutes: int = 15
    default_days: int = 30
    default_width: int = 500
    default_height: int = 300
    use_business_days: bool = True
    default_show_sparklines: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        base = cls()
        return cls(
            cache_minutes=_env_int("STOCK_BLOCKS_CACHE_MINUTES", base.cache_minutes),
            default_days=_env_int("STOCK_BLOCKS_DEFAULT_DAYS", base.default_days),
            use_business_days=_env_flag("STOCK_BLOCKS_BUSINESS_DAYS", base.use_business_days),
        )


@dataclass(slots=True)
class ChartBlockConfig:
    symbol: str
    days: int = 120
    width: int = 500
    height: int = 400
    show_axes: bool = True
    use_candles: bool = False
    link_style: LinkStyle = "none"
    show_last_update: Optional[bool] = None
    show_today_change: bool = False
    refresh_interval: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None


@dataclass(slots=True)
class ListBlockConfig:
    tickers: list[str] = field(default_factory=list)
    days: int = 120
    width: int = 500
    height: int = 400
    link_style: LinkStyle = "none"
    sort_by: Optional[SortKey] = None
    sort_order: Optional[SortOrder] = None
    show_last_update: Optional[bool] = None
    show_today_change: bool = False
    refresh_interval: Optional[int] = None
    sparkline: bool = True
    title: Optional[str] = None
    description: Optional[str] = None
