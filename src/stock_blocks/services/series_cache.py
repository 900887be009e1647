"""TTL-bounded cache of normalized series, keyed by request shape."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..data.calendar import resolve_window
from ..data.normalization import normalize_chart_payload
from ..data.providers import SeriesProvider
from ..domain import CacheEntry, DateWindow, NormalizedSeries, SeriesKey, Settings
from ..utils import SeriesFetchError

logger = logging.getLogger(__name__)


class SeriesCache:
    """Serve normalized series from memory, fetching on miss or expiry.

    The business-day mode is a cache-wide setting that is also folded into the
    key; switching it flushes every entry. Failed fetches are never stored.
    """

    def __init__(
        self,
        provider: SeriesProvider,
        ttl_minutes: float = 15,
        business_days: bool = True,
        clock: Callable[[], float] = time.time,
        now: Optional[Callable[[], datetime]] = None,
        tz: Optional[str] = None,
    ) -> None:
        self.provider = provider
        self.ttl_seconds = ttl_minutes * 60
        self.business_days = business_days
        self._clock = clock
        self._now = now or datetime.now
        self._tz = tz
        self._entries: dict[SeriesKey, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def size(self) -> int:
        return len(self._entries)

    def key_for(self, symbol: str, days: int, include_ohlc: bool = False) -> SeriesKey:
        return SeriesKey.build(symbol, days, self.business_days, include_ohlc)

    def get(self, symbol: str, days: int, include_ohlc: bool = False) -> NormalizedSeries:
        key = self.key_for(symbol, days, include_ohlc)
        entry = self._entries.get(key)
        if entry is not None and entry.is_live(self._clock(), self.ttl_seconds):
            logger.debug("Cache hit for %s", key)
            return entry.series

        try:
            series = self._fetch(key)
        except Exception as err:
            raise SeriesFetchError(key.symbol, err) from err

        self._entries[key] = CacheEntry(key=key, series=series, fetched_at=self._clock())
        return series

    def clear(self) -> None:
        if self._entries:
            logger.info("Clearing %d cached series", len(self._entries))
        self._entries.clear()

    def set_ttl(self, minutes: float) -> None:
        self.ttl_seconds = minutes * 60

    def set_business_day_mode(self, business_days: bool) -> None:
        self.business_days = business_days
        self.clear()

    def window_for(self, days: int) -> DateWindow:
        """The window a fetch for *days* would request right now."""
        return resolve_window(days, self.business_days, self._now())

    def _fetch(self, key: SeriesKey) -> NormalizedSeries:
        window = resolve_window(key.days, key.business_days, self._now())
        payload = self.provider.fetch_chart(key.symbol, window.start, window.end)
        return normalize_chart_payload(
            payload,
            key.symbol,
            key.days,
            include_ohlc=key.include_ohlc,
            tz=self._tz,
        )


@dataclass
class StockBlocksContext:
    """Settings plus the shared cache, handed to whatever renders blocks."""

    settings: Settings
    cache: SeriesCache

    @classmethod
    def create(cls, settings: Optional[Settings] = None, provider: Optional[SeriesProvider] = None) -> "StockBlocksContext":
        settings = settings or Settings()
        if provider is None:
            from ..data.yfinance_provider import YahooChartProvider

            provider = YahooChartProvider()
        cache = SeriesCache(
            provider,
            ttl_minutes=settings.cache_minutes,
            business_days=settings.use_business_days,
        )
        return cls(settings=settings, cache=cache)

    def apply_settings(self, settings: Settings) -> None:
        self.cache.set_ttl(settings.cache_minutes)
        if settings.use_business_days != self.cache.business_days:
            self.cache.set_business_day_mode(settings.use_business_days)
        self.settings = settings
