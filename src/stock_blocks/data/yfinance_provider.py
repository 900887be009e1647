"""yfinance-backed chart provider."""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

import yfinance.data

logger = logging.getLogger(__name__)

# Patch yfinance to bypass fc.yahoo.com check if requested via env var
if os.getenv("YFINANCE_SKIP_COOKIE_CHECK", "0").lower() in ("1", "true", "yes"):
    logger.warning("Patching yfinance to skip fc.yahoo.com cookie check (YFINANCE_SKIP_COOKIE_CHECK is set)")

    def _get_cookie_basic_patched(self, timeout=30):
        return True

    yfinance.data.YfData._get_cookie_basic = _get_cookie_basic_patched

from ..domain import normalize_symbol
from ..utils import FetchFailedError, InvalidResponseError
from .providers import SeriesProvider

CHART_URL = "https://query2.finance.yahoo.com/v8/finance/chart/{symbol}"


class YahooChartProvider(SeriesProvider):
    """Adapter around the Yahoo v8 chart endpoint, reached through yfinance's session."""

    def __init__(self, interval: str = "1d", timeout: int = 30, data: Optional[Any] = None) -> None:
        self.interval = interval
        self.timeout = timeout
        self._data = data

    @property
    def data(self) -> Any:
        if self._data is None:
            self._data = yfinance.data.YfData()
        return self._data

    def fetch_chart(self, symbol: str, start: int, end: int) -> dict[str, Any]:
        clean_symbol = normalize_symbol(symbol)
        params = {"period1": start, "period2": end, "interval": self.interval}
        logger.info("Fetching %s chart %s..%s (%s)", clean_symbol, start, end, self.interval)

        try:
            response = self.data.get(url=CHART_URL.format(symbol=clean_symbol), params=params, timeout=self.timeout)
        except Exception as err:  # pragma: no cover - network
            raise FetchFailedError(f"chart request failed: {err}") from err

        status = getattr(response, "status_code", 200)
        if status >= 400:
            raise FetchFailedError(f"chart request failed with HTTP {status}")

        try:
            payload = response.json()
        except ValueError as err:
            raise InvalidResponseError(f"chart response for {clean_symbol} is not JSON") from err

        if not isinstance(payload, dict):
            raise InvalidResponseError(f"chart response for {clean_symbol} is not an object")
        return payload
