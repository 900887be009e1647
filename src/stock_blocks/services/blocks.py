"""Service helpers that host render surfaces call for stock blocks."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Optional

import pandas as pd

from ..analytics.summary import build_summary_table
from ..data.calendar import describe_window
from ..domain import ChartBlockConfig, LinkStyle, ListBlockConfig, NormalizedSeries, Settings
from ..utils import SeriesFetchError
from ..viz.svg import BEARISH_COLOR, BULLISH_COLOR, RenderedChart, render_series, render_sparkline
from .series_cache import StockBlocksContext

logger = logging.getLogger(__name__)

SPARKLINE_MAX_WIDTH = 200
SPARKLINE_MAX_HEIGHT = 40

_LINK_STYLES = ("none", "wikilink", "markdown")
_SORT_KEYS = ("symbol", "price", "changePercent", "todayChangePercent")
_SORT_ORDERS = ("asc", "desc")

QUOTE_URL = "https://finance.yahoo.com/quote/{symbol}"


# --- Block source parsing ---------------------------------------------------


def _entries(source: str) -> Iterator[tuple[str, str]]:
    for line in source.strip().splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or ":" not in stripped:
            continue
        key, _, value = stripped.partition(":")
        yield key.strip(), value.strip()


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except ValueError:
        return None


def _parse_bool(value: str) -> bool:
    return value.lower() == "true"


def _split_tickers(value: str) -> list[str]:
    return [ticker.strip() for ticker in value.split(",") if ticker.strip()]


def _positive(value: Optional[int], default: int) -> int:
    if value is None:
        return default
    return max(1, value)


def parse_chart_config(source: str, settings: Optional[Settings] = None) -> ChartBlockConfig:
    """Parse ``key: value`` lines of a single-chart block."""
    values: dict[str, object] = {}
    for key, value in _entries(source):
        if key in ("symbol", "symbols", "stock", "stocks", "ticker"):
            values["symbol"] = value
        elif key == "tickers":
            tickers = _split_tickers(value)
            values["symbol"] = tickers[0] if tickers else ""
        elif key in ("days", "width", "height", "refreshInterval"):
            values[key] = _parse_int(value)
        elif key in ("showAxes", "useCandles", "showLastUpdate", "showTodayChange"):
            values[key] = _parse_bool(value)
        elif key == "linkStyle":
            values[key] = value if value in _LINK_STYLES else "none"
        elif key in ("title", "description"):
            values[key] = value

    return ChartBlockConfig(
        symbol=str(values.get("symbol", "")),
        days=_positive(values.get("days"), settings.default_days if settings else 120),
        width=_positive(values.get("width"), settings.default_width if settings else 500),
        height=_positive(values.get("height"), settings.default_height if settings else 400),
        show_axes=values.get("showAxes", True),
        use_candles=values.get("useCandles", False),
        link_style=values.get("linkStyle", "none"),
        show_last_update=values.get("showLastUpdate"),
        show_today_change=values.get("showTodayChange", False),
        refresh_interval=values.get("refreshInterval"),
        title=values.get("title"),
        description=values.get("description"),
    )


def parse_list_config(source: str, settings: Optional[Settings] = None) -> ListBlockConfig:
    """Parse ``key: value`` lines of a stock list block."""
    values: dict[str, object] = {}
    for key, value in _entries(source):
        if key in ("tickers", "symbols", "stocks"):
            values["tickers"] = _split_tickers(value)
        elif key in ("days", "width", "height", "refreshInterval"):
            values[key] = _parse_int(value)
        elif key in ("showLastUpdate", "showTodayChange", "sparkline"):
            values[key] = _parse_bool(value)
        elif key == "linkStyle":
            values[key] = value if value in _LINK_STYLES else "none"
        elif key == "sortBy":
            values[key] = value if value in _SORT_KEYS else None
        elif key == "sortOrder":
            values[key] = value if value in _SORT_ORDERS else None
        elif key in ("title", "description"):
            values[key] = value

    return ListBlockConfig(
        tickers=values.get("tickers", []),
        days=_positive(values.get("days"), settings.default_days if settings else 120),
        width=_positive(values.get("width"), settings.default_width if settings else 500),
        height=_positive(values.get("height"), settings.default_height if settings else 400),
        link_style=values.get("linkStyle", "none"),
        sort_by=values.get("sortBy"),
        sort_order=values.get("sortOrder"),
        show_last_update=values.get("showLastUpdate"),
        show_today_change=values.get("showTodayChange", False),
        refresh_interval=values.get("refreshInterval"),
        sparkline=values.get("sparkline", settings.default_show_sparklines if settings else True),
        title=values.get("title"),
        description=values.get("description"),
    )


def validate_chart_config(config: ChartBlockConfig) -> Optional[str]:
    if not config.symbol.strip():
        return "No symbol specified. Add a symbol like: symbol: AAPL"
    return None


def validate_list_config(config: ListBlockConfig) -> Optional[str]:
    if not config.tickers:
        return "No tickers specified. Add tickers like: tickers: AAPL, MSFT, NVDA"
    return None


# --- Fetching ---------------------------------------------------------------


@dataclass
class ListFetchResult:
    series: list[NormalizedSeries] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)


def fetch_chart_data(context: StockBlocksContext, config: ChartBlockConfig) -> NormalizedSeries:
    return context.cache.get(config.symbol, config.days, include_ohlc=config.use_candles)


def fetch_list_data(context: StockBlocksContext, config: ListBlockConfig) -> ListFetchResult:
    """Fetch every ticker of a list; one failing symbol does not sink the others."""
    result = ListFetchResult()
    for ticker in config.tickers:
        try:
            result.series.append(context.cache.get(ticker, config.days))
        except SeriesFetchError as err:
            logger.warning("Skipping %s: %s", err.symbol, err.cause)
            result.errors[err.symbol] = str(err)
    return result


def refresh_chart_data(context: StockBlocksContext, config: ChartBlockConfig) -> NormalizedSeries:
    context.cache.clear()
    return fetch_chart_data(context, config)


def refresh_list_data(context: StockBlocksContext, config: ListBlockConfig) -> ListFetchResult:
    context.cache.clear()
    return fetch_list_data(context, config)


def refresh_seconds(refresh_interval: Optional[int]) -> Optional[int]:
    """Auto-refresh period in seconds for a ``refreshInterval`` given in minutes."""
    if refresh_interval is None or refresh_interval <= 0:
        return None
    return refresh_interval * 60


def refresh_due(refresh_interval: Optional[int], last_refresh: Optional[float], now: float) -> bool:
    seconds = refresh_seconds(refresh_interval)
    if seconds is None or last_refresh is None:
        return False
    return now - last_refresh >= seconds


# --- Rendering --------------------------------------------------------------


def symbol_link(symbol: str, link_style: LinkStyle = "none") -> str:
    """Markdown for a symbol: plain text, a wikilink or a Yahoo quote link."""
    if link_style == "wikilink":
        return f"[[{symbol}]]"
    if link_style == "markdown":
        return f"[{symbol}]({QUOTE_URL.format(symbol=symbol)})"
    return symbol


@dataclass
class ChartBlock:
    series: NormalizedSeries
    chart: RenderedChart
    period_label: str
    link: str


@dataclass
class ListBlock:
    table: pd.DataFrame
    sparklines: dict[str, RenderedChart]
    errors: dict[str, str]
    period_label: str
    links: dict[str, str] = field(default_factory=dict)


def _period_label(context: StockBlocksContext, days: int) -> str:
    return describe_window(days, context.cache.business_days, context.cache.window_for(days))


def render_chart_block(context: StockBlocksContext, config: ChartBlockConfig) -> ChartBlock:
    series = fetch_chart_data(context, config)
    chart = render_series(series, config.width, config.height, config.show_axes, config.use_candles)
    return ChartBlock(
        series=series,
        chart=chart,
        period_label=_period_label(context, config.days),
        link=symbol_link(series.symbol, config.link_style),
    )


def render_list_block(context: StockBlocksContext, config: ListBlockConfig) -> ListBlock:
    fetched = fetch_list_data(context, config)
    table = build_summary_table(fetched.series, config.sort_by, config.sort_order)

    sparklines: dict[str, RenderedChart] = {}
    if config.sparkline:
        width = min(config.width, SPARKLINE_MAX_WIDTH)
        height = min(config.height, SPARKLINE_MAX_HEIGHT)
        for series in fetched.series:
            color = BULLISH_COLOR if series.period_change_percent >= 0 else BEARISH_COLOR
            sparklines[series.symbol] = render_sparkline(
                series.prices, series.timestamps, width, height, color, series.currency
            )

    return ListBlock(
        table=table,
        sparklines=sparklines,
        errors=fetched.errors,
        period_label=_period_label(context, config.days),
        links={series.symbol: symbol_link(series.symbol, config.link_style) for series in fetched.series},
    )
