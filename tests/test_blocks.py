from __future__ import annotations

from datetime import datetime

import pytest

from stock_blocks.domain import ListBlockConfig, Settings
from stock_blocks.services.blocks import (
    fetch_chart_data,
    fetch_list_data,
    parse_chart_config,
    parse_list_config,
    refresh_chart_data,
    refresh_due,
    refresh_list_data,
    refresh_seconds,
    render_chart_block,
    render_list_block,
    symbol_link,
    validate_chart_config,
    validate_list_config,
)
from stock_blocks.services.series_cache import SeriesCache, StockBlocksContext
from stock_blocks.viz.svg import BEARISH_COLOR, BULLISH_COLOR

from .helpers import DummyProvider, chart_payload, ohlc_payload


@pytest.fixture
def provider() -> DummyProvider:
    return DummyProvider(
        {
            "AAPL": chart_payload([100.0, 104.0, 110.0]),
            "MSFT": chart_payload([300.0, 290.0, 280.0]),
            "NVDA": ohlc_payload([(50.0, 52.0, 49.0, 51.0), (51.0, 55.0, 50.0, 54.0), (54.0, 56.0, 53.0, 55.0)]),
            "EMPTY": chart_payload([None, None]),
        }
    )


@pytest.fixture
def context(provider: DummyProvider) -> StockBlocksContext:
    return StockBlocksContext.create(Settings(), provider=provider)


def test_parse_chart_config_reads_known_keys():
    config = parse_chart_config(
        """
        symbol: aapl
        days: 30
        width: 640
        showAxes: false
        useCandles: true
        linkStyle: wikilink
        title: Apple
        # a comment line
        unknown: ignored
        """
    )

    assert config.symbol == "aapl"
    assert config.days == 30
    assert config.width == 640
    assert config.height == 400
    assert config.show_axes is False
    assert config.use_candles is True
    assert config.link_style == "wikilink"
    assert config.title == "Apple"


def test_parse_chart_config_takes_first_of_tickers():
    config = parse_chart_config("tickers: MSFT, AAPL")
    assert config.symbol == "MSFT"


def test_parse_chart_config_falls_back_on_bad_values():
    config = parse_chart_config("symbol: AAPL\ndays: soon\nwidth: -20\nlinkStyle: html")

    assert config.days == 120
    assert config.width == 1
    assert config.link_style == "none"


def test_parse_config_uses_settings_defaults():
    settings = Settings(default_days=7, default_width=320, default_height=180, default_show_sparklines=False)

    chart = parse_chart_config("symbol: AAPL", settings)
    listing = parse_list_config("tickers: AAPL", settings)

    assert (chart.days, chart.width, chart.height) == (7, 320, 180)
    assert (listing.days, listing.width, listing.height) == (7, 320, 180)
    assert listing.sparkline is False


def test_parse_list_config():
    config = parse_list_config("stocks: AAPL, , msft,NVDA\nsortBy: changePercent\nsortOrder: sideways\nsparkline: false")

    assert config.tickers == ["AAPL", "msft", "NVDA"]
    assert config.sort_by == "changePercent"
    assert config.sort_order is None
    assert config.sparkline is False


def test_validators():
    assert validate_chart_config(parse_chart_config("days: 5")) == "No symbol specified. Add a symbol like: symbol: AAPL"
    assert validate_chart_config(parse_chart_config("symbol: AAPL")) is None
    assert validate_list_config(parse_list_config("days: 5")) == (
        "No tickers specified. Add tickers like: tickers: AAPL, MSFT, NVDA"
    )
    assert validate_list_config(parse_list_config("tickers: AAPL")) is None


def test_list_fetch_keeps_going_past_failures(context):
    config = ListBlockConfig(tickers=["AAPL", "EMPTY", "UNKNOWN", "MSFT"], days=5)

    result = fetch_list_data(context, config)

    assert [series.symbol for series in result.series] == ["AAPL", "MSFT"]
    assert set(result.errors) == {"EMPTY", "UNKNOWN"}
    assert result.errors["EMPTY"] == "Failed to fetch EMPTY: No valid price data found for EMPTY"


def test_chart_fetch_is_cached_and_refresh_refetches(context, provider):
    config = parse_chart_config("symbol: AAPL\ndays: 5")

    fetch_chart_data(context, config)
    fetch_chart_data(context, config)
    assert len(provider.calls) == 1

    refresh_chart_data(context, config)
    assert len(provider.calls) == 2


def test_list_refresh_refetches_every_ticker(context, provider):
    config = parse_list_config("tickers: AAPL, MSFT\ndays: 5")

    fetch_list_data(context, config)
    refresh_list_data(context, config)

    assert [call[0] for call in provider.calls] == ["AAPL", "MSFT", "AAPL", "MSFT"]


def test_render_chart_block_with_candles(context):
    config = parse_chart_config("symbol: nvda\ndays: 5\nuseCandles: true")

    block = render_chart_block(context, config)

    assert block.series.symbol == "NVDA"
    assert block.chart.geometry.kind == "candlestick"
    assert block.chart.svg.count('class="candle-body"') == 3
    assert block.period_label.startswith("Last 5 business days (")


def test_render_chart_block_line(context):
    block = render_chart_block(context, parse_chart_config("symbol: AAPL\ndays: 1"))

    assert block.chart.geometry.kind == "line"
    assert block.period_label.startswith("Last business day (")


def test_render_list_block(context):
    config = parse_list_config("tickers: AAPL, MSFT, EMPTY\ndays: 5\nsortBy: changePercent\nsortOrder: desc")

    block = render_list_block(context, config)

    assert list(block.table["symbol"]) == ["AAPL", "MSFT"]
    assert set(block.errors) == {"EMPTY"}
    assert set(block.sparklines) == {"AAPL", "MSFT"}
    aapl = block.sparklines["AAPL"]
    assert (aapl.geometry.outer_width, aapl.geometry.outer_height) == (200, 40)
    assert f'stroke="{BULLISH_COLOR}"' in aapl.svg
    assert f'stroke="{BEARISH_COLOR}"' in block.sparklines["MSFT"].svg


def test_render_list_block_without_sparklines(context):
    block = render_list_block(context, parse_list_config("tickers: AAPL\nsparkline: false"))

    assert block.sparklines == {}
    assert len(block.table) == 1


@pytest.mark.parametrize(
    "link_style, expected",
    [
        ("none", "AAPL"),
        ("wikilink", "[[AAPL]]"),
        ("markdown", "[AAPL](https://finance.yahoo.com/quote/AAPL)"),
    ],
)
def test_symbol_link(link_style, expected):
    assert symbol_link("AAPL", link_style) == expected


def test_blocks_carry_symbol_links(context):
    chart = render_chart_block(context, parse_chart_config("symbol: aapl\ndays: 5\nlinkStyle: markdown"))
    listing = render_list_block(context, parse_list_config("tickers: AAPL, MSFT, EMPTY\ndays: 5\nlinkStyle: wikilink"))

    assert chart.link == "[AAPL](https://finance.yahoo.com/quote/AAPL)"
    assert listing.links == {"AAPL": "[[AAPL]]", "MSFT": "[[MSFT]]"}


@pytest.mark.parametrize("interval, seconds", [(None, None), (0, None), (-5, None), (1, 60), (15, 900)])
def test_refresh_seconds(interval, seconds):
    assert refresh_seconds(interval) == seconds


def test_refresh_due_after_interval_elapses():
    assert not refresh_due(None, 0.0, 10_000.0)
    assert not refresh_due(5, None, 10_000.0)
    assert not refresh_due(5, 1_000.0, 1_299.0)
    assert refresh_due(5, 1_000.0, 1_300.0)


def test_period_label_uses_the_cache_clock(provider):
    cache = SeriesCache(provider, now=lambda: datetime(2024, 3, 12, 16, 0))
    context = StockBlocksContext(settings=Settings(), cache=cache)

    block = render_chart_block(context, parse_chart_config("symbol: AAPL\ndays: 5"))

    assert block.period_label == "Last 5 business days (Mar 5 - Mar 12)"
    _, start, end = provider.calls[0]
    assert (start, end) == (cache.window_for(5).start, cache.window_for(5).end)
