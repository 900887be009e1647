"""Service layer entry points."""

from .blocks import (
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
from .series_cache import SeriesCache, StockBlocksContext

__all__ = [
    "SeriesCache",
    "StockBlocksContext",
    "fetch_chart_data",
    "fetch_list_data",
    "parse_chart_config",
    "parse_list_config",
    "refresh_chart_data",
    "refresh_due",
    "refresh_list_data",
    "refresh_seconds",
    "render_chart_block",
    "render_list_block",
    "symbol_link",
    "validate_chart_config",
    "validate_list_config",
]
