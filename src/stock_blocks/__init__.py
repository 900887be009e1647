"""stock_blocks package with UI-agnostic chart and data logic."""

from .domain import (
    ChartBlockConfig,
    DateWindow,
    ListBlockConfig,
    NormalizedSeries,
    OHLCBar,
    PricePoint,
    SeriesKey,
    Settings,
)

__all__ = [
    "ChartBlockConfig",
    "DateWindow",
    "ListBlockConfig",
    "NormalizedSeries",
    "OHLCBar",
    "PricePoint",
    "SeriesKey",
    "Settings",
]
