"""Numeric helpers and summary tables."""

from .range_math import ChartDimensions, PriceRange, chart_dimensions, ohlc_range, price_range
from .summary import build_summary_table

__all__ = [
    "ChartDimensions",
    "PriceRange",
    "build_summary_table",
    "chart_dimensions",
    "ohlc_range",
    "price_range",
]
