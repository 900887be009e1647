"""Price range and plot-area helpers shared by the chart layouts."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from ..domain import OHLCBar


@dataclass(frozen=True, slots=True)
class PriceRange:
    min: float
    max: float
    range: float


@dataclass(frozen=True, slots=True)
class ChartDimensions:
    padding: float
    plot_width: float
    plot_height: float
    right_bound: float
    bottom_bound: float
    center_x: float
    center_y: float
    mid_x: float
    mid_y: float


def price_range(prices: Sequence[float]) -> PriceRange:
    """Return min/max over *prices* with the range floored to 1 when flat."""
    if len(prices) == 0:
        return PriceRange(0.0, 0.0, 1.0)

    values = np.asarray(prices, dtype=float)
    low = float(values.min())
    high = float(values.max())
    return PriceRange(low, high, (high - low) or 1.0)


def ohlc_range(bars: Sequence[OHLCBar]) -> PriceRange:
    if len(bars) == 0:
        return PriceRange(0.0, 0.0, 1.0)

    low = min(bar.low_bound for bar in bars)
    high = max(bar.high_bound for bar in bars)
    return PriceRange(low, high, (high - low) or 1.0)


def chart_dimensions(width: float, height: float, padding: float) -> ChartDimensions:
    plot_width = width - padding * 2
    plot_height = height - padding * 2
    return ChartDimensions(
        padding=padding,
        plot_width=plot_width,
        plot_height=plot_height,
        right_bound=padding + plot_width,
        bottom_bound=padding + plot_height,
        center_x=width / 2,
        center_y=height / 2,
        mid_x=padding + plot_width / 2,
        mid_y=padding + plot_height / 2,
    )
