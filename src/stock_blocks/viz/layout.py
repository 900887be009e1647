"""Pixel geometry for line, sparkline and candlestick charts."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from dataclasses import asdict, dataclass, field
from functools import partial
from typing import Any, Literal, NamedTuple, Optional

from ..analytics.range_math import chart_dimensions, ohlc_range, price_range
from ..domain import OHLCBar

ChartKind = Literal["line", "sparkline", "candlestick"]

AXES_PADDING = 40
PLAIN_PADDING = 10
MIN_CANDLE_WIDTH = 1.0


@dataclass(frozen=True, slots=True)
class PointGeometry:
    x: float
    y: float
    price: float
    timestamp: Optional[float]
    index: int


@dataclass(frozen=True, slots=True)
class CandleGeometry:
    x: float
    open_y: float
    high_y: float
    low_y: float
    close_y: float
    open: float
    high: float
    low: float
    close: float
    timestamp: Optional[float]
    index: int

    @property
    def is_bullish(self) -> bool:
        return self.close >= self.open

    @property
    def body_top(self) -> float:
        return min(self.open_y, self.close_y)

    @property
    def body_height(self) -> float:
        return max(1.0, abs(self.close_y - self.open_y))

    @property
    def bar(self) -> OHLCBar:
        return OHLCBar(self.open, self.high, self.low, self.close)


@dataclass(frozen=True, slots=True)
class ChartGeometry:
    kind: ChartKind
    padding: float
    plot_width: float
    plot_height: float
    price_min: float
    price_max: float
    price_range: float
    outer_width: float
    outer_height: float
    currency: str = "USD"
    points: tuple[PointGeometry, ...] = field(default_factory=tuple)
    candles: tuple[CandleGeometry, ...] = field(default_factory=tuple)
    is_single_point: bool = False
    candle_width: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return not self.points and not self.candles

    @property
    def right_bound(self) -> float:
        return self.padding + self.plot_width

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChartGeometry":
        values = dict(data)
        values["points"] = tuple(PointGeometry(**point) for point in values.get("points", ()))
        values["candles"] = tuple(CandleGeometry(**candle) for candle in values.get("candles", ()))
        return cls(**values)

    @classmethod
    def from_json(cls, raw: str) -> "ChartGeometry":
        return cls.from_dict(json.loads(raw))


def axis_padding(show_axes: bool) -> int:
    return AXES_PADDING if show_axes else PLAIN_PADDING


def _empty(kind: ChartKind, width: float, height: float, padding: float, currency: str) -> ChartGeometry:
    dims = chart_dimensions(width, height, padding)
    return ChartGeometry(
        kind=kind,
        padding=padding,
        plot_width=dims.plot_width,
        plot_height=dims.plot_height,
        price_min=0.0,
        price_max=0.0,
        price_range=1.0,
        outer_width=width,
        outer_height=height,
        currency=currency,
    )


def _timestamp_at(timestamps: Optional[Sequence[float]], index: int) -> Optional[float]:
    if timestamps is None or index >= len(timestamps):
        return None
    return timestamps[index]


def _map_points(
    kind: ChartKind,
    prices: Sequence[float],
    timestamps: Optional[Sequence[float]],
    width: float,
    height: float,
    padding: float,
    currency: str,
) -> ChartGeometry:
    count = len(prices)
    if count == 0:
        return _empty(kind, width, height, padding, currency)

    dims = chart_dimensions(width, height, padding)
    if count == 1:
        point = PointGeometry(dims.center_x, dims.center_y, prices[0], _timestamp_at(timestamps, 0), 0)
        return ChartGeometry(
            kind=kind,
            padding=padding,
            plot_width=dims.plot_width,
            plot_height=dims.plot_height,
            price_min=prices[0],
            price_max=prices[0],
            price_range=1.0,
            outer_width=width,
            outer_height=height,
            currency=currency,
            points=(point,),
            is_single_point=True,
        )

    bounds = price_range(prices)
    points = tuple(
        PointGeometry(
            x=padding + index / (count - 1) * dims.plot_width,
            y=padding + dims.plot_height - (price - bounds.min) / bounds.range * dims.plot_height,
            price=price,
            timestamp=_timestamp_at(timestamps, index),
            index=index,
        )
        for index, price in enumerate(prices)
    )
    return ChartGeometry(
        kind=kind,
        padding=padding,
        plot_width=dims.plot_width,
        plot_height=dims.plot_height,
        price_min=bounds.min,
        price_max=bounds.max,
        price_range=bounds.range,
        outer_width=width,
        outer_height=height,
        currency=currency,
        points=points,
    )


def layout_line(
    prices: Sequence[float],
    timestamps: Optional[Sequence[float]],
    width: float,
    height: float,
    show_axes: bool = False,
    currency: str = "USD",
) -> ChartGeometry:
    return _map_points("line", prices, timestamps, width, height, axis_padding(show_axes), currency)


def layout_sparkline(
    prices: Sequence[float],
    timestamps: Optional[Sequence[float]],
    width: float,
    height: float,
    currency: str = "USD",
) -> ChartGeometry:
    """Same mapping as :func:`layout_line` with the plot filling the whole box."""
    return _map_points("sparkline", prices, timestamps, width, height, 0, currency)


# --- Candlestick sizing -------------------------------------------------------


class CandleDimensions(NamedTuple):
    width: float
    spacing: float
    gap: float
    placement: Literal["centered", "slot", "step"]


def _gap_based(count: int, plot_width: float, *, gap_cap: float, gap_fraction: float, width_cap: float) -> CandleDimensions:
    gap = min(gap_cap, plot_width * gap_fraction)
    available = plot_width - (count - 1) * gap
    width = max(MIN_CANDLE_WIDTH, min(width_cap, available / count))
    return CandleDimensions(width, width + gap, gap, "centered")


def _slot_based(count: int, plot_width: float, *, fill: float, width_cap: float) -> CandleDimensions:
    slot = plot_width / count
    # The 1px floor gives way to the slot so neighbours never overlap.
    width = min(slot, max(MIN_CANDLE_WIDTH, min(width_cap, slot * fill)))
    return CandleDimensions(width, slot, 0.0, "slot")


def _step_based(count: int, plot_width: float, *, width_cap: float, density: float) -> CandleDimensions:
    spacing = plot_width / max(1, count - 1)
    width = min(spacing, max(MIN_CANDLE_WIDTH, min(width_cap, plot_width / (count * density))))
    return CandleDimensions(width, spacing, 0.0, "step")


def _capped(dims: CandleDimensions, ceiling: float) -> CandleDimensions:
    if dims.width <= ceiling:
        return dims
    if dims.placement == "centered":
        return dims._replace(width=ceiling, spacing=ceiling + dims.gap)
    return dims._replace(width=ceiling)


class CandleRegime(NamedTuple):
    max_bars: float
    size: Callable[[int, float], CandleDimensions]


# Evaluated in order; the first row whose max_bars covers the count wins.
CANDLE_REGIMES: tuple[CandleRegime, ...] = (
    CandleRegime(5, partial(_gap_based, gap_cap=20.0, gap_fraction=0.05, width_cap=40.0)),
    CandleRegime(15, partial(_gap_based, gap_cap=15.0, gap_fraction=0.03, width_cap=25.0)),
    CandleRegime(50, partial(_slot_based, fill=0.7, width_cap=15.0)),
    CandleRegime(100, partial(_slot_based, fill=0.6, width_cap=8.0)),
    CandleRegime(float("inf"), partial(_step_based, width_cap=4.0, density=2.0)),
)


def candle_dimensions(count: int, plot_width: float) -> CandleDimensions:
    """Size candles for *count* bars.

    Each regime is capped at the width the previous regime reached on its last
    bar count, so widths never grow as bars are added.
    """
    ceiling = float("inf")
    for regime in CANDLE_REGIMES:
        if count <= regime.max_bars:
            return _capped(regime.size(count, plot_width), ceiling)
        ceiling = min(ceiling, regime.size(int(regime.max_bars), plot_width).width)
    raise ValueError(f"no candle regime for {count} bars")  # pragma: no cover - last row is unbounded


def candle_x(index: int, count: int, padding: float, plot_width: float, dims: CandleDimensions) -> float:
    if dims.placement == "centered":
        total = count * dims.width + (count - 1) * dims.gap
        start = padding + (plot_width - total) / 2
        return start + index * (dims.width + dims.gap) + dims.width / 2
    if dims.placement == "slot":
        return padding + index * dims.spacing + dims.spacing / 2
    return padding + index * dims.spacing


def layout_candles(
    bars: Sequence[OHLCBar],
    timestamps: Optional[Sequence[float]],
    width: float,
    height: float,
    show_axes: bool = False,
    currency: str = "USD",
) -> ChartGeometry:
    padding = axis_padding(show_axes)
    count = len(bars)
    if count == 0:
        return _empty("candlestick", width, height, padding, currency)

    dims = chart_dimensions(width, height, padding)
    if count == 1:
        bar = bars[0]
        candle = CandleGeometry(
            x=dims.center_x,
            open_y=dims.center_y,
            high_y=dims.center_y,
            low_y=dims.center_y,
            close_y=dims.center_y,
            open=bar.open,
            high=bar.high,
            low=bar.low,
            close=bar.close,
            timestamp=_timestamp_at(timestamps, 0),
            index=0,
        )
        return ChartGeometry(
            kind="candlestick",
            padding=padding,
            plot_width=dims.plot_width,
            plot_height=dims.plot_height,
            price_min=bar.low_bound,
            price_max=bar.high_bound,
            price_range=max(bar.high - bar.low, 1.0),
            outer_width=width,
            outer_height=height,
            currency=currency,
            candles=(candle,),
            is_single_point=True,
        )

    bounds = ohlc_range(bars)
    sizing = candle_dimensions(count, dims.plot_width)

    def to_y(value: float) -> float:
        return padding + dims.plot_height - (value - bounds.min) / bounds.range * dims.plot_height

    candles = tuple(
        CandleGeometry(
            x=candle_x(index, count, padding, dims.plot_width, sizing),
            open_y=to_y(bar.open),
            high_y=to_y(bar.high),
            low_y=to_y(bar.low),
            close_y=to_y(bar.close),
            open=bar.open,
            high=bar.high,
            low=bar.low,
            close=bar.close,
            timestamp=_timestamp_at(timestamps, index),
            index=index,
        )
        for index, bar in enumerate(bars)
    )
    return ChartGeometry(
        kind="candlestick",
        padding=padding,
        plot_width=dims.plot_width,
        plot_height=dims.plot_height,
        price_min=bounds.min,
        price_max=bounds.max,
        price_range=bounds.range,
        outer_width=width,
        outer_height=height,
        currency=currency,
        candles=candles,
        candle_width=sizing.width,
    )
