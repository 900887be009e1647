"""SVG markup for laid-out charts.

Every interactive chart carries a ``data-chart-id`` and the serialized geometry
in ``data-chart-data`` so a host can hit-test pointer events without redoing
the layout.
"""

from __future__ import annotations

import html
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from ..domain import NormalizedSeries, OHLCBar
from ..utils import format_price, format_timestamp
from .layout import ChartGeometry, layout_candles, layout_line, layout_sparkline

BULLISH_COLOR = "#10b981"
BEARISH_COLOR = "#ef4444"
NEUTRAL_COLOR = "#3b82f6"
LABEL_COLOR = "#6b7280"
GRID_COLOR = "#e5e7eb"
TEXT_COLOR = "#374151"


@dataclass(frozen=True, slots=True)
class RenderedChart:
    svg: str
    chart_id: str
    geometry: ChartGeometry


def new_chart_id(prefix: str = "chart") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def _num(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _open_svg(geometry: ChartGeometry, chart_id: str, css_class: str) -> str:
    width = _num(geometry.outer_width)
    height = _num(geometry.outer_height)
    data = html.escape(geometry.to_json(), quote=True)
    return (
        f'<svg width="{width}" height="{height}" viewBox="0 0 {width} {height}" '
        f'class="{css_class}" data-chart-id="{chart_id}" data-chart-data="{data}">'
    )


def _timestamps_of(geometry: ChartGeometry) -> list[float]:
    items = geometry.points or geometry.candles
    return [item.timestamp for item in items if item.timestamp is not None]


def _axes(geometry: ChartGeometry) -> str:
    """Min/mid/max price labels, first/middle/last date labels and grid lines."""
    pad = geometry.padding
    right = pad + geometry.plot_width
    bottom = pad + geometry.plot_height
    mid_y = pad + geometry.plot_height / 2
    mid_x = pad + geometry.plot_width / 2
    height = geometry.outer_height
    mid_price = (geometry.price_min + geometry.price_max) / 2
    currency = geometry.currency

    parts = [
        f'<text x="5" y="{_num(pad + 5)}" font-size="10" fill="{LABEL_COLOR}" text-anchor="start">'
        f"{html.escape(format_price(geometry.price_max, currency))}</text>",
        f'<text x="5" y="{_num(mid_y + 3)}" font-size="10" fill="{LABEL_COLOR}" text-anchor="start">'
        f"{html.escape(format_price(mid_price, currency))}</text>",
        f'<text x="5" y="{_num(bottom)}" font-size="10" fill="{LABEL_COLOR}" text-anchor="start">'
        f"{html.escape(format_price(geometry.price_min, currency))}</text>",
    ]

    stamps = _timestamps_of(geometry)
    if stamps:
        labels = (
            (pad, "start", stamps[0]),
            (mid_x, "middle", stamps[len(stamps) // 2]),
            (right, "end", stamps[-1]),
        )
        for x, anchor, stamp in labels:
            parts.append(
                f'<text x="{_num(x)}" y="{_num(height - 5)}" font-size="10" fill="{LABEL_COLOR}" '
                f'text-anchor="{anchor}">{format_timestamp(stamp)}</text>'
            )

    for y in (pad, mid_y, bottom):
        parts.append(
            f'<line x1="{_num(pad)}" y1="{_num(y)}" x2="{_num(right)}" y2="{_num(y)}" '
            f'stroke="{GRID_COLOR}" stroke-width="0.5"/>'
        )
    return "".join(parts)


def _hover_elements(geometry: ChartGeometry, dot_color: str) -> str:
    top = _num(geometry.padding)
    bottom = _num(geometry.padding + geometry.plot_height)
    return (
        f'<line x1="0" y1="{top}" x2="0" y2="{bottom}" stroke="#666" stroke-width="1" '
        f'stroke-dasharray="2,2" class="hover-line" style="opacity: 0" />'
        f'<circle r="4" fill="{dot_color}" stroke="white" stroke-width="2" class="hover-dot" style="opacity: 0" />'
        f'<rect x="{_num(geometry.padding)}" y="{top}" width="{_num(geometry.plot_width)}" '
        f'height="{_num(geometry.plot_height)}" fill="transparent" class="chart-overlay" style="cursor: crosshair" />'
    )


def _single_marker(geometry: ChartGeometry, chart_id: str, css_class: str, shape: str, price: float) -> str:
    cx = _num(geometry.outer_width / 2)
    cy = geometry.outer_height / 2
    return (
        _open_svg(geometry, chart_id, css_class)
        + shape
        + f'<text x="{cx}" y="{_num(cy - 15)}" text-anchor="middle" font-size="12" fill="{TEXT_COLOR}">'
        f"{html.escape(format_price(price, geometry.currency))}</text>"
        f'<text x="{cx}" y="{_num(cy + 25)}" text-anchor="middle" font-size="10" fill="{LABEL_COLOR}">'
        "Single trading day</text>"
        f'<rect x="0" y="0" width="{_num(geometry.outer_width)}" height="{_num(geometry.outer_height)}" '
        'fill="transparent" class="chart-overlay" style="cursor: crosshair" />'
        "</svg>"
    )


def render_line_chart(
    prices: Sequence[float],
    timestamps: Sequence[float],
    width: float,
    height: float,
    show_axes: bool = False,
    currency: str = "USD",
) -> RenderedChart:
    geometry = layout_line(prices, timestamps, width, height, show_axes, currency)
    chart_id = new_chart_id("chart")
    css_class = "stock-chart interactive-chart"

    if geometry.is_empty:
        return RenderedChart(_open_svg(geometry, chart_id, css_class) + "</svg>", chart_id, geometry)

    if geometry.is_single_point:
        point = geometry.points[0]
        dot = (
            f'<circle cx="{_num(point.x)}" cy="{_num(point.y)}" r="5" fill="{NEUTRAL_COLOR}" '
            'stroke="white" stroke-width="2" />'
        )
        return RenderedChart(_single_marker(geometry, chart_id, css_class, dot, point.price), chart_id, geometry)

    first, last = geometry.points[0], geometry.points[-1]
    color = BULLISH_COLOR if last.price >= first.price else BEARISH_COLOR
    path = " ".join(
        f"{'M' if point.index == 0 else 'L'} {_num(point.x)} {_num(point.y)}" for point in geometry.points
    )
    bottom = _num(geometry.padding + geometry.plot_height)
    area = f"{path} L {_num(geometry.right_bound)} {bottom} L {_num(geometry.padding)} {bottom} Z"

    svg = (
        _open_svg(geometry, chart_id, css_class)
        + f'<defs><linearGradient id="gradient-{chart_id}" x1="0%" y1="0%" x2="0%" y2="100%">'
        f'<stop offset="0%" style="stop-color:{color};stop-opacity:0.3" />'
        f'<stop offset="100%" style="stop-color:{color};stop-opacity:0.05" />'
        "</linearGradient></defs>"
        + (_axes(geometry) if show_axes else "")
        + f'<path d="{area}" fill="url(#gradient-{chart_id})" />'
        f'<path d="{path}" fill="none" stroke="{color}" stroke-width="2" class="chart-line" />'
        + _hover_elements(geometry, color)
        + "</svg>"
    )
    return RenderedChart(svg, chart_id, geometry)


def render_candlestick_chart(
    bars: Sequence[OHLCBar],
    timestamps: Sequence[float],
    width: float,
    height: float,
    show_axes: bool = False,
    currency: str = "USD",
) -> RenderedChart:
    geometry = layout_candles(bars, timestamps, width, height, show_axes, currency)
    chart_id = new_chart_id("candles")
    css_class = "stock-chart interactive-chart candlestick-chart"

    if geometry.is_empty:
        return RenderedChart(_open_svg(geometry, chart_id, css_class) + "</svg>", chart_id, geometry)

    if geometry.is_single_point:
        candle = geometry.candles[0]
        color = BULLISH_COLOR if candle.is_bullish else BEARISH_COLOR
        square = (
            f'<rect x="{_num(candle.x - 5)}" y="{_num(candle.close_y - 5)}" width="10" height="10" '
            f'fill="{color}" stroke="white" stroke-width="1" />'
        )
        return RenderedChart(_single_marker(geometry, chart_id, css_class, square, candle.close), chart_id, geometry)

    width_px = geometry.candle_width or 1.0
    bodies = []
    for candle in geometry.candles:
        color = BULLISH_COLOR if candle.is_bullish else BEARISH_COLOR
        bodies.append(
            f'<line x1="{_num(candle.x)}" y1="{_num(candle.high_y)}" x2="{_num(candle.x)}" '
            f'y2="{_num(candle.low_y)}" stroke="{color}" stroke-width="1" class="candle-wick" />'
            f'<rect x="{_num(candle.x - width_px / 2)}" y="{_num(candle.body_top)}" width="{_num(width_px)}" '
            f'height="{_num(candle.body_height)}" fill="{color}" stroke="{color}" stroke-width="1" '
            f'class="candle-body" data-candle-index="{candle.index}" />'
        )

    svg = (
        _open_svg(geometry, chart_id, css_class)
        + (_axes(geometry) if show_axes else "")
        + "".join(bodies)
        + _hover_elements(geometry, "#666")
        + "</svg>"
    )
    return RenderedChart(svg, chart_id, geometry)


def render_sparkline(
    prices: Sequence[float],
    timestamps: Optional[Sequence[float]],
    width: float,
    height: float,
    color: str = NEUTRAL_COLOR,
    currency: str = "USD",
) -> RenderedChart:
    geometry = layout_sparkline(prices, timestamps, width, height, currency)
    chart_id = new_chart_id("sparkline")
    css_class = "stock-sparkline interactive-sparkline"
    overlay = (
        f'<rect x="0" y="0" width="{_num(width)}" height="{_num(height)}" fill="transparent" '
        'class="sparkline-overlay" style="cursor: crosshair" />'
    )

    if geometry.is_empty:
        return RenderedChart(_open_svg(geometry, chart_id, css_class) + "</svg>", chart_id, geometry)

    if geometry.is_single_point:
        point = geometry.points[0]
        svg = (
            _open_svg(geometry, chart_id, css_class)
            + f'<circle cx="{_num(point.x)}" cy="{_num(point.y)}" r="3" fill="{color}" stroke="white" stroke-width="1" />'
            f'<text x="{_num(point.x)}" y="{_num(point.y - 10)}" text-anchor="middle" font-size="10" '
            f'fill="{LABEL_COLOR}">Single day</text>'
            + overlay
            + "</svg>"
        )
        return RenderedChart(svg, chart_id, geometry)

    polyline = " ".join(f"{_num(point.x)},{_num(point.y)}" for point in geometry.points)
    svg = (
        _open_svg(geometry, chart_id, css_class)
        + f'<polyline fill="none" stroke="{color}" stroke-width="1.5" points="{polyline}" class="sparkline-line" />'
        f'<circle r="3" fill="{color}" stroke="white" stroke-width="1" class="hover-dot" style="opacity: 0" />'
        + overlay
        + "</svg>"
    )
    return RenderedChart(svg, chart_id, geometry)


def render_series(
    series: NormalizedSeries,
    width: float,
    height: float,
    show_axes: bool = True,
    use_candles: bool = False,
) -> RenderedChart:
    """Render a series as candles when bars are available, otherwise as a line."""
    candles = series.candles() if use_candles else []
    if candles:
        stamps = [stamp for stamp, _ in candles]
        bars = [bar for _, bar in candles]
        return render_candlestick_chart(bars, stamps, width, height, show_axes, series.currency)
    return render_line_chart(series.prices, series.timestamps, width, height, show_axes, series.currency)
