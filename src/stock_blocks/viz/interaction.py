"""Pointer hit-testing and tooltip placement against chart geometry."""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from typing import Optional

from ..domain import OHLCBar
from .layout import ChartGeometry, PointGeometry

SNAP_TOLERANCE = 3.0
TOOLTIP_OFFSET = 15.0
VIEWPORT_MARGIN = 10.0
DEFAULT_TOOLTIP_SIZE = (80.0, 30.0)


@dataclass(frozen=True, slots=True)
class HoverValue:
    value: float
    timestamp: Optional[float]
    x: float
    y: Optional[float] = None
    bar: Optional[OHLCBar] = None
    index: Optional[int] = None


@dataclass(frozen=True, slots=True)
class TooltipPosition:
    left: float
    top: float


def in_plot(pointer_x: float, geometry: ChartGeometry) -> bool:
    return geometry.padding <= pointer_x <= geometry.right_bound


def y_for_price(price: float, geometry: ChartGeometry) -> float:
    return (
        geometry.padding
        + geometry.plot_height
        - (price - geometry.price_min) / geometry.price_range * geometry.plot_height
    )


def _from_point(point: PointGeometry) -> HoverValue:
    return HoverValue(point.price, point.timestamp, point.x, point.y, index=point.index)


def interpolate_line(pointer_x: float, geometry: ChartGeometry) -> Optional[HoverValue]:
    """Price under *pointer_x*, snapping to vertices within :data:`SNAP_TOLERANCE`."""
    points = geometry.points
    if not points or not in_plot(pointer_x, geometry):
        return None

    closest = min(points, key=lambda point: abs(point.x - pointer_x))
    if abs(closest.x - pointer_x) <= SNAP_TOLERANCE:
        return _from_point(closest)

    xs = [point.x for point in points]
    right = bisect.bisect_left(xs, pointer_x)
    if right <= 0 or right >= len(points):
        # Outside the drawn segments (single point or padding area); use the closest end.
        return _from_point(points[0] if right <= 0 else points[-1])

    left_point, right_point = points[right - 1], points[right]
    span = right_point.x - left_point.x
    if span == 0:
        return _from_point(left_point)

    ratio = (pointer_x - left_point.x) / span
    price = left_point.price + (right_point.price - left_point.price) * ratio
    timestamp = None
    if left_point.timestamp is not None and right_point.timestamp is not None:
        timestamp = left_point.timestamp + (right_point.timestamp - left_point.timestamp) * ratio
    return HoverValue(price, timestamp, pointer_x, y_for_price(price, geometry))


def nearest_candle(pointer_x: float, geometry: ChartGeometry) -> Optional[HoverValue]:
    candles = geometry.candles
    if not candles or not in_plot(pointer_x, geometry):
        return None

    closest = min(candles, key=lambda candle: abs(candle.x - pointer_x))
    return HoverValue(closest.close, closest.timestamp, closest.x, closest.close_y, closest.bar, closest.index)


def nearest_point(pointer_x: float, geometry: ChartGeometry) -> Optional[HoverValue]:
    points = geometry.points
    if not points or not in_plot(pointer_x, geometry):
        return None

    closest = min(points, key=lambda point: abs(point.x - pointer_x))
    return _from_point(closest)


def resolve_at_x(pointer_x: float, geometry: ChartGeometry) -> Optional[HoverValue]:
    if geometry.kind == "candlestick":
        return nearest_candle(pointer_x, geometry)
    if geometry.kind == "sparkline":
        return nearest_point(pointer_x, geometry)
    return interpolate_line(pointer_x, geometry)


def pointer_to_chart_x(client_x: float, rect_left: float, rect_width: float, view_width: float) -> float:
    """Map a client x coordinate into the chart's viewBox units."""
    offset = client_x - rect_left
    if rect_width <= 0:
        return offset
    return offset * (view_width / rect_width)


def place_tooltip(
    pointer_x: float,
    pointer_y: float,
    tooltip_size: tuple[float, float] = DEFAULT_TOOLTIP_SIZE,
    viewport_size: tuple[float, float] = (1024.0, 768.0),
) -> TooltipPosition:
    """Place a tooltip above-right of the pointer, flipping or clamping to stay visible."""
    width, height = tooltip_size
    viewport_width, viewport_height = viewport_size

    left = pointer_x + TOOLTIP_OFFSET
    top = pointer_y - height - TOOLTIP_OFFSET

    if left + width > viewport_width - VIEWPORT_MARGIN:
        left = pointer_x - width - TOOLTIP_OFFSET
    if top < VIEWPORT_MARGIN:
        top = pointer_y + TOOLTIP_OFFSET
    if top + height > viewport_height - VIEWPORT_MARGIN:
        top = viewport_height - height - VIEWPORT_MARGIN

    return TooltipPosition(left=max(0.0, left), top=max(0.0, top))
