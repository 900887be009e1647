from __future__ import annotations

import random

import pytest

from stock_blocks.analytics.range_math import chart_dimensions, ohlc_range, price_range
from stock_blocks.domain import OHLCBar
from stock_blocks.viz.layout import (
    CANDLE_REGIMES,
    ChartGeometry,
    candle_dimensions,
    candle_x,
    layout_candles,
    layout_line,
    layout_sparkline,
)


def _random_prices(rng: random.Random, count: int) -> list[float]:
    price = rng.uniform(5, 500)
    prices = []
    for _ in range(count):
        price = max(0.01, price + rng.gauss(0, price * 0.02))
        prices.append(price)
    return prices


def test_price_range_floors_flat_series():
    assert price_range([]).range == 1.0
    assert price_range([5.0]).range == 1.0
    flat = price_range([3.0, 3.0, 3.0])
    assert (flat.min, flat.max, flat.range) == (3.0, 3.0, 1.0)
    spread = price_range([3.0, 7.0, 5.0])
    assert (spread.min, spread.max, spread.range) == (3.0, 7.0, 4.0)


def test_ohlc_range_spans_all_fields():
    bars = [OHLCBar(10, 12, 9, 11), OHLCBar(11, 15, 10.5, 14)]
    bounds = ohlc_range(bars)
    assert (bounds.min, bounds.max, bounds.range) == (9, 15, 6)


def test_chart_dimensions():
    dims = chart_dimensions(500, 300, 40)
    assert dims.plot_width == 420
    assert dims.plot_height == 220
    assert dims.right_bound == 460
    assert dims.bottom_bound == 260
    assert (dims.center_x, dims.center_y) == (250, 150)
    assert (dims.mid_x, dims.mid_y) == (250, 150)


@pytest.mark.parametrize("show_axes, padding", [(True, 40), (False, 10)])
def test_line_points_are_ordered_and_inside_plot(show_axes, padding):
    rng = random.Random(7)
    for _ in range(50):
        count = rng.randint(2, 300)
        prices = _random_prices(rng, count)
        geometry = layout_line(prices, list(range(count)), 500, 300, show_axes=show_axes)

        xs = [point.x for point in geometry.points]
        ys = [point.y for point in geometry.points]
        assert geometry.padding == padding
        assert xs == sorted(xs)
        assert xs[0] == pytest.approx(padding)
        assert xs[-1] == pytest.approx(padding + geometry.plot_width)
        assert min(ys) >= padding - 1e-9
        assert max(ys) <= padding + geometry.plot_height + 1e-9


def test_line_extremes_map_to_plot_edges():
    geometry = layout_line([10.0, 20.0, 15.0], [1, 2, 3], 200, 100)

    assert geometry.points[0].y == pytest.approx(10 + 80)
    assert geometry.points[1].y == pytest.approx(10)
    assert geometry.points[2].y == pytest.approx(50)
    assert geometry.points[1].x == pytest.approx(100)


def test_flat_line_sits_on_the_baseline():
    geometry = layout_line([5.0, 5.0, 5.0], [1, 2, 3], 200, 100)

    assert geometry.price_range == 1.0
    assert {point.y for point in geometry.points} == {90.0}


def test_empty_series_gives_empty_geometry():
    geometry = layout_line([], [], 200, 100)

    assert geometry.is_empty
    assert not geometry.is_single_point
    assert geometry.price_range != 0


def test_single_point_is_centered():
    geometry = layout_line([42.0], [1000], 200, 100, show_axes=True)

    assert geometry.is_single_point
    assert geometry.price_range > 0
    point = geometry.points[0]
    assert (point.x, point.y, point.price, point.timestamp) == (100, 50, 42.0, 1000)


def test_sparkline_fills_the_box():
    geometry = layout_sparkline([1.0, 3.0, 2.0], None, 120, 30)

    assert geometry.kind == "sparkline"
    assert geometry.padding == 0
    assert geometry.points[0].x == 0
    assert geometry.points[-1].x == 120
    assert geometry.points[1].y == 0
    assert geometry.points[0].y == 30
    assert geometry.points[0].timestamp is None


def test_candle_regime_table_is_ordered():
    limits = [regime.max_bars for regime in CANDLE_REGIMES]
    assert limits == sorted(limits)
    assert limits[-1] == float("inf")


@pytest.mark.parametrize("plot_width", [80.0, 220.0, 300.0, 420.0, 480.0, 900.0])
def test_candle_width_shrinks_and_bars_never_overlap(plot_width):
    previous = None
    counts = list(range(2, 301)) + list(range(301, 1501, 37))
    for count in counts:
        dims = candle_dimensions(count, plot_width)
        assert dims.width >= min(1.0, dims.spacing) - 1e-9
        assert dims.width <= dims.spacing + 1e-9
        if previous is not None:
            assert dims.width <= previous + 1e-9
        previous = dims.width

        xs = [candle_x(index, count, 40, plot_width, dims) for index in range(count)]
        gaps = [right - left for left, right in zip(xs, xs[1:])]
        assert min(gaps) >= dims.width - 1e-9


def test_narrow_plot_does_not_widen_at_regime_boundary():
    assert candle_dimensions(16, 80).width <= candle_dimensions(15, 80).width


def test_dense_bars_give_up_the_minimum_width_before_overlapping():
    dims = candle_dimensions(500, 420.0)
    xs = [candle_x(index, 500, 40, 420.0, dims) for index in range(500)]

    assert dims.width == pytest.approx(dims.spacing)
    assert xs[1] - xs[0] >= dims.width - 1e-9


def test_few_candles_are_centered():
    dims = candle_dimensions(3, 420)
    xs = [candle_x(index, 3, 40, 420, dims) for index in range(3)]

    assert dims.placement == "centered"
    assert (xs[0] + xs[-1]) / 2 == pytest.approx(40 + 210)


def test_candle_geometry_and_colors():
    bars = [OHLCBar(10, 12, 9, 11), OHLCBar(11, 11.5, 9.5, 10), OHLCBar(10, 10.5, 9.8, 10)]
    geometry = layout_candles(bars, [1, 2, 3], 500, 300, show_axes=True)

    assert geometry.kind == "candlestick"
    assert geometry.candle_width is not None
    up, down, doji = geometry.candles
    assert up.is_bullish
    assert not down.is_bullish
    assert doji.is_bullish
    assert doji.body_height == 1.0
    assert up.body_top == pytest.approx(min(up.open_y, up.close_y))
    assert up.high_y < up.low_y
    assert geometry.price_min == 9 and geometry.price_max == 12


def test_single_candle():
    geometry = layout_candles([OHLCBar(10, 10, 10, 10)], [5], 200, 100)

    assert geometry.is_single_point
    assert geometry.price_range == 1.0
    assert geometry.candles[0].x == 100


def test_geometry_json_round_trip():
    geometry = layout_candles([OHLCBar(10, 12, 9, 11), OHLCBar(11, 13, 10, 12)], [1, 2], 300, 200)

    assert ChartGeometry.from_json(geometry.to_json()) == geometry
