"""Chart layout, markup and interaction."""

from .interaction import HoverValue, TooltipPosition, place_tooltip, resolve_at_x
from .layout import ChartGeometry, layout_candles, layout_line, layout_sparkline
from .price_charts import make_candlestick_chart, make_price_chart
from .svg import RenderedChart, render_candlestick_chart, render_line_chart, render_series, render_sparkline

__all__ = [
    "ChartGeometry",
    "HoverValue",
    "RenderedChart",
    "TooltipPosition",
    "layout_candles",
    "layout_line",
    "layout_sparkline",
    "make_candlestick_chart",
    "make_price_chart",
    "place_tooltip",
    "render_candlestick_chart",
    "render_line_chart",
    "render_series",
    "render_sparkline",
    "resolve_at_x",
]
