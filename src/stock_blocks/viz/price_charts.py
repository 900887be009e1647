"""Plotly figure builders for normalized series."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd
import plotly.graph_objects as go

from ..domain import NormalizedSeries
from .svg import BEARISH_COLOR, BULLISH_COLOR


def make_price_chart(series: Sequence[NormalizedSeries], title: str, show_markers: bool = False) -> go.Figure:
    """Build a multi-symbol line chart."""
    fig = go.Figure()

    if not series:
        fig.add_annotation(text="No data to display", showarrow=False, x=0.5, y=0.5, xref="paper", yref="paper")
        fig.update_layout(title=title, template="plotly_white")
        return fig

    mode = "lines+markers" if show_markers else "lines"

    for item in series:
        frame = item.to_frame()
        fig.add_trace(
            go.Scatter(
                x=frame.index,
                y=frame["price"],
                mode=mode,
                name=item.symbol,
                marker=dict(size=4) if show_markers else None,
            )
        )

    fig.update_layout(
        title=title,
        xaxis_title="Time",
        yaxis_title="Price",
        hovermode="x unified",
        template="plotly_white",
        legend_title="Ticker",
    )
    return fig


def make_candlestick_chart(series: NormalizedSeries, title: str) -> go.Figure:
    """Candlestick figure from the complete bars of *series*; falls back to a line."""
    candles = series.candles()
    if not candles:
        return make_price_chart([series], title)

    index = pd.to_datetime([stamp for stamp, _ in candles], unit="ms", utc=True)
    fig = go.Figure(
        go.Candlestick(
            x=index,
            open=[bar.open for _, bar in candles],
            high=[bar.high for _, bar in candles],
            low=[bar.low for _, bar in candles],
            close=[bar.close for _, bar in candles],
            name=series.symbol,
            increasing_line_color=BULLISH_COLOR,
            decreasing_line_color=BEARISH_COLOR,
        )
    )
    fig.update_layout(
        title=title,
        xaxis_title="Time",
        yaxis_title=f"Price ({series.currency})",
        xaxis_rangeslider_visible=False,
        template="plotly_white",
    )
    return fig
