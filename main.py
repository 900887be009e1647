"""Streamlit host page for stock chart and stock list blocks."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass, replace
from pathlib import Path

# --- Ensure src is on path for local imports ---
ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.append(str(SRC))

import streamlit as st

from stock_blocks import ChartBlockConfig, ListBlockConfig, Settings  # noqa: E402
from stock_blocks.services import (  # noqa: E402
    StockBlocksContext,
    parse_chart_config,
    parse_list_config,
    refresh_chart_data,
    refresh_due,
    refresh_list_data,
    refresh_seconds,
    render_chart_block,
    render_list_block,
    validate_chart_config,
    validate_list_config,
)
from stock_blocks.utils import DataRetrievalError, format_percentage, format_price, format_timestamp, get_logger  # noqa: E402
from stock_blocks.viz import make_candlestick_chart, make_price_chart, place_tooltip, resolve_at_x  # noqa: E402

logger = get_logger(__name__)

DEFAULT_CHART_SOURCE = """symbol: AAPL
days: 30
showAxes: true
useCandles: false
"""

DEFAULT_LIST_SOURCE = """tickers: AAPL, MSFT, NVDA, SHOP.TO
days: 30
sortBy: changePercent
sortOrder: desc
"""


@dataclass
class UiInputs:
    settings: Settings
    chart_source: str
    list_source: str


@st.cache_resource(show_spinner=False)
def get_context() -> StockBlocksContext:
    return StockBlocksContext.create(Settings.from_env())


def render_sidebar(context: StockBlocksContext) -> UiInputs:
    st.sidebar.header("Stock Blocks")

    with st.sidebar.expander("⚙️ Settings", expanded=True):
        current = context.settings
        cache_minutes = st.number_input("Cache duration (minutes)", min_value=1, value=current.cache_minutes)
        use_business_days = st.checkbox(
            "Use business days",
            value=current.use_business_days,
            help="Interpret 'days' as trading days, skipping weekends and market holidays",
        )
        show_sparklines = st.checkbox("Show sparklines in lists", value=current.default_show_sparklines)
        st.caption(f"Cached series: {context.cache.size()}")
        if st.button("🗑️ Clear cache"):
            context.cache.clear()
            st.rerun()

    settings = replace(
        context.settings,
        cache_minutes=int(cache_minutes),
        use_business_days=use_business_days,
        default_show_sparklines=show_sparklines,
    )

    with st.sidebar.expander("📂 Blocks", expanded=True):
        chart_source = st.text_area("stock-block", value=DEFAULT_CHART_SOURCE, height=160)
        list_source = st.text_area("stock-block-list", value=DEFAULT_LIST_SOURCE, height=160)

    return UiInputs(settings=settings, chart_source=chart_source, list_source=list_source)


def _refresh_requested(state_key: str, refresh_interval: int | None, clicked: bool) -> bool:
    """True when the button was clicked or the block's refreshInterval has elapsed."""
    now = time.time()
    last = st.session_state.get(state_key)
    due = clicked or refresh_due(refresh_interval, last, now)
    if due or last is None:
        st.session_state[state_key] = now
    return due


def render_chart_section(context: StockBlocksContext, source: str) -> None:
    config = parse_chart_config(source, context.settings)
    problem = validate_chart_config(config)
    if problem:
        st.info(problem)
        return

    st.fragment(run_every=refresh_seconds(config.refresh_interval))(_chart_block)(context, config)


def _chart_block(context: StockBlocksContext, config: ChartBlockConfig) -> None:
    header = st.columns([4, 1])
    clicked = header[1].button("↻ Refresh", key="refresh_chart")

    try:
        if _refresh_requested("chart_refreshed_at", config.refresh_interval, clicked):
            logger.info("Refreshing chart data for %s", config.symbol)
            refresh_chart_data(context, config)
        block = render_chart_block(context, config)
    except DataRetrievalError as err:
        logger.error("Chart block failed: %s", err)
        st.error(str(err))
        return

    series = block.series
    header[0].markdown(f"### {config.title or block.link}")
    metrics = st.columns(3)
    metrics[0].metric("Price", format_price(series.latest_price, series.currency))
    metrics[1].metric("Period change", format_percentage(series.period_change_percent))
    if config.show_today_change and series.last_interval_change_percent is not None:
        metrics[2].metric("Last session", format_percentage(series.last_interval_change_percent))
    if config.description:
        st.caption(config.description)

    tab_svg, tab_plotly = st.tabs(["SVG", "Plotly"])
    with tab_svg:
        st.markdown(block.chart.svg, unsafe_allow_html=True)
        geometry = block.chart.geometry
        if not geometry.is_empty and geometry.plot_width > 0:
            # Slider stands in for the pointer.
            pointer_x = st.slider(
                "Hover position",
                min_value=float(geometry.padding),
                max_value=float(geometry.right_bound),
                value=float(geometry.right_bound),
            )
            hovered = resolve_at_x(pointer_x, geometry)
            if hovered is not None:
                label = format_price(hovered.value, geometry.currency)
                if hovered.timestamp is not None:
                    label += f" · {format_timestamp(hovered.timestamp, '%b %d, %Y')}"
                position = place_tooltip(pointer_x, hovered.y or 0.0, viewport_size=(geometry.outer_width, geometry.outer_height))
                st.caption(f"{label} (tooltip at {position.left:.0f}, {position.top:.0f})")
    with tab_plotly:
        title = f"{series.symbol} ({block.period_label})"
        figure = make_candlestick_chart(series, title) if config.use_candles else make_price_chart([series], title)
        st.plotly_chart(figure, use_container_width=True)

    if config.show_last_update is not False:
        st.caption(block.period_label)


def render_list_section(context: StockBlocksContext, source: str) -> None:
    config = parse_list_config(source, context.settings)
    problem = validate_list_config(config)
    if problem:
        st.info(problem)
        return

    st.fragment(run_every=refresh_seconds(config.refresh_interval))(_list_block)(context, config)


def _list_block(context: StockBlocksContext, config: ListBlockConfig) -> None:
    header = st.columns([4, 1])
    clicked = header[1].button("↻ Refresh", key="refresh_list")
    if _refresh_requested("list_refreshed_at", config.refresh_interval, clicked):
        logger.info("Refreshing list data for %s", ", ".join(config.tickers))
        refresh_list_data(context, config)

    block = render_list_block(context, config)
    if config.title:
        header[0].subheader(config.title)
    if block.errors:
        st.warning("No data returned for: " + ", ".join(sorted(block.errors)))
    if block.table.empty:
        st.info("No stock data available")
        return

    for row in block.table.itertuples(index=False):
        cells = st.columns([1, 1, 1, 2])
        cells[0].markdown(f"**{block.links.get(row.symbol, row.symbol)}**")
        cells[1].write(format_price(row.price, row.currency))
        cells[2].write(format_percentage(row.change_pct))
        sparkline = block.sparklines.get(row.symbol)
        if sparkline is not None:
            cells[3].markdown(sparkline.svg, unsafe_allow_html=True)

    if config.show_last_update is not False:
        st.caption(f"Data period: {block.period_label}")


def main() -> None:
    st.set_page_config(page_title="Stock Blocks", layout="wide")
    st.title("Stock Blocks")
    st.caption("Streamlit + yfinance + SVG/Plotly")

    context = get_context()
    inputs = render_sidebar(context)
    context.apply_settings(inputs.settings)

    st.divider()
    render_chart_section(context, inputs.chart_source)
    st.divider()
    render_list_section(context, inputs.list_source)


if __name__ == "__main__":
    main()
