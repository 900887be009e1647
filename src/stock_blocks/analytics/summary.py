"""Summary table helpers for stock list blocks."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

import pandas as pd

from ..domain import NormalizedSeries, SortKey, SortOrder

SUMMARY_COLUMNS = ["symbol", "price", "change", "change_pct", "interval_change_pct", "currency"]

_SORT_COLUMNS = {
    "symbol": "symbol",
    "price": "price",
    "changePercent": "change_pct",
    "todayChangePercent": "interval_change_pct",
}


def build_summary_table(
    series: Sequence[NormalizedSeries],
    sort_by: Optional[SortKey] = None,
    sort_order: Optional[SortOrder] = "asc",
) -> pd.DataFrame:
    """Compute latest price and period change per symbol, optionally sorted."""
    if not series:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    summary = pd.DataFrame(
        {
            "symbol": [item.symbol for item in series],
            "price": [round(item.latest_price, 2) for item in series],
            "change": [round(item.period_change, 2) for item in series],
            "change_pct": [round(item.period_change_percent, 2) for item in series],
            "interval_change_pct": [item.last_interval_change_percent for item in series],
            "currency": [item.currency for item in series],
        }
    )

    column = _SORT_COLUMNS.get(sort_by) if sort_by else None
    if column is not None:
        # Stable sort keeps the requested ticker order among ties.
        summary = summary.sort_values(
            column,
            ascending=(sort_order or "asc") == "asc",
            kind="mergesort",
            na_position="last",
        )

    return summary[SUMMARY_COLUMNS].reset_index(drop=True)
