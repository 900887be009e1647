"""Provider protocol for fetching raw chart data."""

from __future__ import annotations

from typing import Any, Protocol


class SeriesProvider(Protocol):
    """Abstraction for remote price sources."""

    def fetch_chart(self, symbol: str, start: int, end: int) -> dict[str, Any]:
        """Fetch the raw chart payload for *symbol* between two epoch-second bounds."""
        raise NotImplementedError
