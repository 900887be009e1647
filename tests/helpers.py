from __future__ import annotations

from typing import Any, Optional, Sequence

BASE_TS = 1709562600  # 2024-03-04 14:30 UTC
DAY = 86400


def chart_payload(
    closes: Sequence[Optional[float]],
    timestamps: Optional[Sequence[int]] = None,
    opens: Optional[Sequence[Optional[float]]] = None,
    highs: Optional[Sequence[Optional[float]]] = None,
    lows: Optional[Sequence[Optional[float]]] = None,
    currency: Optional[str] = "USD",
) -> dict[str, Any]:
    if timestamps is None:
        timestamps = [BASE_TS + index * DAY for index in range(len(closes))]
    quote: dict[str, Any] = {"close": list(closes)}
    if opens is not None:
        quote["open"] = list(opens)
    if highs is not None:
        quote["high"] = list(highs)
    if lows is not None:
        quote["low"] = list(lows)
    meta = {"currency": currency} if currency else {}
    return {
        "chart": {
            "result": [{"timestamp": list(timestamps), "indicators": {"quote": [quote]}, "meta": meta}],
            "error": None,
        }
    }


def ohlc_payload(bars: Sequence[tuple[float, float, float, float]], currency: str = "USD") -> dict[str, Any]:
    return chart_payload(
        closes=[bar[3] for bar in bars],
        opens=[bar[0] for bar in bars],
        highs=[bar[1] for bar in bars],
        lows=[bar[2] for bar in bars],
        currency=currency,
    )


class DummyProvider:
    def __init__(self, responses: dict[str, Any], error: Optional[Exception] = None) -> None:
        self._responses = responses
        self.error = error
        self.calls: list[tuple[str, int, int]] = []

    def fetch_chart(self, symbol: str, start: int, end: int) -> dict[str, Any]:
        self.calls.append((symbol, start, end))
        if self.error is not None:
            raise self.error
        return self._responses[symbol]


class FakeClock:
    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
