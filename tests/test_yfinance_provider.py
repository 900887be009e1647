from __future__ import annotations

import pytest

from stock_blocks.data.yfinance_provider import CHART_URL, YahooChartProvider
from stock_blocks.utils import FetchFailedError, InvalidResponseError

from .helpers import chart_payload


class DummyResponse:
    def __init__(self, payload=None, status_code=200, error=None):
        self.payload = payload
        self.status_code = status_code
        self.error = error

    def json(self):
        if self.error is not None:
            raise self.error
        return self.payload


class DummyData:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params, timeout))
        return self.response


def test_fetch_chart_requests_daily_range():
    payload = chart_payload([1.0, 2.0])
    data = DummyData(DummyResponse(payload))
    provider = YahooChartProvider(data=data)

    result = provider.fetch_chart(" aapl ", 100, 200)

    assert result == payload
    url, params, timeout = data.requests[0]
    assert url == CHART_URL.format(symbol="AAPL")
    assert params == {"period1": 100, "period2": 200, "interval": "1d"}
    assert timeout == 30


@pytest.mark.parametrize(
    "response",
    [
        DummyResponse({}, status_code=503),
        DummyResponse(error=ValueError("Too Many Requests"), status_code=429),
        DummyResponse({"chart": {"result": None}}, status_code=404),
    ],
)
def test_http_errors_are_fetch_failures(response):
    provider = YahooChartProvider(data=DummyData(response))

    with pytest.raises(FetchFailedError) as excinfo:
        provider.fetch_chart("AAPL", 100, 200)

    assert str(response.status_code) in str(excinfo.value)


@pytest.mark.parametrize("response", [DummyResponse(error=ValueError("bad json")), DummyResponse(["not", "a", "dict"])])
def test_unusable_bodies_are_invalid_responses(response):
    provider = YahooChartProvider(data=DummyData(response))

    with pytest.raises(InvalidResponseError):
        provider.fetch_chart("AAPL", 100, 200)
