"""Custom exceptions."""

from __future__ import annotations


class DataRetrievalError(Exception):
    """Raised when a provider fails to return usable data."""


class InvalidResponseError(DataRetrievalError):
    """Provider payload does not have the expected chart shape."""


class NoDataError(DataRetrievalError):
    """Symbol resolved but no usable observations came back."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"No valid price data found for {symbol}")
        self.symbol = symbol


class FetchFailedError(DataRetrievalError):
    """Transport-level failure while talking to the provider."""


class SeriesFetchError(DataRetrievalError):
    """The single failure surfaced to callers of the series cache."""

    def __init__(self, symbol: str, cause: BaseException) -> None:
        reason = str(cause) or type(cause).__name__
        super().__init__(f"Failed to fetch {symbol}: {reason}")
        self.symbol = symbol
        self.cause = cause
