"""Utility helpers."""

from .errors import (
    DataRetrievalError,
    FetchFailedError,
    InvalidResponseError,
    NoDataError,
    SeriesFetchError,
)
from .formatters import format_percentage, format_price, format_timestamp
from .logging import get_logger

__all__ = [
    "DataRetrievalError",
    "FetchFailedError",
    "InvalidResponseError",
    "NoDataError",
    "SeriesFetchError",
    "format_percentage",
    "format_price",
    "format_timestamp",
    "get_logger",
]
