"""Trading-day calendar and date windows for chart range queries."""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from functools import lru_cache
from typing import Optional

from pandas.tseries.holiday import (
    AbstractHolidayCalendar,
    Holiday,
    USLaborDay,
    USMemorialDay,
    USThanksgivingDay,
)

from ..domain import DateWindow

ONE_DAY = timedelta(days=1)


class MarketHolidayCalendar(AbstractHolidayCalendar):
    """Approximate US exchange holidays.

    Fixed-date holidays are taken on the calendar date itself; no weekend
    observance shifting is applied.
    """

    rules = [
        Holiday("New Year's Day", month=1, day=1),
        USMemorialDay,
        Holiday("Independence Day", month=7, day=4),
        USLaborDay,
        USThanksgivingDay,
        Holiday("Christmas Day", month=12, day=25),
    ]


@lru_cache(maxsize=64)
def _holidays_for_year(year: int) -> frozenset[date]:
    stamps = MarketHolidayCalendar().holidays(start=f"{year}-01-01", end=f"{year}-12-31")
    return frozenset(stamp.date() for stamp in stamps)


def _as_date(day: date | datetime) -> date:
    return day.date() if isinstance(day, datetime) else day


def is_weekend(day: date | datetime) -> bool:
    return day.weekday() >= 5


def is_market_holiday(day: date | datetime) -> bool:
    day = _as_date(day)
    return day in _holidays_for_year(day.year)


def is_trading_day(day: date | datetime) -> bool:
    return not is_weekend(day) and not is_market_holiday(day)


def most_recent_trading_day(start: datetime) -> datetime:
    """Walk back from *start* until a trading day is reached, keeping the time of day."""
    current = start
    while not is_trading_day(current):
        current -= ONE_DAY
    return current


def calendar_buffer_days(requested_days: int) -> int:
    if requested_days <= 3:
        return math.ceil(requested_days * 1.5)
    return math.ceil(requested_days * 0.3)


def _epoch(moment: datetime) -> int:
    return math.floor(moment.timestamp())


def resolve_window(requested_days: int, business_days: bool = True, now: Optional[datetime] = None) -> DateWindow:
    """Compute the range query window for *requested_days* ending at *now*.

    In calendar mode the window is padded so short requests still cover enough
    sessions. In business-day mode the window ends on the most recent trading
    day and reaches back over *requested_days* trading days; a one-day request
    always spans two sessions so a line can be drawn.
    """
    end = now if now is not None else datetime.now()

    if not business_days:
        buffer = calendar_buffer_days(requested_days)
        start = end - timedelta(days=requested_days + buffer)
        return DateWindow(start=_epoch(start), end=_epoch(end), covered_days=requested_days + buffer)

    end_trading_day = most_recent_trading_day(end)
    start = end_trading_day

    if requested_days == 1:
        start -= ONE_DAY
        while not is_trading_day(start):
            start -= ONE_DAY
        return DateWindow(start=_epoch(start), end=_epoch(end_trading_day), covered_days=2)

    found = 0
    walked = 0
    while found < requested_days:
        start -= ONE_DAY
        walked += 1
        if is_trading_day(start):
            found += 1
        if walked > requested_days * 4:
            break

    return DateWindow(start=_epoch(start), end=_epoch(end_trading_day), covered_days=walked)


def describe_window(requested_days: int, business_days: bool, window: DateWindow) -> str:
    start_label = _short_label(window.start)
    end_label = _short_label(window.end)

    if requested_days == 1:
        prefix = "Last business day" if business_days else "Last day"
        return f"{prefix} ({end_label})"

    unit = "business days" if business_days else "days"
    return f"Last {requested_days} {unit} ({start_label} - {end_label})"


def _short_label(epoch_seconds: int) -> str:
    moment = datetime.fromtimestamp(epoch_seconds)
    return f"{moment:%b} {moment.day}"
