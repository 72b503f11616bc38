"""Wall-clock arithmetic shared by expressions, intervals and setters.

Year and month shifts keep the day-of-month and let it overflow into the
following month (``2023-01-31 +1 month`` is ``2023-03-03``). Day and week
shifts move the wall clock. Sub-day shifts move elapsed time.
"""
from __future__ import annotations

import calendar
from datetime import datetime, timedelta, timezone


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def is_leap_year(year: int) -> bool:
    return calendar.isleap(year)


def shift_months(moment: datetime, months: int) -> datetime:
    """Move ``moment`` by whole months, overflowing the day if needed."""

    if not months:
        return moment
    year, month_index = divmod(moment.year * 12 + moment.month - 1 + months, 12)
    if not 1 <= year <= 9999:
        raise OverflowError("date value out of range")
    first = moment.replace(year=year, month=month_index + 1, day=1)
    return first + timedelta(days=moment.day - 1)


def shift_wall(moment: datetime, *, days: int = 0) -> datetime:
    """Move the local calendar date, keeping the wall-clock time."""

    if not days:
        return moment
    naive = moment.replace(tzinfo=None) + timedelta(days=days)
    return naive.replace(tzinfo=moment.tzinfo)


def shift_elapsed(moment: datetime, delta: timedelta) -> datetime:
    """Move by real elapsed time, re-localizing into the original zone."""

    if not delta:
        return moment
    tz = moment.tzinfo
    return (moment.astimezone(timezone.utc) + delta).astimezone(tz)


def apply_relative(
    moment: datetime,
    *,
    years: int = 0,
    months: int = 0,
    days: int = 0,
    hours: int = 0,
    minutes: int = 0,
    seconds: int = 0,
    microseconds: int = 0,
) -> datetime:
    """Apply a full relative offset in calendar-then-clock order.

    Raises ``OverflowError`` when the result falls outside the
    representable range.
    """

    moment = shift_months(moment, years * 12 + months)
    moment = shift_wall(moment, days=days)
    return shift_elapsed(
        moment,
        timedelta(hours=hours, minutes=minutes, seconds=seconds, microseconds=microseconds),
    )


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)
