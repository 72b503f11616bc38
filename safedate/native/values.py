"""Native date/time values.

``NativeDateTime`` is immutable: every producing operation returns a new
object. ``NativeMutableDateTime`` changes itself and returns itself. Both
report some failures by raising and others by recording a diagnostic and
returning ``False``:

* raising: the constructor (bad expression), ``from_state`` (bad state) and
  ``add`` (``OverflowError``);
* ``False``: ``create_from_format``, ``format``, ``diff``, ``modify``, the
  setters, ``sub`` and ``get_offset``.

Callers that cannot afford to check for ``False`` should use
:class:`safedate.safe.SafeInstant` instead.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, Literal, TypeVar

from dateutil.relativedelta import relativedelta

from ..core.diagnostics import record_error
from ..core.time_utils import (
    now_in_timezone,
    resolve_timezone,
    timezone_name,
    to_unix_timestamp,
)
from ..core.types import DateTimeLike, OffsetSeconds, StateMapping, Timestamp, TimezoneLike
from .errors import NativeDateTimeError
from .expressions import ExpressionError, evaluate
from .formatting import FormatError, format_moment
from .interval import Interval
from .parsing import FormatParseError, parse_with_format

_T = TypeVar("_T", bound="_NativeBase")
_STATE_DATE_FORMAT = "Y-m-d H:i:s.u"

TIMEZONE_TYPE_OFFSET = 1
TIMEZONE_TYPE_ABBREVIATION = 2
TIMEZONE_TYPE_ID = 3


def _fail(operation: str, message: str) -> Literal[False]:
    record_error(f"{operation}(): {message}", operation)
    return False


def coerce_datetime(value: Any) -> datetime | None:
    """Return the aware datetime behind ``value`` or ``None``."""

    if isinstance(value, datetime):
        return value if value.tzinfo is not None else None
    if isinstance(value, DateTimeLike):
        return value.to_datetime()
    return None


def coerce_utc(value: Any) -> datetime | None:
    """The instant behind ``value`` in UTC, or ``None`` for non date/time values.

    Aware datetimes sharing a tzinfo compare by wall clock and ignore
    ``fold``; UTC values never do.
    """

    moment = coerce_datetime(value)
    return moment.astimezone(timezone.utc) if moment is not None else None


def is_unambiguous(moment: datetime) -> bool:
    """False inside a repeated or skipped local hour."""

    return moment.replace(fold=1 - moment.fold).utcoffset() == moment.utcoffset()


class _NativeBase:
    """Shared behaviour; subclasses decide how a new moment is adopted."""

    __slots__ = ("_moment",)

    _moment: datetime

    def __init__(self, time: str = "now", timezone: TimezoneLike | None = None) -> None:
        try:
            tz = resolve_timezone(timezone)
        except (TypeError, ValueError) as exc:
            raise NativeDateTimeError(f"Unknown or bad timezone ({timezone})") from exc
        try:
            moment = evaluate(time, now_in_timezone(tz))
        except ExpressionError as exc:
            raise NativeDateTimeError(str(exc)) from exc
        object.__setattr__(self, "_moment", moment)

    @classmethod
    def _from_moment(cls: type[_T], moment: datetime) -> _T:
        instance = cls.__new__(cls)
        object.__setattr__(instance, "_moment", moment)
        return instance

    def _adopt(self: _T, moment: datetime) -> _T:
        raise NotImplementedError

    # Factories -----------------------------------------------------------
    @classmethod
    def create_from_format(
        cls: type[_T],
        fmt: str,
        text: str,
        timezone: TimezoneLike | None = None,
    ) -> _T | Literal[False]:
        """Parse ``text`` with an explicit format; ``False`` if it does not match."""

        try:
            tz = resolve_timezone(timezone)
        except (TypeError, ValueError):
            return _fail("create_from_format", f"Unknown or bad timezone ({timezone})")
        try:
            moment = parse_with_format(fmt, text, tz, now_in_timezone(tz))
        except FormatParseError as exc:
            return _fail("create_from_format", str(exc))
        return cls._from_moment(moment)

    @classmethod
    def from_interface(cls: type[_T], value: DateTimeLike | datetime) -> _T:
        moment = coerce_datetime(value)
        if moment is None:
            raise TypeError("Expected an aware datetime or a date/time value")
        return cls._from_moment(moment)

    @classmethod
    def from_state(cls: type[_T], state: StateMapping) -> _T:
        """Rebuild a value from the mapping produced by :meth:`to_state`.

        An optional ``fold`` of 1 selects the second occurrence of a repeated
        local time.
        """

        try:
            raw_date = state["date"]
            tz_type = int(state["timezone_type"])
            tz = resolve_timezone(state["timezone"])
            if tz_type not in (TIMEZONE_TYPE_OFFSET, TIMEZONE_TYPE_ABBREVIATION, TIMEZONE_TYPE_ID):
                raise ValueError(tz_type)
            fold = int(state.get("fold", 0))
            if fold not in (0, 1):
                raise ValueError(fold)
            naive = datetime.strptime(raw_date, "%Y-%m-%d %H:%M:%S.%f")
        except (KeyError, TypeError, ValueError) as exc:
            raise NativeDateTimeError(f"Invalid serialization data for {cls.__name__} object") from exc
        return cls._from_moment(naive.replace(tzinfo=tz, fold=fold))

    def to_state(self) -> Dict[str, Any]:
        moment = self._moment
        tz = moment.tzinfo
        tz_type = TIMEZONE_TYPE_ID if getattr(tz, "key", None) or tz is timezone.utc else TIMEZONE_TYPE_OFFSET
        state: Dict[str, Any] = {
            "date": format_moment(moment, _STATE_DATE_FORMAT),
            "timezone_type": tz_type,
            "timezone": timezone_name(tz, moment),
        }
        if moment.fold and not is_unambiguous(moment):
            state["fold"] = 1
        return state

    # Rendering and comparison -------------------------------------------
    def format(self, fmt: str) -> str | Literal[False]:
        try:
            return format_moment(self._moment, fmt)
        except FormatError as exc:
            return _fail("format", str(exc))

    def diff(self, other: DateTimeLike | datetime, absolute: bool = False) -> Interval | Literal[False]:
        """Interval from this value to ``other``.

        Values in the same zone are compared on the wall clock, others in UTC.
        A value inside a repeated or skipped hour forces the UTC path.
        """

        target = coerce_datetime(other)
        if target is None:
            return _fail("diff", "Argument must be an aware date/time value")
        start, end = self._moment, target
        if start.tzinfo is end.tzinfo and is_unambiguous(start) and is_unambiguous(end):
            start, end = start.replace(tzinfo=None), end.replace(tzinfo=None)
        else:
            start, end = start.astimezone(timezone.utc), end.astimezone(timezone.utc)
        invert = end < start
        earlier, later = (end, start) if invert else (start, end)
        delta = relativedelta(later, earlier)
        return Interval(
            years=delta.years,
            months=delta.months,
            days=delta.days,
            hours=delta.hours,
            minutes=delta.minutes,
            seconds=delta.seconds,
            microseconds=delta.microseconds,
            invert=invert and not absolute,
            total_days=(later - earlier).days,
        )

    def to_datetime(self) -> datetime:
        return self._moment

    def _utc(self) -> datetime:
        return self._moment.astimezone(timezone.utc)

    def __eq__(self, other: object) -> bool:
        target = coerce_utc(other)
        if target is None:
            return NotImplemented
        return self._utc() == target

    def __lt__(self, other: object) -> bool:
        target = coerce_utc(other)
        if target is None:
            return NotImplemented
        return self._utc() < target

    def __le__(self, other: object) -> bool:
        target = coerce_utc(other)
        if target is None:
            return NotImplemented
        return self._utc() <= target

    def __gt__(self, other: object) -> bool:
        target = coerce_utc(other)
        if target is None:
            return NotImplemented
        return self._utc() > target

    def __ge__(self, other: object) -> bool:
        target = coerce_utc(other)
        if target is None:
            return NotImplemented
        return self._utc() >= target

    def __repr__(self) -> str:
        return f"{type(self).__name__}({format_moment(self._moment, 'Y-m-d H:i:s.u')!r}, {timezone_name(self._moment.tzinfo, self._moment)!r})"

    # Producing operations -------------------------------------------------
    def modify(self: _T, modifier: str) -> _T | Literal[False]:
        try:
            moment = evaluate(modifier, self._moment)
        except ExpressionError as exc:
            return _fail("modify", str(exc))
        return self._adopt(moment)

    def set_date(self: _T, year: int, month: int, day: int) -> _T | Literal[False]:
        try:
            date(year, month, day)
        except (TypeError, ValueError):
            return _fail("set_date", f"The date {year}-{month}-{day} is not valid")
        return self._adopt(self._moment.replace(year=year, month=month, day=day))

    def set_isodate(self: _T, year: int, week: int, day: int = 1) -> _T | Literal[False]:
        try:
            target = date.fromisocalendar(year, week, day)
        except (TypeError, ValueError):
            return _fail("set_isodate", f"The ISO date {year}-W{week}-{day} is not valid")
        return self._adopt(self._moment.replace(year=target.year, month=target.month, day=target.day))

    def set_time(self: _T, hour: int, minute: int, second: int = 0, microsecond: int = 0) -> _T | Literal[False]:
        try:
            moment = self._moment.replace(hour=hour, minute=minute, second=second, microsecond=microsecond)
        except (TypeError, ValueError):
            return _fail("set_time", f"The time {hour}:{minute}:{second}.{microsecond} is not valid")
        return self._adopt(moment)

    def set_timestamp(self: _T, timestamp: int) -> _T | Literal[False]:
        try:
            moment = datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=timestamp)
            moment = moment.astimezone(self._moment.tzinfo)
        except (OverflowError, TypeError, ValueError):
            return _fail("set_timestamp", f"Timestamp {timestamp} is out of range")
        return self._adopt(moment)

    def set_timezone(self: _T, timezone: TimezoneLike) -> _T | Literal[False]:
        try:
            tz = resolve_timezone(timezone)
            moment = self._moment.astimezone(tz)
        except (OverflowError, TypeError, ValueError):
            return _fail("set_timezone", f"Unknown or bad timezone ({timezone})")
        return self._adopt(moment)

    def add(self: _T, interval: Interval) -> _T:
        return self._adopt(interval.apply_to(self._moment))

    def sub(self: _T, interval: Interval) -> _T | Literal[False]:
        try:
            moment = interval.apply_to(self._moment, direction=-1)
        except (OverflowError, ValueError):
            return _fail("sub", "The resulting date is out of range")
        return self._adopt(moment)

    # Scalar queries ----------------------------------------------------------
    def get_offset(self) -> OffsetSeconds | Literal[False]:
        offset = self._moment.utcoffset()
        if offset is None:
            return _fail("get_offset", "The timezone did not provide an offset")
        return OffsetSeconds(int(offset.total_seconds()))

    def get_timezone(self) -> tzinfo:
        return self._moment.tzinfo

    def get_timestamp(self) -> Timestamp:
        return to_unix_timestamp(self._moment)


class NativeDateTime(_NativeBase):
    """Immutable date/time value."""

    __slots__ = ()

    def _adopt(self, moment: datetime) -> "NativeDateTime":
        return type(self)._from_moment(moment)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __hash__(self) -> int:
        return hash(self._utc())

    def __reduce__(self):
        return (type(self).from_state, (self.to_state(),))

    @classmethod
    def from_mutable(cls, mutable: "NativeMutableDateTime") -> "NativeDateTime":
        return cls._from_moment(mutable.to_datetime())


class NativeMutableDateTime(_NativeBase):
    """Mutable counterpart: producing operations update and return ``self``."""

    __slots__ = ()

    __hash__ = None  # type: ignore[assignment]

    def _adopt(self, moment: datetime) -> "NativeMutableDateTime":
        self._moment = moment
        return self

    @classmethod
    def from_immutable(cls, immutable: NativeDateTime) -> "NativeMutableDateTime":
        return cls._from_moment(immutable.to_datetime())


__all__ = [
    "NativeDateTime",
    "NativeMutableDateTime",
    "coerce_datetime",
    "coerce_utc",
    "is_unambiguous",
]
