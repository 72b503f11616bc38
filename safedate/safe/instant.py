"""Immutable date/time value with a single failure channel.

``NativeDateTime`` reports some failures by raising and others by returning
``False``. ``SafeInstant`` holds one ``NativeDateTime`` and forwards every
operation to it. A ``False`` result is turned into :class:`DateTimeError`
right away. Native exceptions pass through unchanged. Producing operations
wrap the new native value in a new ``SafeInstant``; the receiver never
changes.
"""
from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Any, Dict, Literal, TypeVar

from ..core.errors import DateTimeError
from ..core.types import DateTimeLike, OffsetSeconds, StateMapping, Timestamp, TimezoneLike
from ..native import Interval, NativeDateTime, NativeMutableDateTime
from ..native.values import coerce_utc

_LOGGER = logging.getLogger(__name__)

_R = TypeVar("_R")


def _checked(result: _R | Literal[False], operation: str) -> _R:
    """Return ``result`` unless it is the ``False`` sentinel.

    Only ``False`` itself counts: ``0`` and ``""`` are valid results.
    """

    if result is False:
        error = DateTimeError.from_last_error()
        _LOGGER.debug(
            "Native operation reported failure",
            extra={"operation": operation, "diagnostic": error.message},
        )
        raise error
    return result  # type: ignore[return-value]


class SafeInstant:
    """A point in time with calendar, clock and timezone.

    Accepts the same arguments as :class:`NativeDateTime` and returns either
    a correctly typed result or raises :class:`DateTimeError`. Compares and
    hashes by the UTC instant it represents, so it can be mixed with
    native values and aware ``datetime`` objects.
    """

    __slots__ = ("_inner",)

    _inner: NativeDateTime

    def __init__(self, time: str = "now", timezone: TimezoneLike | None = None) -> None:
        object.__setattr__(self, "_inner", NativeDateTime(time, timezone))

    @classmethod
    def _wrap(cls, inner: NativeDateTime) -> "SafeInstant":
        instant = cls.__new__(cls)
        object.__setattr__(instant, "_inner", inner)
        return instant

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    # Factories -----------------------------------------------------------
    @classmethod
    def create_from_format(cls, fmt: str, text: str, timezone: TimezoneLike | None = None) -> "SafeInstant":
        """Parse ``text`` with an explicit format such as ``Y-m-d H:i:s``."""

        inner = _checked(NativeDateTime.create_from_format(fmt, text, timezone), "create_from_format")
        return cls._wrap(inner)

    @classmethod
    def from_mutable(cls, mutable: NativeMutableDateTime) -> "SafeInstant":
        return cls._wrap(NativeDateTime.from_mutable(mutable))

    @classmethod
    def from_interface(cls, value: DateTimeLike | datetime) -> "SafeInstant":
        """Build from any aware ``datetime`` or object exposing ``to_datetime()``."""

        if isinstance(value, SafeInstant):
            return cls._wrap(value._inner)
        return cls._wrap(NativeDateTime.from_interface(value))

    @classmethod
    def from_state(cls, state: StateMapping) -> "SafeInstant":
        return cls._wrap(NativeDateTime.from_state(state))

    def to_state(self) -> Dict[str, Any]:
        return self._inner.to_state()

    # Value-producing operations -----------------------------------------
    def modify(self, modifier: str) -> "SafeInstant":
        """Shift by a relative expression such as ``+1 month`` or ``next friday``."""

        return self._wrap(_checked(self._inner.modify(modifier), "modify"))

    def set_date(self, year: int, month: int, day: int) -> "SafeInstant":
        return self._wrap(_checked(self._inner.set_date(year, month, day), "set_date"))

    def set_isodate(self, year: int, week: int, day: int = 1) -> "SafeInstant":
        return self._wrap(_checked(self._inner.set_isodate(year, week, day), "set_isodate"))

    def set_time(self, hour: int, minute: int, second: int = 0, microsecond: int = 0) -> "SafeInstant":
        return self._wrap(_checked(self._inner.set_time(hour, minute, second, microsecond), "set_time"))

    def set_timestamp(self, timestamp: int) -> "SafeInstant":
        return self._wrap(_checked(self._inner.set_timestamp(timestamp), "set_timestamp"))

    def set_timezone(self, timezone: TimezoneLike) -> "SafeInstant":
        return self._wrap(_checked(self._inner.set_timezone(timezone), "set_timezone"))

    def add(self, interval: Interval) -> "SafeInstant":
        return self._wrap(self._inner.add(interval))

    def sub(self, interval: Interval) -> "SafeInstant":
        return self._wrap(_checked(self._inner.sub(interval), "sub"))

    # Scalar results ------------------------------------------------------
    def format(self, fmt: str) -> str:
        return _checked(self._inner.format(fmt), "format")

    def diff(self, other: DateTimeLike | datetime, absolute: bool = False) -> Interval:
        return _checked(self._inner.diff(other, absolute), "diff")

    def get_offset(self) -> OffsetSeconds:
        return _checked(self._inner.get_offset(), "get_offset")

    def get_timezone(self) -> tzinfo:
        return self._inner.get_timezone()

    def get_timestamp(self) -> Timestamp:
        return self._inner.get_timestamp()

    def to_datetime(self) -> datetime:
        return self._inner.to_datetime()

    def to_native(self) -> NativeDateTime:
        return self._inner

    # Comparison ----------------------------------------------------------
    def before(self, other: DateTimeLike | datetime) -> bool:
        return self < other

    def after(self, other: DateTimeLike | datetime) -> bool:
        return self > other

    def equals(self, other: DateTimeLike | datetime) -> bool:
        return self == other

    def __eq__(self, other: object) -> bool:
        target = coerce_utc(other)
        if target is None:
            return NotImplemented
        return coerce_utc(self._inner) == target

    def __lt__(self, other: object) -> bool:
        target = coerce_utc(other)
        if target is None:
            return NotImplemented
        return coerce_utc(self._inner) < target

    def __le__(self, other: object) -> bool:
        target = coerce_utc(other)
        if target is None:
            return NotImplemented
        return coerce_utc(self._inner) <= target

    def __gt__(self, other: object) -> bool:
        target = coerce_utc(other)
        if target is None:
            return NotImplemented
        return coerce_utc(self._inner) > target

    def __ge__(self, other: object) -> bool:
        target = coerce_utc(other)
        if target is None:
            return NotImplemented
        return coerce_utc(self._inner) >= target

    def __hash__(self) -> int:
        return hash(self._inner)

    def __reduce__(self):
        return (type(self).from_state, (self.to_state(),))

    def __repr__(self) -> str:
        return f"SafeInstant({self._inner.format('Y-m-d H:i:s.u')!r}, {self._inner.format('e')!r})"

    def __str__(self) -> str:
        return _checked(self._inner.format("c"), "format")
