"""Evaluate free-form time expressions against a base moment.

An expression mixes relative parts (``+1 month``, ``3 days ago``, ``next
friday``, ``first day of next month``, ``tomorrow``) with an optional
absolute part (``2024-01-01 10:00``, ``@1700000000``, a zone identifier).
Relative parts are extracted first; whatever remains is handed to
``dateutil`` as the absolute date. A bare date means midnight.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Callable, List, Tuple

from dateutil import parser as dateutil_parser
from dateutil import tz as dateutil_tz

from ..core.time_utils import resolve_timezone
from .arithmetic import apply_relative, days_in_month, shift_wall, start_of_day


class ExpressionError(ValueError):
    """Raised when an expression cannot be evaluated."""


_UNIT_ALIASES = {
    "usec": "microseconds",
    "usecs": "microseconds",
    "microsecond": "microseconds",
    "microseconds": "microseconds",
    "msec": "milliseconds",
    "msecs": "milliseconds",
    "millisecond": "milliseconds",
    "milliseconds": "milliseconds",
    "sec": "seconds",
    "secs": "seconds",
    "second": "seconds",
    "seconds": "seconds",
    "min": "minutes",
    "mins": "minutes",
    "minute": "minutes",
    "minutes": "minutes",
    "hour": "hours",
    "hours": "hours",
    "day": "days",
    "days": "days",
    "week": "weeks",
    "weeks": "weeks",
    "fortnight": "fortnights",
    "fortnights": "fortnights",
    "month": "months",
    "months": "months",
    "year": "years",
    "years": "years",
}
_UNIT_PATTERN = "|".join(sorted(_UNIT_ALIASES, key=len, reverse=True))

_WEEKDAYS = {
    "monday": 0,
    "mon": 0,
    "tuesday": 1,
    "tue": 1,
    "wednesday": 2,
    "wed": 2,
    "thursday": 3,
    "thu": 3,
    "friday": 4,
    "fri": 4,
    "saturday": 5,
    "sat": 5,
    "sunday": 6,
    "sun": 6,
}
_WEEKDAY_PATTERN = "|".join(sorted(_WEEKDAYS, key=len, reverse=True))

_TIMESTAMP_RE = re.compile(r"^\s*@(-?\d+(?:\.\d+)?)")
_DAY_OF_RE = re.compile(r"\b(first|last)\s+day\s+of\b", re.IGNORECASE)
_NUMBER_UNIT_RE = re.compile(
    rf"(?<![\w:./+-])([+-]?\d+)\s*({_UNIT_PATTERN})\b(\s+ago\b)?",
    re.IGNORECASE,
)
_TEXT_UNIT_RE = re.compile(rf"\b(next|last|previous|this)\s+({_UNIT_PATTERN})\b", re.IGNORECASE)
_WEEKDAY_RE = re.compile(rf"\b(?:(next|last|previous|this)\s+)?({_WEEKDAY_PATTERN})\b", re.IGNORECASE)
_KEYWORD_RE = re.compile(r"\b(now|today|midnight|noon|tomorrow|yesterday)\b", re.IGNORECASE)
_ZONE_RE = re.compile(r"\b[A-Z][A-Za-z_]+(?:/[A-Za-z0-9_+\-]+)+")

_TEXT_UNIT_STEPS = {"next": 1, "last": -1, "previous": -1, "this": 0}


@dataclass(slots=True)
class _Relative:
    years: int = 0
    months: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    microseconds: int = 0
    keywords: List[str] = field(default_factory=list)
    weekdays: List[Tuple[str, int]] = field(default_factory=list)
    day_of: str | None = None

    def add(self, unit: str, amount: int) -> None:
        if unit == "weeks":
            self.days += 7 * amount
        elif unit == "fortnights":
            self.days += 14 * amount
        elif unit == "milliseconds":
            self.microseconds += 1000 * amount
        else:
            setattr(self, unit, getattr(self, unit) + amount)


def _extract(pattern: re.Pattern[str], text: str, handler: Callable[[re.Match[str]], None]) -> str:
    def _replace(match: re.Match[str]) -> str:
        handler(match)
        return " "

    return pattern.sub(_replace, text)


def _convert_parsed_tz(parsed: datetime) -> tzinfo | None:
    if parsed.tzinfo is None:
        return None
    if isinstance(parsed.tzinfo, dateutil_tz.tzutc):
        return timezone.utc
    offset = parsed.utcoffset()
    if offset is None:
        return None
    return timezone(offset) if offset else timezone.utc


def _move_to_weekday(moment: datetime, modifier: str, weekday: int) -> datetime:
    current = moment.weekday()
    if modifier == "next":
        days = (weekday - current - 1) % 7 + 1
    elif modifier in ("last", "previous"):
        days = -((current - weekday - 1) % 7 + 1)
    else:
        days = (weekday - current) % 7
    return start_of_day(shift_wall(moment, days=days))


def _apply_keyword(moment: datetime, keyword: str) -> datetime:
    if keyword in ("today", "midnight"):
        return start_of_day(moment)
    if keyword == "noon":
        return moment.replace(hour=12, minute=0, second=0, microsecond=0)
    if keyword == "tomorrow":
        return start_of_day(shift_wall(moment, days=1))
    if keyword == "yesterday":
        return start_of_day(shift_wall(moment, days=-1))
    return moment


def evaluate(expression: str, base: datetime) -> datetime:
    """Evaluate ``expression`` relative to the aware datetime ``base``.

    Raises :class:`ExpressionError` when the expression is not understood or
    the result cannot be represented.
    """

    if not isinstance(expression, str):
        raise ExpressionError(f"Expected a time string, got {type(expression).__name__}")
    relative = _Relative()
    text = expression

    timestamp_match = _TIMESTAMP_RE.match(text)
    if timestamp_match:
        text = text[timestamp_match.end():]

    zones: List[str] = []

    def _on_day_of(match: re.Match[str]) -> None:
        relative.day_of = match.group(1).lower()

    def _on_number_unit(match: re.Match[str]) -> None:
        amount = int(match.group(1))
        relative.add(_UNIT_ALIASES[match.group(2).lower()], -amount if match.group(3) else amount)

    def _on_text_unit(match: re.Match[str]) -> None:
        relative.add(_UNIT_ALIASES[match.group(2).lower()], _TEXT_UNIT_STEPS[match.group(1).lower()])

    def _on_weekday(match: re.Match[str]) -> None:
        relative.weekdays.append(((match.group(1) or "this").lower(), _WEEKDAYS[match.group(2).lower()]))

    def _on_keyword(match: re.Match[str]) -> None:
        relative.keywords.append(match.group(1).lower())

    text = _extract(_ZONE_RE, text, lambda match: zones.append(match.group(0)))
    text = _extract(_DAY_OF_RE, text, _on_day_of)
    text = _extract(_NUMBER_UNIT_RE, text, _on_number_unit)
    text = _extract(_TEXT_UNIT_RE, text, _on_text_unit)
    text = _extract(_WEEKDAY_RE, text, _on_weekday)
    text = _extract(_KEYWORD_RE, text, _on_keyword)
    residue = text.strip(" \t,")

    moment = base
    if zones:
        try:
            moment = moment.astimezone(resolve_timezone(zones[-1]))
        except ValueError:
            raise ExpressionError(
                f"Failed to parse time string ({expression}): the timezone could not be found in the database"
            ) from None
    if timestamp_match:
        try:
            moment = datetime.fromtimestamp(float(timestamp_match.group(1)), timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise ExpressionError(f"Failed to parse time string ({expression}): timestamp out of range") from None
    if residue:
        default = start_of_day(moment).replace(tzinfo=None)
        try:
            parsed = dateutil_parser.parse(residue, default=default)
        except (ValueError, OverflowError) as exc:
            raise ExpressionError(f"Failed to parse time string ({expression}): {exc}") from None
        parsed_tz = _convert_parsed_tz(parsed)
        moment = parsed.replace(tzinfo=parsed_tz or moment.tzinfo)

    try:
        for keyword in relative.keywords:
            moment = _apply_keyword(moment, keyword)
        if relative.day_of is not None:
            moment = moment.replace(day=1)
        moment = apply_relative(
            moment,
            years=relative.years,
            months=relative.months,
            days=relative.days,
            hours=relative.hours,
            minutes=relative.minutes,
            seconds=relative.seconds,
            microseconds=relative.microseconds,
        )
        for modifier, weekday in relative.weekdays:
            moment = _move_to_weekday(moment, modifier, weekday)
        if relative.day_of == "last":
            moment = moment.replace(day=days_in_month(moment.year, moment.month))
    except (OverflowError, ValueError):
        raise ExpressionError(f"Failed to evaluate time string ({expression}): date out of range") from None
    return moment


__all__ = ["ExpressionError", "evaluate"]
