"""Render datetimes with date()-style format characters.

Each format character maps to one field of the moment (``Y`` four-digit
year, ``m`` zero-padded month, ``H`` 24-hour hour and so on). Characters
without a meaning are copied through; a backslash copies the next character
literally. A format ending in a lone backslash cannot be rendered.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict

from ..core.time_utils import format_offset, timezone_name, to_unix_timestamp
from .arithmetic import days_in_month, is_leap_year

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


class FormatError(ValueError):
    """Raised internally when a format string cannot be rendered."""


def ordinal_suffix(day: int) -> str:
    if day in (11, 12, 13):
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def _offset_seconds(moment: datetime) -> int:
    offset = moment.utcoffset()
    return int(offset.total_seconds()) if offset is not None else 0


def _twelve_hour(moment: datetime) -> int:
    return moment.hour % 12 or 12


def _year(moment: datetime) -> str:
    return f"{moment.year:04d}"


def _swatch(moment: datetime) -> str:
    utc = moment.astimezone(timezone.utc)
    seconds = (utc.hour * 3600 + utc.minute * 60 + utc.second + 3600) % 86400
    return f"{int(seconds / 86.4):03d}"


def _dst(moment: datetime) -> str:
    dst = moment.dst()
    return "1" if dst is not None and dst != timedelta(0) else "0"


def _abbreviation(moment: datetime) -> str:
    name = moment.tzname()
    if not name or name[0] in "+-" or (name.startswith("UTC") and name != "UTC"):
        return format_offset(_offset_seconds(moment))
    return name


def _iso_offset_z(moment: datetime) -> str:
    seconds = _offset_seconds(moment)
    return "Z" if seconds == 0 else format_offset(seconds)


_Renderer = Callable[[datetime], str]

_RENDERERS: Dict[str, _Renderer] = {
    # day
    "d": lambda m: f"{m.day:02d}",
    "D": lambda m: DAY_NAMES[m.weekday()][:3],
    "j": lambda m: str(m.day),
    "l": lambda m: DAY_NAMES[m.weekday()],
    "N": lambda m: str(m.isoweekday()),
    "S": lambda m: ordinal_suffix(m.day),
    "w": lambda m: str(m.isoweekday() % 7),
    "z": lambda m: str(m.timetuple().tm_yday - 1),
    # week
    "W": lambda m: f"{m.isocalendar()[1]:02d}",
    # month
    "F": lambda m: MONTH_NAMES[m.month - 1],
    "m": lambda m: f"{m.month:02d}",
    "M": lambda m: MONTH_NAMES[m.month - 1][:3],
    "n": lambda m: str(m.month),
    "t": lambda m: str(days_in_month(m.year, m.month)),
    # year
    "L": lambda m: "1" if is_leap_year(m.year) else "0",
    "o": lambda m: str(m.isocalendar()[0]),
    "Y": _year,
    "y": lambda m: f"{m.year % 100:02d}",
    # time
    "a": lambda m: "am" if m.hour < 12 else "pm",
    "A": lambda m: "AM" if m.hour < 12 else "PM",
    "B": _swatch,
    "g": lambda m: str(_twelve_hour(m)),
    "G": lambda m: str(m.hour),
    "h": lambda m: f"{_twelve_hour(m):02d}",
    "H": lambda m: f"{m.hour:02d}",
    "i": lambda m: f"{m.minute:02d}",
    "s": lambda m: f"{m.second:02d}",
    "u": lambda m: f"{m.microsecond:06d}",
    "v": lambda m: f"{m.microsecond // 1000:03d}",
    # timezone
    "e": lambda m: timezone_name(m.tzinfo, m),
    "I": _dst,
    "O": lambda m: format_offset(_offset_seconds(m), colon=False),
    "P": lambda m: format_offset(_offset_seconds(m)),
    "p": _iso_offset_z,
    "T": _abbreviation,
    "Z": lambda m: str(_offset_seconds(m)),
    # full date/time
    "U": lambda m: str(to_unix_timestamp(m)),
}


def format_moment(moment: datetime, fmt: str) -> str:
    """Render ``moment``; raises :class:`FormatError` for a malformed ``fmt``."""

    out: list[str] = []
    index = 0
    while index < len(fmt):
        char = fmt[index]
        if char == "\\":
            if index + 1 == len(fmt):
                raise FormatError("Trailing escape character in format")
            out.append(fmt[index + 1])
            index += 2
            continue
        if char == "c":
            out.append(format_moment(moment, "Y-m-d\\TH:i:sP"))
        elif char == "r":
            out.append(format_moment(moment, "D, d M Y H:i:s O"))
        else:
            renderer = _RENDERERS.get(char)
            out.append(renderer(moment) if renderer else char)
        index += 1
    return "".join(out)
