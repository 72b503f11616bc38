"""Utilities for dealing with timezones and timestamps.

Timezones are plain ``tzinfo`` objects: ``ZoneInfo`` for identifiers from the
zone database and ``datetime.timezone`` for fixed offsets. The helpers below
are the single source of truth for resolving names, describing zones and
holding the process default timezone.
"""
from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .types import Timestamp, TimezoneLike

DEFAULT_TZ_NAME = "UTC"

_OFFSET_RE = re.compile(r"^(?:UTC|GMT)?([+-])(\d{1,2}):?(\d{2})?$", re.IGNORECASE)
_UTC_NAMES = frozenset({"utc", "z", "gmt", "zulu"})

_default_tz_name = DEFAULT_TZ_NAME


def set_default_timezone(tz_name: str) -> None:
    """Change the process default timezone; ``tz_name`` must resolve."""

    global _default_tz_name
    resolve_timezone(tz_name)
    _default_tz_name = tz_name


def get_default_timezone() -> tzinfo:
    """Return the tzinfo used when a caller does not pass a timezone."""

    return resolve_timezone(_default_tz_name)


def resolve_timezone(value: TimezoneLike | None) -> tzinfo:
    """Turn a name, offset string or tzinfo into a tzinfo.

    Raises ``ValueError`` for names the zone database does not know and
    ``TypeError`` for other objects.
    """

    if value is None:
        return get_default_timezone()
    if isinstance(value, tzinfo):
        return value
    if not isinstance(value, str):
        raise TypeError(f"Expected a timezone, got {type(value).__name__}")
    name = value.strip()
    if name.lower() in _UTC_NAMES:
        return timezone.utc
    match = _OFFSET_RE.match(name)
    if match:
        sign, hours, minutes = match.groups()
        delta = timedelta(hours=int(hours), minutes=int(minutes or 0))
        if not delta:
            return timezone.utc
        return timezone(-delta if sign == "-" else delta)
    if not name:
        raise ValueError("Empty timezone name")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, OSError) as exc:
        raise ValueError(f"Unknown timezone: {name}") from exc


def format_offset(seconds: int, *, colon: bool = True) -> str:
    """Render an offset in seconds as ``+HH:MM`` (or ``+HHMM``)."""

    sign = "-" if seconds < 0 else "+"
    hours, remainder = divmod(abs(seconds), 3600)
    minutes = remainder // 60
    separator = ":" if colon else ""
    return f"{sign}{hours:02d}{separator}{minutes:02d}"


def timezone_name(tz: tzinfo, moment: datetime | None = None) -> str:
    """Identifier for ``tz``: the zone key, ``UTC`` or a ``+HH:MM`` offset."""

    key = getattr(tz, "key", None)
    if key:
        return key
    if tz is timezone.utc:
        return "UTC"
    offset = tz.utcoffset(moment)
    if offset is None:
        return str(tz)
    return format_offset(int(offset.total_seconds()))


def now_in_timezone(tz: TimezoneLike | None = None) -> datetime:
    """Return the current datetime localized to the provided timezone."""

    return datetime.now(resolve_timezone(tz))


def to_unix_timestamp(dt: datetime) -> Timestamp:
    """Convert an aware datetime to whole UNIX seconds (floored)."""

    if dt.tzinfo is None:
        raise ValueError("Datetime must be timezone-aware before conversion")
    delta = dt - datetime(1970, 1, 1, tzinfo=timezone.utc)
    return Timestamp(delta.days * 86400 + delta.seconds)
