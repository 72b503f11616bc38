"""Parse text against an explicit date()-style format.

The format characters mirror the rendering ones (``Y`` year, ``m`` month,
``H`` hour...). Fields the format does not mention are taken from the current
time, unless ``!`` or ``|`` appears in the format, in which case they are
taken from the Unix epoch. Once any clock field is parsed, the remaining
clock fields default to zero.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo

from ..core.time_utils import resolve_timezone
from .formatting import DAY_NAMES, MONTH_NAMES

_SEPARATORS = ";:/.,-()"
_TZ_NAME_RE = re.compile(r"[A-Za-z_]+(?:/[A-Za-z0-9_+\-]+)*")
_OFFSET_RE = re.compile(r"Z|[+-]\d{1,2}(?::?\d{2})?")
_TIMESTAMP_RE = re.compile(r"-?\d+")
_LETTERS_RE = re.compile(r"[A-Za-z]+")

_DAY_TOKENS = frozenset(name.lower() for name in DAY_NAMES) | frozenset(name[:3].lower() for name in DAY_NAMES)
_MONTH_TOKENS = {name.lower(): index for index, name in enumerate(MONTH_NAMES, start=1)}
_MONTH_TOKENS.update({name[:3].lower(): index for index, name in enumerate(MONTH_NAMES, start=1)})

_EPOCH = datetime(1970, 1, 1)


class FormatParseError(ValueError):
    """Raised when text does not satisfy the format."""

    def __init__(self, message: str, position: int) -> None:
        super().__init__(f"{message} at position {position}")
        self.message = message
        self.position = position


@dataclass(slots=True)
class _Fields:
    year: int | None = None
    month: int | None = None
    day: int | None = None
    hour: int | None = None
    minute: int | None = None
    second: int | None = None
    microsecond: int | None = None
    meridian: str | None = None
    timestamp: int | None = None
    tz: tzinfo | None = None

    def clock_parsed(self) -> bool:
        return any(value is not None for value in (self.hour, self.minute, self.second, self.microsecond))


class _FormatParser:
    def __init__(self, fmt: str, text: str) -> None:
        self.fmt = fmt
        self.text = text
        self.pos = 0
        self.fields = _Fields()
        self.epoch_defaults = False
        self.allow_trailing = False

    # Low-level readers -------------------------------------------------
    def _fail(self, message: str) -> FormatParseError:
        return FormatParseError(message, self.pos)

    def _digits(self, minimum: int, maximum: int, message: str) -> int:
        end = self.pos
        while end < len(self.text) and end - self.pos < maximum and self.text[end].isdigit():
            end += 1
        if end - self.pos < minimum:
            raise self._fail(message)
        value = int(self.text[self.pos:end])
        self.pos = end
        return value

    def _regex(self, pattern: re.Pattern[str], message: str) -> str:
        match = pattern.match(self.text, self.pos)
        if match is None:
            raise self._fail(message)
        self.pos = match.end()
        return match.group(0)

    def _literal(self, char: str, message: str) -> None:
        if self.text[self.pos:self.pos + 1] != char:
            raise self._fail(message)
        self.pos += 1

    # Driver --------------------------------------------------------------
    def run(self) -> _Fields:
        index = 0
        while index < len(self.fmt):
            char = self.fmt[index]
            if char == "\\":
                index += 1
                if index == len(self.fmt):
                    raise self._fail("The escaped character could not be found")
                self._literal(self.fmt[index], "The escaped character could not be found")
            elif char in "!|+* ":
                self._control(char)
            else:
                if self.pos >= len(self.text):
                    raise self._fail("Not enough data available to satisfy format")
                self._field(char)
            index += 1
        if self.pos < len(self.text) and not self.allow_trailing:
            raise self._fail("Trailing data")
        return self.fields

    def _control(self, char: str) -> None:
        if char == "!":
            self.fields = _Fields()
            self.epoch_defaults = True
        elif char == "|":
            self.epoch_defaults = True
        elif char == "+":
            self.allow_trailing = True
        elif char == "*":
            while self.pos < len(self.text) and not (
                self.text[self.pos] in _SEPARATORS or self.text[self.pos].isspace() or self.text[self.pos].isdigit()
            ):
                self.pos += 1
        else:
            while self.pos < len(self.text) and self.text[self.pos].isspace():
                self.pos += 1

    def _field(self, char: str) -> None:
        f = self.fields
        if char in "dj":
            f.day = self._digits(1, 2, "A two digit day could not be found")
        elif char in "Dl":
            if self._regex(_LETTERS_RE, "A textual day could not be found").lower() not in _DAY_TOKENS:
                raise self._fail("A textual day could not be found")
        elif char == "S":
            if self.text[self.pos:self.pos + 2].lower() not in ("st", "nd", "rd", "th"):
                raise self._fail("Unexpected data found.")
            self.pos += 2
        elif char == "z":
            if f.year is None:
                raise self._fail("A 'day of year' can only come after a year has been found")
            day_of_year = self._digits(1, 3, "A three digit day-of-year could not be found")
            try:
                resolved = date(f.year, 1, 1) + timedelta(days=day_of_year)
            except OverflowError:
                raise self._fail("The parsed date was invalid") from None
            if resolved.year != f.year:
                raise self._fail("The parsed date was invalid")
            f.month, f.day = resolved.month, resolved.day
        elif char in "FM":
            token = self._regex(_LETTERS_RE, "A textual month could not be found").lower()
            if token not in _MONTH_TOKENS:
                raise self._fail("A textual month could not be found")
            f.month = _MONTH_TOKENS[token]
        elif char in "mn":
            f.month = self._digits(1, 2, "A two digit month could not be found")
        elif char == "Y":
            f.year = self._digits(1, 4, "A four digit year could not be found")
        elif char == "y":
            short = self._digits(2, 2, "A two digit year could not be found")
            f.year = short + (1900 if short >= 70 else 2000)
        elif char in "aA":
            if f.hour is None:
                raise self._fail("Meridian can only come after an hour has been found")
            token = self.text[self.pos:self.pos + 2].lower()
            if token not in ("am", "pm"):
                raise self._fail("A meridian could not be found")
            f.meridian = token
            self.pos += 2
        elif char in "ghGH":
            f.hour = self._digits(1, 2, "A two digit hour could not be found")
        elif char == "i":
            f.minute = self._digits(2, 2, "A two digit minute could not be found")
        elif char == "s":
            f.second = self._digits(2, 2, "A two digit second could not be found")
        elif char == "v":
            f.microsecond = self._digits(3, 3, "A three digit millisecond could not be found") * 1000
        elif char == "u":
            start = self.pos
            value = self._digits(1, 6, "A six digit microsecond could not be found")
            f.microsecond = value * 10 ** (6 - (self.pos - start))
        elif char in "eT":
            offset = _OFFSET_RE.match(self.text, self.pos)
            f.tz = self._timezone(_OFFSET_RE if offset else _TZ_NAME_RE)
        elif char in "OP":
            f.tz = self._timezone(_OFFSET_RE)
        elif char == "U":
            f.timestamp = int(self._regex(_TIMESTAMP_RE, "A unix timestamp could not be found"))
        elif char == "#":
            if self.text[self.pos] not in _SEPARATORS:
                raise self._fail("The separation symbol ([;:/.,-]) could not be found")
            self.pos += 1
        elif char == "?":
            self.pos += 1
        elif char in _SEPARATORS:
            self._literal(char, "The separation symbol could not be found")
        else:
            self._literal(char, "The format separator does not match")

    def _timezone(self, pattern: re.Pattern[str]) -> tzinfo:
        start = self.pos
        token = self._regex(pattern, "The timezone could not be found in the database")
        try:
            return resolve_timezone(token)
        except (TypeError, ValueError):
            self.pos = start
            raise self._fail("The timezone could not be found in the database") from None


def _resolve(parsed: _Fields, epoch_defaults: bool, tz: tzinfo, now: datetime, end: int) -> datetime:
    target_tz = parsed.tz or tz
    if parsed.timestamp is not None:
        try:
            base = datetime.fromtimestamp(parsed.timestamp, timezone.utc)
            if parsed.tz is not None:
                base = base.astimezone(parsed.tz)
        except (OverflowError, OSError, ValueError):
            raise FormatParseError("The parsed date was invalid", end) from None
        if parsed.tz is None:
            target_tz = timezone.utc
        base = base.replace(tzinfo=None)
    elif epoch_defaults:
        base = _EPOCH
    else:
        base = now.astimezone(target_tz).replace(tzinfo=None)
        if parsed.clock_parsed():
            base = base.replace(hour=0, minute=0, second=0, microsecond=0)

    components = {
        name: getattr(base, name) if getattr(parsed, name) is None else getattr(parsed, name)
        for name in ("year", "month", "day", "hour", "minute", "second", "microsecond")
    }
    if parsed.meridian is not None:
        if not 1 <= components["hour"] <= 12:
            raise FormatParseError("The parsed time was invalid", end)
        components["hour"] = components["hour"] % 12 + (12 if parsed.meridian == "pm" else 0)
    try:
        date(components["year"], components["month"], components["day"])
    except ValueError:
        raise FormatParseError("The parsed date was invalid", end) from None
    try:
        naive = datetime(**components)
    except ValueError:
        raise FormatParseError("The parsed time was invalid", end) from None
    return naive.replace(tzinfo=target_tz)


def parse_with_format(fmt: str, text: str, tz: tzinfo, now: datetime) -> datetime:
    """Parse ``text`` according to ``fmt``.

    ``tz`` is used unless the text carries its own zone; ``now`` supplies
    the fields the format leaves out. Raises :class:`FormatParseError`.
    """

    parser = _FormatParser(fmt, text)
    parsed = parser.run()
    return _resolve(parsed, parser.epoch_defaults, tz, now, parser.pos)
