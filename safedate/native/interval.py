"""Calendar intervals (years/months/days plus clock components)."""
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime

from .arithmetic import apply_relative
from .errors import NativeDateTimeError

_SPEC_RE = re.compile(
    r"^P(?!$)"
    r"(?:(?P<years>\d+)Y)?"
    r"(?:(?P<months>\d+)M)?"
    r"(?:(?P<weeks>\d+)W)?"
    r"(?:(?P<days>\d+)D)?"
    r"(?:T(?=\d)"
    r"(?:(?P<hours>\d+)H)?"
    r"(?:(?P<minutes>\d+)M)?"
    r"(?:(?P<seconds>\d+)S)?"
    r")?$"
)


@dataclass(frozen=True, slots=True)
class Interval:
    """A signed calendar duration.

    Components are non-negative; ``invert`` flips the direction. ``total_days``
    is only known for intervals produced by ``diff`` and stays ``None`` for
    intervals built from a spec.
    """

    years: int = 0
    months: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    microseconds: int = 0
    invert: bool = False
    total_days: int | None = None

    @classmethod
    def from_spec(cls, spec: str) -> "Interval":
        """Parse an ISO 8601 duration such as ``P1Y2M3DT4H5M6S`` or ``P2W``."""

        match = _SPEC_RE.match(spec) if isinstance(spec, str) else None
        if match is None:
            raise NativeDateTimeError(f"Unknown or bad format ({spec})")
        parts = {key: int(value or 0) for key, value in match.groupdict().items()}
        weeks = parts.pop("weeks")
        parts["days"] += weeks * 7
        return cls(**parts)

    def negated(self) -> "Interval":
        return replace(self, invert=not self.invert)

    @property
    def sign(self) -> int:
        return -1 if self.invert else 1

    def apply_to(self, moment: datetime, direction: int = 1) -> datetime:
        """Shift ``moment`` by this interval; ``direction=-1`` subtracts it."""

        factor = self.sign * direction
        return apply_relative(
            moment,
            years=factor * self.years,
            months=factor * self.months,
            days=factor * self.days,
            hours=factor * self.hours,
            minutes=factor * self.minutes,
            seconds=factor * self.seconds,
            microseconds=factor * self.microseconds,
        )

    def spec(self) -> str:
        """ISO 8601 rendering (direction and sub-second part are dropped)."""

        date_part = "".join(
            f"{value}{unit}" for value, unit in ((self.years, "Y"), (self.months, "M"), (self.days, "D")) if value
        )
        time_part = "".join(
            f"{value}{unit}" for value, unit in ((self.hours, "H"), (self.minutes, "M"), (self.seconds, "S")) if value
        )
        if not date_part and not time_part:
            return "PT0S"
        return "P" + date_part + (f"T{time_part}" if time_part else "")

    def format(self, fmt: str) -> str:
        """Render with ``%``-directives (``%y %m %d %h %i %s %f %a %R %r``...)."""

        out: list[str] = []
        index = 0
        while index < len(fmt):
            char = fmt[index]
            if char != "%" or index + 1 == len(fmt):
                out.append(char)
                index += 1
                continue
            directive = fmt[index + 1]
            rendered = self._directive(directive)
            out.append(f"%{directive}" if rendered is None else rendered)
            index += 2
        return "".join(out)

    def _directive(self, directive: str) -> str | None:
        values = {
            "Y": f"{self.years:04d}",
            "y": str(self.years),
            "M": f"{self.months:02d}",
            "m": str(self.months),
            "D": f"{self.days:02d}",
            "d": str(self.days),
            "H": f"{self.hours:02d}",
            "h": str(self.hours),
            "I": f"{self.minutes:02d}",
            "i": str(self.minutes),
            "S": f"{self.seconds:02d}",
            "s": str(self.seconds),
            "F": f"{self.microseconds:06d}",
            "f": str(self.microseconds),
            "a": "(unknown)" if self.total_days is None else str(self.total_days),
            "R": "-" if self.invert else "+",
            "r": "-" if self.invert else "",
            "%": "%",
        }
        return values.get(directive)

    def __str__(self) -> str:
        return ("-" if self.invert else "") + self.spec()
