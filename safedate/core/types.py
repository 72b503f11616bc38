"""Shared type aliases and structural contracts.

``DateTimeLike`` is the structural interface every date/time value in the
package satisfies. Anything exposing ``to_datetime()`` can be compared with,
or diffed against, a native or safe value.
"""
from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Any, Mapping, NewType, Protocol, TypeAlias, runtime_checkable

Timestamp = NewType("Timestamp", int)
OffsetSeconds = NewType("OffsetSeconds", int)

TimezoneLike: TypeAlias = tzinfo | str
StateMapping: TypeAlias = Mapping[str, Any]


@runtime_checkable
class DateTimeLike(Protocol):
    """Anything that can present itself as an aware ``datetime``."""

    def to_datetime(self) -> datetime:
        ...
