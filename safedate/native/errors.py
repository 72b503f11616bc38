"""Exception type raised natively by the date/time layer."""
from __future__ import annotations


class NativeDateTimeError(ValueError):
    """Raised for malformed time expressions, duration specs and state data."""
