"""Native date/time layer.

Values here report some failures by returning ``False`` after recording a
diagnostic (see :mod:`safedate.core.diagnostics`) and others by raising.
"""

from .errors import NativeDateTimeError
from .interval import Interval
from .values import NativeDateTime, NativeMutableDateTime

__all__ = [
    "Interval",
    "NativeDateTime",
    "NativeDateTimeError",
    "NativeMutableDateTime",
]
