"""Per-thread "last error" slot.

The native layer records a diagnostic right before it returns the ``False``
sentinel. Whoever checks for the sentinel must read the slot before making
any further native call, since the next failure overwrites it.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Description of the most recent low-level failure."""

    message: str
    operation: str | None = None


_state = threading.local()


def record_error(message: str, operation: str | None = None) -> None:
    """Store ``message`` as the current thread's last error."""

    _state.last = Diagnostic(message=message, operation=operation)


def last_error() -> Diagnostic | None:
    """Return the last recorded diagnostic for this thread, if any."""

    return getattr(_state, "last", None)


def clear_last_error() -> None:
    _state.last = None


__all__ = ["Diagnostic", "clear_last_error", "last_error", "record_error"]
