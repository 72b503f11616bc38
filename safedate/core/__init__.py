"""Core primitives shared across all subsystems.

This module aggregates the error classes, the last-error diagnostic slot,
timezone helpers and common types. Higher level packages import from here to
avoid circular dependencies.
"""

from . import diagnostics, errors, time_utils, types

__all__ = ["diagnostics", "errors", "time_utils", "types"]
