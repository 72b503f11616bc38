"""Safe wrappers over the native date/time layer."""

from .instant import SafeInstant

__all__ = ["SafeInstant"]
