"""Telemetry and logging subsystem package."""
from .logging_setup import LOG_FILE_NAME, JsonFormatter, configure_logging

__all__ = [
    "JsonFormatter",
    "LOG_FILE_NAME",
    "configure_logging",
]
