"""Configuration loading and validation package."""

from .loader import apply_config, load_config
from .models import LoggingConfig, SafeDateConfig

__all__ = [
    "LoggingConfig",
    "SafeDateConfig",
    "apply_config",
    "load_config",
]
