"""Typed configuration models for safedate.

The config subsystem relies on pydantic to validate YAML files and to provide
strongly-typed objects to the rest of the package.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.time_utils import DEFAULT_TZ_NAME, resolve_timezone

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingConfig(BaseModel):
    """JSON logging settings; without ``log_dir`` only stderr is used."""

    level: str = Field("INFO", description="Level name for the safedate logger")
    log_dir: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        normalized = value.upper()
        if normalized not in _LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(_LOG_LEVELS)}")
        return normalized


class SafeDateConfig(BaseModel):
    """Library settings loaded from ``safedate.yml``.

    ``timezone`` becomes the process default for values created without an
    explicit zone; ``default_format`` is what the CLI renders with.
    """

    timezone: str = DEFAULT_TZ_NAME
    default_format: str = Field("Y-m-d H:i:s", min_length=1)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(frozen=True)

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            resolve_timezone(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {value}") from exc
        return value
