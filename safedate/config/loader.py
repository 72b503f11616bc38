"""YAML loader for the config subsystem.

``load_config`` consumes one YAML file, validates it via models.py and
returns a typed object. ``apply_config`` pushes the settings that affect
date/time behaviour into the process.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from ..core.errors import ConfigurationError
from ..core.time_utils import set_default_timezone
from .models import SafeDateConfig

DEFAULT_CONFIG_PATH = Path("config") / "safedate.yml"


def _read_yaml(path: Path) -> Mapping[str, Any]:
    """Return the mapping stored in ``path``; a blank file reads as ``{}``."""

    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Malformed YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"YAML root must be a mapping in {path}")
    return data


def load_config(path: Path | str = DEFAULT_CONFIG_PATH) -> SafeDateConfig:
    """Load safedate.yml (timezone, default_format, logging)."""

    path = Path(path)
    try:
        return SafeDateConfig.model_validate(_read_yaml(path))
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid config in {path}: {exc}") from exc


def apply_config(config: SafeDateConfig) -> None:
    set_default_timezone(config.timezone)
