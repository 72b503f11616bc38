"""JSON logging for safedate.

Everything in the package logs through children of the ``safedate`` logger
(``safedate.safe.instant`` and so on). ``configure_logging`` gives that
logger a JSON stderr handler and, when a directory is configured, a daily
rotating ``safedate.jsonl`` file.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import IO, Any, Dict

LOG_FILE_NAME = "safedate.jsonl"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def _utc_iso(created: float) -> str:
    return datetime.fromtimestamp(created, tz=timezone.utc).isoformat().replace("+00:00", "Z")


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Fields passed via ``extra=`` that survive JSON encoding."""

    extras: Dict[str, Any] = {}
    for key, value in vars(record).items():
        if key.startswith("_") or key in _RECORD_ATTRS:
            continue
        try:
            json.dumps(value)
        except (TypeError, ValueError):
            continue
        extras[key] = value
    return extras


class JsonFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger name, message, extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": _utc_iso(record.created),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        for key, value in _extra_fields(record).items():
            payload.setdefault(key, value)
        return json.dumps(payload, ensure_ascii=False)


def _file_handler(log_dir: Path, backup_count: int) -> TimedRotatingFileHandler:
    log_dir.mkdir(parents=True, exist_ok=True)
    return TimedRotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        when="midnight",
        backupCount=backup_count,
        encoding="utf-8",
    )


def configure_logging(
    *,
    log_dir: Path | None = None,
    level: str = "INFO",
    logger_name: str = "safedate",
    stream: IO[str] | None = None,
    backup_count: int = 14,
) -> Logger:
    """Attach JSON handlers to ``logger_name``, replacing any existing ones.

    ``stream`` defaults to stderr. Records do not propagate to the root
    logger once this has run.
    """

    logger = logging.getLogger(logger_name)
    logger.setLevel(level.upper())
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(stream)]
    if log_dir is not None:
        handlers.append(_file_handler(log_dir, backup_count))
    for handler in handlers:
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
    logger.propagate = False

    if log_dir is not None:
        logger.debug("JSON logging configured", extra={"log_file": str(log_dir / LOG_FILE_NAME)})
    return logger


__all__ = ["JsonFormatter", "LOG_FILE_NAME", "configure_logging"]
