from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Iterator

import pytest

from safedate.core.diagnostics import clear_last_error
from safedate.core.time_utils import DEFAULT_TZ_NAME, set_default_timezone
from safedate.native import NativeDateTime
from safedate.safe import SafeInstant


@pytest.fixture(autouse=True)
def _isolated_process_state() -> Iterator[None]:
    set_default_timezone(DEFAULT_TZ_NAME)
    clear_last_error()
    yield
    set_default_timezone(DEFAULT_TZ_NAME)
    clear_last_error()
    logger = logging.getLogger("safedate")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def leap_moment() -> datetime:
    return datetime(2024, 2, 29, 13, 5, 9, 123456, tzinfo=timezone.utc)


@pytest.fixture
def native_factory() -> Callable[..., NativeDateTime]:
    def _factory(*args: int, tz=timezone.utc) -> NativeDateTime:
        return NativeDateTime.from_interface(datetime(*args, tzinfo=tz))

    return _factory


@pytest.fixture
def instant_factory() -> Callable[..., SafeInstant]:
    def _factory(text: str = "2024-01-01 00:00:00", tz: str | None = None) -> SafeInstant:
        return SafeInstant(text, tz)

    return _factory
