# tests/conftest.py
"""Shared test setup for project."""

from collections.abc import Generator

import pytest

import build_assembler.logs as mod_logs
from tests.utils import DEFAULT_TEST_LOG_LEVEL
from tests.utils.log_fixtures import (
    direct_logger,
    module_logger,
)


# These fixtures are intentionally re-exported so pytest can discover them.
__all__ = [
    "direct_logger",
    "module_logger",
]


@pytest.fixture(autouse=True)
def reset_logger_level() -> Generator[None, None, None]:
    """Reset the app logger level before and after each test for isolation."""
    logger = mod_logs.get_logger()
    logger.setLevel(DEFAULT_TEST_LOG_LEVEL)
    yield
    logger.setLevel(DEFAULT_TEST_LOG_LEVEL)


@pytest.fixture(autouse=True)
def no_env_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's LOG_LEVEL from leaking into level resolution."""
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("BUILD_ASSEMBLER_LOG_LEVEL", raising=False)
