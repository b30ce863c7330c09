# tests/conftest.py

"""Shared pytest fixtures for all tests."""

from collections.abc import Generator
from unittest.mock import patch

import pytest

from fitlowprice.config.settings import Settings


@pytest.fixture(autouse=True)
def pin_settings() -> Generator[None, None, None]:
    """Pin deployment mode and credentials so a local .env is ignored."""
    with (
        patch.object(Settings, "APP_ENV", "development"),
        patch.object(Settings, "NAVER_CLIENT_ID", ""),
        patch.object(Settings, "NAVER_CLIENT_SECRET", ""),
        patch.object(Settings, "CONSOLE_LOG_LEVEL", "WARNING"),
    ):
        yield
