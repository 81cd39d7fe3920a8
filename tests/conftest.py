"""Shared test fixtures for the explosion scanner."""

import pytest

from fakes import FakeClock
from scanner.config import AppSettings, CacheSettings, ExchangeSettings, ScannerSettings


@pytest.fixture
def app_settings() -> AppSettings:
    """AppSettings with test defaults (dummy key, short timeouts)."""
    return AppSettings(
        log_level="DEBUG",
        exchange=ExchangeSettings(
            api_key="test-api-key",  # type: ignore[arg-type]
            request_timeout=1.0,
            max_concurrent_requests=4,
        ),
        cache=CacheSettings(),
        scanner=ScannerSettings(top_results=5),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
