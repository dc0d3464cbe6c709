"""Shared test fixtures for the alpha stability monitor."""

from decimal import Decimal

import pytest

from alpha_monitor.config import AppSettings, ExchangeSettings, MonitorSettings


@pytest.fixture
def monitor_settings() -> MonitorSettings:
    """MonitorSettings with a 3 minute window and a 0.1% threshold."""
    return MonitorSettings(
        pairs=["ABCUSDT"],
        refresh_interval=5.0,
        stable_threshold=Decimal("0.001"),
        monitor_minutes=3,
        cache_minutes=10,
    )


@pytest.fixture
def mock_settings(monitor_settings: MonitorSettings) -> AppSettings:
    """Return AppSettings with test defaults (alpha source, dashboard off)."""
    return AppSettings(
        log_level="DEBUG",
        exchange=ExchangeSettings(source="alpha", request_timeout=2.0),
        monitor=monitor_settings,
    )
