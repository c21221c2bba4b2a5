"""Shared fixtures for bndy_calendar tests."""

import logging
from collections.abc import Generator
from datetime import date, datetime, timezone
from typing import Any, Callable

import pytest

from bndy_calendar.calendar_logging import NOISY_LOGGERS, PACKAGE_LOGGER
from bndy_calendar.calendar_models import Event, ExportOptions, Membership, MembershipRole
from bndy_calendar.config_loader import Config
from bndy_calendar.ical_export import IcalSerializer

FIXED_NOW = datetime(2025, 11, 20, 9, 30, tzinfo=timezone.utc)


def pytest_configure(config: Any) -> None:
    config.addinivalue_line("markers", "unit: fast, isolated unit tests")
    config.addinivalue_line("markers", "fast: tests that run in well under a second")


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Clear bndy environment variables so host settings never leak into tests."""
    for name in ("BNDY_CALENDAR_CONFIG", "BNDY_API_BASE_URL", "BNDY_LOG_LEVEL", "BNDY_CALENDAR_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None, Any, None]:
    """Restore root handlers and levels changed by configure_logging()."""
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_root_level = root.level
    names = [PACKAGE_LOGGER, *NOISY_LOGGERS]
    saved_levels = {name: logging.getLogger(name).level for name in names}
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_root_level)
    for name, level in saved_levels.items():
        logging.getLogger(name).setLevel(level)


@pytest.fixture
def config() -> Config:
    """Default configuration."""
    return Config()


@pytest.fixture
def serializer(config: Config) -> IcalSerializer:
    """Serializer with a frozen DTSTAMP clock."""
    return IcalSerializer(config, clock=lambda: FIXED_NOW)


@pytest.fixture
def export_options() -> ExportOptions:
    return ExportOptions(artist_name="The Blues", include_private_events=True)


@pytest.fixture
def make_event() -> Callable[..., Event]:
    """Factory for events with sensible defaults; keyword arguments override them."""

    def _make(**overrides: Any) -> Event:
        values: dict[str, Any] = {
            "id": "evt-1",
            "artist_id": "artist-blues",
            "type": "rehearsal",
            "date": date(2025, 12, 1),
            "is_public": True,
        }
        values.update(overrides)
        return Event(**values)

    return _make


@pytest.fixture
def membership() -> Membership:
    """Plain member of The Blues."""
    return Membership(
        id="mem-a",
        artist_id="artist-blues",
        user_id="user-a",
        role=MembershipRole.MEMBER,
        display_name="Alex",
    )
