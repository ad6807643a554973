"""Shared fixtures for the test suite."""

import pytest

from fakes import (
    FakeTransport,
    InMemoryAlertRepository,
    InMemoryCalibrationRepository,
    InMemoryDestinationRepository,
    InMemoryNotificationRepository,
    InMemoryPriceHistoryRepository,
    ManualClock,
)


@pytest.fixture
def clock() -> ManualClock:
    """Create a manual clock fixed on a Wednesday afternoon."""
    return ManualClock()


@pytest.fixture
def history_repository() -> InMemoryPriceHistoryRepository:
    return InMemoryPriceHistoryRepository()


@pytest.fixture
def calibration_repository() -> InMemoryCalibrationRepository:
    return InMemoryCalibrationRepository()


@pytest.fixture
def alert_repository() -> InMemoryAlertRepository:
    return InMemoryAlertRepository()


@pytest.fixture
def destination_repository() -> InMemoryDestinationRepository:
    return InMemoryDestinationRepository()


@pytest.fixture
def notification_repository() -> InMemoryNotificationRepository:
    return InMemoryNotificationRepository()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
