"""Unit tests for the alert management use cases."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from app.bullion_tracker.application.dto.alert_dto import (
    CreateAlertRequest,
    UpdateAlertRequest,
)
from app.bullion_tracker.application.exceptions import AlertNotFoundError
from app.bullion_tracker.application.use_cases.manage_alerts import (
    CreateAlertUseCase,
    DeleteAlertUseCase,
    GetAlertsByOwnerUseCase,
    UpdateAlertUseCase,
)
from app.bullion_tracker.domain.entities.alert import Alert, AlertDirection
from app.bullion_tracker.domain.value_objects.metal import Metal


@pytest.fixture
def mock_alert_repository() -> AsyncMock:
    """Create a mock alert repository."""
    return AsyncMock()


@pytest.fixture
def sample_alert() -> Alert:
    """Create a sample alert for testing."""
    return Alert(
        id=1,
        owner_ref="device-abc",
        asset=Metal.GOLD,
        target_price=Decimal("5000"),
        direction=AlertDirection.ABOVE,
        created_at=datetime.now(timezone.utc),
    )


@pytest.fixture
def create_alert_request() -> CreateAlertRequest:
    """Create a sample alert request for testing."""
    return CreateAlertRequest(
        owner_ref="device-abc",
        metal=Metal.GOLD,
        target_price=Decimal("5000"),
        direction=AlertDirection.ABOVE,
    )


class TestCreateAlertUseCase:
    """Tests for CreateAlertUseCase."""

    @pytest.mark.asyncio
    async def test_create_alert_success(
        self,
        mock_alert_repository: AsyncMock,
        create_alert_request: CreateAlertRequest,
        sample_alert: Alert,
    ) -> None:
        """Test successful alert creation."""
        # Arrange
        mock_alert_repository.save.return_value = sample_alert
        use_case = CreateAlertUseCase(mock_alert_repository)

        # Act
        result = await use_case.execute(create_alert_request)

        # Assert
        assert result.id == 1
        assert result.metal == Metal.GOLD
        assert result.target_price == Decimal("5000")
        assert result.enabled is True
        assert result.triggered is False

        saved = mock_alert_repository.save.call_args[0][0]
        assert saved.id is None
        assert saved.owner_ref == "device-abc"
        assert saved.is_active

    def test_request_rejects_non_positive_target(self) -> None:
        """Test that the request model refuses zero and negative targets."""
        with pytest.raises(ValueError):
            CreateAlertRequest(
                owner_ref="device-abc",
                metal=Metal.GOLD,
                target_price=Decimal("0"),
                direction=AlertDirection.ABOVE,
            )


class TestGetAlertsByOwnerUseCase:
    """Tests for GetAlertsByOwnerUseCase."""

    @pytest.mark.asyncio
    async def test_includes_triggered_alerts(
        self, mock_alert_repository: AsyncMock, sample_alert: Alert
    ) -> None:
        fired = Alert(
            id=2,
            owner_ref="device-abc",
            asset=Metal.SILVER,
            target_price=Decimal("30"),
            direction=AlertDirection.BELOW,
        )
        fired.mark_triggered(Decimal("29.90"))
        mock_alert_repository.get_by_owner.return_value = [sample_alert, fired]

        result = await GetAlertsByOwnerUseCase(mock_alert_repository).execute("device-abc")

        assert result.total == 2
        assert result.alerts[1].triggered is True
        assert result.alerts[1].triggered_price == Decimal("29.90")
        mock_alert_repository.get_by_owner.assert_called_once_with("device-abc")

    @pytest.mark.asyncio
    async def test_no_alerts(self, mock_alert_repository: AsyncMock) -> None:
        mock_alert_repository.get_by_owner.return_value = []

        result = await GetAlertsByOwnerUseCase(mock_alert_repository).execute("nobody")

        assert result.total == 0
        assert result.alerts == []


class TestUpdateAlertUseCase:
    """Tests for UpdateAlertUseCase."""

    @pytest.mark.asyncio
    async def test_disable_alert(self, mock_alert_repository: AsyncMock, sample_alert: Alert) -> None:
        sample_alert.disable()
        mock_alert_repository.set_enabled.return_value = True
        mock_alert_repository.get_by_id.return_value = sample_alert

        result = await UpdateAlertUseCase(mock_alert_repository).execute(
            1, UpdateAlertRequest(enabled=False)
        )

        assert result.enabled is False
        mock_alert_repository.set_enabled.assert_called_once_with(1, False)

    @pytest.mark.asyncio
    async def test_reenabling_triggered_alert_keeps_it_triggered(self, alert_repository, sample_alert: Alert) -> None:
        sample_alert.mark_triggered(Decimal("5001"))
        sample_alert.disable()
        await alert_repository.save(sample_alert)

        result = await UpdateAlertUseCase(alert_repository).execute(1, UpdateAlertRequest(enabled=True))

        assert result.enabled is True
        assert result.triggered is True
        assert await alert_repository.get_active() == []

    @pytest.mark.asyncio
    async def test_missing_alert(self, mock_alert_repository: AsyncMock) -> None:
        mock_alert_repository.set_enabled.return_value = False

        with pytest.raises(AlertNotFoundError):
            await UpdateAlertUseCase(mock_alert_repository).execute(
                99, UpdateAlertRequest(enabled=False)
            )


class TestDeleteAlertUseCase:
    """Tests for DeleteAlertUseCase."""

    @pytest.mark.asyncio
    async def test_delete_alert_success(self, mock_alert_repository: AsyncMock) -> None:
        """Test successful alert deletion."""
        mock_alert_repository.delete.return_value = True

        result = await DeleteAlertUseCase(mock_alert_repository).execute(1)

        assert result is True
        mock_alert_repository.delete.assert_called_once_with(1)

    @pytest.mark.asyncio
    async def test_delete_alert_not_found(self, mock_alert_repository: AsyncMock) -> None:
        """Test deletion of non-existent alert."""
        mock_alert_repository.delete.return_value = False

        assert await DeleteAlertUseCase(mock_alert_repository).execute(999) is False
