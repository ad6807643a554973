"""Use cases for managing price alert subscriptions.

Implements owner-facing alert operations by orchestrating:
- Target validation via AlertPolicy
- Alert persistence via AlertRepository
"""

from app.bullion_tracker.application.dto.alert_dto import (
    AlertDTO,
    AlertListDTO,
    CreateAlertRequest,
    UpdateAlertRequest,
)
from app.bullion_tracker.application.exceptions import (
    AlertNotFoundError,
    UnsupportedAssetError,
)
from app.bullion_tracker.domain.entities.alert import Alert
from app.bullion_tracker.domain.repositories.alert_repository import AlertRepository
from app.bullion_tracker.domain.services.alert_policy import AlertPolicy


class CreateAlertUseCase:
    """Application service for creating price alert subscriptions."""

    def __init__(self, alert_repository: AlertRepository) -> None:
        """Initialize the use case with required dependencies.

        Args:
            alert_repository: Repository for alert persistence.
        """
        self._alert_repository = alert_repository

    async def execute(self, request: CreateAlertRequest) -> AlertDTO:
        """Execute the alert creation.

        Args:
            request: CreateAlertRequest with alert configuration.

        Returns:
            AlertDTO representing the created alert.

        Raises:
            UnsupportedAssetError: If the target price is not a valid price.
        """
        if not AlertPolicy.is_valid_target(request.target_price):
            raise UnsupportedAssetError(f"{request.metal.value}@{request.target_price}")

        alert = Alert(
            id=None,  # Will be assigned by the database
            owner_ref=request.owner_ref,
            asset=request.metal,
            target_price=request.target_price,
            direction=request.direction,
        )

        saved_alert = await self._alert_repository.save(alert)
        return AlertDTO.from_entity(saved_alert)


class GetAlertsByOwnerUseCase:
    """Application service for retrieving an owner's alerts."""

    def __init__(self, alert_repository: AlertRepository) -> None:
        self._alert_repository = alert_repository

    async def execute(self, owner_ref: str) -> AlertListDTO:
        """Execute the alert retrieval by owner.

        Args:
            owner_ref: Owner reference to search for.

        Returns:
            AlertListDTO with every alert of the owner, triggered ones included.
        """
        alerts = await self._alert_repository.get_by_owner(owner_ref)
        dtos = [AlertDTO.from_entity(alert) for alert in alerts]
        return AlertListDTO(alerts=dtos, total=len(dtos))


class UpdateAlertUseCase:
    """Application service for enabling or disabling an alert.

    Re-enabling a triggered alert does not make it active again; triggering
    is terminal.
    """

    def __init__(self, alert_repository: AlertRepository) -> None:
        self._alert_repository = alert_repository

    async def execute(self, alert_id: int, request: UpdateAlertRequest) -> AlertDTO:
        """Execute the alert update.

        Raises:
            AlertNotFoundError: If the alert does not exist.
        """
        if not await self._alert_repository.set_enabled(alert_id, request.enabled):
            raise AlertNotFoundError(alert_id)

        alert = await self._alert_repository.get_by_id(alert_id)
        if alert is None:
            raise AlertNotFoundError(alert_id)
        return AlertDTO.from_entity(alert)


class DeleteAlertUseCase:
    """Application service for deleting an alert."""

    def __init__(self, alert_repository: AlertRepository) -> None:
        """Initialize the use case with required dependencies.

        Args:
            alert_repository: Repository for alert operations.
        """
        self._alert_repository = alert_repository

    async def execute(self, alert_id: int) -> bool:
        """Execute the alert deletion.

        Args:
            alert_id: ID of the alert to delete.

        Returns:
            True if the alert was deleted, False if not found.
        """
        return await self._alert_repository.delete(alert_id)
