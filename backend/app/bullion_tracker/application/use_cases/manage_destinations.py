"""Use cases for registering and removing push destinations."""

import logging
from typing import Optional

from app.bullion_tracker.application.dto.destination_dto import (
    DestinationDTO,
    RegisterDestinationRequest,
)
from app.bullion_tracker.application.exceptions import InvalidDestinationError
from app.bullion_tracker.application.interfaces.notification_transport import (
    NotificationTransport,
)
from app.bullion_tracker.domain.entities.push_destination import PushDestination
from app.bullion_tracker.domain.repositories.destination_repository import (
    DestinationRepository,
)

logger = logging.getLogger(__name__)


class RegisterDestinationUseCase:
    """Application service for registering a device push token.

    Tokens are validated against the transport's format before they are
    stored, so the alert cycle never picks a destination that cannot work.
    """

    def __init__(
        self,
        destination_repository: DestinationRepository,
        transport: Optional[NotificationTransport] = None,
    ) -> None:
        """Initialize the use case with required dependencies.

        Args:
            destination_repository: Repository for push destinations.
            transport: Transport whose token format is enforced, if any.
        """
        self._destination_repository = destination_repository
        self._transport = transport

    async def execute(self, request: RegisterDestinationRequest) -> DestinationDTO:
        """Execute the registration.

        Raises:
            InvalidDestinationError: If the token format is not accepted.
        """
        if self._transport is not None and not self._transport.is_valid_destination(request.token):
            raise InvalidDestinationError(request.token)

        destination = await self._destination_repository.register(
            PushDestination(
                id=None,
                owner_ref=request.owner_ref,
                token=request.token,
                platform=request.platform,
                app_version=request.app_version,
            )
        )
        logger.info(f"Registered push destination for owner {destination.owner_ref}")
        return DestinationDTO.model_validate(destination)


class RemoveDestinationUseCase:
    """Application service for unregistering a push token."""

    def __init__(self, destination_repository: DestinationRepository) -> None:
        self._destination_repository = destination_repository

    async def execute(self, token: str) -> bool:
        """Execute the removal.

        Returns:
            True if the token was registered, False otherwise.
        """
        return await self._destination_repository.remove(token)
