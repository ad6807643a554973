"""Abstract repository interface for PushDestination entities."""

from abc import ABC, abstractmethod
from typing import Optional

from ..entities.push_destination import PushDestination


class DestinationRepository(ABC):
    """Abstract repository for registered push destinations."""

    @abstractmethod
    async def register(self, destination: PushDestination) -> PushDestination:
        """Register a token, or refresh it if the token already exists.

        Re-registering an existing token reassigns it to the given owner
        and bumps its last_active timestamp.

        Args:
            destination: The destination to register.

        Returns:
            The stored PushDestination.
        """
        pass

    @abstractmethod
    async def remove(self, token: str) -> bool:
        """Remove a destination by token.

        Returns:
            True if a destination was removed, False if unknown.
        """
        pass

    @abstractmethod
    async def get_latest_for_owner(self, owner_ref: str) -> Optional[PushDestination]:
        """Get the owner's most recently active destination.

        Args:
            owner_ref: The alert owner.

        Returns:
            The destination to notify, or None if the owner has none.
        """
        pass
