"""Abstract repository interface for Alert entities."""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from ..entities.alert import Alert


class AlertRepository(ABC):
    """Abstract repository for Alert persistence operations.

    "Active" alerts are those with enabled == True and triggered == False.
    All methods are async to support non-blocking I/O in the
    infrastructure layer.
    """

    @abstractmethod
    async def get_by_id(self, alert_id: int) -> Optional[Alert]:
        """Retrieve an alert by its database ID.

        Args:
            alert_id: The unique identifier of the alert.

        Returns:
            The Alert entity if found, None otherwise.
        """
        pass

    @abstractmethod
    async def get_active(self) -> List[Alert]:
        """Retrieve all alerts that are enabled and not yet triggered.

        Used by the alert evaluation cycle. Triggered alerts are excluded
        so they are never evaluated again.

        Returns:
            List of active Alert entities.
        """
        pass

    @abstractmethod
    async def get_by_owner(self, owner_ref: str) -> List[Alert]:
        """Retrieve all alerts belonging to an owner, newest first.

        Args:
            owner_ref: The owner reference to search for.

        Returns:
            List of Alert entities associated with the owner.
        """
        pass

    @abstractmethod
    async def save(self, alert: Alert) -> Alert:
        """Persist an alert entity.

        For new alerts (id is None), this creates a new record.
        For existing alerts, this updates the owner-editable fields.

        Args:
            alert: The Alert entity to save.

        Returns:
            The saved Alert entity with its ID populated.
        """
        pass

    @abstractmethod
    async def set_enabled(self, alert_id: int, enabled: bool) -> bool:
        """Enable or disable an alert.

        Args:
            alert_id: The ID of the alert.
            enabled: The new enabled flag.

        Returns:
            True if the alert exists, False otherwise.
        """
        pass

    @abstractmethod
    async def mark_triggered(
        self, alert_id: int, triggered_price: Decimal, triggered_at: datetime
    ) -> bool:
        """Conditionally apply the terminal triggered transition.

        Implementations must perform this as a single conditional write
        (``WHERE triggered = false AND enabled = true``) and make it durable
        before returning, so that overlapping evaluation cycles can fire an
        alert at most once.

        Args:
            alert_id: The ID of the alert to transition.
            triggered_price: The price that fired the alert.
            triggered_at: When the alert fired.

        Returns:
            True if this call performed the transition, False if the alert
            was already triggered, disabled, or deleted.
        """
        pass

    @abstractmethod
    async def delete(self, alert_id: int) -> bool:
        """Delete an alert by its ID.

        Args:
            alert_id: The ID of the alert to delete.

        Returns:
            True if the alert was deleted, False if not found.
        """
        pass
