"""Abstract repository interface for NotificationRecord entities."""

from abc import ABC, abstractmethod
from typing import List

from ..entities.notification_record import NotificationRecord


class NotificationRepository(ABC):
    """Abstract repository for the write-once notification audit trail."""

    @abstractmethod
    async def append(self, records: List[NotificationRecord]) -> List[NotificationRecord]:
        """Insert audit rows.

        Args:
            records: One row per dispatch attempt.

        Returns:
            The inserted rows with IDs populated.
        """
        pass

    @abstractmethod
    async def get_for_alert(self, alert_id: int) -> List[NotificationRecord]:
        """Get every audit row recorded for an alert, oldest first."""
        pass
