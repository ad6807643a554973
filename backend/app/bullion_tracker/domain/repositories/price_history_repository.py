"""Abstract repository interface for PriceHistoryRecord entities."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import List, Optional

from ..entities.price_history_record import PriceHistoryRecord
from ..value_objects.metal import Metal


class PriceHistoryRepository(ABC):
    """Abstract repository for the append-only spot price history.

    Records are never updated or deleted by the application.
    """

    @abstractmethod
    async def append(self, records: List[PriceHistoryRecord]) -> List[PriceHistoryRecord]:
        """Append history records in a single operation.

        Args:
            records: Records to insert.

        Returns:
            The inserted records with IDs populated.
        """
        pass

    @abstractmethod
    async def find_closest(
        self,
        asset: Metal,
        target: datetime,
        max_distance: timedelta,
    ) -> Optional[PriceHistoryRecord]:
        """Find the record closest to, and not later than, a target instant.

        Args:
            asset: The metal to search.
            target: The instant to match (e.g. end of a trading day).
            max_distance: How far before the target a record may lie.

        Returns:
            The latest record in [target - max_distance, target], or None.
        """
        pass

    @abstractmethod
    async def get_latest(self, asset: Metal) -> Optional[PriceHistoryRecord]:
        """Get the most recent record for a metal.

        Args:
            asset: The metal to search.

        Returns:
            The newest record, or None if the metal has no history.
        """
        pass
