"""Abstract repository interface for CalibrationRatio entities."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from ..entities.calibration_ratio import CalibrationRatio
from ..value_objects.proxy_instrument import ProxyInstrument


class CalibrationRepository(ABC):
    """Abstract repository for daily calibration ratios.

    (instrument, date) is unique; writes go through ``upsert``.
    """

    @abstractmethod
    async def upsert(self, ratio: CalibrationRatio) -> CalibrationRatio:
        """Insert the ratio, or overwrite the existing row for its date.

        Args:
            ratio: The calibration to store.

        Returns:
            The stored CalibrationRatio with its ID populated.
        """
        pass

    @abstractmethod
    async def get_for_date(
        self, instrument: ProxyInstrument, on_date: date
    ) -> Optional[CalibrationRatio]:
        """Get the ratio calibrated exactly on a date.

        Args:
            instrument: The proxy instrument.
            on_date: The calibration date.

        Returns:
            The ratio for that date, or None.
        """
        pass

    @abstractmethod
    async def get_latest_on_or_before(
        self, instrument: ProxyInstrument, on_date: date
    ) -> Optional[CalibrationRatio]:
        """Get the most recent ratio dated on or before a date.

        Args:
            instrument: The proxy instrument.
            on_date: Upper bound (inclusive) for the calibration date.

        Returns:
            The newest qualifying ratio, or None if never calibrated.
        """
        pass
