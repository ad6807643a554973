"""Interface for fetching proxy instrument (ETF) prices."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from app.bullion_tracker.domain.value_objects.proxy_instrument import ProxyInstrument


@dataclass(frozen=True)
class ProxyClose:
    """Closing price of a proxy instrument for one trading session."""

    instrument: ProxyInstrument
    trading_date: date
    price: Decimal


class ProxyQuoteSource(ABC):
    """Provides current and historical market prices for proxy instruments."""

    @abstractmethod
    async def fetch_quotes(
        self, instruments: Iterable[ProxyInstrument]
    ) -> dict[ProxyInstrument, Decimal]:
        """Fetch the latest price of each instrument.

        Instruments the provider could not price are omitted from the result.

        Raises:
            SourceUnavailableError: If the provider could not be reached at all.
        """
        ...

    @abstractmethod
    async def fetch_close(
        self, instrument: ProxyInstrument, on_date: date
    ) -> Optional[ProxyClose]:
        """Fetch the close of the last trading session on or before a date.

        Returns:
            The session's close, or None when no session traded in the
            provider's lookback window (e.g. a long holiday).

        Raises:
            SourceUnavailableError: If the provider could not be reached or
                returned an unusable response.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        ...
