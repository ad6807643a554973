"""Use case for enriching resolved prices with day-over-day change.

The baseline is the recorded price closest to the end of the last trading
day, looked up in the append-only price history.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from app.bullion_tracker.application.exceptions import NoBaselineDataError
from app.bullion_tracker.domain.entities.price_history_record import PriceHistoryRecord
from app.bullion_tracker.domain.repositories.price_history_repository import (
    PriceHistoryRepository,
)
from app.bullion_tracker.domain.services.price_change import calculate_change
from app.bullion_tracker.domain.services.trading_calendar import (
    end_of_day,
    last_trading_day,
)
from app.bullion_tracker.domain.value_objects.metal import Metal
from app.bullion_tracker.domain.value_objects.price_change import PriceChange
from app.bullion_tracker.domain.value_objects.resolved_price import ResolvedPrice

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK = timedelta(hours=24)


class ChangeCalculator:
    """Application service computing day-over-day change from price history.

    Attributes:
        lookback: How far before the baseline instant a record may lie.
    """

    def __init__(
        self,
        history_repository: PriceHistoryRepository,
        lookback: timedelta = DEFAULT_LOOKBACK,
    ) -> None:
        """Initialize the calculator.

        Args:
            history_repository: Repository for price history queries.
            lookback: Maximum age of a baseline record relative to the end
                of the last trading day (default 24 hours).
        """
        self._history_repository = history_repository
        self.lookback = lookback

    async def find_baseline(self, asset: Metal, today: date) -> PriceHistoryRecord:
        """Find the baseline record for a change computed on ``today``.

        Records later than the end of the last trading day are never used.

        Raises:
            NoBaselineDataError: If no record lies within the lookback window.
        """
        baseline_day = last_trading_day(today)
        record = await self._history_repository.find_closest(
            asset, end_of_day(baseline_day), self.lookback
        )
        if record is None:
            raise NoBaselineDataError(asset.value, baseline_day)
        return record

    async def compute(
        self, asset: Metal, amount: Decimal, today: date
    ) -> Optional[PriceChange]:
        """Compute the change of ``amount`` against the last trading day.

        Args:
            asset: The metal being priced.
            amount: Its current price.
            today: The day the price belongs to.

        Returns:
            PriceChange, or None when no usable baseline exists.
        """
        try:
            record = await self.find_baseline(asset, today)
        except NoBaselineDataError as e:
            logger.debug(e.message)
            return None

        return calculate_change(amount, record.amount, last_trading_day(today))

    async def enrich(
        self, prices: dict[Metal, ResolvedPrice], today: date
    ) -> dict[Metal, ResolvedPrice]:
        """Attach change figures to a cycle's resolved prices.

        - Change reported natively by the source takes precedence
        - Cached and static prices never carry a change
        - A failed lookup for one metal leaves only that metal without change

        Args:
            prices: Resolved prices keyed by metal.
            today: The day the prices belong to.

        Returns:
            New mapping with enriched ResolvedPrice instances.
        """
        enriched: dict[Metal, ResolvedPrice] = {}

        for asset, price in prices.items():
            if not price.provenance.is_live:
                enriched[asset] = price.with_change(None)
                continue

            if price.has_change:
                enriched[asset] = price
                continue

            try:
                change = await self.compute(asset, price.amount, today)
            except Exception as e:
                logger.error(f"Change lookup failed for {asset.value}: {e}")
                change = None

            enriched[asset] = price.with_change(change)

        return enriched
