"""Use case composing one pricing cycle.

A cycle resolves every metal's price, enriches live prices with
day-over-day change, appends live prices to the price history and finally
evaluates alerts against the resolved prices. The latest snapshot is kept
for the control surface.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from app.bullion_tracker.application.dto.alert_dto import AlertCheckSummary
from app.bullion_tracker.application.interfaces.clock import Clock, SystemClock
from app.bullion_tracker.application.use_cases.compute_price_change import (
    ChangeCalculator,
)
from app.bullion_tracker.application.use_cases.evaluate_alerts import AlertEvaluator
from app.bullion_tracker.application.use_cases.resolve_prices import PriceResolver
from app.bullion_tracker.domain.entities.price_history_record import PriceHistoryRecord
from app.bullion_tracker.domain.repositories.price_history_repository import (
    PriceHistoryRepository,
)
from app.bullion_tracker.domain.value_objects.metal import ALL_METALS, Metal
from app.bullion_tracker.domain.value_objects.resolved_price import ResolvedPrice

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceSnapshot:
    """Enriched prices from one resolution, with when they were resolved."""

    prices: dict[Metal, ResolvedPrice]
    resolved_at: datetime

    @property
    def all_live(self) -> bool:
        return all(p.provenance.is_live for p in self.prices.values())

    def age(self, now: datetime) -> timedelta:
        return now - self.resolved_at


class LatestPriceStore:
    """Holds the most recent snapshot produced by any pricing cycle."""

    def __init__(self) -> None:
        self._snapshot: Optional[PriceSnapshot] = None

    @property
    def snapshot(self) -> Optional[PriceSnapshot]:
        return self._snapshot

    def update(self, snapshot: PriceSnapshot) -> None:
        self._snapshot = snapshot

    def is_fresh(self, now: datetime, max_age: timedelta) -> bool:
        return self._snapshot is not None and self._snapshot.age(now) <= max_age


@dataclass
class PricingCycleResult:
    """Outcome of a full pricing cycle."""

    snapshot: PriceSnapshot
    history_written: int = 0
    alerts: Optional[AlertCheckSummary] = None


class PricingCycle:
    """Application service running resolve, enrich, record and alert steps.

    Built per cycle by the runtime so that repositories share one database
    session; the resolver, cache and latest-price store are long-lived.
    """

    def __init__(
        self,
        resolver: PriceResolver,
        change_calculator: ChangeCalculator,
        history_repository: PriceHistoryRepository,
        alert_evaluator: Optional[AlertEvaluator] = None,
        latest_store: Optional[LatestPriceStore] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        """Initialize the cycle.

        Args:
            resolver: Shared price resolver.
            change_calculator: Day-over-day change enrichment.
            history_repository: Repository for the append-only price history.
            alert_evaluator: Alert evaluation step; omitted for price-only refreshes.
            latest_store: Where the resulting snapshot is published.
            clock: Time source.
        """
        self._resolver = resolver
        self._change_calculator = change_calculator
        self._history_repository = history_repository
        self._alert_evaluator = alert_evaluator
        self._latest_store = latest_store or LatestPriceStore()
        self._clock = clock or SystemClock()

    async def refresh_prices(self) -> tuple[PriceSnapshot, int]:
        """Resolve, enrich and record prices without evaluating alerts.

        Returns:
            The published snapshot and the number of history rows written.
        """
        now = self._clock.now()
        resolved = await self._resolver.resolve_all(ALL_METALS)
        enriched = await self._change_calculator.enrich(resolved, now.date())

        written = await self._record_history(enriched.values())

        snapshot = PriceSnapshot(prices=enriched, resolved_at=now)
        self._latest_store.update(snapshot)
        return snapshot, written

    async def run(self) -> PricingCycleResult:
        """Run a full cycle including alert evaluation."""
        snapshot, written = await self.refresh_prices()
        result = PricingCycleResult(snapshot=snapshot, history_written=written)

        if self._alert_evaluator is not None:
            result.alerts = await self._alert_evaluator.evaluate(snapshot.prices)

        return result

    async def get_spot_prices(self, max_age: timedelta) -> PriceSnapshot:
        """Serve the latest snapshot, refreshing it when older than ``max_age``."""
        now = self._clock.now()
        if self._latest_store.is_fresh(now, max_age):
            return self._latest_store.snapshot  # type: ignore[return-value]

        logger.info("Latest prices expired, refreshing")
        snapshot, _ = await self.refresh_prices()
        return snapshot

    async def _record_history(self, prices: Iterable[ResolvedPrice]) -> int:
        records = [
            PriceHistoryRecord(
                id=None,
                asset=price.asset,
                amount=price.amount,
                timestamp=price.timestamp,
                source=price.provenance.source,
            )
            for price in prices
            if price.provenance.is_live
        ]
        if not records:
            return 0

        try:
            await self._history_repository.append(records)
        except Exception as e:
            logger.error(f"Failed to record price history: {e}")
            return 0

        return len(records)
