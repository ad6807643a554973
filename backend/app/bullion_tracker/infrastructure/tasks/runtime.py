"""Composition of the long-lived collaborators shared by cycles and requests.

The resolver, its last-known-good cache, the latest-price store and the
notification dispatcher live for the whole process. Repositories are
bound to a database session, so use cases that need them are built per
cycle or per request through the factory methods below.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.bullion_tracker.application.interfaces.clock import Clock, SystemClock
from app.bullion_tracker.application.interfaces.notification_transport import (
    NotificationTransport,
)
from app.bullion_tracker.application.interfaces.price_source import PriceSource
from app.bullion_tracker.application.interfaces.proxy_quote_source import (
    ProxyQuoteSource,
)
from app.bullion_tracker.application.use_cases.calibrate_ratios import (
    CalibrationService,
    RatioResult,
)
from app.bullion_tracker.application.use_cases.compute_price_change import (
    ChangeCalculator,
)
from app.bullion_tracker.application.use_cases.dispatch_notifications import (
    NotificationDispatcher,
)
from app.bullion_tracker.application.use_cases.evaluate_alerts import AlertEvaluator
from app.bullion_tracker.application.use_cases.resolve_prices import (
    LastKnownPriceCache,
    PriceResolver,
)
from app.bullion_tracker.application.use_cases.run_pricing_cycle import (
    LatestPriceStore,
    PriceSnapshot,
    PricingCycle,
    PricingCycleResult,
)
from app.bullion_tracker.domain.services.alert_policy import AlertPolicy
from app.bullion_tracker.domain.value_objects.metal import ALL_METALS
from app.bullion_tracker.domain.value_objects.proxy_instrument import ProxyInstrument
from app.bullion_tracker.infrastructure.repositories import (
    SqlAlertRepository,
    SqlCalibrationRepository,
    SqlDestinationRepository,
    SqlNotificationRepository,
    SqlPriceHistoryRepository,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeOptions:
    """Tunables read from settings when the runtime is built."""

    change_lookback: timedelta = timedelta(hours=24)
    spot_price_max_age: timedelta = timedelta(minutes=10)
    fire_on_cached: bool = True
    fire_on_static: bool = True
    max_batch_size: int = 100

    @classmethod
    def from_settings(cls, settings: Any) -> "RuntimeOptions":
        return cls(
            change_lookback=timedelta(hours=settings.change_lookback_hours),
            spot_price_max_age=timedelta(seconds=settings.spot_price_max_age_seconds),
            fire_on_cached=settings.alerts_fire_on_cached_prices,
            fire_on_static=settings.alerts_fire_on_static_prices,
            max_batch_size=settings.expo_max_batch_size,
        )


class BullionRuntime:
    """Process-wide service container.

    Attributes:
        cache: Last-known-good prices shared with the resolver.
        resolver: Spot price resolver.
        latest_store: Most recent enriched snapshot.
        dispatcher: Batch push sender.
        policy: Alert trigger rules.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        sources: Sequence[PriceSource],
        proxy_source: ProxyQuoteSource,
        transport: NotificationTransport,
        options: Optional[RuntimeOptions] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._session_factory = session_factory
        self._proxy_source = proxy_source
        self._transport = transport
        self.options = options or RuntimeOptions()
        self.clock = clock or SystemClock()

        self.cache = LastKnownPriceCache()
        self.resolver = PriceResolver(sources, self.cache, clock=self.clock)
        self.latest_store = LatestPriceStore()
        self.dispatcher = NotificationDispatcher(
            transport, max_batch_size=self.options.max_batch_size
        )
        self.policy = AlertPolicy(
            fire_on_cached=self.options.fire_on_cached,
            fire_on_static=self.options.fire_on_static,
        )

    @property
    def transport(self) -> NotificationTransport:
        return self._transport

    def session(self) -> AsyncSession:
        return self._session_factory()

    def pricing_cycle(self, session: AsyncSession, with_alerts: bool = True) -> PricingCycle:
        """Build a pricing cycle whose repositories share ``session``."""
        history = SqlPriceHistoryRepository(session)
        evaluator = None
        if with_alerts:
            evaluator = AlertEvaluator(
                alert_repository=SqlAlertRepository(session),
                destination_repository=SqlDestinationRepository(session),
                notification_repository=SqlNotificationRepository(session),
                dispatcher=self.dispatcher,
                policy=self.policy,
                clock=self.clock,
            )
        return PricingCycle(
            resolver=self.resolver,
            change_calculator=ChangeCalculator(history, self.options.change_lookback),
            history_repository=history,
            alert_evaluator=evaluator,
            latest_store=self.latest_store,
            clock=self.clock,
        )

    def calibration_service(self, session: AsyncSession) -> CalibrationService:
        return CalibrationService(
            proxy_source=self._proxy_source,
            resolver=self.resolver,
            repository=SqlCalibrationRepository(session),
            clock=self.clock,
        )

    async def run_pricing_cycle(self) -> PricingCycleResult:
        """Run one full cycle: resolve, enrich, record and evaluate alerts."""
        async with self.session() as session:
            result = await self.pricing_cycle(session).run()
            await session.commit()
        return result

    async def get_spot_prices(self) -> PriceSnapshot:
        """Serve the latest snapshot, refreshing it when expired."""
        async with self.session() as session:
            snapshot = await self.pricing_cycle(session, with_alerts=False).get_spot_prices(
                self.options.spot_price_max_age
            )
            await session.commit()
        return snapshot

    async def run_calibration(self, force: bool = False) -> dict[ProxyInstrument, RatioResult]:
        """Calibrate proxy ratios that lack a value for today.

        Args:
            force: Recalibrate every instrument even if today's ratio exists.
        """
        async with self.session() as session:
            service = self.calibration_service(session)
            if force:
                return await service.calibrate()
            return await service.calibrate_if_needed()

    async def seed_cache(self) -> int:
        """Load the newest recorded price of each metal into the cache."""
        async with self.session() as session:
            history = SqlPriceHistoryRepository(session)
            records = []
            for metal in ALL_METALS:
                record = await history.get_latest(metal)
                if record is not None:
                    records.append(record)
        added = self.cache.seed(records)
        logger.info(f"Seeded last-known price cache with {added} metals")
        return added

    async def close(self) -> None:
        """Close every upstream client."""
        await self.resolver.close()
        await self._proxy_source.close()
        await self._transport.close()


def build_runtime(settings: Any = None, clock: Optional[Clock] = None) -> BullionRuntime:
    """Create the runtime from application settings.

    Args:
        settings: Application settings (defaults to ``get_settings()``).
        clock: Time source (defaults to the system clock).

    Returns:
        A runtime wired to the configured providers and database.
    """
    from app.bullion_tracker.infrastructure.db.session import get_async_session_local
    from app.bullion_tracker.infrastructure.external import (
        ExpoPushClient,
        YahooQuoteClient,
        create_default_registry,
    )
    from app.core.config import get_settings

    settings = settings or get_settings()
    registry = create_default_registry(
        metal_price_api_key=settings.metal_price_api_key or None,
        gold_api_key=settings.gold_api_key or None,
        timeout_seconds=settings.price_source_timeout_seconds,
    )
    return BullionRuntime(
        session_factory=get_async_session_local(),
        sources=registry.sources,
        proxy_source=YahooQuoteClient(timeout=settings.proxy_quote_timeout_seconds),
        transport=ExpoPushClient(
            access_token=settings.expo_access_token or None,
            timeout=settings.expo_push_timeout_seconds,
        ),
        options=RuntimeOptions.from_settings(settings),
        clock=clock,
    )
