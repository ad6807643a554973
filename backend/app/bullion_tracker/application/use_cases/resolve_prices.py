"""Use case for resolving the current spot price of each metal.

Implements the fallback chain that turns several unreliable upstream
providers into one trustworthy price per metal:

1. live sources, tried once each in priority order
2. last-known-good cache (prices from earlier live resolutions)
3. hardcoded static prices

Each tier is consulted only for the metals the previous tiers could not
price. A failure moves on to the next tier immediately; retrying happens
on the next scheduled cycle, never inside one.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from app.bullion_tracker.application.interfaces.clock import Clock, SystemClock
from app.bullion_tracker.application.interfaces.price_source import (
    PriceQuote,
    PriceSource,
)
from app.bullion_tracker.domain.entities.price_history_record import PriceHistoryRecord
from app.bullion_tracker.domain.value_objects.metal import ALL_METALS, Metal
from app.bullion_tracker.domain.value_objects.price_change import PriceChange
from app.bullion_tracker.domain.value_objects.resolved_price import (
    Provenance,
    ResolvedPrice,
)

logger = logging.getLogger(__name__)

STATIC_FALLBACK_PRICES: dict[Metal, Decimal] = {
    Metal.GOLD: Decimal("5100"),
    Metal.SILVER: Decimal("107"),
    Metal.PLATINUM: Decimal("2700"),
    Metal.PALLADIUM: Decimal("2000"),
}


def is_usable_amount(amount: Optional[Decimal]) -> bool:
    """A quoted amount is usable when it is a finite, positive number."""
    return amount is not None and amount.is_finite() and amount > 0


class LastKnownPriceCache:
    """Most recent live price of each metal.

    One instance is created by the runtime and shared by reference with
    every resolver. Only live resolutions are stored; the cache is read
    only when every live source has failed for a metal.
    """

    def __init__(self) -> None:
        self._prices: dict[Metal, ResolvedPrice] = {}

    def get(self, asset: Metal) -> Optional[ResolvedPrice]:
        return self._prices.get(asset)

    def put(self, price: ResolvedPrice) -> None:
        """Store a live price, replacing the previous entry for its metal.

        Raises:
            ValueError: If the price did not come from a live source.
        """
        if not price.provenance.is_live:
            raise ValueError(
                f"Only live prices can be cached, got {price.provenance.kind.value}"
            )
        self._prices[price.asset] = price

    def seed(self, records: Iterable[PriceHistoryRecord]) -> int:
        """Populate empty entries from persisted history.

        Used at startup so a restart does not drop straight to static
        prices when the providers are down. Existing entries are kept.

        Args:
            records: History rows, typically the newest row per metal.

        Returns:
            Number of entries added.
        """
        added = 0
        for record in records:
            if record.asset in self._prices or not is_usable_amount(record.amount):
                continue
            self._prices[record.asset] = ResolvedPrice(
                asset=record.asset,
                amount=record.amount,
                timestamp=record.timestamp,
                provenance=Provenance.live(record.source),
            )
            added += 1
        return added

    def clear(self) -> None:
        self._prices.clear()

    def __len__(self) -> int:
        return len(self._prices)

    def __contains__(self, asset: object) -> bool:
        return asset in self._prices


class PriceResolver:
    """Application service resolving one price per metal per cycle.

    ``resolve_all`` never raises: every requested metal receives a price,
    tagged with the tier that supplied it. A metal is never resolved twice
    at once: overlapping calls join the in-flight resolution of the metals
    already being priced and start a new one only for the rest.
    """

    def __init__(
        self,
        sources: Sequence[PriceSource],
        cache: LastKnownPriceCache,
        static_prices: Optional[dict[Metal, Decimal]] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            sources: Live sources in priority order.
            cache: Shared last-known-good cache.
            static_prices: Last-resort prices, merged over STATIC_FALLBACK_PRICES.
            clock: Time source for resolution timestamps.
        """
        self._sources = list(sources)
        self._cache = cache
        self._static_prices = {**STATIC_FALLBACK_PRICES, **(static_prices or {})}
        self._clock = clock or SystemClock()
        self._in_flight: dict[Metal, asyncio.Future] = {}

    @property
    def sources(self) -> list[PriceSource]:
        return list(self._sources)

    @property
    def cache(self) -> LastKnownPriceCache:
        return self._cache

    async def resolve_all(
        self, assets: Iterable[Metal] = ALL_METALS
    ) -> dict[Metal, ResolvedPrice]:
        """Resolve a price for every requested metal.

        Args:
            assets: Metals to price (defaults to all tracked metals).

        Returns:
            Mapping containing every requested metal.
        """
        key = self._request_key(assets)
        if not key:
            return {}

        tasks: dict[Metal, asyncio.Future] = {
            asset: self._in_flight[asset] for asset in key if asset in self._in_flight
        }
        if tasks:
            logger.debug(f"Joining in-flight resolution for {[a.value for a in tasks]}")

        fresh = tuple(asset for asset in key if asset not in tasks)
        if fresh:
            task = asyncio.ensure_future(self._resolve(fresh))
            for asset in fresh:
                self._in_flight[asset] = task
                tasks[asset] = task
            task.add_done_callback(lambda done: self._release(fresh, done))

        resolved: dict[Metal, ResolvedPrice] = {}
        for task in set(tasks.values()):
            # Shielded so one cancelled caller does not cancel the shared work
            resolved.update(await asyncio.shield(task))
        return {asset: resolved[asset] for asset in key}

    async def resolve(self, asset: Metal) -> ResolvedPrice:
        """Resolve the price of a single metal."""
        prices = await self.resolve_all([asset])
        return prices[asset]

    async def close(self) -> None:
        for source in self._sources:
            await source.close()

    def _release(self, assets: tuple[Metal, ...], task: asyncio.Future) -> None:
        for asset in assets:
            if self._in_flight.get(asset) is task:
                del self._in_flight[asset]

    @staticmethod
    def _request_key(assets: Iterable[Metal]) -> tuple[Metal, ...]:
        requested = set(assets)
        return tuple(metal for metal in Metal if metal in requested)

    async def _resolve(self, assets: tuple[Metal, ...]) -> dict[Metal, ResolvedPrice]:
        resolved: dict[Metal, ResolvedPrice] = {}
        pending = list(assets)

        for source in self._sources:
            if not pending:
                break

            quote = await self._fetch_from(source, pending)
            if quote is None:
                continue

            for asset in list(pending):
                price = self._live_price(source.source_name, quote, asset)
                if price is None:
                    continue
                resolved[asset] = price
                self._cache.put(price)
                pending.remove(asset)

        for asset in pending:
            resolved[asset] = self._fallback_price(asset)

        summary = ", ".join(
            f"{asset.value}=${resolved[asset].amount} ({resolved[asset].provenance})"
            for asset in assets
        )
        logger.info(f"Resolved prices: {summary}")
        return resolved

    async def _fetch_from(
        self, source: PriceSource, pending: list[Metal]
    ) -> Optional[PriceQuote]:
        """Query one source, converting every failure into None."""
        try:
            result = await source.fetch(list(pending))
        except Exception as e:
            # Adapters report errors through FetchResult; anything raised is a bug
            logger.exception(f"Source {source.source_name} raised unexpectedly: {e}")
            return None

        if result.quote is None:
            logger.warning(f"Source {source.source_name} failed: {result.error}")
            return None

        return result.quote

    def _live_price(
        self, source_name: str, quote: PriceQuote, asset: Metal
    ) -> Optional[ResolvedPrice]:
        amount = quote.amounts.get(asset)
        if not is_usable_amount(amount):
            if amount is not None:
                logger.warning(f"Discarding unusable {asset.value} price {amount} from {source_name}")
            return None

        price = ResolvedPrice(
            asset=asset,
            amount=amount,  # type: ignore[arg-type]
            timestamp=quote.timestamp,
            provenance=Provenance.live(source_name),
        )

        native = quote.changes.get(asset)
        if native is not None:
            price = price.with_change(
                PriceChange(
                    amount=native.amount,
                    percent=native.percent,
                    baseline_amount=native.previous_close,
                )
            )
        return price

    def _fallback_price(self, asset: Metal) -> ResolvedPrice:
        now = self._clock.now()

        cached = self._cache.get(asset)
        if cached is not None:
            logger.warning(
                f"All live sources failed for {asset.value}, using cached "
                f"${cached.amount} from {cached.timestamp.isoformat()}"
            )
            return ResolvedPrice(
                asset=asset,
                amount=cached.amount,
                timestamp=now,
                provenance=Provenance.cached(),
            )

        amount = self._static_prices[asset]
        logger.warning(
            f"All live sources failed for {asset.value} and no cached price, "
            f"using static ${amount}"
        )
        return ResolvedPrice(
            asset=asset,
            amount=amount,
            timestamp=now,
            provenance=Provenance.static(),
        )
