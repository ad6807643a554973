"""Use case for calibrating proxy instrument ratios against spot prices.

Each proxy ETF share represents a fraction of an ounce of metal that
slowly erodes with the fund's expense ratio, so the share-to-spot ratio
is recalibrated daily using a live spot price as ground truth. The
stored ratios are then used to estimate historical spot prices from the
proxies' daily closes.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from app.bullion_tracker.application.exceptions import (
    CalibrationStaleError,
    HistoricalPriceUnavailableError,
    SourceUnavailableError,
    UnsupportedAssetError,
)
from app.bullion_tracker.application.interfaces.clock import Clock, SystemClock
from app.bullion_tracker.application.interfaces.proxy_quote_source import (
    ProxyClose,
    ProxyQuoteSource,
)
from app.bullion_tracker.application.use_cases.resolve_prices import (
    PriceResolver,
    is_usable_amount,
)
from app.bullion_tracker.domain.entities.calibration_ratio import CalibrationRatio
from app.bullion_tracker.domain.repositories.calibration_repository import (
    CalibrationRepository,
)
from app.bullion_tracker.domain.value_objects.metal import Metal
from app.bullion_tracker.domain.value_objects.proxy_instrument import ProxyInstrument
from app.bullion_tracker.domain.value_objects.resolved_price import ResolvedPrice

logger = logging.getLogger(__name__)

_RATIO_PRECISION = Decimal("0.00000001")
_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class RatioResult:
    """A ratio served to callers, with how it was obtained.

    Attributes:
        instrument: The proxy instrument.
        ratio: Instrument price / spot price.
        calibration: The stored row the ratio came from, if any.
        is_stale: True when the ratio was not calibrated on the requested date.
        is_default: True when no calibration exists and the constant is used.
    """

    instrument: ProxyInstrument
    ratio: Decimal
    calibration: Optional[CalibrationRatio] = None
    is_stale: bool = False
    is_default: bool = False


@dataclass(frozen=True)
class HistoricalSpotEstimate:
    """Spot price of a metal on a past date, estimated from its proxy.

    Attributes:
        asset: The metal.
        requested_date: The date asked for.
        close: The proxy close the estimate is based on; its trading date
            precedes ``requested_date`` when that day had no session.
        ratio: The ratio in effect on the close's trading date.
        spot_price: Estimated spot price in USD per troy ounce.
    """

    asset: Metal
    requested_date: date
    close: ProxyClose
    ratio: RatioResult
    spot_price: Decimal


class CalibrationService:
    """Application service maintaining daily proxy-to-spot ratios.

    A calibration needs both a proxy quote and a *live* spot price; when
    either is missing the service serves the most recent stored ratio
    (flagged stale) or, with no history, the instrument's default ratio.
    """

    def __init__(
        self,
        proxy_source: ProxyQuoteSource,
        resolver: PriceResolver,
        repository: CalibrationRepository,
        clock: Optional[Clock] = None,
        instruments: Iterable[ProxyInstrument] = tuple(ProxyInstrument),
    ) -> None:
        """Initialize the service.

        Args:
            proxy_source: Provider of current proxy instrument prices.
            resolver: Spot price resolver used as ground truth.
            repository: Repository for calibration rows.
            clock: Time source deciding the calibration date.
            instruments: Instruments calibrated by default.
        """
        self._proxy_source = proxy_source
        self._resolver = resolver
        self._repository = repository
        self._clock = clock or SystemClock()
        self._instruments = tuple(instruments)

    async def get_ratio(
        self, instrument: ProxyInstrument, on_date: Optional[date] = None
    ) -> RatioResult:
        """Get the ratio for an instrument, calibrating today's if missing.

        Args:
            instrument: The proxy instrument.
            on_date: Date of interest (defaults to today).

        Returns:
            RatioResult for the date.
        """
        today = self._clock.today()
        on_date = on_date or today

        stored = await self._repository.get_for_date(instrument, on_date)
        if stored is not None:
            return RatioResult(instrument, stored.instrument_ratio, stored)

        if on_date != today:
            return await self.ratio_for_date(instrument, on_date)

        results = await self.calibrate([instrument])
        return results[instrument]

    async def calibrate(
        self, instruments: Optional[Iterable[ProxyInstrument]] = None
    ) -> dict[ProxyInstrument, RatioResult]:
        """Calibrate instruments against the current live spot prices.

        Proxy quotes are fetched once for all instruments. Each instrument
        succeeds or falls back independently.

        Args:
            instruments: Instruments to calibrate (defaults to all).

        Returns:
            One RatioResult per instrument.

        Raises:
            PersistenceFailureError: If a calibration row could not be stored.
        """
        targets = list(instruments) if instruments is not None else list(self._instruments)
        today = self._clock.today()

        try:
            quotes = await self._proxy_source.fetch_quotes(targets)
        except SourceUnavailableError as e:
            logger.warning(f"Proxy quotes unavailable: {e.message}")
            quotes = {}

        spot_prices = await self._resolver.resolve_all({i.asset for i in targets})

        results: dict[ProxyInstrument, RatioResult] = {}
        for instrument in targets:
            try:
                results[instrument] = await self._calibrate_one(
                    instrument,
                    quotes.get(instrument),
                    spot_prices.get(instrument.asset),
                    today,
                )
            except CalibrationStaleError as e:
                fallback = await self.ratio_for_date(instrument, today)
                logger.warning(
                    f"{e.message}; serving "
                    f"{'default' if fallback.is_default else 'last known'} "
                    f"ratio {fallback.ratio}"
                )
                results[instrument] = fallback

        return results

    async def calibrate_if_needed(self) -> dict[ProxyInstrument, RatioResult]:
        """Calibrate only instruments that lack a ratio for today."""
        today = self._clock.today()
        missing = [
            instrument
            for instrument in self._instruments
            if await self._repository.get_for_date(instrument, today) is None
        ]
        if not missing:
            logger.debug(f"Ratios already calibrated for {today.isoformat()}")
            return {}
        return await self.calibrate(missing)

    async def ratio_for_date(self, instrument: ProxyInstrument, on_date: date) -> RatioResult:
        """Get the ratio in effect on a date.

        Uses the most recent calibration dated on or before ``on_date``,
        else the instrument's default ratio.
        """
        stored = await self._repository.get_latest_on_or_before(instrument, on_date)
        if stored is None:
            return RatioResult(
                instrument,
                instrument.default_ratio,
                is_stale=True,
                is_default=True,
            )
        return RatioResult(
            instrument,
            stored.instrument_ratio,
            stored,
            is_stale=stored.date < on_date,
        )

    async def estimate_spot(
        self, instrument: ProxyInstrument, proxy_price: Decimal, on_date: date
    ) -> Decimal:
        """Estimate a historical spot price from a proxy instrument price.

        Args:
            instrument: The proxy instrument the price is for.
            proxy_price: The instrument's price on ``on_date``.
            on_date: The date of the price.

        Returns:
            Estimated spot price in USD per troy ounce, rounded to cents.
        """
        result = await self.ratio_for_date(instrument, on_date)
        return self._to_spot(proxy_price, result)

    async def estimate_historical_spot(
        self, asset: Metal, on_date: date
    ) -> HistoricalSpotEstimate:
        """Estimate a metal's spot price on a past date from its proxy's close.

        The close of the last proxy session on or before ``on_date`` is
        divided by the ratio in effect on that session's date.

        Args:
            asset: The metal to price.
            on_date: Date of interest; must not be after today.

        Returns:
            HistoricalSpotEstimate with the close and ratio used.

        Raises:
            ValueError: If ``on_date`` is in the future.
            UnsupportedAssetError: If no proxy instrument tracks the metal.
            HistoricalPriceUnavailableError: If no proxy session is available.
            SourceUnavailableError: If the proxy provider could not be reached.
        """
        if on_date > self._clock.today():
            raise ValueError(f"Date {on_date.isoformat()} is in the future")

        instrument = ProxyInstrument.for_asset(asset)
        if instrument is None:
            raise UnsupportedAssetError(asset.value)

        close = await self._proxy_source.fetch_close(instrument, on_date)
        if close is None:
            raise HistoricalPriceUnavailableError(asset.value, on_date)

        ratio = await self.ratio_for_date(instrument, close.trading_date)
        spot_price = self._to_spot(close.price, ratio)
        logger.info(
            f"Estimated {asset.value} for {on_date.isoformat()}: ${spot_price} "
            f"({instrument.value} close ${close.price} on {close.trading_date.isoformat()} "
            f"/ ratio {ratio.ratio})"
        )
        return HistoricalSpotEstimate(asset, on_date, close, ratio, spot_price)

    @staticmethod
    def _to_spot(proxy_price: Decimal, ratio: RatioResult) -> Decimal:
        return (proxy_price / ratio.ratio).quantize(_CENTS, rounding=ROUND_HALF_UP)

    async def needs_calibration(self) -> bool:
        """Whether any instrument lacks a ratio for today."""
        today = self._clock.today()
        for instrument in self._instruments:
            if await self._repository.get_for_date(instrument, today) is None:
                return True
        return False

    async def _calibrate_one(
        self,
        instrument: ProxyInstrument,
        proxy_price: Optional[Decimal],
        spot: Optional[ResolvedPrice],
        today: date,
    ) -> RatioResult:
        if not is_usable_amount(proxy_price):
            raise CalibrationStaleError(instrument.value, "no proxy quote")

        if spot is None or not spot.provenance.is_live:
            kind = spot.provenance.kind.value if spot else "missing"
            raise CalibrationStaleError(
                instrument.value, f"no live {instrument.asset.value} spot price ({kind})"
            )

        ratio = CalibrationRatio(
            id=None,
            instrument=instrument,
            date=today,
            instrument_ratio=(proxy_price / spot.amount).quantize(_RATIO_PRECISION),  # type: ignore[operator]
            proxy_price=proxy_price,  # type: ignore[arg-type]
            spot_price_used=spot.amount,
            updated_at=self._clock.now(),
        )
        stored = await self._repository.upsert(ratio)

        logger.info(
            f"Calibrated {instrument.value} for {today.isoformat()}: "
            f"ratio={stored.instrument_ratio} (proxy ${proxy_price} / spot ${spot.amount})"
        )
        return RatioResult(instrument, stored.instrument_ratio, stored)
