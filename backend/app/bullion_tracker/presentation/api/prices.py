"""Spot price and calibration API endpoints.

- GET /api/spot-prices - Latest resolved price of every metal
- GET /api/calibration/{instrument} - Proxy ETF to spot ratio
- GET /api/historical-spot - Spot price on a past date, estimated from proxy ETFs
"""

from datetime import date, datetime, timedelta, timezone
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.bullion_tracker.application.dto.price_dto import (
    CalibrationDTO,
    HistoricalSpotDTO,
    SpotPriceDTO,
    SpotPricesDTO,
)
from app.bullion_tracker.application.exceptions import (
    HistoricalPriceUnavailableError,
    PersistenceFailureError,
    SourceUnavailableError,
    UnsupportedAssetError,
)
from app.bullion_tracker.application.use_cases.calibrate_ratios import (
    CalibrationService,
    RatioResult,
)
from app.bullion_tracker.application.use_cases.run_pricing_cycle import PricingCycle
from app.bullion_tracker.domain.value_objects.metal import Metal
from app.bullion_tracker.domain.value_objects.proxy_instrument import ProxyInstrument
from app.bullion_tracker.infrastructure.db.session import get_db_session
from app.bullion_tracker.presentation.api.dependencies import (
    get_calibration_service,
    get_pricing_cycle,
)
from app.core.config import Settings, get_settings

router = APIRouter()


def _parse_instrument(symbol: str) -> ProxyInstrument:
    try:
        return ProxyInstrument(symbol.upper())
    except ValueError as e:
        raise UnsupportedAssetError(symbol) from e


def _parse_metal(name: str) -> Metal:
    try:
        return Metal(name.strip().lower())
    except ValueError as e:
        raise UnsupportedAssetError(name) from e


def _to_calibration_dto(result: RatioResult) -> CalibrationDTO:
    calibration = result.calibration
    return CalibrationDTO(
        instrument=result.instrument.value,
        metal=result.instrument.asset.value,
        ratio=result.ratio,
        calibrated_on=calibration.date if calibration else None,
        proxy_price=calibration.proxy_price if calibration else None,
        spot_price=calibration.spot_price_used if calibration else None,
        is_stale=result.is_stale,
        is_default=result.is_default,
    )


@router.get("/spot-prices", response_model=SpotPricesDTO)
async def get_spot_prices(
    cycle: PricingCycle = Depends(get_pricing_cycle),
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> SpotPricesDTO:
    """Get the current spot price of every metal.

    Serves the latest snapshot produced by the pricing cycle when it is
    recent enough; otherwise resolves prices on demand. Always answers:
    when every provider is down the prices carry cached or static
    provenance.

    Returns:
        SpotPricesDTO with one entry per metal.
    """
    snapshot = await cycle.get_spot_prices(
        timedelta(seconds=settings.spot_price_max_age_seconds)
    )
    await session.commit()

    return SpotPricesDTO(
        prices=[SpotPriceDTO.from_resolved(p) for p in snapshot.prices.values()],
        all_live=snapshot.all_live,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/calibration/{instrument}", response_model=CalibrationDTO)
async def get_calibration(
    instrument: Annotated[str, Path(description="Proxy ETF symbol (SLV, GLD, PPLT, PALL)")],
    on_date: Annotated[
        Optional[date],
        Query(alias="date", description="Date of interest (defaults to today)"),
    ] = None,
    service: CalibrationService = Depends(get_calibration_service),
) -> CalibrationDTO:
    """Get the proxy-to-spot ratio of an instrument.

    Today's ratio is calibrated on demand when missing. When calibration
    is impossible the most recent ratio is served and flagged stale.

    Raises:
        HTTPException: 404 if the instrument is not tracked.
        HTTPException: 503 if the ratio could not be stored.
    """
    try:
        result = await service.get_ratio(_parse_instrument(instrument), on_date)
    except UnsupportedAssetError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        ) from e
    except PersistenceFailureError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.message,
        ) from e

    return _to_calibration_dto(result)


@router.get("/historical-spot", response_model=HistoricalSpotDTO)
async def get_historical_spot(
    on_date: Annotated[date, Query(alias="date", description="Date of interest (YYYY-MM-DD)")],
    metal: Annotated[str, Query(description="Metal name (gold, silver, platinum, palladium)")] = "gold",
    service: CalibrationService = Depends(get_calibration_service),
) -> HistoricalSpotDTO:
    """Estimate a metal's spot price on a past date.

    The metal's proxy ETF close on that date (or the last session before
    it) is converted with the calibration ratio in effect at the time.

    Raises:
        HTTPException: 400 if the metal is unknown or the date is in the future.
        HTTPException: 404 if no proxy close is available for the date.
        HTTPException: 503 if the proxy provider is unreachable.
    """
    try:
        estimate = await service.estimate_historical_spot(_parse_metal(metal), on_date)
    except UnsupportedAssetError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        ) from e
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    except HistoricalPriceUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        ) from e
    except SourceUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.message,
        ) from e

    return HistoricalSpotDTO(
        metal=estimate.asset.value,
        requested_date=estimate.requested_date,
        used_date=estimate.close.trading_date,
        price=estimate.spot_price,
        instrument=estimate.close.instrument.value,
        proxy_close=estimate.close.price,
        ratio=estimate.ratio.ratio,
        ratio_is_default=estimate.ratio.is_default,
    )
