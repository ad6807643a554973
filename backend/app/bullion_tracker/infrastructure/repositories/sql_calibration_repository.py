"""SQLAlchemy implementation of CalibrationRepository.

Upserts use PostgreSQL's INSERT ... ON CONFLICT so that concurrent
calibrations of the same (instrument, date) never produce duplicates.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import desc, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.bullion_tracker.application.exceptions import PersistenceFailureError
from app.bullion_tracker.domain.entities.calibration_ratio import CalibrationRatio
from app.bullion_tracker.domain.repositories.calibration_repository import (
    CalibrationRepository,
)
from app.bullion_tracker.domain.value_objects.proxy_instrument import ProxyInstrument
from app.bullion_tracker.infrastructure.db.models import CalibrationRatioModel


class SqlCalibrationRepository(CalibrationRepository):
    """SQLAlchemy-based implementation of the CalibrationRepository interface."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with a database session.

        Args:
            session: An async SQLAlchemy session.
        """
        self._session = session

    async def upsert(self, ratio: CalibrationRatio) -> CalibrationRatio:
        """Insert the ratio or overwrite the row for its (instrument, date)."""
        values = {
            "instrument": ratio.instrument,
            "metal": ratio.instrument.asset,
            "date": ratio.date,
            "ratio": ratio.instrument_ratio,
            "proxy_price": ratio.proxy_price,
            "spot_price_used": ratio.spot_price_used,
            "updated_at": ratio.updated_at,
        }
        stmt = insert(CalibrationRatioModel).values(**values)
        stmt = stmt.on_conflict_do_update(
            constraint="uq_calibration_ratios_instrument_date",
            set_={
                "ratio": stmt.excluded.ratio,
                "proxy_price": stmt.excluded.proxy_price,
                "spot_price_used": stmt.excluded.spot_price_used,
                "updated_at": stmt.excluded.updated_at,
            },
        ).returning(CalibrationRatioModel)

        try:
            result = await self._session.execute(
                stmt, execution_options={"populate_existing": True}
            )
            model = result.scalar_one()
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise PersistenceFailureError("upsert calibration ratio", str(e)) from e

        return self._to_entity(model)

    async def get_for_date(
        self, instrument: ProxyInstrument, on_date: date
    ) -> Optional[CalibrationRatio]:
        """Get the ratio calibrated exactly on a date."""
        stmt = select(CalibrationRatioModel).where(
            CalibrationRatioModel.instrument == instrument,
            CalibrationRatioModel.date == on_date,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_latest_on_or_before(
        self, instrument: ProxyInstrument, on_date: date
    ) -> Optional[CalibrationRatio]:
        """Get the most recent ratio dated on or before a date."""
        stmt = (
            select(CalibrationRatioModel)
            .where(
                CalibrationRatioModel.instrument == instrument,
                CalibrationRatioModel.date <= on_date,
            )
            .order_by(desc(CalibrationRatioModel.date))
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    def _to_entity(self, model: CalibrationRatioModel) -> CalibrationRatio:
        """Convert a CalibrationRatioModel to a CalibrationRatio domain entity."""
        return CalibrationRatio(
            id=model.id,
            instrument=model.instrument,
            date=model.date,
            instrument_ratio=Decimal(str(model.ratio)),
            proxy_price=Decimal(str(model.proxy_price)),
            spot_price_used=Decimal(str(model.spot_price_used)),
            updated_at=model.updated_at,
        )
