"""SQLAlchemy implementation of PriceHistoryRepository.

Provides async database operations for PriceHistoryRecord entities using
SQLAlchemy 2.0 async patterns with asyncpg driver.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.bullion_tracker.application.exceptions import PersistenceFailureError
from app.bullion_tracker.domain.entities.price_history_record import PriceHistoryRecord
from app.bullion_tracker.domain.repositories.price_history_repository import (
    PriceHistoryRepository,
)
from app.bullion_tracker.domain.value_objects.metal import Metal
from app.bullion_tracker.infrastructure.db.models import PriceHistoryModel


class SqlPriceHistoryRepository(PriceHistoryRepository):
    """SQLAlchemy-based implementation of the PriceHistoryRepository interface."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with a database session.

        Args:
            session: An async SQLAlchemy session.
        """
        self._session = session

    async def append(self, records: List[PriceHistoryRecord]) -> List[PriceHistoryRecord]:
        """Persist multiple history records in a single operation."""
        if not records:
            return []

        models = [self._to_model(r) for r in records]
        try:
            self._session.add_all(models)
            await self._session.flush()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise PersistenceFailureError("append price history", str(e)) from e

        return [self._to_entity(m) for m in models]

    async def find_closest(
        self,
        asset: Metal,
        target: datetime,
        max_distance: timedelta,
    ) -> Optional[PriceHistoryRecord]:
        """Get the latest record in [target - max_distance, target]."""
        stmt = (
            select(PriceHistoryModel)
            .where(
                PriceHistoryModel.metal == asset,
                PriceHistoryModel.timestamp <= target,
                PriceHistoryModel.timestamp >= target - max_distance,
            )
            .order_by(desc(PriceHistoryModel.timestamp))
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_latest(self, asset: Metal) -> Optional[PriceHistoryRecord]:
        """Get the most recent record for a metal."""
        stmt = (
            select(PriceHistoryModel)
            .where(PriceHistoryModel.metal == asset)
            .order_by(desc(PriceHistoryModel.timestamp))
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    def _to_entity(self, model: PriceHistoryModel) -> PriceHistoryRecord:
        """Convert a PriceHistoryModel to a PriceHistoryRecord domain entity."""
        return PriceHistoryRecord(
            id=model.id,
            asset=model.metal,
            amount=Decimal(str(model.price)),
            timestamp=model.timestamp,
            source=model.source,
        )

    def _to_model(self, entity: PriceHistoryRecord) -> PriceHistoryModel:
        """Convert a PriceHistoryRecord domain entity to a PriceHistoryModel."""
        return PriceHistoryModel(
            id=entity.id,
            metal=entity.asset,
            price=entity.amount,
            timestamp=entity.timestamp,
            source=entity.source,
        )
