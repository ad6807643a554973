"""SQLAlchemy implementation of AlertRepository.

Provides async database operations for Alert entities using
SQLAlchemy 2.0 async patterns with asyncpg driver.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.bullion_tracker.application.exceptions import PersistenceFailureError
from app.bullion_tracker.domain.entities.alert import Alert
from app.bullion_tracker.domain.repositories.alert_repository import AlertRepository
from app.bullion_tracker.infrastructure.db.models import PriceAlertModel

logger = logging.getLogger(__name__)


class SqlAlertRepository(AlertRepository):
    """SQLAlchemy-based implementation of the AlertRepository interface."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with a database session.

        Args:
            session: An async SQLAlchemy session.
        """
        self._session = session

    async def get_by_id(self, alert_id: int) -> Optional[Alert]:
        """Retrieve an alert by its database ID."""
        stmt = select(PriceAlertModel).where(PriceAlertModel.id == alert_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_active(self) -> List[Alert]:
        """Retrieve all enabled, untriggered alerts."""
        stmt = select(PriceAlertModel).where(
            PriceAlertModel.enabled.is_(True),
            PriceAlertModel.triggered.is_(False),
        )
        result = await self._session.execute(stmt)
        models = result.scalars().all()
        return [self._to_entity(m) for m in models]

    async def get_by_owner(self, owner_ref: str) -> List[Alert]:
        """Retrieve all alerts for an owner, newest first."""
        stmt = (
            select(PriceAlertModel)
            .where(PriceAlertModel.owner_ref == owner_ref)
            .order_by(PriceAlertModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        models = result.scalars().all()
        return [self._to_entity(m) for m in models]

    async def save(self, alert: Alert) -> Alert:
        """Persist an alert entity.

        Creates a new record if alert.id is None, otherwise updates the
        owner-editable fields of the existing record.
        """
        try:
            if alert.id is None:
                model = self._to_model(alert)
                self._session.add(model)
                await self._session.flush()
                await self._session.refresh(model)
                return self._to_entity(model)

            stmt = select(PriceAlertModel).where(PriceAlertModel.id == alert.id)
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()
            if model is None:
                raise ValueError(f"Alert with id {alert.id} not found")

            model.metal = alert.asset
            model.target_price = alert.target_price
            model.direction = alert.direction
            model.enabled = alert.enabled
            # Note: triggered state only changes through mark_triggered

            await self._session.flush()
            return self._to_entity(model)
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise PersistenceFailureError("save alert", str(e)) from e

    async def set_enabled(self, alert_id: int, enabled: bool) -> bool:
        """Enable or disable an alert."""
        stmt = (
            update(PriceAlertModel)
            .where(PriceAlertModel.id == alert_id)
            .values(enabled=enabled)
        )
        try:
            result = await self._session.execute(stmt)
            await self._session.flush()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise PersistenceFailureError("update alert", str(e)) from e
        return result.rowcount > 0

    async def mark_triggered(
        self, alert_id: int, triggered_price: Decimal, triggered_at: datetime
    ) -> bool:
        """Conditionally mark an alert triggered and commit immediately.

        The WHERE clause makes the claim atomic: of several concurrent
        evaluations, exactly one sees a matched row.
        """
        stmt = (
            update(PriceAlertModel)
            .where(
                PriceAlertModel.id == alert_id,
                PriceAlertModel.triggered.is_(False),
                PriceAlertModel.enabled.is_(True),
            )
            .values(
                triggered=True,
                triggered_at=triggered_at,
                triggered_price=triggered_price,
            )
        )
        try:
            result = await self._session.execute(stmt)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise PersistenceFailureError("mark alert triggered", str(e)) from e

        claimed = result.rowcount == 1
        if claimed:
            logger.debug(f"Alert {alert_id} marked as triggered at ${triggered_price}")
        return claimed

    async def delete(self, alert_id: int) -> bool:
        """Delete an alert by its ID.

        Its notification audit rows are removed by the foreign key cascade.
        """
        stmt = delete(PriceAlertModel).where(PriceAlertModel.id == alert_id)
        try:
            result = await self._session.execute(stmt)
            await self._session.flush()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise PersistenceFailureError("delete alert", str(e)) from e
        return result.rowcount > 0

    def _to_entity(self, model: PriceAlertModel) -> Alert:
        """Convert a PriceAlertModel to an Alert domain entity."""
        return Alert(
            id=model.id,
            owner_ref=model.owner_ref,
            asset=model.metal,
            target_price=Decimal(str(model.target_price)),
            direction=model.direction,
            enabled=model.enabled,
            triggered=model.triggered,
            triggered_at=model.triggered_at,
            triggered_price=(
                Decimal(str(model.triggered_price))
                if model.triggered_price is not None
                else None
            ),
            created_at=model.created_at,
        )

    def _to_model(self, entity: Alert) -> PriceAlertModel:
        """Convert an Alert domain entity to a PriceAlertModel."""
        return PriceAlertModel(
            id=entity.id,
            owner_ref=entity.owner_ref,
            metal=entity.asset,
            target_price=entity.target_price,
            direction=entity.direction,
            enabled=entity.enabled,
            triggered=entity.triggered,
            triggered_at=entity.triggered_at,
            triggered_price=entity.triggered_price,
            created_at=entity.created_at,
        )
