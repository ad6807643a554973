"""SQLAlchemy implementation of NotificationRepository."""

from decimal import Decimal
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.bullion_tracker.application.exceptions import PersistenceFailureError
from app.bullion_tracker.domain.entities.notification_record import NotificationRecord
from app.bullion_tracker.domain.repositories.notification_repository import (
    NotificationRepository,
)
from app.bullion_tracker.infrastructure.db.models import NotificationLogModel


class SqlNotificationRepository(NotificationRepository):
    """SQLAlchemy-based implementation of the NotificationRepository interface."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with a database session.

        Args:
            session: An async SQLAlchemy session.
        """
        self._session = session

    async def append(self, records: List[NotificationRecord]) -> List[NotificationRecord]:
        """Insert audit rows and commit them with the cycle's claims."""
        if not records:
            return []

        models = [self._to_model(r) for r in records]
        try:
            self._session.add_all(models)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise PersistenceFailureError("append notification log", str(e)) from e

        return [self._to_entity(m) for m in models]

    async def get_for_alert(self, alert_id: int) -> List[NotificationRecord]:
        """Get every audit row recorded for an alert, oldest first."""
        stmt = (
            select(NotificationLogModel)
            .where(NotificationLogModel.alert_id == alert_id)
            .order_by(NotificationLogModel.sent_at.asc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars().all()]

    def _to_entity(self, model: NotificationLogModel) -> NotificationRecord:
        """Convert a NotificationLogModel to a NotificationRecord domain entity."""
        return NotificationRecord(
            id=model.id,
            alert_id=model.alert_id,
            destination_token=model.push_token,
            asset=model.metal,
            target_price=Decimal(str(model.target_price)),
            requested_price=Decimal(str(model.actual_price)),
            direction=model.direction,
            delivery_success=model.success,
            error_detail=model.error_message,
            receipt_id=model.receipt_id,
            sent_at=model.sent_at,
        )

    def _to_model(self, entity: NotificationRecord) -> NotificationLogModel:
        """Convert a NotificationRecord domain entity to a NotificationLogModel."""
        return NotificationLogModel(
            id=entity.id,
            alert_id=entity.alert_id,
            push_token=entity.destination_token,
            metal=entity.asset,
            target_price=entity.target_price,
            actual_price=entity.requested_price,
            direction=entity.direction,
            success=entity.delivery_success,
            error_message=entity.error_detail[:500] if entity.error_detail else None,
            receipt_id=entity.receipt_id,
            sent_at=entity.sent_at,
        )
