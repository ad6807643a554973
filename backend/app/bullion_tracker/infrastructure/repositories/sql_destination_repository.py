"""SQLAlchemy implementation of DestinationRepository."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.bullion_tracker.application.exceptions import PersistenceFailureError
from app.bullion_tracker.domain.entities.push_destination import PushDestination
from app.bullion_tracker.domain.repositories.destination_repository import (
    DestinationRepository,
)
from app.bullion_tracker.infrastructure.db.models import PushTokenModel


class SqlDestinationRepository(DestinationRepository):
    """SQLAlchemy-based implementation of the DestinationRepository interface."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with a database session.

        Args:
            session: An async SQLAlchemy session.
        """
        self._session = session

    async def register(self, destination: PushDestination) -> PushDestination:
        """Insert a token, or refresh the existing row for the same token."""
        stmt = select(PushTokenModel).where(PushTokenModel.token == destination.token)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        now = datetime.now(timezone.utc)
        try:
            if model is None:
                model = self._to_model(destination)
                model.last_active = now
                self._session.add(model)
            else:
                model.owner_ref = destination.owner_ref
                model.platform = destination.platform or model.platform
                model.app_version = destination.app_version or model.app_version
                model.last_active = now

            await self._session.flush()
            await self._session.refresh(model)
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise PersistenceFailureError("register push token", str(e)) from e

        return self._to_entity(model)

    async def remove(self, token: str) -> bool:
        """Remove a destination by token."""
        stmt = delete(PushTokenModel).where(PushTokenModel.token == token)
        try:
            result = await self._session.execute(stmt)
            await self._session.flush()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise PersistenceFailureError("remove push token", str(e)) from e
        return result.rowcount > 0

    async def get_latest_for_owner(self, owner_ref: str) -> Optional[PushDestination]:
        """Get the owner's most recently active destination."""
        stmt = (
            select(PushTokenModel)
            .where(PushTokenModel.owner_ref == owner_ref)
            .order_by(desc(PushTokenModel.last_active))
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    def _to_entity(self, model: PushTokenModel) -> PushDestination:
        """Convert a PushTokenModel to a PushDestination domain entity."""
        return PushDestination(
            id=model.id,
            owner_ref=model.owner_ref,
            token=model.token,
            platform=model.platform,
            app_version=model.app_version,
            created_at=model.created_at,
            last_active=model.last_active,
        )

    def _to_model(self, entity: PushDestination) -> PushTokenModel:
        """Convert a PushDestination domain entity to a PushTokenModel."""
        return PushTokenModel(
            id=entity.id,
            owner_ref=entity.owner_ref,
            token=entity.token,
            platform=entity.platform,
            app_version=entity.app_version,
            created_at=entity.created_at,
            last_active=entity.last_active,
        )
