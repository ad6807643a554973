"""Database infrastructure components.

This module exports SQLAlchemy models, session management utilities,
and the Base class for ORM model definitions.
"""

from app.bullion_tracker.infrastructure.db.models import (
    Base,
    CalibrationRatioModel,
    NotificationLogModel,
    PriceAlertModel,
    PriceHistoryModel,
    PushTokenModel,
)
from app.bullion_tracker.infrastructure.db.session import (
    dispose_engine,
    get_async_database_url,
    get_async_session_local,
    get_db_session,
    get_engine,
)

__all__ = [
    # Base class
    "Base",
    # Models
    "PriceHistoryModel",
    "CalibrationRatioModel",
    "PriceAlertModel",
    "PushTokenModel",
    "NotificationLogModel",
    # Session utilities
    "get_engine",
    "get_async_session_local",
    "get_async_database_url",
    "get_db_session",
    "dispose_engine",
]
