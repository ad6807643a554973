# Domain layer - pure business rules, no framework dependencies

from app.bullion_tracker.domain.entities import (
    Alert,
    AlertDirection,
    CalibrationRatio,
    NotificationRecord,
    PriceHistoryRecord,
    PushDestination,
)
from app.bullion_tracker.domain.value_objects import (
    ALL_METALS,
    Metal,
    PriceChange,
    Provenance,
    ProvenanceKind,
    ProxyInstrument,
    ResolvedPrice,
)

__all__ = [
    # Entities
    "Alert",
    "AlertDirection",
    "CalibrationRatio",
    "NotificationRecord",
    "PriceHistoryRecord",
    "PushDestination",
    # Value objects
    "ALL_METALS",
    "Metal",
    "PriceChange",
    "Provenance",
    "ProvenanceKind",
    "ProxyInstrument",
    "ResolvedPrice",
]
