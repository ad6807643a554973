"""Data transfer objects for application layer."""

from app.bullion_tracker.application.dto.alert_dto import (
    AlertCheckSummary,
    AlertDTO,
    AlertListDTO,
    CreateAlertRequest,
    UpdateAlertRequest,
)
from app.bullion_tracker.application.dto.destination_dto import (
    DestinationDTO,
    RegisterDestinationRequest,
)
from app.bullion_tracker.application.dto.price_dto import (
    CalibrationDTO,
    SpotPriceDTO,
    SpotPricesDTO,
)

__all__ = [
    # Price DTOs
    "SpotPriceDTO",
    "SpotPricesDTO",
    "CalibrationDTO",
    # Alert DTOs
    "CreateAlertRequest",
    "UpdateAlertRequest",
    "AlertDTO",
    "AlertListDTO",
    "AlertCheckSummary",
    # Destination DTOs
    "RegisterDestinationRequest",
    "DestinationDTO",
]
