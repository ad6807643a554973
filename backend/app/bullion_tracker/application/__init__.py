"""Application layer - use cases and orchestration.

This layer contains:
- Interfaces: Ports for price sources, proxy quotes, push transport and time
- DTOs: Data Transfer Objects for API input/output
- Use Cases: Application services that orchestrate domain logic
- Exceptions: Application-level error types
"""

from app.bullion_tracker.application.exceptions import (
    AlertNotFoundError,
    ApplicationError,
    CalibrationStaleError,
    DeliveryRejectedError,
    InvalidDestinationError,
    NoBaselineDataError,
    PersistenceFailureError,
    SourceUnavailableError,
    UnsupportedAssetError,
)

__all__ = [
    "ApplicationError",
    "SourceUnavailableError",
    "NoBaselineDataError",
    "CalibrationStaleError",
    "DeliveryRejectedError",
    "PersistenceFailureError",
    "AlertNotFoundError",
    "InvalidDestinationError",
    "UnsupportedAssetError",
]
