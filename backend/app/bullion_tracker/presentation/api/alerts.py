"""Price alert API endpoints.

Implements owner-facing operations on price alerts:
- POST /api/price-alerts - Create new alert
- GET /api/price-alerts?owner_ref=... - List an owner's alerts
- PATCH /api/price-alerts/{alert_id} - Enable or disable an alert
- DELETE /api/price-alerts/{alert_id} - Delete an alert
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.bullion_tracker.application.dto.alert_dto import (
    AlertDTO,
    AlertListDTO,
    CreateAlertRequest,
    UpdateAlertRequest,
)
from app.bullion_tracker.application.exceptions import (
    AlertNotFoundError,
    PersistenceFailureError,
    UnsupportedAssetError,
)
from app.bullion_tracker.application.use_cases.manage_alerts import (
    CreateAlertUseCase,
    DeleteAlertUseCase,
    GetAlertsByOwnerUseCase,
    UpdateAlertUseCase,
)
from app.bullion_tracker.domain.repositories.alert_repository import AlertRepository
from app.bullion_tracker.infrastructure.db.session import get_db_session
from app.bullion_tracker.presentation.api.dependencies import get_alert_repository

router = APIRouter()


@router.post("/price-alerts", response_model=AlertDTO, status_code=status.HTTP_201_CREATED)
async def create_alert(
    request: CreateAlertRequest,
    alert_repository: AlertRepository = Depends(get_alert_repository),
    session: AsyncSession = Depends(get_db_session),
) -> AlertDTO:
    """Create a new price alert.

    The alert fires once, the first time the metal's price reaches the
    target from the requested direction.

    Args:
        request: Alert creation request with owner, metal, target and direction.
        alert_repository: Alert repository (injected).
        session: Database session (injected).

    Returns:
        AlertDTO representing the newly created alert.

    Raises:
        HTTPException: 400 if the target price is invalid.
        HTTPException: 503 if the alert could not be stored.
    """
    use_case = CreateAlertUseCase(alert_repository=alert_repository)

    try:
        result = await use_case.execute(request)
        await session.commit()
        return result
    except UnsupportedAssetError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        ) from e
    except PersistenceFailureError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.message,
        ) from e


@router.get("/price-alerts", response_model=AlertListDTO)
async def list_alerts(
    owner_ref: Annotated[str, Query(min_length=1, description="User or device identifier")],
    alert_repository: AlertRepository = Depends(get_alert_repository),
) -> AlertListDTO:
    """List an owner's alerts, newest first, including triggered ones.

    Args:
        owner_ref: Owner whose alerts are listed.
        alert_repository: Alert repository (injected).

    Returns:
        AlertListDTO with the owner's alerts.
    """
    use_case = GetAlertsByOwnerUseCase(alert_repository=alert_repository)
    return await use_case.execute(owner_ref)


@router.patch("/price-alerts/{alert_id}", response_model=AlertDTO)
async def update_alert(
    alert_id: Annotated[int, Path(description="Alert ID")],
    request: UpdateAlertRequest,
    alert_repository: AlertRepository = Depends(get_alert_repository),
    session: AsyncSession = Depends(get_db_session),
) -> AlertDTO:
    """Enable or disable an alert.

    Raises:
        HTTPException: 404 if alert not found.
    """
    use_case = UpdateAlertUseCase(alert_repository=alert_repository)

    try:
        result = await use_case.execute(alert_id, request)
        await session.commit()
        return result
    except AlertNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        ) from e


@router.delete("/price-alerts/{alert_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_alert(
    alert_id: Annotated[int, Path(description="Alert ID")],
    alert_repository: AlertRepository = Depends(get_alert_repository),
    session: AsyncSession = Depends(get_db_session),
) -> None:
    """Delete an alert and its notification history.

    Raises:
        HTTPException: 404 if alert not found.
    """
    use_case = DeleteAlertUseCase(alert_repository=alert_repository)

    deleted = await use_case.execute(alert_id)

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Alert with ID {alert_id} not found",
        )

    await session.commit()
