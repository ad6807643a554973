"""Push token registration API endpoints.

- POST /api/push-tokens - Register or refresh a device push token
- DELETE /api/push-tokens/{token} - Unregister a token
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.bullion_tracker.application.dto.destination_dto import (
    DestinationDTO,
    RegisterDestinationRequest,
)
from app.bullion_tracker.application.exceptions import (
    InvalidDestinationError,
    PersistenceFailureError,
)
from app.bullion_tracker.application.interfaces.notification_transport import (
    NotificationTransport,
)
from app.bullion_tracker.application.use_cases.manage_destinations import (
    RegisterDestinationUseCase,
    RemoveDestinationUseCase,
)
from app.bullion_tracker.domain.repositories.destination_repository import (
    DestinationRepository,
)
from app.bullion_tracker.infrastructure.db.session import get_db_session
from app.bullion_tracker.presentation.api.dependencies import (
    get_destination_repository,
    get_notification_transport,
)

router = APIRouter()


@router.post("/push-tokens", response_model=DestinationDTO)
async def register_push_token(
    request: RegisterDestinationRequest,
    destination_repository: DestinationRepository = Depends(get_destination_repository),
    transport: NotificationTransport = Depends(get_notification_transport),
    session: AsyncSession = Depends(get_db_session),
) -> DestinationDTO:
    """Register a device push token for an owner.

    Registering a known token refreshes it and moves it to the given owner.

    Raises:
        HTTPException: 400 if the token format is invalid.
        HTTPException: 503 if the token could not be stored.
    """
    use_case = RegisterDestinationUseCase(
        destination_repository=destination_repository,
        transport=transport,
    )

    try:
        result = await use_case.execute(request)
        await session.commit()
        return result
    except InvalidDestinationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        ) from e
    except PersistenceFailureError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.message,
        ) from e


@router.delete("/push-tokens/{token}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_push_token(
    token: Annotated[str, Path(description="Push token to unregister")],
    destination_repository: DestinationRepository = Depends(get_destination_repository),
    session: AsyncSession = Depends(get_db_session),
) -> None:
    """Unregister a push token.

    Raises:
        HTTPException: 404 if the token is not registered.
    """
    use_case = RemoveDestinationUseCase(destination_repository=destination_repository)

    if not await use_case.execute(token):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Push token not registered",
        )

    await session.commit()
