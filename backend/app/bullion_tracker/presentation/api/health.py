"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.bullion_tracker.application.use_cases.run_pricing_cycle import LatestPriceStore
from app.bullion_tracker.presentation.api.dependencies import get_latest_store

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: datetime
    version: str
    last_updated: Optional[datetime] = None
    all_live: Optional[bool] = None


@router.get("/health", response_model=HealthResponse)
async def health_check(
    latest_store: LatestPriceStore = Depends(get_latest_store),
) -> HealthResponse:
    """Check application health status.

    Returns:
        Health status with the time of the last price resolution.
    """
    snapshot = latest_store.snapshot
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version="0.1.0",
        last_updated=snapshot.resolved_at if snapshot else None,
        all_live=snapshot.all_live if snapshot else None,
    )


@router.get("/ready")
async def readiness_check() -> dict[str, str]:
    """Check if application is ready to serve requests.

    Returns:
        Readiness status.
    """
    return {"status": "ready"}
