"""Data Transfer Objects for push destination registration."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class RegisterDestinationRequest(BaseModel):
    """Request payload for registering a device push token."""

    owner_ref: str = Field(min_length=1, max_length=255, description="User or device identifier")
    token: str = Field(min_length=1, max_length=255, description="Expo push token")
    platform: Optional[str] = Field(default=None, pattern="^(ios|android)$", description="Device platform")
    app_version: Optional[str] = Field(default=None, max_length=50, description="Client app version")


class DestinationDTO(BaseModel):
    """Registered push destination for API responses."""

    model_config = {"from_attributes": True}

    owner_ref: str = Field(description="Owner of the destination")
    token: str = Field(description="Expo push token")
    platform: Optional[str] = Field(default=None, description="Device platform")
    app_version: Optional[str] = Field(default=None, description="Client app version")
    last_active: datetime = Field(description="When the token was last refreshed (UTC)")
