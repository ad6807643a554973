"""PushDestination entity for registered notification endpoints."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass
class PushDestination:
    """A device push token registered by an alert owner.

    The most recently active destination of an owner receives that owner's
    alert notifications.

    Attributes:
        id: Database identifier (None for unsaved entities).
        owner_ref: Opaque owner reference shared with the owner's alerts.
        token: Transport-specific destination token.
        platform: Device platform ("ios" or "android"), if reported.
        app_version: Client version, if reported.
        created_at: When the token was first registered.
        last_active: When the owner last refreshed the token.
    """

    id: Optional[int]
    owner_ref: str
    token: str
    platform: Optional[str] = None
    app_version: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_active: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def touch(self) -> None:
        """Record that the owner just refreshed this destination."""
        self.last_active = datetime.now(timezone.utc)
