"""Notification transport interface for push delivery."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class DeliveryErrorCategory(Enum):
    """Why a single message could not be delivered."""

    INVALID_DESTINATION = "invalid_destination"
    TRANSPORT_FAILURE = "transport_failure"
    RATE_LIMITED = "rate_limited"


@dataclass(frozen=True)
class PushMessage:
    """A single push notification addressed to one destination token."""

    to: str
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)
    sound: Optional[str] = "default"
    priority: str = "high"


@dataclass(frozen=True)
class PushTicket:
    """Per-message acknowledgement returned by the transport.

    Attributes:
        ok: Whether the transport accepted the message.
        receipt_id: Identifier for later receipt polling.
        error_category: Failure category when not ok.
        error_detail: Transport-specific error text.
    """

    ok: bool
    receipt_id: Optional[str] = None
    error_category: Optional[DeliveryErrorCategory] = None
    error_detail: Optional[str] = None


@dataclass(frozen=True)
class PushReceipt:
    """Final delivery status for a previously accepted message."""

    receipt_id: str
    ok: bool
    error_category: Optional[DeliveryErrorCategory] = None
    error_detail: Optional[str] = None


class NotificationTransport(ABC):
    """Abstract delivery channel for push messages."""

    @abstractmethod
    def is_valid_destination(self, token: str) -> bool:
        """Check a destination token's format without contacting the transport."""
        ...

    @abstractmethod
    async def send_batch(self, messages: list[PushMessage]) -> list[PushTicket]:
        """Send one batch of messages.

        Args:
            messages: Messages to send, within the transport's batch limit.

        Returns:
            One ticket per message, in input order.

        Raises:
            DeliveryRejectedError: If the whole batch was rejected.
        """
        ...

    @abstractmethod
    async def get_receipts(self, receipt_ids: list[str]) -> dict[str, PushReceipt]:
        """Fetch delivery receipts for accepted messages."""
        ...

    @abstractmethod
    async def close(self) -> None:
        ...
