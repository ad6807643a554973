"""Use case for delivering push notifications in batches.

Takes messages addressed to destination tokens, rejects malformed tokens
locally, and sends the rest through the notification transport in chunks
no larger than the transport's batch limit. Results are returned in the
same order as the input so callers can pair them with their own records.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from app.bullion_tracker.application.exceptions import DeliveryRejectedError
from app.bullion_tracker.application.interfaces.notification_transport import (
    DeliveryErrorCategory,
    NotificationTransport,
    PushMessage,
    PushReceipt,
    PushTicket,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_BATCH_SIZE = 100
RECEIPT_BATCH_SIZE = 1000


@dataclass(frozen=True)
class DispatchResult:
    """Delivery outcome for one message.

    Attributes:
        destination: The token the message was addressed to.
        success: Whether the transport accepted the message.
        receipt_id: Transport receipt id on success.
        error_category: Why delivery failed.
        error_detail: Transport-specific error text.
    """

    destination: str
    success: bool
    receipt_id: Optional[str] = None
    error_category: Optional[DeliveryErrorCategory] = None
    error_detail: Optional[str] = None

    @classmethod
    def from_ticket(cls, destination: str, ticket: PushTicket) -> "DispatchResult":
        if ticket.ok:
            return cls(destination, True, receipt_id=ticket.receipt_id)
        return cls(
            destination,
            False,
            error_category=ticket.error_category or DeliveryErrorCategory.TRANSPORT_FAILURE,
            error_detail=ticket.error_detail,
        )

    @classmethod
    def failure(
        cls, destination: str, category: DeliveryErrorCategory, detail: str
    ) -> "DispatchResult":
        return cls(destination, False, error_category=category, error_detail=detail)


def _chunks(items: Sequence, size: int) -> Iterable[Sequence]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


class NotificationDispatcher:
    """Application service sending push messages through a transport.

    ``dispatch`` never raises: a chunk that fails as a whole marks only its
    own messages as failed, and later chunks are still sent.
    """

    def __init__(
        self,
        transport: NotificationTransport,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            transport: Delivery channel.
            max_batch_size: Maximum messages per transport request.

        Raises:
            ValueError: If max_batch_size is not positive.
        """
        if max_batch_size <= 0:
            raise ValueError(f"max_batch_size must be positive, got {max_batch_size}")
        self._transport = transport
        self._max_batch_size = max_batch_size

    @property
    def max_batch_size(self) -> int:
        return self._max_batch_size

    async def dispatch(self, messages: Sequence[PushMessage]) -> list[DispatchResult]:
        """Send messages and report one result per message.

        Args:
            messages: Messages to deliver.

        Returns:
            Results parallel to ``messages``.
        """
        results: list[Optional[DispatchResult]] = [None] * len(messages)
        sendable: list[int] = []

        for index, message in enumerate(messages):
            if self._transport.is_valid_destination(message.to):
                sendable.append(index)
            else:
                logger.warning(f"Rejecting invalid push token: {message.to[:30]}")
                results[index] = DispatchResult.failure(
                    message.to,
                    DeliveryErrorCategory.INVALID_DESTINATION,
                    "Invalid token format",
                )

        for chunk in _chunks(sendable, self._max_batch_size):
            batch = [messages[i] for i in chunk]
            for index, result in zip(chunk, await self._send_chunk(batch)):
                results[index] = result

        sent = sum(1 for r in results if r is not None and r.success)
        if messages:
            logger.info(f"Dispatched {len(messages)} notifications: {sent} accepted")

        return [r for r in results if r is not None]

    async def check_receipts(self, receipt_ids: Sequence[str]) -> dict[str, PushReceipt]:
        """Poll delivery receipts for previously accepted messages.

        Receipts the transport has not produced yet are absent from the
        result. A failed poll is logged and leaves its ids absent.

        Args:
            receipt_ids: Receipt ids from successful DispatchResults.

        Returns:
            Mapping of receipt id to PushReceipt.
        """
        receipts: dict[str, PushReceipt] = {}
        for chunk in _chunks(list(receipt_ids), RECEIPT_BATCH_SIZE):
            try:
                receipts.update(await self._transport.get_receipts(list(chunk)))
            except DeliveryRejectedError as e:
                logger.error(f"Receipt check failed for {len(chunk)} ids: {e.message}")
        return receipts

    async def _send_chunk(self, batch: list[PushMessage]) -> list[DispatchResult]:
        try:
            tickets = await self._transport.send_batch(batch)
        except DeliveryRejectedError as e:
            category = (
                DeliveryErrorCategory.RATE_LIMITED
                if e.rate_limited
                else DeliveryErrorCategory.TRANSPORT_FAILURE
            )
            logger.error(f"Push batch of {len(batch)} rejected: {e.message}")
            return [DispatchResult.failure(m.to, category, e.reason) for m in batch]
        except Exception as e:
            logger.exception(f"Push batch of {len(batch)} failed: {e}")
            return [
                DispatchResult.failure(m.to, DeliveryErrorCategory.TRANSPORT_FAILURE, str(e))
                for m in batch
            ]

        results: list[DispatchResult] = []
        for position, message in enumerate(batch):
            if position < len(tickets):
                results.append(DispatchResult.from_ticket(message.to, tickets[position]))
            else:
                results.append(
                    DispatchResult.failure(
                        message.to,
                        DeliveryErrorCategory.TRANSPORT_FAILURE,
                        "No ticket returned",
                    )
                )
        return results
