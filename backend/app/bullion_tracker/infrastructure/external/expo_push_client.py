"""Expo push service client for delivering notifications to mobile devices.

Expo push documentation: https://docs.expo.dev/push-notifications/sending-notifications/
Messages are sent in batches of up to 100; each accepted message yields a
ticket whose id can later be exchanged for a delivery receipt.
"""

import logging
from typing import Any, Optional

import httpx

from app.bullion_tracker.application.exceptions import DeliveryRejectedError
from app.bullion_tracker.application.interfaces.notification_transport import (
    DeliveryErrorCategory,
    NotificationTransport,
    PushMessage,
    PushReceipt,
    PushTicket,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
EXPO_MAX_BATCH_SIZE = 100

# Expo error codes and the delivery category they map to
_ERROR_CATEGORIES: dict[str, DeliveryErrorCategory] = {
    "DeviceNotRegistered": DeliveryErrorCategory.INVALID_DESTINATION,
    "InvalidCredentials": DeliveryErrorCategory.TRANSPORT_FAILURE,
    "MessageTooBig": DeliveryErrorCategory.TRANSPORT_FAILURE,
    "MessageRateExceeded": DeliveryErrorCategory.RATE_LIMITED,
}


def is_expo_push_token(token: Optional[str]) -> bool:
    """Check the ``ExponentPushToken[...]`` token format."""
    return (
        isinstance(token, str)
        and token.startswith("ExponentPushToken[")
        and token.endswith("]")
        and len(token) > 20
    )


def _categorize(entry: dict[str, Any]) -> DeliveryErrorCategory:
    details = entry.get("details") or {}
    code = details.get("error") if isinstance(details, dict) else None
    return _ERROR_CATEGORIES.get(code, DeliveryErrorCategory.TRANSPORT_FAILURE)


def _error_detail(entry: dict[str, Any]) -> str:
    details = entry.get("details") or {}
    code = details.get("error") if isinstance(details, dict) else None
    message = entry.get("message") or "Unknown error"
    return f"{code}: {message}" if code else message


class ExpoPushClient(NotificationTransport):
    """Expo push API client implementing the NotificationTransport interface."""

    def __init__(
        self,
        access_token: Optional[str] = None,
        base_url: str = "https://exp.host",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the Expo client.

        Args:
            access_token: Optional Expo access token for enhanced push security.
            base_url: Expo API base URL.
            timeout: HTTP request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "Content-Type": "application/json",
        }
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    def is_valid_destination(self, token: str) -> bool:
        return is_expo_push_token(token)

    async def send_batch(self, messages: list[PushMessage]) -> list[PushTicket]:
        """Send up to 100 messages in one request.

        Args:
            messages: Messages to send.

        Returns:
            One PushTicket per message, in input order.

        Raises:
            DeliveryRejectedError: If Expo rejected the whole request.
        """
        if not messages:
            return []
        if len(messages) > EXPO_MAX_BATCH_SIZE:
            raise ValueError(
                f"Expo accepts at most {EXPO_MAX_BATCH_SIZE} messages per request, "
                f"got {len(messages)}"
            )

        payload = [self._to_payload(m) for m in messages]
        data = await self._post("/--/api/v2/push/send", payload)

        entries = data.get("data")
        if not isinstance(entries, list):
            raise DeliveryRejectedError("Malformed push response: missing ticket list")

        tickets: list[PushTicket] = []
        for entry in entries:
            if not isinstance(entry, dict):
                tickets.append(
                    PushTicket(
                        ok=False,
                        error_category=DeliveryErrorCategory.TRANSPORT_FAILURE,
                        error_detail="Malformed ticket",
                    )
                )
            elif entry.get("status") == "ok":
                tickets.append(PushTicket(ok=True, receipt_id=entry.get("id")))
            else:
                tickets.append(
                    PushTicket(
                        ok=False,
                        error_category=_categorize(entry),
                        error_detail=_error_detail(entry),
                    )
                )
        return tickets

    async def get_receipts(self, receipt_ids: list[str]) -> dict[str, PushReceipt]:
        """Fetch delivery receipts for previously accepted messages.

        Raises:
            DeliveryRejectedError: If the receipt request failed.
        """
        if not receipt_ids:
            return {}

        data = await self._post("/--/api/v2/push/getReceipts", {"ids": receipt_ids})
        entries = data.get("data")
        if not isinstance(entries, dict):
            raise DeliveryRejectedError("Malformed receipt response")

        receipts: dict[str, PushReceipt] = {}
        for receipt_id, entry in entries.items():
            if not isinstance(entry, dict):
                continue
            if entry.get("status") == "ok":
                receipts[receipt_id] = PushReceipt(receipt_id=receipt_id, ok=True)
            else:
                receipts[receipt_id] = PushReceipt(
                    receipt_id=receipt_id,
                    ok=False,
                    error_category=_categorize(entry),
                    error_detail=_error_detail(entry),
                )
        return receipts

    async def _post(self, path: str, payload: Any) -> dict[str, Any]:
        try:
            response = await self._client.post(path, json=payload)
        except httpx.TimeoutException as e:
            raise DeliveryRejectedError(f"Timeout: {e}") from e
        except httpx.HTTPError as e:
            raise DeliveryRejectedError(f"Transport error: {e}") from e

        if response.status_code == 429:
            raise DeliveryRejectedError("HTTP 429 Too Many Requests", rate_limited=True)

        try:
            data = response.json()
        except ValueError as e:
            raise DeliveryRejectedError(f"HTTP {response.status_code}: invalid JSON") from e

        if not isinstance(data, dict):
            raise DeliveryRejectedError(f"HTTP {response.status_code}: unexpected payload")

        errors = data.get("errors")
        if errors or response.is_error:
            first = errors[0] if isinstance(errors, list) and errors else {}
            code = first.get("code", "") if isinstance(first, dict) else ""
            message = first.get("message", "") if isinstance(first, dict) else str(first)
            raise DeliveryRejectedError(
                f"HTTP {response.status_code} {code} {message}".strip(),
                rate_limited=code == "TOO_MANY_REQUESTS",
            )

        return data

    @staticmethod
    def _to_payload(message: PushMessage) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "to": message.to,
            "title": message.title,
            "body": message.body,
            "data": message.data,
            "priority": message.priority,
            "channelId": "default",
        }
        if message.sound:
            payload["sound"] = message.sound
        return payload

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
