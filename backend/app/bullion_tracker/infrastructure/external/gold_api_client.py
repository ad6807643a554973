"""GoldAPI.io client for fetching metal spot prices with daily change.

GoldAPI documentation: https://www.goldapi.io/dashboard
One request is made per metal; responses include the provider's own
change figures (``ch``, ``chp``) and previous close.
"""

import asyncio
import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Optional

import httpx

from app.bullion_tracker.application.interfaces.price_source import (
    FetchError,
    FetchErrorKind,
    FetchResult,
    NativeChange,
    PriceQuote,
    PriceSource,
)
from app.bullion_tracker.domain.value_objects.metal import Metal
from app.bullion_tracker.infrastructure.external.http_errors import (
    classify_http_error,
    describe_http_error,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0

_CENTS = Decimal("0.01")

# Lower index = more severe, used when every metal fails
_SEVERITY: tuple[FetchErrorKind, ...] = tuple(FetchErrorKind)


def _to_decimal(value: object) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        return None
    return result if result.is_finite() else None


class GoldApiClient(PriceSource):
    """GoldAPI.io REST client implementing the PriceSource interface.

    Attributes:
        _client: httpx AsyncClient for making HTTP requests.
        _api_key: GoldAPI access token; requests are skipped without one.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://www.goldapi.io",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the GoldAPI client.

        Args:
            api_key: GoldAPI access token.
            base_url: API base URL.
            timeout: HTTP request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={
                "Accept": "application/json",
                "x-access-token": api_key or "",
            },
            transport=transport,
        )

    @property
    def source_name(self) -> str:
        """Return the provider name."""
        return "goldapi-io"

    async def fetch(self, assets: Iterable[Metal]) -> FetchResult:
        """Fetch spot prices concurrently, one request per metal.

        Metals that fail individually are left out of the quote. If every
        metal fails, the most severe error is reported.

        Args:
            assets: Metals to price.

        Returns:
            FetchResult with a partial or complete quote, or an error.
        """
        requested = list(assets)
        if not requested:
            return FetchResult.success(PriceQuote(source=self.source_name, amounts={}))

        if not self._api_key:
            return FetchResult.failure(FetchErrorKind.UNAUTHORIZED, "No API key configured")

        outcomes = await asyncio.gather(*(self._fetch_metal(m) for m in requested))

        amounts: dict[Metal, Decimal] = {}
        changes: dict[Metal, NativeChange] = {}
        errors: list[FetchError] = []
        for metal, outcome in zip(requested, outcomes):
            if isinstance(outcome, FetchError):
                errors.append(outcome)
                continue
            amount, change = outcome
            amounts[metal] = amount
            if change is not None:
                changes[metal] = change

        if not amounts:
            worst = min(errors, key=lambda e: _SEVERITY.index(e.kind))
            return FetchResult(error=worst)

        if errors:
            logger.warning(
                f"GoldAPI returned {len(amounts)}/{len(requested)} metals: "
                f"{', '.join(str(e) for e in errors)}"
            )

        return FetchResult.success(
            PriceQuote(
                source=self.source_name,
                amounts=amounts,
                changes=changes,
                timestamp=datetime.now(timezone.utc),
            )
        )

    async def _fetch_metal(
        self, metal: Metal
    ) -> tuple[Decimal, Optional[NativeChange]] | FetchError:
        try:
            response = await self._client.get(f"/api/{metal.code}/USD")
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"GoldAPI request for {metal.code} failed: {describe_http_error(e)}")
            return FetchError(classify_http_error(e), f"{metal.code}: {describe_http_error(e)}")
        except ValueError:
            return FetchError(FetchErrorKind.MALFORMED_RESPONSE, f"{metal.code}: invalid JSON")

        if not isinstance(data, dict):
            return FetchError(FetchErrorKind.MALFORMED_RESPONSE, f"{metal.code}: unexpected payload")

        price = _to_decimal(data.get("price"))
        if price is None or price <= 0:
            return FetchError(FetchErrorKind.MALFORMED_RESPONSE, f"{metal.code}: missing price")

        change = None
        amount = _to_decimal(data.get("ch"))
        percent = _to_decimal(data.get("chp"))
        if amount is not None and percent is not None:
            prev_close = _to_decimal(data.get("prev_close_price"))
            change = NativeChange(
                amount=amount.quantize(_CENTS, rounding=ROUND_HALF_UP),
                percent=percent.quantize(_CENTS, rounding=ROUND_HALF_UP),
                previous_close=(
                    prev_close.quantize(_CENTS, rounding=ROUND_HALF_UP)
                    if prev_close is not None
                    else None
                ),
            )

        return price.quantize(_CENTS, rounding=ROUND_HALF_UP), change

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "GoldApiClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
