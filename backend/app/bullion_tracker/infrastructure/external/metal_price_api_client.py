"""MetalPriceAPI client for fetching metal spot prices.

MetalPriceAPI documentation: https://metalpriceapi.com/documentation
Rates are quoted as troy ounces of metal per USD, so each rate is
inverted to obtain USD per ounce. The endpoint returns all four metals
in a single request but reports no day-over-day change.
"""

import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Optional

import httpx

from app.bullion_tracker.application.interfaces.price_source import (
    FetchErrorKind,
    FetchResult,
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

# Error codes MetalPriceAPI reports in the body of a failed request
_AUTH_ERROR_CODES = frozenset({101, 102, 103, 401, 403})

_CENTS = Decimal("0.01")


class MetalPriceApiClient(PriceSource):
    """MetalPriceAPI REST client implementing the PriceSource interface.

    Attributes:
        _client: httpx AsyncClient for making HTTP requests.
        _api_key: MetalPriceAPI key; requests are skipped without one.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.metalpriceapi.com",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the MetalPriceAPI client.

        Args:
            api_key: MetalPriceAPI key.
            base_url: API base URL.
            timeout: HTTP request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @property
    def source_name(self) -> str:
        """Return the provider name."""
        return "metalpriceapi"

    async def fetch(self, assets: Iterable[Metal]) -> FetchResult:
        """Fetch spot prices for the requested metals in one request.

        Args:
            assets: Metals to price.

        Returns:
            FetchResult with the metals present in the response.
        """
        requested = list(assets)
        if not requested:
            return FetchResult.success(PriceQuote(source=self.source_name, amounts={}))

        if not self._api_key:
            return FetchResult.failure(FetchErrorKind.UNAUTHORIZED, "No API key configured")

        try:
            response = await self._client.get(
                "/v1/latest",
                params={
                    "api_key": self._api_key,
                    "base": "USD",
                    "currencies": ",".join(m.code for m in requested),
                },
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            kind = classify_http_error(e)
            logger.error(f"MetalPriceAPI request failed: {describe_http_error(e)}")
            return FetchResult.failure(kind, describe_http_error(e))
        except ValueError as e:
            logger.error(f"MetalPriceAPI returned invalid JSON: {e}")
            return FetchResult.failure(FetchErrorKind.MALFORMED_RESPONSE, "Invalid JSON")

        if not isinstance(data, dict):
            return FetchResult.failure(FetchErrorKind.MALFORMED_RESPONSE, "Unexpected payload")

        if data.get("success") is False:
            error = data.get("error")
            if not isinstance(error, dict):
                error = {"info": str(error)}
            code = error.get("statusCode") or error.get("code")
            message = error.get("info") or error.get("message")
            kind = (
                FetchErrorKind.UNAUTHORIZED
                if code in _AUTH_ERROR_CODES
                else FetchErrorKind.UNAVAILABLE
            )
            logger.error(f"MetalPriceAPI error {code}: {message}")
            return FetchResult.failure(kind, f"API error {code}: {message}")

        rates = data.get("rates")
        if not isinstance(rates, dict):
            return FetchResult.failure(FetchErrorKind.MALFORMED_RESPONSE, "Missing rates")

        amounts: dict[Metal, Decimal] = {}
        for metal in requested:
            amount = self._invert(rates.get(metal.code))
            if amount is not None:
                amounts[metal] = amount

        if not amounts:
            return FetchResult.failure(
                FetchErrorKind.MALFORMED_RESPONSE, "No usable rates in response"
            )

        logger.debug(f"MetalPriceAPI returned {len(amounts)}/{len(requested)} metals")
        return FetchResult.success(
            PriceQuote(
                source=self.source_name,
                amounts=amounts,
                timestamp=datetime.now(timezone.utc),
            )
        )

    @staticmethod
    def _invert(rate: object) -> Optional[Decimal]:
        """Convert an ounces-per-USD rate to USD per ounce, rounded to cents."""
        if rate is None or isinstance(rate, bool):
            return None
        try:
            value = Decimal(str(rate))
        except InvalidOperation:
            return None
        if not value.is_finite() or value <= 0:
            return None
        return (Decimal(1) / value).quantize(_CENTS, rounding=ROUND_HALF_UP)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "MetalPriceApiClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
