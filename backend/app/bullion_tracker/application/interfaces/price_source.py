"""Price source interface for fetching metal spot prices from upstream providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional, Self

from app.bullion_tracker.domain.value_objects.metal import Metal


class FetchErrorKind(Enum):
    """Categories of upstream failure, ordered roughly by severity."""

    UNAUTHORIZED = "unauthorized"
    TIMEOUT = "timeout"
    MALFORMED_RESPONSE = "malformed_response"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class FetchError:
    """A categorized failure reported by a price source.

    Attributes:
        kind: The failure category.
        message: Human-readable detail for logs.
    """

    kind: FetchErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


@dataclass(frozen=True)
class NativeChange:
    """Day-over-day change as reported by the provider itself.

    Attributes:
        amount: Absolute change in USD.
        percent: Relative change in percent.
        previous_close: The provider's previous close, if reported.
    """

    amount: Decimal
    percent: Decimal
    previous_close: Optional[Decimal] = None


@dataclass(frozen=True)
class PriceQuote:
    """Normalized spot prices from a single provider call.

    Partial quotes are valid: ``amounts`` only holds the metals the
    provider returned.

    Attributes:
        source: Name of the provider (e.g., "metalpriceapi").
        amounts: USD per troy ounce keyed by metal.
        changes: Provider-reported day-over-day change, where available.
        timestamp: When the quote was fetched.
    """

    source: str
    amounts: dict[Metal, Decimal]
    changes: dict[Metal, NativeChange] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one ``PriceSource.fetch`` call: a quote or an error."""

    quote: Optional[PriceQuote] = None
    error: Optional[FetchError] = None

    @classmethod
    def success(cls, quote: PriceQuote) -> Self:
        return cls(quote=quote)

    @classmethod
    def failure(cls, kind: FetchErrorKind, message: str) -> Self:
        return cls(error=FetchError(kind, message))

    @property
    def ok(self) -> bool:
        return self.quote is not None


class PriceSource(ABC):
    """Abstract base class for spot price provider adapters.

    Each adapter (MetalPriceAPI, GoldAPI.io, ...) must implement this
    interface. ``fetch`` is a pure query and must never raise: every
    failure is reported as a categorized ``FetchError``.
    """

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return the name of this provider."""
        ...

    @abstractmethod
    async def fetch(self, assets: Iterable[Metal]) -> FetchResult:
        """Fetch current spot prices for the given metals.

        Args:
            assets: Metals still awaiting a price this cycle.

        Returns:
            FetchResult with a (possibly partial) PriceQuote, or an error.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""
        ...
