"""Price source registry holding the ordered fallback chain of providers.

Registration order is priority order: the resolver asks each source in
turn for the metals still unresolved.
"""

import logging
from typing import Optional

from app.bullion_tracker.application.interfaces.price_source import PriceSource

logger = logging.getLogger(__name__)


class PriceSourceRegistry:
    """Ordered collection of configured price sources.

    Attributes:
        _sources: Registered PriceSource implementations, highest priority first.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._sources: list[PriceSource] = []

    def register(self, source: PriceSource) -> None:
        """Append a source at the lowest priority.

        Args:
            source: PriceSource implementation to add.

        Raises:
            ValueError: If a source with the same name is already registered.
        """
        if source.source_name in self.registered_sources:
            raise ValueError(f"Price source already registered: {source.source_name}")
        self._sources.append(source)
        logger.info(f"Registered price source #{len(self._sources)}: {source.source_name}")

    def unregister(self, source_name: str) -> bool:
        """Remove a source by name.

        Returns:
            True if a source was removed, False otherwise.
        """
        for i, source in enumerate(self._sources):
            if source.source_name == source_name:
                self._sources.pop(i)
                logger.info(f"Unregistered price source: {source_name}")
                return True
        return False

    @property
    def sources(self) -> list[PriceSource]:
        """Registered sources in priority order."""
        return list(self._sources)

    @property
    def registered_sources(self) -> list[str]:
        """Get names of all registered sources."""
        return [source.source_name for source in self._sources]

    async def close_all(self) -> None:
        """Close all registered source clients."""
        for source in self._sources:
            try:
                await source.close()
                logger.debug(f"Closed price source: {source.source_name}")
            except Exception as e:
                logger.error(f"Error closing price source {source.source_name}: {e}")
        self._sources.clear()

    async def __aenter__(self) -> "PriceSourceRegistry":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close_all()


def create_default_registry(
    metal_price_api_key: Optional[str] = None,
    gold_api_key: Optional[str] = None,
    timeout_seconds: float = 10.0,
) -> PriceSourceRegistry:
    """Create a registry with the standard provider chain.

    MetalPriceAPI is the primary source and GoldAPI.io the secondary.
    Both are registered even without a key; an unconfigured source
    reports Unauthorized and the chain moves on.

    Args:
        metal_price_api_key: MetalPriceAPI key.
        gold_api_key: GoldAPI.io access token.
        timeout_seconds: Per-request timeout for both providers.

    Returns:
        Configured PriceSourceRegistry instance.
    """
    from app.bullion_tracker.infrastructure.external.gold_api_client import GoldApiClient
    from app.bullion_tracker.infrastructure.external.metal_price_api_client import (
        MetalPriceApiClient,
    )

    if not metal_price_api_key:
        logger.warning("No MetalPriceAPI key configured; primary source will be skipped")
    if not gold_api_key:
        logger.warning("No GoldAPI key configured; secondary source will be skipped")

    registry = PriceSourceRegistry()
    registry.register(MetalPriceApiClient(api_key=metal_price_api_key, timeout=timeout_seconds))
    registry.register(GoldApiClient(api_key=gold_api_key, timeout=timeout_seconds))
    return registry
