"""Unit tests for PriceSourceRegistry."""

import pytest

from app.bullion_tracker.infrastructure.external.price_source_registry import (
    PriceSourceRegistry,
    create_default_registry,
)
from fakes import StubPriceSource


class TestPriceSourceRegistry:
    """Tests for registration order and lifecycle."""

    def test_registration_order_is_priority_order(self) -> None:
        registry = PriceSourceRegistry()
        registry.register(StubPriceSource("primary"))
        registry.register(StubPriceSource("secondary"))

        assert registry.registered_sources == ["primary", "secondary"]

    def test_duplicate_name_rejected(self) -> None:
        registry = PriceSourceRegistry()
        registry.register(StubPriceSource("primary"))

        with pytest.raises(ValueError):
            registry.register(StubPriceSource("primary"))

    def test_unregister(self) -> None:
        registry = PriceSourceRegistry()
        registry.register(StubPriceSource("primary"))

        assert registry.unregister("primary") is True
        assert registry.unregister("primary") is False
        assert registry.sources == []

    @pytest.mark.asyncio
    async def test_context_manager_closes_sources(self) -> None:
        source = StubPriceSource("primary")
        async with PriceSourceRegistry() as registry:
            registry.register(source)

        assert source.closed
        assert registry.sources == []

    @pytest.mark.asyncio
    async def test_default_chain(self) -> None:
        async with create_default_registry("metal-key", None) as registry:
            assert registry.registered_sources == ["metalpriceapi", "goldapi-io"]
