# External clients - MetalPriceAPI, GoldAPI.io, Yahoo Finance, Expo push

from .expo_push_client import ExpoPushClient, is_expo_push_token
from .gold_api_client import GoldApiClient
from .metal_price_api_client import MetalPriceApiClient
from .price_source_registry import PriceSourceRegistry, create_default_registry
from .yahoo_quote_client import YahooQuoteClient

__all__ = [
    "ExpoPushClient",
    "GoldApiClient",
    "MetalPriceApiClient",
    "PriceSourceRegistry",
    "YahooQuoteClient",
    "create_default_registry",
    "is_expo_push_token",
]
