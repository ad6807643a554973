# Ports for external integrations (PriceSource, ProxyQuoteSource, NotificationTransport, Clock)

from .clock import Clock, SystemClock
from .notification_transport import (
    DeliveryErrorCategory,
    NotificationTransport,
    PushMessage,
    PushReceipt,
    PushTicket,
)
from .price_source import (
    FetchError,
    FetchErrorKind,
    FetchResult,
    NativeChange,
    PriceQuote,
    PriceSource,
)
from .proxy_quote_source import ProxyQuoteSource

__all__ = [
    "Clock",
    "DeliveryErrorCategory",
    "FetchError",
    "FetchErrorKind",
    "FetchResult",
    "NativeChange",
    "NotificationTransport",
    "PriceQuote",
    "PriceSource",
    "ProxyQuoteSource",
    "PushMessage",
    "PushReceipt",
    "PushTicket",
    "SystemClock",
]
