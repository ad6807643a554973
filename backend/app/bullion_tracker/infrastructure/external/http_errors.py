"""Mapping of httpx failures onto price source error categories."""

import httpx

from app.bullion_tracker.application.interfaces.price_source import FetchErrorKind

UNAUTHORIZED_STATUS_CODES = frozenset({401, 403})


def classify_http_error(error: httpx.HTTPError) -> FetchErrorKind:
    """Categorize an httpx exception raised while calling a provider.

    Args:
        error: The exception raised by the request or ``raise_for_status``.

    Returns:
        The FetchErrorKind the failure belongs to.
    """
    if isinstance(error, httpx.TimeoutException):
        return FetchErrorKind.TIMEOUT
    if isinstance(error, httpx.HTTPStatusError):
        if error.response.status_code in UNAUTHORIZED_STATUS_CODES:
            return FetchErrorKind.UNAUTHORIZED
    return FetchErrorKind.UNAVAILABLE


def describe_http_error(error: httpx.HTTPError) -> str:
    if isinstance(error, httpx.HTTPStatusError):
        return f"HTTP {error.response.status_code}"
    return f"{type(error).__name__}: {error}"
