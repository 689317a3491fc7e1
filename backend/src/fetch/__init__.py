"""Streaming fetch package."""

from .cancellation import CancellationToken
from .client import fetch_bytes
from .config import FetchOptions, FetchSettings, get_fetch_settings
from .errors import FetchCancelledError, FetchError, FetchTimedOutError, TransportError

__all__ = [
    "CancellationToken",
    "FetchCancelledError",
    "FetchError",
    "FetchOptions",
    "FetchSettings",
    "FetchTimedOutError",
    "TransportError",
    "fetch_bytes",
    "get_fetch_settings",
]
