"""Fetch-related exceptions."""

from __future__ import annotations


class FetchError(RuntimeError):
    """Base class for failed transfers."""


class FetchTimedOutError(FetchError):
    """Raised when the internal timer fires before the transfer completes."""

    def __init__(self, timeout_ms: int, message: str | None = None) -> None:
        self.timeout_ms = timeout_ms
        base = message or f"Loading timed out after {timeout_ms / 1000:g} seconds"
        super().__init__(base)


class FetchCancelledError(FetchError):
    """Raised when the caller's cancellation token fires first."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Loading cancelled")


class TransportError(FetchError):
    """Raised for non-2xx responses and network failures."""

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        base = f"HTTP {status}: {message}" if status is not None else message
        super().__init__(base)
