"""Helpers for reporting download progress."""

from __future__ import annotations

from typing import Callable, Optional

ProgressCallback = Callable[[int, int], None]


class DownloadProgress:
    """Forward byte counts to a ``(bytes_received, total_bytes)`` callback.

    Reported values never decrease, and :meth:`finalize` guarantees the last
    emission reports ``bytes_received == total_bytes``.
    """

    def __init__(self, send: ProgressCallback, total: int) -> None:
        self._send = send
        self._total = total
        self._last: Optional[int] = None

    @property
    def total(self) -> int:
        return self._total

    @property
    def last_reported(self) -> int:
        return self._last or 0

    def update(self, received: int) -> None:
        value = min(max(received, self.last_reported), self._total)
        if value != self._last:
            self._send(value, self._total)
            self._last = value

    def finalize(self) -> None:
        if self._last != self._total:
            self._send(self._total, self._total)
            self._last = self._total
