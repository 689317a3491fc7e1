from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

CancelCallback = Callable[["CancellationToken"], None]


class CancellationToken:
    """Cooperative cancellation signal that can be composed with others.

    ``triggered_by`` records the token whose ``cancel()`` call fired first, so a
    token built with :meth:`any_of` can tell its callers which source aborted
    the work. ``cancel()`` may be called from any thread.
    """

    def __init__(self, name: str = "token") -> None:
        self.name = name
        self._cancelled = False
        self._source: Optional[CancellationToken] = None
        self._callbacks: list[CancelCallback] = []
        self._lock = threading.Lock()
        self._detach: list[Callable[[], None]] = []
        self._timer: Optional[asyncio.TimerHandle] = None

    def __repr__(self) -> str:
        return f"CancellationToken(name={self.name!r}, cancelled={self._cancelled})"

    @classmethod
    def after(cls, seconds: float, name: str = "timeout") -> "CancellationToken":
        """Token that cancels itself after ``seconds`` on the running loop."""

        token = cls(name)
        loop = asyncio.get_running_loop()
        token._timer = loop.call_later(seconds, token.cancel)
        return token

    @classmethod
    def any_of(cls, *tokens: Optional["CancellationToken"], name: str = "any_of") -> "CancellationToken":
        """Token that fires as soon as any of ``tokens`` fires; ``None`` entries are skipped."""

        combined = cls(name)
        for token in tokens:
            if token is None:
                continue
            combined._detach.append(token.add_callback(combined._fire))
        return combined

    def cancel(self) -> None:
        self._fire(self)

    def _fire(self, source: "CancellationToken") -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            self._source = source
            callbacks = list(self._callbacks)
            self._callbacks.clear()

        if source is self:
            logger.info("Signal: Cancel requested (%s)", self.name)
        for callback in callbacks:
            callback(source)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def triggered_by(self) -> Optional["CancellationToken"]:
        return self._source

    def add_callback(self, callback: CancelCallback) -> Callable[[], None]:
        """Register ``callback``; runs immediately if already cancelled.

        Returns a function that unregisters the callback.
        """

        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return lambda: self._remove_callback(callback)
            source = self._source

        callback(source or self)
        return lambda: None

    def _remove_callback(self, callback: CancelCallback) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    async def wait(self) -> "CancellationToken":
        """Suspend until the token fires and return the token that fired."""

        loop = asyncio.get_running_loop()
        future: asyncio.Future[CancellationToken] = loop.create_future()

        def _resolve(source: CancellationToken) -> None:
            if not future.done():
                future.set_result(source)

        remove = self.add_callback(lambda source: loop.call_soon_threadsafe(_resolve, source))
        try:
            return await future
        finally:
            remove()

    def close(self) -> None:
        """Stop the timer and detach from any parent tokens."""

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        while self._detach:
            self._detach.pop()()
