"""Chunk accumulators that rebuild a response body into one buffer."""

from __future__ import annotations

from typing import Optional, Union

from .errors import TransportError


class KnownLengthAccumulator:
    """Write chunks into a buffer pre-sized from ``Content-Length``."""

    def __init__(self, total: int) -> None:
        self.total = total
        self.received = 0
        self._buffer = bytearray(total)
        self._view = memoryview(self._buffer)

    def append(self, chunk: bytes) -> None:
        end = self.received + len(chunk)
        if end > self.total:
            raise TransportError(f"Response body exceeds declared Content-Length of {self.total} bytes")
        self._view[self.received : end] = chunk
        self.received = end

    def finish(self) -> bytearray:
        if self.received != self.total:
            raise TransportError(
                f"Response body ended after {self.received} of {self.total} declared bytes"
            )
        self._view.release()
        return self._buffer


class UnknownLengthAccumulator:
    """Collect chunks and join them once the stream ends."""

    total: Optional[int] = None

    def __init__(self) -> None:
        self.received = 0
        self._chunks: list[bytes] = []

    def append(self, chunk: bytes) -> None:
        self._chunks.append(chunk)
        self.received += len(chunk)

    def finish(self) -> bytes:
        return b"".join(self._chunks)


ByteAccumulator = Union[KnownLengthAccumulator, UnknownLengthAccumulator]


def accumulator_for(total: Optional[int]) -> ByteAccumulator:
    if total is not None and total >= 0:
        return KnownLengthAccumulator(total)
    return UnknownLengthAccumulator()
