"""Gzip envelope detection and whole-buffer decompression."""

from __future__ import annotations

import gzip
import logging
import zlib

from .errors import DecompressionFailedError

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"


def is_compressed(buffer: bytes | bytearray | memoryview) -> bool:
    return bytes(buffer[:2]) == GZIP_MAGIC


def decompress_if_needed(buffer: bytes | bytearray | memoryview) -> bytes | bytearray | memoryview:
    """Return the decompressed payload, or ``buffer`` untouched if it is not gzip."""

    if not is_compressed(buffer):
        return buffer

    try:
        payload = gzip.decompress(bytes(buffer))
    except (OSError, EOFError, zlib.error) as exc:
        raise DecompressionFailedError(f"Corrupt gzip envelope: {exc}") from exc

    logger.debug("Decompressed %d bytes into %d bytes", len(buffer), len(payload))
    return payload
