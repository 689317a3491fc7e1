"""Streaming HTTP fetch with a time budget, cancellation and progress."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import aiohttp

from .accumulator import ByteAccumulator, KnownLengthAccumulator, accumulator_for
from .cancellation import CancellationToken
from .config import FetchOptions
from .errors import FetchCancelledError, FetchTimedOutError, TransportError
from .progress import DownloadProgress

logger = logging.getLogger(__name__)


async def fetch_bytes(
    url: str,
    options: Optional[FetchOptions] = None,
    *,
    session: Optional[aiohttp.ClientSession] = None,
) -> bytes | bytearray:
    """Download ``url`` into one contiguous buffer.

    The internal timer and the caller's ``options.cancel`` token are composed
    into a single token; whichever fires first aborts the transfer and
    decides the error: ``FetchTimedOutError`` for the timer,
    ``FetchCancelledError`` for the caller. Nothing is retried.

    When ``session`` is omitted a session is opened for this call only, with
    transparent content decoding disabled so the raw bytes reach the decoder.
    """

    options = options or FetchOptions.from_settings()
    external = options.cancel
    if external is not None and external.cancelled:
        raise FetchCancelledError()

    timer = CancellationToken.after(options.timeout_seconds, name="timeout")
    effective = CancellationToken.any_of(timer, external, name="fetch")
    transfer = asyncio.ensure_future(_transfer(url, options, session))
    aborted = asyncio.ensure_future(effective.wait())

    try:
        done, _ = await asyncio.wait({transfer, aborted}, return_when=asyncio.FIRST_COMPLETED)
        if transfer in done:
            return transfer.result()

        transfer.cancel()
        await asyncio.gather(transfer, return_exceptions=True)
        if effective.triggered_by is timer:
            logger.warning("Fetch of %s timed out after %d ms", url, options.timeout_ms)
            raise FetchTimedOutError(options.timeout_ms)
        logger.info("Fetch of %s cancelled by caller", url)
        raise FetchCancelledError()
    finally:
        if not transfer.done():
            transfer.cancel()
        aborted.cancel()
        effective.close()
        timer.close()


async def _transfer(
    url: str,
    options: FetchOptions,
    session: Optional[aiohttp.ClientSession],
) -> bytes | bytearray:
    try:
        if session is None:
            # The composed token owns the time budget.
            async with aiohttp.ClientSession(
                auto_decompress=False,
                timeout=aiohttp.ClientTimeout(total=None),
            ) as owned:
                return await _download(owned, url, options)
        return await _download(session, url, options)
    except aiohttp.ClientError as exc:
        raise TransportError(str(exc) or exc.__class__.__name__) from exc
    except asyncio.TimeoutError as exc:
        raise TransportError("HTTP client timed out before the fetch deadline") from exc


def _body_length(session: aiohttp.ClientSession, response: aiohttp.ClientResponse) -> Optional[int]:
    """Declared size of the body as it will be read, or ``None`` when unknown.

    ``Content-Length`` counts encoded bytes; a session that decodes
    ``Content-Encoding`` hands back a body of a different size.
    """
    encoding = response.headers.get(aiohttp.hdrs.CONTENT_ENCODING, "").strip().lower()
    if encoding and encoding != "identity" and session.auto_decompress:
        return None
    return response.content_length


async def _download(session: aiohttp.ClientSession, url: str, options: FetchOptions) -> bytes | bytearray:
    async with session.get(url) as response:
        if not 200 <= response.status < 300:
            raise TransportError(response.reason or "Failed to fetch NIfTI file", status=response.status)

        total = _body_length(session, response)
        if options.on_progress is not None and total:
            accumulator = KnownLengthAccumulator(total)
            progress = DownloadProgress(options.on_progress, total)
            async for chunk in response.content.iter_chunked(options.chunk_size):
                accumulator.append(chunk)
                progress.update(accumulator.received)
            body = accumulator.finish()
            progress.finalize()
        else:
            single: ByteAccumulator = accumulator_for(total)
            single.append(await response.read())
            body = single.finish()

    logger.debug("Fetched %d bytes from %s", len(body), url)
    return body
