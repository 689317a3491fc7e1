"""Fetch NIfTI volumes over HTTP and decode them."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional
from urllib.parse import unquote, urlsplit

import aiohttp

from fetch import FetchOptions, fetch_bytes
from nifti import Volume, parse_nifti

logger = logging.getLogger(__name__)


async def fetch_and_decode(
    url: str,
    filename: Optional[str] = None,
    options: Optional[FetchOptions] = None,
    *,
    session: Optional[aiohttp.ClientSession] = None,
    offload: bool = True,
) -> Volume:
    """Download ``url`` and decode it into a :class:`Volume`.

    Cancellation and the timeout only cover the download. With ``offload``
    the decode runs in a worker thread so the event loop stays responsive.
    """

    name = filename or _filename_from_url(url)
    body = await fetch_bytes(url, options, session=session)
    logger.info("Decoding %s (%d bytes)", name, len(body))
    if offload:
        return await asyncio.to_thread(parse_nifti, body, name)
    return parse_nifti(body, name)


def _filename_from_url(url: str) -> str:
    # Signed URLs carry tokens in the query string; only the path names the file.
    path = unquote(urlsplit(url).path)
    return path.rsplit("/", 1)[-1] or url
