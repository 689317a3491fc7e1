from __future__ import annotations

import asyncio
import gzip
import time
from typing import Awaitable, Callable, TypeVar

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from fetch.cancellation import CancellationToken
from fetch.client import fetch_bytes
from fetch.config import FetchOptions
from fetch.errors import FetchCancelledError, FetchTimedOutError, TransportError

PAYLOAD = bytes(range(256)) * 40
CHUNK = 1024
ENCODED = gzip.compress(PAYLOAD)

T = TypeVar("T")


def _build_app(release: asyncio.Event) -> web.Application:
    async def whole(request: web.Request) -> web.Response:
        return web.Response(body=PAYLOAD)

    async def chunked(request: web.Request) -> web.StreamResponse:
        response = web.StreamResponse()
        response.content_length = len(PAYLOAD)
        await response.prepare(request)
        for start in range(0, len(PAYLOAD), CHUNK):
            await response.write(PAYLOAD[start : start + CHUNK])
            await asyncio.sleep(0)
        await response.write_eof()
        return response

    async def no_length(request: web.Request) -> web.StreamResponse:
        response = web.StreamResponse()
        response.enable_chunked_encoding()
        await response.prepare(request)
        for start in range(0, len(PAYLOAD), CHUNK):
            await response.write(PAYLOAD[start : start + CHUNK])
        await response.write_eof()
        return response

    async def stalled(request: web.Request) -> web.StreamResponse:
        response = web.StreamResponse()
        response.content_length = len(PAYLOAD)
        await response.prepare(request)
        await response.write(PAYLOAD[:CHUNK])
        try:
            await asyncio.wait_for(release.wait(), timeout=10)
        except asyncio.TimeoutError:
            pass
        return response

    async def encoded(request: web.Request) -> web.Response:
        return web.Response(body=ENCODED, headers={"Content-Encoding": "gzip"})

    async def missing(request: web.Request) -> web.Response:
        raise web.HTTPNotFound()

    app = web.Application()
    app.router.add_get("/whole.nii", whole)
    app.router.add_get("/chunked.nii", chunked)
    app.router.add_get("/no-length.nii", no_length)
    app.router.add_get("/stalled.nii", stalled)
    app.router.add_get("/encoded.nii", encoded)
    app.router.add_get("/missing.nii", missing)
    return app


def _run(scenario: Callable[[TestServer], Awaitable[T]]) -> T:
    async def runner() -> T:
        release = asyncio.Event()
        server = TestServer(_build_app(release))
        await server.start_server()
        try:
            return await scenario(server)
        finally:
            release.set()
            await server.close()

    return asyncio.run(runner())


def test_fetches_whole_body_without_progress():
    async def scenario(server: TestServer) -> bytes:
        return await fetch_bytes(str(server.make_url("/whole.nii")))

    assert bytes(_run(scenario)) == PAYLOAD


def test_progress_is_monotonic_and_completes():
    events: list[tuple[int, int]] = []

    async def scenario(server: TestServer) -> bytes:
        options = FetchOptions(on_progress=lambda received, total: events.append((received, total)), chunk_size=CHUNK)
        return await fetch_bytes(str(server.make_url("/chunked.nii")), options)

    body = _run(scenario)

    assert bytes(body) == PAYLOAD
    assert len(events) > 1
    received = [value for value, _ in events]
    assert received == sorted(received)
    assert all(total == len(PAYLOAD) for _, total in events)
    assert events[-1] == (len(PAYLOAD), len(PAYLOAD))


def test_unknown_length_skips_progress():
    events: list[tuple[int, int]] = []

    async def scenario(server: TestServer) -> bytes:
        options = FetchOptions(on_progress=lambda received, total: events.append((received, total)))
        return await fetch_bytes(str(server.make_url("/no-length.nii")), options)

    assert bytes(_run(scenario)) == PAYLOAD
    assert events == []


def test_timeout_is_reported_as_timed_out():
    async def scenario(server: TestServer) -> float:
        started = time.monotonic()
        with pytest.raises(FetchTimedOutError) as excinfo:
            await fetch_bytes(str(server.make_url("/stalled.nii")), FetchOptions(timeout_ms=200))
        assert excinfo.value.timeout_ms == 200
        return time.monotonic() - started

    assert _run(scenario) < 5


def test_external_cancel_is_reported_as_cancelled():
    async def scenario(server: TestServer) -> None:
        token = CancellationToken("user")
        asyncio.get_running_loop().call_later(0.1, token.cancel)
        with pytest.raises(FetchCancelledError):
            await fetch_bytes(
                str(server.make_url("/stalled.nii")),
                FetchOptions(timeout_ms=5_000, cancel=token),
            )

    _run(scenario)


def test_pre_cancelled_token_aborts_before_request():
    async def scenario(server: TestServer) -> None:
        token = CancellationToken("user")
        token.cancel()
        with pytest.raises(FetchCancelledError):
            await fetch_bytes(str(server.make_url("/whole.nii")), FetchOptions(cancel=token))

    _run(scenario)


def test_error_status_is_a_transport_error():
    async def scenario(server: TestServer) -> None:
        with pytest.raises(TransportError) as excinfo:
            await fetch_bytes(str(server.make_url("/missing.nii")))
        assert excinfo.value.status == 404

    _run(scenario)


def test_connection_failure_is_a_transport_error():
    async def scenario() -> None:
        with pytest.raises(TransportError) as excinfo:
            await fetch_bytes("http://127.0.0.1:1/scan.nii", FetchOptions(timeout_ms=5_000))
        assert excinfo.value.status is None

    asyncio.run(scenario())


def test_caller_session_is_reused_and_left_open():
    async def scenario(server: TestServer) -> tuple[bytes, bool]:
        async with aiohttp.ClientSession() as session:
            body = await fetch_bytes(str(server.make_url("/whole.nii")), session=session)
            return bytes(body), session.closed

    body, closed = _run(scenario)

    assert body == PAYLOAD
    assert closed is False


def test_owned_session_is_not_capped_by_client_default_timeout(monkeypatch):
    monkeypatch.setattr(aiohttp.client, "DEFAULT_TIMEOUT", aiohttp.ClientTimeout(total=0.2))

    async def scenario(server: TestServer) -> None:
        with pytest.raises(FetchTimedOutError) as excinfo:
            await fetch_bytes(str(server.make_url("/stalled.nii")), FetchOptions(timeout_ms=1_000))
        assert excinfo.value.timeout_ms == 1_000

    _run(scenario)


def test_caller_session_timeout_is_a_transport_error():
    async def scenario(server: TestServer) -> None:
        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=0.2)) as session:
            with pytest.raises(TransportError) as excinfo:
                await fetch_bytes(
                    str(server.make_url("/stalled.nii")),
                    FetchOptions(timeout_ms=5_000),
                    session=session,
                )
        assert excinfo.value.status is None

    _run(scenario)


def test_decoding_session_treats_encoded_length_as_unknown():
    events: list[tuple[int, int]] = []

    async def scenario(server: TestServer) -> bytes:
        options = FetchOptions(on_progress=lambda received, total: events.append((received, total)))
        async with aiohttp.ClientSession() as session:
            return bytes(await fetch_bytes(str(server.make_url("/encoded.nii")), options, session=session))

    assert _run(scenario) == PAYLOAD
    assert events == []


def test_owned_session_keeps_encoded_bytes_and_reports_progress():
    events: list[tuple[int, int]] = []

    async def scenario(server: TestServer) -> bytes:
        options = FetchOptions(on_progress=lambda received, total: events.append((received, total)))
        return bytes(await fetch_bytes(str(server.make_url("/encoded.nii")), options))

    assert _run(scenario) == ENCODED
    assert events[-1] == (len(ENCODED), len(ENCODED))
