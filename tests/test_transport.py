"""Tests for HttpTransport against a local aiohttp server."""

from __future__ import annotations

import pytest
from aiohttp import web
from aiohttp import test_utils

from alpac.config import FetchSettings
from alpac.download.fetcher import Fetcher
from alpac.download.transport import HttpTransport
from alpac.exceptions import TransportFailure
from alpac.models import ArtifactDescriptor

from tests.conftest import hexdigests


def _app(payload: bytes) -> web.Application:
    async def artifact(request: web.Request) -> web.Response:
        return web.Response(body=payload)

    app = web.Application()
    app.router.add_get("/pkg/tool.tar.gz", artifact)
    return app


class TestHttpTransport:
    @pytest.mark.asyncio
    async def test_streams_in_chunks(self, payload: bytes):
        async with test_utils.TestServer(_app(payload)) as server:
            url = str(server.make_url("/pkg/tool.tar.gz"))
            async with HttpTransport(FetchSettings(chunk_size=100)) as transport:
                chunks = [chunk async for chunk in transport.stream(url)]
        assert b"".join(chunks) == payload
        assert max(len(c) for c in chunks) <= 100

    @pytest.mark.asyncio
    async def test_verified_fetch_over_http(self, payload: bytes):
        async with test_utils.TestServer(_app(payload)) as server:
            url = str(server.make_url("/pkg/tool.tar.gz"))
            async with HttpTransport() as transport:
                data = await Fetcher(transport).verify_and_fetch(
                    ArtifactDescriptor(url, expected_digests=hexdigests(payload, "sha256"))
                )
        assert data == payload

    @pytest.mark.asyncio
    async def test_non_200_is_transport_failure(self, payload: bytes):
        async with test_utils.TestServer(_app(payload)) as server:
            url = str(server.make_url("/missing.bin"))
            async with HttpTransport() as transport:
                with pytest.raises(TransportFailure) as exc:
                    await Fetcher(transport).verify_and_fetch(ArtifactDescriptor(url))
        assert exc.value.context["status"] == 404

    @pytest.mark.asyncio
    async def test_connection_error_is_transport_failure(self, unused_tcp_port: int):
        url = f"http://127.0.0.1:{unused_tcp_port}/a.bin"
        async with HttpTransport() as transport:
            with pytest.raises(TransportFailure):
                await Fetcher(transport).verify_and_fetch(ArtifactDescriptor(url))
