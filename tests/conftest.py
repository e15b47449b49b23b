"""Shared test fixtures for alpac."""

from __future__ import annotations

import hashlib
from typing import AsyncIterator, Dict, List, Optional

import pytest

from alpac.config import FetchSettings
from alpac.download.transport import Transport
from alpac.exceptions import TransportFailure

PAYLOAD = b"The quick brown fox jumps over the lazy dog\n" * 64


def hexdigests(data: bytes, *kinds: str) -> Dict[str, str]:
    return {kind: hashlib.new(kind, data).hexdigest() for kind in kinds}


class StaticTransport(Transport):
    """Serves fixed payloads per URL in fixed-size chunks."""

    def __init__(self, payloads: Dict[str, bytes], chunk_size: int = 7):
        self.payloads = payloads
        self.chunk_size = chunk_size
        self.requests: List[str] = []
        self.closed = False

    async def stream(self, url: str) -> AsyncIterator[bytes]:
        self.requests.append(url)
        if url not in self.payloads:
            raise TransportFailure("HTTP 404", context={"url": url, "status": 404})
        data = self.payloads[url]
        for i in range(0, len(data), self.chunk_size):
            yield data[i : i + self.chunk_size]

    async def close(self) -> None:
        self.closed = True


class FlakyTransport(StaticTransport):
    """Fails mid-stream for the first ``failures`` requests."""

    def __init__(self, payloads: Dict[str, bytes], failures: int = 1):
        super().__init__(payloads)
        self.failures = failures

    async def stream(self, url: str) -> AsyncIterator[bytes]:
        self.requests.append(url)
        data = self.payloads[url]
        yield data[:5]
        if self.failures > 0:
            self.failures -= 1
            raise TransportFailure("connection reset", context={"url": url})
        yield data[5:]


@pytest.fixture
def payload() -> bytes:
    return PAYLOAD


@pytest.fixture
def settings() -> FetchSettings:
    return FetchSettings(retry_delay=0.0)


@pytest.fixture
def recipe_data() -> Dict:
    return {
        "name": "fox",
        "description": "A quick brown fox",
        "homepage": "https://example.org",
        "license": "MIT",
        "topics": ["animals"],
        "sources": {
            "1.0": {
                "url": "https://example.org/pkg/fox-1.0.tar.gz",
                "size": len(PAYLOAD),
                **hexdigests(PAYLOAD, "sha256"),
            },
            "2.0": {
                "url": "https://example.org/pkg/fox-2.0.tar.gz",
                **hexdigests(PAYLOAD + b"v2", "md5", "sha1", "sha512"),
            },
        },
    }


def make_transport(payloads: Optional[Dict[str, bytes]] = None, **kwargs) -> StaticTransport:
    return StaticTransport(payloads or {}, **kwargs)
