import io
import struct
import threading
import zlib

import pytest
import requests
from PIL import Image

from image_cache.errors import TransportFailure
from image_cache.infrastructure.cache import ImageCache


def png_bytes(size=(3, 2), color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, "PNG")
    return buffer.getvalue()


def _png_chunk(kind: bytes, data: bytes) -> bytes:
    crc = zlib.crc32(kind + data) & 0xFFFFFFFF
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", crc)


def oversized_png_bytes(width=100000, height=100000) -> bytes:
    """Well-formed PNG header declaring far more pixels than Pillow will open."""
    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IDAT", zlib.compress(b""))
        + _png_chunk(b"IEND", b"")
    )


class FakeResponse:
    def __init__(self, content: bytes = b"", status_code: int = 200) -> None:
        self.content = content
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error", response=self)


class FakeSession:
    """Stands in for ``requests.Session``; maps URLs to responses or exceptions."""

    def __init__(self, routes=None) -> None:
        self.headers = {}
        self.routes = routes or {}
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        outcome = self.routes.get(url, FakeResponse(status_code=404))
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class StubFetcher:
    """Returns canned images per URL, optionally blocking until a gate opens."""

    def __init__(self, results=None, gates=None) -> None:
        self.results = results or {}
        self.gates = gates or {}
        self.calls = []
        self._lock = threading.Lock()

    def fetch(self, url):
        with self._lock:
            self.calls.append(url)
        gate = self.gates.get(url)
        if gate is not None:
            gate.wait(5)
        outcome = self.results.get(url)
        if outcome is None:
            raise TransportFailure(url)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def stub_fetcher():
    return StubFetcher()


@pytest.fixture
def cache(stub_fetcher):
    with ImageCache(stub_fetcher) as instance:
        yield instance
