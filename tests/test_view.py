import threading

from PIL import Image

from image_cache.infrastructure.cache import ImageCache
from image_cache.view import ImageView

from conftest import StubFetcher


def test_late_result_for_abandoned_url_is_discarded():
    first, second = Image.new("RGB", (1, 1), "red"), Image.new("RGB", (1, 1), "blue")
    gate = threading.Event()
    fetcher = StubFetcher({"A": first, "B": second}, gates={"A": gate})
    with ImageCache(fetcher) as cache:
        view = ImageView(cache)

        stale = view.load_image("A")
        view.load_image("B").result(timeout=5)
        assert view.image is second

        gate.set()
        assert stale.result(timeout=5) is first
        assert view.image is second
        assert view.current_url == "B"


def test_placeholder_shown_while_request_is_outstanding():
    fetched = Image.new("RGB", (4, 4))
    placeholder = Image.new("RGB", (1, 1))
    gate = threading.Event()
    changes = []
    with ImageCache(StubFetcher({"A": fetched}, gates={"A": gate})) as cache:
        view = ImageView(cache, in_progress_image=placeholder, on_change=changes.append)

        pending = view.load_image("A")
        assert view.image is placeholder

        gate.set()
        pending.result(timeout=5)

    assert view.image is fetched
    assert changes == [placeholder, fetched]


def test_explicit_cache_argument_overrides_view_cache():
    stored = Image.new("RGB", (2, 2))
    with ImageCache(StubFetcher()) as default, ImageCache(StubFetcher()) as other:
        other.put("A", stored)
        view = ImageView(default)

        view.load_image("A", cache=other).result(timeout=5)

    assert view.image is stored


def test_failed_load_shows_fallback():
    with ImageCache(StubFetcher()) as cache:
        view = ImageView(cache)
        view.load_image("https://x/missing.png").result(timeout=5)

        assert view.image is cache.fallback_image
