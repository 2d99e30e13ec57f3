from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, Dict, Optional

from PIL import Image

from ..config import SETTINGS, CacheSettings
from ..errors import FetchError, TransportFailure
from .network import FETCHER, ImageFetcher

logger = logging.getLogger(__name__)

Deliver = Callable[[Image.Image], None]


class ImageCache:
    """In-memory, URL-keyed image cache with asynchronous delivery.

    ``get`` never blocks: hits and misses alike are handed to ``deliver`` on a
    single delivery thread, and the returned future resolves once that has
    happened. A failed fetch delivers ``fallback_image`` instead of raising.
    Fetched images are only kept when ``cache_on_fetch`` is set; otherwise
    callers store what they want cached with ``put``.
    """

    def __init__(
        self,
        fetcher: ImageFetcher | None = None,
        *,
        log_errors: bool = False,
        cache_on_fetch: bool = False,
        surface_errors: bool = False,
        dedupe_inflight: bool = False,
        fetch_workers: int = 4,
        delivery_executor: Executor | None = None,
    ) -> None:
        self._fetcher = fetcher or FETCHER
        self._entries: Dict[str, Image.Image] = {}
        self._inflight: Dict[str, Future] = {}
        self._fallback: Optional[Image.Image] = None
        self._lock = threading.Lock()
        self._fetch_pool = ThreadPoolExecutor(
            max_workers=fetch_workers, thread_name_prefix="image-cache-fetch"
        )
        self._owns_delivery = delivery_executor is None
        self._delivery = delivery_executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="image-cache-delivery"
        )
        self.log_errors = log_errors
        self.cache_on_fetch = cache_on_fetch
        self.surface_errors = surface_errors
        self.dedupe_inflight = dedupe_inflight

    @classmethod
    def from_settings(
        cls, settings: CacheSettings, fetcher: ImageFetcher | None = None
    ) -> "ImageCache":
        return cls(
            fetcher,
            log_errors=settings.log_errors,
            cache_on_fetch=settings.cache_on_fetch,
            surface_errors=settings.surface_errors,
            dedupe_inflight=settings.dedupe_inflight,
            fetch_workers=settings.fetch_workers,
        )

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __enter__(self) -> "ImageCache":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def fallback_image(self) -> Image.Image:
        with self._lock:
            if self._fallback is None:
                self._fallback = Image.new("RGBA", (0, 0))
            return self._fallback

    @fallback_image.setter
    def fallback_image(self, image: Image.Image) -> None:
        if image is None:
            raise ValueError("fallback image cannot be None")
        with self._lock:
            self._fallback = image

    def get(self, url: str, deliver: Deliver | None = None) -> Future:
        result: Future = Future()
        with self._lock:
            cached = self._entries.get(url)
        if cached is not None:
            logger.debug("Cache hit for %s", url)
            self._dispatch(result, deliver, cached)
            return result

        logger.debug("Cache miss for %s", url)
        fetch = self._start_fetch(url)
        fetch.add_done_callback(lambda done: self._complete(url, done, result, deliver))
        return result

    def put(self, url: str, image: Image.Image) -> None:
        if image is None:
            raise ValueError("cached image cannot be None")
        with self._lock:
            self._entries[url] = image
        logger.debug("Stored image for %s", url)

    def close(self) -> None:
        self._fetch_pool.shutdown(wait=True)
        if self._owns_delivery:
            self._delivery.shutdown(wait=True)

    def _start_fetch(self, url: str) -> Future:
        if not self.dedupe_inflight:
            return self._fetch_pool.submit(self._fetcher.fetch, url)

        with self._lock:
            pending = self._inflight.get(url)
            if pending is not None:
                logger.debug("Joining in-flight fetch for %s", url)
                return pending
            pending = self._fetch_pool.submit(self._fetcher.fetch, url)
            self._inflight[url] = pending
        pending.add_done_callback(lambda done: self._forget_inflight(url, done))
        return pending

    def _forget_inflight(self, url: str, fetch: Future) -> None:
        with self._lock:
            if self._inflight.get(url) is fetch:
                del self._inflight[url]

    def _complete(self, url: str, fetch: Future, result: Future, deliver: Deliver | None) -> None:
        try:
            image = fetch.result()
        except FetchError as exc:
            error = exc
        except Exception as exc:
            error = TransportFailure(url, repr(exc))
        else:
            if self.cache_on_fetch:
                self.put(url, image)
            self._dispatch(result, deliver, image)
            return

        self._handle(error)
        self._dispatch(
            result,
            deliver,
            self.fallback_image,
            error if self.surface_errors else None,
        )

    def _handle(self, error: FetchError) -> None:
        if self.log_errors:
            logger.warning("%s %s", error.message, error.url)

    def _dispatch(
        self,
        result: Future,
        deliver: Deliver | None,
        image: Image.Image,
        error: FetchError | None = None,
    ) -> None:
        self._delivery.submit(_deliver, result, deliver, image, error)


def _deliver(
    result: Future,
    deliver: Deliver | None,
    image: Image.Image,
    error: FetchError | None,
) -> None:
    if deliver is not None:
        try:
            deliver(image)
        except Exception:
            logger.exception("Image delivery callback failed")
    if error is not None:
        result.set_exception(error)
    else:
        result.set_result(image)


CACHE = ImageCache.from_settings(SETTINGS, fetcher=FETCHER)


def get_image(url: str, deliver: Deliver | None = None) -> Future:
    return CACHE.get(url, deliver)


def store_image(image: Image.Image, url: str) -> None:
    CACHE.put(url, image)
