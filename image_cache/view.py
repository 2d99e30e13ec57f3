"""Display-bound consumer of :class:`ImageCache`."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Callable, Optional

from PIL import Image

from .infrastructure.cache import CACHE, ImageCache


class ImageView:
    """A mutable image slot fed from a cache.

    Each ``load_image`` call makes its URL the current one. Deliveries for any
    other URL arrive late and are dropped, so an abandoned request never
    overwrites the slot.
    """

    def __init__(
        self,
        cache: ImageCache | None = None,
        in_progress_image: Image.Image | None = None,
        on_change: Callable[[Image.Image], None] | None = None,
    ) -> None:
        self.cache = cache
        self.in_progress_image = in_progress_image
        self.on_change = on_change
        self._image: Optional[Image.Image] = None
        self._current_url: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def image(self) -> Optional[Image.Image]:
        return self._image

    @property
    def current_url(self) -> Optional[str]:
        return self._current_url

    def load_image(self, url: str, cache: ImageCache | None = None) -> Future:
        chosen = cache if cache is not None else self.cache
        if chosen is None:
            chosen = CACHE
        with self._lock:
            self._current_url = url
            placeholder = self.in_progress_image
            if placeholder is not None:
                self._image = placeholder
        if placeholder is not None:
            self._notify(placeholder)
        return chosen.get(url, lambda image: self._apply(url, image))

    def _apply(self, url: str, image: Image.Image) -> None:
        with self._lock:
            if url != self._current_url:
                return
            self._image = image
        self._notify(image)

    def _notify(self, image: Image.Image) -> None:
        if self.on_change is not None:
            self.on_change(image)
