"""Infrastructure helpers for fetching and caching images."""

from .cache import CACHE, ImageCache, get_image, store_image
from .network import FETCHER, ImageFetcher

__all__ = [
    "CACHE",
    "ImageCache",
    "get_image",
    "store_image",
    "FETCHER",
    "ImageFetcher",
]
