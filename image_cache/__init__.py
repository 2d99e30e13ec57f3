"""Application package exports."""

from .app import APP_VERSION, create_app
from .errors import DecodeFailure, FetchError, InvalidKey, TransportFailure
from .infrastructure import CACHE, FETCHER, ImageCache, ImageFetcher, get_image, store_image
from .view import ImageView

__version__ = APP_VERSION

__all__ = [
    "APP_VERSION",
    "__version__",
    "create_app",
    "CACHE",
    "FETCHER",
    "ImageCache",
    "ImageFetcher",
    "ImageView",
    "get_image",
    "store_image",
    "FetchError",
    "InvalidKey",
    "TransportFailure",
    "DecodeFailure",
]
