from __future__ import annotations

import io
import logging
from typing import Callable
from urllib.parse import urlsplit

import requests
from PIL import Image, UnidentifiedImageError
from requests.models import PreparedRequest

from ..config import SETTINGS
from ..errors import DecodeFailure, InvalidKey, TransportFailure

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], requests.Session]

_SCHEMES = ("http", "https")

_URL_ERRORS = (
    requests.exceptions.InvalidURL,
    requests.exceptions.MissingSchema,
    requests.exceptions.URLRequired,
)


def _validate_url(url: str) -> str:
    """Return ``url`` unchanged if it is a usable HTTP(S) locator.

    No normalization is applied; two strings differing by a trailing slash
    stay distinct keys.
    """

    if not url or any(ch.isspace() for ch in url):
        raise InvalidKey(url)
    try:
        parts = urlsplit(url)
        host = parts.hostname
        parts.port  # non-numeric ports raise ValueError
    except ValueError as exc:
        raise InvalidKey(url, str(exc)) from exc
    if parts.scheme.lower() not in _SCHEMES or not host:
        raise InvalidKey(url)
    # Same host and label checks the transport applies before sending.
    try:
        PreparedRequest().prepare_url(url, None)
    except _URL_ERRORS as exc:
        raise InvalidKey(url, str(exc)) from exc
    return url


def decode_image(url: str, payload: bytes | None) -> Image.Image:
    if not payload:
        raise DecodeFailure(url, "empty body")
    try:
        image = Image.open(io.BytesIO(payload))
        image.load()
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
        SyntaxError,
        EOFError,
    ) as exc:
        raise DecodeFailure(url, str(exc)) from exc
    return image


class ImageFetcher:
    """One-shot HTTP(S) retrieval of a single image. Never retries."""

    def __init__(
        self,
        session_factory: SessionFactory | None = None,
        *,
        timeout: float | None = None,
        user_agent: str | None = None,
    ) -> None:
        self._session_factory = session_factory or requests.Session
        self._timeout = timeout
        self._user_agent = user_agent or SETTINGS.user_agent
        self._session = self._create_session()

    def _create_session(self) -> requests.Session:
        session = self._session_factory()
        session.headers.update({"User-Agent": self._user_agent})
        return session

    def fetch(self, url: str) -> Image.Image:
        target_url = _validate_url(url)
        try:
            response = self._session.get(target_url, timeout=self._timeout)
            response.raise_for_status()
        except _URL_ERRORS as exc:
            raise InvalidKey(url, str(exc)) from exc
        except requests.RequestException as exc:
            raise TransportFailure(url, str(exc)) from exc
        logger.debug("Fetched %d bytes from %s", len(response.content or b""), url)
        return decode_image(url, response.content)


FETCHER = ImageFetcher(timeout=SETTINGS.timeout)
