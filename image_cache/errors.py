"""Classified failures raised by the image fetcher."""

from __future__ import annotations


class FetchError(Exception):
    """Base class for a failed image retrieval.

    Each subclass carries a fixed, human readable ``message`` describing the
    classification; the offending ``url`` is kept on the instance.
    """

    message = "Image Caching Error: Image could not be retrieved."

    def __init__(self, url: str, detail: str | None = None) -> None:
        self.url = url
        self.detail = detail
        if detail:
            text = f"{self.message} ({url}: {detail})"
        else:
            text = f"{self.message} ({url})"
        super().__init__(text)


class InvalidKey(FetchError):
    message = "Image Caching Error: Image URL was invalid."


class TransportFailure(FetchError):
    message = "Image Caching Error: Request for image data failed."


class DecodeFailure(FetchError):
    message = "Image Caching Error: Image data retrieved could not be parsed."


__all__ = ["FetchError", "InvalidKey", "TransportFailure", "DecodeFailure"]
