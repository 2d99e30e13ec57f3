from __future__ import annotations

from concurrent.futures import TimeoutError as FutureTimeout

from flask import Flask, jsonify, request

from .config import SETTINGS, configure_logging
from .errors import DecodeFailure, FetchError
from .infrastructure.cache import CACHE, ImageCache
from .infrastructure.network import decode_image
from .responses import image_response

APP_VERSION = "1.0.0"


def create_app(cache: ImageCache | None = None) -> Flask:
    logger = configure_logging()
    chosen = cache if cache is not None else CACHE
    app = Flask(__name__)

    @app.route("/image", methods=["GET"])
    def image():
        url = request.args.get("url", "")
        if not url:
            return ("Missing url parameter", 400)
        try:
            img = chosen.get(url).result(timeout=SETTINGS.delivery_timeout)
        except FetchError as exc:
            return (str(exc), 502)
        except FutureTimeout:
            return (f"Timed out waiting for {url}", 504)
        return image_response(img)

    @app.route("/image", methods=["PUT"])
    def store():
        url = request.args.get("url", "")
        if not url:
            return ("Missing url parameter", 400)
        try:
            img = decode_image(url, request.get_data())
        except DecodeFailure as exc:
            return (str(exc), 400)
        chosen.put(url, img)
        logger.info("Stored %s (%dx%d)", url, img.width, img.height)
        return ("", 201)

    @app.route("/health")
    def health():
        return jsonify(
            ok=True,
            version=APP_VERSION,
            entries=len(chosen),
            log_errors=chosen.log_errors,
            cache_on_fetch=chosen.cache_on_fetch,
            surface_errors=chosen.surface_errors,
            dedupe_inflight=chosen.dedupe_inflight,
        )

    return app
