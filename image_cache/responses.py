from __future__ import annotations

import io

from flask import send_file
from PIL import Image


def image_response(img: Image.Image):
    """PNG response for ``img``; the zero-size placeholder becomes a 204."""
    if img.width == 0 or img.height == 0:
        return ("", 204)
    buffer = io.BytesIO()
    img.save(buffer, "PNG", optimize=True)
    buffer.seek(0)
    return send_file(buffer, mimetype="image/png")
