"""Panel image encoder.

Provides a small OOP wrapper around Pillow for the images returned by
the synthesis model: it checks that a base64 payload really is an
image, wraps it in a ``data:`` URI with the detected MIME type, and
renders PNG thumbnails for the storyboard grid.

Public class: `PanelImageEncoder`

Example:
    encoder = PanelImageEncoder(max_size=(320, 180))
    uri = encoder.to_data_uri(b64_payload)
    thumb_png = encoder.thumbnail_from_data_uri(uri)
"""
from __future__ import annotations

import base64
import binascii
import io
from typing import Tuple

from PIL import Image

_MIME_BY_FORMAT = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}


class PanelImageEncoder:
    """Validate synthesized panels and derive thumbnails from them.

    Args:
        max_size: Maximum width and height for thumbnails. Defaults to (320, 180), a 16:9 box.
        background: Color used when flattening images with alpha. Defaults to black.
    """

    def __init__(self, max_size: Tuple[int, int] = (320, 180), background: Tuple[int, int, int] | None = None):
        self.max_size = max_size
        self.background = background or (0, 0, 0)

    @staticmethod
    def _decode(data: str | bytes) -> bytes:
        if isinstance(data, str):
            data = data.encode("utf-8")
        try:
            return base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Invalid base64 data provided") from exc

    def _open(self, raw: bytes) -> Image.Image:
        try:
            img = Image.open(io.BytesIO(raw))
            img.load()
        except Exception as exc:
            raise ValueError("Decoded bytes are not a supported image format") from exc
        return img

    def to_data_uri(self, data: str | bytes) -> str:
        """Return a ``data:`` URI for base64-encoded image data.

        Raises:
            ValueError: If the payload is empty, not base64, or not an image.
        """
        if not data:
            raise ValueError("Image payload is empty")
        raw = self._decode(data)
        img = self._open(raw)
        mime = _MIME_BY_FORMAT.get(img.format or "", "image/png")
        encoded = data.decode("utf-8") if isinstance(data, bytes) else data
        return f"data:{mime};base64,{encoded}"

    def from_data_uri(self, uri: str) -> Tuple[str, bytes]:
        """Split a base64 ``data:`` URI into its MIME type and raw bytes.

        Raises:
            ValueError: If the URI is not a base64 ``data:`` URI.
        """
        header, sep, payload = (uri or "").partition(",")
        if not sep or not header.startswith("data:") or not header.endswith(";base64"):
            raise ValueError("Expected a base64 data URI")
        mime = header[len("data:"):-len(";base64")] or "application/octet-stream"
        return mime, self._decode(payload)

    def thumbnail_from_data_uri(self, uri: str) -> bytes:
        """Create a PNG thumbnail from a ``data:`` URI produced by `to_data_uri`.

        Returns:
            Raw PNG bytes.

        Raises:
            ValueError: If the URI is malformed or does not hold an image.
        """
        _, raw = self.from_data_uri(uri)
        src = self._open(raw).convert("RGBA")
        src.thumbnail(self.max_size, Image.LANCZOS)

        # Flatten alpha against the background color
        background = Image.new("RGB", src.size, self.background)
        background.paste(src, mask=src.split()[3])

        out_io = io.BytesIO()
        background.save(out_io, format="PNG", optimize=True)
        return out_io.getvalue()
