# -*- coding: utf-8 -*-
"""Gallery image compression.

Every stored gallery image goes through :func:`compress`: decode, apply EXIF
orientation, cap the width, re-encode as JPEG and wrap as a data URL so the
payload can live inside a JSON collection.
"""
from __future__ import annotations

import asyncio
import base64
import io

from PIL import Image, ImageOps

MAX_WIDTH = 800
QUALITY = 0.7
DATA_URL_PREFIX = "data:image/jpeg;base64,"


class ImageDecodeError(ValueError):
    """Raised when input bytes cannot be opened as an image."""


def _jpeg_quality(quality: float) -> int:
    # Pillow's useful JPEG range is 1..95.
    return max(1, min(95, int(round(quality * 100))))


def compress_sync(raw: bytes, max_width: int = MAX_WIDTH, quality: float = QUALITY) -> str:
    """Blocking version of :func:`compress`."""
    try:
        with Image.open(io.BytesIO(raw)) as src:
            src.load()
            img = ImageOps.exif_transpose(src)
            if img.mode != "RGB":
                img = img.convert("RGB")
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise ImageDecodeError(f"Unreadable image: {exc}") from exc

    w, h = img.size
    if w > max_width:
        ratio = max_width / w
        img = img.resize((max_width, max(1, int(round(h * ratio)))), Image.LANCZOS)

    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=_jpeg_quality(quality), optimize=True)
    return DATA_URL_PREFIX + base64.b64encode(buf.getvalue()).decode("ascii")


async def compress(raw: bytes, max_width: int = MAX_WIDTH, quality: float = QUALITY) -> str:
    """Compress *raw* off the event loop; raises ImageDecodeError."""
    return await asyncio.to_thread(compress_sync, raw, max_width, quality)


def decode_data_url(payload: str) -> Image.Image:
    """Open a stored gallery payload (used for previews and tests)."""
    if not payload.startswith(DATA_URL_PREFIX):
        raise ImageDecodeError("Not a JPEG data URL")
    return Image.open(io.BytesIO(base64.b64decode(payload[len(DATA_URL_PREFIX):])))
