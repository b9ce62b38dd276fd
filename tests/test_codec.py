"""Tests for gallery image compression."""

import asyncio

import pytest

from ourstory.codec import (
    DATA_URL_PREFIX,
    ImageDecodeError,
    _jpeg_quality,
    compress,
    compress_sync,
    decode_data_url,
)
from tests.conftest import make_image_bytes


def test_wide_image_is_scaled_to_max_width() -> None:
    payload = asyncio.run(compress(make_image_bytes(1600, 1200)))

    assert payload.startswith(DATA_URL_PREFIX)
    with decode_data_url(payload) as img:
        assert img.format == "JPEG"
        assert img.size == (800, 600)


def test_aspect_ratio_is_preserved_for_odd_sizes() -> None:
    with decode_data_url(compress_sync(make_image_bytes(1000, 333))) as img:
        assert img.size == (800, 266)


def test_narrow_image_keeps_its_size() -> None:
    with decode_data_url(compress_sync(make_image_bytes(400, 900))) as img:
        assert img.size == (400, 900)


def test_custom_width_limit() -> None:
    with decode_data_url(compress_sync(make_image_bytes(300, 300), max_width=100)) as img:
        assert img.size == (100, 100)


def test_transparent_png_is_flattened_to_jpeg() -> None:
    payload = compress_sync(make_image_bytes(50, 40, mode="RGBA"))
    with decode_data_url(payload) as img:
        assert img.mode == "RGB"
        assert img.size == (50, 40)


def test_undecodable_bytes_raise_decode_error() -> None:
    with pytest.raises(ImageDecodeError):
        asyncio.run(compress(b"definitely not an image"))


def test_quality_maps_to_pillow_scale() -> None:
    assert _jpeg_quality(0.7) == 70
    assert _jpeg_quality(1.0) == 95
    assert _jpeg_quality(0.0) == 1


def test_failed_mode_conversion_raises_decode_error(monkeypatch) -> None:
    from PIL import Image

    raw = make_image_bytes(20, 20, mode="RGBA")

    def refuse(self, *args, **kwargs):
        raise ValueError("conversion not supported")

    monkeypatch.setattr(Image.Image, "convert", refuse)
    with pytest.raises(ImageDecodeError):
        compress_sync(raw)
