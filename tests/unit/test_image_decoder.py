"""Pillow-backed decoding of artwork payloads."""

from __future__ import annotations

import pytest

from adapters.image_decoder import decode_image
from core.domain.errors import AssetDecodeError


def test_png_is_decoded_with_dimensions(png):
    data = png((8, 4))

    asset = decode_image(data, source_url="https://art.test/pikachu.png")

    assert asset.format == "PNG"
    assert (asset.width, asset.height) == (8, 4)
    assert asset.mode == "RGBA"
    assert asset.media_type == "image/png"
    assert asset.size_bytes == len(data)
    assert asset.source_url == "https://art.test/pikachu.png"


def test_jpeg_is_accepted(png):
    asset = decode_image(png((3, 3), fmt="JPEG"))

    assert asset.format == "JPEG"
    assert asset.media_type == "image/jpeg"


@pytest.mark.parametrize("data", [b"", b"<!doctype html><title>404</title>", b"\x89PNG\r\n\x1a\n"])
def test_invalid_payloads_raise(data):
    with pytest.raises(AssetDecodeError):
        decode_image(data)
