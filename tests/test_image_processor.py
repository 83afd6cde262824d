"""Tests for profile photo optimization."""

from __future__ import annotations

import base64
from io import BytesIO

import pytest
from PIL import Image

from worklooking.errors import ImageProcessingFailed
from worklooking.utils.image_processor import IMAGE_MAX_SIZE, optimize_image


def _decode(data_url: str) -> Image.Image:
    prefix = "data:image/jpeg;base64,"
    assert data_url.startswith(prefix)
    return Image.open(BytesIO(base64.b64decode(data_url[len(prefix):])))


class TestOptimizeImage:
    def test_large_photo_fits_within_bounds(self, tmp_path):
        source = tmp_path / "photo.png"
        Image.new("RGBA", (800, 400), (200, 30, 30, 255)).save(source)

        processed = optimize_image(source)

        decoded = _decode(processed.data_url)
        assert decoded.format == "JPEG"
        assert decoded.size == (IMAGE_MAX_SIZE, 100)
        assert processed.original_size == source.stat().st_size
        assert processed.optimized_size > 0

    def test_small_photo_is_not_enlarged(self, tmp_path):
        source = tmp_path / "small.jpg"
        Image.new("RGB", (50, 80), "white").save(source)

        assert _decode(optimize_image(source).data_url).size == (50, 80)

    def test_not_an_image(self, tmp_path):
        source = tmp_path / "notes.txt"
        source.write_text("not a picture")

        with pytest.raises(ImageProcessingFailed, match="Failed to process image"):
            optimize_image(source)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageProcessingFailed):
            optimize_image(tmp_path / "missing.png")
