# ==============================================
# Tests for ImageConverter
# ==============================================

import io

import pytest
from PIL import Image

from orbit_metadata.errors import ConversionError, Stage
from orbit_metadata.image_converter import (
    ImageConverter,
    add_enhancement_suffix,
    update_output_path,
)


class TestImageConverter:
    def setup_method(self):
        self.converter = ImageConverter()

    def test_png_converted_to_jpeg(self, png_bytes):
        result = self.converter.to_jpeg(png_bytes)

        assert result.converted
        assert result.original_format == "png"
        assert result.target_format == "jpeg"
        assert result.data[:2] == b"\xff\xd8"
        assert result.original_size == len(png_bytes)
        assert result.converted_size == len(result.data)
        with Image.open(io.BytesIO(result.data)) as img:
            assert img.format == "JPEG"
            assert img.size == (8, 8)
            assert img.mode == "RGB"

    def test_jpeg_passes_through(self, minimal_jpeg):
        result = self.converter.to_jpeg(minimal_jpeg)
        assert not result.converted
        assert result.data is minimal_jpeg
        assert result.original_format == "jpeg"
        assert result.conversion_time_ms == 0.0

    def test_needs_conversion(self, minimal_jpeg, png_bytes):
        assert not self.converter.needs_conversion(minimal_jpeg)
        assert self.converter.needs_conversion(png_bytes)

    def test_unreadable_data(self):
        with pytest.raises(ConversionError) as exc_info:
            self.converter.to_jpeg(b"definitely not an image at all")
        assert exc_info.value.stage is Stage.CONVERT

    def test_truncated_png(self, png_bytes):
        with pytest.raises(ConversionError):
            self.converter.to_jpeg(png_bytes[:40])

    @pytest.mark.parametrize("fmt, size, expected", [
        ("image/png", 1000, 95),
        ("image/png", 3 * 1024 * 1024, 90),
        ("image/tiff", 1000, 95),
        ("image/webp", 1000, 90),
    ])
    def test_optimal_quality(self, fmt, size, expected):
        assert ImageConverter.optimal_quality(fmt, size) == expected


class TestOutputPaths:
    def test_enhancement_suffix(self):
        assert add_enhancement_suffix("photos/patio.png") == "photos/patio_me.png"

    def test_converted_output_becomes_jpg(self):
        assert update_output_path("out/patio.png", converted=True) == "out/patio_me.jpg"
        assert update_output_path("out/patio.jpeg", converted=False) == "out/patio_me.jpeg"
