# ==============================================
# ImageConverter
# ==============================================
#
# PURPOSE:
#   Image-conversion collaborator. The codec only embeds into JPEG,
#   so PNG / TIFF / WebP inputs go through Pillow first.
#
# CLASS: ImageConverter
# ---------------------
#   Methods:
#   --------
#   - to_jpeg(data, quality=None) -> ConversionResult
#       JPEG input is returned untouched (converted=False).
#       Anything Pillow can open is flattened to RGB and saved as an
#       optimized progressive JPEG.
#   - needs_conversion(data) -> bool
#   - optimal_quality(fmt, size) -> int
#       PNG 95 (90 above 2 MiB), TIFF 95, everything else 90
#
# PATH HELPERS:
# -------------
#   - add_enhancement_suffix("a/b.png")        → "a/b_me.png"
#   - update_output_path("a/b.png", True)      → "a/b_me.jpg"
#
# ==============================================

import io
import time
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional

from PIL import Image, UnidentifiedImageError

from orbit_metadata.errors import ConversionError
from orbit_metadata.logging_setup import get_logger
from orbit_metadata.storage.image_format import JPEG, PNG, TIFF, detect_image_format


logger = get_logger(__name__)

ENHANCEMENT_SUFFIX = "_me"
LARGE_PNG_BYTES = 2 * 1024 * 1024


@dataclass
class ConversionResult:
    data: bytes
    original_format: str
    target_format: str
    converted: bool
    conversion_time_ms: float
    original_size: int
    converted_size: int


class ImageConverter:
    def needs_conversion(self, data: bytes) -> bool:
        return detect_image_format(data) != JPEG

    def to_jpeg(self, data: bytes, quality: Optional[int] = None) -> ConversionResult:
        start_time = time.time()
        fmt = detect_image_format(data)

        if fmt == JPEG:
            return ConversionResult(
                data=data,
                original_format="jpeg",
                target_format="jpeg",
                converted=False,
                conversion_time_ms=0.0,
                original_size=len(data),
                converted_size=len(data),
            )

        if quality is None:
            quality = self.optimal_quality(fmt, len(data))

        try:
            with Image.open(io.BytesIO(data)) as img:
                original_format = (img.format or fmt.split("/")[-1]).lower()
                if img.mode != "RGB":
                    img = img.convert("RGB")
                out = io.BytesIO()
                img.save(out, format="JPEG", quality=quality, optimize=True, progressive=True)
        except UnidentifiedImageError as exc:
            raise ConversionError(f"unrecognised image data ({fmt})") from exc
        except OSError as exc:
            raise ConversionError(f"could not convert {fmt} to JPEG: {exc}") from exc

        converted = out.getvalue()
        elapsed = (time.time() - start_time) * 1000
        logger.info("converted image to JPEG", extra={"extra": {
            "original_format": original_format,
            "original_size": len(data),
            "converted_size": len(converted),
            "quality": quality,
        }})
        return ConversionResult(
            data=converted,
            original_format=original_format,
            target_format="jpeg",
            converted=True,
            conversion_time_ms=round(elapsed, 2),
            original_size=len(data),
            converted_size=len(converted),
        )

    @staticmethod
    def optimal_quality(fmt: str, size: int) -> int:
        if fmt == PNG:
            return 90 if size > LARGE_PNG_BYTES else 95
        if fmt == TIFF:
            return 95
        return 90


def add_enhancement_suffix(path: str) -> str:
    p = PurePosixPath(path)
    return str(p.with_name(f"{p.stem}{ENHANCEMENT_SUFFIX}{p.suffix}"))


def update_output_path(path: str, converted: bool) -> str:
    """Suffix the name with _me and, after a conversion, switch the extension to .jpg."""
    p = PurePosixPath(add_enhancement_suffix(path))
    if converted:
        p = p.with_suffix(".jpg")
    return str(p)
