# ==============================================
# Image Format Detection
# ==============================================
#
# Identify an image container from its leading bytes, validate a
# buffer before it enters the codec, and read pixel dimensions
# from JPEG SOF / PNG IHDR headers.
#
#   JPEG  FF D8
#   PNG   89 50 4E 47 0D 0A 1A 0A
#   TIFF  49 49 (II) or 4D 4D (MM)
#   WebP  RIFF....WEBP
# ==============================================

import struct
from dataclasses import dataclass
from typing import Optional, Tuple

UNKNOWN = "unknown"
JPEG = "image/jpeg"
PNG = "image/png"
TIFF = "image/tiff"
WEBP = "image/webp"

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
MIN_HEADER_BYTES = 10

# SOF0-SOF15 minus DHT (C4), JPG (C8) and DAC (CC)
SOF_MARKERS = frozenset(range(0xC0, 0xD0)) - {0xC4, 0xC8, 0xCC}


@dataclass
class BufferValidation:
    valid: bool
    format: str
    size: int
    error: Optional[str] = None


def detect_image_format(data: bytes) -> str:
    if len(data) < MIN_HEADER_BYTES:
        return UNKNOWN
    if data[:2] == b"\xff\xd8":
        return JPEG
    if data[:8] == PNG_SIGNATURE:
        return PNG
    if data[:2] in (b"II", b"MM"):
        return TIFF
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return WEBP
    return UNKNOWN


def validate_image_buffer(data: bytes, max_bytes: int) -> BufferValidation:
    if not data:
        return BufferValidation(False, UNKNOWN, 0, "Empty buffer")

    fmt = detect_image_format(data)
    size = len(data)
    if fmt == UNKNOWN:
        return BufferValidation(False, fmt, size, "Unsupported image format")
    if size > max_bytes:
        return BufferValidation(False, fmt, size, f"Image too large: {size} bytes (max {max_bytes} bytes)")
    return BufferValidation(True, fmt, size)


def image_dimensions(data: bytes) -> Optional[Tuple[int, int]]:
    """(width, height) from the image header, or None if it cannot be read."""
    fmt = detect_image_format(data)
    if fmt == PNG and len(data) >= 24:
        width, height = struct.unpack(">II", data[16:24])
        return width, height
    if fmt == JPEG:
        return _jpeg_dimensions(data)
    return None


def _jpeg_dimensions(data: bytes) -> Optional[Tuple[int, int]]:
    offset = 2
    while offset + 4 <= len(data):
        if data[offset] != 0xFF:
            offset += 1
            continue
        marker = data[offset + 1]
        if marker == 0xFF or marker == 0x01 or 0xD0 <= marker <= 0xD8:
            offset += 1 if marker == 0xFF else 2
            continue
        if marker in (0xD9, 0xDA):
            return None
        length = struct.unpack(">H", data[offset + 2:offset + 4])[0]
        if marker in SOF_MARKERS and offset + 9 <= len(data):
            height, width = struct.unpack(">HH", data[offset + 5:offset + 9])
            return width, height
        offset += 2 + max(length, 2)
    return None
