# ==============================================
# JPEG APP1 Segment
# ==============================================
#
# PURPOSE:
#   Put the packet into a JPEG byte stream and find it again.
#
# SEGMENT LAYOUT:
# ---------------
#   FF E1                 APP1 marker (not counted in length)
#   LL LL                 big-endian length = 2 + len(signature) + len(payload)
#   http://ns.adobe.com/xap/1.0/\x00
#   <UTF-8 packet>
#
#   embed() inserts the segment directly after SOI (FF D8) and
#   leaves every other byte of the stream as it was.
#
#   extract() walks the marker segments up to start-of-scan. A
#   segment at offset i that is not XMP (EXIF APP1, APP0, DQT, ...)
#   occupies 2 + length bytes, so the walk resumes at exactly
#   i + 2 + length.
#
# FUNCTIONS:
# ----------
# - is_jpeg(data) -> bool
# - embed_packet(data, packet_text) -> bytes     (raises FormatError)
# - extract_packet(data) -> str | None           (None when absent)
#
# ==============================================

import struct
from typing import Optional

from orbit_metadata.errors import CodecError, FormatError, Stage
from orbit_metadata.logging_setup import get_logger
from .namespaces import XMP_SIGNATURE


logger = get_logger(__name__)

SOI = b"\xff\xd8"
APP1 = b"\xff\xe1"
MAX_SEGMENT_LENGTH = 0xFFFF
SOS = 0xDA
EOI = 0xD9
# markers without a length field: TEM, RST0-RST7, SOI
STANDALONE_MARKERS = frozenset([0x01, 0xD8] + list(range(0xD0, 0xD8)))


def is_jpeg(data: bytes) -> bool:
    return len(data) >= 2 and data[:2] == SOI


def embed_packet(data: bytes, packet_text: str) -> bytes:
    """
    Insert the packet as an APP1 segment right after SOI.

    Args:
        data: JPEG byte stream
        packet_text: Packet text (encoded as UTF-8)

    Returns:
        New byte stream; the input is never modified

    Raises:
        FormatError: input is not a JPEG
        CodecError: packet does not fit in one APP1 segment
    """
    if not is_jpeg(data):
        raise FormatError("embedding requires a JPEG (missing FF D8 start-of-image marker)", Stage.EMBED)

    payload = XMP_SIGNATURE + packet_text.encode("utf-8")
    length = len(payload) + 2
    if length > MAX_SEGMENT_LENGTH:
        raise CodecError(
            f"packet is {len(payload)} bytes, an APP1 segment holds at most {MAX_SEGMENT_LENGTH - 2}",
            Stage.EMBED
        )

    segment = APP1 + struct.pack(">H", length) + payload
    logger.debug("APP1 segment built", extra={"extra": {"segment_bytes": len(segment)}})
    return bytes(data[:2]) + segment + bytes(data[2:])


def extract_packet(data: bytes) -> Optional[str]:
    """Return the packet text from the first XMP APP1 segment, or None."""
    if not is_jpeg(data):
        return None

    sig_len = len(XMP_SIGNATURE)
    offset = 2
    end = len(data)

    while offset + 4 <= end:
        if data[offset] != 0xFF:
            offset += 1
            continue

        marker = data[offset + 1]
        if marker == 0xFF:
            # fill byte before a marker
            offset += 1
            continue
        if marker in STANDALONE_MARKERS:
            offset += 2
            continue
        if marker in (SOS, EOI):
            break

        length = struct.unpack(">H", data[offset + 2:offset + 4])[0]
        if length < 2:
            offset += 2
            continue

        body_start = offset + 4
        segment_end = offset + 2 + length
        if marker == APP1[1] and data[body_start:body_start + sig_len] == XMP_SIGNATURE:
            if segment_end > end:
                logger.warning("XMP segment truncated",
                               extra={"extra": {"declared": length, "available": end - offset - 2}})
            payload = data[body_start + sig_len:segment_end]
            return payload.decode("utf-8", errors="replace")

        offset = segment_end

    return None
