# ==============================================
# Tests for the JPEG APP1 Segment
# ==============================================
#
# class TestEmbedPacket   → placement after SOI, input untouched, limits
# class TestExtractPacket → marker walk over APPn / fill / standalone markers
# ==============================================

import struct

import pytest

from orbit_metadata.errors import CodecError, FormatError, Stage
from orbit_metadata.packet.jpeg_segment import embed_packet, extract_packet, is_jpeg
from orbit_metadata.packet.namespaces import XMP_SIGNATURE


PACKET = '<x:xmpmeta xmlns:x="adobe:ns:meta/"><lifestyle:Setting>Patio café</lifestyle:Setting></x:xmpmeta>'


class TestEmbedPacket:
    def test_segment_follows_soi(self, minimal_jpeg):
        out = embed_packet(minimal_jpeg, PACKET)
        payload = XMP_SIGNATURE + PACKET.encode("utf-8")

        assert out[:2] == b"\xff\xd8"
        assert out[2:4] == b"\xff\xe1"
        assert struct.unpack(">H", out[4:6])[0] == len(payload) + 2
        assert out[6:6 + len(payload)] == payload

    def test_other_bytes_preserved(self, minimal_jpeg):
        out = embed_packet(minimal_jpeg, PACKET)
        segment_len = 2 + struct.unpack(">H", out[4:6])[0]
        assert out[2 + segment_len:] == minimal_jpeg[2:]
        assert len(out) == len(minimal_jpeg) + segment_len

    def test_input_not_mutated(self, minimal_jpeg):
        data = bytearray(minimal_jpeg)
        out = embed_packet(data, PACKET)
        assert bytes(data) == minimal_jpeg
        assert isinstance(out, bytes)

    def test_png_rejected(self, png_bytes):
        with pytest.raises(FormatError) as exc_info:
            embed_packet(png_bytes, PACKET)
        assert exc_info.value.stage is Stage.EMBED

    def test_oversized_packet_rejected(self, minimal_jpeg):
        with pytest.raises(CodecError) as exc_info:
            embed_packet(minimal_jpeg, "x" * 70000)
        assert exc_info.value.stage is Stage.EMBED

    def test_is_jpeg(self, minimal_jpeg, png_bytes):
        assert is_jpeg(minimal_jpeg)
        assert not is_jpeg(png_bytes)
        assert not is_jpeg(b"\xff")


class TestExtractPacket:
    def test_round_trip(self, minimal_jpeg):
        assert extract_packet(embed_packet(minimal_jpeg, PACKET)) == PACKET

    def test_skips_exif_segments(self, minimal_jpeg, app1_segment):
        """Adjacent EXIF APP1 segments are stepped over by their declared length."""
        exif = app1_segment(b"Exif\x00\x00" + b"\x00" * 40)
        # an EXIF body that happens to contain the XMP signature mid-segment
        decoy = app1_segment(b"Exif\x00\x00" + XMP_SIGNATURE + b"<fake/>")
        with_xmp = embed_packet(minimal_jpeg, PACKET)
        data = with_xmp[:2] + exif + decoy + with_xmp[2:]

        assert extract_packet(data) == PACKET

    def test_fill_bytes_and_standalone_markers(self, minimal_jpeg):
        with_xmp = embed_packet(minimal_jpeg, PACKET)
        data = with_xmp[:2] + b"\xff\xff\xff\xd0" + with_xmp[2:]
        assert extract_packet(data) == PACKET

    def test_stops_at_start_of_scan(self, minimal_jpeg, app1_segment):
        sos = b"\xff\xda\x00\x08\x01\x01\x00\x00\x3f\x00"
        hidden = app1_segment(XMP_SIGNATURE + PACKET.encode("utf-8"))
        data = minimal_jpeg[:-2] + sos + hidden + b"\xff\xd9"
        assert extract_packet(data) is None

    def test_no_packet(self, minimal_jpeg):
        assert extract_packet(minimal_jpeg) is None

    def test_not_a_jpeg(self, png_bytes):
        assert extract_packet(png_bytes) is None
        assert extract_packet(b"") is None

    def test_invalid_utf8_is_replaced(self, minimal_jpeg, app1_segment):
        data = minimal_jpeg[:2] + app1_segment(XMP_SIGNATURE + b"<a>\xff\xfe</a>") + minimal_jpeg[2:]
        text = extract_packet(data)
        assert text.startswith("<a>") and text.endswith("</a>")
        assert "�" in text

    def test_degenerate_length_does_not_stall(self, minimal_jpeg):
        data = minimal_jpeg[:2] + b"\xff\xe2\x00\x00" + minimal_jpeg[2:]
        assert extract_packet(data) is None
