# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# Shared fixtures for all tests.
#
# FIXTURES:
# ---------
# - lifestyle_tree / product_tree / orbit_tree → sample analysis trees
# - scenario_tree      → the patio tree used by the round-trip tests
# - minimal_jpeg       → SOI + APP0 (JFIF) + SOF0 + EOI, 64x48
# - app1_segment       → builds one APP1 segment from a body
# - fixed_clock        → clock pinned to 2024-05-01T12:00:00Z
# - fixed_timestamp    → the packet timestamp that clock produces
# - codec_config       → CodecConfig with defaults
# - serializer         → PacketSerializer on the fixed clock
# - local_storage      → LocalStorageClient under tmp_path
# - png_bytes          → a real 8x8 PNG made with Pillow
#
# ==============================================

import io
import struct
from datetime import datetime, timezone

import pytest
from PIL import Image

from orbit_metadata.config import CodecConfig
from orbit_metadata.packet.serializer import PacketSerializer
from orbit_metadata.storage.local_client import LocalStorageClient


FIXED_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
FIXED_TIMESTAMP = "2024-05-01T12:00:00.000Z"


@pytest.fixture
def scenario_tree() -> dict:
    return {
        "scene_overview": {"setting": "Outdoor patio", "time_of_day": "Evening"},
        "human_elements": {"number_of_people": 8},
    }


@pytest.fixture
def lifestyle_tree() -> dict:
    return {
        "scene_overview": {
            "setting": "Outdoor patio",
            "time_of_day": "Evening",
            "primary_activity": "Dining",
            "season": "Summer",
        },
        "human_elements": {
            "number_of_people": 8,
            "demographics": ["young adults", "middle-aged adults"],
            "social_dynamics": "Friends celebrating",
        },
        "environment": {"location_type": "Restaurant terrace"},
        "key_objects": {
            "food_and_beverage": ["Wine", "Pasta"],
            "furniture": ["Wooden table", "Chairs"],
            "technology": ["Smartphone", "Speaker"],
        },
        "atmospheric_elements": {
            "mood": "Festive",
            "color_palette": ["warm amber", "deep red"],
        },
        "marketing_potential": {
            "emotional_hooks": ["belonging", "joy"],
            "target_demographic": "Urban professionals",
        },
    }


@pytest.fixture
def product_tree() -> dict:
    return {
        "product_identification": {"product_type": "Lounge chair", "brand": "Nordic"},
        "physical_characteristics": {"primary_color": "Oak", "material": "Wood"},
        "commercial_analysis": {"target_market": ["home offices", "cafes"], "price_point": "Premium"},
    }


@pytest.fixture
def orbit_tree() -> dict:
    return {
        "visual_composition": {"focal_points": ["center table", "string lights"]},
        "energy_level": "High",
    }


@pytest.fixture
def app1_segment():
    def build(body: bytes) -> bytes:
        return b"\xff\xe1" + struct.pack(">H", len(body) + 2) + body
    return build


@pytest.fixture
def minimal_jpeg() -> bytes:
    app0 = b"\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
    sof0 = (
        b"\xff\xc0\x00\x11\x08"
        + struct.pack(">HH", 48, 64)
        + b"\x03\x01\x22\x00\x02\x11\x01\x03\x11\x01"
    )
    return b"\xff\xd8" + app0 + sof0 + b"\xff\xd9"


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TIME


@pytest.fixture
def fixed_timestamp() -> str:
    return FIXED_TIMESTAMP


@pytest.fixture
def codec_config() -> CodecConfig:
    return CodecConfig()


@pytest.fixture
def serializer(codec_config, fixed_clock) -> PacketSerializer:
    return PacketSerializer(codec_config, clock=fixed_clock)


@pytest.fixture
def local_storage(tmp_path) -> LocalStorageClient:
    return LocalStorageClient(tmp_path / "storage")


@pytest.fixture
def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", (8, 8), (200, 40, 40, 255)).save(buffer, format="PNG")
    return buffer.getvalue()
