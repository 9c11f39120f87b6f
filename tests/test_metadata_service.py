# ==============================================
# Tests for MetadataService
# ==============================================
#
# End-to-end over a LocalStorageClient:
#   embed_metadata → read_metadata → create_report
# plus create_packet and the failure dicts.
# ==============================================

import json
from unittest.mock import Mock

import pytest

from orbit_metadata.config import AppConfig, StorageConfig
from orbit_metadata.errors import StorageError
from orbit_metadata.metadata_service import MetadataService, create_storage_client
from orbit_metadata.storage import LocalStorageClient, SupabaseStorageClient


@pytest.fixture
def service(local_storage, serializer):
    return MetadataService(config=AppConfig(), storage=local_storage, serializer=serializer)


@pytest.fixture
def stored_jpeg(local_storage, minimal_jpeg):
    local_storage.upload("photos/patio.jpg", minimal_jpeg)
    return "photos/patio.jpg"


class TestEmbedAndRead:
    def test_round_trip(self, service, stored_jpeg, lifestyle_tree):
        embedded = service.embed_metadata(stored_jpeg, lifestyle_tree, "out/patio.jpg")

        assert embedded["success"], embedded.get("error")
        assert embedded["output_path"] == "out/patio_me.jpg"
        assert embedded["schema_type"] == "lifestyle"
        assert embedded["field_count"] == 19
        assert embedded["format_converted"] is False

        read = service.read_metadata(embedded["output_path"])

        assert read["success"]
        assert read["xmp_found"]
        assert read["message"] == "Metadata extracted successfully"
        assert read["metadata"] == lifestyle_tree
        assert read["schema_type"] == "lifestyle"
        assert read["image_info"]["width"] == 64
        assert read["image_info"]["height"] == 48
        assert read["xmp_stats"]["namespace_count"] == 6

    def test_png_source_is_converted(self, service, local_storage, png_bytes, orbit_tree):
        local_storage.upload("photos/render.png", png_bytes)

        embedded = service.embed_metadata("photos/render.png", orbit_tree, "out/render.png")

        assert embedded["success"], embedded.get("error")
        assert embedded["output_path"] == "out/render_me.jpg"
        assert embedded["format_converted"] is True
        assert embedded["original_format"] == "png"
        assert local_storage.download("out/render_me.jpg")[:2] == b"\xff\xd8"
        assert service.read_metadata("out/render_me.jpg")["schema_type"] == "orbit"

    def test_missing_source(self, service, lifestyle_tree):
        result = service.embed_metadata("photos/none.jpg", lifestyle_tree, "out/none.jpg")
        assert not result["success"]
        assert result["error"] == "Source image not found: photos/none.jpg"

    def test_input_validation(self, service):
        result = service.embed_metadata("", {}, "")
        assert not result["success"]
        assert result["error"].startswith("Input validation failed: source_path is required")

    def test_non_image_source(self, service, local_storage, lifestyle_tree):
        local_storage.upload("notes/readme.txt", b"plain text, not an image")

        embedded = service.embed_metadata("notes/readme.txt", lifestyle_tree, "out/readme.jpg")
        read = service.read_metadata("notes/readme.txt")

        assert embedded["error"].startswith("Embedding failed: [embed] Invalid image")
        assert read["error"].startswith("Reading failed: [extract] Invalid image")

    def test_image_without_packet(self, service, stored_jpeg):
        result = service.read_metadata(stored_jpeg)
        assert result["success"]
        assert not result["xmp_found"]
        assert result["message"] == "No XMP packet found"
        assert result["metadata"] == {}

    def test_storage_failure_becomes_result(self, lifestyle_tree):
        storage = Mock()
        storage.exists.side_effect = StorageError("exists", "photos/patio.jpg", "HTTP 500: boom")
        service = MetadataService(config=AppConfig(), storage=storage)

        result = service.embed_metadata("photos/patio.jpg", lifestyle_tree, "out/patio.jpg")

        assert not result["success"]
        assert "HTTP 500: boom" in result["error"]


class TestCreatePacket:
    def test_packet_only(self, service, scenario_tree):
        result = service.create_packet(scenario_tree, schema_type="lifestyle")

        assert result["success"]
        assert result["xmp_validation"]["valid"]
        assert result["xmp_stats"]["namespace_count"] == 5
        assert "saved_to" not in result

    def test_saved_to_storage(self, service, local_storage, scenario_tree):
        result = service.create_packet(scenario_tree, output_path="packets/patio.xmp")

        assert result["saved_to"] == "packets/patio.xmp"
        assert local_storage.download("packets/patio.xmp").decode("utf-8") == result["xmp_packet"]

    def test_without_wrappers(self, service, scenario_tree):
        result = service.create_packet(scenario_tree, include_wrappers=False)
        assert not result["xmp_packet"].startswith("<?xpacket")
        assert not result["xmp_validation"]["valid"]

    def test_empty_metadata(self, service):
        result = service.create_packet({})
        assert not result["success"]
        assert "metadata must be a non-empty object" in result["error"]

    def test_save_failure(self, serializer, scenario_tree):
        storage = Mock()
        storage.upload.side_effect = StorageError("upload", "packets/patio.xmp", "HTTP 403: denied")
        service = MetadataService(config=AppConfig(), storage=storage, serializer=serializer)

        result = service.create_packet(scenario_tree, output_path="packets/patio.xmp")

        assert result["error"].startswith("Failed to save XMP file:")


class TestCreateReport:
    def test_detailed_report_next_to_image(self, service, local_storage, stored_jpeg, lifestyle_tree):
        service.embed_metadata(stored_jpeg, lifestyle_tree, "out/patio.jpg")

        result = service.create_report("out/patio_me.jpg")

        assert result["success"], result.get("error")
        assert result["report_path"] == "out/patio_me_metadata.txt"
        assert result["format_used"] == "detailed"
        text = local_storage.download(result["report_path"]).decode("utf-8")
        assert "🎯 TYPE OF ANALYSIS COMPLETED: LIFESTYLE" in text
        assert result["report_size"] == len(text.encode("utf-8"))

    def test_json_report(self, service, local_storage, stored_jpeg, lifestyle_tree):
        service.embed_metadata(stored_jpeg, lifestyle_tree, "out/patio.jpg")

        result = service.create_report("out/patio_me.jpg", "json-only", output_path="reports/patio.json")

        assert result["report_path"] == "reports/patio.json"
        fields = json.loads(local_storage.download("reports/patio.json"))
        assert fields["scene_overview_setting"] == "Outdoor patio"

    def test_image_without_packet(self, service, stored_jpeg):
        result = service.create_report(stored_jpeg)
        assert not result["success"]
        assert result["error"].startswith("No XMP metadata found in image.")
        assert result["format_used"] == "detailed"

    def test_unknown_format(self, service, stored_jpeg):
        result = service.create_report(stored_jpeg, "pdf")
        assert result["error"].startswith("Input validation failed: format must be one of")
        assert result["format_used"] == "pdf"


class TestStorageFactory:
    def test_local(self, tmp_path):
        client = create_storage_client(StorageConfig(backend="local", local_root=str(tmp_path)))
        assert isinstance(client, LocalStorageClient)

    def test_supabase(self):
        config = StorageConfig(backend="supabase", supabase_url="https://p.supabase.co", supabase_key="k")
        assert isinstance(create_storage_client(config), SupabaseStorageClient)

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="unknown storage backend"):
            create_storage_client(StorageConfig(backend="s3"))

    def test_close_closes_storage(self):
        storage = Mock()
        with MetadataService(config=AppConfig(), storage=storage):
            pass
        storage.close.assert_called_once()
