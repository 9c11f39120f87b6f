# ==============================================
# MetadataService (Orchestrator)
# ==============================================
#
# PURPOSE:
#   The one class callers use. It wires the codec topics to the
#   storage and conversion collaborators.
#
# HOW IT CONNECTS THE TOPICS:
#
#   ┌──────────────────────────────────────────────────────────┐
#   │                     MetadataService                      │
#   │                                                          │
#   │   StorageClient.download(source)                         │
#   │        │ bytes                                           │
#   │        ▼                                                 │
#   │   ImageConverter.to_jpeg ──► validate_image_buffer       │
#   │        │ JPEG bytes                                      │
#   │        ▼                                                 │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ TOPIC 1 + 2 + 3: MetadataTree → Flattener →  │        │
#   │  │  ContainerClassifier → PacketSerializer      │        │
#   │  └──────────────┬───────────────────────────────┘        │
#   │                 │ packet text                            │
#   │                 ▼                                        │
#   │   embed_packet (APP1 after SOI)                          │
#   │                 │                                        │
#   │                 ▼                                        │
#   │   StorageClient.upload(output)                           │
#   │                                                          │
#   │   read:   download → extract_packet → PacketParser       │
#   │   report: read → collect_report_fields →                 │
#   │           CategoryOrganizer → ReportRenderer → upload    │
#   └──────────────────────────────────────────────────────────┘
#
#
# CLASS: MetadataService
# ----------------------
#
#   Constructor:
#   ------------
#   - __init__(config=None, storage=None, converter=None,
#              serializer=None, parser=None, renderer=None)
#       Anything not passed in is built from config.
#
#   Public Methods (storage-backed, return result dicts):
#   -----------------------------------------------------
#   - embed_metadata(source_path, metadata, output_path, ...)
#   - read_metadata(image_path)
#   - create_packet(metadata, ..., output_path=None)
#   - create_report(image_path, report_format="detailed", ...)
#
#   Every result dict carries "success", "processing_time" (ms) and,
#   on failure, "error" (the stage-tagged message). Codec and
#   collaborator errors never escape these four methods.
#
#   Codec Methods (bytes in, raise on failure):
#   -------------------------------------------
#   - embed_bytes(data, metadata, schema_type=None, quality=None)
#   - read_bytes(data)
#
# ==============================================

import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union

from orbit_metadata.config import AppConfig, StorageConfig, get_config
from orbit_metadata.errors import CodecError, FormatError, Stage, StorageError
from orbit_metadata.image_converter import ConversionResult, ImageConverter, update_output_path
from orbit_metadata.logging_setup import get_logger
from orbit_metadata.normalization.tree import MetadataTree, SchemaType
from orbit_metadata.packet.inspection import packet_stats, validate_packet
from orbit_metadata.packet.jpeg_segment import embed_packet, extract_packet
from orbit_metadata.packet.parser import PacketParser, ParsedPacket
from orbit_metadata.packet.serializer import Packet, PacketSerializer, SerializeOptions
from orbit_metadata.reporting.report_builder import (
    ReportFormat,
    ReportRenderer,
    collect_report_fields,
    default_report_path,
)
from orbit_metadata.storage.image_format import (
    detect_image_format,
    image_dimensions,
    validate_image_buffer,
)
from orbit_metadata.storage.local_client import LocalStorageClient
from orbit_metadata.storage.storage_client import StorageClient
from orbit_metadata.storage.supabase_client import SupabaseStorageClient


logger = get_logger(__name__)


def create_storage_client(config: StorageConfig) -> StorageClient:
    """Build the storage collaborator named by config.backend."""
    if config.backend == "supabase":
        return SupabaseStorageClient(
            url=config.supabase_url or "",
            key=config.supabase_key or "",
            bucket_name=config.bucket_name,
            timeout=config.timeout_seconds
        )
    if config.backend == "local":
        return LocalStorageClient(config.local_root)
    raise ValueError(f"unknown storage backend {config.backend!r} (expected 'supabase' or 'local')")


def _elapsed_ms(start_time: float) -> int:
    return int((time.time() - start_time) * 1000)


class MetadataService:
    """
    Embed, read and report on packets in stored images.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        storage: Optional[StorageClient] = None,
        converter: Optional[ImageConverter] = None,
        serializer: Optional[PacketSerializer] = None,
        parser: Optional[PacketParser] = None,
        renderer: Optional[ReportRenderer] = None
    ):
        self._config = config or get_config()
        self._storage = storage or create_storage_client(self._config.storage)
        self._converter = converter or ImageConverter()
        self._serializer = serializer or PacketSerializer(self._config.codec)
        self._parser = parser or PacketParser()
        self._renderer = renderer or ReportRenderer()

    # ------------------------------------------
    # Codec paths
    # ------------------------------------------

    def embed_bytes(
        self,
        data: bytes,
        metadata: Union[MetadataTree, Dict[str, Any]],
        schema_type: Optional[Union[SchemaType, str]] = None,
        quality: Optional[int] = None
    ) -> Tuple[bytes, Packet, ConversionResult]:
        """
        Convert to JPEG if needed, then embed a freshly serialized packet.

        Args:
            data: Image bytes (any format the converter accepts)
            metadata: Analysis tree
            schema_type: Schema variant; detected from the tree when None
            quality: JPEG quality used if a conversion happens

        Returns:
            (JPEG bytes with packet, Packet, ConversionResult)

        Raises:
            FormatError: image unsupported or invalid after conversion
            CodecError: any other codec stage failure
        """
        initial = validate_image_buffer(data, self._config.codec.max_image_bytes)
        if not initial.valid:
            raise FormatError(f"Invalid image: {initial.error}")

        conversion = self._converter.to_jpeg(data, quality)
        checked = validate_image_buffer(conversion.data, self._config.codec.max_image_bytes)
        if not checked.valid:
            raise FormatError(f"Invalid image after conversion: {checked.error}")

        packet = self._serializer.serialize(metadata, schema_type)
        embedded = embed_packet(conversion.data, packet.content)
        logger.info("packet embedded", extra={"extra": {
            "schema_type": packet.schema_type.value,
            "packet_size": packet.packet_size,
            "image_size": len(embedded),
        }})
        return embedded, packet, conversion

    def read_bytes(self, data: bytes) -> Dict[str, Any]:
        """
        Extract and parse the packet of an image.

        Args:
            data: Image bytes

        Returns:
            Dict with xmp_found, xmp_raw_content, schema_type, metadata,
            xmp_stats and image facts. A missing packet is xmp_found=False.

        Raises:
            FormatError: unsupported or oversized image
        """
        result, _ = self._read(data)
        return result

    def _read(self, data: bytes) -> Tuple[Dict[str, Any], Optional[ParsedPacket]]:
        validation = validate_image_buffer(data, self._config.codec.max_image_bytes)
        if not validation.valid:
            raise FormatError(f"Invalid image: {validation.error}", Stage.EXTRACT)

        result: Dict[str, Any] = {
            "xmp_found": False,
            "metadata": {},
            "image_format": validation.format,
            "image_size": validation.size,
            "image_info": self._image_info(data),
        }

        packet_text = extract_packet(data)
        if packet_text is None:
            return result, None

        result["xmp_found"] = True
        result["xmp_raw_content"] = packet_text
        result["xmp_stats"] = packet_stats(packet_text).to_dict()

        parsed = self._parser.parse(packet_text)
        if parsed is not None:
            result["schema_type"] = parsed.schema_type.value
            result["metadata"] = parsed.metadata
            result["source"] = parsed.source
        return result, parsed

    # ------------------------------------------
    # Storage-backed operations
    # ------------------------------------------

    def embed_metadata(
        self,
        source_path: str,
        metadata: Dict[str, Any],
        output_path: str,
        schema_type: Optional[Union[SchemaType, str]] = None,
        compression_quality: Optional[int] = None
    ) -> dict:
        start_time = time.time()

        errors = []
        if not source_path:
            errors.append("source_path is required")
        if not output_path:
            errors.append("output_path is required")
        if not isinstance(metadata, dict) or not metadata:
            errors.append("metadata must be a non-empty object")
        if errors:
            return self._failure(f"Input validation failed: {', '.join(errors)}", start_time)

        try:
            if not self._storage.exists(source_path):
                return self._failure(f"Source image not found: {source_path}", start_time)

            source = self._storage.download(source_path)
            quality = compression_quality or self._config.codec.jpeg_quality
            embedded, packet, conversion = self.embed_bytes(source, metadata, schema_type, quality)

            final_output_path = update_output_path(output_path, conversion.converted)
            upload_path = self._storage.upload(final_output_path, embedded, "image/jpeg", True)
        except (CodecError, ValueError) as e:
            return self._failure(f"Embedding failed: {e}", start_time)

        result = {
            "success": True,
            "message": "Metadata embedded successfully",
            "processing_time": _elapsed_ms(start_time),
            "source_path": source_path,
            "output_path": upload_path,
            "final_output_path": final_output_path,
            "schema_type": packet.schema_type.value,
            "original_size": conversion.original_size,
            "processed_size": len(embedded),
            "xmp_packet_size": packet.packet_size,
            "field_count": packet.field_count,
            "format_converted": conversion.converted,
            "original_format": conversion.original_format,
            "target_format": conversion.target_format,
            "conversion_time": conversion.conversion_time_ms,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        logger.info("embed completed", extra={"extra": {
            "source_path": source_path,
            "output_path": upload_path,
            "elapsed_ms": result["processing_time"],
        }})
        return result

    def read_metadata(self, image_path: str) -> dict:
        start_time = time.time()
        if not image_path:
            return self._failure("Input validation failed: image_path is required", start_time)

        try:
            if not self._storage.exists(image_path):
                return self._failure(f"Image not found: {image_path}", start_time)
            data = self._storage.download(image_path)
            extracted = self.read_bytes(data)
        except CodecError as e:
            return self._failure(f"Reading failed: {e}", start_time)

        result = {
            "success": True,
            "message": "Metadata extracted successfully" if extracted["xmp_found"] else "No XMP packet found",
            "processing_time": _elapsed_ms(start_time),
            "image_path": image_path,
        }
        result.update(extracted)
        return result

    def create_packet(
        self,
        metadata: Dict[str, Any],
        schema_type: Optional[Union[SchemaType, str]] = None,
        output_path: Optional[str] = None,
        include_wrappers: bool = True,
        pretty_print: bool = True
    ) -> dict:
        start_time = time.time()
        if not isinstance(metadata, dict) or not metadata:
            return self._failure("Input validation failed: metadata must be a non-empty object", start_time)

        options = SerializeOptions(
            include_wrappers=include_wrappers,
            pretty_print=pretty_print,
            include_processing_info=True
        )
        try:
            packet = self._serializer.serialize(metadata, schema_type, options)
        except (CodecError, ValueError) as e:
            return self._failure(f"XMP creation failed: {e}", start_time)

        validation = validate_packet(packet.content)

        saved_to = None
        if output_path:
            try:
                saved_to = self._storage.upload(
                    output_path, packet.content.encode("utf-8"), "application/xml", True
                )
            except StorageError as e:
                return self._failure(f"Failed to save XMP file: {e}", start_time)

        result = {
            "success": True,
            "message": "XMP packet created successfully",
            "processing_time": _elapsed_ms(start_time),
            "schema_type": packet.schema_type.value,
            "xmp_packet": packet.content,
            "xmp_stats": {
                "packet_size": packet.packet_size,
                "field_count": packet.field_count,
                "namespace_count": packet.namespace_count,
            },
            "xmp_validation": validation.to_dict(),
        }
        if saved_to:
            result["saved_to"] = saved_to
        return result

    def create_report(
        self,
        image_path: str,
        report_format: Union[ReportFormat, str] = ReportFormat.DETAILED,
        output_path: Optional[str] = None,
        include_raw_json: bool = True
    ) -> dict:
        start_time = time.time()
        format_used = report_format.value if isinstance(report_format, ReportFormat) else str(report_format)

        try:
            fmt = ReportFormat.parse(report_format)
        except ValueError as e:
            return self._failure(f"Input validation failed: {e}", start_time, format_used=format_used)
        if not image_path:
            return self._failure("Input validation failed: image_path is required", start_time,
                                 format_used=format_used)

        try:
            if not self._storage.exists(image_path):
                return self._failure(f"Image not found: {image_path}", start_time, format_used=format_used)
            extracted, parsed = self._read(self._storage.download(image_path))
            if not extracted["xmp_found"] or parsed is None:
                return self._failure(
                    "No XMP metadata found in image. Image may not have been processed with ORBIT.",
                    start_time, format_used=format_used
                )

            fields = collect_report_fields(parsed)
            content = self._renderer.render(
                fields,
                parsed.schema_type,
                fmt,
                image_path=image_path,
                ledger=parsed.ledger,
                processing_time_ms=_elapsed_ms(start_time),
                include_raw_json=include_raw_json
            )
            report_bytes = content.encode("utf-8")
            target = output_path or default_report_path(image_path, fmt)
            content_type = "application/json" if fmt is ReportFormat.JSON_ONLY else "text/plain"
            report_path = self._storage.upload(target, report_bytes, content_type, True)
        except CodecError as e:
            return self._failure(f"Report creation failed: {e}", start_time, format_used=format_used)

        organized = self._renderer.organizer.organize(fields, parsed.schema_type)
        return {
            "success": True,
            "message": f"Metadata report created successfully in {fmt.value} format",
            "report_path": report_path,
            "format_used": fmt.value,
            "field_count": organized.total_fields,
            "report_size": len(report_bytes),
            "processing_time": _elapsed_ms(start_time),
        }

    # ------------------------------------------
    # Lifecycle
    # ------------------------------------------

    def close(self) -> None:
        self._storage.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # ------------------------------------------
    # Internal
    # ------------------------------------------

    @staticmethod
    def _image_info(data: bytes) -> Dict[str, Any]:
        fmt = detect_image_format(data)
        info: Dict[str, Any] = {"format": fmt, "size": len(data)}
        dimensions = image_dimensions(data)
        if dimensions:
            info["width"], info["height"] = dimensions
        return info

    @staticmethod
    def _failure(message: str, start_time: float, **extra) -> dict:
        logger.warning("operation failed", extra={"extra": {"error": message}})
        result = {
            "success": False,
            "error": message,
            "processing_time": _elapsed_ms(start_time),
        }
        result.update(extra)
        return result
