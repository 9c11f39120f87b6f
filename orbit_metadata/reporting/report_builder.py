# ==============================================
# Report Builder
# ==============================================
#
# PURPOSE:
#   Turn a parsed packet into a human-readable metadata report.
#
# FIELD COLLECTION (collect_report_fields):
# -----------------------------------------
#   1. ledger original tree, flattened with "_" joins
#      (ledger flattened_fields when the tree is missing)
#   2. standard blocks as dublin_core_* / iptc_* / xmp_core_* / photoshop_*
#   3. processing_*
#   4. anything else the parser recovered (element-scrape results)
#   Keys are de-duplicated on normalize_field_key(); values go
#   through format_field_value().
#
# FORMATS:
# --------
#   detailed   header, analysis type, counts, coverage, one section
#              per category, optional raw JSON, footer
#   simple     first two fields of each category + processing summary
#   json-only  the collected fields as indented JSON
#
# ==============================================

import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Dict, List, Mapping, Optional, Union

from orbit_metadata.analysis.category_organizer import CategoryOrganizer, OrganizedMetadata
from orbit_metadata.normalization.field_canonicalizer import FieldCanonicalizer
from orbit_metadata.normalization.flattener import MetadataFlattener
from orbit_metadata.normalization.tree import SchemaType
from orbit_metadata.packet.ledger import Ledger
from orbit_metadata.packet.namespaces import LEDGER_ELEMENT
from orbit_metadata.packet.parser import ParsedPacket


RULE = "=" * 65
SECTION_RULE = "-" * 65
MIN_NAME_WIDTH = 25
SIMPLE_FIELDS_PER_CATEGORY = 2
MAX_COVERAGE_DEPTH = 3

REPORT_TITLE = "ORBIT Metadata Report - Enhanced Simple MCP v2.1"
STANDARD_SECTIONS = ("dublin_core", "iptc", "xmp_core", "photoshop")

_SCHEMA_KEY_PREFIX = re.compile(r"^(lifestyle|product|orbit)_")
_NON_ALNUM = re.compile(r"[^a-z0-9]")


class ReportFormat(Enum):
    DETAILED = "detailed"
    SIMPLE = "simple"
    JSON_ONLY = "json-only"

    @classmethod
    def parse(cls, value: Union["ReportFormat", str]) -> "ReportFormat":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(fmt.value for fmt in cls)
            raise ValueError(f"format must be one of: {choices}") from None


@dataclass
class FieldCoverage:
    total_embedded: int
    captured: int

    @property
    def missing(self) -> int:
        return max(0, self.total_embedded - self.captured)

    @property
    def percentage(self) -> int:
        if self.total_embedded <= 0:
            return 100
        return round(self.captured / self.total_embedded * 100)


# ==============================================
# Field collection
# ==============================================

def format_field_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value if item is not None and item != "")
    if isinstance(value, dict):
        parts = []
        for item in value.values():
            if item is None or item == "":
                continue
            parts.append(format_field_value(item) if isinstance(item, (list, tuple, dict)) else str(item))
        return ", ".join(parts)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def normalize_field_key(key: str) -> str:
    lowered = _SCHEMA_KEY_PREFIX.sub("", key.lower(), count=1)
    return _NON_ALNUM.sub("", lowered)


def collect_report_fields(parsed: ParsedPacket) -> Dict[str, str]:
    """
    Gather every displayable field from a parsed packet.

    Args:
        parsed: Result of PacketParser.parse

    Returns:
        Ordered flat map of field key -> display value
    """
    flattener = MetadataFlattener()
    fields: Dict[str, str] = {}
    seen = set()

    def add(key: str, value: Any) -> None:
        normalized = normalize_field_key(key)
        if normalized in seen:
            return
        seen.add(normalized)
        fields[key] = format_field_value(value)

    ledger = parsed.ledger
    if ledger is not None:
        if ledger.original_metadata:
            source = flattener.flatten_raw(ledger.original_metadata)
        else:
            source = ledger.flattened_fields
        for key, value in source.items():
            add(key, value)

        for section in STANDARD_SECTIONS:
            for key, value in (ledger.standard_metadata.get(section) or {}).items():
                add(f"{section}_{key}", value)

        # processing keys are never deduplicated away
        for key, value in ledger.processing.items():
            fields[f"processing_{key}"] = format_field_value(value)
            seen.add(normalize_field_key(f"processing_{key}"))

    for key, value in flattener.flatten_raw(parsed.metadata).items():
        if key == LEDGER_ELEMENT or key.endswith(f"_{LEDGER_ELEMENT}"):
            continue
        add(key, value)

    return fields


def count_nested_fields(value: Any, depth: int = 0) -> int:
    if not isinstance(value, dict) or depth > MAX_COVERAGE_DEPTH:
        return 0
    count = 0
    for item in value.values():
        if isinstance(item, dict):
            count += count_nested_fields(item, depth + 1)
        else:
            count += 1
    return count


def field_coverage(ledger: Optional[Ledger], captured: int) -> FieldCoverage:
    total = 0
    if ledger is not None:
        total += count_nested_fields(ledger.original_metadata)
        total += count_nested_fields(ledger.standard_metadata)
        total += len(ledger.processing)
    if total == 0:
        total = captured
    return FieldCoverage(total_embedded=total, captured=captured)


def default_report_path(image_path: str, report_format: Union[ReportFormat, str]) -> str:
    fmt = ReportFormat.parse(report_format)
    p = PurePosixPath(image_path)
    suffix = ".json" if fmt is ReportFormat.JSON_ONLY else ".txt"
    name = f"{p.stem or 'metadata'}_metadata{suffix}"
    return str(p.with_name(name)) if p.name else name


# ==============================================
# Rendering
# ==============================================

class ReportRenderer:
    def __init__(self, organizer: Optional[CategoryOrganizer] = None, clock=None):
        self.organizer = organizer or CategoryOrganizer()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def render(
        self,
        fields: Mapping[str, Any],
        schema_type: Union[SchemaType, str],
        report_format: Union[ReportFormat, str] = ReportFormat.DETAILED,
        image_path: str = "",
        ledger: Optional[Ledger] = None,
        processing_time_ms: float = 0,
        include_raw_json: bool = True
    ) -> str:
        """
        Render a report.

        Args:
            fields: Output of collect_report_fields
            schema_type: Schema variant selecting the category table
            report_format: detailed, simple or json-only
            image_path: Shown in the header
            ledger: Used for the coverage line
            processing_time_ms: Shown in the counts line
            include_raw_json: Append the raw JSON section (detailed only)

        Returns:
            Report text
        """
        fmt = ReportFormat.parse(report_format)
        if fmt is ReportFormat.JSON_ONLY:
            return json.dumps(dict(fields), indent=2, ensure_ascii=False)

        schema = SchemaType.parse(schema_type)
        organized = self.organizer.organize(fields, schema)
        report_date = self._clock().astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

        if fmt is ReportFormat.SIMPLE:
            return self._simple(organized, schema, image_path, report_date, processing_time_ms)
        return self._detailed(
            fields, organized, schema, image_path, report_date,
            field_coverage(ledger, len(fields)), processing_time_ms, include_raw_json
        )

    def _detailed(
        self,
        fields: Mapping[str, Any],
        organized: OrganizedMetadata,
        schema: SchemaType,
        image_path: str,
        report_date: str,
        coverage: FieldCoverage,
        processing_time_ms: float,
        include_raw_json: bool
    ) -> str:
        lines = [
            RULE,
            REPORT_TITLE,
            RULE,
            f"Source Image    : {image_path}",
            f"Report Date     : {report_date}",
            "",
            f"🎯 TYPE OF ANALYSIS COMPLETED: {schema.value.upper()}",
            f"Categories Found: {organized.total_categories} | Total Fields: {organized.total_fields}"
            f" | Processing Time: {int(processing_time_ms)}ms",
        ]
        if coverage.missing > 0:
            lines.append(f"⚠️  Coverage: {coverage.percentage}% ({coverage.missing} fields may be missing)")
        else:
            lines.append("✅ Coverage: 100% (All embedded fields captured)")
        lines.append(RULE)
        lines.extend(self.format_categories(organized))
        lines.append("")
        lines.append("")

        if include_raw_json:
            lines.extend([RULE, "RAW JSON DATA (Machine Readable)", RULE])
            lines.append(json.dumps(dict(fields), indent=2, ensure_ascii=False))

        lines.extend([RULE, "END OF METADATA REPORT", RULE])
        return "\n".join(lines) + "\n"

    def _simple(
        self,
        organized: OrganizedMetadata,
        schema: SchemaType,
        image_path: str,
        report_date: str,
        processing_time_ms: float
    ) -> str:
        key_fields: Dict[str, Any] = {}
        for bucket in organized.categories:
            for key in list(bucket.fields)[:SIMPLE_FIELDS_PER_CATEGORY]:
                key_fields[key] = bucket.fields[key]

        lines = [
            "ORBIT Metadata Report",
            "=" * 21,
            f"Image: {PurePosixPath(image_path).name}",
            f"Analysis: {schema.value.upper()} ({organized.total_categories} categories,"
            f" {organized.total_fields} fields)",
            f"Date: {report_date}",
            "",
            "Key Metadata by Category:",
            "-" * 25,
        ]
        lines.extend(self.format_categories(self.organizer.organize(key_fields, schema)))
        lines.extend([
            "",
            "",
            "Processing Summary:",
            "-" * 18,
            f"Processing Time: {int(processing_time_ms)}ms",
            f"Total Categories: {organized.total_categories}",
            f"Total Fields: {organized.total_fields}",
        ])
        return "\n".join(lines) + "\n"

    @staticmethod
    def format_categories(organized: OrganizedMetadata) -> List[str]:
        lines: List[str] = []
        for bucket in organized.categories:
            lines.append(f"\n{bucket.category.icon} {bucket.category.name.upper()}")
            lines.append(SECTION_RULE)
            names = {key: FieldCanonicalizer.canonicalize(key) for key in bucket.fields}
            width = max(max(len(name) for name in names.values()) + 1, MIN_NAME_WIDTH)
            for key, value in bucket.fields.items():
                name = names[key]
                padding = " " * max(1, width - len(name))
                lines.append(f"{name}{padding}: {format_field_value(value)}")
        return lines
