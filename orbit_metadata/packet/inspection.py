# ==============================================
# Packet Inspection
# ==============================================
#
# Structural checks and statistics on packet text. Neither function
# parses XML; they look for the markers the serializer writes.
#
# - validate_packet(text) -> PacketValidation
#     errors   (packet invalid): missing x:xmpmeta, rdf:RDF, rdf:Description
#     warnings (still valid):    no known namespace used, open/close tag
#                                count mismatch
#
# - packet_stats(text) -> PacketStats
#     UTF-8 size, element count per known namespace, namespaces seen
# ==============================================

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .namespaces import IPTC_PREFIX, NAMESPACES


OPEN_TAG = re.compile(r"<[^/?!][^>]*>")
CLOSE_TAG = re.compile(r"</[^>]*>")
SELF_CLOSING_TAG = re.compile(r"<[^>]*/>")

# on-the-wire element prefix for each namespace key
WIRE_PREFIXES = {key: (IPTC_PREFIX if key == "iptc" else key) for key in NAMESPACES}


@dataclass
class PacketValidation:
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors), "warnings": list(self.warnings)}


@dataclass
class PacketStats:
    size_bytes: int
    field_count: int
    namespaces_detected: List[str]
    fields_per_namespace: Dict[str, int]

    @property
    def namespace_count(self) -> int:
        return len(self.namespaces_detected)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size_bytes": self.size_bytes,
            "field_count": self.field_count,
            "namespace_count": self.namespace_count,
            "namespaces_detected": list(self.namespaces_detected),
            "fields_per_namespace": dict(self.fields_per_namespace),
        }


def validate_packet(text: str) -> PacketValidation:
    errors: List[str] = []
    warnings: List[str] = []

    if "<x:xmpmeta" not in text:
        errors.append("Missing XMP metadata wrapper")
    if "<rdf:RDF" not in text:
        errors.append("Missing RDF wrapper")
    if "<rdf:Description" not in text:
        errors.append("Missing RDF description")

    if not any(f"xmlns:{prefix}=" in text or f"<{prefix}:" in text for prefix in WIRE_PREFIXES.values()):
        warnings.append("No known namespaces detected")

    # self-closing tags also match OPEN_TAG
    opened = len(OPEN_TAG.findall(text)) - len(SELF_CLOSING_TAG.findall(text))
    closed = len(CLOSE_TAG.findall(text))
    if opened != closed:
        warnings.append(f"Possible XML tag mismatch ({opened} opened, {closed} closed)")

    return PacketValidation(valid=not errors, errors=errors, warnings=warnings)


def packet_stats(text: str) -> PacketStats:
    detected: List[str] = []
    per_namespace: Dict[str, int] = {}
    for key, prefix in WIRE_PREFIXES.items():
        count = len(re.findall(rf"<{re.escape(prefix)}:[^>]+>", text))
        if count:
            detected.append(key)
            per_namespace[key] = count
    return PacketStats(
        size_bytes=len(text.encode("utf-8")),
        field_count=sum(per_namespace.values()),
        namespaces_detected=detected,
        fields_per_namespace=per_namespace,
    )
