# ==============================================
# Ledger
# ==============================================
#
# PURPOSE:
#   The verbatim JSON copy of everything written into a packet.
#   The tagged elements are a display view (lossy: lists are
#   comma-split, names shortened); the ledger is what readers
#   reconstruct from.
#
# WHY THIS FILE EXISTS:
#   Packets written by earlier tool versions sometimes carry a
#   ledger whose JSON uses ". " where ", " belongs between members.
#   Decoding tries strict JSON first and only then rewrites those
#   boundaries, so values that legitimately contain '. "' survive.
#
# CLASS: Ledger (dataclass)
# -------------------------
#     original_metadata: dict   → the caller's tree, untouched
#     flattened_fields: dict    → element name → value or list
#     standard_metadata: dict   → dublin_core / iptc / xmp_core / photoshop
#     processing: dict          → timestamp, version, schema type, location
#
#     Methods:
#     --------
#     - to_dict() / from_dict(data)  (classmethod)
#     - encode() -> str              → pretty JSON, not yet XML-escaped
#     - decode(text) -> Ledger       (classmethod, raises LedgerDecodeError)
#
# FUNCTIONS:
# ----------
# - escape_xml(text) / unescape_xml(text)
# - repair_ledger_text(text) -> str
#
# ==============================================

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict
from xml.sax.saxutils import escape, unescape

from orbit_metadata.errors import LedgerDecodeError
from orbit_metadata.logging_setup import get_logger


logger = get_logger(__name__)

_XML_ESCAPES = {'"': "&quot;", "'": "&apos;"}
_XML_UNESCAPES = {"&quot;": '"', "&apos;": "'"}

# ". " + newline + quote, as written by pretty-printed defective ledgers
_PERIOD_NEWLINE_BOUNDARY = re.compile(r'\.\s*\n\s*"')
_PERIOD_BOUNDARY = re.compile(r'\.\s+"')


LEDGER_MEMBERS = ("original_metadata", "flattened_fields", "standard_metadata", "processing")


def escape_xml(text: str) -> str:
    return escape(text, _XML_ESCAPES)


def unescape_xml(text: str) -> str:
    return unescape(text, _XML_UNESCAPES)


def repair_ledger_text(text: str) -> str:
    repaired = _PERIOD_NEWLINE_BOUNDARY.sub(',\n  "', text)
    return _PERIOD_BOUNDARY.sub(', "', repaired)


@dataclass
class Ledger:
    original_metadata: Dict[str, Any] = field(default_factory=dict)
    flattened_fields: Dict[str, Any] = field(default_factory=dict)
    standard_metadata: Dict[str, Any] = field(default_factory=dict)
    processing: Dict[str, Any] = field(default_factory=dict)

    @property
    def schema_type(self) -> str:
        return str(self.processing.get("schema_type") or "")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_metadata": self.original_metadata,
            "flattened_fields": self.flattened_fields,
            "standard_metadata": self.standard_metadata,
            "processing": self.processing,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ledger":
        return cls(
            original_metadata=data.get("original_metadata") or {},
            flattened_fields=data.get("flattened_fields") or {},
            standard_metadata=data.get("standard_metadata") or {},
            processing=data.get("processing") or {},
        )

    def encode(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    @classmethod
    def decode(cls, text: str) -> "Ledger":
        """
        Decode ledger JSON, repairing period-separated members if needed.

        Args:
            text: Ledger JSON, already XML-unescaped

        Returns:
            Ledger

        Raises:
            LedgerDecodeError: if the text is not a ledger even after repair
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as first_error:
            repaired = repair_ledger_text(text)
            try:
                data = json.loads(repaired)
            except json.JSONDecodeError as exc:
                raise LedgerDecodeError(
                    f"ledger is not valid JSON ({first_error.msg} at char {first_error.pos}), "
                    f"repair did not help"
                ) from exc
            logger.info("ledger repaired before decoding",
                        extra={"extra": {"length": len(text)}})

        if not isinstance(data, dict):
            raise LedgerDecodeError(f"ledger must be a JSON object, got {type(data).__name__}")

        for name in LEDGER_MEMBERS:
            value = data.get(name)
            if value is not None and not isinstance(value, dict):
                raise LedgerDecodeError(f"ledger member {name} must be an object, got {type(value).__name__}")

        if not data.get("original_metadata") and not data.get("flattened_fields"):
            raise LedgerDecodeError("ledger has neither original_metadata nor flattened_fields")

        return cls.from_dict(data)
