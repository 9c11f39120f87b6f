# ==============================================
# PacketParser
# ==============================================
#
# PURPOSE:
#   Recover the metadata from packet text and name its schema
#   variant.
#
# READERS (tried in order, first non-empty result wins):
# ------------------------------------------------------
#   1. LedgerReader
#        Find <ns:Raw_JSON> in any schema namespace, XML-unescape,
#        decode (with period repair). Result is the original tree.
#        A LedgerDecodeError is logged and the next reader runs.
#   2. ElementScrapeReader
#        Regex-scan the schema and processing blocks for
#        element/value pairs → {namespace: {element: value}}.
#        Lists are read back as ", "-joined strings. The ledger
#        element is skipped.
#
#   Both implement PacketReader.read(text) -> ReadResult | None, so
#   the scrape can be swapped for a real XML parser without
#   touching callers.
#
# SCHEMA DETECTION (read path):
# -----------------------------
#   1. non-empty mapping under "lifestyle" / "product" / "orbit"
#   2. ledger processing.schema_type (or the scraped Schema_Type)
#   3. pattern scoring over the flat key vocabulary (strict winner)
#   4. default LIFESTYLE with a SchemaAmbiguityWarning (never raised)
#
# ==============================================

import re
import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from orbit_metadata.errors import LedgerDecodeError, SchemaAmbiguityWarning
from orbit_metadata.logging_setup import get_logger
from orbit_metadata.normalization.flattener import MetadataFlattener
from orbit_metadata.normalization.tree import SchemaType
from .ledger import Ledger, unescape_xml
from .namespaces import LEDGER_ELEMENT, PROCESSING_PREFIX, SCHEMA_PREFIXES


logger = get_logger(__name__)


SCHEMA_PATTERNS = {
    SchemaType.LIFESTYLE: (
        "lifestyle_", "emotional_hooks", "target_demographic", "social_dynamics",
        "marketing_potential", "aspirational_elements", "brand_alignment",
        "cultural_significance", "lifestyle_values", "socioeconomic_indicators",
    ),
    SchemaType.PRODUCT: (
        "product_", "commercial_analysis", "target_market", "price_point",
        "design_style", "material_quality", "construction_quality",
        "market_positioning", "product_type", "physical_characteristics",
    ),
    SchemaType.ORBIT: (
        "orbit_", "scene_complexity", "energy_level", "aesthetic_style",
        "visual_mood", "commercial_viability", "photographic_elements",
    ),
}


@dataclass
class ReadResult:
    metadata: Dict[str, Any]
    source: str
    ledger: Optional[Ledger] = None
    ledger_text: Optional[str] = None


@dataclass
class ParsedPacket:
    metadata: Dict[str, Any]
    schema_type: SchemaType
    source: str
    ledger: Optional[Ledger] = None
    ledger_text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metadata": self.metadata,
            "schema_type": self.schema_type.value,
            "source": self.source,
            "ledger": self.ledger.to_dict() if self.ledger else None,
        }


class PacketReader(ABC):
    """One strategy for pulling metadata out of packet text."""

    @abstractmethod
    def read(self, packet_text: str) -> Optional[ReadResult]:
        ...


class LedgerReader(PacketReader):
    PATTERNS = tuple(
        (prefix, re.compile(rf"<{prefix}:{LEDGER_ELEMENT}>([^<]+)</{prefix}:{LEDGER_ELEMENT}>"))
        for prefix in SCHEMA_PREFIXES
    )

    def read(self, packet_text: str) -> Optional[ReadResult]:
        for prefix, pattern in self.PATTERNS:
            match = pattern.search(packet_text)
            if not match:
                continue
            text = unescape_xml(match.group(1))
            try:
                ledger = Ledger.decode(text)
            except LedgerDecodeError as exc:
                logger.warning("ledger unreadable, trying next source",
                               extra={"extra": {"namespace": prefix, "error": str(exc)}})
                continue
            metadata = ledger.original_metadata or ledger.flattened_fields
            return ReadResult(metadata=dict(metadata), source="ledger", ledger=ledger, ledger_text=text)
        return None


class ElementScrapeReader(PacketReader):
    NAMESPACES = SCHEMA_PREFIXES + (PROCESSING_PREFIX,)
    LIST_ITEM = re.compile(r"<rdf:li[^>]*>(.*?)</rdf:li>", re.DOTALL)

    def __init__(self):
        self._patterns = {
            ns: re.compile(rf"<{ns}:([\w.-]+)>(.*?)</{ns}:\1>", re.DOTALL)
            for ns in self.NAMESPACES
        }

    def read(self, packet_text: str) -> Optional[ReadResult]:
        metadata: Dict[str, Dict[str, str]] = {}
        for ns, pattern in self._patterns.items():
            for name, inner in pattern.findall(packet_text):
                if name == LEDGER_ELEMENT:
                    continue
                value = self._element_value(inner)
                if value is None:
                    continue
                metadata.setdefault(ns, {})[name] = value
        if not metadata:
            return None
        return ReadResult(metadata=metadata, source="elements")

    def _element_value(self, inner: str) -> Optional[str]:
        if "<" not in inner:
            return unescape_xml(inner)
        items = [unescape_xml(item.strip()) for item in self.LIST_ITEM.findall(inner)]
        if not items:
            return None
        return ", ".join(items)


class PacketParser:
    def __init__(self, readers: Optional[Sequence[PacketReader]] = None):
        self.readers: List[PacketReader] = list(readers) if readers else [LedgerReader(), ElementScrapeReader()]
        self._flattener = MetadataFlattener()

    def parse(self, packet_text: str) -> Optional[ParsedPacket]:
        """
        Parse packet text.

        Args:
            packet_text: Text recovered from an APP1 segment

        Returns:
            ParsedPacket, or None when no reader recovers anything
        """
        if not packet_text:
            return None

        for reader in self.readers:
            result = reader.read(packet_text)
            if result and result.metadata:
                schema = self.detect_schema_type(result.metadata, result.ledger)
                return ParsedPacket(
                    metadata=result.metadata,
                    schema_type=schema,
                    source=result.source,
                    ledger=result.ledger,
                    ledger_text=result.ledger_text,
                )
        return None

    def detect_schema_type(self, metadata: Dict[str, Any], ledger: Optional[Ledger] = None) -> SchemaType:
        for schema in SchemaType:
            nested = metadata.get(schema.value)
            if isinstance(nested, dict) and nested:
                return schema

        declared = ledger.schema_type if ledger is not None else ""
        if not declared and isinstance(metadata.get(PROCESSING_PREFIX), dict):
            declared = str(metadata[PROCESSING_PREFIX].get("Schema_Type") or "")
        if declared:
            try:
                return SchemaType.parse(declared)
            except ValueError:
                logger.warning("packet names an unknown schema type",
                               extra={"extra": {"schema_type": declared}})

        vocabulary = " ".join(self._flattener.flatten_raw(metadata)).lower()
        scores = {
            schema: sum(1 for pattern in patterns if pattern in vocabulary)
            for schema, patterns in SCHEMA_PATTERNS.items()
        }
        best = max(scores, key=scores.get)
        runner_up = max(score for schema, score in scores.items() if schema is not best)
        if scores[best] > runner_up:
            return best

        summary = ", ".join(f"{schema.value}={score}" for schema, score in scores.items())
        warnings.warn(
            f"schema type ambiguous ({summary}), defaulting to lifestyle",
            SchemaAmbiguityWarning,
            stacklevel=2
        )
        return SchemaType.LIFESTYLE
