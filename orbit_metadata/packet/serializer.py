# ==============================================
# PacketSerializer
# ==============================================
#
# PURPOSE:
#   Build the XMP packet text for one analysis tree.
#
# BLOCK ORDER (each an rdf:Description with its own xmlns):
# --------------------------------------------------------
#   1. dc           title / description (rdf:Alt), subject (rdf:Bag), creator
#   2. Iptc4xmpExt  people and organisations (only when present)
#   3. xmp          creator tool, create / metadata dates
#   4. photoshop    instructions, source, colour mode
#   5. <schema>     every flat field as a display-named element,
#                   multi-valued fields as rdf:Seq / rdf:Bag,
#                   plus the Raw_JSON ledger element
#   6. processing   timestamp, version, schema type, location
#                   (only when include_processing_info)
#
#   Blocks are joined by a blank line and, with include_wrappers,
#   enclosed in the xpacket / x:xmpmeta / rdf:RDF envelope.
#
# CLASS: PacketSerializer
# -----------------------
#   Constructor:
#   ------------
#   - __init__(codec_config=None, classifier=None, flattener=None, clock=None)
#       clock: zero-arg callable returning an aware datetime (tests pin it)
#
#   Methods:
#   --------
#   - serialize(tree, schema_type=None, options=None) -> Packet
#
#   Accounting:
#   -----------
#   - packet_size = UTF-8 byte length of the final text
#   - field_count = schema elements + processing elements
#
# ==============================================

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from orbit_metadata.analysis.container_classifier import ContainerClassifier
from orbit_metadata.analysis.decision import ContainerKind
from orbit_metadata.config import CodecConfig
from orbit_metadata.errors import CodecError, Stage
from orbit_metadata.logging_setup import get_logger
from orbit_metadata.normalization.field_canonicalizer import FieldCanonicalizer
from orbit_metadata.normalization.flattener import MetadataFlattener, parse_array_value
from orbit_metadata.normalization.tree import MetadataTree, SchemaType
from .ledger import Ledger, escape_xml
from .namespaces import (
    IPTC_PREFIX,
    LEDGER_ELEMENT,
    NAMESPACES,
    PACKET_BEGIN,
    PACKET_END,
    PROCESSING_PREFIX,
    RDF_NS,
)
from .standard_fields import StandardFieldMapper


logger = get_logger(__name__)

BLOCK_INDENT = " " * 8
FIELD_INDENT = " " * 10


@dataclass
class SerializeOptions:
    include_wrappers: bool = True
    pretty_print: bool = True
    include_processing_info: bool = True


@dataclass
class Packet:
    content: str
    schema_type: SchemaType
    ledger: Ledger
    field_count: int
    namespace_count: int

    @property
    def packet_size(self) -> int:
        return len(self.content.encode("utf-8"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "xmp_content": self.content,
            "packet_size": self.packet_size,
            "namespace_count": self.namespace_count,
            "field_count": self.field_count,
            "schema_type": self.schema_type.value,
        }


def utc_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a Z suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PacketSerializer:
    def __init__(
        self,
        codec_config: Optional[CodecConfig] = None,
        classifier: Optional[ContainerClassifier] = None,
        flattener: Optional[MetadataFlattener] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.codec_config = codec_config or CodecConfig()
        self.classifier = classifier or ContainerClassifier()
        self.flattener = flattener or MetadataFlattener()
        self.mapper = StandardFieldMapper(self.codec_config)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def serialize(
        self,
        tree: Union[MetadataTree, Dict[str, Any]],
        schema_type: Optional[Union[SchemaType, str]] = None,
        options: Optional[SerializeOptions] = None
    ) -> Packet:
        """
        Serialize a tree into packet text plus its ledger.

        Args:
            tree: MetadataTree, or a plain mapping to wrap in one
            schema_type: Overrides the tree's schema variant when given
            options: SerializeOptions (defaults: wrapped, pretty, with processing)

        Returns:
            Packet
        """
        options = options or SerializeOptions()
        if not isinstance(tree, MetadataTree):
            tree = MetadataTree(tree, schema_type)
        elif schema_type is not None:
            tree = MetadataTree(tree.data, schema_type)
        schema = tree.schema_type

        timestamp = utc_timestamp(self._clock())
        flattened = self.flattener.flatten(tree)
        standard = self.mapper.map(tree, timestamp)
        processing = {
            "processed_timestamp": timestamp,
            "processor_version": self.codec_config.processor_version,
            "schema_type": schema.value,
            "processor_location": self.codec_config.processor_location,
        }

        ledger = Ledger(
            original_metadata=tree.to_dict(),
            flattened_fields=self._ledger_fields(flattened),
            standard_metadata=standard.to_dict(),
            processing=processing,
        )
        try:
            ledger_text = ledger.encode()
        except (TypeError, ValueError) as exc:
            raise CodecError(f"ledger could not be encoded: {exc}", Stage.SERIALIZE) from exc

        blocks: List[str] = []
        if standard.dublin_core:
            blocks.append(self._dublin_core_block(standard.dublin_core))
        if standard.iptc:
            blocks.append(self._simple_block(IPTC_PREFIX, NAMESPACES["iptc"], standard.iptc))
        blocks.append(self._simple_block("xmp", NAMESPACES["xmp"], standard.xmp_core))
        blocks.append(self._simple_block("photoshop", NAMESPACES["photoshop"], standard.photoshop))
        blocks.append(self._schema_block(schema, flattened, ledger_text))

        field_count = len(flattened)
        if options.include_processing_info:
            blocks.append(self._processing_block(processing))
            field_count += len(processing)

        content = "\n\n".join(blocks)
        if options.include_wrappers:
            content = self.wrap(content, options.pretty_print)

        packet = Packet(
            content=content,
            schema_type=schema,
            ledger=ledger,
            field_count=field_count,
            namespace_count=len(blocks),
        )
        logger.debug("packet serialized", extra={"extra": {
            "schema_type": schema.value,
            "packet_size": packet.packet_size,
            "field_count": field_count,
        }})
        return packet

    def wrap(self, content: str, pretty_print: bool = True) -> str:
        tool = escape_xml(self.codec_config.creator_tool)
        if not pretty_print:
            return (
                f'{PACKET_BEGIN}<x:xmpmeta xmlns:x="adobe:ns:meta/" x:xmptk="{tool}">'
                f'<rdf:RDF xmlns:rdf="{RDF_NS}">{content}</rdf:RDF></x:xmpmeta>{PACKET_END}'
            )
        return "\n".join([
            PACKET_BEGIN,
            f'    <x:xmpmeta xmlns:x="adobe:ns:meta/" x:xmptk="{tool}">',
            f'      <rdf:RDF xmlns:rdf="{RDF_NS}">',
            content,
            "      </rdf:RDF>",
            "    </x:xmpmeta>",
            PACKET_END,
        ])

    # ------------------------------------------
    # Blocks
    # ------------------------------------------

    def _dublin_core_block(self, fields: Dict[str, Any]) -> str:
        lines = []
        for key, value in fields.items():
            if key in ("title", "description"):
                inner = self._alt(str(value))
            elif isinstance(value, list):
                inner = self._container(value, ContainerKind.UNORDERED)
            else:
                inner = escape_xml(str(value))
            lines.append(self._element("dc", key, inner))
        return self._description("dc", NAMESPACES["dc"], lines)

    def _simple_block(self, prefix: str, uri: str, fields: Dict[str, Any]) -> str:
        lines = []
        for key, value in fields.items():
            if isinstance(value, list):
                kind = self.classifier.classify(key, key, value)
                inner = self._container(value, kind)
            else:
                inner = escape_xml(str(value))
            lines.append(self._element(prefix, key, inner))
        return self._description(prefix, uri, lines)

    def _schema_block(self, schema: SchemaType, flattened: Dict[str, str], ledger_text: str) -> str:
        prefix = schema.value
        lines = []
        for key, value in flattened.items():
            name = FieldCanonicalizer.element_name(key)
            values = parse_array_value(value)
            if len(values) > 1:
                kind = self.classifier.classify(name, key, values)
                inner = self._container(values, kind)
            else:
                inner = escape_xml(value)
            lines.append(self._element(prefix, name, inner))
        lines.append(self._element(prefix, LEDGER_ELEMENT, escape_xml(ledger_text)))
        return self._description(prefix, NAMESPACES[prefix], lines)

    def _processing_block(self, processing: Dict[str, str]) -> str:
        lines = [
            self._element(PROCESSING_PREFIX, FieldCanonicalizer.element_name(key), escape_xml(str(value)))
            for key, value in processing.items()
        ]
        return self._description(PROCESSING_PREFIX, NAMESPACES[PROCESSING_PREFIX], lines)

    # ------------------------------------------
    # Markup helpers
    # ------------------------------------------

    @staticmethod
    def _description(prefix: str, uri: str, lines: List[str]) -> str:
        body = "".join(f"{FIELD_INDENT}{line}\n" for line in lines)
        return (
            f'{BLOCK_INDENT}<rdf:Description rdf:about=""\n'
            f'{FIELD_INDENT}xmlns:{prefix}="{uri}">\n'
            f"{body}{BLOCK_INDENT}</rdf:Description>"
        )

    @staticmethod
    def _element(prefix: str, name: str, inner: str) -> str:
        return f"<{prefix}:{name}>{inner}</{prefix}:{name}>"

    @staticmethod
    def _container(items: List[Any], kind: ContainerKind) -> str:
        tag = kind.rdf_tag
        entries = "\n".join(
            f"{FIELD_INDENT}    <rdf:li>{escape_xml(str(item))}</rdf:li>" for item in items
        )
        return f"\n{FIELD_INDENT}  <{tag}>\n{entries}\n{FIELD_INDENT}  </{tag}>\n{FIELD_INDENT}"

    @staticmethod
    def _alt(value: str, lang: str = "x-default") -> str:
        return (
            f"\n{FIELD_INDENT}  <rdf:Alt>\n"
            f"{FIELD_INDENT}    <rdf:li xml:lang='{lang}'>{escape_xml(value)}</rdf:li>\n"
            f"{FIELD_INDENT}  </rdf:Alt>\n{FIELD_INDENT}"
        )

    @staticmethod
    def _ledger_fields(flattened: Dict[str, str]) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        for key, value in flattened.items():
            values = parse_array_value(value)
            fields[FieldCanonicalizer.element_name(key)] = values if len(values) > 1 else value
        return fields
