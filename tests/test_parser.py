# ==============================================
# Tests for Packet Parsing
# ==============================================
#
# class TestLedgerReading   → lossless recovery through Raw_JSON
# class TestElementScrape   → fallback when the ledger is unreadable
# class TestSchemaDetection → nested key, declared type, scoring, default
# ==============================================

import json
import re
import warnings

import pytest

from orbit_metadata.errors import SchemaAmbiguityWarning
from orbit_metadata.normalization import canonicalize
from orbit_metadata.normalization.tree import SchemaType
from orbit_metadata.packet.jpeg_segment import embed_packet, extract_packet
from orbit_metadata.packet.ledger import escape_xml
from orbit_metadata.packet.parser import (
    ElementScrapeReader,
    LedgerReader,
    PacketParser,
    ReadResult,
)


def _break_ledger(content: str) -> str:
    return re.sub(r"(<\w+:Raw_JSON>)[^<]+(</\w+:Raw_JSON>)", r"\1{not json at all\2", content)


class TestLedgerReading:
    def setup_method(self):
        self.parser = PacketParser()

    def test_patio_scenario_through_jpeg(self, serializer, scenario_tree, minimal_jpeg):
        """Embed, extract and parse: the tree comes back as written."""
        packet = serializer.serialize(scenario_tree, "lifestyle")
        text = extract_packet(embed_packet(minimal_jpeg, packet.content))

        parsed = self.parser.parse(text)

        assert parsed.source == "ledger"
        assert parsed.schema_type is SchemaType.LIFESTYLE
        assert parsed.metadata["human_elements"]["number_of_people"] == 8
        assert canonicalize("lifestyle_scene_overview_time_of_day") == "Time Of Day"

    def test_full_tree_is_lossless(self, serializer, lifestyle_tree):
        parsed = self.parser.parse(serializer.serialize(lifestyle_tree).content)
        assert parsed.metadata == lifestyle_tree
        assert parsed.ledger.processing["schema_type"] == "lifestyle"
        assert parsed.ledger.flattened_fields["Technology"] == ["Smartphone", "Speaker"]

    def test_defective_ledger_is_repaired(self):
        ledger = '{"original_metadata": {"product_identification": {"product_type": "Lamp"}}. ' \
                 '"processing": {"schema_type": "product"}}'
        text = f"<orbit:Raw_JSON>{escape_xml(ledger)}</orbit:Raw_JSON>"

        parsed = self.parser.parse(text)

        assert parsed.source == "ledger"
        assert parsed.schema_type is SchemaType.PRODUCT
        assert parsed.metadata["product_identification"]["product_type"] == "Lamp"

    def test_ledger_reader_skips_bad_ledger(self):
        assert LedgerReader().read("<lifestyle:Raw_JSON>[oops</lifestyle:Raw_JSON>") is None

    def test_empty_text(self):
        assert self.parser.parse("") is None
        assert self.parser.parse("<x:xmpmeta></x:xmpmeta>") is None

    def test_to_dict(self, serializer, scenario_tree):
        data = self.parser.parse(serializer.serialize(scenario_tree).content).to_dict()
        assert data["schema_type"] == "lifestyle"
        assert data["source"] == "ledger"
        assert data["ledger"]["original_metadata"] == scenario_tree


class TestElementScrape:
    def setup_method(self):
        self.parser = PacketParser()

    def test_fallback_when_ledger_corrupt(self, serializer, lifestyle_tree):
        content = _break_ledger(serializer.serialize(lifestyle_tree).content)

        parsed = self.parser.parse(content)

        assert parsed.source == "elements"
        assert parsed.ledger is None
        assert parsed.schema_type is SchemaType.LIFESTYLE
        assert parsed.metadata["lifestyle"]["Time_Of_Day"] == "Evening"
        assert parsed.metadata["lifestyle"]["Technology"] == "Smartphone, Speaker"
        assert parsed.metadata["processing"]["Schema_Type"] == "lifestyle"
        assert "Raw_JSON" not in parsed.metadata["lifestyle"]

    @pytest.mark.parametrize("ledger", [
        {"original_metadata": "patio"},
        {"original_metadata": {"a": 1}, "processing": "lifestyle"},
    ])
    def test_fallback_when_ledger_member_wrong_shape(self, serializer, lifestyle_tree, ledger):
        content = re.sub(
            r"(<\w+:Raw_JSON>)[^<]+(</\w+:Raw_JSON>)",
            lambda m: m.group(1) + escape_xml(json.dumps(ledger)) + m.group(2),
            serializer.serialize(lifestyle_tree).content,
        )

        parsed = self.parser.parse(content)

        assert parsed.source == "elements"
        assert parsed.ledger is None
        assert parsed.metadata["lifestyle"]["Time_Of_Day"] == "Evening"

    def test_values_unescaped(self):
        text = "<orbit:Caption>Fish &amp; chips</orbit:Caption>"
        result = ElementScrapeReader().read(text)
        assert result.metadata == {"orbit": {"Caption": "Fish & chips"}}

    def test_standard_blocks_ignored(self):
        assert ElementScrapeReader().read("<dc:creator>Someone</dc:creator>") is None

    def test_custom_reader_order(self):
        class StubReader:
            def read(self, packet_text):
                return ReadResult(metadata={"orbit": {"Energy_Level": "High"}}, source="stub")

        parsed = PacketParser(readers=[StubReader()]).parse("anything")
        assert parsed.source == "stub"
        assert parsed.schema_type is SchemaType.ORBIT


class TestSchemaDetection:
    def setup_method(self):
        self.parser = PacketParser()

    def test_nested_schema_key_wins(self):
        metadata = {"product": {"Brand": "Nordic"}, "processing": {"Schema_Type": "orbit"}}
        assert self.parser.detect_schema_type(metadata) is SchemaType.PRODUCT

    def test_scraped_schema_type(self):
        metadata = {"processing": {"Schema_Type": "orbit"}}
        assert self.parser.detect_schema_type(metadata) is SchemaType.ORBIT

    def test_pattern_scoring(self, product_tree, orbit_tree):
        assert self.parser.detect_schema_type(product_tree) is SchemaType.PRODUCT
        assert self.parser.detect_schema_type(orbit_tree) is SchemaType.ORBIT

    def test_ambiguous_defaults_to_lifestyle_with_warning(self):
        with pytest.warns(SchemaAmbiguityWarning):
            assert self.parser.detect_schema_type({"foo": "bar"}) is SchemaType.LIFESTYLE

    def test_unknown_declared_type_falls_through(self, product_tree):
        metadata = dict(product_tree, processing={"Schema_Type": "fashion"})
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert self.parser.detect_schema_type(metadata) is SchemaType.PRODUCT
