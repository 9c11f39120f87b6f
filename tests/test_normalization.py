# ==============================================
# Tests for Normalization Module
# ==============================================
#
# class TestMetadataTree       → schema detection, lookups, type guard
# class TestMetadataFlattener  → flat keys, list joins, raw flattening
# class TestFieldCanonicalizer → display names, element names, idempotence
# ==============================================

import pytest

from orbit_metadata.errors import CodecError, Stage
from orbit_metadata.normalization import (
    FieldCanonicalizer,
    MetadataFlattener,
    MetadataTree,
    NodeKind,
    SchemaType,
    canonicalize,
    detect_schema_type,
    node_kind,
    parse_array_value,
)


class TestMetadataTree:
    def test_detects_lifestyle(self, lifestyle_tree):
        """Scene / human / marketing sections mean lifestyle."""
        assert detect_schema_type(lifestyle_tree) is SchemaType.LIFESTYLE

    def test_detects_product(self, product_tree):
        assert detect_schema_type(product_tree) is SchemaType.PRODUCT

    def test_lifestyle_sections_with_commercial_analysis_is_product(self):
        """A commercial section wins over lifestyle markers."""
        data = {"scene_overview": {"setting": "Studio"}, "commercial_analysis": {"price_point": "Mid"}}
        assert detect_schema_type(data) is SchemaType.PRODUCT

    def test_detects_orbit_by_default(self, orbit_tree):
        assert detect_schema_type(orbit_tree) is SchemaType.ORBIT

    def test_explicit_schema_overrides_detection(self, lifestyle_tree):
        tree = MetadataTree(lifestyle_tree, "ORBIT")
        assert tree.schema_type is SchemaType.ORBIT

    def test_unknown_schema_name_rejected(self, lifestyle_tree):
        with pytest.raises(ValueError, match="unknown schema type"):
            MetadataTree(lifestyle_tree, "fashion")

    def test_non_mapping_root_rejected(self):
        with pytest.raises(CodecError) as exc_info:
            MetadataTree(["not", "a", "mapping"])
        assert exc_info.value.stage is Stage.FLATTEN
        assert str(exc_info.value).startswith("[flatten]")

    def test_get_falls_back_to_root(self):
        """Values are looked up in their section first, then at the root."""
        tree = MetadataTree({"setting": "Beach", "scene_overview": {"time_of_day": "Dawn"}})
        assert tree.get("scene_overview", "setting") == "Beach"
        assert tree.get("scene_overview", "time_of_day") == "Dawn"
        assert tree.get("scene_overview", "season", "n/a") == "n/a"

    def test_to_dict_is_a_copy(self, lifestyle_tree):
        tree = MetadataTree(lifestyle_tree)
        copied = tree.to_dict()
        copied["scene_overview"]["setting"] = "Changed"
        assert lifestyle_tree["scene_overview"]["setting"] == "Outdoor patio"

    def test_node_kinds(self):
        assert node_kind(None) is NodeKind.NULL
        assert node_kind("x") is NodeKind.SCALAR
        assert node_kind(3.5) is NodeKind.SCALAR
        assert node_kind([1]) is NodeKind.LIST
        assert node_kind({"a": 1}) is NodeKind.MAP
        with pytest.raises(CodecError):
            node_kind(object())


class TestMetadataFlattener:
    def test_keys_carry_schema_prefix(self, scenario_tree):
        flat = MetadataFlattener().flatten(MetadataTree(scenario_tree, "lifestyle"))
        assert flat == {
            "lifestyle_scene_overview_setting": "Outdoor patio",
            "lifestyle_scene_overview_time_of_day": "Evening",
            "lifestyle_human_elements_number_of_people": "8",
        }

    def test_lists_joined_nulls_skipped_bools_lowercased(self):
        tree = MetadataTree({
            "key_objects": {"furniture": ["Table", None, "Chairs"], "missing": None},
            "flags": {"outdoor": True},
        }, "orbit")
        flat = MetadataFlattener().flatten(tree)
        assert flat["orbit_key_objects_furniture"] == "Table, Chairs"
        assert "orbit_key_objects_missing" not in flat
        assert flat["orbit_flags_outdoor"] == "true"

    def test_nested_list_items_become_json(self):
        tree = MetadataTree({"people": [{"role": "host"}]}, "orbit")
        flat = MetadataFlattener().flatten(tree)
        assert flat["orbit_people"] == '{"role": "host"}'

    def test_unsupported_leaf_raises_flatten_error(self):
        tree = MetadataTree({"section": {"when": object()}}, "orbit")
        with pytest.raises(CodecError) as exc_info:
            MetadataFlattener().flatten(tree)
        assert exc_info.value.stage is Stage.FLATTEN

    def test_flatten_raw_keeps_leaf_values(self, lifestyle_tree):
        flat = MetadataFlattener().flatten_raw(lifestyle_tree)
        assert flat["human_elements_number_of_people"] == 8
        assert flat["key_objects_furniture"] == ["Wooden table", "Chairs"]

    def test_parse_array_value(self):
        assert parse_array_value("a, b ,c") == ["a", "b", "c"]
        assert parse_array_value("single") == ["single"]
        assert parse_array_value(["x", None, 2]) == ["x", "2"]
        assert parse_array_value(None) == []


class TestFieldCanonicalizer:
    @pytest.mark.parametrize("key, expected", [
        ("lifestyle_scene_overview_time_of_day", "Time Of Day"),
        ("lifestyle_human_elements_number_of_people", "Number Of People"),
        ("lifestyle_marketing_potential_emotional_hooks", "Emotional Hooks"),
        ("lifestyle_scene_overview_setting", "Setting"),
        ("product_product_identification_product_type", "Product Type"),
        ("product_quality_assessment_overall_finish_quality", "Overall Finish Quality"),
        ("orbit_visual_composition_focal_points", "Focal Points"),
        ("orbit_energy_level", "Energy Level"),
    ])
    def test_display_names(self, key, expected):
        assert canonicalize(key) == expected

    def test_idempotent(self):
        """Canonicalizing a display name or element name changes nothing."""
        keys = [
            "lifestyle_scene_overview_time_of_day",
            "lifestyle_key_objects_food_and_beverage",
            "product_physical_characteristics_primary_color",
            "orbit_visual_composition_focal_points",
            "setting",
        ]
        for key in keys:
            once = canonicalize(key)
            assert canonicalize(once) == once
            assert canonicalize(FieldCanonicalizer.element_name(key)) == once

    def test_sharp_s_stays_idempotent(self):
        once = canonicalize("x_ßeta")
        assert once == "X ßeta"
        assert canonicalize(once) == once

    def test_depends_only_on_key(self):
        first = [canonicalize(k) for k in ("lifestyle_environment_location_type", "orbit_energy_level")]
        second = [canonicalize(k) for k in ("orbit_energy_level", "lifestyle_environment_location_type")]
        assert first == list(reversed(second))

    def test_element_name(self):
        assert FieldCanonicalizer.element_name("lifestyle_scene_overview_time_of_day") == "Time_Of_Day"
        assert FieldCanonicalizer.element_name("orbit_3d_render") == "_3d_Render"
        assert FieldCanonicalizer.element_name("orbit_price/range") == "Price_range"

    def test_empty_key(self):
        assert canonicalize("") == ""
