# ==============================================
# MetadataTree
# ==============================================
#
# PURPOSE:
#   The in-memory analysis result: a nested mapping of
#   section -> field -> value, scoped to one schema variant
#   (lifestyle, product, orbit).
#
# VALUE KINDS:
# ------------
#   scalar → str, int, float, bool
#   list   → list of scalars (or nested values, stringified on flatten)
#   map    → dict of str -> value
#   null   → None (skipped when flattening)
#
# SCHEMA DETECTION (write path):
# ------------------------------
#   1. scene_overview / human_elements / marketing_potential present
#        → PRODUCT if product_identification or commercial_analysis
#          is also present, else LIFESTYLE
#   2. product_identification / physical_characteristics /
#      commercial_analysis present → PRODUCT
#   3. anything else → ORBIT
#
# ==============================================

import copy
from enum import Enum
from typing import Any, Dict, Optional, Union

from orbit_metadata.errors import CodecError, Stage


class SchemaType(Enum):
    """Schema variant of an analysis tree."""
    LIFESTYLE = "lifestyle"
    PRODUCT = "product"
    ORBIT = "orbit"

    @classmethod
    def parse(cls, value: Union["SchemaType", str]) -> "SchemaType":
        if isinstance(value, SchemaType):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ValueError(f"unknown schema type {value!r} (expected one of: {choices})")


class NodeKind(Enum):
    SCALAR = "scalar"
    LIST = "list"
    MAP = "map"
    NULL = "null"


def node_kind(value: Any) -> NodeKind:
    if value is None:
        return NodeKind.NULL

    if isinstance(value, (str, bool, int, float)):
        return NodeKind.SCALAR

    if isinstance(value, (list, tuple)):
        return NodeKind.LIST

    if isinstance(value, dict):
        return NodeKind.MAP

    raise CodecError(
        f"unsupported metadata value of type {type(value).__name__}",
        Stage.FLATTEN
    )


LIFESTYLE_MARKERS = ("scene_overview", "human_elements", "marketing_potential")
PRODUCT_MARKERS = ("product_identification", "physical_characteristics", "commercial_analysis")


def detect_schema_type(data: Dict[str, Any]) -> SchemaType:
    """
    Pick the schema variant for a tree that was handed over without one.

    Args:
        data: Root mapping of the analysis tree

    Returns:
        Detected SchemaType
    """
    if any(key in data for key in LIFESTYLE_MARKERS):
        if "product_identification" in data or "commercial_analysis" in data:
            return SchemaType.PRODUCT
        return SchemaType.LIFESTYLE

    if any(key in data for key in PRODUCT_MARKERS):
        return SchemaType.PRODUCT

    return SchemaType.ORBIT


class MetadataTree:
    """
    Nested analysis result bound to a schema variant.

    The tree is never mutated by the codec; flattening and serialization
    read from it and build new structures.
    """

    def __init__(self, data: Dict[str, Any], schema_type: Optional[Union[SchemaType, str]] = None):
        if not isinstance(data, dict):
            raise CodecError(
                f"metadata root must be a mapping, got {type(data).__name__}",
                Stage.FLATTEN
            )
        self.data = data
        if schema_type is None:
            self.schema_type = detect_schema_type(data)
        else:
            self.schema_type = SchemaType.parse(schema_type)

    def section(self, name: str) -> Dict[str, Any]:
        value = self.data.get(name)
        return value if isinstance(value, dict) else {}

    def get(self, section: str, field_name: str, default: Any = None) -> Any:
        """
        Look a field up inside a section, falling back to the root.

        Args:
            section: Section name (e.g., "scene_overview")
            field_name: Field name inside the section (e.g., "setting")
            default: Returned when neither location holds a non-null value

        Returns:
            The stored value or default
        """
        value = self.section(section).get(field_name)
        if value is None:
            value = self.data.get(field_name)
        return default if value is None else value

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self.data)

    def __repr__(self) -> str:
        return f"MetadataTree(schema_type={self.schema_type.value}, sections={list(self.data)})"
