# ==============================================
# TOPIC 1: NORMALIZATION
# ==============================================
#
# This package turns the caller's nested analysis tree into the
# flat, display-named form the packet and the report work with.
#
# Modules:
# --------
# - tree.py                 → MetadataTree, SchemaType, value kinds, schema detection
# - flattener.py            → Nested tree → flat "_"-joined key map
# - field_canonicalizer.py  → Flat key → display name / element name
#
# ==============================================

from .tree import MetadataTree, NodeKind, SchemaType, node_kind, detect_schema_type
from .flattener import MetadataFlattener, parse_array_value
from .field_canonicalizer import FieldCanonicalizer, canonicalize

__all__ = [
    "MetadataTree",
    "NodeKind",
    "SchemaType",
    "node_kind",
    "detect_schema_type",
    "MetadataFlattener",
    "parse_array_value",
    "FieldCanonicalizer",
    "canonicalize",
]
