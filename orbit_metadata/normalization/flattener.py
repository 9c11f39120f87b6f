# ==============================================
# MetadataFlattener
# ==============================================
#
# PURPOSE:
#   Project a nested MetadataTree onto a flat key -> value map.
#   Keys are "_"-joined paths prefixed with the schema variant,
#   e.g. {"scene_overview": {"setting": "Patio"}} under lifestyle
#   becomes "lifestyle_scene_overview_setting".
#
# RULES:
# ------
#   - null values are skipped
#   - lists become ", "-joined strings (display form)
#   - booleans render as "true" / "false"
#   - an empty mapping contributes nothing
#
#   Flattening is one-way and lossy; the ledger carries the tree
#   for reconstruction.
#
# ==============================================

import json
from typing import Any, Dict

from .tree import MetadataTree, NodeKind, node_kind


class MetadataFlattener:
    SEPARATOR = "_"

    def flatten(self, tree: MetadataTree) -> Dict[str, str]:
        flattened: Dict[str, str] = {}
        prefix = tree.schema_type.value
        for key, value in tree.data.items():
            self._flatten_into(f"{prefix}{self.SEPARATOR}{key}", value, flattened)
        return flattened

    def flatten_raw(self, mapping: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
        """
        Flatten a mapping without stringifying leaves.

        Used on the read side, where lists must survive so the report
        can format them itself.

        Args:
            mapping: Nested mapping to flatten
            prefix: Optional key prefix (joined with "_")

        Returns:
            Flat mapping of joined keys to the original leaf values
        """
        flattened: Dict[str, Any] = {}
        for key, value in mapping.items():
            compound_key = f"{prefix}{self.SEPARATOR}{key}" if prefix else str(key)
            if isinstance(value, dict):
                flattened.update(self.flatten_raw(value, compound_key))
            elif value is not None:
                flattened[compound_key] = value
        return flattened

    def _flatten_into(self, key: str, value: Any, flattened: Dict[str, str]) -> None:
        kind = node_kind(value)
        if kind is NodeKind.NULL:
            return
        if kind is NodeKind.MAP:
            for nested_key, nested_value in value.items():
                compound_key = f"{key}{self.SEPARATOR}{nested_key}"
                self._flatten_into(compound_key, nested_value, flattened)
        elif kind is NodeKind.LIST:
            items = [self.format_scalar(item) for item in value if item is not None]
            flattened[key] = ", ".join(items)
        else:
            flattened[key] = self.format_scalar(value)

    @staticmethod
    def format_scalar(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (dict, list, tuple)):
            return json.dumps(value, ensure_ascii=False)
        return str(value)


def parse_array_value(value: Any) -> list:
    """Split a flattened value back into its items (comma-separated strings)."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [MetadataFlattener.format_scalar(v) for v in value if v is not None]
    text = MetadataFlattener.format_scalar(value)
    if "," in text:
        return [item.strip() for item in text.split(",") if item.strip()]
    return [text]

