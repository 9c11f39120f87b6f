# ==============================================
# CategoryOrganizer
# ==============================================
#
# PURPOSE:
#   Bucket recovered flat fields into the schema's report
#   categories. Every field lands in exactly one category; fields
#   no pattern claims go to a trailing "Additional Metadata".
#
# CLASS: CategoryOrganizer
# ------------------------
#   Constructor:
#   ------------
#   - __init__(tables: Mapping[SchemaType, CategoryTable] = CATEGORY_TABLES)
#
#   Methods:
#   --------
#   - organize(flat_fields, schema_type) -> OrganizedMetadata
#       For each category in table order, for each pattern in
#       pattern order, claim every unclaimed key the pattern
#       matches. Empty categories are dropped.
#
#   - field_matches_pattern(key, pattern) -> bool  (staticmethod)
#       Tried in order, first hit wins:
#         1. exact (or case-insensitive) equality
#         2. equality / substring after stripping a namespace prefix
#         3. key's last token equals the pattern's last token
#         4. every pattern token of 3+ chars is inside some key token
#         5. case-insensitive containment either direction
#       Patterns carrying a standard namespace prefix (dublin_core_,
#       iptc_, xmp_core_, photoshop_, processing_) only ever match
#       keys that carry one of those prefixes too.
#
# ==============================================

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Union

from orbit_metadata.errors import CodecError, Stage
from orbit_metadata.normalization.tree import SchemaType
from orbit_metadata.packet.namespaces import LEDGER_ELEMENT
from .categories import ADDITIONAL_CATEGORY, CATEGORY_TABLES, Category, CategoryTable


NAMESPACE_KEY_PREFIX = re.compile(r'^(lifestyle|product|orbit|dublin_core|iptc|xmp_core|photoshop|processing)_')
STANDARD_PATTERN_PREFIX = re.compile(r'^(dublin_core|iptc|xmp_core|photoshop|processing)_')
WORD_SPLIT = re.compile(r'[_\s]+')


@dataclass
class OrganizedCategory:
    category: Category
    fields: Dict[str, Any] = field(default_factory=dict)


@dataclass
class OrganizedMetadata:
    categories: List[OrganizedCategory]
    total_fields: int

    @property
    def total_categories(self) -> int:
        return len(self.categories)


class CategoryOrganizer:
    """Assigns every recovered field to exactly one report category."""

    def __init__(self, tables: Mapping[SchemaType, CategoryTable] = CATEGORY_TABLES):
        self._tables = tables

    def organize(
        self,
        flat_fields: Mapping[str, Any],
        schema_type: Union[SchemaType, str]
    ) -> OrganizedMetadata:
        """
        Organize flat fields into categories.

        Args:
            flat_fields: Recovered key -> value map. A mapping nested under the
                         schema's own key (e.g. {"lifestyle": {...}}) is used instead.
            schema_type: Schema variant selecting the category table

        Returns:
            OrganizedMetadata with categories in table order, catch-all last
        """
        try:
            schema = SchemaType.parse(schema_type)
        except ValueError as exc:
            raise CodecError(str(exc), Stage.ORGANIZE) from exc

        nested = flat_fields.get(schema.value)
        fields = nested if isinstance(nested, dict) else flat_fields
        keys = [key for key in fields if key != LEDGER_ELEMENT]

        claimed = set()
        organized: List[OrganizedCategory] = []
        total_fields = 0

        for category in self._tables[schema]:
            bucket = OrganizedCategory(category)
            for pattern in category.patterns:
                for key in keys:
                    if key in claimed:
                        continue
                    if self.field_matches_pattern(key, pattern):
                        bucket.fields[key] = fields[key]
                        claimed.add(key)
                        total_fields += 1
            if bucket.fields:
                organized.append(bucket)

        leftovers = OrganizedCategory(ADDITIONAL_CATEGORY)
        for key in keys:
            if key not in claimed:
                leftovers.fields[key] = fields[key]
                total_fields += 1
        if leftovers.fields:
            organized.append(leftovers)

        return OrganizedMetadata(categories=organized, total_fields=total_fields)

    @staticmethod
    def field_matches_pattern(key: str, pattern: str) -> bool:
        if not key or not pattern:
            return False

        key_lower = key.lower()
        pattern_lower = pattern.lower()

        if key == pattern or key_lower == pattern_lower:
            return True

        # keeps "processing_schema_type" off a bare "product_type" key
        if STANDARD_PATTERN_PREFIX.match(pattern_lower) and not STANDARD_PATTERN_PREFIX.match(key_lower):
            return False

        stripped = NAMESPACE_KEY_PREFIX.sub("", key, count=1)
        if stripped == pattern or pattern in stripped or pattern in key:
            return True

        pattern_parts = pattern_lower.split("_")
        if len(pattern_parts) > 1:
            last_part = pattern_parts[-1]
            key_parts = WORD_SPLIT.split(key_lower)
            if stripped.lower() == last_part or key_parts[-1] == last_part:
                return True

        key_words = [word for word in WORD_SPLIT.split(key_lower) if len(word) > 2]
        pattern_words = [word for word in WORD_SPLIT.split(pattern_lower) if len(word) > 2]
        if pattern_words and all(
            any(pattern_word in key_word for key_word in key_words)
            for pattern_word in pattern_words
        ):
            return True

        return pattern_lower in key_lower or key_lower in pattern_lower
