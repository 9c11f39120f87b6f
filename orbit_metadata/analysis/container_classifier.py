# ==============================================
# ContainerClassifier
# ==============================================
#
# PURPOSE:
#   Decide whether the values of a multi-valued field are written
#   as an ordered list (rdf:Seq) or an unordered one (rdf:Bag).
#
# CLASS: ContainerClassifier
# --------------------------
#   Stateless: field name, key and values in, decision out.
#
#   Methods:
#   --------
#   - classify(field_name, original_key="", values=()) -> ContainerKind
#   - decide(field_name, original_key="", values=()) -> ContainerDecision
#       Applies rules in order, first match wins:
#
#       RULE 1: UNORDERED VOCABULARY → UNORDERED
#         Field name or original key contains an inventory-like
#         token (tags, equipment, technology, target_market, ...).
#         Checked first so "key_objects_technology" stays a Bag
#         although "key_objects" is an ordered token.
#
#       RULE 2: ORDERED VOCABULARY → ORDERED
#         Hierarchical / progressive concepts (demographics,
#         emotional states, color palettes, story elements, ...).
#
#       RULE 3: VALUE PROGRESSION → ORDERED
#         Any value carries an age, intensity or priority cue.
#
#       RULE 4: HUMAN / NARRATIVE NAME → ORDERED
#
#       RULE 5: EVERYTHING ELSE → UNORDERED
#
# ==============================================

import re
from typing import Iterable, Optional, Tuple

from .decision import ContainerDecision, ContainerKind, ContainerRule


class ContainerClassifier:
    """Chooses rdf:Seq or rdf:Bag for a field's values."""

    UNORDERED_PATTERNS = (
        "keywords", "tags", "categories", "classifications",
        "organizations", "organisation", "person_names", "people_names",
        "equipment", "tools", "technology", "devices", "gadgets",
        "target_market", "market_segments", "competitive_advantages", "advantages",
        "business_categories", "industry_categories",
        "attributes", "characteristics", "features",
        "sensory_cues", "ambient_sounds", "weather_conditions",
        "personal_items", "accessories", "miscellaneous",
    )

    ORDERED_PATTERNS = (
        "demographics", "age_group", "gender", "ethnicity", "clothing_style",
        "emotional_states", "emotions", "emotional_hooks", "mood_indicators",
        "food_and_beverage", "food_beverage", "furniture", "key_objects",
        "defining_props", "focal_points", "visual_elements", "primary_elements",
        "color_palette", "primary_colors", "secondary_colors", "color_scheme",
        "story_elements", "narrative_elements", "activities", "interactions",
        "technical_qualities", "quality_indicators",
        "architectural_elements", "natural_elements",
        "aspirational_elements", "brand_alignment_opportunities",
    )

    VALUE_CUES = (
        re.compile(r'young|middle|old|adult|child|teen', re.IGNORECASE),
        re.compile(r'high|low|medium|intense|mild|strong|weak', re.IGNORECASE),
        re.compile(r'first|second|primary|secondary|main|background', re.IGNORECASE),
    )

    NARRATIVE_HINTS = ("human", "people", "emotional", "visual", "narrative", "story")

    def classify(self, field_name: str, original_key: str = "", values: Iterable[str] = ()) -> ContainerKind:
        return self.decide(field_name, original_key, values).kind

    def decide(
        self,
        field_name: str,
        original_key: str = "",
        values: Iterable[str] = ()
    ) -> ContainerDecision:
        """
        Classify one field.

        Args:
            field_name: Element or display name (e.g., "Emotional_Hooks")
            original_key: Flattened source key (e.g., "lifestyle_marketing_potential_emotional_hooks")
            values: The field's individual values

        Returns:
            ContainerDecision naming the container and the rule that chose it
        """
        name = field_name.strip().lower().replace(" ", "_")
        key = original_key or ""

        matched = self._first_match(self.UNORDERED_PATTERNS, name, key.lower())
        if matched:
            return ContainerDecision(field_name, key, ContainerKind.UNORDERED,
                                     ContainerRule.UNORDERED_VOCABULARY, matched)

        matched = self._first_match(self.ORDERED_PATTERNS, name, key.lower())
        if matched:
            return ContainerDecision(field_name, key, ContainerKind.ORDERED,
                                     ContainerRule.ORDERED_VOCABULARY, matched)

        for value in values:
            text = str(value)
            for cue in self.VALUE_CUES:
                hit = cue.search(text)
                if hit:
                    return ContainerDecision(field_name, key, ContainerKind.ORDERED,
                                             ContainerRule.VALUE_PROGRESSION, hit.group(0))

        for hint in self.NARRATIVE_HINTS:
            if hint in name:
                return ContainerDecision(field_name, key, ContainerKind.ORDERED,
                                         ContainerRule.NARRATIVE_NAME, hint)

        return ContainerDecision(field_name, key, ContainerKind.UNORDERED, ContainerRule.DEFAULT)

    @staticmethod
    def _first_match(patterns: Tuple[str, ...], name: str, key: str) -> Optional[str]:
        for pattern in patterns:
            if pattern in name or pattern in key:
                return pattern
        return None
