# ==============================================
# FieldCanonicalizer
# ==============================================
#
# PURPOSE:
#   Turn a flattened metadata key into the short label used both
#   as the XMP element name and as the report display name.
#
#     lifestyle_scene_overview_time_of_day           → "Time Of Day"
#     product_product_identification_product_type    → "Product Type"
#     lifestyle_marketing_potential_emotional_hooks  → "Emotional Hooks"
#
# WHY THIS CLASS EXISTS:
#   Flattened keys are long and repeat their section name. Readers
#   of the packet (and of the report) want the field's own name.
#
# CLASS: FieldCanonicalizer
# -------------------------
#   Stateless utility class (classmethods only, like TypeDetector).
#
#   Methods:
#   --------
#   - canonicalize(key: str) -> str
#       Display name for a flattened key.
#
#   - element_name(key: str) -> str
#       Display name with spaces replaced by "_" (XML element name).
#
#   - title_case(text: str) -> str
#       Split on "_" and whitespace, capitalize each token.
#
# RULES:
# ------
#   1. Strip one leading schema token (lifestyle_, product_, orbit_)
#   2. Strip the first matching section prefix (first match wins)
#   3. Single token left → title-case it
#   4. Ends with a whole idiom (time_of_day, ...) → keep it whole
#   5. Two tokens → keep both
#   6. Three or more → keep the last two
#
#   Pure function of the key. Applying it to its own output returns
#   the same label, since labels never contain "_".
#
# ==============================================

import re


class FieldCanonicalizer:
    SCHEMA_PREFIX = re.compile(r'^(product|lifestyle|orbit)_')

    SECTION_PREFIXES = (
        "scene_overview_",
        "human_elements_",
        "environment_",
        "key_objects_",
        "atmospheric_elements_",
        "narrative_analysis_",
        "photographic_elements_",
        "marketing_potential_",
        "product_identification_",
        "physical_characteristics_",
        "structural_elements_",
        "design_attributes_",
        "commercial_analysis_",
        "quality_assessment_",
    )

    WHOLE_TERMS = (
        "time_of_day",
        "number_of_people",
        "age_group",
        "construction_quality",
        "material_quality",
        "finish_quality",
    )

    TOKEN_SPLIT = re.compile(r'[_\s]+')
    INVALID_NAME_CHARS = re.compile(r"[^\w.-]")

    @classmethod
    def canonicalize(cls, key: str) -> str:
        if not key:
            return ""

        clean = cls.SCHEMA_PREFIX.sub("", key, count=1)

        for prefix in cls.SECTION_PREFIXES:
            if clean.startswith(prefix):
                clean = clean[len(prefix):]
                break

        parts = clean.split("_")
        if len(parts) <= 1:
            return cls.title_case(clean)

        lowered = clean.lower()
        if any(lowered.endswith(term) for term in cls.WHOLE_TERMS):
            name = clean
        elif len(parts) == 2:
            name = clean
        else:
            name = "_".join(parts[-2:])

        return cls.title_case(name)

    @classmethod
    def element_name(cls, key: str) -> str:
        name = cls.INVALID_NAME_CHARS.sub("_", cls.canonicalize(key).replace(" ", "_"))
        # XML names cannot start with a digit
        if name and not (name[0].isalpha() or name[0] == "_"):
            name = "_" + name
        return name

    @classmethod
    def title_case(cls, text: str) -> str:
        words = [word for word in cls.TOKEN_SPLIT.split(text) if word]
        return " ".join(cls._capitalize(word) for word in words)

    @staticmethod
    def _capitalize(word: str) -> str:
        head = word[0].upper()
        # "ß".upper() is "SS"; a longer head would not survive a second pass
        if len(head) != 1:
            head = word[0]
        return head + word[1:].lower()


canonicalize = FieldCanonicalizer.canonicalize
