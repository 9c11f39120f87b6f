# ==============================================
# StandardFieldMapper
# ==============================================
#
# PURPOSE:
#   Derive the standard XMP blocks from an analysis tree so that
#   ordinary photo tools (which know nothing about ORBIT
#   namespaces) still show a title, description and keywords.
#
# CLASS: StandardFieldMapper
# --------------------------
#   Constructor:
#   ------------
#   - __init__(codec_config: CodecConfig)
#
#   Methods:
#   --------
#   - map(tree, timestamp) -> StandardMetadata
#   - map_dublin_core(tree) -> dict
#       title       "<setting> - <activity>" or "<setting>"
#       description "A scene of <activity> in <setting> featuring <n>
#                    people during <time> with a <mood> atmosphere."
#       subject     keywords (food/beverage, furniture, activity,
#                   location), lower-cased, de-duplicated, max 10
#       creator     fixed
#   - map_iptc(tree) -> dict
#       PersonInImage           from demographics
#       OrganisationInImageName "Unidentified <location>" for
#                               restaurant / bar / cafe locations
#   - map_xmp_core(timestamp) -> dict
#   - map_photoshop(tree) -> dict
#
#   Every lookup checks the field's section first, then the root.
#
# ==============================================

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from orbit_metadata.config import CodecConfig
from orbit_metadata.normalization.flattener import parse_array_value
from orbit_metadata.normalization.tree import MetadataTree


MAX_KEYWORDS = 10
ORGANISATION_VENUES = ("restaurant", "bar", "cafe")


@dataclass
class StandardMetadata:
    dublin_core: Dict[str, Any] = field(default_factory=dict)
    iptc: Dict[str, Any] = field(default_factory=dict)
    xmp_core: Dict[str, Any] = field(default_factory=dict)
    photoshop: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {
            "dublin_core": dict(self.dublin_core),
            "iptc": dict(self.iptc),
            "xmp_core": dict(self.xmp_core),
            "photoshop": dict(self.photoshop),
        }


class StandardFieldMapper:
    def __init__(self, codec_config: Optional[CodecConfig] = None):
        self.codec_config = codec_config or CodecConfig()

    def map(self, tree: MetadataTree, timestamp: str) -> StandardMetadata:
        return StandardMetadata(
            dublin_core=self.map_dublin_core(tree),
            iptc=self.map_iptc(tree),
            xmp_core=self.map_xmp_core(timestamp),
            photoshop=self.map_photoshop(tree),
        )

    def map_dublin_core(self, tree: MetadataTree) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}

        setting = self._text(tree, "scene_overview", "setting")
        activity = self._text(tree, "scene_overview", "primary_activity")
        if setting and activity:
            fields["title"] = f"{setting} - {activity}"
        elif setting:
            fields["title"] = setting

        description = self.scene_description(tree)
        if description:
            fields["description"] = description

        keywords = self.extract_keywords(tree)
        if keywords:
            fields["subject"] = keywords

        fields["creator"] = self.codec_config.creator
        return fields

    def map_iptc(self, tree: MetadataTree) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}

        demographics = tree.get("human_elements", "demographics")
        if demographics:
            people = parse_array_value(demographics)
            if people:
                fields["PersonInImage"] = people

        location = self._text(tree, "environment", "location_type")
        if location and any(venue in location.lower() for venue in ORGANISATION_VENUES):
            fields["OrganisationInImageName"] = [f"Unidentified {location.lower()}"]

        return fields

    def map_xmp_core(self, timestamp: str) -> Dict[str, Any]:
        return {
            "CreatorTool": self.codec_config.creator_tool,
            "CreateDate": timestamp,
            "MetadataDate": timestamp,
        }

    def map_photoshop(self, tree: MetadataTree) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}

        hooks = self._text(tree, "marketing_potential", "emotional_hooks")
        target = self._text(tree, "marketing_potential", "target_demographic")
        if hooks or target:
            instructions = "AI-analyzed image suitable for"
            if target:
                instructions += f" {target} marketing"
            if hooks:
                instructions += f". Emotional themes: {hooks}"
            fields["Instructions"] = instructions

        fields["Source"] = "AI-generated metadata analysis"
        fields["ColorMode"] = "3"  # RGB
        return fields

    def scene_description(self, tree: MetadataTree) -> str:
        parts: List[str] = []

        setting = self._text(tree, "scene_overview", "setting")
        activity = self._text(tree, "scene_overview", "primary_activity")
        time_of_day = self._text(tree, "scene_overview", "time_of_day")
        people = self._text(tree, "human_elements", "number_of_people")
        mood = self._text(tree, "atmospheric_elements", "mood")

        if setting and activity:
            parts.append(f"A scene of {activity.lower()} in {setting.lower()}")
        if people:
            parts.append(f"featuring {people} people")
        if time_of_day:
            parts.append(f"during {time_of_day.lower()}")
        if mood:
            parts.append(f"with a {mood.lower()} atmosphere")

        return " ".join(parts) + "." if parts else ""

    def extract_keywords(self, tree: MetadataTree) -> List[str]:
        keywords: List[str] = []

        for section, name in (("key_objects", "food_and_beverage"), ("key_objects", "furniture")):
            value = tree.get(section, name)
            if value:
                keywords.extend(item.lower() for item in parse_array_value(value))

        for section, name in (("scene_overview", "primary_activity"), ("environment", "location_type")):
            value = self._text(tree, section, name)
            if value:
                keywords.append(value.lower())

        # dict.fromkeys keeps first-seen order
        return list(dict.fromkeys(keywords))[:MAX_KEYWORDS]

    @staticmethod
    def _text(tree: MetadataTree, section: str, name: str) -> str:
        value = tree.get(section, name)
        if value is None or value == "" or isinstance(value, dict):
            return ""
        if isinstance(value, (list, tuple)):
            return ", ".join(str(item) for item in value if item is not None)
        return str(value)
