# ==============================================
# Category Tables
# ==============================================
#
# PURPOSE:
#   Static report categories per schema variant. Each category is a
#   (name, icon, ordered field-name patterns) triple; the organizer
#   walks categories and patterns in table order.
#
#   The tables are part of the contract between packet writers and
#   report readers: renaming a pattern changes which category an
#   existing image's fields land in.
#
# STRUCTURE:
# ----------
#   Standard categories (every schema):
#     📋 Image Metadata, 📷 Technical Metadata, ⚙️ Processing Metadata
#   then the schema's own categories, then (at organize time) the
#   synthetic 📝 Additional Metadata catch-all.
#
#   Tables are built once at import and exposed read-only through
#   CATEGORY_TABLES (a MappingProxyType of tuples).
#
# ==============================================

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Tuple

from orbit_metadata.normalization.tree import SchemaType


@dataclass(frozen=True)
class Category:
    name: str
    icon: str
    patterns: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CategoryTable:
    schema_type: SchemaType
    categories: Tuple[Category, ...]

    def __iter__(self) -> Iterator[Category]:
        return iter(self.categories)


ADDITIONAL_CATEGORY = Category("Additional Metadata", "📝")


def _category(name: str, icon: str, *patterns: str) -> Category:
    return Category(name, icon, tuple(patterns))


STANDARD_CATEGORIES = (
    _category(
        "Image Metadata", "📋",
        "dublin_core_title", "dublin_core_description", "dublin_core_subject",
        "dublin_core_creator", "dublin_core_rights", "dublin_core_format",
        "dublin_core_identifier",
    ),
    _category(
        "Technical Metadata", "📷",
        "xmp_core_creator_tool", "xmp_core_create_date", "xmp_core_metadata_date",
        "xmp_core_toolkit", "photoshop_color_mode", "iptc_source",
        "iptc_instructions", "iptc_person_in_image",
    ),
    _category(
        "Processing Metadata", "⚙️",
        "processing_processed_timestamp", "processing_processor_version",
        "processing_schema_type", "processing_processor_location",
    ),
)

LIFESTYLE_CATEGORIES = (
    _category(
        "Scene Overview", "📊",
        "scene_overview_setting", "setting", "scene_overview_time_of_day", "time_of_day",
        "scene_overview_season", "season", "scene_overview_occasion", "occasion",
        "scene_overview_primary_activity", "primary_activity",
    ),
    _category(
        "Human Elements", "👥",
        "human_elements_number_of_people", "number_of_people",
        "human_elements_social_dynamics", "social_dynamics",
        "human_elements_demographics", "demographics",
        "human_elements_interactions", "interactions",
        "human_elements_emotional_states", "emotional_states",
        "human_elements_clothing_style", "clothing_style",
    ),
    _category(
        "Environment", "🌍",
        "environment_location_type", "location_type",
        "environment_architectural_elements", "architectural_elements",
        "environment_natural_elements", "natural_elements",
        "environment_urban_context", "urban_context",
        "environment_spatial_arrangement", "spatial_arrangement",
    ),
    _category(
        "Key Objects", "🏺",
        "key_objects_food_beverage", "food_and_beverage",
        "key_objects_furniture", "furniture",
        "key_objects_technology", "technology",
        "key_objects_decorative_items", "decorative_items",
        "key_objects_defining_props", "defining_props",
        "key_objects_personal_items", "personal_items",
    ),
    _category(
        "Atmospheric Elements", "🌅",
        "atmospheric_elements_lighting_quality", "lighting_quality",
        "atmospheric_elements_color_palette", "color_palette",
        "atmospheric_elements_primary_colors", "primary_colors",
        "atmospheric_elements_mood", "mood",
        "atmospheric_elements_mood_indicators", "mood_indicators",
        "atmospheric_elements_sensory_cues", "sensory_cues",
        "atmospheric_elements_weather_conditions", "weather_conditions",
    ),
    _category(
        "Narrative Analysis", "📖",
        "narrative_analysis_story", "narrative_analysis_story_elements",
        "story_implied", "Story_Implied",
        "narrative_analysis_cultural_significance", "cultural_significance",
        "narrative_analysis_cultural_context", "cultural_context",
        "historical_context", "Historical_Context",
        "narrative_analysis_socioeconomic_indicators", "socioeconomic_indicators",
        "narrative_analysis_values_represented", "values_represented",
        "narrative_analysis_lifestyle_category", "lifestyle_values",
    ),
    _category(
        "Photographic Elements", "📷",
        "photographic_elements_composition", "composition",
        "photographic_elements_perspective", "perspective",
        "photographic_elements_focal_points", "focal_points",
        "photographic_elements_depth_of_field", "depth_of_field",
        "photographic_elements_visual_style", "visual_style",
        "photographic_elements_technical_qualities", "technical_qualities",
    ),
    _category(
        "Marketing Potential", "🎯",
        "marketing_potential_target_demographic", "target_demographic",
        "marketing_potential_aspirational_elements", "aspirational_elements",
        "marketing_potential_brand_alignment_opportunities", "brand_alignment_opportunities",
        "marketing_potential_emotional_hooks", "emotional_hooks",
        "marketing_potential_market_appeal", "alignment_opportunities",
    ),
)

PRODUCT_CATEGORIES = (
    _category(
        "Product Identification", "🏷️",
        "product_identification_product_type", "product_type",
        "product_identification_product_category", "product_category",
        "product_identification_design_style", "design_style",
        "product_identification_brand", "brand",
        "product_identification_model", "model",
    ),
    _category(
        "Physical Characteristics", "🔍",
        "physical_characteristics_primary_color", "primary_color",
        "physical_characteristics_secondary_colors", "secondary_colors",
        "physical_characteristics_material", "material",
        "physical_characteristics_pattern_type", "pattern_type",
        "physical_characteristics_surface_texture", "surface_texture",
        "physical_characteristics_finish", "finish",
        "physical_characteristics_dimensions", "dimensions",
        "physical_characteristics_weight", "weight",
    ),
    _category(
        "Structural Elements", "🏗️",
        "structural_elements_frame_type", "frame_type",
        "structural_elements_frame_design", "frame_design",
        "structural_elements_leg_structure", "leg_structure",
        "structural_elements_support_systems", "support_systems",
        "structural_elements_construction_details", "construction_details",
    ),
    _category(
        "Design Attributes", "🎨",
        "design_attributes_aesthetic_category", "aesthetic_category",
        "design_attributes_design_era", "design_era",
        "design_attributes_visual_weight", "visual_weight",
        "design_attributes_design_influence", "design_influence",
        "design_attributes_style_elements", "style_elements",
        "design_attributes_intended_setting", "intended_setting",
    ),
    _category(
        "Commercial Analysis", "💼",
        "commercial_analysis_market_positioning", "market_positioning",
        "commercial_analysis_target_market", "target_market",
        "commercial_analysis_price_point_indication", "price_point",
        "commercial_analysis_competitive_advantages", "competitive_advantages",
        "commercial_analysis_market_differentiation", "market_differentiation",
        "commercial_analysis_retail_category", "retail_category",
    ),
    _category(
        "Quality Assessment", "⭐",
        "quality_assessment_construction_quality", "construction_quality",
        "quality_assessment_material_quality", "material_quality",
        "quality_assessment_finish_quality", "finish_quality",
        "quality_assessment_craftsmanship_level", "craftsmanship_level",
        "quality_assessment_durability_indicators", "durability_indicators",
        "quality_assessment_value_proposition", "value_proposition",
    ),
)

ORBIT_CATEGORIES = (
    _category(
        "Scene Overview", "📊",
        "scene_overview_setting", "scene_overview_time_of_day", "scene_overview_activities",
        "scene_overview_overall_mood", "scene_overview_scene_complexity",
    ),
    _category(
        "Human Elements", "👥",
        "human_elements_people_count", "human_elements_age_groups",
        "human_elements_gender_distribution", "human_elements_ethnicity_diversity",
        "human_elements_interactions", "human_elements_emotions",
    ),
    _category(
        "Environment", "🌍",
        "environment_location_type", "environment_architecture_style",
        "environment_natural_elements", "environment_weather_conditions",
        "environment_lighting_conditions",
    ),
    _category(
        "Key Objects", "🏺",
        "key_objects_products", "key_objects_technology", "key_objects_furniture",
        "key_objects_vehicles", "key_objects_notable_items",
    ),
    _category(
        "Atmospheric Elements", "🌅",
        "atmospheric_elements_color_scheme", "atmospheric_elements_lighting_quality",
        "atmospheric_elements_visual_mood", "atmospheric_elements_energy_level",
        "atmospheric_elements_aesthetic_style",
    ),
    _category(
        "Narrative Analysis", "📖",
        "narrative_analysis_story_elements", "narrative_analysis_cultural_context",
        "narrative_analysis_social_dynamics", "narrative_analysis_values_expressed",
        "narrative_analysis_lifestyle_indicators",
    ),
    _category(
        "Photographic Elements", "📷",
        "photographic_elements_composition_style", "photographic_elements_camera_angle",
        "photographic_elements_depth_of_field", "photographic_elements_focus_points",
        "photographic_elements_technical_quality",
    ),
    _category(
        "Marketing Potential", "🎯",
        "marketing_potential_demographics", "marketing_potential_psychographics",
        "marketing_potential_brand_categories", "marketing_potential_emotional_appeal",
        "marketing_potential_commercial_viability",
    ),
)


def build_category_tables() -> Mapping[SchemaType, CategoryTable]:
    tables = {
        SchemaType.LIFESTYLE: CategoryTable(SchemaType.LIFESTYLE, STANDARD_CATEGORIES + LIFESTYLE_CATEGORIES),
        SchemaType.PRODUCT: CategoryTable(SchemaType.PRODUCT, STANDARD_CATEGORIES + PRODUCT_CATEGORIES),
        SchemaType.ORBIT: CategoryTable(SchemaType.ORBIT, STANDARD_CATEGORIES + ORBIT_CATEGORIES),
    }
    return MappingProxyType(tables)


CATEGORY_TABLES = build_category_tables()
