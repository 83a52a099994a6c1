# =============================================================================
# camp_core/models/__init__.py
# Entity Tree Model: entities, filtering and mutation reducers
# =============================================================================

from camp_core.models.entities import (
    Person,
    Ward,
    UnionCouncil,
    UnionBearingRegion,
    DirectWardRegion,
    Region,
    RegionTree,
    region_from_dict,
    regions_from_payload,
    regions_to_payload,
    find_region,
    find_union,
    find_ward,
    count_entities,
)

from camp_core.models.filters import (
    RegionFilter,
    WardOption,
    FilterStats,
    apply_filters,
    available_unions,
    available_wards,
    filter_stats,
)

from camp_core.models.ids import (
    generate_id,
    generate_person_id,
    generate_union_id,
    generate_ward_id,
    generate_region_id,
)

__all__ = [
    # Entities
    "Person",
    "Ward",
    "UnionCouncil",
    "UnionBearingRegion",
    "DirectWardRegion",
    "Region",
    "RegionTree",
    "region_from_dict",
    "regions_from_payload",
    "regions_to_payload",
    "find_region",
    "find_union",
    "find_ward",
    "count_entities",
    # Filtering
    "RegionFilter",
    "WardOption",
    "FilterStats",
    "apply_filters",
    "available_unions",
    "available_wards",
    "filter_stats",
    # Identifiers
    "generate_id",
    "generate_person_id",
    "generate_union_id",
    "generate_ward_id",
    "generate_region_id",
]
