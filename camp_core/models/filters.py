# =============================================================================
# camp_core/models/filters.py
# Filtered projections of the region tree
# =============================================================================
"""
Region / union / ward filtering.

``apply_filters`` never mutates its input and hands back untouched branches
by reference. A union selected by the union filter always survives, even
when the ward filter narrows its ward list to nothing.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from camp_core.models.entities import (
    DirectWardRegion,
    RegionTree,
    UnionBearingRegion,
    UnionCouncil,
    count_entities,
    find_region,
)

FILTER_KINDS = ("region", "union", "ward")


@dataclass(frozen=True)
class RegionFilter:
    """Selected region/union/ward ids; empty string means "all"."""
    region: str = ""
    union: str = ""
    ward: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.region or self.union or self.ward)

    def with_change(self, kind: str, value: str) -> RegionFilter:
        """
        Apply a selector change the way the filter bar cascades it.

        Picking a region clears union and ward, picking a union clears ward.
        """
        value = value or ""
        if kind == "region":
            return RegionFilter(region=value)
        if kind == "union":
            return RegionFilter(region=self.region, union=value)
        if kind == "ward":
            return replace(self, ward=value)
        raise ValueError(f"Unknown filter kind: {kind!r} (expected one of {FILTER_KINDS})")

    def to_dict(self) -> dict:
        return {"region": self.region, "union": self.union, "ward": self.ward}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> RegionFilter:
        data = data or {}
        return cls(
            region=data.get("region") or "",
            union=data.get("union") or "",
            ward=data.get("ward") or "",
        )


@dataclass(frozen=True)
class WardOption:
    """Entry of the ward selector; union_name labels wards of union regions."""
    id: str
    name: str
    union_name: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.name} ({self.union_name})" if self.union_name else self.name


@dataclass(frozen=True)
class FilterStats:
    total_unions: int = 0
    total_wards: int = 0
    total_persons: int = 0


def _filter_union_wards(union: UnionCouncil, ward_id: str) -> UnionCouncil:
    wards = tuple(ward for ward in union.wards if ward.id == ward_id)
    if wards == union.wards:
        return union
    return replace(union, wards=wards)


def apply_filters(regions: RegionTree, filters: Optional[RegionFilter] = None) -> RegionTree:
    """
    Project the tree through the active filters.

    Args:
        regions: Canonical tree (never modified)
        filters: Active filters; None or an empty filter is identity

    Returns:
        Derived tree sharing every untouched branch with the input
    """
    if filters is None or filters.is_empty:
        return regions

    filtered = regions
    if filters.region:
        filtered = tuple(region for region in filtered if region.id == filters.region)

    if not (filters.union or filters.ward):
        return filtered

    projected = []
    for region in filtered:
        if isinstance(region, DirectWardRegion):
            # No unions here, so only the ward filter applies
            if filters.ward:
                region = replace(
                    region,
                    wards=tuple(ward for ward in region.wards if ward.id == filters.ward),
                )
            projected.append(region)
            continue

        unions = region.unions
        if filters.union:
            unions = tuple(union for union in unions if union.id == filters.union)
        if filters.ward:
            unions = tuple(_filter_union_wards(union, filters.ward) for union in unions)

        if unions != region.unions:
            region = replace(region, unions=unions)
        projected.append(region)

    return tuple(projected)


# =============================================================================
# FILTER BAR HELPERS
# =============================================================================

def available_unions(regions: RegionTree, region_id: str) -> Tuple[UnionCouncil, ...]:
    """Unions selectable once a region is picked."""
    if not region_id:
        return ()
    region = find_region(regions, region_id)
    if not isinstance(region, UnionBearingRegion):
        return ()
    return region.unions


def available_wards(regions: RegionTree, region_id: str, union_id: str = "") -> List[WardOption]:
    """
    Wards selectable for the picked region (and union, if any).

    With a union-bearing region and no union picked, wards of every union are
    offered and labelled with their union name.
    """
    if not region_id:
        return []
    region = find_region(regions, region_id)
    if region is None:
        return []

    if isinstance(region, DirectWardRegion):
        return [WardOption(ward.id, ward.name) for ward in region.wards]

    if not union_id:
        return [
            WardOption(ward.id, ward.name, union.name)
            for union in region.unions
            for ward in union.wards
        ]

    for union in region.unions:
        if union.id == union_id:
            return [WardOption(ward.id, ward.name) for ward in union.wards]
    return []


def filter_stats(regions: RegionTree, filters: RegionFilter) -> Optional[FilterStats]:
    """Counts for the selected region under the active filters, None without one."""
    region = find_region(regions, filters.region) if filters.region else None
    if region is None:
        return None

    counts = count_entities(apply_filters((region,), filters))
    return FilterStats(
        total_unions=counts["unions"],
        total_wards=counts["wards"],
        total_persons=counts["persons"],
    )
