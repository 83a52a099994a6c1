# =============================================================================
# camp_core/models/entities.py
# Region / Union / Ward / Person tree and its JSON wire codec
# =============================================================================
"""
Entity tree for the election camp directory.

A region is one of two shapes:

    UnionBearingRegion   region -> unions -> wards -> persons
                                   unions -> union_responsible (persons)
    DirectWardRegion     region -> wards -> persons       ("pouroshova")

All entities are frozen dataclasses holding tuples, so ``==`` is a deep
structural comparison and untouched branches can be shared between trees.

The wire format keeps the keys used in the remote document and the local
cache (``hasUnions``, ``unionResponsible``, ...).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Person:
    """A named contact attached to a ward or a union."""
    id: str
    name: str
    phone: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "name": self.name}
        if self.phone is not None:
            data["phone"] = self.phone
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Person:
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            phone=data.get("phone"),
        )


@dataclass(frozen=True)
class Ward:
    """Smallest subdivision; owns its responsible persons."""
    id: str
    name: str
    persons: Tuple[Person, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "persons": [person.to_dict() for person in self.persons],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Ward:
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            persons=tuple(Person.from_dict(p) for p in data.get("persons") or ()),
        )


@dataclass(frozen=True)
class UnionCouncil:
    """Union-council subdivision of a region."""
    id: str
    name: str
    union_responsible: Tuple[Person, ...] = ()
    wards: Tuple[Ward, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "unionResponsible": [person.to_dict() for person in self.union_responsible],
            "wards": [ward.to_dict() for ward in self.wards],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> UnionCouncil:
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            union_responsible=tuple(
                Person.from_dict(p) for p in data.get("unionResponsible") or ()
            ),
            wards=tuple(Ward.from_dict(w) for w in data.get("wards") or ()),
        )


@dataclass(frozen=True)
class UnionBearingRegion:
    """Region subdivided into unions."""
    id: str
    name: str
    unions: Tuple[UnionCouncil, ...] = ()

    @property
    def has_unions(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "hasUnions": True,
            "unions": [union.to_dict() for union in self.unions],
        }


@dataclass(frozen=True)
class DirectWardRegion:
    """Pouroshova: region that owns its wards directly."""
    id: str
    name: str
    wards: Tuple[Ward, ...] = ()

    @property
    def has_unions(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "hasUnions": False,
            "wards": [ward.to_dict() for ward in self.wards],
        }


Region = Union[UnionBearingRegion, DirectWardRegion]
RegionTree = Tuple[Region, ...]


# =============================================================================
# WIRE CODEC
# =============================================================================

def region_from_dict(data: Dict[str, Any]) -> Region:
    """Decode one region; the inactive child collection is ignored."""
    region_id = str(data["id"])
    name = str(data.get("name", ""))

    if data.get("hasUnions"):
        return UnionBearingRegion(
            id=region_id,
            name=name,
            unions=tuple(UnionCouncil.from_dict(u) for u in data.get("unions") or ()),
        )
    return DirectWardRegion(
        id=region_id,
        name=name,
        wards=tuple(Ward.from_dict(w) for w in data.get("wards") or ()),
    )


def regions_from_payload(payload: Optional[Iterable[Dict[str, Any]]]) -> RegionTree:
    """
    Decode a JSON regions array into an immutable tree.

    Args:
        payload: List of region dicts (None is treated as empty)

    Raises:
        ValueError: If the payload is not a list of region objects
    """
    if payload is None:
        return ()
    if not isinstance(payload, (list, tuple)):
        raise ValueError(f"Expected a list of regions, got {type(payload).__name__}")

    try:
        return tuple(region_from_dict(item) for item in payload)
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed region payload: {e}") from e


def regions_to_payload(regions: Iterable[Region]) -> List[Dict[str, Any]]:
    """Encode a tree as the JSON-ready regions array."""
    return [region.to_dict() for region in regions]


# =============================================================================
# LOOKUPS
# =============================================================================

def find_region(regions: Iterable[Region], region_id: str) -> Optional[Region]:
    for region in regions:
        if region.id == region_id:
            return region
    return None


def iter_unions(regions: Iterable[Region]) -> Iterator[UnionCouncil]:
    for region in regions:
        if isinstance(region, UnionBearingRegion):
            yield from region.unions


def find_union(regions: Iterable[Region], union_id: str) -> Optional[UnionCouncil]:
    for union in iter_unions(regions):
        if union.id == union_id:
            return union
    return None


def iter_wards(region: Region) -> Iterator[Ward]:
    """All wards of a region, through its unions where it has them."""
    if isinstance(region, UnionBearingRegion):
        for union in region.unions:
            yield from union.wards
    else:
        yield from region.wards


def find_ward(regions: Iterable[Region], ward_id: str) -> Optional[Ward]:
    for region in regions:
        for ward in iter_wards(region):
            if ward.id == ward_id:
                return ward
    return None


def count_entities(regions: Iterable[Region]) -> Dict[str, int]:
    """Count unions, wards and persons (ward + union responsible) in a tree."""
    counts = {"regions": 0, "unions": 0, "wards": 0, "persons": 0}
    for region in regions:
        counts["regions"] += 1
        if isinstance(region, UnionBearingRegion):
            counts["unions"] += len(region.unions)
            for union in region.unions:
                counts["persons"] += len(union.union_responsible)
        for ward in iter_wards(region):
            counts["wards"] += 1
            counts["persons"] += len(ward.persons)
    return counts
