# =============================================================================
# camp_core/models/reducers.py
# Pure mutation reducers over the region tree
# =============================================================================
"""
Reducers take the current tree plus an intent payload and return a new tree.

Only the branch holding the target is rebuilt; every other region, union and
ward is returned by reference. When nothing matches (unknown id, deleting an
absent entity) the input tree object itself is returned.

Ward-owning parents are addressed by id: a ``DirectWardRegion`` or a
``UnionCouncil``. A union-bearing region id is never a ward parent, so such a
call is a no-op.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Callable, Optional, Tuple, TypeVar

from camp_core.models.entities import (
    DirectWardRegion,
    Person,
    Region,
    RegionTree,
    UnionBearingRegion,
    UnionCouncil,
    Ward,
)
from camp_core.models.ids import generate_person_id, generate_ward_id

T = TypeVar("T")

WardsUpdate = Callable[[Tuple[Ward, ...]], Tuple[Ward, ...]]
PersonsUpdate = Callable[[Tuple[Person, ...]], Tuple[Person, ...]]


# =============================================================================
# STRUCTURE-SHARING HELPERS
# =============================================================================

def _map_matching(
    items: Tuple[T, ...],
    predicate: Callable[[T], bool],
    update: Callable[[T], T],
) -> Tuple[T, ...]:
    """Apply ``update`` to matching items; returns ``items`` itself if nothing changed."""
    changed = False
    result = []
    for item in items:
        if predicate(item):
            new_item = update(item)
            changed = changed or new_item is not item
            result.append(new_item)
        else:
            result.append(item)
    return tuple(result) if changed else items


def _remove_matching(items: Tuple[T, ...], predicate: Callable[[T], bool]) -> Tuple[T, ...]:
    kept = tuple(item for item in items if not predicate(item))
    return items if len(kept) == len(items) else kept


def _with_wards(owner, wards: Tuple[Ward, ...]):
    return owner if wards is owner.wards else replace(owner, wards=wards)


def _update_ward_lists(
    regions: RegionTree,
    parent_id: Optional[str],
    update: WardsUpdate,
) -> RegionTree:
    """
    Apply ``update`` to the ward list of the parent with ``parent_id``.

    A ``parent_id`` of None applies it to every ward list in the forest.
    """
    def matches(owner) -> bool:
        return parent_id is None or owner.id == parent_id

    def update_region(region: Region) -> Region:
        if isinstance(region, DirectWardRegion):
            return _with_wards(region, update(region.wards)) if matches(region) else region

        unions = _map_matching(
            region.unions,
            matches,
            lambda union: _with_wards(union, update(union.wards)),
        )
        return region if unions is region.unions else replace(region, unions=unions)

    return _map_matching(tuple(regions), lambda region: True, update_region)


def _update_union(
    regions: RegionTree,
    union_id: str,
    update: Callable[[UnionCouncil], UnionCouncil],
) -> RegionTree:
    def update_region(region: Region) -> Region:
        if not isinstance(region, UnionBearingRegion):
            return region
        unions = _map_matching(region.unions, lambda union: union.id == union_id, update)
        return region if unions is region.unions else replace(region, unions=unions)

    return _map_matching(tuple(regions), lambda region: True, update_region)


def _update_persons_of_ward(ward_id: str, update: PersonsUpdate) -> WardsUpdate:
    def update_wards(wards: Tuple[Ward, ...]) -> Tuple[Ward, ...]:
        def update_ward(ward: Ward) -> Ward:
            persons = update(ward.persons)
            return ward if persons is ward.persons else replace(ward, persons=persons)

        return _map_matching(wards, lambda ward: ward.id == ward_id, update_ward)

    return update_wards


def _append_person(person: Person) -> PersonsUpdate:
    return lambda persons: persons + (person,)


def _edit_person(person_id: str, name: str, phone: Optional[str]) -> PersonsUpdate:
    def edit(person: Person) -> Person:
        if person.name == name and person.phone == phone:
            return person
        return replace(person, name=name, phone=phone)

    return lambda persons: _map_matching(persons, lambda p: p.id == person_id, edit)


def _delete_person(person_id: str) -> PersonsUpdate:
    return lambda persons: _remove_matching(persons, lambda p: p.id == person_id)


# =============================================================================
# UNION REDUCERS
# =============================================================================

def edit_union_name(regions: RegionTree, union_id: str, name: str) -> RegionTree:
    def rename(union: UnionCouncil) -> UnionCouncil:
        return union if union.name == name else replace(union, name=name)

    return _update_union(regions, union_id, rename)


# =============================================================================
# WARD REDUCERS
# =============================================================================

def add_ward(
    regions: RegionTree,
    parent_id: str,
    name: str,
    ward_id: Optional[str] = None,
) -> RegionTree:
    """Append a ward with no persons to a pouroshova region or a union."""
    ward = Ward(id=ward_id or generate_ward_id(), name=name, persons=())
    return _update_ward_lists(regions, parent_id, lambda wards: wards + (ward,))


def edit_ward_name(
    regions: RegionTree,
    ward_id: str,
    name: str,
    parent_id: Optional[str] = None,
) -> RegionTree:
    """Rename a ward; without ``parent_id`` the whole forest is searched."""
    def rename(wards: Tuple[Ward, ...]) -> Tuple[Ward, ...]:
        return _map_matching(
            wards,
            lambda ward: ward.id == ward_id,
            lambda ward: ward if ward.name == name else replace(ward, name=name),
        )

    return _update_ward_lists(regions, parent_id, rename)


def delete_ward(regions: RegionTree, parent_id: str, ward_id: str) -> RegionTree:
    return _update_ward_lists(
        regions,
        parent_id,
        lambda wards: _remove_matching(wards, lambda ward: ward.id == ward_id),
    )


# =============================================================================
# UNION RESPONSIBLE REDUCERS
# =============================================================================

def _update_union_persons(regions: RegionTree, union_id: str, update: PersonsUpdate) -> RegionTree:
    def update_union(union: UnionCouncil) -> UnionCouncil:
        persons = update(union.union_responsible)
        if persons is union.union_responsible:
            return union
        return replace(union, union_responsible=persons)

    return _update_union(regions, union_id, update_union)


def add_union_person(
    regions: RegionTree,
    union_id: str,
    name: str,
    phone: Optional[str],
    person_id: Optional[str] = None,
) -> RegionTree:
    # No cap here; the form layer stops at two responsible persons
    person = Person(id=person_id or generate_person_id(), name=name, phone=phone)
    return _update_union_persons(regions, union_id, _append_person(person))


def edit_union_person(
    regions: RegionTree,
    union_id: str,
    person_id: str,
    name: str,
    phone: Optional[str],
) -> RegionTree:
    return _update_union_persons(regions, union_id, _edit_person(person_id, name, phone))


def delete_union_person(regions: RegionTree, union_id: str, person_id: str) -> RegionTree:
    return _update_union_persons(regions, union_id, _delete_person(person_id))


# =============================================================================
# WARD PERSON REDUCERS
# =============================================================================

def add_ward_person(
    regions: RegionTree,
    parent_id: str,
    ward_id: str,
    name: str,
    phone: Optional[str],
    person_id: Optional[str] = None,
) -> RegionTree:
    person = Person(id=person_id or generate_person_id(), name=name, phone=phone)
    return _update_ward_lists(
        regions, parent_id, _update_persons_of_ward(ward_id, _append_person(person))
    )


def edit_ward_person(
    regions: RegionTree,
    parent_id: str,
    ward_id: str,
    person_id: str,
    name: str,
    phone: Optional[str],
) -> RegionTree:
    return _update_ward_lists(
        regions,
        parent_id,
        _update_persons_of_ward(ward_id, _edit_person(person_id, name, phone)),
    )


def delete_ward_person(
    regions: RegionTree,
    parent_id: str,
    ward_id: str,
    person_id: str,
) -> RegionTree:
    return _update_ward_lists(
        regions, parent_id, _update_persons_of_ward(ward_id, _delete_person(person_id))
    )
