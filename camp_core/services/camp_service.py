# =============================================================================
# camp_core/services/camp_service.py
# Mutation intents for the presentation layer
# =============================================================================
"""
CampService - what the pages call when a form is submitted or a delete is
confirmed.

Every intent validates its form, dispatches one reducer into the region store
and reports back a ServiceResult. Invalid forms never reach the store. The
sync engine picks the change up from the store and saves it.

Filters are per browser session, so one CampService is created per session
over the shared store and engine.
"""

from __future__ import annotations
from typing import Optional

from camp_core.errors import ValidationError
from camp_core.models import reducers
from camp_core.models.entities import RegionTree, find_union
from camp_core.models.filters import RegionFilter, apply_filters
from camp_core.offline.sync_engine import SyncEngine
from camp_core.services.base_service import BaseService, ServiceResult
from camp_core.services.validation import FormKind, validate_form
from camp_core.state.region_store import RegionStore

MAX_UNION_RESPONSIBLE = 2
UNION_RESPONSIBLE_LIMIT = "সর্বোচ্চ ২ জন ইউনিয়ন দায়িত্বশীল যোগ করা যাবে"


class CampService(BaseService):
    """
    Intent surface over the region store.

    Usage:
        service = CampService(store, engine)
        result = service.add_ward(union_id, "ওয়ার্ড-৪")
        if not result:
            show(result.field_errors)
    """

    def __init__(self, store: RegionStore, engine: Optional[SyncEngine] = None):
        super().__init__()
        self.store = store
        self.engine = engine
        self.filters = RegionFilter()

    @property
    def regions(self) -> RegionTree:
        return self.store.regions

    def _dispatch(self, operation: str, reducer, *args, **kwargs) -> ServiceResult:
        before = self.store.regions
        result = self.safe_execute(operation, self.store.dispatch, reducer, *args, **kwargs)
        if result and result.data is before:
            self.logger.debug(f"{operation}: nothing matched")
        return result

    # =========================================================================
    # UNIONS
    # =========================================================================

    def submit_union_edit(self, union_id: str, name: str) -> ServiceResult:
        try:
            form = validate_form(FormKind.UNION, name)
        except ValidationError as e:
            return ServiceResult.from_exception(e)
        return self._dispatch("Rename union", reducers.edit_union_name, union_id, form.name)

    # =========================================================================
    # WARDS
    # =========================================================================

    def add_ward(self, parent_id: str, name: str) -> ServiceResult:
        try:
            form = validate_form(FormKind.WARD, name)
        except ValidationError as e:
            return ServiceResult.from_exception(e)
        return self._dispatch("Add ward", reducers.add_ward, parent_id, form.name)

    def edit_ward(self, ward_id: str, name: str, parent_id: Optional[str] = None) -> ServiceResult:
        try:
            form = validate_form(FormKind.WARD, name)
        except ValidationError as e:
            return ServiceResult.from_exception(e)
        return self._dispatch(
            "Rename ward", reducers.edit_ward_name, ward_id, form.name, parent_id=parent_id
        )

    def delete_ward(self, parent_id: str, ward_id: str) -> ServiceResult:
        return self._dispatch("Delete ward", reducers.delete_ward, parent_id, ward_id)

    # =========================================================================
    # UNION RESPONSIBLE
    # =========================================================================

    def can_add_union_person(self, union_id: str) -> bool:
        union = find_union(self.store.regions, union_id)
        return union is not None and len(union.union_responsible) < MAX_UNION_RESPONSIBLE

    def add_union_person(self, union_id: str, name: str, phone: str) -> ServiceResult:
        try:
            form = validate_form(FormKind.UNION_PERSON, name, phone)
        except ValidationError as e:
            return ServiceResult.from_exception(e)

        union = find_union(self.store.regions, union_id)
        if union is not None and len(union.union_responsible) >= MAX_UNION_RESPONSIBLE:
            return ServiceResult.fail(UNION_RESPONSIBLE_LIMIT, error_code="LIMIT")

        return self._dispatch(
            "Add union responsible", reducers.add_union_person, union_id, form.name, form.phone
        )

    def edit_union_person(self, union_id: str, person_id: str, name: str, phone: str) -> ServiceResult:
        try:
            form = validate_form(FormKind.UNION_PERSON, name, phone)
        except ValidationError as e:
            return ServiceResult.from_exception(e)
        return self._dispatch(
            "Edit union responsible",
            reducers.edit_union_person,
            union_id,
            person_id,
            form.name,
            form.phone,
        )

    def delete_union_person(self, union_id: str, person_id: str) -> ServiceResult:
        return self._dispatch(
            "Delete union responsible", reducers.delete_union_person, union_id, person_id
        )

    # =========================================================================
    # WARD RESPONSIBLE
    # =========================================================================

    def add_ward_person(self, parent_id: str, ward_id: str, name: str, phone: str) -> ServiceResult:
        try:
            form = validate_form(FormKind.PERSON, name, phone)
        except ValidationError as e:
            return ServiceResult.from_exception(e)
        return self._dispatch(
            "Add ward responsible",
            reducers.add_ward_person,
            parent_id,
            ward_id,
            form.name,
            form.phone,
        )

    def edit_ward_person(
        self,
        parent_id: str,
        ward_id: str,
        person_id: str,
        name: str,
        phone: str,
    ) -> ServiceResult:
        try:
            form = validate_form(FormKind.PERSON, name, phone)
        except ValidationError as e:
            return ServiceResult.from_exception(e)
        return self._dispatch(
            "Edit ward responsible",
            reducers.edit_ward_person,
            parent_id,
            ward_id,
            person_id,
            form.name,
            form.phone,
        )

    def delete_ward_person(self, parent_id: str, ward_id: str, person_id: str) -> ServiceResult:
        return self._dispatch(
            "Delete ward responsible", reducers.delete_ward_person, parent_id, ward_id, person_id
        )

    # =========================================================================
    # FILTERS
    # =========================================================================

    def set_filters(self, filters: Optional[RegionFilter] = None, **changes: str) -> ServiceResult:
        """
        Replace the filters, or cascade single selector changes.

        Usage:
            service.set_filters(RegionFilter(region="region-1"))
            service.set_filters(union="union-7")     # clears the ward
        """
        try:
            updated = filters or self.filters
            for kind, value in changes.items():
                updated = updated.with_change(kind, value)
        except ValueError as e:
            return ServiceResult.fail(str(e), error_code="FILTER")
        self.filters = updated
        return ServiceResult.ok(updated)

    def filtered_regions(self) -> RegionTree:
        return apply_filters(self.store.regions, self.filters)

    # =========================================================================
    # RESET
    # =========================================================================

    def reset_to_seed(self) -> ServiceResult:
        """Restore the seed tree everywhere and clear the filters."""
        if self.engine is None:
            return ServiceResult.fail("No sync engine attached", error_code="CONFIG")
        result = self.safe_execute("Reset to seed data", self.engine.reset_to_seed)
        if result:
            self.filters = RegionFilter()
        return result
