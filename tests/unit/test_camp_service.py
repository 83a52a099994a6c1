# =============================================================================
# tests/unit/test_camp_service.py
# Unit Tests for the mutation intent service
# =============================================================================

from unittest.mock import MagicMock

import pytest

from camp_core.models.entities import find_union, find_ward
from camp_core.models.filters import RegionFilter
from camp_core.services.camp_service import MAX_UNION_RESPONSIBLE, UNION_RESPONSIBLE_LIMIT, CampService
from camp_core.state.region_store import RegionStore


@pytest.fixture
def store(sample_regions):
    return RegionStore(sample_regions)


@pytest.fixture
def service(store):
    return CampService(store)


class TestValidationGate:
    """Invalid forms never reach the store"""

    def test_blank_ward_name(self, service, store):
        events = []
        store.subscribe(events.append)

        result = service.add_ward("union-b", "  ")

        assert not result
        assert result.error_code == "VALIDATION"
        assert "name" in result.field_errors
        assert events == []

    def test_invalid_phone(self, service, store, sample_regions):
        result = service.add_ward_person("union-a", "ward-a1", "রহিম", "abc")

        assert not result
        assert "phone" in result.field_errors
        assert store.regions is sample_regions

    def test_blank_union_name(self, service, store, sample_regions):
        assert not service.submit_union_edit("union-a", "")
        assert store.regions is sample_regions


class TestIntents:
    """Test each intent dispatches its reducer"""

    def test_rename_union_trims(self, service, store):
        assert service.submit_union_edit("union-a", "  নতুন  ")
        assert find_union(store.regions, "union-a").name == "নতুন"

    def test_ward_lifecycle(self, service, store):
        assert service.add_ward("region-pouroshova", "ওয়ার্ড-৩")
        ward = store.regions[0].wards[-1]

        assert service.edit_ward(ward.id, "ওয়ার্ড-৩ক")
        assert find_ward(store.regions, ward.id).name == "ওয়ার্ড-৩ক"

        assert service.delete_ward("region-pouroshova", ward.id)
        assert find_ward(store.regions, ward.id) is None

    def test_ward_person_lifecycle(self, service, store):
        assert service.add_ward_person("union-b", "ward-b1", "রফিক", " 01911-111111 ")
        person = find_ward(store.regions, "ward-b1").persons[0]
        assert person.phone == "01911-111111"

        assert service.edit_ward_person("union-b", "ward-b1", person.id, "রফিক আহমেদ", "01911")
        assert find_ward(store.regions, "ward-b1").persons[0].name == "রফিক আহমেদ"

        assert service.delete_ward_person("union-b", "ward-b1", person.id)
        assert find_ward(store.regions, "ward-b1").persons == ()

    def test_union_person_edit_and_delete(self, service, store):
        assert service.edit_union_person("union-a", "person-2", "করিম", "01811")
        assert find_union(store.regions, "union-a").union_responsible[0].phone == "01811"

        assert service.delete_union_person("union-a", "person-2")
        assert find_union(store.regions, "union-a").union_responsible == ()

    def test_unmatched_id_is_success_without_change(self, service, store, sample_regions):
        result = service.delete_ward("union-a", "ward-missing")
        assert result
        assert store.regions is sample_regions

    def test_reducer_failure_reported(self, service, store):
        store.dispatch = MagicMock(side_effect=RuntimeError("broken"))
        result = service.delete_ward("union-a", "ward-a1")
        assert not result
        assert "broken" in result.error


class TestUnionResponsibleLimit:
    """A union holds at most two responsible persons"""

    def test_limit(self, service, store):
        assert MAX_UNION_RESPONSIBLE == 2
        # union-a already has one
        assert service.can_add_union_person("union-a")
        assert service.add_union_person("union-a", "দ্বিতীয়", "01700")
        assert not service.can_add_union_person("union-a")

        result = service.add_union_person("union-a", "তৃতীয়", "01700")

        assert not result
        assert result.error_code == "LIMIT"
        assert result.error == UNION_RESPONSIBLE_LIMIT
        assert len(find_union(store.regions, "union-a").union_responsible) == 2

    def test_unknown_union_cannot_add(self, service):
        assert not service.can_add_union_person("union-missing")


class TestFilters:
    """Per-session filter state"""

    def test_cascading_changes(self, service):
        service.set_filters(region="region-upazila")
        service.set_filters(union="union-a")
        service.set_filters(ward="ward-a2")
        assert service.filters == RegionFilter("region-upazila", "union-a", "ward-a2")

        service.set_filters(union="union-b")
        assert service.filters == RegionFilter("region-upazila", "union-b", "")

    def test_replace_filters(self, service):
        result = service.set_filters(RegionFilter(region="region-pouroshova"))
        assert result.data == RegionFilter(region="region-pouroshova")

    def test_unknown_selector(self, service):
        result = service.set_filters(district="x")
        assert result.error_code == "FILTER"
        assert service.filters == RegionFilter()

    def test_filtered_regions(self, service):
        service.set_filters(region="region-pouroshova")
        assert [r.id for r in service.filtered_regions()] == ["region-pouroshova"]

    def test_filters_are_per_service(self, store):
        first, second = CampService(store), CampService(store)
        first.set_filters(region="region-upazila")
        assert second.filters.is_empty


class TestReset:
    def test_reset_without_engine(self, service):
        assert service.reset_to_seed().error_code == "CONFIG"

    def test_reset_clears_filters(self, store, sample_regions):
        engine = MagicMock()
        engine.reset_to_seed.return_value = sample_regions
        service = CampService(store, engine)
        service.set_filters(region="region-upazila")

        result = service.reset_to_seed()

        assert result.data == sample_regions
        assert service.filters.is_empty
        engine.reset_to_seed.assert_called_once()
