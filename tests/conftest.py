# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import copy
import time
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from camp_core.models.entities import regions_from_payload


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

SAMPLE_PAYLOAD: List[Dict[str, Any]] = [
    {
        "id": "region-pouroshova",
        "name": "সাতকানিয়া পৌরসভা",
        "hasUnions": False,
        "wards": [
            {
                "id": "ward-p1",
                "name": "ওয়ার্ড-১",
                "persons": [{"id": "person-1", "name": "রহিম", "phone": "01711-000001"}],
            },
            {"id": "ward-p2", "name": "ওয়ার্ড-২", "persons": []},
        ],
    },
    {
        "id": "region-upazila",
        "name": "সাতকানিয়া উপজেলা",
        "hasUnions": True,
        "unions": [
            {
                "id": "union-a",
                "name": "কাঞ্চনা",
                "unionResponsible": [{"id": "person-2", "name": "করিম", "phone": "01811 000002"}],
                "wards": [
                    {"id": "ward-a1", "name": "ওয়ার্ড-১", "persons": []},
                    {
                        "id": "ward-a2",
                        "name": "ওয়ার্ড-২",
                        "persons": [{"id": "person-3", "name": "সালমা", "phone": "+8801911000003"}],
                    },
                ],
            },
            {
                "id": "union-b",
                "name": "আমিলাইশ",
                "unionResponsible": [],
                "wards": [{"id": "ward-b1", "name": "ওয়ার্ড-১", "persons": []}],
            },
        ],
    },
]


@pytest.fixture
def sample_payload():
    """JSON-shaped regions array (fresh copy per test)"""
    return copy.deepcopy(SAMPLE_PAYLOAD)


@pytest.fixture
def sample_regions(sample_payload):
    """Decoded tree: one pouroshova region, one region with two unions"""
    return regions_from_payload(sample_payload)


@pytest.fixture
def seed_regions():
    """The seed tree bundled with the package"""
    from camp_core.data.seed import SeedLoader

    return SeedLoader().load()


# =============================================================================
# TIME FIXTURES
# =============================================================================

class FakeClock:
    """Wall clock the test moves by hand"""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ManualTimer:
    """threading.Timer stand-in that only fires when the test says so"""

    def __init__(self, interval: float, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or []
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if self.cancelled:
            return
        self.fired = True
        self.function(*self.args, **self.kwargs)


class ManualTimerFactory:
    def __init__(self):
        self.timers: List[ManualTimer] = []

    def __call__(self, interval, function, args=None, kwargs=None) -> ManualTimer:
        timer = ManualTimer(interval, function, args, kwargs)
        self.timers.append(timer)
        return timer

    @property
    def live(self) -> List[ManualTimer]:
        return [t for t in self.timers if t.started and not t.cancelled and not t.fired]

    def fire_pending(self) -> None:
        for timer in self.live:
            timer.fire()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def timer_factory():
    return ManualTimerFactory()


# =============================================================================
# SUPABASE FIXTURES
# =============================================================================

class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Chainable subset of the postgrest request builder"""

    def __init__(self, client, table: str):
        self.client = client
        self.table_name = table
        self.mode = None
        self.values = None
        self.filters: Dict[str, Any] = {}
        self.row_limit: Optional[int] = None

    def select(self, *columns):
        self.mode = "select"
        return self

    def update(self, values):
        self.mode = "update"
        self.values = values
        return self

    def upsert(self, values):
        self.mode = "upsert"
        self.values = values
        return self

    def eq(self, column, value):
        self.filters[column] = value
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def _matches(self, row) -> bool:
        return all(row.get(k) == v for k, v in self.filters.items())

    def execute(self):
        client = self.client
        client.calls.append((self.mode, self.table_name, copy.deepcopy(self.values)))

        error = client.errors.get(self.mode)
        if error is not None:
            raise error
        if self.mode == "select" and client.select_delay:
            time.sleep(client.select_delay)

        rows = client.tables.setdefault(self.table_name, {})
        if self.mode == "select":
            data = [copy.deepcopy(r) for r in rows.values() if self._matches(r)]
            return FakeResponse(data[: self.row_limit] if self.row_limit else data)

        if self.mode == "update":
            updated = []
            for row in rows.values():
                if self._matches(row):
                    row.update(copy.deepcopy(self.values))
                    updated.append(copy.deepcopy(row))
            return FakeResponse(updated)

        if self.mode == "upsert":
            row = copy.deepcopy(self.values)
            rows[row["id"]] = row
            return FakeResponse([copy.deepcopy(row)])

        raise AssertionError(f"Unsupported query mode: {self.mode}")


class FakeSupabaseClient:
    """In-memory tables behind the supabase-py call chain"""

    def __init__(self):
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.errors: Dict[str, Exception] = {}
        self.select_delay = 0.0

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def put_document(self, table: str, row: Dict[str, Any]) -> None:
        self.tables.setdefault(table, {})[row["id"]] = copy.deepcopy(row)

    def document(self, table: str, document_id: str) -> Optional[Dict[str, Any]]:
        return self.tables.get(table, {}).get(document_id)

    def count(self, mode: str) -> int:
        return sum(1 for call in self.calls if call[0] == mode)


@pytest.fixture
def fake_supabase():
    return FakeSupabaseClient()


@pytest.fixture
def api_error():
    """Build a postgrest APIError the way the client raises it"""
    from postgrest.exceptions import APIError

    def build(message: str = "boom", code: Optional[str] = None) -> APIError:
        return APIError({"message": message, "code": code, "hint": None, "details": None})

    return build


@pytest.fixture
def seed_loader(sample_regions):
    """Seed loader returning the sample tree"""
    loader = MagicMock()
    loader.load.return_value = sample_regions
    return loader


@pytest.fixture
def remote_store(fake_supabase, seed_loader, fake_clock):
    from camp_core.data.remote_store import RemoteDocumentStore

    store = RemoteDocumentStore(
        fake_supabase,
        seed_loader,
        read_timeout=1.0,
        cache_ttl=30.0,
        poll_interval=0.05,
        clock=fake_clock,
    )
    yield store
    store.close()


# =============================================================================
# MOCK FIXTURES
# =============================================================================

@pytest.fixture
def mock_streamlit(monkeypatch):
    """Mock the Streamlit calls made by the error handlers"""
    mock_st = MagicMock()
    mock_st.session_state = {}
    monkeypatch.setattr("camp_core.errors.handlers.st", mock_st)
    return mock_st


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def poll_until(predicate, timeout: float = 2.0, interval: float = 0.01) -> bool:
    """Poll until predicate() is truthy or the timeout passes"""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return bool(predicate())


@pytest.fixture
def wait_for():
    return poll_until
