import copy
import pytest
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncGenerator, Dict, List, Optional

from httpx import ASGITransport, AsyncClient

from app.main import app
from app.api.deps import get_record_store
from app.domain.farms.repository import FarmRepository
from app.domain.inventory.repository import InventoryRepository
from app.domain.inventory.service import InventoryWorkflow
from app.infrastructure.notifications import Notifier
from app.infrastructure.record_store import StoreResponse


INVENTORY_TABLE = "inventory_c"
FARM_TABLE = "farm_c"


class FakeRecordStore:
    """In-memory stand-in for the managed record store.

    Reads expand ``farm_id_c`` into ``{"Id", "Name"}`` the way the real
    store does. ``queue`` overrides the next response of an operation;
    ``fail_ids`` makes per-record results fail without touching the data.
    """

    def __init__(self):
        self.tables: Dict[str, Dict[int, Dict[str, Any]]] = {INVENTORY_TABLE: {}, FARM_TABLE: {}}
        self.calls: List[tuple] = []
        self.queued: Dict[str, List[StoreResponse]] = {}
        self.fail_ids: Dict[int, Optional[str]] = {}
        self._next_id = 1

    def seed(self, table: str, **fields) -> int:
        record_id = fields.pop("Id", None) or self._next_id
        self._next_id = max(self._next_id, record_id) + 1
        self.tables.setdefault(table, {})[record_id] = {"Id": record_id, **fields}
        return record_id

    def queue(self, operation: str, response: Dict[str, Any]) -> None:
        self.queued.setdefault(operation, []).append(StoreResponse.model_validate(response))

    def calls_for(self, operation: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == operation]

    def _dequeue(self, operation: str) -> Optional[StoreResponse]:
        pending = self.queued.get(operation)
        if pending:
            return pending.pop(0)
        return None

    def _expand(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        row = copy.deepcopy(row)
        farm_id = row.get("farm_id_c")
        if table == INVENTORY_TABLE and isinstance(farm_id, int):
            farm = self.tables[FARM_TABLE].get(farm_id)
            row["farm_id_c"] = {"Id": farm_id, "Name": farm.get("Name") if farm else None}
        return row

    async def fetch_records(self, table, params):
        self.calls.append(("fetch_records", table, copy.deepcopy(params)))
        queued = self._dequeue("fetch_records")
        if queued:
            return queued
        rows = [self._expand(table, row) for row in self.tables.get(table, {}).values()]
        if params.get("orderBy"):
            field = params["orderBy"][0]["fieldName"]
            rows.sort(key=lambda row: (row.get(field) or "").lower())
        return StoreResponse(success=True, data=rows)

    async def get_record_by_id(self, table, record_id, params):
        self.calls.append(("get_record_by_id", table, record_id, copy.deepcopy(params)))
        queued = self._dequeue("get_record_by_id")
        if queued:
            return queued
        row = self.tables.get(table, {}).get(int(record_id))
        return StoreResponse(success=True, data=self._expand(table, row) if row else None)

    async def create_record(self, table, params):
        self.calls.append(("create_record", table, copy.deepcopy(params)))
        queued = self._dequeue("create_record")
        if queued:
            return queued
        results = []
        for record in params["records"]:
            record_id = self.seed(table, **copy.deepcopy(record))
            results.append({"success": True, "data": self._expand(table, self.tables[table][record_id])})
        return StoreResponse.model_validate({"success": True, "results": results})

    async def update_record(self, table, params):
        self.calls.append(("update_record", table, copy.deepcopy(params)))
        queued = self._dequeue("update_record")
        if queued:
            return queued
        results = []
        for record in params["records"]:
            existing = self.tables.get(table, {}).get(record["Id"])
            if existing is None:
                results.append({"success": False, "message": "Record does not exist"})
                continue
            existing.update(copy.deepcopy(record))
            results.append({"success": True, "data": self._expand(table, existing)})
        return StoreResponse.model_validate({"success": True, "results": results})

    async def delete_record(self, table, params):
        self.calls.append(("delete_record", table, copy.deepcopy(params)))
        queued = self._dequeue("delete_record")
        if queued:
            return queued
        results = []
        for record_id in params["RecordIds"]:
            if record_id in self.fail_ids or record_id not in self.tables.get(table, {}):
                message = self.fail_ids.get(record_id)
                results.append({"success": False, "message": message} if message else {"success": False})
                continue
            del self.tables[table][record_id]
            results.append({"success": True})
        return StoreResponse.model_validate({"success": True, "results": results})


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store() -> FakeRecordStore:
    store = FakeRecordStore()
    store.seed(FARM_TABLE, Id=1, Name="North Field")
    store.seed(FARM_TABLE, Id=2, Name="Riverside Orchard")
    return store


@pytest.fixture
def inventory_repository(store: FakeRecordStore) -> InventoryRepository:
    return InventoryRepository(store, table_name=INVENTORY_TABLE)


@pytest.fixture
def farm_repository(store: FakeRecordStore) -> FarmRepository:
    return FarmRepository(store, table_name=FARM_TABLE)


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def workflow(inventory_repository: InventoryRepository, notifier: Notifier) -> InventoryWorkflow:
    return InventoryWorkflow(inventory_repository, notifier, confirm=lambda prompt: True)


@pytest.fixture
def seeded_store(store: FakeRecordStore, now: datetime) -> FakeRecordStore:
    """Store with three inventory items on two farms"""
    store.seed(
        INVENTORY_TABLE,
        Id=10,
        Name="Organic Fertilizer",
        item_name_c="Organic Fertilizer",
        quantity_c=40,
        unit_of_measure_c="bags",
        farm_id_c=1,
        expiration_date_c=(now + timedelta(days=90)).date().isoformat(),
        Tags="fertilizer, organic",
    )
    store.seed(
        INVENTORY_TABLE,
        Id=11,
        Name="Apple Crates",
        item_name_c="Apple Crates",
        quantity_c=120,
        unit_of_measure_c="boxes",
        farm_id_c=2,
        Tags="",
    )
    store.seed(
        INVENTORY_TABLE,
        Id=12,
        Name="Diesel",
        item_name_c="Diesel",
        quantity_c=300,
        unit_of_measure_c="liters",
        farm_id_c=1,
        expiration_date_c=(now + timedelta(days=3)).date().isoformat(),
        Tags="fuel",
    )
    return store


@pytest.fixture
def sample_form_data() -> dict:
    """Valid form input for a new inventory item."""
    return {
        "item_name": "Seed Potatoes",
        "quantity": "25",
        "unit_of_measure": "kg",
        "farm_id": "2",
        "expiration_date": "2027-03-01",
        "tags": "seed, spring",
    }


@pytest.fixture
async def client(store: FakeRecordStore) -> AsyncGenerator[AsyncClient, None]:
    """API client wired to the fake record store."""
    app.dependency_overrides[get_record_store] = lambda: store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
