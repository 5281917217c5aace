import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from app.core.exceptions import (
    FieldValidationFailedError,
    NotFoundError,
    RequestFailedError,
)
from app.domain.inventory.models import (
    FIELD_ID,
    FIELD_NAME,
    READ_FIELDS,
    InventoryPayload,
    InventoryRecord,
    parse_int,
    record_from_store,
)
from app.infrastructure.record_store import (
    RecordResult,
    RecordStoreClient,
    StoreResponse,
    build_field_projection,
)

logger = logging.getLogger(__name__)


@dataclass
class BatchOutcome:
    """Per-record results of one batch call, partitioned by success"""
    successes: List[RecordResult] = field(default_factory=list)
    failures: List[RecordResult] = field(default_factory=list)

    @classmethod
    def from_results(cls, results: Iterable[RecordResult]) -> "BatchOutcome":
        outcome = cls()
        for result in results:
            if result.success:
                outcome.successes.append(result)
            else:
                outcome.failures.append(result)
        return outcome

    @property
    def ok(self) -> bool:
        return not self.failures

    def first_error(self) -> Optional[Union[FieldValidationFailedError, RequestFailedError]]:
        """Error for the first failed record in submission order.

        A field-level error wins over the record's message; a failure with
        neither still produces a generic RequestFailedError.
        """
        if not self.failures:
            return None
        failure = self.failures[0]
        if failure.errors:
            error = failure.errors[0]
            return FieldValidationFailedError(field_label=error.field_label, message=error.message)
        return RequestFailedError(message=failure.message or "Record store rejected the record")

    def describe_failures(self) -> str:
        return json.dumps([f.model_dump(by_alias=True) for f in self.failures], default=str)


class InventoryRepository:
    """Maps inventory records onto the record store's inventory table."""

    def __init__(self, client: RecordStoreClient, table_name: str = "inventory_c"):
        self.client = client
        self.table_name = table_name

    def _check_envelope(self, response: StoreResponse, operation: str) -> None:
        if not response.success:
            logger.error(f"Error {operation} inventory: {response.message}")
            raise RequestFailedError(
                message=response.message or f"Failed {operation} inventory",
                details={"table": self.table_name, "operation": operation},
            )

    async def list_all(self) -> List[InventoryRecord]:
        params = {
            "fields": build_field_projection(READ_FIELDS),
            "orderBy": [{"fieldName": FIELD_NAME, "sorttype": "ASC"}],
        }
        response = await self.client.fetch_records(self.table_name, params)
        self._check_envelope(response, "fetching")

        data = response.data or []
        if isinstance(data, dict):
            data = [data]
        return [record_from_store(item) for item in data]

    async def get_by_id(self, record_id: Union[int, str]) -> InventoryRecord:
        params = {"fields": build_field_projection(READ_FIELDS)}
        response = await self.client.get_record_by_id(self.table_name, record_id, params)
        self._check_envelope(response, f"fetching ID {record_id} of")

        if not response.data or not isinstance(response.data, dict):
            logger.error(f"Inventory record with ID {record_id} not found")
            raise NotFoundError(
                message=f"Inventory item {record_id} not found",
                details={"id": record_id},
            )
        return record_from_store(response.data)

    def _batch_outcome(self, response: StoreResponse, operation: str) -> BatchOutcome:
        outcome = BatchOutcome.from_results(response.results or [])
        if not outcome.ok:
            logger.error(
                f"Failed to {operation} inventory {len(outcome.failures)} records:"
                f"{outcome.describe_failures()}"
            )
        return outcome

    async def _write(self, operation: str, records: List[Dict[str, Any]]) -> List[Optional[InventoryRecord]]:
        """One entry per successful result; None where the store returned no data."""
        params = {"records": records}
        if operation == "create":
            response = await self.client.create_record(self.table_name, params)
            self._check_envelope(response, "creating")
        else:
            response = await self.client.update_record(self.table_name, params)
            self._check_envelope(response, "updating")

        outcome = self._batch_outcome(response, operation)
        error = outcome.first_error()
        if error is not None:
            raise error
        return [record_from_store(result.data) if result.data else None for result in outcome.successes]

    async def create(self, payload: InventoryPayload) -> List[Optional[InventoryRecord]]:
        return await self._write("create", [payload.to_store_fields()])

    async def update(self, record_id: Union[int, str], payload: InventoryPayload) -> List[Optional[InventoryRecord]]:
        parsed_id = parse_int(record_id)
        if parsed_id is None:
            raise NotFoundError(message=f"Invalid inventory item id {record_id!r}", details={"id": str(record_id)})
        record = {FIELD_ID: parsed_id, **payload.to_store_fields()}
        return await self._write("update", [record])

    async def delete(self, record_ids: Union[int, str, Iterable[Union[int, str]]]) -> bool:
        """Delete one or many records; True only when every requested id was deleted."""
        if isinstance(record_ids, (int, str)):
            record_ids = [record_ids]

        ids: List[int] = []
        for raw in record_ids:
            parsed = parse_int(raw)
            if parsed is None:
                raise NotFoundError(message=f"Invalid inventory item id {raw!r}", details={"id": str(raw)})
            if parsed not in ids:
                ids.append(parsed)
        if not ids:
            return True

        response = await self.client.delete_record(self.table_name, {"RecordIds": ids})
        self._check_envelope(response, "deleting")

        outcome = self._batch_outcome(response, "delete")
        for failure in outcome.failures:
            if failure.message:
                raise RequestFailedError(message=failure.message, details={"ids": ids})
        return len(outcome.successes) == len(ids)
