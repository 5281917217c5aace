import logging
from typing import Any, Dict, List, Optional, Protocol, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.core.exceptions import handle_transport_error

logger = logging.getLogger(__name__)


class FieldError(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    field_label: str = Field(default="", alias="fieldLabel")
    message: str = ""


class RecordResult(BaseModel):
    """Per-record outcome of a batch create/update/delete"""
    model_config = ConfigDict(extra="ignore")

    success: bool
    data: Optional[Dict[str, Any]] = None
    message: Optional[str] = None
    errors: List[FieldError] = []


class StoreResponse(BaseModel):
    """Response envelope returned by every record store operation"""
    model_config = ConfigDict(extra="ignore")

    success: bool
    message: Optional[str] = None
    data: Optional[Union[List[Dict[str, Any]], Dict[str, Any]]] = None
    results: Optional[List[RecordResult]] = None


def build_field_projection(fields: List[str]) -> List[Dict[str, Any]]:
    return [{"field": {"Name": name}} for name in fields]


class RecordStoreClient(Protocol):
    """Request/response contract of the managed record store."""

    async def fetch_records(self, table: str, params: Dict[str, Any]) -> StoreResponse: ...

    async def get_record_by_id(self, table: str, record_id: int, params: Dict[str, Any]) -> StoreResponse: ...

    async def create_record(self, table: str, params: Dict[str, Any]) -> StoreResponse: ...

    async def update_record(self, table: str, params: Dict[str, Any]) -> StoreResponse: ...

    async def delete_record(self, table: str, params: Dict[str, Any]) -> StoreResponse: ...


class HttpRecordStoreClient:
    """RecordStoreClient talking JSON over HTTP.

    Every operation is a POST to ``{base_url}/tables/{table}/{operation}``
    authenticated with the project id and public key headers. Timeouts and
    retries are left to the underlying httpx client.
    """

    def __init__(
        self,
        base_url: str,
        project_id: Optional[str] = None,
        public_key: Optional[str] = None,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.project_id = project_id
        self.public_key = public_key
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.project_id:
            headers["X-Project-Id"] = self.project_id
        if self.public_key:
            headers["X-Public-Key"] = self.public_key
        return headers

    async def _request(self, operation: str, path: str, payload: Dict[str, Any]) -> StoreResponse:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = await self._client.post(url, json=payload, headers=self._headers())
        except httpx.HTTPError as e:
            raise handle_transport_error(e, operation) from e

        if resp.status_code == 404 and operation == "get_record_by_id":
            return StoreResponse(success=True, data=None)

        try:
            return StoreResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Unexpected record store response for {operation} ({resp.status_code}): {e}")
            return StoreResponse(
                success=False,
                message=f"{operation} failed ({resp.status_code})",
            )

    async def fetch_records(self, table: str, params: Dict[str, Any]) -> StoreResponse:
        return await self._request("fetch_records", f"tables/{table}/fetch", params)

    async def get_record_by_id(self, table: str, record_id: int, params: Dict[str, Any]) -> StoreResponse:
        return await self._request("get_record_by_id", f"tables/{table}/records/{record_id}", params)

    async def create_record(self, table: str, params: Dict[str, Any]) -> StoreResponse:
        return await self._request("create_record", f"tables/{table}/create", params)

    async def update_record(self, table: str, params: Dict[str, Any]) -> StoreResponse:
        return await self._request("update_record", f"tables/{table}/update", params)

    async def delete_record(self, table: str, params: Dict[str, Any]) -> StoreResponse:
        return await self._request("delete_record", f"tables/{table}/delete", params)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
            logger.info("Record store client closed")
