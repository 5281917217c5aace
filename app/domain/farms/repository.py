import logging
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.core.exceptions import RequestFailedError
from app.infrastructure.record_store import RecordStoreClient, build_field_projection

logger = logging.getLogger(__name__)


class FarmOption(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int = Field(validation_alias=AliasChoices("Id", "id"))
    name: Optional[str] = Field(default=None, validation_alias=AliasChoices("Name", "name"))


class FarmRepository:
    """Read-only farm listing used to populate the inventory form."""

    def __init__(self, client: RecordStoreClient, table_name: str = "farm_c"):
        self.client = client
        self.table_name = table_name

    async def get_all(self) -> List[FarmOption]:
        params = {
            "fields": build_field_projection(["Id", "Name"]),
            "orderBy": [{"fieldName": "Name", "sorttype": "ASC"}],
        }
        response = await self.client.fetch_records(self.table_name, params)
        if not response.success:
            logger.error(f"Error fetching farms: {response.message}")
            raise RequestFailedError(message=response.message or "Failed fetching farms")

        data = response.data or []
        if isinstance(data, dict):
            data = [data]
        return [FarmOption.model_validate(item) for item in data]
