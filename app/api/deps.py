from fastapi import Depends, Request

from app.core.config import settings
from app.domain.farms.repository import FarmRepository
from app.domain.inventory.repository import InventoryRepository
from app.infrastructure.notifications import Notifier
from app.infrastructure.record_store import RecordStoreClient


def get_record_store(request: Request) -> RecordStoreClient:
    """Record store client built once at startup (see app.main lifespan)"""
    return request.app.state.record_store


def get_inventory_repository(
    client: RecordStoreClient = Depends(get_record_store),
) -> InventoryRepository:
    return InventoryRepository(client, table_name=settings.INVENTORY_TABLE)


def get_farm_repository(
    client: RecordStoreClient = Depends(get_record_store),
) -> FarmRepository:
    return FarmRepository(client, table_name=settings.FARM_TABLE)


def get_notifier() -> Notifier:
    return Notifier()
