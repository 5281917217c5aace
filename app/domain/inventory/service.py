import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from pydantic import BaseModel

from app.domain.inventory.models import InventoryPayload, InventoryRecord
from app.domain.inventory.rendering import InventoryRowView, render_row
from app.domain.inventory.repository import InventoryRepository
from app.infrastructure.notifications import Notification, Notifier

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load inventory"


class EmptyState(BaseModel):
    title: str
    description: str
    action_label: Optional[str] = None


class InventoryPageView(BaseModel):
    search_term: str
    loading: bool
    error: Optional[str] = None
    rows: List[InventoryRowView] = []
    empty_state: Optional[EmptyState] = None
    form_visible: bool = False
    editing_id: Optional[int] = None
    form_submitting: bool = False
    notifications: List[Notification] = []


def filter_records(records: Sequence[InventoryRecord], term: str) -> List[InventoryRecord]:
    """Case-insensitive substring match on display name, item name, farm name and unit."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(records)

    def matches(record: InventoryRecord) -> bool:
        haystacks = [
            record.display_name,
            record.item_name,
            record.farm.name if record.farm else None,
            record.unit_of_measure,
        ]
        return any(value and needle in value.lower() for value in haystacks)

    return [record for record in records if matches(record)]


def deny_all(prompt: str) -> bool:
    return False


class InventoryWorkflow:
    """Drives the inventory page: load, filter, create/edit, delete, reload.

    The list is always reloaded in full after a successful mutation.
    ``confirm`` is asked before any delete and must return True to proceed.
    """

    def __init__(
        self,
        repository: InventoryRepository,
        notifier: Optional[Notifier] = None,
        confirm: Callable[[str], bool] = deny_all,
    ):
        self.repository = repository
        self.notifier = notifier or Notifier()
        self.confirm = confirm

        self.records: List[InventoryRecord] = []
        self.search_term = ""
        self.error: Optional[str] = None
        self.list_loading = False
        self._load_generation = 0

        self.form_visible = False
        self.editing_target: Optional[InventoryRecord] = None
        self.form_submitting = False

    @property
    def visible_records(self) -> List[InventoryRecord]:
        return filter_records(self.records, self.search_term)

    async def load(self) -> bool:
        if self.list_loading:
            logger.info("Inventory load already in progress; skipping")
            return False
        return await self._fetch()

    async def _fetch(self) -> bool:
        """Fetch the full list; a newer fetch supersedes any still in flight."""
        self._load_generation += 1
        generation = self._load_generation
        self.list_loading = True
        self.error = None
        try:
            records = await self.repository.list_all()
        except Exception as e:
            if generation == self._load_generation:
                self.error = LOAD_FAILED_MESSAGE
            logger.error(f"Error loading inventory: {e}")
            return False
        finally:
            if generation == self._load_generation:
                self.list_loading = False

        if generation != self._load_generation:
            logger.info("Discarding stale inventory load")
            return False
        self.records = records
        return True

    def set_search_term(self, term: str) -> List[InventoryRecord]:
        self.search_term = term or ""
        return self.visible_records

    def open_create(self) -> None:
        self.editing_target = None
        self.form_visible = True

    def open_edit(self, record: InventoryRecord) -> None:
        self.editing_target = record
        self.form_visible = True

    def cancel_form(self) -> None:
        self.form_visible = False
        self.editing_target = None

    async def delete(self, record: InventoryRecord) -> bool:
        return await self._delete([record.id], f'Are you sure you want to delete "{record.label}"?')

    async def delete_many(self, record_ids: Sequence[int]) -> bool:
        ids = list(dict.fromkeys(record_ids))
        return await self._delete(ids, f"Are you sure you want to delete {len(ids)} inventory items?")

    async def _delete(self, record_ids: List[int], prompt: str) -> bool:
        if not self.confirm(prompt):
            logger.info(f"Delete of inventory items {record_ids} cancelled")
            return False

        try:
            deleted = await self.repository.delete(record_ids)
        except Exception as e:
            self.notifier.error("Failed to delete inventory item")
            logger.error(f"Error deleting inventory item: {e}")
            return False

        if not deleted:
            # Some deletions may have gone through; the list is left as it was
            self.notifier.error("Failed to delete inventory item")
            logger.error(f"Inventory items {record_ids} were not all deleted")
            return False

        self.notifier.success("Inventory item deleted successfully")
        await self._fetch()
        return True

    async def submit(self, payload: InventoryPayload) -> bool:
        if self.form_submitting:
            logger.info("Inventory form submission already in progress; skipping")
            return False

        editing = self.editing_target
        self.form_submitting = True
        try:
            if editing is not None:
                await self.repository.update(editing.id, payload)
                self.notifier.success("Inventory item updated successfully")
            else:
                await self.repository.create(payload)
                self.notifier.success("Inventory item created successfully")
        except Exception as e:
            self.notifier.error(
                "Failed to update inventory item" if editing is not None else "Failed to create inventory item"
            )
            logger.error(f"Error saving inventory item: {e}")
            return False
        finally:
            self.form_submitting = False

        self.cancel_form()
        await self._fetch()
        return True

    def _empty_state(self, visible: List[InventoryRecord]) -> Optional[EmptyState]:
        if visible:
            return None
        if self.search_term:
            return EmptyState(
                title="No inventory found",
                description=f'No inventory items match "{self.search_term}"',
            )
        return EmptyState(
            title="No inventory items",
            description="Start by adding your first inventory item",
            action_label="Add First Item",
        )

    def view(self, now: Optional[datetime] = None) -> InventoryPageView:
        """Page view model; rows are classified against ``now`` on every call."""
        if self.list_loading or self.error:
            return InventoryPageView(
                search_term=self.search_term,
                loading=self.list_loading,
                error=self.error,
                notifications=list(self.notifier.sent),
            )

        visible = self.visible_records
        return InventoryPageView(
            search_term=self.search_term,
            loading=False,
            rows=[render_row(record, now) for record in visible],
            empty_state=self._empty_state(visible),
            form_visible=self.form_visible,
            editing_id=self.editing_target.id if self.editing_target else None,
            form_submitting=self.form_submitting,
            notifications=list(self.notifier.sent),
        )
