import logging
import math
from typing import Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel

from app.core.exceptions import LocalValidationError
from app.domain.farms.repository import FarmOption, FarmRepository
from app.domain.inventory.models import (
    UNIT_LABELS,
    InventoryPayload,
    InventoryRecord,
    UnitOfMeasure,
    parse_int,
)

logger = logging.getLogger(__name__)

FORM_FIELDS = ("item_name", "quantity", "unit_of_measure", "farm_id", "expiration_date", "tags")


class SelectOption(BaseModel):
    value: str
    label: str


class InventoryFormData(BaseModel):
    """Raw form input, every field held as entered"""
    item_name: str = ""
    quantity: str = ""
    unit_of_measure: str = ""
    farm_id: str = ""
    expiration_date: str = ""
    tags: str = ""

    @classmethod
    def from_record(cls, record: InventoryRecord) -> "InventoryFormData":
        quantity = ""
        if record.quantity:
            quantity = str(int(record.quantity)) if record.quantity == int(record.quantity) else str(record.quantity)
        return cls(
            item_name=record.item_name or "",
            quantity=quantity,
            unit_of_measure=record.unit_of_measure or "",
            farm_id=str(record.farm.id) if record.farm else "",
            expiration_date=record.expiration_date or "",
            tags=record.tags or "",
        )


class InventoryFormView(BaseModel):
    title: str
    submit_label: str
    data: InventoryFormData
    errors: Dict[str, str]
    unit_options: List[SelectOption]
    farm_options: List[SelectOption]
    farm_placeholder: str
    farms_loading: bool
    submitting: bool


def unit_options() -> List[SelectOption]:
    return [SelectOption(value=unit.value, label=UNIT_LABELS[unit]) for unit in UnitOfMeasure]


class InventoryForm:
    """Create/edit form for a single inventory record.

    Holds the raw input and the inline errors, validates every rule on
    submit and hands a normalized payload to the submit handler.
    """

    def __init__(self, farm_repository: FarmRepository, record: Optional[InventoryRecord] = None):
        self.farm_repository = farm_repository
        self.record = record
        self.data = InventoryFormData.from_record(record) if record else InventoryFormData()
        self.errors: Dict[str, str] = {}
        self.farms: List[FarmOption] = []
        self.farms_loading = False

    @property
    def is_edit(self) -> bool:
        return self.record is not None

    @property
    def title(self) -> str:
        return "Edit Inventory Item" if self.is_edit else "Add New Inventory Item"

    def submit_label(self, submitting: bool = False) -> str:
        if submitting:
            return "Saving..."
        return "Update Item" if self.is_edit else "Add Item"

    async def load_farms(self) -> List[FarmOption]:
        self.farms_loading = True
        try:
            self.farms = await self.farm_repository.get_all()
        except Exception as e:
            logger.error(f"Error loading farms: {e}")
            self.farms = []
        finally:
            self.farms_loading = False
        return self.farms

    def change(self, name: str, value: str) -> None:
        if name not in FORM_FIELDS:
            raise KeyError(name)
        setattr(self.data, name, "" if value is None else str(value))
        self.errors.pop(name, None)

    def fill(self, values: Dict[str, Optional[str]]) -> None:
        for name, value in values.items():
            self.change(name, value)

    def validate(self) -> bool:
        errors: Dict[str, str] = {}

        if not self.data.item_name.strip():
            errors["item_name"] = "Item name is required"

        try:
            quantity = float(self.data.quantity) if self.data.quantity.strip() else None
        except ValueError:
            quantity = None
        if quantity is None or not math.isfinite(quantity) or quantity <= 0:
            errors["quantity"] = "Quantity must be greater than 0"

        unit = self.data.unit_of_measure.strip()
        if not unit:
            errors["unit_of_measure"] = "Unit of measure is required"
        elif unit not in {u.value for u in UnitOfMeasure}:
            errors["unit_of_measure"] = "Unit of measure is not recognized"

        farm_id = parse_int(self.data.farm_id)
        if not self.data.farm_id.strip() or farm_id is None:
            errors["farm_id"] = "Farm selection is required"
        elif farm_id not in {farm.id for farm in self.farms}:
            errors["farm_id"] = "Selected farm is not available"

        self.errors = errors
        return not errors

    def build_payload(self) -> InventoryPayload:
        if not self.validate():
            raise LocalValidationError(self.errors)
        item_name = self.data.item_name.strip()
        return InventoryPayload(
            item_name=item_name,
            display_name=item_name,
            quantity=parse_int(self.data.quantity),
            unit_of_measure=self.data.unit_of_measure.strip(),
            farm_id=parse_int(self.data.farm_id),
            expiration_date=self.data.expiration_date.strip() or None,
            tags=self.data.tags,
        )

    async def submit(self, handler: Callable[[InventoryPayload], Awaitable[bool]]) -> bool:
        """Validate and pass the payload on; invalid input never reaches the handler."""
        if not self.validate():
            logger.info(f"Inventory form blocked by validation: {sorted(self.errors)}")
            return False
        return await handler(self.build_payload())

    def view(self, submitting: bool = False) -> InventoryFormView:
        return InventoryFormView(
            title=self.title,
            submit_label=self.submit_label(submitting),
            data=self.data.model_copy(),
            errors=dict(self.errors),
            unit_options=unit_options(),
            farm_options=[SelectOption(value=str(farm.id), label=farm.name or "") for farm in self.farms],
            farm_placeholder="Loading farms..." if self.farms_loading else "Select a farm",
            farms_loading=self.farms_loading,
            submitting=submitting,
        )
