import re
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


# Store field names
FIELD_ID = "Id"
FIELD_NAME = "Name"
FIELD_ITEM_NAME = "item_name_c"
FIELD_QUANTITY = "quantity_c"
FIELD_UNIT = "unit_of_measure_c"
FIELD_FARM = "farm_id_c"
FIELD_EXPIRATION = "expiration_date_c"
FIELD_TAGS = "Tags"

READ_FIELDS = [
    FIELD_ID,
    FIELD_NAME,
    FIELD_ITEM_NAME,
    FIELD_QUANTITY,
    FIELD_UNIT,
    FIELD_FARM,
    FIELD_EXPIRATION,
    FIELD_TAGS,
]

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class UnitOfMeasure(str, Enum):
    KILOGRAMS = "kg"
    POUNDS = "lb"
    TONS = "tons"
    LITERS = "liters"
    GALLONS = "gallons"
    PIECES = "pieces"
    BOXES = "boxes"
    BAGS = "bags"
    BOTTLES = "bottles"
    ROLLS = "rolls"


UNIT_LABELS: Dict[UnitOfMeasure, str] = {
    UnitOfMeasure.KILOGRAMS: "Kilograms (kg)",
    UnitOfMeasure.POUNDS: "Pounds (lb)",
    UnitOfMeasure.TONS: "Tons",
    UnitOfMeasure.LITERS: "Liters",
    UnitOfMeasure.GALLONS: "Gallons",
    UnitOfMeasure.PIECES: "Pieces",
    UnitOfMeasure.BOXES: "Boxes",
    UnitOfMeasure.BAGS: "Bags",
    UnitOfMeasure.BOTTLES: "Bottles",
    UnitOfMeasure.ROLLS: "Rolls",
}


def parse_int(value: Any) -> Optional[int]:
    """Parse the leading integer of a value, or None when there is none.

    Mirrors how form input is read: "12" and "12.7" both give 12, "" and
    "abc" give None. Floats are truncated toward zero.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value)
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


class FarmReference(BaseModel):
    """Expanded farm reference as returned by reads"""
    model_config = ConfigDict(extra="ignore")

    id: int = Field(validation_alias=AliasChoices("Id", "id"))
    name: Optional[str] = Field(default=None, validation_alias=AliasChoices("Name", "name"))


class InventoryRecord(BaseModel):
    id: int
    display_name: str = ""
    item_name: str = ""
    quantity: float = 0
    unit_of_measure: str = ""
    farm: Optional[FarmReference] = None
    expiration_date: Optional[str] = None
    tags: str = ""

    @property
    def label(self) -> str:
        return self.item_name or self.display_name


class StoreInventoryRecord(BaseModel):
    """Inventory record in the record store's field naming"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int = Field(alias=FIELD_ID)
    name: Optional[str] = Field(default=None, alias=FIELD_NAME)
    item_name: Optional[str] = Field(default=None, alias=FIELD_ITEM_NAME)
    quantity: Optional[float] = Field(default=None, alias=FIELD_QUANTITY)
    unit_of_measure: Optional[str] = Field(default=None, alias=FIELD_UNIT)
    farm: Optional[Union[FarmReference, int]] = Field(default=None, alias=FIELD_FARM)
    expiration_date: Optional[str] = Field(default=None, alias=FIELD_EXPIRATION)
    tags: Optional[str] = Field(default=None, alias=FIELD_TAGS)

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, v):
        if v in (None, ""):
            return None
        try:
            return float(v)
        except (TypeError, ValueError):
            return None

    @field_validator("farm", mode="before")
    @classmethod
    def coerce_farm(cls, v):
        if v in (None, "", {}):
            return None
        return v

    def to_domain(self) -> InventoryRecord:
        farm = self.farm
        if isinstance(farm, int):
            # Unexpanded reference; the name is unknown
            farm = FarmReference(id=farm)
        return InventoryRecord(
            id=self.id,
            display_name=self.name or "",
            item_name=self.item_name or "",
            quantity=self.quantity or 0,
            unit_of_measure=self.unit_of_measure or "",
            farm=farm,
            expiration_date=self.expiration_date or None,
            tags=self.tags or "",
        )


def record_from_store(data: Dict[str, Any]) -> InventoryRecord:
    return StoreInventoryRecord.model_validate(data).to_domain()


class InventoryPayload(BaseModel):
    """Editable fields of one inventory record, as handed to create/update.

    Values are kept loosely typed; the repository coerces them when the
    write request is built.
    """
    item_name: str
    display_name: Optional[str] = None
    quantity: Any = None
    unit_of_measure: str = ""
    farm_id: Any = None
    expiration_date: Optional[str] = None
    tags: Optional[str] = None

    def to_store_fields(self) -> Dict[str, Any]:
        return {
            FIELD_NAME: self.display_name or self.item_name,
            FIELD_ITEM_NAME: self.item_name,
            FIELD_QUANTITY: parse_int(self.quantity) or 0,
            FIELD_UNIT: self.unit_of_measure,
            FIELD_FARM: parse_int(self.farm_id),
            FIELD_EXPIRATION: self.expiration_date or None,
            FIELD_TAGS: self.tags or "",
        }
