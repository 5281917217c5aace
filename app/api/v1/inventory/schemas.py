from pydantic import BaseModel, Field
from typing import Optional, List, Union

from app.domain.inventory.form import InventoryFormView
from app.domain.inventory.service import InventoryPageView


class InventoryFormInput(BaseModel):
    """Raw form fields as submitted; validation happens in InventoryForm"""
    item_name: Optional[str] = None
    quantity: Optional[Union[str, float, int]] = None
    unit_of_measure: Optional[str] = None
    farm_id: Optional[Union[str, int]] = None
    expiration_date: Optional[str] = None
    tags: Optional[str] = None

    def as_form_values(self) -> dict:
        return {
            name: "" if value is None else str(value)
            for name, value in self.model_dump(exclude_unset=True).items()
        }


class InventoryActionResponse(BaseModel):
    """Outcome of a create/update/delete plus the refreshed page"""
    success: bool
    page: InventoryPageView
    form: Optional[InventoryFormView] = None


class BatchDeleteRequest(BaseModel):
    ids: List[int] = Field(..., min_length=1)
    confirm: bool = False


class BatchDeleteResponse(BaseModel):
    deleted: bool
    page: InventoryPageView
