from fastapi import APIRouter, Depends, Response, status, Query
from typing import Optional

from app.api.deps import get_farm_repository, get_inventory_repository, get_notifier
from app.api.v1.inventory.schemas import (
    BatchDeleteRequest,
    BatchDeleteResponse,
    InventoryActionResponse,
    InventoryFormInput,
)
from app.core.exceptions import LocalValidationError
from app.domain.farms.repository import FarmRepository
from app.domain.inventory.form import InventoryForm, InventoryFormView
from app.domain.inventory.models import InventoryRecord
from app.domain.inventory.repository import InventoryRepository
from app.domain.inventory.service import InventoryPageView, InventoryWorkflow
from app.infrastructure.notifications import Notifier

router = APIRouter(prefix="/inventory", tags=["Inventory"])


async def _submit_form(
    workflow: InventoryWorkflow,
    form: InventoryForm,
    item_in: InventoryFormInput,
    response: Response,
    success_status: int,
) -> InventoryActionResponse:
    await form.load_farms()
    form.fill(item_in.as_form_values())
    if not form.validate():
        raise LocalValidationError(form.errors)

    success = await form.submit(workflow.submit)
    if not success:
        await workflow.load()
    response.status_code = success_status if success else status.HTTP_502_BAD_GATEWAY
    return InventoryActionResponse(
        success=success,
        page=workflow.view(),
        form=None if success else form.view(submitting=workflow.form_submitting),
    )


@router.get("/", response_model=InventoryPageView, status_code=status.HTTP_200_OK)
async def get_inventory_page(
    search: Optional[str] = Query(None, max_length=200),
    repository: InventoryRepository = Depends(get_inventory_repository),
    notifier: Notifier = Depends(get_notifier),
):
    """Inventory list filtered by a free-text search term"""
    workflow = InventoryWorkflow(repository, notifier)
    await workflow.load()
    workflow.set_search_term(search or "")
    return workflow.view()


@router.get("/form", response_model=InventoryFormView)
async def get_create_form(farm_repository: FarmRepository = Depends(get_farm_repository)):
    """Blank form with unit and farm choices"""
    form = InventoryForm(farm_repository)
    await form.load_farms()
    return form.view()


@router.get("/{item_id}", response_model=InventoryRecord)
async def get_inventory_item(
    item_id: int,
    repository: InventoryRepository = Depends(get_inventory_repository),
):
    return await repository.get_by_id(item_id)


@router.get("/{item_id}/form", response_model=InventoryFormView)
async def get_edit_form(
    item_id: int,
    repository: InventoryRepository = Depends(get_inventory_repository),
    farm_repository: FarmRepository = Depends(get_farm_repository),
):
    """Form pre-filled from an existing item"""
    record = await repository.get_by_id(item_id)
    form = InventoryForm(farm_repository, record)
    await form.load_farms()
    return form.view()


@router.post("/", response_model=InventoryActionResponse, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    item_in: InventoryFormInput,
    response: Response,
    repository: InventoryRepository = Depends(get_inventory_repository),
    farm_repository: FarmRepository = Depends(get_farm_repository),
    notifier: Notifier = Depends(get_notifier),
):
    workflow = InventoryWorkflow(repository, notifier)
    workflow.open_create()
    form = InventoryForm(farm_repository)
    return await _submit_form(workflow, form, item_in, response, status.HTTP_201_CREATED)


@router.put("/{item_id}", response_model=InventoryActionResponse)
async def update_inventory_item(
    item_id: int,
    item_in: InventoryFormInput,
    response: Response,
    repository: InventoryRepository = Depends(get_inventory_repository),
    farm_repository: FarmRepository = Depends(get_farm_repository),
    notifier: Notifier = Depends(get_notifier),
):
    record = await repository.get_by_id(item_id)
    workflow = InventoryWorkflow(repository, notifier)
    workflow.open_edit(record)
    form = InventoryForm(farm_repository, record)
    return await _submit_form(workflow, form, item_in, response, status.HTTP_200_OK)


@router.delete("/{item_id}", response_model=InventoryActionResponse)
async def delete_inventory_item(
    item_id: int,
    response: Response,
    confirm: bool = Query(False, description="Explicit confirmation of the delete"),
    repository: InventoryRepository = Depends(get_inventory_repository),
    notifier: Notifier = Depends(get_notifier),
):
    record = await repository.get_by_id(item_id)
    workflow = InventoryWorkflow(repository, notifier, confirm=lambda prompt: confirm)
    success = await workflow.delete(record)
    if not success:
        await workflow.load()
    if not confirm:
        response.status_code = status.HTTP_409_CONFLICT
    elif not success:
        response.status_code = status.HTTP_502_BAD_GATEWAY
    return InventoryActionResponse(success=success, page=workflow.view())


@router.post("/delete", response_model=BatchDeleteResponse)
async def delete_inventory_items(
    body: BatchDeleteRequest,
    response: Response,
    repository: InventoryRepository = Depends(get_inventory_repository),
    notifier: Notifier = Depends(get_notifier),
):
    """Batch delete; ``deleted`` is true only when every id was removed"""
    workflow = InventoryWorkflow(repository, notifier, confirm=lambda prompt: body.confirm)
    deleted = await workflow.delete_many(body.ids)
    if not deleted:
        await workflow.load()
    if not body.confirm:
        response.status_code = status.HTTP_409_CONFLICT
    elif not deleted:
        response.status_code = status.HTTP_502_BAD_GATEWAY
    return BatchDeleteResponse(deleted=deleted, page=workflow.view())
