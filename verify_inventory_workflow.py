import asyncio
import uuid
from datetime import date, timedelta
import os
import sys

# Add project root to python path
sys.path.append(os.getcwd())

from app.core.config import settings
from app.domain.farms.repository import FarmRepository
from app.domain.inventory.form import InventoryForm
from app.domain.inventory.repository import InventoryRepository
from app.domain.inventory.service import InventoryWorkflow
from app.infrastructure.notifications import Notifier
from app.infrastructure.record_store import HttpRecordStoreClient


async def run_workflow():
    print(f"Connecting to record store at {settings.RECORD_STORE_URL}...")
    client = HttpRecordStoreClient(
        base_url=settings.RECORD_STORE_URL,
        project_id=settings.RECORD_STORE_PROJECT_ID,
        public_key=settings.RECORD_STORE_PUBLIC_KEY,
        timeout=settings.RECORD_STORE_TIMEOUT,
    )
    repository = InventoryRepository(client, table_name=settings.INVENTORY_TABLE)
    farm_repository = FarmRepository(client, table_name=settings.FARM_TABLE)
    notifier = Notifier()
    workflow = InventoryWorkflow(repository, notifier, confirm=lambda prompt: True)

    try:
        print("\n--- 1. Load Inventory ---")
        if not await workflow.load():
            raise RuntimeError(workflow.error)
        print(f"Loaded {len(workflow.records)} inventory items")

        print("\n--- 2. Load Farms ---")
        form = InventoryForm(farm_repository)
        farms = await form.load_farms()
        if not farms:
            raise RuntimeError("No farms available to attach inventory to")
        print(f"Using farm: {farms[0].name} (#{farms[0].id})")

        print("\n--- 3. Create Item ---")
        item_name = f"Smoke Test Seed {uuid.uuid4().hex[:6]}"
        form.fill({
            "item_name": item_name,
            "quantity": "12",
            "unit_of_measure": "bags",
            "farm_id": str(farms[0].id),
            "expiration_date": (date.today() + timedelta(days=3)).isoformat(),
            "tags": "smoke, test",
        })
        workflow.open_create()
        if not await form.submit(workflow.submit):
            raise RuntimeError(f"Create failed: {form.errors or notifier.sent[-1].message}")
        print(f"Created {item_name}")

        print("\n--- 4. Search ---")
        matches = workflow.set_search_term(item_name)
        if len(matches) != 1:
            raise RuntimeError(f"Expected one match for {item_name}, found {len(matches)}")
        created = matches[0]
        row = workflow.view().rows[0]
        print(f"Found #{created.id}: {row.quantity_label}, {row.farm_label}, {row.expiration_status.value}")

        print("\n--- 5. Update Item ---")
        workflow.open_edit(created)
        edit_form = InventoryForm(farm_repository, created)
        await edit_form.load_farms()
        edit_form.change("quantity", "20")
        if not await edit_form.submit(workflow.submit):
            raise RuntimeError(f"Update failed: {edit_form.errors or notifier.sent[-1].message}")
        updated = workflow.set_search_term(item_name)[0]
        print(f"Quantity is now {updated.quantity:g}")

        print("\n--- 6. Delete Item ---")
        if not await workflow.delete(updated):
            raise RuntimeError("Delete failed")
        print(f"Deleted #{updated.id}; {len(workflow.records)} items remain")

        print("\nNotifications:")
        for notification in notifier.sent:
            print(f"  [{notification.level.value}] {notification.message}")

        print("\n✅ WORKFLOW COMPLETED SUCCESSFULLY!")
    except Exception as e:
        print(f"\n❌ WORKFLOW FAILED: {str(e)}")
        import traceback
        traceback.print_exc()
    finally:
        await client.aclose()

if __name__ == "__main__":
    asyncio.run(run_workflow())
