from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from app.domain.inventory.models import InventoryRecord

EXPIRY_WARNING_WINDOW = timedelta(days=7)
DATE_DISPLAY_FORMAT = "%b %d, %Y"


class ExpirationStatus(str, Enum):
    NO_EXPIRATION = "No expiration"
    INVALID_DATE = "Invalid date"
    EXPIRED = "Expired"
    EXPIRING_SOON = "Expiring soon"
    FRESH = "Fresh"


BADGE_VARIANTS = {
    ExpirationStatus.NO_EXPIRATION: "secondary",
    ExpirationStatus.INVALID_DATE: "secondary",
    ExpirationStatus.EXPIRED: "destructive",
    ExpirationStatus.EXPIRING_SOON: "warning",
    ExpirationStatus.FRESH: "success",
}


class InventoryRowView(BaseModel):
    id: int
    item_label: str
    tags: List[str] = []
    quantity_label: str
    farm_label: str
    expiration_label: str
    expiration_status: ExpirationStatus
    expiration_variant: str


def parse_date(value: str) -> Optional[datetime]:
    """Parse an ISO date or datetime; naive values are taken as UTC."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        if len(text) == 10:
            d = date.fromisoformat(text)
            parsed = datetime(d.year, d.month, d.day)
        else:
            parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def classify_expiration(value: Optional[str], now: Optional[datetime] = None) -> ExpirationStatus:
    if not value or not value.strip():
        return ExpirationStatus.NO_EXPIRATION

    expires_at = parse_date(value)
    if expires_at is None:
        return ExpirationStatus.INVALID_DATE

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    if expires_at < now:
        return ExpirationStatus.EXPIRED
    if expires_at < now + EXPIRY_WARNING_WINDOW:
        return ExpirationStatus.EXPIRING_SOON
    return ExpirationStatus.FRESH


def format_date(value: Optional[str]) -> str:
    if not value or not value.strip():
        return "N/A"
    parsed = parse_date(value)
    if parsed is None:
        return "Invalid date"
    return parsed.strftime(DATE_DISPLAY_FORMAT)


def split_tags(tags: Optional[str]) -> List[str]:
    if not tags:
        return []
    return [tag.strip() for tag in tags.split(",") if tag.strip()]


def _format_quantity(quantity: float) -> str:
    if quantity == int(quantity):
        return str(int(quantity))
    return f"{quantity:g}"


def render_row(record: InventoryRecord, now: Optional[datetime] = None) -> InventoryRowView:
    """Display fields for one inventory record, classified against ``now``."""
    status = classify_expiration(record.expiration_date, now)
    farm_name = record.farm.name if record.farm else None
    return InventoryRowView(
        id=record.id,
        item_label=record.item_name or record.display_name or "Unnamed Item",
        tags=split_tags(record.tags),
        quantity_label=f"{_format_quantity(record.quantity or 0)} {record.unit_of_measure or 'units'}",
        farm_label=farm_name or "No farm assigned",
        expiration_label=format_date(record.expiration_date),
        expiration_status=status,
        expiration_variant=BADGE_VARIANTS[status],
    )
