import pytest
from datetime import datetime, timedelta, timezone

from app.domain.inventory.models import FarmReference, InventoryRecord
from app.domain.inventory.rendering import (
    EXPIRY_WARNING_WINDOW,
    ExpirationStatus,
    classify_expiration,
    format_date,
    render_row,
    split_tags,
)


pytestmark = pytest.mark.unit


def make_record(**overrides) -> InventoryRecord:
    data = {
        "id": 1,
        "display_name": "Diesel",
        "item_name": "Diesel",
        "quantity": 300,
        "unit_of_measure": "liters",
        "farm": FarmReference(id=1, name="North Field"),
        "expiration_date": None,
        "tags": "fuel, tractor",
    }
    data.update(overrides)
    return InventoryRecord(**data)


class TestClassifyExpiration:
    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_no_date_is_no_expiration(self, value, now):
        assert classify_expiration(value, now) == ExpirationStatus.NO_EXPIRATION

    def test_no_date_ignores_current_time(self):
        far_future = datetime(2999, 1, 1, tzinfo=timezone.utc)
        assert classify_expiration(None, far_future) == ExpirationStatus.NO_EXPIRATION

    @pytest.mark.parametrize("delta", [timedelta(seconds=1), timedelta(days=1), timedelta(days=400)])
    def test_past_dates_are_expired(self, delta, now):
        value = (now - delta).isoformat()
        assert classify_expiration(value, now) == ExpirationStatus.EXPIRED

    @pytest.mark.parametrize("delta", [timedelta(0), timedelta(days=1), timedelta(days=7) - timedelta(seconds=1)])
    def test_within_window_is_expiring_soon(self, delta, now):
        value = (now + delta).isoformat()
        assert classify_expiration(value, now) == ExpirationStatus.EXPIRING_SOON

    def test_window_boundary_is_fresh(self, now):
        value = (now + EXPIRY_WARNING_WINDOW).isoformat()
        assert classify_expiration(value, now) == ExpirationStatus.FRESH

    def test_far_future_is_fresh(self, now):
        assert classify_expiration("2030-01-01", now) == ExpirationStatus.FRESH

    def test_plain_dates_are_midnight_utc(self, now):
        # 2026-10-18 00:00 UTC is before the fixture's noon
        assert classify_expiration("2026-10-18", now) == ExpirationStatus.EXPIRED
        assert classify_expiration("2026-10-19", now) == ExpirationStatus.EXPIRING_SOON

    def test_zulu_suffix_is_accepted(self, now):
        assert classify_expiration("2026-10-18T13:00:00Z", now) == ExpirationStatus.EXPIRING_SOON

    @pytest.mark.parametrize("value", ["not a date", "2026-13-40", "18/10/2026"])
    def test_malformed_dates_are_invalid(self, value, now):
        assert classify_expiration(value, now) == ExpirationStatus.INVALID_DATE

    def test_naive_now_is_treated_as_utc(self):
        naive_now = datetime(2026, 10, 18, 12, 0)
        assert classify_expiration("2026-10-20", naive_now) == ExpirationStatus.EXPIRING_SOON


class TestFormatDate:
    def test_formats_iso_date(self):
        assert format_date("2026-03-05") == "Mar 05, 2026"

    def test_missing_date(self):
        assert format_date(None) == "N/A"

    def test_malformed_date(self):
        assert format_date("soon") == "Invalid date"


def test_split_tags_trims_and_drops_blanks():
    assert split_tags(" fertilizer ,organic,, bulk ") == ["fertilizer", "organic", "bulk"]
    assert split_tags("") == []


class TestRenderRow:
    def test_renders_display_fields(self, now):
        row = render_row(make_record(expiration_date="2027-01-15"), now)

        assert row.id == 1
        assert row.item_label == "Diesel"
        assert row.tags == ["fuel", "tractor"]
        assert row.quantity_label == "300 liters"
        assert row.farm_label == "North Field"
        assert row.expiration_label == "Jan 15, 2027"
        assert row.expiration_status == ExpirationStatus.FRESH
        assert row.expiration_variant == "success"

    def test_expired_badge_for_yesterday(self, now):
        yesterday = (now - timedelta(days=1)).date().isoformat()

        row = render_row(make_record(expiration_date=yesterday), now)

        assert row.expiration_status == ExpirationStatus.EXPIRED
        assert row.expiration_status.value == "Expired"
        assert row.expiration_variant == "destructive"

    def test_fallbacks(self, now):
        row = render_row(make_record(item_name="", display_name="", unit_of_measure="", farm=None, tags="", quantity=0), now)

        assert row.item_label == "Unnamed Item"
        assert row.quantity_label == "0 units"
        assert row.farm_label == "No farm assigned"
        assert row.expiration_label == "N/A"
        assert row.expiration_status == ExpirationStatus.NO_EXPIRATION
        assert row.tags == []

    def test_label_falls_back_to_display_name(self, now):
        row = render_row(make_record(item_name="", display_name="Legacy Name"), now)

        assert row.item_label == "Legacy Name"

    def test_invalid_date_renders_placeholder(self, now):
        row = render_row(make_record(expiration_date="sometime"), now)

        assert row.expiration_label == "Invalid date"
        assert row.expiration_status == ExpirationStatus.INVALID_DATE
        assert row.expiration_variant == "secondary"

    def test_classification_follows_the_clock(self, now):
        record = make_record(expiration_date="2026-10-20")

        assert render_row(record, now).expiration_status == ExpirationStatus.EXPIRING_SOON
        assert render_row(record, now + timedelta(days=5)).expiration_status == ExpirationStatus.EXPIRED

    def test_fractional_quantity(self, now):
        assert render_row(make_record(quantity=2.5), now).quantity_label == "2.5 liters"
