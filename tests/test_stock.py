#!/usr/bin/env python3
"""Tests for the spare-parts stock ledger."""

import pytest

from fleet import Farm, NotFoundError, PartUsage, WarehouseItem
from fleet.stock import (
    REASON_ADJUSTMENT,
    REASON_MAINTENANCE,
    adjust_stock,
    apply_usage,
    consume_parts,
    find_shortages,
)

CREATED = "2025-01-01T00:00:00+00:00"
WHEN = "2025-03-01T12:00:00+00:00"


@pytest.fixture
def farm():
    return Farm(
        warehouse_items=[
            WarehouseItem("item_1", "Oil filter", "FLT-001", 45.0, 5, CREATED),
            WarehouseItem("item_2", "Engine oil 15W40", "OIL-15W40", 30.0, 20, CREATED),
        ]
    )


class TestApplyUsage:
    """Tests for apply_usage."""
    def test_deducts_and_records(self, farm):
        """Usage lowers stock and records the movement."""
        item = farm.get_item("item_1")
        entry = apply_usage(item, 3, REASON_MAINTENANCE, "maint_1", WHEN)
        assert item.stock_quantity == 2
        assert entry.quantity_change == -3
        assert entry.resulting_quantity == 2
        assert entry.reason == "Maintenance"
        assert entry.reference_id == "maint_1"
        assert item.stock_history == [entry]

    def test_may_go_negative(self, farm):
        """apply_usage does not check availability."""
        item = farm.get_item("item_1")
        apply_usage(item, 6, REASON_MAINTENANCE, "maint_1", WHEN)
        assert item.stock_quantity == -1


class TestAdjustStock:
    """Tests for adjust_stock."""
    def test_records_difference(self, farm):
        """Adjustment records the change in quantity."""
        item = farm.get_item("item_1")
        entry = adjust_stock(item, 8, "item_1", WHEN)
        assert item.stock_quantity == 8
        assert entry.reason == REASON_ADJUSTMENT
        assert entry.quantity_change == 3
        assert entry.resulting_quantity == 8


class TestFindShortages:
    """Tests for find_shortages."""
    def test_no_shortage(self, farm):
        """Exactly the stock on hand is not a shortage."""
        assert find_shortages(farm, [PartUsage("item_1", 5)]) == []

    def test_shortage_reported(self, farm):
        """Only parts beyond stock are reported."""
        shortages = find_shortages(
            farm, [PartUsage("item_1", 6), PartUsage("item_2", 1)]
        )
        assert len(shortages) == 1
        assert shortages[0].item.code == "FLT-001"
        assert shortages[0].requested == 6
        assert shortages[0].on_hand == 5

    def test_unknown_item(self, farm):
        """Unknown items raise NotFoundError."""
        with pytest.raises(NotFoundError):
            find_shortages(farm, [PartUsage("item_missing", 1)])


class TestConsumeParts:
    """Tests for consume_parts."""
    def test_every_part_deducted(self, farm):
        """Each part is deducted from its item."""
        entries = consume_parts(
            farm, [PartUsage("item_1", 1), PartUsage("item_2", 4)], "maint_1", WHEN
        )
        assert len(entries) == 2
        assert farm.get_item("item_1").stock_quantity == 4
        assert farm.get_item("item_2").stock_quantity == 16

    def test_stock_value(self, farm):
        """Stock value is unit value times quantity."""
        assert farm.get_item("item_1").stock_value == 225.0
