"""Warehouse items and their stock movement records."""

from typing import List, Optional


class StockHistoryEntry:
    """One movement of stock for an item."""

    def __init__(
            self,
            date: str,
            reason: str,
            reference_id: str,
            quantity_change: float,
            resulting_quantity: float,
    ):
        self.date = date
        self.reason = reason
        self.reference_id = reference_id
        self.quantity_change = quantity_change
        self.resulting_quantity = resulting_quantity


class WarehouseItem:
    """A spare part or consumable kept in the farm warehouse."""

    def __init__(
            self,
            id: str,
            name: str,
            code: str,
            unit_value: float,
            stock_quantity: float,
            created_at: str,
            stock_history: Optional[List[StockHistoryEntry]] = None,
    ):
        self.id = id
        self.name = name
        self.code = code
        self.unit_value = unit_value
        self.stock_quantity = stock_quantity
        self.created_at = created_at
        self.stock_history = stock_history or []

    @property
    def stock_value(self) -> float:
        return self.unit_value * self.stock_quantity
