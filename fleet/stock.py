"""Stock ledger: on-hand quantities and their movement history."""

import logging
from typing import Iterable, List, NamedTuple

from .errors import NotFoundError
from .events import PartUsage
from .farm import Farm
from .warehouse import StockHistoryEntry, WarehouseItem

logger = logging.getLogger(__name__)

REASON_MAINTENANCE = "Maintenance"
REASON_ADJUSTMENT = "Adjustment"


class Shortage(NamedTuple):
    item: WarehouseItem
    requested: float
    on_hand: float


def apply_usage(
    item: WarehouseItem, quantity: float, reason: str, reference_id: str, date: str
) -> StockHistoryEntry:
    """
    Take quantity out of stock and record the movement.

    No availability check happens here: the quantity may go negative.
    Callers that must not oversell check with find_shortages first.
    """
    item.stock_quantity -= quantity
    entry = StockHistoryEntry(
        date=date,
        reason=reason,
        reference_id=reference_id,
        quantity_change=-quantity,
        resulting_quantity=item.stock_quantity,
    )
    item.stock_history.append(entry)
    return entry


def adjust_stock(
    item: WarehouseItem, new_quantity: float, reference_id: str, date: str
) -> StockHistoryEntry:
    """Set the on-hand quantity directly, recording the difference."""
    change = new_quantity - item.stock_quantity
    item.stock_quantity = new_quantity
    entry = StockHistoryEntry(
        date=date,
        reason=REASON_ADJUSTMENT,
        reference_id=reference_id,
        quantity_change=change,
        resulting_quantity=new_quantity,
    )
    item.stock_history.append(entry)
    return entry


def find_shortages(farm: Farm, parts: Iterable[PartUsage]) -> List[Shortage]:
    """Parts whose requested quantity exceeds what is on hand."""
    shortages = []
    for part in parts:
        item = farm.get_item(part.item_id)
        if item is None:
            raise NotFoundError("Warehouse item", part.item_id)
        if part.quantity > item.stock_quantity:
            shortages.append(Shortage(item, part.quantity, item.stock_quantity))
    return shortages


def consume_parts(
    farm: Farm, parts: Iterable[PartUsage], reference_id: str, date: str
) -> List[StockHistoryEntry]:
    """Deduct every part used by a maintenance event."""
    entries = []
    for part in parts:
        item = farm.get_item(part.item_id)
        if item is None:
            raise NotFoundError("Warehouse item", part.item_id)
        entries.append(
            apply_usage(item, part.quantity, REASON_MAINTENANCE, reference_id, date)
        )
        if item.stock_quantity < 0:
            logger.warning(
                f"Stock below zero: item={item.id} code={item.code} "
                f"quantity={item.stock_quantity} reference={reference_id}"
            )
    return entries
