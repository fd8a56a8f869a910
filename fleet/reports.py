"""Cost and stock summaries over the farm aggregate."""

from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from .calculations import parse_timestamp
from .farm import Farm
from .status import MaintenanceType
from .warehouse import WarehouseItem

LOW_STOCK_THRESHOLD = 5


@dataclass
class MachineCost:
    machine_id: str
    machine_name: str
    fuel_cost: float
    maintenance_cost: float

    @property
    def total(self) -> float:
        return self.fuel_cost + self.maintenance_cost


@dataclass
class CostTotals:
    fuel_cost: float
    maintenance_cost: float
    month_cost: float


def cost_by_maintenance_type(farm: Farm) -> Dict[MaintenanceType, float]:
    """Total maintenance cost per type, omitting types with no cost."""
    costs = {}
    for maintenance_type in MaintenanceType:
        total = sum(
            e.total_cost for e in farm.maintenance_logs if e.type == maintenance_type
        )
        if total > 0:
            costs[maintenance_type] = total
    return costs


def cost_by_machine(farm: Farm) -> List[MachineCost]:
    """Fuel and maintenance spend per machine, biggest spenders first."""
    rows = []
    for machine in farm.machines:
        row = MachineCost(
            machine_id=machine.id,
            machine_name=machine.name,
            fuel_cost=sum(e.total_value for e in farm.fuel_events_for(machine.id)),
            maintenance_cost=sum(
                e.total_cost for e in farm.maintenance_events_for(machine.id)
            ),
        )
        if row.total > 0:
            rows.append(row)
    return sorted(rows, key=lambda r: r.total, reverse=True)


def _in_month(timestamp: str, today: date) -> bool:
    when = parse_timestamp(timestamp)
    return when.year == today.year and when.month == today.month


def cost_totals(farm: Farm, today: Optional[date] = None) -> CostTotals:
    """All-time fuel and maintenance spend, plus the current month's."""
    today = today or date.today()
    month_fuel = sum(e.total_value for e in farm.fuel_logs if _in_month(e.date, today))
    month_maintenance = sum(
        e.total_cost for e in farm.maintenance_logs if _in_month(e.date, today)
    )
    return CostTotals(
        fuel_cost=sum(e.total_value for e in farm.fuel_logs),
        maintenance_cost=sum(e.total_cost for e in farm.maintenance_logs),
        month_cost=month_fuel + month_maintenance,
    )


def low_stock_items(
    farm: Farm, threshold: float = LOW_STOCK_THRESHOLD
) -> List[WarehouseItem]:
    """Items with fewer than threshold units on hand, emptiest first."""
    low = [i for i in farm.warehouse_items if i.stock_quantity < threshold]
    return sorted(low, key=lambda i: (i.stock_quantity, i.code))
