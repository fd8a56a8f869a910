"""Farm class - the aggregate holding every entity the engine manages."""

from typing import List, Optional

from .collaborator import Collaborator, FuelPrice
from .events import FuelEvent, MaintenanceEvent
from .machine import Machine
from .status import FuelKind
from .warehouse import WarehouseItem


class Farm:
    """Machines, people, events, prices and stock for one farm."""

    def __init__(
        self,
        name: Optional[str] = None,
        machines: Optional[List[Machine]] = None,
        collaborators: Optional[List[Collaborator]] = None,
        fuel_logs: Optional[List[FuelEvent]] = None,
        maintenance_logs: Optional[List[MaintenanceEvent]] = None,
        fuel_prices: Optional[List[FuelPrice]] = None,
        warehouse_items: Optional[List[WarehouseItem]] = None,
        version: int = 0,
    ):
        self.name = name
        self.machines = machines or []
        self.collaborators = collaborators or []
        self.fuel_logs = fuel_logs or []
        self.maintenance_logs = maintenance_logs or []
        self.fuel_prices = fuel_prices or []
        self.warehouse_items = warehouse_items or []
        self.version = version

    def get_machine(self, machine_id: str) -> Optional[Machine]:
        for machine in self.machines:
            if machine.id == machine_id:
                return machine
        return None

    def get_collaborator(self, collaborator_id: str) -> Optional[Collaborator]:
        for collaborator in self.collaborators:
            if collaborator.id == collaborator_id:
                return collaborator
        return None

    def get_item(self, item_id: str) -> Optional[WarehouseItem]:
        for item in self.warehouse_items:
            if item.id == item_id:
                return item
        return None

    def get_item_by_code(self, code: str) -> Optional[WarehouseItem]:
        """Find an item by catalog code (case-insensitive)."""
        wanted = code.strip().lower()
        for item in self.warehouse_items:
            if item.code.strip().lower() == wanted:
                return item
        return None

    def get_fuel_event(self, event_id: str) -> Optional[FuelEvent]:
        for event in self.fuel_logs:
            if event.id == event_id:
                return event
        return None

    def get_fuel_price(self, fuel_kind: FuelKind) -> Optional[float]:
        for fuel_price in self.fuel_prices:
            if fuel_price.fuel_kind == fuel_kind:
                return fuel_price.price
        return None

    def fuel_events_for(self, machine_id: str) -> List[FuelEvent]:
        return [e for e in self.fuel_logs if e.machine_id == machine_id]

    def maintenance_events_for(self, machine_id: str) -> List[MaintenanceEvent]:
        return [e for e in self.maintenance_logs if e.machine_id == machine_id]
