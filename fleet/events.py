"""Fuel and maintenance event records."""

from typing import List, Optional

from .status import FuelKind, MaintenanceType


class FuelEvent:
    """A fueling: liters, cost and the hour-meter reading at the pump."""

    def __init__(
            self,
            id: str,
            date: str,
            machine_id: str,
            collaborator_id: str,
            fuel_kind: FuelKind,
            quantity: float,
            total_value: float,
            odometer: float,
            observations: Optional[str] = None,
    ):
        self.id = id
        self.date = date
        self.machine_id = machine_id
        self.collaborator_id = collaborator_id
        self.fuel_kind = fuel_kind
        self.quantity = quantity
        self.total_value = total_value
        self.odometer = odometer
        self.observations = observations


class PartUsage:
    """Quantity of a warehouse item consumed by a maintenance event."""

    def __init__(self, item_id: str, quantity: float):
        self.item_id = item_id
        self.quantity = quantity


class MaintenanceEvent:
    """Maintenance work performed on a machine."""

    def __init__(
            self,
            id: str,
            type: MaintenanceType,
            date: str,
            machine_id: str,
            hour_meter: float,
            collaborator_id: str,
            total_cost: float = 0,
            notes: Optional[str] = None,
            parts_used: Optional[List[PartUsage]] = None,
    ):
        self.id = id
        self.type = type
        self.date = date
        self.machine_id = machine_id
        self.hour_meter = hour_meter
        self.collaborator_id = collaborator_id
        self.total_cost = total_cost
        self.notes = notes
        self.parts_used = parts_used or []
