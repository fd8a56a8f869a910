"""Machine class and its per-category service records."""

from typing import List, Optional

from .hour_meter_entry import HourMeterLogEntry
from .status import FuelKind, MachineStatus, ServiceCategory


class ServiceCounters:
    """Four numbers keyed by service category."""

    def __init__(
            self,
            engine_oil: float = 0,
            transmission_oil: float = 0,
            fuel_filter: float = 0,
            air_filter: float = 0,
    ):
        self.engine_oil = engine_oil
        self.transmission_oil = transmission_oil
        self.fuel_filter = fuel_filter
        self.air_filter = air_filter

    def get(self, category: ServiceCategory) -> Optional[float]:
        return getattr(self, _ATTRS[category])

    def set(self, category: ServiceCategory, value: float) -> None:
        setattr(self, _ATTRS[category], value)

    def as_dict(self) -> dict:
        return {c: self.get(c) for c in ServiceCategory}

    def __eq__(self, other):
        if not isinstance(other, ServiceCounters):
            return NotImplemented
        return self.as_dict() == other.as_dict()


_ATTRS = {
    ServiceCategory.ENGINE_OIL: "engine_oil",
    ServiceCategory.TRANSMISSION_OIL: "transmission_oil",
    ServiceCategory.FUEL_FILTER: "fuel_filter",
    ServiceCategory.AIR_FILTER: "air_filter",
}


class MaintenanceConfig(ServiceCounters):
    """Service interval in hours per category. Zero or None = unmonitored."""


class LastMaintenance(ServiceCounters):
    """Hour-meter value at which each category was last serviced."""


class Machine:
    """A piece of equipment with its hour meter and maintenance plan."""

    def __init__(
            self,
            id: str,
            name: str,
            type: str,
            hour_meter: float = 0,
            status: MachineStatus = MachineStatus.ACTIVE,
            brand_model: Optional[str] = None,
            year: Optional[int] = None,
            serial_number: Optional[str] = None,
            current_collaborator_id: Optional[str] = None,
            notes: Optional[str] = None,
            default_fuel_kind: Optional[FuelKind] = None,
            maintenance_config: Optional[MaintenanceConfig] = None,
            last_maintenance: Optional[LastMaintenance] = None,
            hour_meter_history: Optional[List[HourMeterLogEntry]] = None,
    ):
        self.id = id
        self.name = name
        self.type = type
        self.hour_meter = hour_meter
        self.status = status
        self.brand_model = brand_model
        self.year = year
        self.serial_number = serial_number
        self.current_collaborator_id = current_collaborator_id
        self.notes = notes
        self.default_fuel_kind = default_fuel_kind
        self.maintenance_config = maintenance_config
        self.last_maintenance = last_maintenance
        self.hour_meter_history = hour_meter_history or []

    @property
    def is_active(self) -> bool:
        return self.status != MachineStatus.INACTIVE

    def find_history_entry(self, source_id: str) -> Optional[HourMeterLogEntry]:
        """Find the ledger entry created by the given event."""
        for entry in self.hour_meter_history:
            if entry.source_id == source_id:
                return entry
        return None
