"""Enums for machine state, maintenance urgency and event classification."""

from enum import Enum


class Status(Enum):
    """Maintenance status categories. Lower value = more urgent."""

    OVERDUE = 1
    DUE_SOON = 2
    OK = 3


class MachineStatus(Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    IN_MAINTENANCE = "InMaintenance"


class FuelKind(Enum):
    DIESEL_S10 = "Diesel S10"
    DIESEL_S500 = "Diesel S500"
    GASOLINE = "Gasoline"


class HourMeterSource(Enum):
    """Where a ledger observation came from."""

    FUELING = "Fueling"
    MAINTENANCE = "Maintenance"
    MANUAL = "Manual"


class ServiceCategory(Enum):
    """The four independently tracked serviceable subsystems."""

    ENGINE_OIL = "engineOil"
    TRANSMISSION_OIL = "transmissionOil"
    FUEL_FILTER = "fuelFilter"
    AIR_FILTER = "airFilter"

    @property
    def label(self) -> str:
        """Human-readable name, e.g. 'engine oil'."""
        return CATEGORY_LABELS[self]


CATEGORY_LABELS = {
    ServiceCategory.ENGINE_OIL: "engine oil",
    ServiceCategory.TRANSMISSION_OIL: "transmission oil",
    ServiceCategory.FUEL_FILTER: "fuel filter",
    ServiceCategory.AIR_FILTER: "air filter",
}


class MaintenanceType(Enum):
    OIL_CHANGE = "OilChange"
    FILTER_CHANGE = "FilterChange"
    OIL_AND_FILTER = "OilAndFilter"
    PREVENTIVE = "Preventive"
    CORRECTIVE = "Corrective"

    @property
    def categories(self):
        """Service categories whose counters this kind of work resets."""
        return SERVICED_CATEGORIES[self]


SERVICED_CATEGORIES = {
    MaintenanceType.OIL_CHANGE: (ServiceCategory.ENGINE_OIL,),
    MaintenanceType.FILTER_CHANGE: (
        ServiceCategory.FUEL_FILTER,
        ServiceCategory.AIR_FILTER,
    ),
    MaintenanceType.OIL_AND_FILTER: (
        ServiceCategory.ENGINE_OIL,
        ServiceCategory.FUEL_FILTER,
        ServiceCategory.AIR_FILTER,
    ),
    MaintenanceType.PREVENTIVE: tuple(ServiceCategory),
    MaintenanceType.CORRECTIVE: (),
}
