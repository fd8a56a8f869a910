"""
Fleet usage and maintenance accounting.

This package tracks hour meters, maintenance and spare parts for farm
machinery:
- Status, MachineStatus, FuelKind, ServiceCategory, MaintenanceType: enums
- Machine, MaintenanceConfig, LastMaintenance: equipment and service plans
- HourMeterLogEntry: hour-meter ledger entries
- FuelEvent, MaintenanceEvent, PartUsage: recorded events
- WarehouseItem, StockHistoryEntry: spare-parts stock
- Farm: the aggregate holding everything above
- FleetEngine: the controller that owns the aggregate and runs commands
"""

from .status import (
    Status,
    MachineStatus,
    FuelKind,
    HourMeterSource,
    ServiceCategory,
    MaintenanceType,
)
from .errors import (
    FleetError,
    ValidationError,
    NotFoundError,
    InsufficientStockWarning,
    PersistenceError,
    DocumentError,
)
from .hour_meter_entry import HourMeterLogEntry
from .machine import Machine, MaintenanceConfig, LastMaintenance
from .collaborator import Collaborator, FuelPrice
from .events import FuelEvent, MaintenanceEvent, PartUsage
from .warehouse import WarehouseItem, StockHistoryEntry
from .farm import Farm
from .service_due import ServiceDue
from .calculations import (
    calc_due_at,
    calc_remaining,
    check_status,
    estimate_usage_rate,
    project_due_date,
)
from .alerts import MaintenanceAlert, generate_maintenance_alerts
from .loader import MemoryStore, YamlFileStore, farm_from_document, farm_to_document
from .engine import FleetEngine

__all__ = [
    "Status",
    "MachineStatus",
    "FuelKind",
    "HourMeterSource",
    "ServiceCategory",
    "MaintenanceType",
    "FleetError",
    "ValidationError",
    "NotFoundError",
    "InsufficientStockWarning",
    "PersistenceError",
    "DocumentError",
    "HourMeterLogEntry",
    "Machine",
    "MaintenanceConfig",
    "LastMaintenance",
    "Collaborator",
    "FuelPrice",
    "FuelEvent",
    "MaintenanceEvent",
    "PartUsage",
    "WarehouseItem",
    "StockHistoryEntry",
    "Farm",
    "ServiceDue",
    "calc_due_at",
    "calc_remaining",
    "check_status",
    "estimate_usage_rate",
    "project_due_date",
    "MaintenanceAlert",
    "generate_maintenance_alerts",
    "MemoryStore",
    "YamlFileStore",
    "farm_from_document",
    "farm_to_document",
    "FleetEngine",
]
