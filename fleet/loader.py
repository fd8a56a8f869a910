"""Farm document (de)serialization and key/value document stores."""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .collaborator import Collaborator, FuelPrice
from .errors import PersistenceError
from .events import FuelEvent, MaintenanceEvent, PartUsage
from .farm import Farm
from .hour_meter_entry import HourMeterLogEntry
from .machine import LastMaintenance, Machine, MaintenanceConfig
from .status import (
    FuelKind,
    HourMeterSource,
    MachineStatus,
    MaintenanceType,
    ServiceCategory,
)
from .validation import normalize_document
from .warehouse import StockHistoryEntry, WarehouseItem

logger = logging.getLogger(__name__)

CONFIG_KEYS = {
    ServiceCategory.ENGINE_OIL: "engineOilHours",
    ServiceCategory.TRANSMISSION_OIL: "transmissionOilHours",
    ServiceCategory.FUEL_FILTER: "fuelFilterHours",
    ServiceCategory.AIR_FILTER: "airFilterHours",
}

LAST_KEYS = {
    ServiceCategory.ENGINE_OIL: "engineOilHour",
    ServiceCategory.TRANSMISSION_OIL: "transmissionOilHour",
    ServiceCategory.FUEL_FILTER: "fuelFilterHour",
    ServiceCategory.AIR_FILTER: "airFilterHour",
}


# =============================================================================
# Parsing
# =============================================================================


def _parse_counters(dct: Optional[Dict[str, Any]], keys, cls):
    if dct is None:
        return None
    counters = cls()
    for category, key in keys.items():
        counters.set(category, dct.get(key))
    return counters


def _parse_hour_meter_entry(dct: Dict[str, Any]) -> HourMeterLogEntry:
    return HourMeterLogEntry(
        dct["date"],
        dct["value"],
        dct["collaboratorId"],
        HourMeterSource(dct["source"]),
        dct["sourceId"],
    )


def _parse_machine(dct: Dict[str, Any]) -> Machine:
    fuel = dct.get("defaultFuelType")
    return Machine(
        id=dct["id"],
        name=dct["name"],
        type=dct["type"],
        hour_meter=dct["hourMeter"],
        status=MachineStatus(dct["status"]),
        brand_model=dct.get("brandModel"),
        year=dct.get("year"),
        serial_number=dct.get("serialNumber"),
        current_collaborator_id=dct.get("currentCollaboratorId"),
        notes=dct.get("notes"),
        default_fuel_kind=FuelKind(fuel) if fuel else None,
        maintenance_config=_parse_counters(
            dct.get("maintenanceConfig"), CONFIG_KEYS, MaintenanceConfig
        ),
        last_maintenance=_parse_counters(
            dct.get("lastMaintenance"), LAST_KEYS, LastMaintenance
        ),
        hour_meter_history=[
            _parse_hour_meter_entry(h) for h in dct.get("hourMeterHistory") or []
        ],
    )


def _parse_collaborator(dct: Dict[str, Any]) -> Collaborator:
    return Collaborator(
        dct["id"],
        dct["name"],
        dct["role"],
        dct.get("contact"),
        dct.get("assignments"),
    )


def _parse_fuel_event(dct: Dict[str, Any]) -> FuelEvent:
    return FuelEvent(
        id=dct["id"],
        date=dct["date"],
        machine_id=dct["machineId"],
        collaborator_id=dct["collaboratorId"],
        fuel_kind=FuelKind(dct["fuelType"]),
        quantity=dct["quantity"],
        total_value=dct["totalValue"],
        odometer=dct["odometer"],
        observations=dct.get("observations"),
    )


def _parse_maintenance_event(dct: Dict[str, Any]) -> MaintenanceEvent:
    return MaintenanceEvent(
        id=dct["id"],
        type=MaintenanceType(dct["type"]),
        date=dct["date"],
        machine_id=dct["machineId"],
        hour_meter=dct["hourMeter"],
        collaborator_id=dct["collaboratorId"],
        total_cost=dct["totalCost"],
        notes=dct.get("notes"),
        parts_used=[
            PartUsage(p["itemId"], p["quantity"]) for p in dct.get("partsUsed") or []
        ],
    )


def _parse_warehouse_item(dct: Dict[str, Any]) -> WarehouseItem:
    return WarehouseItem(
        id=dct["id"],
        name=dct["name"],
        code=dct["code"],
        unit_value=dct["unitValue"],
        stock_quantity=dct["stockQuantity"],
        created_at=dct["createdAt"],
        stock_history=[
            StockHistoryEntry(
                h["date"],
                h["reason"],
                h["referenceId"],
                h["quantityChange"],
                h["resultingQuantity"],
            )
            for h in dct.get("stockHistory") or []
        ],
    )


def farm_from_document(document: Dict[str, Any]) -> Farm:
    """Build a Farm from a plain document (camelCase keys)."""
    document = normalize_document(document)
    return Farm(
        name=document.get("name"),
        version=document.get("version", 0),
        machines=[_parse_machine(m) for m in document.get("machines") or []],
        collaborators=[
            _parse_collaborator(c) for c in document.get("collaborators") or []
        ],
        fuel_logs=[_parse_fuel_event(e) for e in document.get("fuelLogs") or []],
        maintenance_logs=[
            _parse_maintenance_event(e) for e in document.get("maintenanceLogs") or []
        ],
        fuel_prices=[
            FuelPrice(FuelKind(p["fuelType"]), p["price"])
            for p in document.get("fuelPrices") or []
        ],
        warehouse_items=[
            _parse_warehouse_item(i) for i in document.get("warehouseItems") or []
        ],
    )


# =============================================================================
# Serialization
# =============================================================================


def _counters_to_dict(counters, keys) -> Optional[Dict[str, Any]]:
    if counters is None:
        return None
    return {key: counters.get(category) for category, key in keys.items()}


def _machine_to_dict(machine: Machine) -> Dict[str, Any]:
    """Serialize a Machine, omitting unset optional fields."""
    d: Dict[str, Any] = {
        "id": machine.id,
        "name": machine.name,
        "type": machine.type,
        "hourMeter": machine.hour_meter,
        "status": machine.status.value,
    }
    if machine.brand_model is not None:
        d["brandModel"] = machine.brand_model
    if machine.year is not None:
        d["year"] = machine.year
    if machine.serial_number is not None:
        d["serialNumber"] = machine.serial_number
    if machine.current_collaborator_id is not None:
        d["currentCollaboratorId"] = machine.current_collaborator_id
    if machine.notes is not None:
        d["notes"] = machine.notes
    if machine.default_fuel_kind is not None:
        d["defaultFuelType"] = machine.default_fuel_kind.value
    if machine.maintenance_config is not None:
        d["maintenanceConfig"] = _counters_to_dict(
            machine.maintenance_config, CONFIG_KEYS
        )
    if machine.last_maintenance is not None:
        d["lastMaintenance"] = _counters_to_dict(machine.last_maintenance, LAST_KEYS)
    d["hourMeterHistory"] = [
        {
            "date": h.date,
            "value": h.value,
            "collaboratorId": h.collaborator_id,
            "source": h.source.value,
            "sourceId": h.source_id,
        }
        for h in machine.hour_meter_history
    ]
    return d


def _collaborator_to_dict(collaborator: Collaborator) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "id": collaborator.id,
        "name": collaborator.name,
        "role": collaborator.role,
    }
    if collaborator.contact is not None:
        d["contact"] = collaborator.contact
    if collaborator.assignments is not None:
        d["assignments"] = collaborator.assignments
    return d


def _fuel_event_to_dict(event: FuelEvent) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "id": event.id,
        "date": event.date,
        "machineId": event.machine_id,
        "collaboratorId": event.collaborator_id,
        "fuelType": event.fuel_kind.value,
        "totalValue": event.total_value,
        "quantity": event.quantity,
        "odometer": event.odometer,
    }
    if event.observations is not None:
        d["observations"] = event.observations
    return d


def _maintenance_event_to_dict(event: MaintenanceEvent) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "id": event.id,
        "type": event.type.value,
        "date": event.date,
        "machineId": event.machine_id,
        "hourMeter": event.hour_meter,
        "collaboratorId": event.collaborator_id,
        "totalCost": event.total_cost,
    }
    if event.notes is not None:
        d["notes"] = event.notes
    if event.parts_used:
        d["partsUsed"] = [
            {"itemId": p.item_id, "quantity": p.quantity} for p in event.parts_used
        ]
    return d


def _warehouse_item_to_dict(item: WarehouseItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "code": item.code,
        "unitValue": item.unit_value,
        "stockQuantity": item.stock_quantity,
        "createdAt": item.created_at,
        "stockHistory": [
            {
                "date": h.date,
                "reason": h.reason,
                "referenceId": h.reference_id,
                "quantityChange": h.quantity_change,
                "resultingQuantity": h.resulting_quantity,
            }
            for h in item.stock_history
        ],
    }


def farm_to_document(farm: Farm) -> Dict[str, Any]:
    """Serialize a Farm to the persisted document layout."""
    return {
        "name": farm.name,
        "version": farm.version,
        "machines": [_machine_to_dict(m) for m in farm.machines],
        "collaborators": [_collaborator_to_dict(c) for c in farm.collaborators],
        "fuelLogs": [_fuel_event_to_dict(e) for e in farm.fuel_logs],
        "maintenanceLogs": [
            _maintenance_event_to_dict(e) for e in farm.maintenance_logs
        ],
        "fuelPrices": [
            {"fuelType": p.fuel_kind.value, "price": p.price} for p in farm.fuel_prices
        ],
        "warehouseItems": [_warehouse_item_to_dict(i) for i in farm.warehouse_items],
    }


# =============================================================================
# Stores
# =============================================================================


class MemoryStore:
    """Keeps documents in a dict. Documents are copied in and out."""

    def __init__(self, documents: Optional[Dict[str, dict]] = None):
        self.documents = copy.deepcopy(documents) if documents else {}

    def get(self, key: str) -> Optional[dict]:
        document = self.documents.get(key)
        return copy.deepcopy(document) if document is not None else None

    def put(self, key: str, document: dict) -> None:
        self.documents[key] = copy.deepcopy(document)


class YamlFileStore:
    """Keeps each document in <directory>/<key>.yaml."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.yaml"

    def get(self, key: str) -> Optional[dict]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, "r") as fp:
                return yaml.load(fp, Loader=yaml.SafeLoader)
        except (OSError, yaml.YAMLError) as e:
            raise PersistenceError(f"Could not read {path}: {e}") from e

    def put(self, key: str, document: dict) -> None:
        path = self.path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as fp:
                yaml.dump(
                    document,
                    fp,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                    width=120,
                )
        except (OSError, yaml.YAMLError) as e:
            raise PersistenceError(f"Could not write {path}: {e}") from e
        logger.debug(f"Farm document written: {path}")
