"""
FleetEngine - the single owner of the farm aggregate.

Every mutation is a named command. A command works on a deep copy of
the aggregate and commits it only when every step succeeded, so a
failing command leaves no partial state behind. After each commit the
document is written to the store; a failed write raises
PersistenceError but the in-memory commit stands, and save() can be
called again to retry.

Callers must serialize commands: the engine assumes one mutation at a
time.
"""

import copy
import logging
import uuid
from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import Callable, Iterator, List, Optional

from .alerts import MaintenanceAlert, generate_maintenance_alerts
from .calculations import format_timestamp
from .collaborator import Collaborator, FuelPrice
from .config import Config
from .errors import (
    DocumentError,
    InsufficientStockWarning,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .events import FuelEvent, MaintenanceEvent, PartUsage
from .farm import Farm
from .hour_meter_entry import HourMeterLogEntry
from .intervals import apply_maintenance, plan_status
from .ledger import record_observation, revise_observation
from .loader import farm_from_document, farm_to_document
from .machine import LastMaintenance, Machine, MaintenanceConfig
from .service_due import ServiceDue
from .status import FuelKind, HourMeterSource, MachineStatus, MaintenanceType
from .stock import adjust_stock, consume_parts, find_shortages
from .validation import load_schema, normalize_document, validate_document
from .warehouse import WarehouseItem

logger = logging.getLogger(__name__)


def new_id(prefix: str) -> str:
    """Collision-free identifier such as 'fuel_3f2a...'."""
    return f"{prefix}_{uuid.uuid4().hex}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Input checks
# =============================================================================


def _require_text(value, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def _require_number(value, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number")
    return value


def _positive(value, field: str) -> float:
    if _require_number(value, field) <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    return value


def _non_negative(value, field: str) -> float:
    if _require_number(value, field) < 0:
        raise ValidationError(f"{field} must not be negative")
    return value


def _enum(enum_cls, value, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(
            f"{field} is not a valid {enum_cls.__name__}: {value!r}"
        ) from None


def _timestamp(value, field: str = "date") -> str:
    try:
        return format_timestamp(value)
    except (ValueError, TypeError, OverflowError):
        raise ValidationError(
            f"{field} is not a valid timestamp: {value!r}"
        ) from None


def _counters(value, cls, field: str):
    if value is None:
        return None
    if not isinstance(value, cls):
        raise ValidationError(f"{field} must be a {cls.__name__}")
    for category, hours in value.as_dict().items():
        if hours is not None:
            _non_negative(hours, f"{field}.{category.value}")
    return copy.deepcopy(value)


def _not_lowered(
    current: Optional[LastMaintenance], new: Optional[LastMaintenance]
) -> None:
    """Service counters only move forward."""
    if current is None:
        return
    if new is None:
        raise ValidationError("last_maintenance cannot be cleared")
    for category, hours in current.as_dict().items():
        if (new.get(category) or 0) < (hours or 0):
            raise ValidationError(
                f"last_maintenance.{category.value} cannot go back "
                f"from {hours} to {new.get(category)}"
            )


class FleetEngine:
    """Owns the farm aggregate and exposes every operation on it."""

    def __init__(
        self,
        store,
        key: str = Config.FARM_KEY,
        identity: Optional[Callable[[], str]] = None,
        id_factory: Callable[[str], str] = new_id,
        clock: Callable[[], datetime] = utc_now,
        allow_negative_stock: bool = Config.ALLOW_NEGATIVE_STOCK,
        alert_threshold: float = Config.ALERT_THRESHOLD,
        default_usage_rate: float = Config.DEFAULT_USAGE_RATE,
        due_soon_hours: float = Config.DUE_SOON_HOURS,
    ):
        self.store = store
        self.key = key
        self.identity = identity or (lambda: "system")
        self.id_factory = id_factory
        self.clock = clock
        self.allow_negative_stock = allow_negative_stock
        self.alert_threshold = alert_threshold
        self.default_usage_rate = default_usage_rate
        self.due_soon_hours = due_soon_hours
        self.unsaved = False
        self._farm = self._load()

    @property
    def farm(self) -> Farm:
        """Snapshot of the committed aggregate. Do not mutate."""
        return self._farm

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _load(self) -> Farm:
        document = self.store.get(self.key)
        if document is None:
            logger.info(f"No farm document under key={self.key}; starting empty")
            return Farm()
        errors = validate_document(normalize_document(document), load_schema())
        if errors:
            raise DocumentError("; ".join(errors))
        farm = farm_from_document(document)
        logger.info(
            f"Farm loaded: key={self.key} version={farm.version} "
            f"machines={len(farm.machines)}"
        )
        return farm

    def save(self) -> None:
        """Write the committed aggregate to the store."""
        try:
            self.store.put(self.key, farm_to_document(self._farm))
        except PersistenceError:
            self.unsaved = True
            logger.error(f"Farm save failed: key={self.key} version={self._farm.version}")
            raise
        except OSError as e:
            self.unsaved = True
            logger.error(f"Farm save failed: key={self.key} version={self._farm.version}")
            raise PersistenceError(f"Could not save farm {self.key}: {e}") from e
        self.unsaved = False

    @contextmanager
    def _transaction(self) -> Iterator[Farm]:
        working = copy.deepcopy(self._farm)
        yield working
        working.version += 1
        self._farm = working
        self.save()

    def _now(self) -> str:
        return format_timestamp(self.clock())

    def _date_or_now(self, value) -> str:
        return self._now() if value is None else _timestamp(value)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def lookup_machine(self, machine_id: str) -> Optional[Machine]:
        return copy.deepcopy(self._farm.get_machine(machine_id))

    def lookup_collaborator(self, collaborator_id: str) -> Optional[Collaborator]:
        return copy.deepcopy(self._farm.get_collaborator(collaborator_id))

    def lookup_item(self, item_id: str) -> Optional[WarehouseItem]:
        return copy.deepcopy(self._farm.get_item(item_id))

    @staticmethod
    def _machine(farm: Farm, machine_id: str) -> Machine:
        machine = farm.get_machine(machine_id)
        if machine is None:
            raise NotFoundError("Machine", machine_id)
        return machine

    @staticmethod
    def _check_collaborator(farm: Farm, collaborator_id) -> str:
        collaborator_id = _require_text(collaborator_id, "collaborator_id")
        if farm.get_collaborator(collaborator_id) is None:
            raise NotFoundError("Collaborator", collaborator_id)
        return collaborator_id

    # -------------------------------------------------------------------------
    # Farm, machines, collaborators
    # -------------------------------------------------------------------------

    def set_farm_name(self, name: str) -> None:
        name = _require_text(name, "name")
        with self._transaction() as farm:
            farm.name = name
        logger.info(f"Farm renamed: {name}")

    def add_machine(
        self,
        name: str,
        type: str,
        hour_meter: float = 0,
        status=MachineStatus.ACTIVE,
        brand_model: Optional[str] = None,
        year: Optional[int] = None,
        serial_number: Optional[str] = None,
        current_collaborator_id: Optional[str] = None,
        notes: Optional[str] = None,
        default_fuel_kind=None,
        maintenance_config: Optional[MaintenanceConfig] = None,
        last_maintenance: Optional[LastMaintenance] = None,
    ) -> Machine:
        with self._transaction() as farm:
            if current_collaborator_id is not None:
                self._check_collaborator(farm, current_collaborator_id)
            machine = Machine(
                id=self.id_factory("machine"),
                name=_require_text(name, "name"),
                type=_require_text(type, "type"),
                hour_meter=_non_negative(hour_meter, "hour_meter"),
                status=_enum(MachineStatus, status, "status"),
                brand_model=brand_model,
                year=year,
                serial_number=serial_number,
                current_collaborator_id=current_collaborator_id,
                notes=notes,
                default_fuel_kind=(
                    _enum(FuelKind, default_fuel_kind, "default_fuel_kind")
                    if default_fuel_kind is not None
                    else None
                ),
                maintenance_config=_counters(
                    maintenance_config, MaintenanceConfig, "maintenance_config"
                ),
                last_maintenance=_counters(
                    last_maintenance, LastMaintenance, "last_maintenance"
                ),
            )
            farm.machines.append(machine)
        logger.info(f"Machine added: id={machine.id} name={machine.name}")
        return copy.deepcopy(machine)

    def update_machine(self, machine: Machine) -> Machine:
        """
        Replace a machine's descriptive fields and maintenance plan.

        The ledger stays owned by the engine: the given history is
        ignored. Neither the hour meter nor the last-maintenance counters
        can be lowered here; raising the hour meter is recorded as a
        manual reading.
        """
        with self._transaction() as farm:
            stored = self._machine(farm, machine.id)
            if machine.current_collaborator_id is not None:
                self._check_collaborator(farm, machine.current_collaborator_id)
            hour_meter = _non_negative(machine.hour_meter, "hour_meter")
            if hour_meter < stored.hour_meter:
                raise ValidationError(
                    f"hour_meter cannot go back from {stored.hour_meter} to {hour_meter}"
                )
            stored.name = _require_text(machine.name, "name")
            stored.type = _require_text(machine.type, "type")
            stored.status = _enum(MachineStatus, machine.status, "status")
            stored.brand_model = machine.brand_model
            stored.year = machine.year
            stored.serial_number = machine.serial_number
            stored.current_collaborator_id = machine.current_collaborator_id
            stored.notes = machine.notes
            stored.default_fuel_kind = (
                _enum(FuelKind, machine.default_fuel_kind, "default_fuel_kind")
                if machine.default_fuel_kind is not None
                else None
            )
            stored.maintenance_config = _counters(
                machine.maintenance_config, MaintenanceConfig, "maintenance_config"
            )
            last_maintenance = _counters(
                machine.last_maintenance, LastMaintenance, "last_maintenance"
            )
            _not_lowered(stored.last_maintenance, last_maintenance)
            stored.last_maintenance = last_maintenance
            if hour_meter > stored.hour_meter:
                record_observation(
                    stored,
                    self._now(),
                    hour_meter,
                    self.identity(),
                    HourMeterSource.MANUAL,
                    self.id_factory("manual"),
                )
        logger.info(f"Machine updated: id={stored.id}")
        return copy.deepcopy(stored)

    def delete_machine(self, machine_id: str) -> None:
        """Remove a machine. Its events stay in the aggregate."""
        with self._transaction() as farm:
            machine = self._machine(farm, machine_id)
            farm.machines.remove(machine)
        logger.info(f"Machine deleted: id={machine_id}")

    def add_collaborator(
        self,
        name: str,
        role: str,
        contact: Optional[str] = None,
        assignments: Optional[str] = None,
    ) -> Collaborator:
        with self._transaction() as farm:
            collaborator = Collaborator(
                id=self.id_factory("collab"),
                name=_require_text(name, "name"),
                role=_require_text(role, "role"),
                contact=contact,
                assignments=assignments,
            )
            farm.collaborators.append(collaborator)
        logger.info(f"Collaborator added: id={collaborator.id} name={collaborator.name}")
        return copy.deepcopy(collaborator)

    # -------------------------------------------------------------------------
    # Hour meter
    # -------------------------------------------------------------------------

    def record_manual_reading(
        self, machine_id: str, value: float, date=None
    ) -> Optional[HourMeterLogEntry]:
        """Hour-meter reading typed in by the acting collaborator."""
        value = _positive(value, "value")
        with self._transaction() as farm:
            machine = self._machine(farm, machine_id)
            entry = record_observation(
                machine,
                self._date_or_now(date),
                value,
                self.identity(),
                HourMeterSource.MANUAL,
                self.id_factory("manual"),
            )
        return copy.deepcopy(entry)

    # -------------------------------------------------------------------------
    # Fuel
    # -------------------------------------------------------------------------

    def _build_fuel_event(
        self,
        farm: Farm,
        event_id: str,
        machine_id,
        collaborator_id,
        fuel_kind,
        quantity,
        total_value,
        odometer,
        date,
        observations,
    ) -> FuelEvent:
        machine_id = _require_text(machine_id, "machine_id")
        return FuelEvent(
            id=event_id,
            date=self._date_or_now(date),
            machine_id=machine_id,
            collaborator_id=self._check_collaborator(farm, collaborator_id),
            fuel_kind=_enum(FuelKind, fuel_kind, "fuel_kind"),
            quantity=_positive(quantity, "quantity"),
            total_value=_positive(total_value, "total_value"),
            odometer=_positive(odometer, "odometer"),
            observations=observations,
        )

    def record_fuel_event(
        self,
        machine_id: str,
        collaborator_id: str,
        fuel_kind,
        quantity: float,
        total_value: float,
        odometer: float,
        date=None,
        observations: Optional[str] = None,
    ) -> FuelEvent:
        """
        Record a fueling. The odometer reading becomes the machine's hour
        meter when it is higher than the current value.
        """
        with self._transaction() as farm:
            machine = self._machine(farm, _require_text(machine_id, "machine_id"))
            event = self._build_fuel_event(
                farm,
                self.id_factory("fuel"),
                machine_id,
                collaborator_id,
                fuel_kind,
                quantity,
                total_value,
                odometer,
                date,
                observations,
            )
            farm.fuel_logs.append(event)
            record_observation(
                machine,
                event.date,
                event.odometer,
                event.collaborator_id,
                HourMeterSource.FUELING,
                event.id,
            )
        logger.info(
            f"Fuel event recorded: id={event.id} machine={event.machine_id} "
            f"liters={event.quantity} odometer={event.odometer}"
        )
        return copy.deepcopy(event)

    def revise_fuel_event(self, event: FuelEvent) -> FuelEvent:
        """
        Correct an existing fuel event.

        The machine cannot change. The ledger entry the event created is
        updated in place and the hour meter is recomputed from the most
        recent observation, so a wrong high reading can be corrected.
        """
        with self._transaction() as farm:
            existing = farm.get_fuel_event(event.id)
            if existing is None:
                raise NotFoundError("Fuel event", event.id)
            if event.machine_id != existing.machine_id:
                raise ValidationError("machine_id cannot change on a fuel event")
            revised = self._build_fuel_event(
                farm,
                existing.id,
                existing.machine_id,
                event.collaborator_id,
                event.fuel_kind,
                event.quantity,
                event.total_value,
                event.odometer,
                event.date,
                event.observations,
            )
            farm.fuel_logs[farm.fuel_logs.index(existing)] = revised
            machine = farm.get_machine(revised.machine_id)
            if machine is not None:
                revise_observation(
                    farm, machine, revised.id, revised.date, revised.odometer
                )
        logger.info(f"Fuel event revised: id={revised.id} odometer={revised.odometer}")
        return copy.deepcopy(revised)

    def set_fuel_prices(self, prices: List[FuelPrice]) -> None:
        seen = set()
        checked = []
        for price in prices:
            kind = _enum(FuelKind, price.fuel_kind, "fuel_kind")
            if kind in seen:
                raise ValidationError(f"Duplicate price for {kind.value}")
            seen.add(kind)
            checked.append(FuelPrice(kind, _non_negative(price.price, "price")))
        with self._transaction() as farm:
            farm.fuel_prices = checked
        logger.info(f"Fuel prices set: {len(checked)} kinds")

    def estimate_fuel_cost(self, fuel_kind, quantity: float) -> Optional[float]:
        """quantity x configured price, or None when no usable price exists."""
        price = self._farm.get_fuel_price(_enum(FuelKind, fuel_kind, "fuel_kind"))
        if price is None or price <= 0 or not quantity or quantity <= 0:
            return None
        return round(quantity * price, 2)

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def record_maintenance_event(
        self,
        machine_id: str,
        collaborator_id: str,
        type,
        hour_meter: float,
        total_cost: float = 0,
        date=None,
        notes: Optional[str] = None,
        parts_used: Optional[List[PartUsage]] = None,
    ) -> MaintenanceEvent:
        """
        Record maintenance work.

        In order: deduct parts from stock, advance the serviced categories'
        counters, offer the reading to the hour-meter ledger, and store
        the event. With negative stock disallowed, any shortage rejects
        the whole event.
        """
        parts = []
        seen = set()
        for part in parts_used or []:
            item_id = _require_text(part.item_id, "item_id")
            if item_id in seen:
                raise ValidationError(f"Part listed twice: {item_id}")
            seen.add(item_id)
            parts.append(PartUsage(item_id, _positive(part.quantity, "quantity")))

        with self._transaction() as farm:
            machine = self._machine(farm, _require_text(machine_id, "machine_id"))
            event = MaintenanceEvent(
                id=self.id_factory("maint"),
                type=_enum(MaintenanceType, type, "type"),
                date=self._date_or_now(date),
                machine_id=machine.id,
                hour_meter=_non_negative(hour_meter, "hour_meter"),
                collaborator_id=self._check_collaborator(farm, collaborator_id),
                total_cost=_non_negative(total_cost, "total_cost"),
                notes=notes,
                parts_used=parts,
            )

            shortages = find_shortages(farm, parts)
            if shortages:
                if not self.allow_negative_stock:
                    raise InsufficientStockWarning(shortages)
                logger.warning(
                    f"Maintenance {event.id} uses more stock than on hand: "
                    + ", ".join(s.item.code for s in shortages)
                )
            consume_parts(farm, parts, event.id, event.date)
            apply_maintenance(machine, event.type, event.hour_meter)
            record_observation(
                machine,
                event.date,
                event.hour_meter,
                event.collaborator_id,
                HourMeterSource.MAINTENANCE,
                event.id,
            )
            farm.maintenance_logs.append(event)
        logger.info(
            f"Maintenance recorded: id={event.id} machine={event.machine_id} "
            f"type={event.type.value} hour_meter={event.hour_meter}"
        )
        return copy.deepcopy(event)

    def generate_maintenance_alerts(
        self, today: Optional[date] = None
    ) -> List[MaintenanceAlert]:
        return generate_maintenance_alerts(
            self._farm,
            today=today or self.clock().date(),
            threshold=self.alert_threshold,
            default_rate=self.default_usage_rate,
        )

    def machine_plan_status(self, machine_id: str) -> List[ServiceDue]:
        return plan_status(self._machine(self._farm, machine_id), self.due_soon_hours)

    # -------------------------------------------------------------------------
    # Warehouse
    # -------------------------------------------------------------------------

    @staticmethod
    def _check_code(farm: Farm, code, item_id: Optional[str] = None) -> str:
        code = _require_text(code, "code")
        clash = farm.get_item_by_code(code)
        if clash is not None and clash.id != item_id:
            raise ValidationError(f"Item code already in use: {code}")
        return code

    def add_warehouse_item(
        self, name: str, code: str, unit_value: float = 0, stock_quantity: float = 0
    ) -> WarehouseItem:
        with self._transaction() as farm:
            item = WarehouseItem(
                id=self.id_factory("item"),
                name=_require_text(name, "name"),
                code=self._check_code(farm, code),
                unit_value=_non_negative(unit_value, "unit_value"),
                stock_quantity=_non_negative(stock_quantity, "stock_quantity"),
                created_at=self._now(),
            )
            farm.warehouse_items.append(item)
        logger.info(f"Warehouse item added: id={item.id} code={item.code}")
        return copy.deepcopy(item)

    def update_warehouse_item(self, item: WarehouseItem) -> WarehouseItem:
        """
        Replace an item's name, code, value and quantity. A quantity
        change is recorded as an adjustment in the stock history.
        """
        with self._transaction() as farm:
            stored = farm.get_item(item.id)
            if stored is None:
                raise NotFoundError("Warehouse item", item.id)
            stored.name = _require_text(item.name, "name")
            stored.code = self._check_code(farm, item.code, stored.id)
            stored.unit_value = _non_negative(item.unit_value, "unit_value")
            quantity = _non_negative(item.stock_quantity, "stock_quantity")
            if quantity != stored.stock_quantity:
                adjust_stock(stored, quantity, stored.id, self._now())
        logger.info(f"Warehouse item updated: id={stored.id}")
        return copy.deepcopy(stored)

    def delete_warehouse_item(self, item_id: str) -> None:
        with self._transaction() as farm:
            item = farm.get_item(item_id)
            if item is None:
                raise NotFoundError("Warehouse item", item_id)
            farm.warehouse_items.remove(item)
        logger.info(f"Warehouse item deleted: id={item_id}")
