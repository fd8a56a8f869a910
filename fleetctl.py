#!/usr/bin/env python3
"""
Command-line shell for the fleet engine.

Commands:
  init             - Create a farm file with the given name
  add-collaborator - Register a collaborator
  add-machine      - Register a machine and its service intervals
  add-item         - Add a warehouse item
  reading          - Record a manual hour-meter reading
  price            - Set the price per liter of a fuel kind
  machines         - List machines and their hour meters
  alerts           - Show maintenance that is overdue or coming up
  plan             - Show the maintenance plan status of one machine
  ledger           - Show the hour-meter ledger of one machine
  fuel             - Record a fueling
  revise-fuel      - Correct a recorded fueling
  maintenance      - Record maintenance work
  stock            - List warehouse stock
  costs            - Summarize fuel and maintenance spend
  validate         - Check the farm file against the schema
"""

import argparse
import copy
import sys
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from fleet import (
    FleetEngine,
    FleetError,
    FuelKind,
    FuelPrice,
    LastMaintenance,
    MaintenanceAlert,
    MaintenanceConfig,
    MaintenanceType,
    MemoryStore,
    PartUsage,
    ServiceDue,
    Status,
    YamlFileStore,
)
from fleet.calculations import parse_timestamp
from fleet.config import Config
from fleet.logging_config import setup_logging
from fleet.reports import (
    cost_by_machine,
    cost_by_maintenance_type,
    cost_totals,
    low_stock_items,
)
from fleet.validation import load_schema, validate_farm_file

# =============================================================================
# Formatting helpers
# =============================================================================


def format_hours(hours: Optional[float]) -> str:
    """Format an hour-meter value for display."""
    return f"{hours:,.0f}h" if hours is not None else "-"


def format_cost(cost: Optional[float]) -> str:
    """Format cost for display."""
    return f"${cost:,.2f}" if cost is not None else "-"


def format_remaining(remaining: Optional[float]) -> str:
    """Format remaining hours; overdue shows as negative."""
    if remaining is None:
        return "-"
    if remaining < 0:
        return f"-{abs(remaining):,.0f}h"
    return f"{remaining:,.0f}h"


def format_date(timestamp: Optional[str]) -> str:
    """Show only the calendar date of a stored timestamp."""
    if timestamp is None:
        return "-"
    return parse_timestamp(timestamp).date().isoformat()


def parse_part(text: str) -> PartUsage:
    """Parse ITEM_ID:QUANTITY from the command line."""
    item_id, sep, quantity = text.rpartition(":")
    if not sep or not item_id:
        raise argparse.ArgumentTypeError(f"expected ITEM_ID:QUANTITY, got '{text}'")
    try:
        return PartUsage(item_id, float(quantity))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid quantity in '{text}'") from None


# =============================================================================
# Tables
# =============================================================================


def make_alert_table(alerts: List[MaintenanceAlert]) -> List[List[str]]:
    """Convert alerts to table rows."""
    rows = []
    for alert in alerts:
        if alert.is_overdue:
            when = "OVERDUE"
        elif alert.estimated_due_date:
            when = alert.estimated_due_date.isoformat()
        else:
            when = "-"
        rows.append(
            [
                alert.machine_name,
                alert.label,
                format_hours(alert.due_at),
                format_remaining(alert.remaining),
                when,
            ]
        )
    return rows


def make_plan_table(services: List[ServiceDue]) -> List[List[str]]:
    """Convert plan status to table rows."""
    return [
        [
            svc.label,
            format_hours(svc.interval),
            format_hours(svc.last_service),
            format_hours(svc.due_at),
            format_remaining(svc.remaining),
            f"{svc.progress_percent:.0f}%",
        ]
        for svc in services
    ]


# =============================================================================
# Commands
# =============================================================================


def cmd_init(engine: FleetEngine, args):
    engine.set_farm_name(args.name)
    print(f"Farm '{args.name}' saved to {args.farm_file}")
    return 0


def cmd_add_collaborator(engine: FleetEngine, args):
    collaborator = engine.add_collaborator(args.name, args.role, contact=args.contact)
    print(f"Collaborator {collaborator.id}: {collaborator.name} ({collaborator.role})")
    return 0


def cmd_add_machine(engine: FleetEngine, args):
    config = last = None
    intervals = [
        args.engine_oil, args.transmission_oil, args.fuel_filter, args.air_filter
    ]
    if any(i is not None for i in intervals):
        config = MaintenanceConfig(*[i or 0 for i in intervals])
        last = LastMaintenance(*[args.hour_meter] * 4)
    machine = engine.add_machine(
        name=args.name,
        type=args.type,
        hour_meter=args.hour_meter,
        brand_model=args.brand_model,
        year=args.year,
        default_fuel_kind=args.kind,
        maintenance_config=config,
        last_maintenance=last,
    )
    print(f"Machine {machine.id}: {machine.name} at {format_hours(machine.hour_meter)}")
    return 0


def cmd_add_item(engine: FleetEngine, args):
    item = engine.add_warehouse_item(
        args.name, args.code, unit_value=args.unit_value, stock_quantity=args.quantity
    )
    print(f"Item {item.id}: {item.code} x{item.stock_quantity:g}")
    return 0


def cmd_reading(engine: FleetEngine, args):
    entry = engine.record_manual_reading(args.machine_id, args.value, date=args.date)
    machine = engine.lookup_machine(args.machine_id)
    if entry is None:
        print(f"Reading ignored: hour meter already at {format_hours(machine.hour_meter)}")
    else:
        print(f"Hour meter: {format_hours(machine.hour_meter)}")
    return 0


def cmd_price(engine: FleetEngine, args):
    prices = [p for p in engine.farm.fuel_prices if p.fuel_kind.value != args.kind]
    prices.append(FuelPrice(args.kind, args.price))
    engine.set_fuel_prices(prices)
    print(f"{args.kind}: {format_cost(args.price)} per liter")
    return 0


def cmd_machines(engine: FleetEngine, args):
    farm = engine.farm
    print(f"Farm: {farm.name or '-'}")
    print(f"Machines: {len(farm.machines)}")
    print()
    rows = [
        [m.id, m.name, m.type, format_hours(m.hour_meter), m.status.value]
        for m in sorted(farm.machines, key=lambda m: m.name)
    ]
    headers = ["ID", "Name", "Type", "Hour Meter", "Status"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


def cmd_alerts(engine: FleetEngine, args):
    alerts = engine.generate_maintenance_alerts()
    if not alerts:
        print("No upcoming maintenance.")
        return 0
    headers = ["Machine", "Item", "Due At", "Remaining", "Estimated Date"]
    print(tabulate(make_alert_table(alerts), headers=headers, tablefmt="simple"))
    return 0


def cmd_plan(engine: FleetEngine, args):
    machine = engine.lookup_machine(args.machine_id)
    if machine is None:
        print(f"Error: Unknown machine '{args.machine_id}'")
        return 1

    print(f"Machine: {machine.name}")
    print(f"Hour meter: {format_hours(machine.hour_meter)}")
    print()

    services = engine.machine_plan_status(machine.id)
    if not services:
        print("No maintenance plan configured for this machine.")
        return 0

    headers = ["Item", "Interval", "Last Done", "Due At", "Remaining", "Used"]
    for status in Status:
        group = [s for s in services if s.status == status]
        if group:
            print(f"{status.name.replace('_', ' ')}:")
            print(tabulate(make_plan_table(group), headers=headers, tablefmt="simple"))
            print()
    return 0


def cmd_ledger(engine: FleetEngine, args):
    machine = engine.lookup_machine(args.machine_id)
    if machine is None:
        print(f"Error: Unknown machine '{args.machine_id}'")
        return 1

    entries = sorted(
        machine.hour_meter_history,
        key=lambda h: parse_timestamp(h.date),
        reverse=not args.asc,
    )
    print(f"Machine: {machine.name}")
    print(f"Hour meter: {format_hours(machine.hour_meter)}")
    print(f"Entries: {len(entries)}")
    print()
    if not entries:
        print("No hour-meter readings recorded.")
        return 0

    farm = engine.farm
    rows = []
    for entry in entries:
        collaborator = farm.get_collaborator(entry.collaborator_id)
        rows.append(
            [
                format_date(entry.date),
                format_hours(entry.value),
                entry.source.value,
                collaborator.name if collaborator else entry.collaborator_id,
                entry.source_id,
            ]
        )
    headers = ["Date", "Hour Meter", "Source", "Reported By", "Reference"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


def cmd_fuel(engine: FleetEngine, args):
    cost = args.cost
    if cost is None:
        cost = engine.estimate_fuel_cost(args.kind, args.liters)
        if cost is None:
            print(f"Error: No price set for {args.kind}; pass --cost")
            return 1

    event = engine.record_fuel_event(
        machine_id=args.machine_id,
        collaborator_id=args.collaborator_id,
        fuel_kind=args.kind,
        quantity=args.liters,
        total_value=cost,
        odometer=args.odometer,
        date=args.date,
        observations=args.notes,
    )
    machine = engine.lookup_machine(event.machine_id)
    print(f"Fuel event {event.id}:")
    print(f"  Liters:     {event.quantity:,.1f}")
    print(f"  Cost:       {format_cost(event.total_value)}")
    print(f"  Odometer:   {format_hours(event.odometer)}")
    print(f"  Hour meter: {format_hours(machine.hour_meter)}")
    if args.dry_run:
        print("(dry run - no changes made)")
    return 0


def cmd_revise_fuel(engine: FleetEngine, args):
    event = copy.deepcopy(engine.farm.get_fuel_event(args.event_id))
    if event is None:
        print(f"Error: Unknown fuel event '{args.event_id}'")
        return 1
    if args.liters is not None:
        event.quantity = args.liters
    if args.odometer is not None:
        event.odometer = args.odometer
    if args.cost is not None:
        event.total_value = args.cost
    if args.date is not None:
        event.date = args.date
    if args.notes is not None:
        event.observations = args.notes

    event = engine.revise_fuel_event(event)
    machine = engine.lookup_machine(event.machine_id)
    print(f"Fuel event {event.id} revised:")
    print(f"  Odometer:   {format_hours(event.odometer)}")
    if machine is not None:
        print(f"  Hour meter: {format_hours(machine.hour_meter)}")
    if args.dry_run:
        print("(dry run - no changes made)")
    return 0


def cmd_maintenance(engine: FleetEngine, args):
    event = engine.record_maintenance_event(
        machine_id=args.machine_id,
        collaborator_id=args.collaborator_id,
        type=args.type,
        hour_meter=args.hour_meter,
        total_cost=args.cost,
        date=args.date,
        notes=args.notes,
        parts_used=args.part,
    )
    print(f"Maintenance {event.id}:")
    print(f"  Type:       {event.type.value}")
    print(f"  Hour meter: {format_hours(event.hour_meter)}")
    print(f"  Cost:       {format_cost(event.total_cost)}")
    for part in event.parts_used:
        item = engine.lookup_item(part.item_id)
        print(f"  Part:       {item.code} x{part.quantity:g} (left: {item.stock_quantity:g})")
    if args.dry_run:
        print("(dry run - no changes made)")
    return 0


def cmd_stock(engine: FleetEngine, args):
    if args.low:
        items = low_stock_items(engine.farm, Config.LOW_STOCK_THRESHOLD)
    else:
        items = sorted(engine.farm.warehouse_items, key=lambda i: i.code)
    if not items:
        print("No items.")
        return 0
    rows = [
        [i.code, i.name, f"{i.stock_quantity:g}", format_cost(i.unit_value),
         format_cost(i.stock_value)]
        for i in items
    ]
    headers = ["Code", "Name", "On Hand", "Unit Value", "Stock Value"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


def cmd_costs(engine: FleetEngine, args):
    farm = engine.farm
    totals = cost_totals(farm)
    print(f"Total fuel:        {format_cost(totals.fuel_cost)}")
    print(f"Total maintenance: {format_cost(totals.maintenance_cost)}")
    print(f"This month:        {format_cost(totals.month_cost)}")
    print()

    by_type = cost_by_maintenance_type(farm)
    if by_type:
        rows = [[t.value, format_cost(c)] for t, c in by_type.items()]
        print(tabulate(rows, headers=["Maintenance Type", "Cost"], tablefmt="simple"))
        print()

    by_machine = cost_by_machine(farm)
    if by_machine:
        rows = [
            [r.machine_name, format_cost(r.fuel_cost), format_cost(r.maintenance_cost),
             format_cost(r.total)]
            for r in by_machine
        ]
        headers = ["Machine", "Fuel", "Maintenance", "Total"]
        print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


COMMANDS = {
    "init": cmd_init,
    "add-collaborator": cmd_add_collaborator,
    "add-machine": cmd_add_machine,
    "add-item": cmd_add_item,
    "reading": cmd_reading,
    "price": cmd_price,
    "machines": cmd_machines,
    "alerts": cmd_alerts,
    "plan": cmd_plan,
    "ledger": cmd_ledger,
    "fuel": cmd_fuel,
    "revise-fuel": cmd_revise_fuel,
    "maintenance": cmd_maintenance,
    "stock": cmd_stock,
    "costs": cmd_costs,
}


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Farm fleet usage and maintenance tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s init "Fazenda Boa Vista"
  %(prog)s add-machine "Tractor 1" Tractor --hour-meter 1000 --engine-oil 250
  %(prog)s alerts
  %(prog)s -f other/farm.yaml plan machine_1
  %(prog)s fuel machine_1 collab_1 --liters 100 --odometer 1260
  %(prog)s revise-fuel fuel_1 --odometer 1250
  %(prog)s maintenance machine_1 collab_2 OilChange \\
      --hour-meter 1255 --cost 300 --part item_1:1
  %(prog)s stock --low
""",
    )
    parser.add_argument(
        "-f",
        "--farm",
        dest="farm_file",
        type=Path,
        default=Path(Config.DATA_DIR) / f"{Config.FARM_KEY}.yaml",
        help="Path to farm YAML file (default: $FLEET_DATA_DIR/$FLEET_FARM_KEY.yaml)",
    )
    parser.add_argument(
        "--log-level", default=Config.LOG_LEVEL, help="Logging level (default: INFO)"
    )
    fuel_kinds = [k.value for k in FuelKind]

    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Create a farm file")
    init_parser.add_argument("name", type=str, help="Farm name")

    collab_parser = subparsers.add_parser("add-collaborator", help="Add a collaborator")
    collab_parser.add_argument("name", type=str)
    collab_parser.add_argument("role", type=str)
    collab_parser.add_argument("--contact", type=str)

    machine_parser = subparsers.add_parser("add-machine", help="Add a machine")
    machine_parser.add_argument("name", type=str)
    machine_parser.add_argument("type", type=str, help="Tractor, Harvester, ...")
    machine_parser.add_argument("--hour-meter", type=float, default=0)
    machine_parser.add_argument("--brand-model", type=str)
    machine_parser.add_argument("--year", type=int)
    machine_parser.add_argument("--kind", choices=fuel_kinds, help="Default fuel kind")
    for category in ("engine-oil", "transmission-oil", "fuel-filter", "air-filter"):
        machine_parser.add_argument(
            f"--{category}", type=float, help=f"{category} interval in hours"
        )

    item_parser = subparsers.add_parser("add-item", help="Add a warehouse item")
    item_parser.add_argument("name", type=str)
    item_parser.add_argument("code", type=str)
    item_parser.add_argument("--unit-value", type=float, default=0)
    item_parser.add_argument("--quantity", type=float, default=0)

    reading_parser = subparsers.add_parser("reading", help="Manual hour-meter reading")
    reading_parser.add_argument("machine_id", type=str)
    reading_parser.add_argument("value", type=float)
    reading_parser.add_argument("--date", type=str, help="ISO timestamp (default: now)")

    price_parser = subparsers.add_parser("price", help="Set a fuel price")
    price_parser.add_argument("kind", choices=fuel_kinds)
    price_parser.add_argument("price", type=float, help="Price per liter")

    subparsers.add_parser("machines", help="List machines")
    subparsers.add_parser("alerts", help="Show upcoming and overdue maintenance")

    plan_parser = subparsers.add_parser("plan", help="Maintenance plan of a machine")
    plan_parser.add_argument("machine_id", type=str)

    ledger_parser = subparsers.add_parser("ledger", help="Hour-meter ledger")
    ledger_parser.add_argument("machine_id", type=str)
    ledger_parser.add_argument(
        "--asc", action="store_true", help="Oldest first instead of newest first"
    )

    fuel_parser = subparsers.add_parser("fuel", help="Record a fueling")
    fuel_parser.add_argument("machine_id", type=str)
    fuel_parser.add_argument("collaborator_id", type=str)
    fuel_parser.add_argument("--kind", default="Diesel S10", choices=fuel_kinds)
    fuel_parser.add_argument("--liters", type=float, required=True)
    fuel_parser.add_argument("--odometer", type=float, required=True)
    fuel_parser.add_argument(
        "--cost", type=float, help="Total cost (default: liters x configured price)"
    )
    fuel_parser.add_argument("--date", type=str, help="ISO timestamp (default: now)")
    fuel_parser.add_argument("--notes", type=str)
    fuel_parser.add_argument("--dry-run", action="store_true")

    revise_parser = subparsers.add_parser("revise-fuel", help="Correct a fueling")
    revise_parser.add_argument("event_id", type=str)
    revise_parser.add_argument("--liters", type=float)
    revise_parser.add_argument("--odometer", type=float)
    revise_parser.add_argument("--cost", type=float)
    revise_parser.add_argument("--date", type=str)
    revise_parser.add_argument("--notes", type=str)
    revise_parser.add_argument("--dry-run", action="store_true")

    maint_parser = subparsers.add_parser("maintenance", help="Record maintenance")
    maint_parser.add_argument("machine_id", type=str)
    maint_parser.add_argument("collaborator_id", type=str)
    maint_parser.add_argument("type", choices=[t.value for t in MaintenanceType])
    maint_parser.add_argument("--hour-meter", type=float, required=True)
    maint_parser.add_argument("--cost", type=float, default=0)
    maint_parser.add_argument("--date", type=str, help="ISO timestamp (default: now)")
    maint_parser.add_argument("--notes", type=str)
    maint_parser.add_argument(
        "--part",
        type=parse_part,
        action="append",
        default=[],
        help="Part used as ITEM_ID:QUANTITY (repeatable)",
    )
    maint_parser.add_argument("--dry-run", action="store_true")

    stock_parser = subparsers.add_parser("stock", help="List warehouse stock")
    stock_parser.add_argument(
        "--low", action="store_true", help="Only items running low"
    )

    subparsers.add_parser("costs", help="Summarize spend")
    subparsers.add_parser("validate", help="Validate the farm file")
    return parser


def open_engine(farm_file: Path, dry_run: bool = False) -> FleetEngine:
    """Engine over the farm file; dry runs write to memory only."""
    store = YamlFileStore(farm_file.parent)
    key = farm_file.stem
    if dry_run:
        document = store.get(key)
        store = MemoryStore({key: document} if document is not None else None)
    return FleetEngine(store, key=key)


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.command == "validate":
        errors = validate_farm_file(args.farm_file, load_schema())
        if errors:
            print(f"FAIL: {args.farm_file.name}")
            for error in errors:
                print(f"  {error}")
            return 1
        print(f"OK: {args.farm_file.name}")
        return 0

    if args.command != "init" and not args.farm_file.exists():
        print(f"Error: File not found: {args.farm_file}")
        return 1

    try:
        engine = open_engine(args.farm_file, getattr(args, "dry_run", False))
        return COMMANDS[args.command](engine, args)
    except FleetError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
