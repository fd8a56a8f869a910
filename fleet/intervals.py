"""
Maintenance interval tracker.

Each machine tracks four categories independently. For a category c:

    due_at    = last_maintenance[c] + maintenance_config[c]
    remaining = due_at - hour_meter

A category with no interval (or interval <= 0), or a machine without
last-maintenance records, is unmonitored.
"""

from typing import Iterator, List, Tuple

from .calculations import (
    calc_due_at,
    calc_progress,
    calc_remaining,
    check_status,
    is_monitored,
)
from .machine import LastMaintenance, Machine
from .service_due import ServiceDue
from .status import MaintenanceType, ServiceCategory


def advance_counters(
    last: LastMaintenance, maintenance_type: MaintenanceType, hour_meter: float
) -> LastMaintenance:
    """
    Record service at hour_meter for every category the work covers.

    Counters only move forward: each becomes max(current, hour_meter).
    """
    for category in maintenance_type.categories:
        current = last.get(category) or 0
        if hour_meter > current:
            last.set(category, hour_meter)
    return last


def apply_maintenance(
    machine: Machine, maintenance_type: MaintenanceType, hour_meter: float
) -> LastMaintenance:
    """Advance the machine's counters, starting from zeros if it has none."""
    if machine.last_maintenance is None:
        machine.last_maintenance = LastMaintenance()
    return advance_counters(machine.last_maintenance, maintenance_type, hour_meter)


def monitored_categories(
    machine: Machine,
) -> Iterator[Tuple[ServiceCategory, float, float]]:
    """Yield (category, interval, last service) for each monitored category."""
    config = machine.maintenance_config
    last = machine.last_maintenance
    if config is None or last is None:
        return
    for category in ServiceCategory:
        interval = config.get(category)
        last_service = last.get(category)
        if is_monitored(interval) and last_service is not None:
            yield category, interval, last_service


def remaining_hours(machine: Machine, category: ServiceCategory):
    """Hours until the category is due, or None when unmonitored."""
    for monitored, interval, last_service in monitored_categories(machine):
        if monitored == category:
            return calc_remaining(calc_due_at(last_service, interval), machine.hour_meter)
    return None


def plan_status(machine: Machine, due_soon: float = 50) -> List[ServiceDue]:
    """Service status of every monitored category of a machine."""
    statuses = []
    for category, interval, last_service in monitored_categories(machine):
        due_at = calc_due_at(last_service, interval)
        remaining = calc_remaining(due_at, machine.hour_meter)
        statuses.append(
            ServiceDue(
                category=category,
                status=check_status(remaining, due_soon),
                interval=interval,
                last_service=last_service,
                due_at=due_at,
                remaining=remaining,
                progress_percent=calc_progress(
                    last_service, interval, machine.hour_meter
                ),
            )
        )
    return statuses
