"""Maintenance alert generation across the whole fleet."""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from .calculations import (
    DEFAULT_USAGE_RATE,
    calc_due_at,
    calc_remaining,
    estimate_usage_rate,
    project_due_date,
)
from .farm import Farm
from .intervals import monitored_categories
from .status import ServiceCategory

ALERT_THRESHOLD = 50


@dataclass
class MaintenanceAlert:
    """A category of a machine that is overdue or due within the threshold."""

    machine_id: str
    machine_name: str
    category: ServiceCategory
    remaining: float
    due_at: float
    estimated_due_date: Optional[date] = None

    @property
    def label(self) -> str:
        return self.category.label

    @property
    def is_overdue(self) -> bool:
        return self.remaining < 0


def generate_maintenance_alerts(
    farm: Farm,
    today: Optional[date] = None,
    threshold: float = ALERT_THRESHOLD,
    default_rate: float = DEFAULT_USAGE_RATE,
) -> List[MaintenanceAlert]:
    """
    Scan every machine not marked inactive and list the monitored
    categories with remaining <= threshold.

    Upcoming alerts get an estimated calendar date from the machine's
    usage rate. Results are sorted by remaining hours, most overdue first.
    """
    today = today or date.today()
    alerts = []
    for machine in farm.machines:
        if not machine.is_active:
            continue
        rate = estimate_usage_rate(machine.hour_meter_history, default_rate)
        for category, interval, last_service in monitored_categories(machine):
            due_at = calc_due_at(last_service, interval)
            remaining = calc_remaining(due_at, machine.hour_meter)
            if remaining > threshold:
                continue
            alerts.append(
                MaintenanceAlert(
                    machine_id=machine.id,
                    machine_name=machine.name,
                    category=category,
                    remaining=remaining,
                    due_at=due_at,
                    estimated_due_date=project_due_date(remaining, rate, today),
                )
            )
    return sorted(alerts, key=lambda a: a.remaining)
