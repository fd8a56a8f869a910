"""
Hour-meter ledger: accepts counter observations and derives each
machine's canonical hour meter.
"""

import logging
from typing import List, NamedTuple, Optional

from .calculations import parse_timestamp
from .farm import Farm
from .hour_meter_entry import HourMeterLogEntry
from .machine import Machine
from .status import HourMeterSource

logger = logging.getLogger(__name__)


class Observation(NamedTuple):
    """An hour-meter reading attributable to a machine."""

    date: str
    value: float
    source_id: str


def record_observation(
    machine: Machine,
    date: str,
    value: float,
    collaborator_id: str,
    source: HourMeterSource,
    source_id: str,
) -> Optional[HourMeterLogEntry]:
    """
    Apply a reading to the machine's ledger.

    Only readings above the current hour meter are accepted; an accepted
    reading is appended to the history and becomes the hour meter.
    Returns the new entry, or None when the reading was not applied.
    """
    if value <= machine.hour_meter:
        logger.info(
            f"Hour meter reading ignored: machine={machine.id} "
            f"value={value} current={machine.hour_meter} source={source_id}"
        )
        return None

    entry = HourMeterLogEntry(
        date=date,
        value=value,
        collaborator_id=collaborator_id,
        source=source,
        source_id=source_id,
    )
    machine.hour_meter_history.append(entry)
    machine.hour_meter = value
    return entry


def observations_for(farm: Farm, machine: Machine) -> List[Observation]:
    """
    Every reading attributable to the machine, in aggregate order:
    fuel events, then maintenance events, then manual ledger entries.
    """
    observations = [
        Observation(e.date, e.odometer, e.id) for e in farm.fuel_events_for(machine.id)
    ]
    observations += [
        Observation(e.date, e.hour_meter, e.id)
        for e in farm.maintenance_events_for(machine.id)
    ]
    observations += [
        Observation(h.date, h.value, h.source_id)
        for h in machine.hour_meter_history
        if h.source == HourMeterSource.MANUAL
    ]
    return observations


def latest_observation(
    observations: List[Observation], preferred_id: Optional[str] = None
) -> Optional[Observation]:
    """
    Most recent observation by timestamp.

    Ties on timestamp go to preferred_id (the most recently edited
    event), then to the observation appearing last in the list.
    """
    if not observations:
        return None
    ranked = [
        (parse_timestamp(o.date), o.source_id == preferred_id, index)
        for index, o in enumerate(observations)
    ]
    best = max(range(len(observations)), key=lambda i: ranked[i])
    return observations[best]


def revise_observation(
    farm: Farm, machine: Machine, source_id: str, new_date: str, new_value: float
) -> float:
    """
    Correct a reading after its originating event was edited.

    The ledger entry created by the event (if the reading was accepted)
    is updated in place. The hour meter is then recomputed as the value
    of the most recent observation by time, which may lower it when a
    wrong high reading is corrected. The farm must already hold the
    edited event. Returns the new hour meter.
    """
    entry = machine.find_history_entry(source_id)
    if entry is not None:
        entry.date = new_date
        entry.value = new_value

    latest = latest_observation(observations_for(farm, machine), source_id)
    if latest is not None:
        if latest.value != machine.hour_meter:
            logger.info(
                f"Hour meter recomputed: machine={machine.id} "
                f"{machine.hour_meter} -> {latest.value} source={latest.source_id}"
            )
        machine.hour_meter = latest.value
    return machine.hour_meter
