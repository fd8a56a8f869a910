"""Helper functions for due-point, status and usage-rate calculations."""

import math
from datetime import date, datetime, timezone
from typing import List, Optional, Union

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from .hour_meter_entry import HourMeterLogEntry
from .status import Status

DEFAULT_USAGE_RATE = 4.0
SECONDS_PER_DAY = 24 * 3600


def parse_timestamp(value: Union[str, datetime, date]) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        parsed = isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: Union[str, datetime, date]) -> str:
    """Normalize a timestamp to the ISO-8601 string stored in documents."""
    return parse_timestamp(value).isoformat()


def days_between(start: str, end: str) -> float:
    """Fractional days from start to end."""
    delta = parse_timestamp(end) - parse_timestamp(start)
    return delta.total_seconds() / SECONDS_PER_DAY


def is_monitored(interval: Optional[float]) -> bool:
    return interval is not None and interval > 0


def calc_due_at(last: Optional[float], interval: Optional[float]) -> Optional[float]:
    """Hour-meter value at which the next service is due: last + interval."""
    if not is_monitored(interval) or last is None:
        return None
    return last + interval


def calc_remaining(due_at: Optional[float], hour_meter: float) -> Optional[float]:
    """Hours left until due. Negative means overdue."""
    if due_at is None:
        return None
    return due_at - hour_meter


def calc_progress(last: float, interval: float, hour_meter: float) -> float:
    """Share of the interval already used, in percent."""
    return (hour_meter - last) / interval * 100


def check_status(remaining: float, soon_threshold: float) -> Status:
    """Determine status from the hours left until due."""
    if remaining <= 0:
        return Status.OVERDUE
    if remaining <= soon_threshold:
        return Status.DUE_SOON
    return Status.OK


def estimate_usage_rate(
    history: List[HourMeterLogEntry], default: float = DEFAULT_USAGE_RATE
) -> float:
    """
    Average hours per day over a machine's ledger.

    Uses the earliest and latest entries by date:
    - Fewer than two entries, or a span of one day or less: default
    - No usage or a negative hour delta: default
    - Otherwise: (last value - first value) / days between them
    """
    if len(history) < 2:
        return default
    ordered = sorted(history, key=lambda h: parse_timestamp(h.date))
    first, last = ordered[0], ordered[-1]
    span = days_between(first.date, last.date)
    if span <= 1:
        return default
    delta = last.value - first.value
    if delta <= 0:
        return default
    return delta / span


def project_due_date(
    remaining: Optional[float], rate: float, today: date
) -> Optional[date]:
    """Calendar date the remaining hours run out at the given rate."""
    if remaining is None or remaining < 0 or rate <= 0:
        return None
    return today + relativedelta(days=math.ceil(remaining / rate))
