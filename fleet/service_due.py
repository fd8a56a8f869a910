"""ServiceDue dataclass for calculated per-category service status."""

from dataclasses import dataclass

from .status import ServiceCategory, Status


@dataclass
class ServiceDue:
    """Calculated service due information for one category of a machine."""

    category: ServiceCategory
    status: Status
    interval: float
    last_service: float
    due_at: float
    remaining: float
    progress_percent: float

    @property
    def is_due(self) -> bool:
        return self.status in (Status.OVERDUE, Status.DUE_SOON)

    @property
    def label(self) -> str:
        return self.category.label
