"""HourMeterLogEntry class for hour-meter ledger observations."""

from .status import HourMeterSource


class HourMeterLogEntry:
    """A single accepted hour-meter observation for a machine."""

    def __init__(
            self,
            date: str,
            value: float,
            collaborator_id: str,
            source: HourMeterSource,
            source_id: str,
    ):
        self.date = date
        self.value = value
        self.collaborator_id = collaborator_id
        self.source = source
        self.source_id = source_id
