"""Exception types raised by the fleet engine."""


class FleetError(Exception):
    """Base class for all engine errors."""


class ValidationError(FleetError):
    """A required field is missing or outside its allowed range."""


class NotFoundError(FleetError):
    """A referenced machine, collaborator, item or event does not exist."""

    def __init__(self, kind: str, ident: str):
        super().__init__(f"{kind} not found: {ident}")
        self.kind = kind
        self.ident = ident


class InsufficientStockWarning(FleetError):
    """Requested part usage exceeds on-hand quantity."""

    def __init__(self, shortages):
        self.shortages = shortages
        details = ", ".join(
            f"{s.item.code} (requested {s.requested}, on hand {s.on_hand})"
            for s in shortages
        )
        super().__init__(f"Insufficient stock: {details}")


class PersistenceError(FleetError):
    """The farm document could not be loaded from or saved to the store."""


class DocumentError(FleetError):
    """A stored farm document does not match the schema."""
