"""Collaborator and FuelPrice records."""

from typing import Optional

from .status import FuelKind


class Collaborator:
    """A person who operates or services machines."""

    def __init__(
            self,
            id: str,
            name: str,
            role: str,
            contact: Optional[str] = None,
            assignments: Optional[str] = None,
    ):
        self.id = id
        self.name = name
        self.role = role
        self.contact = contact
        self.assignments = assignments


class FuelPrice:
    """Current price per liter for a fuel kind."""

    def __init__(self, fuel_kind: FuelKind, price: float):
        self.fuel_kind = fuel_kind
        self.price = price
