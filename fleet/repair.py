"""Repair class for repair and maintenance work done on a vehicle."""

import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from .guard import money, not_blank


class RepairType(Enum):
    """Kind of repair. Values are the names stored in vehicles.json."""

    DAMAGE = "Damage"
    WEAR_PART = "WearPart"
    MAINTENANCE = "Maintenance"
    INSPECTION = "Inspection"
    OTHER = "Other"

    @property
    def label(self) -> str:
        return _REPAIR_LABELS[self]


_REPAIR_LABELS = {
    RepairType.DAMAGE: "Schaden",
    RepairType.WEAR_PART: "Verschleissteil",
    RepairType.MAINTENANCE: "Wartung",
    RepairType.INSPECTION: "Inspektion",
    RepairType.OTHER: "Sonstiges",
}


class Repair:
    """A single repair with its cost and the workshop that did it."""

    def __init__(
        self,
        repair_id: Optional[uuid.UUID],
        repair_date: date,
        description: str,
        repair_type: RepairType,
        cost: Decimal,
        workshop: str,
    ):
        self.id = repair_id if repair_id and repair_id.int else uuid.uuid4()
        self.date = repair_date
        self.description = not_blank(description, "Description")
        self.type = RepairType(repair_type)
        self.cost = money(cost, "Cost")
        self.workshop = not_blank(workshop, "Workshop")
