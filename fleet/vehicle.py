"""Vehicle class - the aggregate for a car or truck and its bookkeeping."""

import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from .depreciation_entry import DepreciationEntry
from .errors import ErrorKind, ValidationError
from .guard import in_range, money, not_blank, to_cents
from .repair import Repair, RepairType

MIN_YEAR = 1950
MAX_SEATS = 9
MAX_PAYLOAD_KG = Decimal("100000")
MIN_PAYLOAD_KG = Decimal("0.1")


class VehicleType(Enum):
    """Vehicle variants. Values are the type tags stored in vehicles.json."""

    CAR = "PKW"
    TRUCK = "LKW"


def normalize_plate(plate: str) -> str:
    """Canonical form of a license plate used for storage and comparison."""
    return (plate or "").strip().upper()


class Vehicle:
    """
    A fleet vehicle with its depreciation and repair history.

    Use Vehicle.car() or Vehicle.truck() to build one; the constructor
    validates the fields shared by both variants plus the variant payload.
    """

    def __init__(
        self,
        vehicle_id: Optional[uuid.UUID],
        vehicle_type: VehicleType,
        license_plate: str,
        brand: str,
        model: str,
        year: int,
        purchase_value: Decimal,
        seats: Optional[int] = None,
        max_payload_kg: Optional[Decimal] = None,
    ):
        self.id = vehicle_id if vehicle_id and vehicle_id.int else uuid.uuid4()
        self.type = VehicleType(vehicle_type)
        self.license_plate = normalize_plate(not_blank(license_plate, "License plate"))
        self.brand = not_blank(brand, "Brand")
        self.model = not_blank(model, "Model")
        self.year = in_range(int(year), MIN_YEAR, date.today().year + 1, "Year")
        self.purchase_value = money(purchase_value, "Purchase value")
        self.residual_value = self.purchase_value
        self.depreciations: List[DepreciationEntry] = []
        self.repairs: List[Repair] = []

        self.seats: Optional[int] = None
        self.max_payload_kg: Optional[Decimal] = None
        if self.type is VehicleType.CAR:
            if seats is None:
                raise ValidationError("Seats must be given for a car.", ErrorKind.BLANK)
            self.seats = in_range(int(seats), 1, MAX_SEATS, "Seats")
        else:
            if max_payload_kg is None:
                raise ValidationError(
                    "Max payload must be given for a truck.", ErrorKind.BLANK
                )
            self.max_payload_kg = to_cents(
                in_range(
                    Decimal(max_payload_kg), MIN_PAYLOAD_KG, MAX_PAYLOAD_KG,
                    "Max payload (kg)",
                )
            )

    @classmethod
    def car(
        cls,
        license_plate: str,
        brand: str,
        model: str,
        year: int,
        seats: int,
        purchase_value: Decimal,
        vehicle_id: Optional[uuid.UUID] = None,
    ) -> "Vehicle":
        return cls(
            vehicle_id, VehicleType.CAR, license_plate, brand, model, year,
            purchase_value, seats=seats,
        )

    @classmethod
    def truck(
        cls,
        license_plate: str,
        brand: str,
        model: str,
        year: int,
        max_payload_kg: Decimal,
        purchase_value: Decimal,
        vehicle_id: Optional[uuid.UUID] = None,
    ) -> "Vehicle":
        return cls(
            vehicle_id, VehicleType.TRUCK, license_plate, brand, model, year,
            purchase_value, max_payload_kg=max_payload_kg,
        )

    @property
    def is_car(self) -> bool:
        return self.type is VehicleType.CAR

    def add_depreciation(
        self, amount: Decimal, reason: str, entry_date: Optional[date] = None
    ) -> DepreciationEntry:
        """
        Book a depreciation and reduce the residual value.

        The entry is fully validated before anything changes, so a rejected
        booking leaves the vehicle untouched.
        """
        entry = DepreciationEntry(entry_date or date.today(), amount, reason)
        if entry.amount > self.residual_value:
            raise ValidationError(
                f"Depreciation of {entry.amount} exceeds residual value "
                f"of {self.residual_value}.",
                ErrorKind.UNDERFLOW,
            )
        self.depreciations.append(entry)
        self.residual_value -= entry.amount
        return entry

    def add_repair(
        self,
        repair_date: date,
        description: str,
        repair_type: RepairType,
        cost: Decimal,
        workshop: str,
    ) -> Repair:
        repair = Repair(None, repair_date, description, repair_type, cost, workshop)
        self.repairs.append(repair)
        return repair

    def remove_repair(self, repair_id: uuid.UUID) -> bool:
        """Remove the first repair with the given id. Missing ids are ignored."""
        for i, repair in enumerate(self.repairs):
            if repair.id == repair_id:
                del self.repairs[i]
                return True
        return False

    def total_repair_cost(self) -> Decimal:
        return sum((r.cost for r in self.repairs), Decimal("0"))

    def total_depreciation(self) -> Decimal:
        return sum((d.amount for d in self.depreciations), Decimal("0"))


def type_label(vehicle: Vehicle) -> str:
    """Short type tag used in listings ("PKW" / "LKW")."""
    return vehicle.type.value


def vehicle_label(vehicle: Vehicle) -> str:
    """One-line description: plate plus brand and model."""
    return f"{vehicle.license_plate} ({vehicle.brand} {vehicle.model})"


def capacity_label(vehicle: Vehicle) -> str:
    """Seats for cars, payload for trucks."""
    if vehicle.is_car:
        return f"{vehicle.seats} seats"
    return f"{vehicle.max_payload_kg:,.1f} kg"
