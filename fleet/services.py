"""
Application services.

Services check rules that span more than one entity (known brand/model,
unique plates and names, trip references) and provide sorted views for the
console.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from .errors import ErrorKind, ValidationError
from .repair import Repair, RepairType
from .repositories import (
    BrandCatalogRepository,
    TripLogRepository,
    UserRepository,
    VehicleRepository,
)
from .trip_entry import TripEntry
from .user import User
from .vehicle import Vehicle, vehicle_label

logger = logging.getLogger(__name__)


def short_id(value: uuid.UUID) -> str:
    """First 8 hex digits of an id, as shown in listings."""
    return str(value)[:8]


def _match_prefix(items: Iterable, prefix: str):
    prefix = (prefix or "").strip().lower()
    if not prefix:
        return None
    for item in items:
        if str(item.id).lower().startswith(prefix):
            return item
    return None


# =============================================================================
# Brand catalog
# =============================================================================


class BrandCatalogService:
    """Master data for brands and models. The catalog is loaded once."""

    def __init__(self, repo: BrandCatalogRepository):
        self._repo = repo
        self._catalog = repo.load()

    def get_brands(self) -> List[str]:
        return sorted((b.name for b in self._catalog.brands), key=str.lower)

    def get_models(self, brand_name: str) -> List[str]:
        brand = self._catalog.get_brand(brand_name)
        if brand is None:
            return []
        return sorted(brand.models, key=str.lower)

    def add_brand(self, brand_name: str) -> None:
        self._catalog.add_brand(brand_name)
        self._repo.save(self._catalog)
        logger.info("Brand '%s' saved", brand_name.strip())

    def add_model(self, brand_name: str, model: str) -> None:
        self._catalog.add_model(brand_name, model)
        self._repo.save(self._catalog)
        logger.info("Model '%s' saved for brand '%s'", model.strip(), brand_name.strip())

    def remove_brand(self, brand_name: str) -> bool:
        removed = self._catalog.remove_brand(brand_name)
        if removed:
            self._repo.save(self._catalog)
            logger.info("Brand '%s' removed", brand_name.strip())
        return removed

    def remove_model(self, brand_name: str, model: str) -> bool:
        removed = self._catalog.remove_model(brand_name, model)
        if removed:
            self._repo.save(self._catalog)
            logger.info("Model '%s' removed from '%s'", model.strip(), brand_name.strip())
        return removed

    def ensure_known_brand_model(self, brand_name: str, model: str) -> None:
        if not self._catalog.is_known_model(brand_name, model):
            raise ValidationError(
                f"Unknown combination: brand '{brand_name}' / model '{model}'. "
                "Add it to the master data first.",
                ErrorKind.UNKNOWN_MODEL,
            )


# =============================================================================
# Vehicles
# =============================================================================


class VehicleService:
    """Vehicle registration plus depreciation and repair bookkeeping."""

    def __init__(self, vehicles: VehicleRepository, catalog: BrandCatalogService):
        self._vehicles = vehicles
        self._catalog = catalog

    def get_all(self) -> List[Vehicle]:
        return self._vehicles.get_all()

    def get_required(self, vehicle_id: uuid.UUID) -> Vehicle:
        vehicle = self._vehicles.find_by_id(vehicle_id)
        if vehicle is None:
            raise ValidationError("Vehicle not found.", ErrorKind.NOT_FOUND)
        return vehicle

    def find_by_id_prefix(self, prefix: str) -> Optional[Vehicle]:
        return _match_prefix(self._vehicles.get_all(), prefix)

    def _ensure_new_vehicle(self, license_plate: str, brand: str, model: str) -> None:
        self._catalog.ensure_known_brand_model(brand, model)
        if self._vehicles.license_plate_exists(license_plate):
            raise ValidationError(
                f"License plate '{license_plate.strip()}' already exists.",
                ErrorKind.DUPLICATE,
            )

    def add_car(
        self,
        license_plate: str,
        brand: str,
        model: str,
        year: int,
        seats: int,
        purchase_value: Decimal,
    ) -> Vehicle:
        self._ensure_new_vehicle(license_plate, brand, model)
        car = Vehicle.car(license_plate, brand, model, year, seats, purchase_value)
        self._vehicles.add(car)
        logger.info("Car %s added (%s)", car.license_plate, short_id(car.id))
        return car

    def add_truck(
        self,
        license_plate: str,
        brand: str,
        model: str,
        year: int,
        max_payload_kg: Decimal,
        purchase_value: Decimal,
    ) -> Vehicle:
        self._ensure_new_vehicle(license_plate, brand, model)
        truck = Vehicle.truck(
            license_plate, brand, model, year, max_payload_kg, purchase_value
        )
        self._vehicles.add(truck)
        logger.info("Truck %s added (%s)", truck.license_plate, short_id(truck.id))
        return truck

    def remove_vehicle(self, vehicle_id: uuid.UUID) -> bool:
        removed = self._vehicles.remove(vehicle_id)
        if removed:
            logger.info("Vehicle %s removed", short_id(vehicle_id))
        return removed

    def add_depreciation(
        self,
        vehicle_id: uuid.UUID,
        amount: Decimal,
        reason: str,
        entry_date: Optional[date] = None,
    ) -> None:
        self._vehicles.modify(
            vehicle_id, lambda v: v.add_depreciation(amount, reason, entry_date)
        )
        logger.info("Depreciation of %s booked on %s", amount, short_id(vehicle_id))

    def add_repair(
        self,
        vehicle_id: uuid.UUID,
        repair_date: date,
        description: str,
        repair_type: RepairType,
        cost: Decimal,
        workshop: str,
    ) -> Repair:
        repair = self._vehicles.modify(
            vehicle_id,
            lambda v: v.add_repair(repair_date, description, repair_type, cost, workshop),
        )
        logger.info("Repair %s added to %s", short_id(repair.id), short_id(vehicle_id))
        return repair

    def remove_repair(self, vehicle_id: uuid.UUID, repair_id: uuid.UUID) -> bool:
        return self._vehicles.modify(vehicle_id, lambda v: v.remove_repair(repair_id))

    def get_fleet_value(self) -> Decimal:
        """Sum of the residual values of all vehicles."""
        return sum((v.residual_value for v in self._vehicles.get_all()), Decimal("0"))

    def get_fleet_repair_cost(self) -> Decimal:
        return sum(
            (v.total_repair_cost() for v in self._vehicles.get_all()), Decimal("0")
        )


# =============================================================================
# Users
# =============================================================================


class UserService:
    """Persons and companies. Display names are unique ignoring case."""

    def __init__(self, repo: UserRepository):
        self._repo = repo

    def get_all(self) -> List[User]:
        return sorted(self._repo.get_all(), key=lambda u: u.display_name.lower())

    def find_by_id_prefix(self, prefix: str) -> Optional[User]:
        return _match_prefix(self._repo.get_all(), prefix)

    def add_person(self, first_name: str, last_name: str) -> User:
        return self._add(User.person(first_name, last_name))

    def add_company(self, name: str) -> User:
        return self._add(User.company(name))

    def remove_user(self, user_id: uuid.UUID) -> bool:
        removed = self._repo.remove(user_id)
        if removed:
            logger.info("User %s removed", short_id(user_id))
        return removed

    def _add(self, user: User) -> User:
        wanted = user.display_name.lower()
        if any(u.display_name.lower() == wanted for u in self._repo.get_all()):
            raise ValidationError(
                f"User '{user.display_name}' already exists.", ErrorKind.DUPLICATE
            )
        self._repo.add(user)
        logger.info("User '%s' added (%s)", user.display_name, short_id(user.id))
        return user


# =============================================================================
# Trip log
# =============================================================================


@dataclass
class TripDisplay:
    """A trip with its user and vehicle resolved to display text."""

    id: uuid.UUID
    date: date
    user: str
    vehicle: str
    reason: str
    kilometers: Decimal


class TripLogService:
    """Trip log with reference checks on write and resolved views on read."""

    def __init__(
        self,
        trips: TripLogRepository,
        users: UserRepository,
        vehicles: VehicleRepository,
    ):
        self._trips = trips
        self._users = users
        self._vehicles = vehicles

    def get_all(self) -> List[TripEntry]:
        """All trips, newest first."""
        entries = sorted(self._trips.get_all(), key=lambda t: str(t.id))
        return sorted(entries, key=lambda t: t.date, reverse=True)

    def get_by_user(self, user_id: uuid.UUID) -> List[TripEntry]:
        return [t for t in self.get_all() if t.user_id == user_id]

    def get_by_vehicle(self, vehicle_id: uuid.UUID) -> List[TripEntry]:
        return [t for t in self.get_all() if t.vehicle_id == vehicle_id]

    def get_by_date_range(self, start: date, end: date) -> List[TripEntry]:
        """Trips with start <= date <= end."""
        return [t for t in self.get_all() if start <= t.date <= end]

    def find_by_id_prefix(self, prefix: str) -> Optional[TripEntry]:
        return _match_prefix(self.get_all(), prefix)

    def add_trip(
        self,
        trip_date: date,
        user_id: uuid.UUID,
        vehicle_id: uuid.UUID,
        reason: str,
        kilometers: Decimal,
    ) -> TripEntry:
        if self._users.find_by_id(user_id) is None:
            raise ValidationError(
                "Unknown user (user id does not exist).", ErrorKind.REFERENTIAL_INTEGRITY
            )
        if self._vehicles.find_by_id(vehicle_id) is None:
            raise ValidationError(
                "Unknown vehicle (vehicle id does not exist).",
                ErrorKind.REFERENTIAL_INTEGRITY,
            )
        entry = TripEntry(None, trip_date, user_id, vehicle_id, reason, kilometers)
        self._trips.add(entry)
        logger.info("Trip %s added (%s km)", short_id(entry.id), entry.kilometers)
        return entry

    def remove_trip(self, trip_id: uuid.UUID) -> bool:
        return self._trips.remove(trip_id)

    @staticmethod
    def total_kilometers(entries: Iterable[TripEntry]) -> Decimal:
        return sum((t.kilometers for t in entries), Decimal("0"))

    def to_display(self, entry: TripEntry) -> TripDisplay:
        """Resolve references, using placeholders for deleted users/vehicles."""
        user = self._users.find_by_id(entry.user_id)
        vehicle = self._vehicles.find_by_id(entry.vehicle_id)
        user_text = user.display_name if user else f"[User {short_id(entry.user_id)}]"
        vehicle_text = (
            vehicle_label(vehicle) if vehicle else f"[Vehicle {short_id(entry.vehicle_id)}]"
        )
        return TripDisplay(
            entry.id, entry.date, user_text, vehicle_text, entry.reason, entry.kilometers
        )
