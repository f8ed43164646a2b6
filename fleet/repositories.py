"""
Repository interfaces and their JSON-backed implementations.

Every JSON repository loads its whole file when constructed and rewrites the
whole file after each mutation. Records use the PascalCase keys of the data
files (see schema.yaml).
"""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

from .brand import BrandCatalog
from .errors import ErrorKind, ValidationError
from .repair import Repair, RepairType
from .store import load_records, parse_decimal, save_records
from .trip_entry import TripEntry
from .user import User, UserType
from .vehicle import Vehicle, VehicleType, normalize_plate

logger = logging.getLogger(__name__)

# Written for the capacity field that does not apply to the vehicle type.
NOT_APPLICABLE = 9999

T = TypeVar("T")


# =============================================================================
# Interfaces
# =============================================================================


class BrandCatalogRepository(ABC):
    @abstractmethod
    def load(self) -> BrandCatalog: ...

    @abstractmethod
    def save(self, catalog: BrandCatalog) -> None: ...


class VehicleRepository(ABC):
    @abstractmethod
    def get_all(self) -> List[Vehicle]: ...

    @abstractmethod
    def find_by_id(self, vehicle_id: uuid.UUID) -> Optional[Vehicle]: ...

    @abstractmethod
    def find_by_license_plate(self, plate: str) -> Optional[Vehicle]: ...

    def license_plate_exists(self, plate: str) -> bool:
        return self.find_by_license_plate(plate) is not None

    @abstractmethod
    def add(self, vehicle: Vehicle) -> None: ...

    @abstractmethod
    def remove(self, vehicle_id: uuid.UUID) -> bool: ...

    @abstractmethod
    def update(self, vehicle: Vehicle) -> None: ...

    @abstractmethod
    def modify(self, vehicle_id: uuid.UUID, mutation: Callable[[Vehicle], T]) -> T: ...


class UserRepository(ABC):
    @abstractmethod
    def get_all(self) -> List[User]: ...

    @abstractmethod
    def find_by_id(self, user_id: uuid.UUID) -> Optional[User]: ...

    @abstractmethod
    def add(self, user: User) -> None: ...

    @abstractmethod
    def remove(self, user_id: uuid.UUID) -> bool: ...


class TripLogRepository(ABC):
    @abstractmethod
    def get_all(self) -> List[TripEntry]: ...

    @abstractmethod
    def find_by_id(self, trip_id: uuid.UUID) -> Optional[TripEntry]: ...

    @abstractmethod
    def add(self, entry: TripEntry) -> None: ...

    @abstractmethod
    def remove(self, trip_id: uuid.UUID) -> bool: ...


# =============================================================================
# Record conversion
# =============================================================================


def _parse_date(value: str) -> date:
    return date.fromisoformat(value)


def _brand_to_dict(name: str, models: List[str]) -> Dict[str, Any]:
    return {"Name": name, "Models": sorted(models, key=str.lower)}


def _vehicle_to_dict(vehicle: Vehicle) -> Dict[str, Any]:
    """Serialize a Vehicle to the vehicles.json record format."""
    return {
        "Id": str(vehicle.id),
        "Type": vehicle.type.value,
        "LicensePlate": vehicle.license_plate,
        "Brand": vehicle.brand,
        "Model": vehicle.model,
        "Year": vehicle.year,
        "PurchaseValue": vehicle.purchase_value,
        "Seats": vehicle.seats if vehicle.is_car else NOT_APPLICABLE,
        "MaxPayloadKg": NOT_APPLICABLE if vehicle.is_car else vehicle.max_payload_kg,
        "Depreciations": [
            {"Date": d.date.isoformat(), "Amount": d.amount, "Reason": d.reason}
            for d in vehicle.depreciations
        ],
        "Repairs": [
            {
                "Id": str(r.id),
                "Date": r.date.isoformat(),
                "Description": r.description,
                "Type": r.type.value,
                "Cost": r.cost,
                "Workshop": r.workshop,
            }
            for r in vehicle.repairs
        ],
    }


def _vehicle_from_dict(dct: Dict[str, Any]) -> Vehicle:
    """Build a Vehicle from a record, replaying its bookkeeping history."""
    vehicle = Vehicle(
        uuid.UUID(dct["Id"]),
        VehicleType(dct["Type"].strip().upper()),
        dct["LicensePlate"],
        dct["Brand"],
        dct["Model"],
        dct["Year"],
        parse_decimal(dct["PurchaseValue"]),
        seats=dct.get("Seats"),
        max_payload_kg=parse_decimal(dct.get("MaxPayloadKg")),
    )
    for d in dct.get("Depreciations") or []:
        vehicle.add_depreciation(
            parse_decimal(d["Amount"]), d["Reason"], _parse_date(d["Date"])
        )
    for r in dct.get("Repairs") or []:
        vehicle.repairs.append(
            Repair(
                uuid.UUID(r["Id"]),
                _parse_date(r["Date"]),
                r["Description"],
                RepairType(r["Type"]),
                parse_decimal(r["Cost"]),
                r["Workshop"],
            )
        )
    return vehicle


def _user_to_dict(user: User) -> Dict[str, Any]:
    if user.type is UserType.PERSON:
        return {
            "Id": str(user.id),
            "Type": user.type.value,
            "FirstName": user.first_name,
            "LastName": user.last_name,
        }
    return {"Id": str(user.id), "Type": user.type.value, "CompanyName": user.company_name}


def _user_from_dict(dct: Dict[str, Any]) -> User:
    return User(
        uuid.UUID(dct["Id"]),
        UserType(dct["Type"].strip().lower()),
        first_name=dct.get("FirstName"),
        last_name=dct.get("LastName"),
        company_name=dct.get("CompanyName"),
    )


def _trip_to_dict(entry: TripEntry) -> Dict[str, Any]:
    return {
        "Id": str(entry.id),
        "Date": entry.date.isoformat(),
        "UserId": str(entry.user_id),
        "VehicleId": str(entry.vehicle_id),
        "Reason": entry.reason,
        "Kilometers": entry.kilometers,
    }


def _trip_from_dict(dct: Dict[str, Any]) -> TripEntry:
    return TripEntry(
        uuid.UUID(dct["Id"]),
        _parse_date(dct["Date"]),
        uuid.UUID(dct["UserId"]),
        uuid.UUID(dct["VehicleId"]),
        dct["Reason"],
        parse_decimal(dct["Kilometers"]),
    )


# =============================================================================
# JSON implementations
# =============================================================================


class JsonBrandCatalogRepository(BrandCatalogRepository):
    """Brand catalog stored in brands.json."""

    def __init__(self, filename: Union[str, Path]):
        self.path = Path(filename)

    def load(self) -> BrandCatalog:
        catalog = BrandCatalog()
        for record in load_records(self.path, "brands"):
            try:
                catalog.add_brand(record["Name"])
                for model in record["Models"]:
                    catalog.add_model(record["Name"], model)
            except ValidationError as e:
                logger.warning("Skipping brand record in %s: %s", self.path.name, e)
        logger.info("Loaded %d brands from %s", len(catalog.brands), self.path)
        return catalog

    def save(self, catalog: BrandCatalog) -> None:
        brands = sorted(catalog.brands, key=lambda b: b.name.lower())
        save_records(self.path, [_brand_to_dict(b.name, b.models) for b in brands])


class _JsonEntityRepository(ABC):
    """Shared load/save plumbing for id-keyed entity collections."""

    kind = ""

    def __init__(self, filename: Union[str, Path]):
        self.path = Path(filename)
        self._items: List[Any] = self._load()

    @abstractmethod
    def _from_dict(self, dct: Dict[str, Any]) -> Any: ...

    @abstractmethod
    def _to_dict(self, item: Any) -> Dict[str, Any]: ...

    def _load(self) -> List[Any]:
        items = []
        for record in load_records(self.path, self.kind):
            try:
                items.append(self._from_dict(record))
            except (ValidationError, ValueError, KeyError, ArithmeticError) as e:
                logger.warning(
                    "Skipping %s record %s in %s: %s",
                    self.kind, record.get("Id"), self.path.name, e,
                )
        logger.info("Loaded %d %s from %s", len(items), self.kind, self.path)
        return items

    def _save(self) -> None:
        save_records(self.path, [self._to_dict(item) for item in self._items])

    def get_all(self) -> List[Any]:
        return list(self._items)

    def find_by_id(self, item_id: uuid.UUID) -> Optional[Any]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def add(self, item: Any) -> None:
        self._items.append(item)
        self._save()

    def remove(self, item_id: uuid.UUID) -> bool:
        for i, item in enumerate(self._items):
            if item.id == item_id:
                del self._items[i]
                self._save()
                return True
        return False


class JsonVehicleRepository(_JsonEntityRepository, VehicleRepository):
    """Vehicles stored in vehicles.json."""

    kind = "vehicles"

    def _from_dict(self, dct: Dict[str, Any]) -> Vehicle:
        return _vehicle_from_dict(dct)

    def _to_dict(self, item: Vehicle) -> Dict[str, Any]:
        return _vehicle_to_dict(item)

    def get_all(self) -> List[Vehicle]:
        """All vehicles ordered by brand, model and plate."""
        return sorted(
            self._items,
            key=lambda v: (v.brand.lower(), v.model.lower(), v.license_plate),
        )

    def find_by_license_plate(self, plate: str) -> Optional[Vehicle]:
        wanted = normalize_plate(plate)
        for vehicle in self._items:
            if normalize_plate(vehicle.license_plate) == wanted:
                return vehicle
        return None

    def update(self, vehicle: Vehicle) -> None:
        """Replace the stored vehicle with the same id. Unknown ids are ignored."""
        for i, item in enumerate(self._items):
            if item.id == vehicle.id:
                self._items[i] = vehicle
                self._save()
                return

    def modify(self, vehicle_id: uuid.UUID, mutation: Callable[[Vehicle], T]) -> T:
        """
        Apply a mutation to a stored vehicle and persist it in one step.

        If the mutation raises, nothing is written.
        """
        vehicle = self.find_by_id(vehicle_id)
        if vehicle is None:
            raise ValidationError("Vehicle not found.", ErrorKind.NOT_FOUND)
        result = mutation(vehicle)
        self._save()
        return result


class JsonUserRepository(_JsonEntityRepository, UserRepository):
    """Users stored in users.json."""

    kind = "users"

    def _from_dict(self, dct: Dict[str, Any]) -> User:
        return _user_from_dict(dct)

    def _to_dict(self, item: User) -> Dict[str, Any]:
        return _user_to_dict(item)

    def add(self, user: User) -> None:
        """Store a user. A user whose id is already stored is ignored."""
        if self.find_by_id(user.id) is not None:
            return
        super().add(user)


class JsonTripLogRepository(_JsonEntityRepository, TripLogRepository):
    """Trips stored in trips.json."""

    kind = "trips"

    def _from_dict(self, dct: Dict[str, Any]) -> TripEntry:
        return _trip_from_dict(dct)

    def _to_dict(self, item: TripEntry) -> Dict[str, Any]:
        return _trip_to_dict(item)
