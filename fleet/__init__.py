"""
Vehicle fleet management models and services.

This package provides:
- ValidationError / ErrorKind: the single error type for rejected input
- Brand / BrandCatalog: master data of known brand/model combinations
- Vehicle: cars and trucks with depreciation and repair bookkeeping
- User: persons and companies
- TripEntry: trip log records
- JSON-backed repositories and the application services on top of them
"""

from .errors import ErrorKind, ValidationError
from .brand import Brand, BrandCatalog
from .depreciation_entry import DepreciationEntry
from .repair import Repair, RepairType
from .vehicle import Vehicle, VehicleType
from .user import User, UserType
from .trip_entry import TripEntry
from .repositories import (
    JsonBrandCatalogRepository,
    JsonTripLogRepository,
    JsonUserRepository,
    JsonVehicleRepository,
)
from .services import (
    BrandCatalogService,
    TripDisplay,
    TripLogService,
    UserService,
    VehicleService,
)
from .config import Config, load_config

__all__ = [
    "ErrorKind",
    "ValidationError",
    "Brand",
    "BrandCatalog",
    "DepreciationEntry",
    "Repair",
    "RepairType",
    "Vehicle",
    "VehicleType",
    "User",
    "UserType",
    "TripEntry",
    "JsonBrandCatalogRepository",
    "JsonTripLogRepository",
    "JsonUserRepository",
    "JsonVehicleRepository",
    "BrandCatalogService",
    "TripDisplay",
    "TripLogService",
    "UserService",
    "VehicleService",
    "Config",
    "load_config",
]
