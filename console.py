#!/usr/bin/env python3
"""
Interactive console for the vehicle fleet manager.

Menus:
  Master data - brands and models
  Vehicles    - cars/trucks, depreciation, repairs, fleet summary
  Users       - persons and companies
  Trip log    - trips linking users to vehicles
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from dateutil import parser as date_parser
from tabulate import tabulate

from fleet import (
    BrandCatalogService,
    Config,
    DepreciationEntry,
    JsonBrandCatalogRepository,
    JsonTripLogRepository,
    JsonUserRepository,
    JsonVehicleRepository,
    Repair,
    RepairType,
    TripDisplay,
    TripLogService,
    User,
    UserService,
    ValidationError,
    Vehicle,
    VehicleService,
    load_config,
)
from fleet.guard import MAX_AMOUNT
from fleet.log import configure_logging
from fleet.services import short_id
from fleet.trip_entry import MAX_KILOMETERS, MIN_KILOMETERS
from fleet.vehicle import (
    MAX_PAYLOAD_KG,
    MAX_SEATS,
    MIN_PAYLOAD_KG,
    MIN_YEAR,
    capacity_label,
    type_label,
    vehicle_label,
)

logger = logging.getLogger(__name__)

@dataclass
class Services:
    """The application services wired to their JSON repositories."""

    brands: BrandCatalogService
    vehicles: VehicleService
    users: UserService
    trips: TripLogService


def build_services(config: Config) -> Services:
    vehicle_repo = JsonVehicleRepository(config.vehicles_path)
    user_repo = JsonUserRepository(config.users_path)
    trip_repo = JsonTripLogRepository(config.trips_path)
    brands = BrandCatalogService(JsonBrandCatalogRepository(config.brands_path))
    return Services(
        brands=brands,
        vehicles=VehicleService(vehicle_repo, brands),
        users=UserService(user_repo),
        trips=TripLogService(trip_repo, user_repo, vehicle_repo),
    )


# =============================================================================
# Formatting helpers
# =============================================================================


def format_money(amount: Optional[Decimal]) -> str:
    """Format a money amount for display."""
    return f"{amount:,.2f} EUR" if amount is not None else "-"


def format_km(km: Optional[Decimal]) -> str:
    if km is None:
        return "-"
    return f"{km:,.1f} km"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def make_vehicle_table(vehicles: List[Vehicle]) -> List[List[str]]:
    """Convert vehicles to table rows."""
    rows = []
    for v in vehicles:
        rows.append(
            [
                type_label(v),
                f"{v.brand} {v.model}",
                v.license_plate,
                v.year,
                capacity_label(v),
                format_money(v.purchase_value),
                format_money(v.residual_value),
                format_money(v.total_repair_cost()),
                short_id(v.id),
            ]
        )
    return rows


def make_repair_table(repairs: List[Repair]) -> List[List[str]]:
    rows = []
    for r in sorted(repairs, key=lambda r: r.date):
        rows.append(
            [
                r.date.isoformat(),
                r.type.label,
                format_money(r.cost),
                truncate(r.description),
                r.workshop,
                short_id(r.id),
            ]
        )
    return rows


def make_depreciation_table(entries: List[DepreciationEntry]) -> List[List[str]]:
    return [
        [d.date.isoformat(), format_money(d.amount), truncate(d.reason)]
        for d in sorted(entries, key=lambda d: d.date)
    ]


def make_user_table(users: List[User]) -> List[List[str]]:
    return [[u.type.label, u.display_name, short_id(u.id)] for u in users]


def make_trip_table(trips: List[TripDisplay]) -> List[List[str]]:
    rows = []
    for t in trips:
        rows.append(
            [
                t.date.isoformat(),
                t.user,
                t.vehicle,
                format_km(t.kilometers),
                truncate(t.reason),
                short_id(t.id),
            ]
        )
    return rows


# =============================================================================
# Prompts
# =============================================================================


def read_required(label: str) -> str:
    """Prompt until a non-blank value is entered."""
    while True:
        value = input(f"{label}: ").strip()
        if value:
            return value
        print("Input must not be empty.")


def read_int(label: str, minimum: int, maximum: int) -> int:
    """Prompt until an integer in [minimum, maximum] is entered."""
    while True:
        text = input(f"{label} ({minimum}-{maximum}): ").strip()
        try:
            value = int(text)
        except ValueError:
            value = None
        if value is not None and minimum <= value <= maximum:
            return value
        print("Invalid number.")


def read_decimal(label: str, minimum: Decimal, maximum: Decimal) -> Decimal:
    """Prompt until a number in [minimum, maximum] is entered. Accepts ',' as decimal mark."""
    while True:
        text = input(f"{label} ({minimum}-{maximum}): ").strip().replace(",", ".")
        try:
            value = Decimal(text)
        except InvalidOperation:
            value = None
        if value is not None and value.is_finite() and minimum <= value <= maximum:
            return value
        print("Invalid number.")


def read_date(label: str) -> date:
    """Prompt for a date in free-text form. Blank input means today."""
    while True:
        text = input(f"{label} (blank = today): ").strip()
        if not text:
            return date.today()
        try:
            return date_parser.parse(text, dayfirst=True).date()
        except (ValueError, OverflowError):
            print("Invalid date.")


def choose_from_list(title: str, options: Sequence[str]) -> int:
    """Show a numbered list and return the zero-based index of the choice."""
    print(title)
    for i, option in enumerate(options, start=1):
        print(f"  {i}) {option}")
    return read_int("Choice", 1, len(options)) - 1


def pause() -> None:
    print()
    input("Press ENTER to continue...")


def run_menu(
    title: str,
    actions: List[Tuple[str, Callable[[Services], None]]],
    services: Services,
    exit_label: str = "Back",
) -> None:
    """
    Show a menu until 0 is chosen.

    Validation errors raised by an action are shown and the menu is
    displayed again.
    """
    while True:
        print()
        print(f"=== {title} ===")
        for i, (label, _) in enumerate(actions, start=1):
            print(f"{i}) {label}")
        print(f"0) {exit_label}")
        print()

        choice = read_int("Choice", 0, len(actions))
        if choice == 0:
            return
        try:
            actions[choice - 1][1](services)
        except ValidationError as e:
            print()
            print(f"Error: {e.message}")
            pause()


def _choose_vehicle(services: Services) -> Optional[Vehicle]:
    vehicles = services.vehicles.get_all()
    if not vehicles:
        print("No vehicles yet.")
        pause()
        return None
    index = choose_from_list("Select vehicle:", [vehicle_label(v) for v in vehicles])
    return vehicles[index]


def _choose_user(services: Services) -> Optional[User]:
    users = services.users.get_all()
    if not users:
        print("No users yet.")
        pause()
        return None
    index = choose_from_list("Select user:", [u.display_name for u in users])
    return users[index]


# =============================================================================
# Master data menu
# =============================================================================


def cmd_add_brand(services: Services) -> None:
    services.brands.add_brand(read_required("Brand"))
    print("Brand saved.")
    pause()


def _choose_brand(services: Services) -> Optional[str]:
    brands = services.brands.get_brands()
    if not brands:
        print("No brands yet. Add a brand first.")
        pause()
        return None
    return brands[choose_from_list("Select brand:", brands)]


def cmd_add_model(services: Services) -> None:
    brand = _choose_brand(services)
    if brand is None:
        return
    services.brands.add_model(brand, read_required("Model"))
    print("Model saved.")
    pause()


def cmd_list_brands(services: Services) -> None:
    brands = services.brands.get_brands()
    if not brands:
        print("No master data yet.")
    for brand in brands:
        print(f"- {brand}")
        for model in services.brands.get_models(brand):
            print(f"    * {model}")
    pause()


def cmd_remove_model(services: Services) -> None:
    brand = _choose_brand(services)
    if brand is None:
        return
    models = services.brands.get_models(brand)
    if not models:
        print("This brand has no models.")
        pause()
        return
    model = models[choose_from_list("Select model:", models)]
    services.brands.remove_model(brand, model)
    print("Model removed.")
    pause()


def cmd_remove_brand(services: Services) -> None:
    brand = _choose_brand(services)
    if brand is None:
        return
    services.brands.remove_brand(brand)
    print("Brand removed.")
    pause()


MASTER_DATA_ACTIONS = [
    ("Add brand", cmd_add_brand),
    ("Add model to brand", cmd_add_model),
    ("List brands/models", cmd_list_brands),
    ("Remove model", cmd_remove_model),
    ("Remove brand", cmd_remove_brand),
]


# =============================================================================
# Vehicle menu
# =============================================================================


def cmd_add_vehicle(services: Services) -> None:
    if not services.brands.get_brands():
        print("No brands/models yet. Add master data first.")
        pause()
        return

    vehicle_type = choose_from_list("Vehicle type:", ["Car (PKW)", "Truck (LKW)"])
    brand = _choose_brand(services)
    if brand is None:
        return
    models = services.brands.get_models(brand)
    if not models:
        print("This brand has no models yet. Add a model first.")
        pause()
        return
    model = models[choose_from_list("Select model:", models)]

    plate = read_required("License plate")
    year = read_int("Year", MIN_YEAR, date.today().year + 1)
    if vehicle_type == 0:
        seats = read_int("Seats", 1, MAX_SEATS)
        value = read_decimal("Purchase value", Decimal("0.01"), MAX_AMOUNT)
        services.vehicles.add_car(plate, brand, model, year, seats, value)
    else:
        payload = read_decimal("Max payload (kg)", MIN_PAYLOAD_KG, MAX_PAYLOAD_KG)
        value = read_decimal("Purchase value", Decimal("0.01"), MAX_AMOUNT)
        services.vehicles.add_truck(plate, brand, model, year, payload, value)
    print("Vehicle saved.")
    pause()


def cmd_list_vehicles(services: Services) -> None:
    vehicles = services.vehicles.get_all()
    if not vehicles:
        print("No vehicles yet.")
    else:
        headers = [
            "Type", "Vehicle", "Plate", "Year", "Capacity",
            "Purchase", "Residual", "Repairs", "Id",
        ]
        print(tabulate(make_vehicle_table(vehicles), headers=headers, tablefmt="simple"))
    pause()


def cmd_remove_vehicle(services: Services) -> None:
    vehicles = services.vehicles.get_all()
    if not vehicles:
        print("No vehicles yet.")
        pause()
        return
    for v in vehicles:
        print(f"{short_id(v.id)}  {vehicle_label(v)}")
    print()
    match = services.vehicles.find_by_id_prefix(read_required("Id prefix (e.g. 1a2b3c4d)"))
    if match is None:
        print("No vehicle with that id.")
    else:
        services.vehicles.remove_vehicle(match.id)
        print("Vehicle removed.")
    pause()


def cmd_add_depreciation(services: Services) -> None:
    vehicle = _choose_vehicle(services)
    if vehicle is None:
        return
    print(f"Residual value: {format_money(vehicle.residual_value)}")
    amount = read_decimal("Amount", Decimal("0.01"), MAX_AMOUNT)
    reason = read_required("Reason")
    entry_date = read_date("Date")
    services.vehicles.add_depreciation(vehicle.id, amount, reason, entry_date)
    print("Depreciation booked.")
    updated = services.vehicles.get_required(vehicle.id)
    print(f"New residual value: {format_money(updated.residual_value)}")
    pause()


def cmd_list_depreciations(services: Services) -> None:
    vehicle = _choose_vehicle(services)
    if vehicle is None:
        return
    print(f"Vehicle: {vehicle_label(vehicle)}")
    if not vehicle.depreciations:
        print("No depreciations booked.")
    else:
        headers = ["Date", "Amount", "Reason"]
        print(
            tabulate(
                make_depreciation_table(vehicle.depreciations),
                headers=headers,
                tablefmt="simple",
            )
        )
        print(f"Total depreciation: {format_money(vehicle.total_depreciation())}")
    print(f"Purchase value: {format_money(vehicle.purchase_value)}")
    print(f"Residual value: {format_money(vehicle.residual_value)}")
    pause()


def cmd_add_repair(services: Services) -> None:
    vehicle = _choose_vehicle(services)
    if vehicle is None:
        return
    repair_date = read_date("Date")
    types = list(RepairType)
    repair_type = types[choose_from_list("Repair type:", [t.label for t in types])]
    description = read_required("Description")
    cost = read_decimal("Cost", Decimal("0.01"), MAX_AMOUNT)
    workshop = read_required("Workshop")
    services.vehicles.add_repair(
        vehicle.id, repair_date, description, repair_type, cost, workshop
    )
    print("Repair saved.")
    pause()


def cmd_list_repairs(services: Services) -> None:
    vehicle = _choose_vehicle(services)
    if vehicle is None:
        return
    print(f"Vehicle: {vehicle_label(vehicle)}")
    if not vehicle.repairs:
        print("No repairs recorded.")
    else:
        headers = ["Date", "Type", "Cost", "Description", "Workshop", "Id"]
        print(tabulate(make_repair_table(vehicle.repairs), headers=headers, tablefmt="simple"))
        print(f"Total repair cost: {format_money(vehicle.total_repair_cost())}")
    pause()


def cmd_remove_repair(services: Services) -> None:
    vehicle = _choose_vehicle(services)
    if vehicle is None:
        return
    if not vehicle.repairs:
        print("No repairs recorded.")
        pause()
        return
    index = choose_from_list(
        "Select repair:",
        [f"{r.date.isoformat()} {r.description} ({format_money(r.cost)})" for r in vehicle.repairs],
    )
    services.vehicles.remove_repair(vehicle.id, vehicle.repairs[index].id)
    print("Repair removed.")
    pause()


def cmd_fleet_summary(services: Services) -> None:
    vehicles = services.vehicles.get_all()
    print(f"Vehicles: {len(vehicles)}")
    print(f"Fleet value: {format_money(services.vehicles.get_fleet_value())}")
    print(f"Repair cost: {format_money(services.vehicles.get_fleet_repair_cost())}")
    pause()


VEHICLE_ACTIONS = [
    ("Add vehicle", cmd_add_vehicle),
    ("List vehicles", cmd_list_vehicles),
    ("Remove vehicle (by id prefix)", cmd_remove_vehicle),
    ("Book depreciation", cmd_add_depreciation),
    ("List depreciations", cmd_list_depreciations),
    ("Add repair", cmd_add_repair),
    ("List repairs", cmd_list_repairs),
    ("Remove repair", cmd_remove_repair),
    ("Fleet summary", cmd_fleet_summary),
]


# =============================================================================
# User menu
# =============================================================================


def cmd_add_person(services: Services) -> None:
    first = read_required("First name")
    last = read_required("Last name")
    services.users.add_person(first, last)
    print("User saved.")
    pause()


def cmd_add_company(services: Services) -> None:
    services.users.add_company(read_required("Company name"))
    print("User saved.")
    pause()


def cmd_list_users(services: Services) -> None:
    users = services.users.get_all()
    if not users:
        print("No users yet.")
    else:
        print(tabulate(make_user_table(users), headers=["Type", "Name", "Id"], tablefmt="simple"))
    pause()


def cmd_remove_user(services: Services) -> None:
    users = services.users.get_all()
    if not users:
        print("No users yet.")
        pause()
        return
    for u in users:
        print(f"{short_id(u.id)}  {u.display_name}")
    print()
    match = services.users.find_by_id_prefix(read_required("Id prefix"))
    if match is None:
        print("No user with that id.")
    else:
        services.users.remove_user(match.id)
        print("User removed.")
    pause()


USER_ACTIONS = [
    ("Add person", cmd_add_person),
    ("Add company", cmd_add_company),
    ("List users", cmd_list_users),
    ("Remove user (by id prefix)", cmd_remove_user),
]


# =============================================================================
# Trip log menu
# =============================================================================


def print_trips(services: Services, entries) -> None:
    if not entries:
        print("No trips found.")
        return
    headers = ["Date", "User", "Vehicle", "Distance", "Reason", "Id"]
    displays = [services.trips.to_display(e) for e in entries]
    print(tabulate(make_trip_table(displays), headers=headers, tablefmt="simple"))
    print(f"Total: {format_km(services.trips.total_kilometers(entries))}")


def cmd_add_trip(services: Services) -> None:
    user = _choose_user(services)
    if user is None:
        return
    vehicle = _choose_vehicle(services)
    if vehicle is None:
        return
    trip_date = read_date("Date")
    reason = read_required("Reason")
    km = read_decimal("Kilometers", MIN_KILOMETERS, MAX_KILOMETERS)
    services.trips.add_trip(trip_date, user.id, vehicle.id, reason, km)
    print("Trip saved.")
    pause()


def cmd_list_trips(services: Services) -> None:
    print_trips(services, services.trips.get_all())
    pause()


def cmd_trips_by_user(services: Services) -> None:
    user = _choose_user(services)
    if user is None:
        return
    print_trips(services, services.trips.get_by_user(user.id))
    pause()


def cmd_trips_by_vehicle(services: Services) -> None:
    vehicle = _choose_vehicle(services)
    if vehicle is None:
        return
    print_trips(services, services.trips.get_by_vehicle(vehicle.id))
    pause()


def cmd_trips_by_date(services: Services) -> None:
    start = read_date("From")
    end = read_date("To")
    print_trips(services, services.trips.get_by_date_range(start, end))
    pause()


def cmd_remove_trip(services: Services) -> None:
    match = services.trips.find_by_id_prefix(read_required("Id prefix"))
    if match is None:
        print("No trip with that id.")
    else:
        services.trips.remove_trip(match.id)
        print("Trip removed.")
    pause()


TRIP_ACTIONS = [
    ("Add trip", cmd_add_trip),
    ("List all trips", cmd_list_trips),
    ("Trips by user", cmd_trips_by_user),
    ("Trips by vehicle", cmd_trips_by_vehicle),
    ("Trips by date range", cmd_trips_by_date),
    ("Remove trip (by id prefix)", cmd_remove_trip),
]


# =============================================================================
# Main
# =============================================================================


MAIN_ACTIONS = [
    ("Master data (brands/models)", lambda s: run_menu("Master data", MASTER_DATA_ACTIONS, s)),
    ("Vehicles", lambda s: run_menu("Vehicles", VEHICLE_ACTIONS, s)),
    ("Users", lambda s: run_menu("Users", USER_ACTIONS, s)),
    ("Trip log", lambda s: run_menu("Trip log", TRIP_ACTIONS, s)),
]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Vehicle fleet manager")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to YAML config file (default: fleet.yaml if present)",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Directory holding the JSON data files (default: data)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for the log file",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    config = load_config(args.config)
    if args.data_dir:
        config.data_dir = args.data_dir
    if args.log_level:
        config.log_level = args.log_level
    configure_logging(config)

    logger.info("Starting with data directory %s", config.data_dir)
    services = build_services(config)
    try:
        run_menu("Fleet manager", MAIN_ACTIONS, services, exit_label="Quit")
    except (EOFError, KeyboardInterrupt):
        print()
    logger.info("Exiting")
    return 0


if __name__ == "__main__":
    sys.exit(main())
