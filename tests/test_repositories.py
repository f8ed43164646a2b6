#!/usr/bin/env python3
"""Tests for the JSON-backed repositories."""

import json
import uuid
from datetime import date
from decimal import Decimal

import pytest

from fleet import (
    BrandCatalog,
    ErrorKind,
    JsonBrandCatalogRepository,
    JsonTripLogRepository,
    JsonUserRepository,
    JsonVehicleRepository,
    RepairType,
    TripEntry,
    User,
    ValidationError,
    Vehicle,
)
from fleet.repositories import _JsonEntityRepository


def make_car(plate="M-AB 123", brand="BMW", model="X3"):
    return Vehicle.car(plate, brand, model, 2020, 5, Decimal("30000"))


def make_truck(plate="HH-LK 9"):
    return Vehicle.truck(plate, "MAN", "TGX", 2019, Decimal("18000"), Decimal("90000"))


# =============================================================================
# Brand catalog
# =============================================================================


class TestJsonBrandCatalogRepository:
    """Tests for JsonBrandCatalogRepository."""

    def test_missing_file_loads_empty_catalog(self, tmp_path):
        catalog = JsonBrandCatalogRepository(tmp_path / "brands.json").load()
        assert catalog.brands == []

    def test_round_trip_sorted(self, tmp_path):
        path = tmp_path / "brands.json"
        catalog = BrandCatalog()
        catalog.add_model("BMW", "X5")
        catalog.add_model("BMW", "X3")
        catalog.add_model("Audi", "A4")
        JsonBrandCatalogRepository(path).save(catalog)

        assert json.loads(path.read_text()) == [
            {"Name": "Audi", "Models": ["A4"]},
            {"Name": "BMW", "Models": ["X3", "X5"]},
        ]

        loaded = JsonBrandCatalogRepository(path).load()
        pairs = sorted((b.name, m) for b in loaded.brands for m in b.models)
        assert pairs == [("Audi", "A4"), ("BMW", "X3"), ("BMW", "X5")]

    def test_skips_invalid_brand_records(self, tmp_path):
        path = tmp_path / "brands.json"
        path.write_text(json.dumps([
            {"Name": "BMW", "Models": ["X3"]},
            {"Name": "  ", "Models": ["A4"]},
            {"Models": ["Golf"]},
        ]))
        catalog = JsonBrandCatalogRepository(path).load()
        assert [b.name for b in catalog.brands] == ["BMW"]


# =============================================================================
# Vehicles
# =============================================================================


class TestJsonVehicleRepository:
    """Tests for JsonVehicleRepository."""

    def test_missing_file_loads_empty(self, tmp_path):
        repo = JsonVehicleRepository(tmp_path / "vehicles.json")
        assert repo.get_all() == []
        assert not (tmp_path / "vehicles.json").exists()

    def test_add_persists_immediately(self, tmp_path):
        path = tmp_path / "vehicles.json"
        repo = JsonVehicleRepository(path)
        car = make_car()
        repo.add(car)

        records = json.loads(path.read_text())
        assert len(records) == 1
        assert records[0]["Id"] == str(car.id)
        assert records[0]["Type"] == "PKW"
        assert records[0]["Seats"] == 5
        assert records[0]["MaxPayloadKg"] == 9999
        assert records[0]["PurchaseValue"] == 30000

    def test_truck_uses_seat_sentinel(self, tmp_path):
        path = tmp_path / "vehicles.json"
        JsonVehicleRepository(path).add(make_truck())
        record = json.loads(path.read_text())[0]
        assert record["Type"] == "LKW"
        assert record["Seats"] == 9999
        assert record["MaxPayloadKg"] == 18000

    def test_reload_restores_both_variants(self, tmp_path):
        path = tmp_path / "vehicles.json"
        repo = JsonVehicleRepository(path)
        car, truck = make_car(), make_truck()
        repo.add(car)
        repo.add(truck)

        reloaded = JsonVehicleRepository(path)
        loaded_car = reloaded.find_by_id(car.id)
        loaded_truck = reloaded.find_by_id(truck.id)
        assert loaded_car.seats == 5
        assert loaded_car.max_payload_kg is None
        assert loaded_truck.max_payload_kg == Decimal("18000")
        assert loaded_truck.seats is None

    def test_get_all_is_a_snapshot(self, tmp_path):
        repo = JsonVehicleRepository(tmp_path / "vehicles.json")
        repo.add(make_car())
        snapshot = repo.get_all()
        snapshot.clear()
        assert len(repo.get_all()) == 1

    def test_get_all_sorted_by_brand_model_plate(self, tmp_path):
        repo = JsonVehicleRepository(tmp_path / "vehicles.json")
        repo.add(make_car("B-2", "VW", "Golf"))
        repo.add(make_car("B-1", "BMW", "X3"))
        repo.add(make_car("A-1", "BMW", "X3"))
        assert [v.license_plate for v in repo.get_all()] == ["A-1", "B-1", "B-2"]

    def test_find_by_license_plate_normalizes(self, tmp_path):
        repo = JsonVehicleRepository(tmp_path / "vehicles.json")
        car = make_car("AB-123")
        repo.add(car)
        assert repo.find_by_license_plate("  ab-123 ") is car
        assert repo.license_plate_exists("Ab-123")
        assert not repo.license_plate_exists("AB-124")

    def test_remove(self, tmp_path):
        path = tmp_path / "vehicles.json"
        repo = JsonVehicleRepository(path)
        car = make_car()
        repo.add(car)
        assert repo.remove(car.id) is True
        assert repo.find_by_id(car.id) is None
        assert json.loads(path.read_text()) == []

    def test_remove_unknown_leaves_file_unchanged(self, tmp_path):
        path = tmp_path / "vehicles.json"
        repo = JsonVehicleRepository(path)
        repo.add(make_car())
        before = json.loads(path.read_text())
        assert repo.remove(uuid.uuid4()) is False
        assert json.loads(path.read_text()) == before

    def test_update_persists_mutation(self, tmp_path):
        path = tmp_path / "vehicles.json"
        repo = JsonVehicleRepository(path)
        car = make_car()
        repo.add(car)
        car.add_depreciation(Decimal("1000"), "Yearly", date(2024, 1, 1))
        repo.update(car)

        reloaded = JsonVehicleRepository(path).find_by_id(car.id)
        assert reloaded.residual_value == Decimal("29000")

    def test_update_unknown_is_noop(self, tmp_path):
        path = tmp_path / "vehicles.json"
        repo = JsonVehicleRepository(path)
        repo.update(make_car())
        assert repo.get_all() == []
        assert not path.exists()

    def test_modify_persists_in_one_step(self, tmp_path):
        path = tmp_path / "vehicles.json"
        repo = JsonVehicleRepository(path)
        car = make_car()
        repo.add(car)
        repair = repo.modify(
            car.id,
            lambda v: v.add_repair(date(2024, 2, 1), "Brakes", RepairType.WEAR_PART, Decimal("250"), "ATU"),
        )

        reloaded = JsonVehicleRepository(path).find_by_id(car.id)
        assert [r.id for r in reloaded.repairs] == [repair.id]
        assert reloaded.repairs[0].type is RepairType.WEAR_PART
        assert reloaded.total_repair_cost() == Decimal("250")

    def test_modify_unknown_vehicle(self, tmp_path):
        repo = JsonVehicleRepository(tmp_path / "vehicles.json")
        with pytest.raises(ValidationError) as exc:
            repo.modify(uuid.uuid4(), lambda v: None)
        assert exc.value.kind is ErrorKind.NOT_FOUND

    def test_failed_modify_writes_nothing(self, tmp_path):
        path = tmp_path / "vehicles.json"
        repo = JsonVehicleRepository(path)
        car = make_car()
        repo.add(car)
        before = path.read_text()
        with pytest.raises(ValidationError):
            repo.modify(car.id, lambda v: v.add_depreciation(Decimal("99999"), "Too much"))
        assert path.read_text() == before

    def test_depreciation_history_survives_reload(self, tmp_path):
        path = tmp_path / "vehicles.json"
        repo = JsonVehicleRepository(path)
        car = make_car()
        repo.add(car)
        repo.modify(car.id, lambda v: v.add_depreciation(Decimal("4500.50"), "Yearly", date(2024, 12, 31)))

        reloaded = JsonVehicleRepository(path).find_by_id(car.id)
        assert reloaded.residual_value == Decimal("25499.50")
        assert reloaded.depreciations[0].date == date(2024, 12, 31)
        assert reloaded.depreciations[0].reason == "Yearly"

    def test_high_precision_amounts_survive_reload(self, tmp_path):
        path = tmp_path / "vehicles.json"
        repo = JsonVehicleRepository(path)
        car = Vehicle.car("K-1", "VW", "Golf", 2020, 5, Decimal("1000"))
        repo.add(car)
        repo.modify(car.id, lambda v: v.add_depreciation(Decimal("999.99999999999999999"), "Total loss"))
        with pytest.raises(ValidationError) as exc:
            repo.modify(car.id, lambda v: v.add_depreciation(Decimal("0.00000000000000001"), "Rest"))
        assert exc.value.kind is ErrorKind.OUT_OF_RANGE

        reloaded = JsonVehicleRepository(path).find_by_id(car.id)
        assert reloaded is not None
        assert reloaded.residual_value == Decimal("0")
        assert [d.amount for d in reloaded.depreciations] == [Decimal("1000.00")]

    def test_long_fractions_are_stored_rounded(self, tmp_path):
        path = tmp_path / "vehicles.json"
        repo = JsonVehicleRepository(path)
        car = Vehicle.car("K-1", "VW", "Golf", 2020, 5, Decimal("987654321.987654321"))
        repo.add(car)
        repo.modify(car.id, lambda v: v.add_depreciation(Decimal("123456789.125"), "Yearly"))
        repo.modify(
            car.id,
            lambda v: v.add_repair(
                date(2024, 1, 2), "Brakes", RepairType.WEAR_PART, Decimal("0.333333333333333333"), "ATU"
            ),
        )

        reloaded = JsonVehicleRepository(path).find_by_id(car.id)
        assert reloaded.purchase_value == Decimal("987654321.99")
        assert reloaded.residual_value == Decimal("864197532.86")
        assert reloaded.repairs[0].cost == Decimal("0.33")
        assert reloaded.residual_value == car.residual_value

    def test_loads_records_without_history(self, tmp_path):
        path = tmp_path / "vehicles.json"
        vehicle_id = str(uuid.uuid4())
        path.write_text(json.dumps([{
            "Id": vehicle_id, "Type": "pkw", "LicensePlate": "k-ln 1",
            "Brand": "VW", "Model": "Golf", "Year": 2018, "PurchaseValue": 21000,
            "Seats": 5, "MaxPayloadKg": 9999,
        }]))
        vehicle = JsonVehicleRepository(path).find_by_id(uuid.UUID(vehicle_id))
        assert vehicle.license_plate == "K-LN 1"
        assert vehicle.residual_value == Decimal("21000")
        assert vehicle.repairs == []

    def test_malformed_records_are_skipped(self, tmp_path):
        path = tmp_path / "vehicles.json"
        good = {
            "Id": str(uuid.uuid4()), "Type": "PKW", "LicensePlate": "K-LN 1",
            "Brand": "VW", "Model": "Golf", "Year": 2018, "PurchaseValue": 21000,
            "Seats": 5, "MaxPayloadKg": 9999,
        }
        bad_year = dict(good, Id=str(uuid.uuid4()), Year=1900)
        bad_seats = dict(good, Id=str(uuid.uuid4()), Seats=12)
        missing_plate = {k: v for k, v in good.items() if k != "LicensePlate"}
        path.write_text(json.dumps([bad_year, good, bad_seats, missing_plate]))

        vehicles = JsonVehicleRepository(path).get_all()
        assert [str(v.id) for v in vehicles] == [good["Id"]]

    def test_corrupt_file_loads_empty(self, tmp_path):
        path = tmp_path / "vehicles.json"
        path.write_text("{{{ not json")
        assert JsonVehicleRepository(path).get_all() == []


# =============================================================================
# Users
# =============================================================================


class TestJsonUserRepository:
    """Tests for JsonUserRepository."""

    def test_round_trip(self, tmp_path):
        path = tmp_path / "users.json"
        repo = JsonUserRepository(path)
        person = User.person("Max", "Mustermann")
        company = User.company("ACME GmbH")
        repo.add(person)
        repo.add(company)

        records = json.loads(path.read_text())
        assert records[0] == {
            "Id": str(person.id), "Type": "person",
            "FirstName": "Max", "LastName": "Mustermann",
        }
        assert records[1] == {"Id": str(company.id), "Type": "company", "CompanyName": "ACME GmbH"}

        reloaded = JsonUserRepository(path)
        assert reloaded.find_by_id(person.id).display_name == "Max Mustermann"
        assert reloaded.find_by_id(company.id).display_name == "ACME GmbH"

    def test_duplicate_id_is_ignored(self, tmp_path):
        repo = JsonUserRepository(tmp_path / "users.json")
        user_id = uuid.uuid4()
        repo.add(User.person("Max", "Mustermann", user_id=user_id))
        repo.add(User.company("Other", user_id=user_id))
        users = repo.get_all()
        assert len(users) == 1
        assert users[0].display_name == "Max Mustermann"

    def test_unknown_type_and_blank_names_skipped(self, tmp_path):
        path = tmp_path / "users.json"
        path.write_text(json.dumps([
            {"Id": str(uuid.uuid4()), "Type": "robot"},
            {"Id": str(uuid.uuid4()), "Type": "person", "FirstName": "Max", "LastName": ""},
            {"Id": str(uuid.uuid4()), "Type": "Company", "CompanyName": "ACME"},
        ]))
        users = JsonUserRepository(path).get_all()
        assert [u.display_name for u in users] == ["ACME"]

    def test_remove(self, tmp_path):
        repo = JsonUserRepository(tmp_path / "users.json")
        user = User.company("ACME")
        repo.add(user)
        assert repo.remove(user.id) is True
        assert repo.remove(user.id) is False


# =============================================================================
# Trips
# =============================================================================


class TestJsonTripLogRepository:
    """Tests for JsonTripLogRepository."""

    def test_round_trip(self, tmp_path):
        path = tmp_path / "trips.json"
        repo = JsonTripLogRepository(path)
        trip = TripEntry(None, date(2024, 6, 1), uuid.uuid4(), uuid.uuid4(), "Visit", Decimal("42.5"))
        repo.add(trip)

        record = json.loads(path.read_text())[0]
        assert record["Date"] == "2024-06-01"
        assert record["Kilometers"] == 42.5

        loaded = JsonTripLogRepository(path).find_by_id(trip.id)
        assert loaded.date == date(2024, 6, 1)
        assert loaded.user_id == trip.user_id
        assert loaded.kilometers == Decimal("42.5")

    def test_bad_dates_and_ranges_skipped(self, tmp_path):
        path = tmp_path / "trips.json"
        base = {
            "Id": str(uuid.uuid4()), "Date": "2024-06-01",
            "UserId": str(uuid.uuid4()), "VehicleId": str(uuid.uuid4()),
            "Reason": "Visit", "Kilometers": 10,
        }
        path.write_text(json.dumps([
            dict(base, Id=str(uuid.uuid4()), Date="01.06.2024"),
            dict(base, Id=str(uuid.uuid4()), Date="2024-13-45"),
            dict(base, Id=str(uuid.uuid4()), Kilometers=0),
            base,
        ]))
        trips = JsonTripLogRepository(path).get_all()
        assert [str(t.id) for t in trips] == [base["Id"]]


class TestJsonEntityRepository:
    """Tests for the shared entity repository base."""

    def test_base_cannot_be_instantiated(self, tmp_path):
        with pytest.raises(TypeError):
            _JsonEntityRepository(tmp_path / "items.json")

    def test_subclass_must_provide_converters(self, tmp_path):
        class FromOnly(_JsonEntityRepository):
            kind = "trips"

            def _from_dict(self, dct):
                return dct

        with pytest.raises(TypeError):
            FromOnly(tmp_path / "trips.json")
