#!/usr/bin/env python3
"""Validate the JSON data files of a fleet data directory against the schema."""
import argparse
import sys
from pathlib import Path

from fleet.store import read_json, record_errors

DATA_FILES = {
    "brands.json": "brands",
    "vehicles.json": "vehicles",
    "users.json": "users",
    "trips.json": "trips",
}


def validate_data_file(filepath: Path, kind: str) -> list[str]:
    """Validate a single data file. Returns list of errors."""
    errors = []
    try:
        data = read_json(filepath)
    except ValueError as e:
        return [f"JSON parse error: {e}"]
    except OSError as e:
        return [f"Error: {e}"]

    if not isinstance(data, list):
        return ["Top level must be a JSON array"]

    for index, record in enumerate(data):
        for message in record_errors(record, kind):
            errors.append(f"record {index}: {message}")
    return errors


def main(argv=None):
    """Validate all known data files in the data directory."""
    parser = argparse.ArgumentParser(description="Validate fleet data files")
    parser.add_argument(
        "data_dir",
        type=Path,
        nargs="?",
        default=Path("data"),
        help="Directory holding the JSON data files (default: data)",
    )
    args = parser.parse_args(argv)

    if not args.data_dir.is_dir():
        print(f"Error: data directory not found: {args.data_dir}")
        return 1

    all_valid = True
    checked = 0
    for name, kind in DATA_FILES.items():
        filepath = args.data_dir / name
        if not filepath.exists():
            continue
        checked += 1
        errors = validate_data_file(filepath, kind)
        if errors:
            print(f"FAIL: {name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {name}")

    if not checked:
        print(f"Warning: No data files found in {args.data_dir}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
