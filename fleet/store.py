"""
JSON file store used by the repositories.

Each data file holds one JSON array. Loading is best effort: an unreadable
file degrades to an empty list and records that fail their schema are
dropped individually. Saving rewrites the whole file through a temporary
file that is renamed over the target.
"""

import json
import logging
import os
import stat
import tempfile
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import yaml
from jsonschema import Draft202012Validator

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.yaml"


@lru_cache(maxsize=1)
def load_schema() -> Dict[str, Any]:
    """Load the record schemas from schema.yaml."""
    with open(SCHEMA_PATH) as fp:
        return yaml.safe_load(fp)


@lru_cache(maxsize=None)
def record_validator(kind: str) -> Draft202012Validator:
    """Validator for one record of the given kind ("brands", "vehicles", ...)."""
    schema = load_schema()
    if kind not in schema or kind == "$defs":
        raise KeyError(f"No schema for record kind '{kind}'")
    record_schema = dict(schema[kind])
    record_schema["$defs"] = schema["$defs"]
    return Draft202012Validator(record_schema)


def record_errors(record: Any, kind: str) -> List[str]:
    """Return schema violations for a single record (empty if valid)."""
    errors = []
    for error in record_validator(kind).iter_errors(record):
        location = ".".join(str(p) for p in error.path)
        errors.append(f"{location}: {error.message}" if location else error.message)
    return errors


def read_json(filename: Union[str, Path]) -> Any:
    """Parse a JSON file, keeping non-integer numbers as Decimal."""
    with open(filename, "r", encoding="utf-8") as fp:
        return json.load(fp, parse_float=Decimal)


def load_records(filename: Union[str, Path], kind: str) -> Iterator[Dict[str, Any]]:
    """
    Yield the schema-valid records of a JSON array file.

    A missing or blank file yields nothing. A file that cannot be read or
    parsed, or whose top level is not an array, is logged and yields nothing.
    """
    path = Path(filename)
    if not path.exists():
        logger.info("%s does not exist yet, starting empty", path)
        return
    try:
        if not path.read_text(encoding="utf-8").strip():
            return
        data = read_json(path)
    except (OSError, ValueError) as e:
        logger.error("Could not read %s, starting empty: %s", path, e)
        return
    if not isinstance(data, list):
        logger.error("%s does not contain a JSON array, starting empty", path)
        return

    for index, record in enumerate(data):
        errors = record_errors(record, kind)
        if errors:
            logger.warning(
                "Skipping %s record %d in %s: %s", kind, index, path.name, "; ".join(errors)
            )
            continue
        yield record


def _encode(value: Any) -> Any:
    # Entity guards round and bound amounts, so the float form is exact.
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def save_records(filename: Union[str, Path], records: List[Dict[str, Any]]) -> None:
    """
    Write records as a pretty-printed JSON array.

    The data is written to a temporary file in the same directory and then
    renamed over the target, so readers never see a half-written file.
    """
    path = Path(filename)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fp:
            json.dump(records, fp, indent=2, ensure_ascii=False, default=_encode)
            fp.write("\n")
            fp.flush()
            os.fsync(fp.fileno())
        os.chmod(tmp_name, _target_mode(path))
        os.replace(tmp_name, path)
    except BaseException:
        _discard(tmp_name)
        raise
    logger.debug("Wrote %d records to %s", len(records), path)


def _target_mode(path: Path) -> int:
    """Permission bits for the saved file: the existing ones, else the umask default."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _discard(tmp_name: str) -> None:
    try:
        os.unlink(tmp_name)
    except FileNotFoundError:
        pass


def parse_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """Convert a loaded JSON number to Decimal."""
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
