"""Application configuration loaded from an optional YAML file."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import yaml

DEFAULT_CONFIG_FILE = "fleet.yaml"


@dataclass
class Config:
    """Where data and logs live, and how much to log."""

    data_dir: Path = Path("data")
    log_level: str = "INFO"
    log_file: str = "fleet.log"

    @property
    def brands_path(self) -> Path:
        return self.data_dir / "brands.json"

    @property
    def vehicles_path(self) -> Path:
        return self.data_dir / "vehicles.json"

    @property
    def users_path(self) -> Path:
        return self.data_dir / "users.json"

    @property
    def trips_path(self) -> Path:
        return self.data_dir / "trips.json"

    @property
    def log_path(self) -> Path:
        """Log file location; relative names are placed in the data directory."""
        path = Path(self.log_file)
        return path if path.is_absolute() else self.data_dir / path


def load_config(filename: Optional[Union[str, Path]] = None) -> Config:
    """
    Load configuration from a YAML file with camelCase keys.

    Recognized keys: dataDir, logLevel, logFile. A missing file or missing
    keys fall back to the defaults; unknown keys are ignored.
    """
    config = Config()
    path = Path(filename or DEFAULT_CONFIG_FILE)
    if not path.exists():
        return config

    with open(path, "r") as fp:
        data = yaml.load(fp, Loader=yaml.SafeLoader) or {}

    if data.get("dataDir"):
        config.data_dir = Path(data["dataDir"])
    if data.get("logLevel"):
        config.log_level = str(data["logLevel"]).upper()
    if data.get("logFile"):
        config.log_file = str(data["logFile"])
    return config
