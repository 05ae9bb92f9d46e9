import os
import tomllib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from timetrackd.utils.exceptions import ConfigError
from timetrackd.utils.logging import get_logger

logger = get_logger(__name__)

CONFIG_FILE_NAME = "timetrackd.toml"
DATABASE_FILE_NAME = ".timetrackd.db"

# Largest integer a TOML file can hold
SAMPLE_INTERVAL_MAX = 2 ** 63 - 1


class DatabaseType(Enum):
    SQLITE = "sqlite"


@dataclass(frozen=True)
class Config:
    """Resolved configuration, read-only once loaded."""
    database_path: Path
    database_type: DatabaseType = DatabaseType.SQLITE
    sample_interval: int = 5  # seconds


def get_home_dir() -> Path:
    """Return the user's home directory or raise ConfigError."""
    try:
        return Path.home()
    except RuntimeError as e:
        raise ConfigError(f"Could not get home directory: {e}") from e


def get_config_dir() -> Path:
    """Return the user's configuration directory (XDG base directory rules)."""
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home and os.path.isabs(xdg_config_home):
        return Path(xdg_config_home)
    return get_home_dir() / ".config"


def get_config_path() -> Path:
    return get_config_dir() / CONFIG_FILE_NAME


def get_default_config() -> Config:
    """Returns default configuration settings."""
    return Config(
        database_path=get_home_dir() / DATABASE_FILE_NAME,
        database_type=DatabaseType.SQLITE,
        sample_interval=5,
    )


def parse_sample_interval(value: Any) -> int:
    # bool is an int subclass, but TOML booleans are not intervals
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= SAMPLE_INTERVAL_MAX:
        raise ConfigError("sample_interval has to be a positive integer")
    return value


def parse_database_path(value: Any) -> Path:
    if not isinstance(value, str):
        raise ConfigError("database_path must be a filesystem path")
    return Path(value)


def parse_database_type(value: Any) -> DatabaseType:
    if not isinstance(value, str):
        raise ConfigError("database_type must be 'sqlite'")
    try:
        return DatabaseType(value)
    except ValueError:
        raise ConfigError("database_type must be 'sqlite'") from None


def config_from_dict(data: Dict[str, Any], defaults: Config) -> Config:
    """Apply the known keys of a parsed config file on top of defaults.

    Unknown keys are ignored.
    """
    overrides: Dict[str, Any] = {}
    if "sample_interval" in data:
        overrides["sample_interval"] = parse_sample_interval(data["sample_interval"])
    if "database_path" in data:
        overrides["database_path"] = parse_database_path(data["database_path"])
    if "database_type" in data:
        overrides["database_type"] = parse_database_type(data["database_type"])

    return Config(
        database_path=overrides.get("database_path", defaults.database_path),
        database_type=overrides.get("database_type", defaults.database_type),
        sample_interval=overrides.get("sample_interval", defaults.sample_interval),
    )


def load_config(config_path: Optional[Path] = None) -> Config:
    """Loads configuration from a TOML file on top of the defaults.

    A missing file at the default location is not an error: the defaults are
    used and a warning is logged. A missing file given explicitly, or anything
    else that goes wrong, raises ConfigError.
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = get_config_path()
    config_path = Path(config_path)

    defaults = get_default_config()
    if not config_path.is_file():
        if explicit:
            raise ConfigError(f"Configuration file not found at {config_path}")
        logger.warning(f"Could not load config file '{config_path}', using defaults")
        return defaults

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Error reading configuration at {config_path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Error decoding toml at file: {config_path}: {e}") from e

    return config_from_dict(data, defaults)
