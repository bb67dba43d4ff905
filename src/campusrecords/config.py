"""Configuration loading for Campus Records."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "campusrecords.yaml"

DEFAULT_MAX_CREDITS = 18


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class LoggingConfig:
    """Logging settings.

    The log file rotates at max_bytes, keeping backup_count old files.
    """

    dir: str = "logs"
    level: str = "INFO"
    file: str = "campusrecords.log"
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5

    def __post_init__(self) -> None:
        self.level = self.level.upper()
        if self.level not in LOG_LEVELS:
            raise ConfigError(f"'logging.level' must be one of {', '.join(LOG_LEVELS)}")
        _require_positive_int("logging.max_bytes", self.max_bytes)
        _require_positive_int("logging.backup_count", self.backup_count)


@dataclass
class RecordsConfig:
    """Campus Records configuration.

    Built once at startup and handed to the engines; nothing reads it from a
    global.
    """

    name: str = "Campus Records"
    version: str = "1.0.0"
    max_credits_per_semester: int = DEFAULT_MAX_CREDITS
    data_dir: str = "data"
    backup_dir: str = "backups"
    export_dir: str = "exports"
    backup_retention_count: int = 10
    db_path: str = ":memory:"
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    root_path: Path = field(default_factory=Path)

    def __post_init__(self) -> None:
        _require_positive_int("max_credits_per_semester", self.max_credits_per_semester)
        _require_positive_int("backup_retention_count", self.backup_retention_count)

    @classmethod
    def from_dict(cls, data: dict[str, Any], root_path: Path) -> RecordsConfig:
        """Create config from dictionary.

        Args:
            data: Configuration dictionary from YAML.
            root_path: Root directory containing the config file.

        Returns:
            Parsed configuration object.

        Raises:
            ConfigError: If a value has the wrong type or is out of range.
        """
        logging_data = data.get("logging") or {}
        if not isinstance(logging_data, dict):
            raise ConfigError("'logging' must be a mapping")
        logging_config = LoggingConfig(
            dir=str(logging_data.get("dir", "logs")),
            level=str(logging_data.get("level", "INFO")),
            file=str(logging_data.get("file", "campusrecords.log")),
            max_bytes=logging_data.get("max_bytes", 10 * 1024 * 1024),
            backup_count=logging_data.get("backup_count", 5),
        )

        return cls(
            name=str(data.get("name", "Campus Records")),
            version=str(data.get("version", "1.0.0")),
            max_credits_per_semester=data.get("max_credits_per_semester", DEFAULT_MAX_CREDITS),
            data_dir=str(data.get("data_dir", "data")),
            backup_dir=str(data.get("backup_dir", "backups")),
            export_dir=str(data.get("export_dir", "exports")),
            backup_retention_count=data.get("backup_retention_count", 10),
            db_path=str(data.get("db_path", ":memory:")),
            logging=logging_config,
            root_path=root_path,
        )

    def get_data_path(self) -> Path:
        """Get absolute path to the CSV data directory."""
        return self.root_path / self.data_dir

    def get_backup_path(self) -> Path:
        """Get absolute path to the backup directory."""
        return self.root_path / self.backup_dir

    def get_export_path(self) -> Path:
        """Get absolute path to the export directory."""
        return self.root_path / self.export_dir

    def get_log_path(self) -> Path:
        """Get absolute path to the log directory."""
        return self.root_path / self.logging.dir


def _require_positive_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"'{name}' must be a positive integer, got {value!r}")


def load_config(config_path: Path | str) -> RecordsConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to campusrecords.yaml file.

    Returns:
        Parsed configuration object.

    Raises:
        ConfigError: If file doesn't exist or is invalid.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a YAML mapping, got {type(data).__name__}")

    return RecordsConfig.from_dict(data, config_path.parent)


def find_config(start_path: Path | str | None = None) -> Path:
    """Find campusrecords.yaml by walking up directory tree.

    Args:
        start_path: Starting directory. Defaults to current directory.

    Returns:
        Path to campusrecords.yaml file.

    Raises:
        ConfigError: If no config file is found.
    """
    if start_path is None:
        start_path = Path.cwd()
    else:
        start_path = Path(start_path)

    current = start_path.resolve()

    while current != current.parent:
        config_path = current / CONFIG_FILENAME
        if config_path.exists():
            return config_path
        current = current.parent

    config_path = current / CONFIG_FILENAME
    if config_path.exists():
        return config_path

    raise ConfigError(f"No {CONFIG_FILENAME} found in {start_path} or any parent directory")
