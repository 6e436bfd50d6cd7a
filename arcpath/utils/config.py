"""
Configuration management for the arcpath curve library.

Settings are grouped in dataclass sections and held by a singleton
manager. Values come from the defaults below, an optional yaml, json or ini
file, environment variables (ARCPATH_SECTION_KEY) and runtime changes, in
that order.
"""

import os
import json
import yaml
import logging
import configparser
from typing import Dict, Any, Optional, Callable
from dataclasses import dataclass, field, asdict, fields, is_dataclass
import builtins
import copy
import threading

# Default configuration paths
DEFAULT_CONFIG_PATHS = [
    "./arcpath.yaml",
    "./arcpath.json",
    "./arcpath.ini",
    "./config/arcpath.yaml",
    "./config/arcpath.json",
    "./config/arcpath.ini",
]


@dataclass
class TrajectoryConfig:
    """Curve construction and mutation parameters."""

    # Minimum number of basis samples a built curve carries
    min_points: int = 4

    # Interpolation kinds: cubic, akima, linear, stairstep
    geometry_interpolation: str = "cubic"
    field_interpolation: str = "stairstep"

    # Consecutive input points closer than this are merged
    duplicate_tolerance: float = 1e-6

    # Slack accepted on the far end of crop/range spans
    boundary_tolerance: float = 1e-9

    # Terminal sample handling for uniform resampling
    resample_overlap_threshold: float = 0.1


@dataclass
class QueryConfig:
    """Geometric query parameters."""

    # Closest point projection
    closest_min_points: int = 0
    closest_tolerance: float = 1e-6
    # Nearest chords refined per query
    closest_candidates: int = 3

    # Crossing detection
    crossing_min_points: int = 0
    crossing_tolerance: float = 1e-6

    # Curvature search
    curvature_min_points: int = 100
    curvature_refine: bool = True
    curvature_epsilon: float = 1e-12

    # Interval grouping
    interval_min_points: int = 0


@dataclass
class LoggingConfig:
    """Logging configuration parameters."""

    # Basic settings
    level: str = "WARNING"
    format: str = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    # Output settings
    console_output: bool = True
    file_output: bool = False
    file_path: str = "logs/arcpath.log"
    max_file_size: int = 10 * 1024 * 1024  # 10 MB
    backup_count: int = 5

    # Component levels (override default level)
    component_levels: Dict[str, str] = field(default_factory=lambda: {
        "trajectory": "WARNING",
        "algorithms": "WARNING",
        "performance": "WARNING",
    })


@dataclass
class LibraryConfig:
    """
    Overall library configuration that contains all other configuration sections.
    """

    # Component configurations
    trajectory: TrajectoryConfig = field(default_factory=TrajectoryConfig)
    queries: QueryConfig = field(default_factory=QueryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    debug_mode: bool = False


def _coerce(original: Any, value: Any) -> Any:
    """
    Convert a raw value (e.g. a string from an ini file or the environment)
    to the type of the value it replaces.
    """
    if original is None or not isinstance(value, str):
        return value
    if isinstance(original, bool):
        return value.lower() in ('true', 'yes', '1', 'y')
    if isinstance(original, int):
        return int(value)
    if isinstance(original, float):
        return float(value)
    return value


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, 'r') as f:
        return yaml.safe_load(f) or {}


def _read_json(path: str) -> Dict[str, Any]:
    with open(path, 'r') as f:
        return json.load(f)


def _read_ini(path: str) -> Dict[str, Any]:
    parser = configparser.ConfigParser(interpolation=None)
    parser.read(path)
    return {section: dict(parser[section]) for section in parser.sections()}


def _write_yaml(path: str, data: Dict[str, Any]) -> None:
    with open(path, 'w') as f:
        yaml.dump(data, f, default_flow_style=False)


def _write_json(path: str, data: Dict[str, Any]) -> None:
    with open(path, 'w') as f:
        json.dump(data, f, indent=2)


def _write_ini(path: str, data: Dict[str, Any]) -> None:
    # Only flat sections fit in ini files; nested tables such as
    # component_levels and top-level scalars are left out
    parser = configparser.ConfigParser(interpolation=None)
    for section, values in data.items():
        if isinstance(values, dict):
            parser[section] = {k: str(v) for k, v in values.items() if not isinstance(v, dict)}
    with open(path, 'w') as f:
        parser.write(f)


READERS: Dict[str, Callable[[str], Dict[str, Any]]] = {
    '.yaml': _read_yaml, '.yml': _read_yaml, '.json': _read_json, '.ini': _read_ini,
}

WRITERS: Dict[str, Callable[[str, Dict[str, Any]], None]] = {
    '.yaml': _write_yaml, '.yml': _write_yaml, '.json': _write_json, '.ini': _write_ini,
}


def _format_of(path: str) -> str:
    extension = os.path.splitext(path)[1].lower()
    if extension not in READERS:
        raise ValueError(f"Unsupported configuration file type: {extension}")
    return extension


class ConfigManager:
    """
    Process-wide configuration of the library.

    Singleton: every construction returns the same instance. Reads are
    lock-free attribute lookups; changes take the lock and notify the
    registered listeners with the name of the changed section.
    """

    _instance = None
    _lock = threading.RLock()

    def __new__(cls, *args, **kwargs):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._initialized = False
            return cls._instance

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Configuration file to load; the default locations
                are searched when omitted
        """
        with self._lock:
            if self._initialized:
                return

            self._logger = logging.getLogger("arcpath.config")
            self._config = LibraryConfig()
            self._config_path = config_path
            self._listeners = builtins.set()
            self._initialized = True

            if config_path:
                self.load_config(config_path)
            else:
                self._auto_discover_and_load()

    def _auto_discover_and_load(self) -> bool:
        """Load the first configuration file found in DEFAULT_CONFIG_PATHS."""
        for path in DEFAULT_CONFIG_PATHS:
            if not os.path.exists(path):
                continue
            try:
                self.load_config(path)
            except Exception as e:
                self._logger.warning(f"Failed to load config from {path}: {str(e)}")
                continue
            self._logger.info(f"Configuration loaded from {path}")
            return True

        self._logger.debug("No configuration file found, using defaults")
        return False

    def load_config(self, path: str) -> None:
        """
        Load configuration from a yaml, json or ini file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file type is not supported
        """
        if not os.path.exists(path):
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            config_dict = READERS[_format_of(path)](path)
            self.update_from_dict(config_dict)
            self._config_path = path
        except Exception as e:
            self._logger.error(f"Error loading configuration: {str(e)}")
            raise

    def save_config(self, path: Optional[str] = None) -> None:
        """
        Save the configuration; the format follows the file extension.

        Args:
            path: Target file (the file last loaded when omitted)

        Raises:
            ValueError: If no path is known or the file type is not supported
        """
        save_path = path or self._config_path
        if save_path is None:
            raise ValueError("No configuration path specified")

        try:
            writer = WRITERS[_format_of(save_path)]
            os.makedirs(os.path.dirname(os.path.abspath(save_path)), exist_ok=True)
            writer(save_path, self.as_dict())
        except Exception as e:
            self._logger.error(f"Error saving configuration: {str(e)}")
            raise

        self._logger.info(f"Configuration saved to {save_path}")

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self._config)

    def update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """
        Merge a nested dictionary into the configuration.

        Unknown sections and keys are ignored. Values are converted to the
        type of the field they replace, so string values from ini files and
        the environment behave like their yaml counterparts.
        """
        with self._lock:
            modified = builtins.set()

            for name, value in config_dict.items():
                if not hasattr(self._config, name):
                    continue

                if isinstance(value, dict) and is_dataclass(getattr(self._config, name)):
                    section = getattr(self._config, name)
                    for key, item in value.items():
                        if hasattr(section, key):
                            setattr(section, key, _coerce(getattr(section, key), item))
                            modified.add(name)
                else:
                    setattr(self._config, name, _coerce(getattr(self._config, name), value))
                    modified.add('library')

            for section in modified:
                self._notify_listeners(section)

    def reset(self) -> None:
        """Restore every section to its default values."""
        with self._lock:
            self._config = LibraryConfig()
            for section in [f.name for f in fields(LibraryConfig)]:
                self._notify_listeners(section)

    def add_listener(self, listener: Callable[[str], None]) -> None:
        """Register a callback receiving the name of each changed section."""
        with self._lock:
            self._listeners.add(listener)

    def remove_listener(self, listener: Callable[[str], None]) -> None:
        with self._lock:
            self._listeners.discard(listener)

    def _notify_listeners(self, section: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(section)
            except Exception as e:
                self._logger.warning(f"Error in configuration listener: {str(e)}")

    def get_config(self) -> LibraryConfig:
        """Deep copy of the complete configuration."""
        return copy.deepcopy(self._config)

    def get_trajectory_config(self) -> TrajectoryConfig:
        """Deep copy of the curve construction section."""
        return copy.deepcopy(self._config.trajectory)

    def get_query_config(self) -> QueryConfig:
        """Deep copy of the geometric query section."""
        return copy.deepcopy(self._config.queries)

    def get_logging_config(self) -> LoggingConfig:
        """Deep copy of the logging section."""
        return copy.deepcopy(self._config.logging)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a single configuration value.

        Args:
            section: Section name, e.g. ``"trajectory"``
            key: Field name within the section
            default: Returned when the section or key does not exist

        Returns:
            Any: Configuration value or default
        """
        section_obj = getattr(self._config, section, None)
        if section_obj is None or not hasattr(section_obj, key):
            return default
        return getattr(section_obj, key)

    def set(self, section: str, key: str, value: Any) -> bool:
        """
        Set a single configuration value and notify listeners.

        Returns:
            bool: False if the section or key does not exist
        """
        with self._lock:
            section_obj = getattr(self._config, section, None)
            if section_obj is None or not hasattr(section_obj, key):
                return False
            setattr(section_obj, key, value)

        self._notify_listeners(section)
        return True

    def override_from_env(self, prefix: str = "ARCPATH_") -> None:
        """
        Override values from environment variables named PREFIX_SECTION_KEY.

        ``ARCPATH_TRAJECTORY_MIN_POINTS=8`` sets ``trajectory.min_points``.
        Variables naming an unknown section or key are ignored.
        """
        for env_name, env_value in os.environ.items():
            if not env_name.startswith(prefix):
                continue

            parts = env_name[len(prefix):].lower().split('_', 1)
            if len(parts) != 2:
                continue
            section, key = parts

            current = self.get(section, key)
            if current is None:
                continue

            try:
                value = _coerce(current, env_value)
            except ValueError as e:
                self._logger.warning(f"Failed to override {section}.{key} from environment: {str(e)}")
                continue

            self.set(section, key, value)
            self._logger.info(f"Configuration override from environment: {section}.{key} = {value}")


# Global configuration manager instance
config_manager = ConfigManager()


def get_config() -> LibraryConfig:
    return config_manager.get_config()


def load_config(path: str) -> None:
    config_manager.load_config(path)


def save_config(path: Optional[str] = None) -> None:
    config_manager.save_config(path)


def get(section: str, key: str, default: Any = None) -> Any:
    """Get a single value from the global configuration."""
    return config_manager.get(section, key, default)


def set(section: str, key: str, value: Any) -> bool:
    """Set a single value in the global configuration."""
    return config_manager.set(section, key, value)
