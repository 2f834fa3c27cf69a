"""
Configuration management for the iTunes library reader.

This module provides centralized configuration loading and access,
supporting YAML files and environment variable overrides.
"""

import copy
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar, Union

import yaml

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ENV_PREFIX = "ITUNES_LIBRARY_"


class ConfigurationManager:
    """
    Centralized configuration management.

    Loads configuration from a YAML file, applies environment variable
    overrides and provides dot-path access with defaults.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the config YAML file (defaults to config.yml
                found above the package directory)
        """
        self.config_path = config_path or self._find_config_file()
        self._base_config: Dict[str, Any] = {}
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _find_config_file(self) -> str:
        """Find the config.yml file in the project root."""
        current_dir = Path(__file__).parent
        for _ in range(4):
            config_file = current_dir / "config.yml"
            if config_file.exists():
                return str(config_file)
            current_dir = current_dir.parent

        return "config.yml"

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                self._base_config = yaml.safe_load(f) or {}

            self._config = copy.deepcopy(self._base_config)

            if self._base_config.get("environment_overrides", {}).get("enabled"):
                self._apply_env_overrides()

            logger.info(f"✅ Loaded configuration from {self.config_path}")

        except FileNotFoundError:
            logger.warning(
                f"⚠️  Config file not found: {self.config_path}. Using defaults."
            )
            self._base_config = {}
            self._config = {}
        except yaml.YAMLError as e:
            logger.error(f"❌ Error parsing config YAML: {e}. Using defaults.")
            self._base_config = {}
            self._config = {}

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        env_config = self._base_config.get("environment_overrides", {})
        prefix = env_config.get("prefix", DEFAULT_ENV_PREFIX)
        mappings = env_config.get("mappings", {})

        overrides_applied = 0
        for config_path, env_suffix in mappings.items():
            env_value = os.getenv(f"{prefix}{env_suffix}")

            if env_value is not None:
                converted_value = self._convert_env_value(env_value)
                self._set_nested_value(config_path, converted_value)
                overrides_applied += 1
                logger.info(
                    f"🔧 Environment override: {config_path} = {converted_value}"
                )

        if overrides_applied:
            logger.info(f"✅ Applied {overrides_applied} environment overrides")

    def _convert_env_value(self, value: str) -> Union[str, int, float, bool]:
        """Convert environment variable string to appropriate type."""
        if value.lower() in ("true", "yes", "on"):
            return True
        elif value.lower() in ("false", "no", "off"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def _set_nested_value(self, path: str, value: Any) -> None:
        """Set a nested configuration value using dot notation."""
        keys = path.split(".")
        current = self._config

        for key in keys[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def get(
        self, path: str, default: Any = None, type_hint: Optional[Type[T]] = None
    ) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            path: Dot-separated path to the config value (e.g., 'library.sort_tracks_by_id')
            default: Default value if path doesn't exist
            type_hint: Optional type hint for return value

        Returns:
            Configuration value with optional type casting
        """
        current: Any = self._config

        try:
            for key in path.split("."):
                current = current[key]

            if type_hint and current is not None:
                # Quoted YAML scalars such as "false" arrive as strings
                if isinstance(current, str) and type_hint != str:
                    current = self._convert_env_value(current)
                try:
                    if type_hint == bool:
                        return bool(current)
                    elif type_hint == int:
                        return int(current)
                    elif type_hint == float:
                        return float(current)
                    elif type_hint == str:
                        return str(current)
                except (ValueError, TypeError):
                    pass

            return current

        except (KeyError, TypeError):
            return default

    def get_section(self, section: str) -> Any:
        """Get an entire configuration section."""
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience accessors

    @property
    def parsing_options(self) -> Dict[str, bool]:
        """Options controlling how library files are decoded."""
        return {
            "strip_control_characters": self.get(
                "parsing.strip_control_characters", True, bool
            ),
            "forbid_entities": self.get("parsing.forbid_entities", True, bool),
        }

    @property
    def library_options(self) -> Dict[str, bool]:
        """Options controlling the library store and queries."""
        return {
            "sort_tracks_by_id": self.get("library.sort_tracks_by_id", True, bool),
            "keep_snapshot_on_reload_failure": self.get(
                "library.keep_snapshot_on_reload_failure", True, bool
            ),
        }

    @property
    def log_level(self) -> str:
        return str(self.get("logging.level", "INFO")).upper()


# Global configuration instance with thread-safe initialization
_config_instance: Optional[ConfigurationManager] = None
_config_lock = threading.Lock()


def get_config(config_path: Optional[str] = None) -> ConfigurationManager:
    """
    Get the global configuration instance using double-checked locking.

    Args:
        config_path: Path to config file (only used on first call)

    Returns:
        ConfigurationManager instance
    """
    global _config_instance

    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = ConfigurationManager(config_path)

    return _config_instance


def reload_config() -> None:
    """Reload the global configuration in a thread-safe manner."""
    global _config_instance

    with _config_lock:
        if _config_instance:
            _config_instance.reload()
        else:
            _config_instance = ConfigurationManager()


def reset_config() -> None:
    """
    Reset the global configuration instance.

    This is primarily intended for unit tests to ensure clean state.
    """
    global _config_instance

    with _config_lock:
        _config_instance = None
