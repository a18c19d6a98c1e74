"""Configuration manager for shellagent."""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from ..constants import (
    CONFIG_DIR, API_KEY_ENV_VAR,
    DEFAULT_ENDPOINT, DEFAULT_ANTHROPIC_VERSION, DEFAULT_MODEL, DEFAULT_MAX_TOKENS,
    DEFAULT_REQUEST_TIMEOUT, DEFAULT_OUTPUT_DIR, DEFAULT_MAX_ITERATIONS,
    DEFAULT_COMMAND_TIMEOUT, DEFAULT_ENABLE_DEBUG
)
from ..errors import ConfigError
from ..utils.logging import logger
from ..utils.helpers import ensure_directory_exists, safe_file_write
from .templates import CONFIG_TEMPLATE

DEFAULTS: Dict[str, Any] = {
    "endpoint": DEFAULT_ENDPOINT,
    "api_key": None,
    "anthropic_version": DEFAULT_ANTHROPIC_VERSION,
    "model": DEFAULT_MODEL,
    "max_tokens": DEFAULT_MAX_TOKENS,
    "max_iterations": DEFAULT_MAX_ITERATIONS,
    "command_timeout": DEFAULT_COMMAND_TIMEOUT,
    "request_timeout": DEFAULT_REQUEST_TIMEOUT,
    "output_dir": str(DEFAULT_OUTPUT_DIR),
    "enable_debug": DEFAULT_ENABLE_DEBUG,
    "prompt_template": None,
    "force_root": False,
    "output_file": None,
}

_STRING_KEYS = ("endpoint", "anthropic_version", "model", "output_dir")
_OPTIONAL_STRING_KEYS = ("api_key", "prompt_template", "output_file")
_POSITIVE_INT_KEYS = ("max_tokens", "max_iterations")
_POSITIVE_NUMBER_KEYS = ("command_timeout", "request_timeout")
_BOOL_KEYS = ("enable_debug", "force_root")


def validate_config(config_data: Dict[str, Any], source: str) -> Dict[str, Any]:
    """Check value types, raising ConfigError for anything that cannot be used."""
    for key in _STRING_KEYS:
        value = config_data.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"'{key}' in {source} must be a non-empty string, got {value!r}.")

    for key in _OPTIONAL_STRING_KEYS:
        value = config_data.get(key)
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"'{key}' in {source} must be a string, got {value!r}.")

    for key in _POSITIVE_INT_KEYS:
        value = config_data.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigError(f"'{key}' ('{value}') in {source} must be a positive integer.")

    for key in _POSITIVE_NUMBER_KEYS:
        value = config_data.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigError(f"'{key}' ('{value}') in {source} must be a positive number of seconds.")

    for key in _BOOL_KEYS:
        value = config_data.get(key)
        if not isinstance(value, bool):
            logger.warning(f"'{key}' in {source} must be true/false. Defaulting to {DEFAULTS[key]}.")
            config_data[key] = DEFAULTS[key]

    return config_data


class ConfigManager:
    """Loads configuration from YAML, the environment and command-line overrides."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize the configuration manager.

        Args:
            config_dir: Custom configuration directory path
        """
        self.config_dir = Path(config_dir) if config_dir else CONFIG_DIR
        self.config_file = self.config_dir / "config.yaml"
        self._config: Optional[Dict[str, Any]] = None

    def initialize(self, overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Load the file, apply environment and command-line overrides, validate.

        Precedence: command line > environment > config file > defaults.
        """
        self._ensure_config_file()

        config_data = dict(DEFAULTS)
        config_data.update(self._load_file())

        env_api_key = os.environ.get(API_KEY_ENV_VAR)
        if env_api_key:
            config_data["api_key"] = env_api_key

        if overrides:
            config_data.update({k: v for k, v in overrides.items() if v is not None})

        self._config = validate_config(config_data, str(self.config_file))
        logger.debug(f"Configuration loaded from {self.config_file}")
        return self.config

    def _ensure_config_file(self) -> None:
        """Write a commented template on first run."""
        if self.config_file.exists():
            return
        try:
            ensure_directory_exists(self.config_dir)
        except OSError:
            logger.warning(f"Could not create {self.config_dir}; continuing with defaults.")
            return
        content = CONFIG_TEMPLATE.format(**DEFAULTS)
        if safe_file_write(self.config_file, content, "config template"):
            logger.system(f"Configuration template generated: {self.config_file}")

    def _load_file(self) -> Dict[str, Any]:
        if not self.config_file.exists():
            return {}

        try:
            with open(self.config_file, 'r', encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing YAML file {self.config_file}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Could not read {self.config_file}: {e}") from e

        if config_data is None:
            return {}
        if not isinstance(config_data, dict):
            raise ConfigError(f"{self.config_file} is not a valid YAML dictionary.")

        unknown = sorted(set(config_data) - set(DEFAULTS))
        if unknown:
            logger.warning(f"Ignoring unknown keys in {self.config_file}: {', '.join(unknown)}")
        return {k: v for k, v in config_data.items() if k in DEFAULTS}

    @property
    def config(self) -> Dict[str, Any]:
        """Get the current configuration."""
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call initialize() first.")
        return self._config.copy()

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call initialize() first.")
        return self._config.get(key, default)


def create_config_manager(config_dir: Optional[Path] = None,
                          overrides: Optional[Mapping[str, Any]] = None) -> ConfigManager:
    """Create and initialize a configuration manager.

    Raises:
        ConfigError: if the configuration is invalid
    """
    manager = ConfigManager(config_dir)
    manager.initialize(overrides)
    return manager
