"""Configuration manager for loading and validating .apiretry.yml"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from apiretry.domain.config import AppConfig, HttpConfig, RetryConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".apiretry.yml"

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "APIRETRY_MAX_RETRIES": ("retry", "max_retries"),
    "APIRETRY_INITIAL_DELAY": ("retry", "initial_delay"),
    "APIRETRY_MAX_DELAY": ("retry", "max_delay"),
    "APIRETRY_BACKOFF_MULTIPLIER": ("retry", "backoff_multiplier"),
    "APIRETRY_TIMEOUT": ("http", "timeout"),
}


class ConfigurationError(Exception):
    """Configuration validation error."""

    pass


class ConfigManager:
    """Manages configuration from .apiretry.yml and environment variables

    Configuration priority:
    1. Default values (defined in Pydantic models)
    2. .apiretry.yml file (searched from current directory upwards)
    3. Environment variables (APIRETRY_*)
    4. CLI arguments (handled by CLI layer)
    """

    DEFAULT_CONFIG = {
        "retry": {
            "max_retries": 5,
            "initial_delay": 1000,
            "max_delay": 60000,
            "backoff_multiplier": 2,
        },
        "http": {
            "timeout": 30.0,
            "headers": {"Accept": "application/json"},
        },
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager

        Args:
            config_path: Path to .apiretry.yml (searches from current dir if None)

        Raises:
            ConfigurationError: If configuration validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        try:
            self.config: AppConfig = self._load_config()
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                errors.append(f"  - {field}: {error['msg']}")
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(errors)
            ) from e

    def _find_config_file(self) -> Optional[Path]:
        """Find .apiretry.yml starting from current directory

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_file = parent / CONFIG_FILE_NAME
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return config_file
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
        return None

    def _load_config(self) -> AppConfig:
        """Load configuration from file and env, then validate

        Raises:
            ValidationError: If configuration is invalid
        """
        config_dict = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
                if not isinstance(file_config, dict):
                    raise ValueError("top-level YAML value must be a mapping")
                config_dict = self._merge_config(config_dict, _normalize_keys(file_config))
                logger.info(f"Loaded configuration from {self.config_path}")
            except (OSError, yaml.YAMLError, ValueError) as e:
                logger.warning(f"Failed to load config from {self.config_path}: {e}")
                logger.info("Using default configuration")

        config_dict = self._apply_env_overrides(config_dict)
        return AppConfig(**config_dict)

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries"""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply APIRETRY_* environment variable overrides

        Values are passed as strings; pydantic coerces them during validation.
        """
        for env_name, (section, key) in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                section_config = config.setdefault(section, {})
                if isinstance(section_config, dict):
                    section_config[key] = value
        return config

    def get_retry_config(self) -> RetryConfig:
        """Get retry configuration"""
        return self.config.retry

    def get_http_config(self) -> HttpConfig:
        """Get HTTP configuration"""
        return self.config.http

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key (supports dot notation)

        Args:
            key: Configuration key (e.g., "retry.max_retries" or "retry")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self.config.model_dump()
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value


def _snake_case(name: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in name).lstrip("_")


def _normalize_keys(config: Dict[str, Any]) -> Dict[str, Any]:
    """Convert camelCase retry keys (maxRetries) to snake_case (max_retries)."""
    result: Dict[str, Any] = {}
    for section, value in config.items():
        if section == "retry" and isinstance(value, dict):
            value = {_snake_case(str(k)): v for k, v in value.items()}
        result[section] = value
    return result
