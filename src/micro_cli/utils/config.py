"""
Configuration System

Optional project-level configuration for the micro CLI. Features:
- Single-file YAML loading (micro.yml) with environment resolution
- .env loading from the working directory without overriding existing variables
- Dot-path access with documented defaults for every setting
- Per-path caching so one invocation reads the file once

A project without micro.yml runs on the built-in defaults.
"""

import copy
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

# Use standard logging (not get_logger) to avoid circular imports with logger.py
logger = logging.getLogger("CONFIG")

CONFIG_FILENAME = "micro.yml"

DEFAULTS: dict[str, Any] = {
    "composer": {
        "base_image": "prooph/php",
        "image": "prooph/composer",
        "manifest": "composer.json",
        "mount_path": "/app",
        "timeout": 0,
        "idle_timeout": 30,
    },
    "project": {
        "descriptor": "docker-compose.yml",
        "service_dir": "service",
    },
    "container_runtime": "docker",
    "logging": {
        "level": "INFO",
        "rich_tracebacks": True,
        "show_traceback_locals": False,
        "show_full_paths": False,
        "logging_colors": {},
    },
}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``, recursing into nested mappings."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigBuilder:
    """
    Configuration builder for micro CLI projects.

    Features:
    - Optional YAML file; absent file means defaults only
    - Environment variable resolution in string values
    - Raw values kept alongside defaults-merged values
    """

    def __init__(self, config_path: str | Path | None = None):
        """
        Initialize configuration builder.

        Args:
            config_path: Path to micro.yml. If None, looks in the current directory.
        """
        # Load .env file from current working directory
        try:
            from dotenv import load_dotenv

            dotenv_path = Path.cwd() / ".env"
            if dotenv_path.exists():
                load_dotenv(dotenv_path, override=False)  # Don't override existing env vars
                logger.debug(f"Loaded .env file from {dotenv_path}")
        except ImportError:
            logger.warning("python-dotenv not available, skipping .env file loading")

        if config_path is None:
            config_path = Path.cwd() / CONFIG_FILENAME

        self.config_path = Path(config_path)
        self.raw_config = self._load_config()
        self.config = _deep_merge(DEFAULTS, self.raw_config)

    def _load_yaml_file(self, file_path: Path) -> dict[str, Any]:
        """Load and validate a YAML configuration file."""
        try:
            with open(file_path) as f:
                config = yaml.safe_load(f)

            if config is None:
                logger.warning(f"Configuration file is empty: {file_path}")
                return {}

            if not isinstance(config, dict):
                error_msg = f"Configuration file must contain a dictionary/mapping: {file_path}"
                logger.error(error_msg)
                raise ValueError(error_msg)

            logger.debug(f"Loaded configuration from {file_path}")
            return config
        except yaml.YAMLError as e:
            error_msg = f"Error parsing YAML configuration: {e}"
            logger.error(error_msg)
            raise yaml.YAMLError(error_msg) from e

    def _resolve_env_vars(self, data: Any) -> Any:
        """Recursively resolve environment variables in configuration data.

        Supports both simple and bash-style default value syntax:
        - ${VAR_NAME} - simple substitution
        - ${VAR_NAME:-default_value} - with default value
        - $VAR_NAME - simple substitution without braces
        """
        if isinstance(data, dict):
            return {key: self._resolve_env_vars(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [self._resolve_env_vars(item) for item in data]
        elif isinstance(data, str):

            def replace_env_var(match):
                if match.group(1):  # ${VAR_NAME:-default} or ${VAR_NAME}
                    var_name = match.group(1)
                    default_value = match.group(2)
                else:  # $VAR_NAME
                    var_name = match.group(3)
                    default_value = None

                env_value = os.environ.get(var_name)
                if env_value is None:
                    if default_value is not None:
                        return default_value
                    logger.debug(f"Environment variable '{var_name}' not found, keeping original value")
                    return match.group(0)
                return env_value

            pattern = r"\$\{([^}:]+)(?::-(.*?))?\}|\$([A-Za-z_][A-Za-z0-9_]*)"
            return re.sub(pattern, replace_env_var, data)
        else:
            return data

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from the file if present, with variables resolved."""
        if not self.config_path.exists():
            logger.debug(f"No {self.config_path.name} found at {self.config_path}, using defaults")
            return {}

        config = self._load_yaml_file(self.config_path)
        return self._resolve_env_vars(config)

    def get(self, path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation path."""
        keys = path.split(".")
        value = self.config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default


# =============================================================================
# GLOBAL CONFIGURATION
# =============================================================================

# Per-path config cache
_config_cache: dict[str, ConfigBuilder] = {}


def _default_config_path() -> Path:
    """Resolve the default config location (MICRO_CONFIG env var, else ./micro.yml)."""
    env_path = os.environ.get("MICRO_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path.cwd() / CONFIG_FILENAME


def project_config_path(project_dir: str | Path, config_path: str | Path | None = None) -> Path:
    """Config location for a project: explicit path, then MICRO_CONFIG, then <project>/micro.yml."""
    if config_path:
        return Path(config_path)
    env_path = os.environ.get("MICRO_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path(project_dir) / CONFIG_FILENAME


def get_config_builder(config_path: str | Path | None = None) -> ConfigBuilder:
    """Get configuration builder instance, cached per resolved path.

    Args:
        config_path: Optional explicit path to micro.yml. If None, uses the
                    MICRO_CONFIG env var or micro.yml in the current directory.

    Returns:
        ConfigBuilder instance

    Examples:
        >>> config = get_config_builder()
        >>> idle = config.get("composer.idle_timeout", 30)
    """
    path = Path(config_path) if config_path is not None else _default_config_path()
    resolved_path = str(path.resolve())

    if resolved_path not in _config_cache:
        _config_cache[resolved_path] = ConfigBuilder(path)

    return _config_cache[resolved_path]


def reset_config_cache() -> None:
    """Drop cached configurations (used when the project directory changes and in tests)."""
    _config_cache.clear()


def get_config_value(path: str, default: Any = None, config_path: str | Path | None = None) -> Any:
    """
    Get a specific configuration value by dot-separated path.

    Args:
        path: Dot-separated configuration path (e.g., "composer.idle_timeout")
        default: Default value to return if path is not found
        config_path: Optional explicit path to configuration file

    Returns:
        The configuration value at the specified path, or default if not found

    Raises:
        ValueError: If path is empty or None

    Examples:
        >>> get_config_value("composer.timeout", 0)
        0
    """
    if not path:
        raise ValueError("Configuration path cannot be empty or None")

    return get_config_builder(config_path).get(path, default)
