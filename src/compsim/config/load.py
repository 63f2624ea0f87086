"""Configuration loading utilities."""

from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..contracts.errors import ConfigError
from .model import AppConfig

ENV_PREFIX = "COMPSIM_"


def default_config() -> AppConfig:
    """Create default configuration."""
    return AppConfig()


def load_config(path: Optional[Union[str, Path]] = None) -> AppConfig:
    """Load configuration from file or environment.

    Args:
        path: Path to configuration file. If None, looks for:
              - COMPSIM_CONFIG environment variable
              - compsim.toml in current directory

    Returns:
        Loaded and validated configuration

    Raises:
        ConfigError: If configuration file is invalid or not found
    """
    if path is None:
        path = _find_config_file()

    if path is None:
        return _apply_env_overrides(default_config())

    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        config = AppConfig.from_toml_file(path)
    except Exception as e:
        raise ConfigError(f"Failed to load config from {path}: {e}")

    return _apply_env_overrides(config)


def _find_config_file() -> Optional[Path]:
    """Find configuration file using standard search paths."""
    env_path = os.environ.get(f"{ENV_PREFIX}CONFIG")
    if env_path:
        return Path(env_path)

    cwd_config = Path("compsim.toml")
    if cwd_config.exists():
        return cwd_config

    return None


def _apply_env_overrides(config: AppConfig) -> AppConfig:
    """Apply environment variable overrides to configuration.

    Environment variables follow pattern: COMPSIM_<SECTION>_<KEY>
    Examples:
        COMPSIM_RUN_THREADS=4
        COMPSIM_SOLVER_METHOD=BDF
        COMPSIM_LOGGING_LEVEL=DEBUG
    """
    overrides: Dict[str, Dict[str, Any]] = {}

    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX) or key == f"{ENV_PREFIX}CONFIG":
            continue

        parts = key[len(ENV_PREFIX):].lower().split("_", 1)
        if len(parts) != 2:
            continue

        section, field = parts
        overrides.setdefault(section, {})[field] = _convert_env_value(value)

    if not overrides:
        return config

    config_dict = config.model_dump(by_alias=True)
    for section, fields in overrides.items():
        if section in config_dict:
            config_dict[section].update(fields)

    try:
        return AppConfig.model_validate(config_dict)
    except ValueError as e:
        raise ConfigError(f"Invalid environment override: {e}")


def _convert_env_value(value: str) -> Any:
    """Convert string environment variable to appropriate type."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value
