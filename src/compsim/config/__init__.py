"""Application configuration."""

from .model import AppConfig, LoggingConfig, RunConfig, SolverConfig
from .load import default_config, load_config

__all__ = [
    "AppConfig",
    "LoggingConfig",
    "RunConfig",
    "SolverConfig",
    "default_config",
    "load_config",
]
