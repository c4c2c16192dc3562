"""Configuration management."""

from .config import (
    Config,
    StoreConfig,
    StatisticsConfig,
    LoggingConfig,
    load_config,
)

__all__ = [
    "Config",
    "StoreConfig",
    "StatisticsConfig",
    "LoggingConfig",
    "load_config",
]
