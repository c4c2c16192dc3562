"""Configuration management for the statistics repository."""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional
import yaml
from pathlib import Path


@dataclass
class StoreConfig:
    """Configuration for the backing statistics store."""

    type: str = "duckdb"  # "duckdb" or "postgresql"
    config: Dict[str, Any] = field(
        default_factory=lambda: {"path": ":memory:", "read_only": False}
    )


@dataclass
class StatisticsConfig:
    """Configuration for statistics persistence."""

    internal_db_name: str = "__internal_schema"
    statistic_table: str = "column_statistics"
    histogram_table: str = "histogram_statistics"
    max_allowed_in_element_num_of_delete: int = 100
    stats_cache_size: int = 500000


@dataclass
class LoggingConfig:
    """Configuration for logging output."""

    level: str = "INFO"
    structured: bool = False
    log_file: Optional[str] = None


@dataclass
class Config:
    """Main configuration class."""

    store: StoreConfig = field(default_factory=StoreConfig)
    statistics: StatisticsConfig = field(default_factory=StatisticsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    catalogs: Dict[str, Any] = field(default_factory=dict)


def load_config(config_path: str) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Parsed configuration

    Example YAML format:
        store:
          type: duckdb
          path: /data/stats.duckdb
          read_only: false

        statistics:
          max_allowed_in_element_num_of_delete: 100
          stats_cache_size: 10000

        logging:
          level: DEBUG
          structured: true

        catalogs:
          internal:
            id: 0
            databases:
              sales:
                id: 10
                tables:
                  orders:
                    id: 100
                    columns:
                      amount: DOUBLE
                      placed_at: DATE
                    partitions:
                      p2024: 1001
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    # Parse store
    store_data = dict(data.get("store", {}))
    if store_data:
        store_type = store_data.pop("type", "duckdb")
        store = StoreConfig(type=store_type, config=store_data)
    else:
        store = StoreConfig()

    # Parse statistics config
    statistics = StatisticsConfig(**data.get("statistics", {}))
    if statistics.max_allowed_in_element_num_of_delete < 1:
        raise ValueError("max_allowed_in_element_num_of_delete must be at least 1")

    logging_config = LoggingConfig(**data.get("logging", {}))

    return Config(
        store=store,
        statistics=statistics,
        logging=logging_config,
        catalogs=data.get("catalogs", {}),
    )
