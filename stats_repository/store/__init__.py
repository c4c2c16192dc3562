"""Backing stores for statistics rows."""

from ..config.config import StoreConfig
from .base import StatisticsStore
from .duckdb import DuckDBStatisticsStore
from .postgresql import PostgreSQLStatisticsStore
from .result_row import ResultRow, rows_from_batches
from .schema import create_statistics_tables, STATS_ID_COLUMNS


def create_store(store_config: StoreConfig) -> StatisticsStore:
    """Build the store described by the configuration."""
    if store_config.type == "duckdb":
        return DuckDBStatisticsStore("duckdb", store_config.config)
    if store_config.type == "postgresql":
        return PostgreSQLStatisticsStore("postgresql", store_config.config)
    raise ValueError(f"Unsupported store type: {store_config.type}")


__all__ = [
    "StatisticsStore",
    "DuckDBStatisticsStore",
    "PostgreSQLStatisticsStore",
    "ResultRow",
    "rows_from_batches",
    "create_statistics_tables",
    "create_store",
    "STATS_ID_COLUMNS",
]
