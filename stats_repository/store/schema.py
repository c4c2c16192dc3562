"""Schema of the internal statistics tables."""

from typing import List, Tuple
import logging

import sqlglot
from sqlglot import exp

from ..config.config import StatisticsConfig
from .base import StatisticsStore

logger = logging.getLogger(__name__)

# Identity columns shared by both tables
STATS_ID_COLUMNS = ["id", "catalog_id", "db_id", "tbl_id", "idx_id", "col_id", "part_id"]

COLUMN_STATISTICS_SCHEMA: List[Tuple[str, str]] = [
    ("id", "VARCHAR"),
    ("catalog_id", "BIGINT"),
    ("db_id", "BIGINT"),
    ("tbl_id", "BIGINT"),
    ("idx_id", "BIGINT"),
    ("col_id", "VARCHAR"),
    ("part_id", "VARCHAR"),
    ("count", "DOUBLE"),
    ("ndv", "DOUBLE"),
    ("null_count", "DOUBLE"),
    ("min", "VARCHAR"),
    ("max", "VARCHAR"),
    ("data_size", "DOUBLE"),
    ("update_time", "TIMESTAMP"),
]

HISTOGRAM_SCHEMA: List[Tuple[str, str]] = [
    ("id", "VARCHAR"),
    ("catalog_id", "BIGINT"),
    ("db_id", "BIGINT"),
    ("tbl_id", "BIGINT"),
    ("idx_id", "BIGINT"),
    ("col_id", "VARCHAR"),
    ("sample_rate", "DOUBLE"),
    ("buckets", "VARCHAR"),
    ("update_time", "TIMESTAMP"),
]


def _quoted(name: str) -> str:
    return exp.to_identifier(name, quoted=True).sql(dialect="duckdb")


def _create_table_sql(db_name: str, table_name: str, columns: List[Tuple[str, str]]) -> str:
    column_defs = ", ".join(f"{_quoted(name)} {type_name}" for name, type_name in columns)
    return f"CREATE TABLE IF NOT EXISTS {_quoted(db_name)}.{_quoted(table_name)} ({column_defs})"


def create_statistics_tables(store: StatisticsStore, config: StatisticsConfig) -> None:
    """Create the internal schema and statistics tables when missing.

    Args:
        store: Store to create the tables in
        config: Names of the schema and tables
    """
    statements = [
        f"CREATE SCHEMA IF NOT EXISTS {_quoted(config.internal_db_name)}",
        _create_table_sql(config.internal_db_name, config.statistic_table, COLUMN_STATISTICS_SCHEMA),
        _create_table_sql(config.internal_db_name, config.histogram_table, HISTOGRAM_SCHEMA),
    ]
    for statement in statements:
        rendered = sqlglot.transpile(statement, read="duckdb", write=store.dialect)[0]
        store.exec_update(rendered)
    logger.info(
        f"Statistics tables ready in {config.internal_db_name} on store {store.name}"
    )
