"""SQL construction for the statistics tables."""

from .builder import (
    StatisticsQueryBuilder,
    sql_literal,
    sql_table,
    escape_sql,
    render,
)

__all__ = [
    "StatisticsQueryBuilder",
    "sql_literal",
    "sql_table",
    "escape_sql",
    "render",
]
