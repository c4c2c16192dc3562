"""Typed construction of the statements run against the statistics tables.

Every literal goes through ``sql_literal`` and every statement is rendered by
sqlglot for the store's dialect, which escapes quotes and backslashes the way
that dialect expects. Nothing is assembled by string concatenation.
"""

from datetime import datetime
import math
from typing import Any, Iterable, List, Optional, Sequence

from sqlglot import exp

from ..config.config import StatisticsConfig
from ..store.schema import COLUMN_STATISTICS_SCHEMA, HISTOGRAM_SCHEMA, STATS_ID_COLUMNS

# Alias of the ranked rows in "current rows" queries
CURRENT_ALIAS = "s"
_RANK_COLUMN = "row_rank"

INSERT_COLUMNS = STATS_ID_COLUMNS + [
    "count",
    "ndv",
    "null_count",
    "min",
    "max",
    "data_size",
    "update_time",
]


def sql_literal(value: Any) -> exp.Expression:
    """Convert a Python value into a SQL literal expression.

    Raises:
        ValueError: For values with no SQL literal form
    """
    if value is None:
        return exp.null()
    if isinstance(value, bool):
        return exp.Boolean(this=value)
    if isinstance(value, int):
        return exp.Literal.number(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ValueError(f"Non-finite number has no SQL literal: {value}")
        return exp.Literal.number(repr(value))
    if isinstance(value, datetime):
        return exp.cast(exp.Literal.string(value.isoformat(sep=" ")), "TIMESTAMP")
    if isinstance(value, str):
        return exp.Literal.string(value)
    raise ValueError(f"Unsupported literal type: {type(value).__name__}")


def render(expression: exp.Expression, dialect: str = "duckdb") -> str:
    """Render an expression as SQL text with every identifier quoted."""
    return expression.sql(dialect=dialect, identify=True)


def escape_sql(value: str, dialect: str = "duckdb") -> str:
    """Escape text for use inside a single-quoted string literal."""
    return render(exp.Literal.string(value), dialect)[1:-1]


def column(name: str, table: Optional[str] = None) -> exp.Column:
    return exp.column(name, table=table)


def sql_table(db_name: str, table_name: str, alias: Optional[str] = None) -> exp.Table:
    """Qualified table reference, optionally aliased."""
    return exp.table_(table_name, db=db_name, alias=alias)


def in_list(expression: exp.Expression, values: Iterable[Any]) -> exp.Expression:
    return expression.isin(*[sql_literal(value) for value in values])


class StatisticsQueryBuilder:
    """Builds the statements for one statistics schema."""

    def __init__(self, config: StatisticsConfig, dialect: str = "duckdb"):
        self.config = config
        self.dialect = dialect

    def render(self, expression: exp.Expression) -> str:
        """Render a statement in the store dialect."""
        return render(expression, self.dialect)

    def _table(self, table_name: str, alias: Optional[str] = None) -> exp.Table:
        return sql_table(self.config.internal_db_name, table_name, alias)

    def _schema_columns(self, table_name: str) -> List[str]:
        if table_name == self.config.histogram_table:
            return [name for name, _ in HISTOGRAM_SCHEMA]
        return [name for name, _ in COLUMN_STATISTICS_SCHEMA]

    def _current_rows(self, table_name: str, *columns: str) -> exp.Select:
        """Select the newest row of every id.

        Rows are never updated in place. Rows of an id are ranked by
        update_time, newest first, with the remaining value columns as a
        tie-break so exactly one row per id survives even when two writes
        share a timestamp. Filters added by callers apply to the ranked rows.

        Args:
            table_name: Statistics or histogram table
            columns: Columns to project, every schema column when omitted

        Returns:
            Select over the ranked rows aliased as ``CURRENT_ALIAS``
        """
        schema_columns = self._schema_columns(table_name)
        tie_break = [
            name
            for name in schema_columns
            if name not in STATS_ID_COLUMNS and name != "update_time"
        ]
        ordering = [
            exp.Ordered(this=column(name), desc=True) for name in ["update_time", *tie_break]
        ]
        rank = exp.Window(
            this=exp.RowNumber(),
            partition_by=[column("id")],
            order=exp.Order(expressions=ordering),
        )
        ranked = exp.select(
            *[column(name) for name in schema_columns],
            exp.alias_(rank, _RANK_COLUMN),
        ).from_(self._table(table_name))
        projection = columns or schema_columns
        return (
            exp.select(*[column(name) for name in projection])
            .from_(ranked.subquery(CURRENT_ALIAS))
            .where(column(_RANK_COLUMN).eq(sql_literal(1)))
        )

    def fetch_by_id(self, stat_id: str, histogram: bool = False) -> exp.Select:
        """Current row of one id from the statistics or histogram table."""
        table_name = self.config.histogram_table if histogram else self.config.statistic_table
        return self._current_rows(table_name).where(column("id").eq(sql_literal(stat_id)))

    def fetch_by_ids(self, stat_ids: Sequence[str]) -> exp.Select:
        """Current statistic rows of several ids."""
        return self._current_rows(self.config.statistic_table).where(
            in_list(column("id"), stat_ids)
        )

    def insert_statistic(
        self,
        stat_id: str,
        catalog_id: int,
        db_id: int,
        table_id: int,
        index_id: int,
        column_name: str,
        partition_id: Optional[int],
        count: Optional[float],
        ndv: Optional[float],
        null_count: Optional[float],
        min_text: Optional[str],
        max_text: Optional[str],
        data_size: Optional[float],
        update_time: datetime,
    ) -> exp.Insert:
        """Append one statistic row; the partition id is stored as text."""
        part_id = str(partition_id) if partition_id is not None else None
        values = [
            stat_id,
            catalog_id,
            db_id,
            table_id,
            index_id,
            column_name,
            part_id,
            count,
            ndv,
            null_count,
            min_text,
            max_text,
            data_size,
            update_time,
        ]
        row = tuple(sql_literal(value) for value in values)
        return exp.insert(
            exp.values([row]),
            self._table(self.config.statistic_table),
            columns=INSERT_COLUMNS,
        )

    def insert_histogram(
        self,
        stat_id: str,
        catalog_id: int,
        db_id: int,
        table_id: int,
        index_id: int,
        column_name: str,
        sample_rate: Optional[float],
        buckets_json: str,
        update_time: datetime,
    ) -> exp.Insert:
        """Append one histogram row with buckets as JSON text."""
        values = [
            stat_id,
            catalog_id,
            db_id,
            table_id,
            index_id,
            column_name,
            sample_rate,
            buckets_json,
            update_time,
        ]
        row = tuple(sql_literal(value) for value in values)
        return exp.insert(
            exp.values([row]),
            self._table(self.config.histogram_table),
            columns=STATS_ID_COLUMNS[:6] + ["sample_rate", "buckets", "update_time"],
        )

    def delete_by_columns(
        self, stats_table: str, table_id: int, column_names: Sequence[str]
    ) -> exp.Delete:
        """Delete rows of the listed columns of one table."""
        condition = exp.and_(
            column("tbl_id").eq(sql_literal(table_id)),
            in_list(column("col_id"), column_names),
        )
        return exp.delete(self._table(stats_table), where=condition)

    def delete_by_partitions(self, stats_table: str, partition_ids: Sequence[Any]) -> exp.Delete:
        """Delete every row of the listed partitions."""
        part_ids = [str(part_id) for part_id in partition_ids]
        return exp.delete(self._table(stats_table), where=in_list(column("part_id"), part_ids))

    def recent_table_stats(self, limit: int) -> exp.Select:
        """Newest table-level rows, at most ``limit`` of them."""
        return (
            self._current_rows(self.config.statistic_table)
            .where(column("part_id").is_(exp.null()))
            .order_by(exp.Ordered(this=column("update_time"), desc=True))
            .limit(limit)
        )

    def full_names(self, limit: int, offset: int) -> exp.Select:
        """Page of identity columns ordered by update time, then id."""
        return (
            self._current_rows(self.config.statistic_table, *STATS_ID_COLUMNS)
            .order_by(
                exp.Ordered(this=column("update_time"), desc=False),
                exp.Ordered(this=column("id"), desc=False),
            )
            .limit(limit)
            .offset(offset)
        )

    def partition_stats_for_table(self, table_id: int) -> exp.Select:
        """Current partition-level rows of one table."""
        return self._current_rows(self.config.statistic_table).where(
            exp.and_(
                column("tbl_id").eq(sql_literal(table_id)),
                exp.not_(column("part_id").is_(exp.null())),
            )
        )

    def partition_stats_for_keys(self, keys: Sequence[str]) -> exp.Select:
        """Partition rows whose "tbl-idx-col" prefix is one of ``keys``."""
        key_expr = exp.Concat(
            expressions=[
                exp.cast(column("tbl_id"), "VARCHAR"),
                sql_literal("-"),
                exp.cast(column("idx_id"), "VARCHAR"),
                sql_literal("-"),
                column("col_id"),
            ]
        )
        return self._current_rows(self.config.statistic_table).where(
            exp.and_(
                in_list(key_expr, keys),
                exp.not_(column("part_id").is_(exp.null())),
            )
        )
