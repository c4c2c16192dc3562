"""Composite identifiers addressing a statistic."""

from dataclasses import dataclass
from typing import Any, Optional

from ..store.result_row import ResultRow

# Index id of the base table
BASE_INDEX_ID = -1


def construct_id(*parts: Any) -> str:
    """Join identifier parts with '-' in the given order.

    >>> construct_id(100, -1, "amount")
    '100--1-amount'
    """
    return "-".join(str(part) for part in parts)


@dataclass(frozen=True)
class StatisticIdentifier:
    """Full address of a statistic row."""

    catalog_id: int
    db_id: int
    table_id: int
    index_id: int
    column_name: str
    partition_id: Optional[int] = None

    @property
    def id(self) -> str:
        """Canonical id, partition-scoped when a partition is set."""
        if self.partition_id is None:
            return construct_id(self.table_id, self.index_id, self.column_name)
        return construct_id(self.table_id, self.index_id, self.column_name, self.partition_id)

    @property
    def is_partition_scoped(self) -> bool:
        return self.partition_id is not None

    def cache_key(self) -> "StatisticsCacheKey":
        return StatisticsCacheKey(self.table_id, self.index_id, self.column_name)

    def for_partition(self, partition_id: int) -> "StatisticIdentifier":
        return StatisticIdentifier(
            catalog_id=self.catalog_id,
            db_id=self.db_id,
            table_id=self.table_id,
            index_id=self.index_id,
            column_name=self.column_name,
            partition_id=partition_id,
        )


@dataclass(frozen=True)
class StatisticsCacheKey:
    """Key of a table-granularity statistic in the cache."""

    table_id: int
    index_id: int
    column_name: str

    def __str__(self) -> str:
        return construct_id(self.table_id, self.index_id, self.column_name)


def _parse_optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    return int(str(value).strip())


@dataclass(frozen=True)
class StatsId:
    """Identity columns of a stored statistic row."""

    id: str
    catalog_id: int
    db_id: int
    tbl_id: int
    idx_id: int
    col_id: str
    part_id: Optional[int] = None

    @classmethod
    def from_result_row(cls, row: ResultRow) -> "StatsId":
        """Parse the identity columns of a row.

        Raises:
            ValueError: If a numeric id column does not parse
        """
        part_id = row.get("part_id") if "part_id" in row else None
        return cls(
            id=str(row.get("id")),
            catalog_id=int(row.get("catalog_id")),
            db_id=int(row.get("db_id")),
            tbl_id=int(row.get("tbl_id")),
            idx_id=int(row.get("idx_id")),
            col_id=str(row.get("col_id")),
            part_id=_parse_optional_int(part_id),
        )
