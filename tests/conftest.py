"""Shared fixtures for statistics repository tests."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pytest

from stats_repository.catalog import (
    Catalog,
    Column,
    Database,
    DataType,
    MetadataCatalog,
    Partition,
    Table,
)
from stats_repository.config import StatisticsConfig
from stats_repository.errors import StatisticsExecutionError
from stats_repository.statistics import ColumnStatistic, StatisticsRepository, TableStatsRegistry
from stats_repository.store import DuckDBStatisticsStore, create_statistics_tables
from stats_repository.store.result_row import ResultRow


class QueryCapturingStore(DuckDBStatisticsStore):
    """DuckDB store that records every statement it runs."""

    def __init__(self, name: str = "capturing", config: Optional[Dict[str, Any]] = None):
        super().__init__(name, config or {"path": ":memory:"})
        self.queries: List[str] = []
        self.updates: List[str] = []
        self.fail_on_update: Optional[int] = None

    def execute_query(self, query: str) -> List[ResultRow]:
        self.queries.append(query)
        return super().execute_query(query)

    def exec_update(self, statement: str) -> None:
        if self.fail_on_update is not None and len(self.updates) == self.fail_on_update:
            raise StatisticsExecutionError("store unavailable")
        self.updates.append(statement)
        super().exec_update(statement)

    def clear(self) -> None:
        self.queries = []
        self.updates = []


class CannedRowsStore(QueryCapturingStore):
    """Store that answers every query with fixed rows."""

    def __init__(self, rows: List[ResultRow]):
        super().__init__("canned")
        self.rows = rows

    def execute_query(self, query: str) -> List[ResultRow]:
        self.queries.append(query)
        return list(self.rows)

    def exec_update(self, statement: str) -> None:
        if self.fail_on_update is not None and len(self.updates) == self.fail_on_update:
            raise StatisticsExecutionError("store unavailable")
        self.updates.append(statement)


class RecordingCache:
    """Cache collaborator that remembers pushed statistics."""

    def __init__(self):
        self.updates: List[tuple] = []

    def update_column_statistic(
        self, table_id: int, index_id: int, column_name: str, statistic: ColumnStatistic
    ) -> None:
        self.updates.append((table_id, index_id, column_name, statistic))


class RecordingHook(TableStatsRegistry):
    """Refresh hook that also keeps every notification."""

    def __init__(self):
        super().__init__()
        self.notifications: List[tuple] = []

    def notify_table_stats_updated(self, job_info, table) -> None:
        self.notifications.append((job_info, table))
        super().notify_table_stats_updated(job_info, table)


class SteppingClock:
    """Clock advancing one second per reading."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


def make_row(**values: Any) -> ResultRow:
    columns = list(values.keys())
    return ResultRow(columns, [values[name] for name in columns])


@pytest.fixture
def row_factory():
    return make_row


@pytest.fixture
def stats_config():
    return StatisticsConfig()


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def metadata_catalog():
    """Catalog with one partitioned table sales.orders (id 100)."""
    orders = Table(
        id=100,
        name="orders",
        columns=[
            Column(name="amount", data_type=DataType.DOUBLE),
            Column(name="region", data_type=DataType.VARCHAR),
            Column(name="placed_at", data_type=DataType.DATE),
            Column(name="qty", data_type=DataType.INTEGER),
        ],
        partitions=[
            Partition(id=1001, name="p1"),
            Partition(id=1002, name="p2"),
        ],
    )
    sales = Database(id=10, name="sales")
    sales.add_table(orders)
    internal = Catalog(id=0, name="internal")
    internal.add_database(sales)

    metadata = MetadataCatalog()
    metadata.register_catalog(internal)
    return metadata


@pytest.fixture
def duckdb_store(stats_config):
    store = QueryCapturingStore()
    store.connect()
    create_statistics_tables(store, stats_config)
    store.clear()
    yield store
    store.disconnect()


@pytest.fixture
def recording_cache():
    return RecordingCache()


@pytest.fixture
def recording_hook():
    return RecordingHook()


@pytest.fixture
def repository(duckdb_store, metadata_catalog, recording_cache, recording_hook, stats_config, clock):
    return StatisticsRepository(
        duckdb_store,
        catalog=metadata_catalog,
        cache=recording_cache,
        refresh_hook=recording_hook,
        config=stats_config,
        clock=clock,
    )


@pytest.fixture
def canned_store_factory():
    def factory(rows: List[ResultRow]) -> CannedRowsStore:
        return CannedRowsStore(rows)

    return factory
