"""All reads and writes against the internal statistics tables."""

from datetime import datetime, timedelta
import logging
import math
import threading
from typing import Callable, Collection, Dict, Iterable, List, Optional, Protocol, Set, Union

from sqlglot import exp

from ..catalog.catalog import DBObjects, MetadataCatalog, TableName
from ..catalog.schema import Column, Table
from ..catalog.types import DataType, convert_to_double, readable_value
from ..config.config import StatisticsConfig
from ..errors import (
    AnalysisError,
    DdlError,
    StatisticsConsistencyError,
    StatisticsExecutionError,
)
from ..sql.builder import StatisticsQueryBuilder
from ..store.base import StatisticsStore
from ..store.result_row import ResultRow
from ..utils.logging import get_contextual_logger
from .alter import AlterColumnStatsRequest, StatisticChange, StatsType
from .analysis import AnalysisJobInfo, TableStatsRefreshHook
from .column_statistic import ColumnStatistic, ColumnStatisticBuilder
from .histogram import Histogram
from .identifier import (
    BASE_INDEX_ID,
    StatisticIdentifier,
    StatisticsCacheKey,
    StatsId,
    construct_id,
)

logger = logging.getLogger(__name__)

# Smallest step the TIMESTAMP columns can tell apart
_UPDATE_TIME_STEP = timedelta(microseconds=1)


class StatisticsCacheSink(Protocol):
    """Cache that accepts pushed table-granularity statistics."""

    def update_column_statistic(
        self, table_id: int, index_id: int, column_name: str, statistic: ColumnStatistic
    ) -> None:
        ...


class StatisticsRepository:
    """Operations over the column statistics and histogram tables.

    The store is append-only: every write inserts a row stamped with the
    repository clock and reads see the newest row of each id. Stamps handed
    out by one repository strictly increase, so of two writes issued within
    the same clock tick the later one wins. The cache and the refresh hook
    are optional collaborators notified after table-level alters; when
    omitted those steps are skipped.
    """

    def __init__(
        self,
        store: StatisticsStore,
        catalog: Optional[MetadataCatalog] = None,
        cache: Optional[StatisticsCacheSink] = None,
        refresh_hook: Optional[TableStatsRefreshHook] = None,
        config: Optional[StatisticsConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the repository.

        Args:
            store: Store every statement is run against
            catalog: Metadata used to resolve table, column and partition names
            cache: Receives table-level statistics after an alter
            refresh_hook: Notified when table-level statistics change
            config: Schema, table names and batching limits
            clock: Source of update times, ``datetime.now`` by default
        """
        self.store = store
        self.catalog = catalog
        self.cache = cache
        self.refresh_hook = refresh_hook
        self.config = config or StatisticsConfig()
        self.clock = clock or datetime.now
        self.queries = StatisticsQueryBuilder(self.config, store.dialect)
        self._last_update_time: Optional[datetime] = None
        self._clock_lock = threading.Lock()

    def query_column_statistics_by_name(
        self,
        table_id: int,
        index_id: int,
        column_name: str,
        data_type: Optional[DataType] = None,
    ) -> ColumnStatistic:
        """Get the current table-level statistic of a column.

        Args:
            table_id: Table id
            index_id: Index id, ``BASE_INDEX_ID`` for the base table
            column_name: Column name
            data_type: Column type used to project min/max onto doubles;
                looked up in the catalog when omitted

        Returns:
            The statistic, or ColumnStatistic.UNKNOWN when nothing is stored

        Raises:
            StatisticsConsistencyError: If the id matches more than one row
        """
        row = self.query_column_statistic_by_id(table_id, index_id, column_name)
        if row is None:
            return ColumnStatistic.UNKNOWN
        if data_type is None:
            data_type = self.column_type(table_id, column_name)
        return ColumnStatistic.from_result_row(row, data_type)

    def query_column_histogram_by_name(
        self, table_id: int, index_id: int, column_name: str
    ) -> Histogram:
        """Get the current histogram of a column.

        Returns:
            The histogram, or Histogram.UNKNOWN when nothing is stored
        """
        row = self.query_column_histogram_by_id(table_id, index_id, column_name)
        if row is None:
            return Histogram.UNKNOWN
        return Histogram.from_result_row(row)

    def query_column_statistic_by_id(
        self, table_id: int, index_id: int, column_name: str
    ) -> Optional[ResultRow]:
        """Get the raw current statistic row of a column, if any."""
        return self._query_unique_row(table_id, index_id, column_name, histogram=False)

    def query_column_histogram_by_id(
        self, table_id: int, index_id: int, column_name: str
    ) -> Optional[ResultRow]:
        """Get the raw current histogram row of a column, if any."""
        return self._query_unique_row(table_id, index_id, column_name, histogram=True)

    def _query_unique_row(
        self, table_id: int, index_id: int, column_name: str, histogram: bool
    ) -> Optional[ResultRow]:
        stat_id = construct_id(table_id, index_id, column_name)
        rows = self._execute_query(self.queries.fetch_by_id(stat_id, histogram=histogram))
        if len(rows) > 1:
            raise StatisticsConsistencyError(
                f"id: {stat_id} should be unique, but return more than one row"
            )
        return rows[0] if rows else None

    def query_partition_statistics(
        self, table_id: int, column_name: str, partition_ids: Iterable[int]
    ) -> List[ResultRow]:
        """Get the current rows of the given partitions of one column.

        Args:
            table_id: Table id
            column_name: Column name exactly as stored
            partition_ids: Partition ids; an empty collection skips the store

        Returns:
            One row per partition that has statistics
        """
        stat_ids = [
            construct_id(table_id, BASE_INDEX_ID, column_name, partition_id)
            for partition_id in partition_ids
        ]
        if not stat_ids:
            return []
        return self._execute_query(self.queries.fetch_by_ids(stat_ids))

    def query_column_statistics_by_partitions(
        self,
        table_name: Union[str, TableName],
        column_name: str,
        partition_names: Iterable[str],
    ) -> List[ColumnStatistic]:
        """Get the statistics of one column for the named partitions.

        Args:
            table_name: Table reference resolved through the catalog
            column_name: Column name, matched case-insensitively
            partition_names: Partition names of the table

        Returns:
            One statistic per partition that has statistics

        Raises:
            AnalysisError: If the table, the column or a partition does not exist
        """
        objects = self._resolve(table_name)
        column = self._resolve_column(objects.table, column_name)
        partition_ids = self._resolve_partition_ids(objects.table, partition_names)
        rows = self.query_partition_statistics(objects.table.id, column.name, partition_ids)
        return [ColumnStatistic.from_result_row(row, column.data_type) for row in rows]

    def drop_statistics_by_partitions(self, partition_ids: Collection[Union[int, str]]) -> None:
        """Delete the statistics of the given partitions.

        Raises:
            DdlError: If the delete fails
        """
        self.drop_statistics_by_part_id(partition_ids, self.config.statistic_table)

    def drop_statistics(self, table_id: int, column_names: Optional[Collection[str]]) -> None:
        """Delete the statistics and histograms of the given columns.

        Args:
            table_id: Table id
            column_names: Columns to drop; None drops nothing

        Raises:
            DdlError: If a delete fails
        """
        if column_names is None:
            return
        self.drop_statistics_by_col_name(table_id, column_names, self.config.statistic_table)
        self.drop_statistics_by_col_name(table_id, column_names, self.config.histogram_table)

    def drop_statistics_by_col_name(
        self, table_id: int, column_names: Iterable[str], stats_table: str
    ) -> None:
        """Delete rows of a table's columns in IN-lists of bounded size.

        Each batch is its own delete; a failure leaves earlier batches
        deleted. Deleting again is harmless.

        Raises:
            DdlError: If a delete fails
        """
        max_elements = self.config.max_allowed_in_element_num_of_delete
        batch: List[str] = []
        for column_name in column_names:
            batch.append(column_name)
            if len(batch) == max_elements:
                self._execute_drop(self.queries.delete_by_columns(stats_table, table_id, batch))
                batch = []
        if batch:
            self._execute_drop(self.queries.delete_by_columns(stats_table, table_id, batch))

    def drop_statistics_by_part_id(
        self, partition_ids: Collection[Union[int, str]], stats_table: str
    ) -> None:
        """Delete every row of the given partitions with a single IN-list.

        Partition lists are not split into batches like column lists.

        Raises:
            DdlError: If the delete fails
        """
        if not partition_ids:
            return
        self._execute_drop(self.queries.delete_by_partitions(stats_table, list(partition_ids)))

    def _execute_drop(self, statement: exp.Delete) -> None:
        sql = self.queries.render(statement)
        logger.debug(f"Dropping statistics: {sql}")
        try:
            self.store.exec_update(sql)
        except StatisticsExecutionError as e:
            raise DdlError(str(e)) from e

    def alter_column_statistics(self, request: AlterColumnStatsRequest) -> List[StatisticChange]:
        """Persist user supplied statistics of one column.

        Without partitions one table-level row is written, pushed to the cache
        and reported to the refresh hook. With partitions one row per
        partition is written and the cache is left alone, since it only holds
        table-level statistics.

        Returns:
            The statistic rows written

        Raises:
            AnalysisError: If the table, column or a partition does not
                resolve, or a value does not parse; nothing is written then
            DdlError: If a write fails
        """
        objects = self._resolve(request.table_name)
        column = self._resolve_column(objects.table, request.column_name)
        partition_ids = self._resolve_partition_ids(objects.table, request.partition_names)
        statistic = self._merge_overrides(request, column)

        identifier = StatisticIdentifier(
            catalog_id=objects.catalog.id,
            db_id=objects.db.id,
            table_id=objects.table.id,
            index_id=BASE_INDEX_ID,
            column_name=column.name,
        )
        alter_logger = get_contextual_logger(
            __name__, {"table_id": objects.table.id, "column": column.name}
        )
        now = self._next_update_time()
        changes: List[StatisticChange] = []

        if not partition_ids:
            self._insert_statistic(identifier, statistic, now)
            changes.append(StatisticChange(identifier, statistic))
            if self.cache is not None:
                self.cache.update_column_statistic(
                    objects.table.id, BASE_INDEX_ID, column.name, statistic
                )
            if self.refresh_hook is not None:
                job_info = AnalysisJobInfo.manual_injection(int(now.timestamp() * 1000))
                self.refresh_hook.notify_table_stats_updated(job_info, objects.table)
            alter_logger.info("Altered table-level column statistics")
            return changes

        for partition_id in partition_ids:
            partition_identifier = identifier.for_partition(partition_id)
            self._insert_statistic(partition_identifier, statistic, now)
            changes.append(StatisticChange(partition_identifier, statistic))
        alter_logger.info(
            f"Altered column statistics of {len(partition_ids)} partitions; cache not updated"
        )
        return changes

    def _merge_overrides(self, request: AlterColumnStatsRequest, column: Column) -> ColumnStatistic:
        builder = ColumnStatisticBuilder()

        row_count = self._parse_number(request, StatsType.ROW_COUNT)
        if row_count is not None:
            builder.set_count(row_count)

        ndv = self._parse_number(request, StatsType.NDV)
        if ndv is not None:
            builder.set_ndv(ndv)
            builder.set_original(False)

        num_nulls = self._parse_number(request, StatsType.NUM_NULLS)
        if num_nulls is not None:
            builder.set_num_nulls(num_nulls)

        min_text = request.get_value(StatsType.MIN_VALUE)
        if min_text is not None:
            builder.set_min_expr(self._readable(column, min_text))
            builder.set_min_value(self._to_double(column, min_text))

        max_text = request.get_value(StatsType.MAX_VALUE)
        if max_text is not None:
            builder.set_max_expr(self._readable(column, max_text))
            builder.set_max_value(self._to_double(column, max_text))

        data_size = self._parse_number(request, StatsType.DATA_SIZE)
        if data_size is not None and data_size > 0:
            builder.set_data_size(data_size)
            if row_count is not None and row_count > 0:
                builder.set_avg_size_byte(data_size / row_count)

        return builder.build()

    def _parse_number(self, request: AlterColumnStatsRequest, stats_type: StatsType) -> Optional[float]:
        text = request.get_value(stats_type)
        if text is None:
            return None
        try:
            value = float(text)
        except ValueError:
            raise AnalysisError(f"Invalid {stats_type.value} value: {text!r}") from None
        if math.isnan(value) or math.isinf(value):
            raise AnalysisError(f"Invalid {stats_type.value} value: {text!r}")
        return value

    def _readable(self, column: Column, text: str) -> str:
        try:
            return readable_value(column.data_type, text)
        except ValueError as e:
            raise AnalysisError(
                f"Invalid value {text!r} for column {column.name} of type {column.data_type.value}: {e}"
            ) from e

    def _to_double(self, column: Column, text: str) -> float:
        try:
            return convert_to_double(column.data_type, text)
        except ValueError as e:
            raise AnalysisError(
                f"Invalid value {text!r} for column {column.name} of type {column.data_type.value}: {e}"
            ) from e

    def _next_update_time(self) -> datetime:
        """Read the clock, stepping past the previous stamp if it did not advance."""
        with self._clock_lock:
            now = self.clock()
            if self._last_update_time is not None and now <= self._last_update_time:
                now = self._last_update_time + _UPDATE_TIME_STEP
            self._last_update_time = now
            return now

    def _insert_statistic(
        self, identifier: StatisticIdentifier, statistic: ColumnStatistic, update_time: datetime
    ) -> None:
        statement = self.queries.insert_statistic(
            stat_id=identifier.id,
            catalog_id=identifier.catalog_id,
            db_id=identifier.db_id,
            table_id=identifier.table_id,
            index_id=identifier.index_id,
            column_name=identifier.column_name,
            partition_id=identifier.partition_id,
            count=statistic.count,
            ndv=statistic.ndv,
            null_count=statistic.num_nulls,
            min_text=statistic.min_expr,
            max_text=statistic.max_expr,
            data_size=statistic.data_size,
            update_time=update_time,
        )
        try:
            self.store.exec_update(self.queries.render(statement))
        except StatisticsExecutionError as e:
            raise DdlError(str(e)) from e

    def save_histogram(
        self, identifier: StatisticIdentifier, histogram: Histogram
    ) -> None:
        """Append a histogram row for a table-level identifier.

        Args:
            identifier: Column the histogram belongs to
            histogram: Sample rate and buckets to store

        Raises:
            DdlError: If the write fails
        """
        statement = self.queries.insert_histogram(
            stat_id=identifier.id,
            catalog_id=identifier.catalog_id,
            db_id=identifier.db_id,
            table_id=identifier.table_id,
            index_id=identifier.index_id,
            column_name=identifier.column_name,
            sample_rate=histogram.sample_rate,
            buckets_json=histogram.buckets_json(),
            update_time=self._next_update_time(),
        )
        try:
            self.store.exec_update(self.queries.render(statement))
        except StatisticsExecutionError as e:
            raise DdlError(str(e)) from e

    def fetch_recent_stats_updated_col(self) -> List[ResultRow]:
        """Get the newest table-level rows, at most ``stats_cache_size`` of them.

        Returns:
            Rows ordered by update time, newest first
        """
        return self._execute_query(self.queries.recent_table_stats(self.config.stats_cache_size))

    def fetch_stats_full_name(self, limit: int, offset: int) -> List[ResultRow]:
        """Get one page of identity columns, oldest update first.

        Args:
            limit: Maximum rows in the page
            offset: Rows to skip

        Returns:
            Rows holding only the identity columns

        Raises:
            ValueError: If limit or offset is negative
        """
        if limit < 0 or offset < 0:
            raise ValueError("limit and offset must not be negative")
        return self._execute_query(self.queries.full_names(limit, offset))

    def fetch_col_and_parts_for_stats(self, table_id: int) -> Dict[str, Set[int]]:
        """Map each column of a table to the partitions that have statistics.

        Rows whose ids do not parse are logged and skipped.

        Args:
            table_id: Table id

        Returns:
            Column name to set of partition ids
        """
        rows = self._execute_query(self.queries.partition_stats_for_table(table_id))
        column_to_partitions: Dict[str, Set[int]] = {}
        for row in rows:
            try:
                stats_id = StatsId.from_result_row(row)
            except (TypeError, ValueError) as e:
                logger.warning(f"Failed to obtain the column and partition for statistics: {e}")
                continue
            if stats_id.part_id is None:
                continue
            column_to_partitions.setdefault(stats_id.col_id, set()).add(stats_id.part_id)
        return column_to_partitions

    def load_col_stats(self, table_id: int, index_id: int, column_name: str) -> List[ResultRow]:
        """Get the current table-level rows of a column without the uniqueness check."""
        stat_id = construct_id(table_id, index_id, column_name)
        return self._execute_query(self.queries.fetch_by_id(stat_id))

    def load_part_stats(self, keys: Iterable[StatisticsCacheKey]) -> List[ResultRow]:
        """Get the partition rows of many columns in one round trip.

        Args:
            keys: Columns to load; an empty collection skips the store

        Returns:
            Current partition rows of every listed column
        """
        key_strings = [str(key) for key in keys]
        if not key_strings:
            return []
        return self._execute_query(self.queries.partition_stats_for_keys(key_strings))

    def column_type(self, table_id: int, column_name: str) -> Optional[DataType]:
        """Look up the type of a column by table id.

        Returns:
            The column type, or None without a catalog or when the column is unknown
        """
        if self.catalog is None:
            return None
        table = self.catalog.get_table_by_id(table_id)
        if table is None:
            return None
        column = table.get_column(column_name)
        return column.data_type if column is not None else None

    def _execute_query(self, query: exp.Expression) -> List[ResultRow]:
        return self.store.execute_query(self.queries.render(query))

    def _resolve(self, table_name: Union[str, TableName]) -> DBObjects:
        if self.catalog is None:
            raise AnalysisError(f"No metadata catalog to resolve table {table_name}")
        return self.catalog.resolve(table_name)

    def _resolve_column(self, table: Table, column_name: str) -> Column:
        column = table.get_column(column_name)
        if column is None:
            raise AnalysisError(f"column:{column_name} not exists in table {table.name}")
        return column

    def _resolve_partition_ids(self, table: Table, partition_names: Iterable[str]) -> List[int]:
        partition_ids: List[int] = []
        for partition_name in partition_names:
            partition = table.get_partition(partition_name)
            if partition is None:
                raise AnalysisError(f"partition:{partition_name} not exists")
            if partition.id not in partition_ids:
                partition_ids.append(partition.id)
        return partition_ids
