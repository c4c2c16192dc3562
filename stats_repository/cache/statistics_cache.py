"""In-memory cache of table-granularity column statistics."""

from collections import OrderedDict
from typing import TYPE_CHECKING, Optional
import logging

from ..statistics.column_statistic import ColumnStatistic
from ..statistics.identifier import StatisticsCacheKey, StatsId

if TYPE_CHECKING:
    from ..statistics.repository import StatisticsRepository

logger = logging.getLogger(__name__)


class StatisticsCache:
    """Bounded LRU cache of column statistics keyed by (table, index, column)."""

    def __init__(self, max_size: int = 500000, repository: Optional["StatisticsRepository"] = None):
        """Initialize the cache.

        Args:
            max_size: Maximum number of cached statistics
            repository: Repository used to load entries on a miss
        """
        if max_size < 1:
            raise ValueError("Cache size must be at least 1")
        self.max_size = max_size
        self.repository = repository
        self._entries: "OrderedDict[StatisticsCacheKey, ColumnStatistic]" = OrderedDict()

    def update_column_statistic(
        self, table_id: int, index_id: int, column_name: str, statistic: ColumnStatistic
    ) -> None:
        """Insert or replace the statistic of one column."""
        key = StatisticsCacheKey(table_id, index_id, column_name)
        self._entries[key] = statistic
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted column statistic {evicted}")

    def get_column_statistic(
        self, table_id: int, index_id: int, column_name: str, refresh: bool = False
    ) -> ColumnStatistic:
        """Get a statistic, loading it from the repository on a miss.

        Returns:
            The cached statistic, or ColumnStatistic.UNKNOWN when nothing is stored
        """
        key = StatisticsCacheKey(table_id, index_id, column_name)

        if not refresh and key in self._entries:
            self._entries.move_to_end(key)
            return self._entries[key]

        if self.repository is None:
            return ColumnStatistic.UNKNOWN

        statistic = self.repository.query_column_statistics_by_name(
            table_id, index_id, column_name
        )
        if not statistic.is_unknown:
            self.update_column_statistic(table_id, index_id, column_name, statistic)
        return statistic

    def invalidate(self, table_id: int, index_id: int, column_name: str) -> None:
        """Drop one entry so the next read goes to the repository."""
        self._entries.pop(StatisticsCacheKey(table_id, index_id, column_name), None)

    def warm_up(self, repository: Optional["StatisticsRepository"] = None) -> int:
        """Fill the cache with the most recently updated statistics.

        Bounds are projected with the column type from the repository's
        catalog, the same way alters and cache misses project them.

        Args:
            repository: Repository to read from, the attached one by default

        Returns:
            Number of statistics loaded

        Raises:
            ValueError: If no repository is available
        """
        repository = repository or self.repository
        if repository is None:
            raise ValueError("No repository to warm the cache from")

        loaded = 0
        # Oldest first so the newest entries end up most recently used
        for row in reversed(repository.fetch_recent_stats_updated_col()):
            try:
                stats_id = StatsId.from_result_row(row)
                data_type = repository.column_type(stats_id.tbl_id, stats_id.col_id)
                statistic = ColumnStatistic.from_result_row(row, data_type)
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed statistics row during warm up: {e}")
                continue
            self.update_column_statistic(
                stats_id.tbl_id, stats_id.idx_id, stats_id.col_id, statistic
            )
            loaded += 1
        logger.info(f"Warmed statistics cache with {loaded} entries")
        return loaded

    def clear(self) -> None:
        """Drop every cached statistic."""
        self._entries.clear()

    def __contains__(self, key: StatisticsCacheKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"StatisticsCache(cached={len(self._entries)}, max_size={self.max_size})"
