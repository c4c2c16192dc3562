"""Requests to override column statistics by hand."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Union

from ..catalog.catalog import TableName
from ..errors import AnalysisError
from .column_statistic import ColumnStatistic
from .identifier import StatisticIdentifier


class StatsType(Enum):
    """Statistic fields a user may override."""

    ROW_COUNT = "row_count"
    NDV = "ndv"
    NUM_NULLS = "num_nulls"
    MIN_VALUE = "min_value"
    MAX_VALUE = "max_value"
    DATA_SIZE = "data_size"


@dataclass
class AlterColumnStatsRequest:
    """Sparse set of overrides for one column, optionally per partition."""

    table_name: Union[str, TableName]
    column_name: str
    values: Dict[StatsType, str] = field(default_factory=dict)
    partition_names: List[str] = field(default_factory=list)

    @classmethod
    def from_properties(
        cls,
        table_name: Union[str, TableName],
        column_name: str,
        properties: Mapping[str, str],
        partition_names: Optional[List[str]] = None,
    ) -> "AlterColumnStatsRequest":
        """Build a request from ``{"ndv": "10", ...}`` style properties.

        Raises:
            AnalysisError: On an unknown property name
        """
        values: Dict[StatsType, str] = {}
        for key, value in properties.items():
            try:
                stats_type = StatsType(key.strip().lower())
            except ValueError:
                allowed = ", ".join(t.value for t in StatsType)
                raise AnalysisError(
                    f"Unknown statistic property '{key}', expected one of: {allowed}"
                ) from None
            values[stats_type] = str(value)
        return cls(
            table_name=table_name,
            column_name=column_name,
            values=values,
            partition_names=list(partition_names or []),
        )

    def get_value(self, stats_type: StatsType) -> Optional[str]:
        return self.values.get(stats_type)


@dataclass(frozen=True)
class StatisticChange:
    """A statistic row written by the repository."""

    identifier: StatisticIdentifier
    statistic: ColumnStatistic
