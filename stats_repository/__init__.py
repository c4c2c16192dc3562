"""Persistence of column statistics for a cost-based query optimizer."""

from .errors import (
    StatisticsError,
    AnalysisError,
    DdlError,
    StatisticsExecutionError,
    StatisticsConsistencyError,
)
from .statistics import (
    StatisticsRepository,
    ColumnStatistic,
    Histogram,
    StatisticIdentifier,
    AlterColumnStatsRequest,
    StatsType,
)

__version__ = "0.1.0"

__all__ = [
    "StatisticsError",
    "AnalysisError",
    "DdlError",
    "StatisticsExecutionError",
    "StatisticsConsistencyError",
    "StatisticsRepository",
    "ColumnStatistic",
    "Histogram",
    "StatisticIdentifier",
    "AlterColumnStatsRequest",
    "StatsType",
]
