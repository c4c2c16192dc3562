"""Column statistics persistence."""

from .alter import AlterColumnStatsRequest, StatisticChange, StatsType
from .analysis import AnalysisJobInfo, JobType, TableStatsMeta, TableStatsRegistry
from .column_statistic import ColumnStatistic, ColumnStatisticBuilder
from .histogram import Bucket, Histogram
from .identifier import (
    BASE_INDEX_ID,
    StatisticIdentifier,
    StatisticsCacheKey,
    StatsId,
    construct_id,
)
from .repository import StatisticsRepository

__all__ = [
    "AlterColumnStatsRequest",
    "StatisticChange",
    "StatsType",
    "AnalysisJobInfo",
    "JobType",
    "TableStatsMeta",
    "TableStatsRegistry",
    "ColumnStatistic",
    "ColumnStatisticBuilder",
    "Bucket",
    "Histogram",
    "BASE_INDEX_ID",
    "StatisticIdentifier",
    "StatisticsCacheKey",
    "StatsId",
    "construct_id",
    "StatisticsRepository",
]
