"""Caching of column statistics."""

from .statistics_cache import StatisticsCache

__all__ = ["StatisticsCache"]
