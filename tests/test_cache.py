"""Tests for the column statistics cache."""

import logging

import pytest

from stats_repository.cache import StatisticsCache
from stats_repository.statistics import (
    AlterColumnStatsRequest,
    ColumnStatistic,
    StatisticsCacheKey,
    StatisticsRepository,
)


def test_cache_requires_positive_size():
    with pytest.raises(ValueError):
        StatisticsCache(max_size=0)


def test_least_recently_used_entry_is_evicted():
    cache = StatisticsCache(max_size=2)
    cache.update_column_statistic(100, -1, "a", ColumnStatistic(ndv=1.0))
    cache.update_column_statistic(100, -1, "b", ColumnStatistic(ndv=2.0))

    # Touch "a" so "b" becomes the eviction candidate
    cache.get_column_statistic(100, -1, "a")
    cache.update_column_statistic(100, -1, "c", ColumnStatistic(ndv=3.0))

    assert StatisticsCacheKey(100, -1, "a") in cache
    assert StatisticsCacheKey(100, -1, "b") not in cache
    assert len(cache) == 2


def test_miss_without_repository_is_unknown():
    cache = StatisticsCache()

    assert cache.get_column_statistic(100, -1, "a") is ColumnStatistic.UNKNOWN


def test_miss_loads_from_repository(repository):
    repository.alter_column_statistics(
        AlterColumnStatsRequest.from_properties("sales.orders", "amount", {"ndv": "9"})
    )
    cache = StatisticsCache(repository=repository)

    statistic = cache.get_column_statistic(100, -1, "amount")

    assert statistic.ndv == 9.0
    assert StatisticsCacheKey(100, -1, "amount") in cache


def test_unknown_result_is_not_cached(repository):
    cache = StatisticsCache(repository=repository)

    assert cache.get_column_statistic(100, -1, "amount").is_unknown
    assert len(cache) == 0


def test_alter_pushes_into_real_cache(duckdb_store, metadata_catalog, clock):
    cache = StatisticsCache()
    repository = StatisticsRepository(duckdb_store, catalog=metadata_catalog, cache=cache, clock=clock)
    cache.repository = repository

    repository.alter_column_statistics(
        AlterColumnStatsRequest.from_properties("sales.orders", "amount", {"ndv": "4"})
    )
    repository.alter_column_statistics(
        AlterColumnStatsRequest.from_properties("sales.orders", "qty", {"ndv": "4"}, ["p1"])
    )

    assert StatisticsCacheKey(100, -1, "amount") in cache
    assert StatisticsCacheKey(100, -1, "qty") not in cache
    duckdb_store.clear()
    assert cache.get_column_statistic(100, -1, "amount").ndv == 4.0
    assert duckdb_store.queries == []


def test_invalidate_and_refresh(repository):
    cache = StatisticsCache(repository=repository)
    cache.update_column_statistic(100, -1, "amount", ColumnStatistic(ndv=1.0))

    cache.invalidate(100, -1, "amount")
    assert len(cache) == 0

    cache.update_column_statistic(100, -1, "amount", ColumnStatistic(ndv=1.0))
    repository.alter_column_statistics(
        AlterColumnStatsRequest.from_properties("sales.orders", "amount", {"ndv": "6"})
    )
    assert cache.get_column_statistic(100, -1, "amount", refresh=True).ndv == 6.0


def test_warm_up_loads_recent_statistics(repository):
    for column_name in ("amount", "region"):
        repository.alter_column_statistics(
            AlterColumnStatsRequest.from_properties("sales.orders", column_name, {"ndv": "2"})
        )
    cache = StatisticsCache(max_size=10)

    loaded = cache.warm_up(repository)

    assert loaded == 2
    assert StatisticsCacheKey(100, -1, "region") in cache


def test_warm_up_skips_malformed_rows(canned_store_factory, row_factory, caplog):
    good = row_factory(
        id="100--1-a", catalog_id=0, db_id=10, tbl_id=100, idx_id=-1, col_id="a",
        part_id=None, count=1.0, ndv=1.0, null_count=0.0, min=None, max=None,
        data_size=None, update_time=None,
    )
    bad = row_factory(
        id="x", catalog_id="zero", db_id=10, tbl_id=100, idx_id=-1, col_id="b",
        part_id=None, count=1.0, ndv=1.0, null_count=0.0, min=None, max=None,
        data_size=None, update_time=None,
    )
    cache = StatisticsCache(repository=StatisticsRepository(canned_store_factory([good, bad])))

    with caplog.at_level(logging.WARNING):
        assert cache.warm_up() == 1

    assert "Skipping malformed statistics row" in caplog.text


def test_warm_up_without_repository_fails():
    with pytest.raises(ValueError):
        StatisticsCache().warm_up()


def test_warm_up_projects_bounds_like_alter(duckdb_store, metadata_catalog, clock):
    """Warmed entries carry the same projected bounds an alter pushes."""
    cache = StatisticsCache()
    repository = StatisticsRepository(duckdb_store, catalog=metadata_catalog, cache=cache, clock=clock)
    pushed = repository.alter_column_statistics(
        AlterColumnStatsRequest.from_properties(
            "sales.orders", "placed_at", {"min_value": "2024-01-05", "max_value": "2024-02-01"}
        )
    )[0].statistic

    cache.clear()
    cache.warm_up(repository)

    warmed = cache.get_column_statistic(100, -1, "placed_at")
    assert warmed.min_value == pushed.min_value == 20240105000000.0
    assert warmed.max_value == pushed.max_value
