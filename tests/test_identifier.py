"""Tests for statistic identifiers."""

import itertools

import pytest

from stats_repository.statistics.identifier import (
    BASE_INDEX_ID,
    StatisticIdentifier,
    StatisticsCacheKey,
    StatsId,
    construct_id,
)


def test_construct_id_joins_parts_in_order():
    """Parts are dash-joined in the order given."""
    assert construct_id(100, -1, "amount") == "100--1-amount"
    assert construct_id(100, 5, "amount", 1001) == "100-5-amount-1001"


def test_construct_id_is_deterministic():
    """The same tuple always yields the same id."""
    assert construct_id(7, 3, "c") == construct_id(7, 3, "c")


def test_construct_id_is_injective_over_same_arity():
    """Distinct (table, index, column) tuples never collide."""
    tables = [1, 12, 123]
    indexes = [-1, 0, 2, 21]
    columns = ["a", "b", "ab", "1"]
    ids = set()
    tuples = list(itertools.product(tables, indexes, columns))
    for table_id, index_id, column_name in tuples:
        ids.add(construct_id(table_id, index_id, column_name))
    assert len(ids) == len(tuples)


def test_identifier_without_partition_uses_three_parts():
    """Table-level identifiers omit the partition."""
    identifier = StatisticIdentifier(0, 10, 100, BASE_INDEX_ID, "amount")

    assert identifier.id == "100--1-amount"
    assert identifier.is_partition_scoped is False


def test_identifier_for_partition_appends_partition_id():
    """Partition-scoped identifiers add the partition id as fourth part."""
    identifier = StatisticIdentifier(0, 10, 100, BASE_INDEX_ID, "amount")
    scoped = identifier.for_partition(1001)

    assert scoped.id == "100--1-amount-1001"
    assert scoped.is_partition_scoped is True
    assert scoped.table_id == identifier.table_id
    assert identifier.partition_id is None


def test_cache_key_matches_table_level_id():
    """The cache key string shape equals the table-level id."""
    identifier = StatisticIdentifier(0, 10, 100, BASE_INDEX_ID, "amount")
    key = identifier.cache_key()

    assert key == StatisticsCacheKey(100, -1, "amount")
    assert str(key) == identifier.id


def test_stats_id_parses_row(row_factory):
    """Identity columns are converted to their numeric types."""
    row = row_factory(
        id="100--1-amount-1001",
        catalog_id=0,
        db_id=10,
        tbl_id=100,
        idx_id=-1,
        col_id="amount",
        part_id="1001",
    )

    stats_id = StatsId.from_result_row(row)

    assert stats_id.tbl_id == 100
    assert stats_id.idx_id == -1
    assert stats_id.col_id == "amount"
    assert stats_id.part_id == 1001


def test_stats_id_without_partition(row_factory):
    """A NULL part_id stays None."""
    row = row_factory(
        id="100--1-amount", catalog_id=0, db_id=10, tbl_id=100, idx_id=-1, col_id="amount", part_id=None
    )

    assert StatsId.from_result_row(row).part_id is None


def test_stats_id_rejects_bad_partition(row_factory):
    """A partition id that is not a number raises ValueError."""
    row = row_factory(
        id="x", catalog_id=0, db_id=10, tbl_id=100, idx_id=-1, col_id="amount", part_id="p-one"
    )

    with pytest.raises(ValueError):
        StatsId.from_result_row(row)
