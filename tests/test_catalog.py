"""Tests for metadata catalog resolution."""

import pytest

from stats_repository.catalog import DataType, MetadataCatalog, TableName
from stats_repository.errors import AnalysisError


def test_table_name_parsing():
    assert TableName.parse("internal.sales.orders") == TableName(
        table="orders", db="sales", catalog="internal"
    )
    assert TableName.parse("sales.orders") == TableName(table="orders", db="sales")
    assert TableName.parse("orders") == TableName(table="orders")
    assert str(TableName.parse("sales.orders")) == "sales.orders"


@pytest.mark.parametrize("bad", ["", "a.b.c.d"])
def test_invalid_table_names(bad):
    with pytest.raises(AnalysisError, match="Invalid table name"):
        TableName.parse(bad)


def test_resolve_qualified_names(metadata_catalog):
    for name in ("internal.sales.orders", "sales.orders", "orders", "SALES.ORDERS"):
        objects = metadata_catalog.resolve(name)
        assert (objects.catalog.id, objects.db.id, objects.table.id) == (0, 10, 100)


def test_resolve_errors(metadata_catalog):
    with pytest.raises(AnalysisError, match="catalog:hive not exists"):
        metadata_catalog.resolve("hive.sales.orders")
    with pytest.raises(AnalysisError, match="database:crm not exists"):
        metadata_catalog.resolve("crm.orders")
    with pytest.raises(AnalysisError, match="table:sales.refunds not exists"):
        metadata_catalog.resolve("sales.refunds")
    with pytest.raises(AnalysisError, match="table:refunds not exists"):
        metadata_catalog.resolve("refunds")


def test_columns_and_partitions(metadata_catalog):
    table = metadata_catalog.resolve("sales.orders").table

    assert table.get_column("AMOUNT").data_type == DataType.DOUBLE
    assert table.get_column("missing") is None
    assert table.get_partition("p2").id == 1002
    assert table.get_partition("p9") is None


def test_catalog_from_config():
    metadata = MetadataCatalog.from_config(
        {
            "internal": {
                "id": 0,
                "databases": {
                    "sales": {
                        "id": 10,
                        "tables": {
                            "orders": {
                                "id": 100,
                                "columns": {"amount": "decimal(10,2)", "placed_at": "datetime"},
                                "partitions": {"p2024": 1001},
                            }
                        },
                    }
                },
            }
        }
    )

    table = metadata.resolve("sales.orders").table
    assert table.id == 100
    assert table.get_column("amount").data_type == DataType.DECIMAL
    assert table.get_column("placed_at").data_type == DataType.TIMESTAMP
    assert table.get_partition("p2024").id == 1001


def test_get_table_by_id(metadata_catalog):
    assert metadata_catalog.get_table_by_id(100).name == "orders"
    assert metadata_catalog.get_table_by_id(999) is None
