"""Catalog metadata used to resolve statistic targets."""

from .catalog import MetadataCatalog, TableName, DBObjects
from .schema import Catalog, Database, Table, Column, Partition
from .types import DataType, readable_value, convert_to_double

__all__ = [
    "MetadataCatalog",
    "TableName",
    "DBObjects",
    "Catalog",
    "Database",
    "Table",
    "Column",
    "Partition",
    "DataType",
    "readable_value",
    "convert_to_double",
]
