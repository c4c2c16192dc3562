"""Metadata catalog resolving table names to catalog, database and table objects."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from ..errors import AnalysisError
from .schema import Catalog, Database, Table, Column, Partition
from .types import DataType

DEFAULT_CATALOG = "internal"


@dataclass(frozen=True)
class TableName:
    """Possibly partially qualified table name."""

    table: str
    db: Optional[str] = None
    catalog: Optional[str] = None

    @classmethod
    def parse(cls, table_ref: str) -> "TableName":
        """Parse ``catalog.db.table``, ``db.table`` or ``table``."""
        parts = table_ref.split(".")
        if len(parts) == 3:
            return cls(catalog=parts[0], db=parts[1], table=parts[2])
        if len(parts) == 2:
            return cls(db=parts[0], table=parts[1])
        if len(parts) == 1 and parts[0]:
            return cls(table=parts[0])
        raise AnalysisError(f"Invalid table name: {table_ref!r}")

    def __str__(self) -> str:
        parts = [part for part in (self.catalog, self.db, self.table) if part]
        return ".".join(parts)


@dataclass(frozen=True)
class DBObjects:
    """Resolved catalog, database and table."""

    catalog: Catalog
    db: Database
    table: Table


class MetadataCatalog:
    """Registry of catalogs used to resolve table references."""

    def __init__(self, default_catalog: str = DEFAULT_CATALOG):
        self.catalogs: Dict[str, Catalog] = {}
        self.default_catalog = default_catalog

    def register_catalog(self, catalog: Catalog) -> None:
        """Register a catalog.

        Args:
            catalog: Catalog to register
        """
        self.catalogs[catalog.name.lower()] = catalog

    def get_catalog(self, name: str) -> Optional[Catalog]:
        """Get catalog by name."""
        return self.catalogs.get(name.lower())

    def get_table(self, catalog_name: str, db_name: str, table_name: str) -> Optional[Table]:
        """Get table by fully qualified name.

        Returns:
            Table if found, None otherwise
        """
        catalog = self.get_catalog(catalog_name)
        if catalog is None:
            return None
        db = catalog.get_database(db_name)
        if db is None:
            return None
        return db.get_table(table_name)

    def get_table_by_id(self, table_id: int) -> Optional[Table]:
        """Find a table by id across every registered catalog.

        Args:
            table_id: Table id as stored in the statistics rows

        Returns:
            Table if found, None otherwise
        """
        for catalog in self.catalogs.values():
            for db in catalog.databases.values():
                for table in db.tables.values():
                    if table.id == table_id:
                        return table
        return None

    def resolve(self, table_name: Union[str, TableName]) -> DBObjects:
        """Resolve a table reference to its catalog, database and table.

        Supports formats:
        - catalog.db.table
        - db.table (default catalog)
        - table (searches every database of the default catalog)

        Raises:
            AnalysisError: If any part of the reference does not resolve
        """
        if isinstance(table_name, str):
            table_name = TableName.parse(table_name)

        catalog_name = table_name.catalog or self.default_catalog
        catalog = self.get_catalog(catalog_name)
        if catalog is None:
            raise AnalysisError(f"catalog:{catalog_name} not exists")

        if table_name.db is None:
            for db in catalog.databases.values():
                table = db.get_table(table_name.table)
                if table is not None:
                    return DBObjects(catalog=catalog, db=db, table=table)
            raise AnalysisError(f"table:{table_name} not exists")

        db = catalog.get_database(table_name.db)
        if db is None:
            raise AnalysisError(f"database:{table_name.db} not exists")
        table = db.get_table(table_name.table)
        if table is None:
            raise AnalysisError(f"table:{table_name} not exists")
        return DBObjects(catalog=catalog, db=db, table=table)

    @classmethod
    def from_config(cls, catalogs: Dict[str, Any]) -> "MetadataCatalog":
        """Build a catalog registry from the ``catalogs`` config section."""
        metadata = cls()
        for catalog_name, catalog_data in catalogs.items():
            catalog = Catalog(id=int(catalog_data.get("id", 0)), name=catalog_name)
            for db_name, db_data in catalog_data.get("databases", {}).items():
                db = Database(id=int(db_data["id"]), name=db_name)
                for table_name, table_data in db_data.get("tables", {}).items():
                    db.add_table(_table_from_config(table_name, table_data))
                catalog.add_database(db)
            metadata.register_catalog(catalog)
        return metadata

    def __repr__(self) -> str:
        return f"MetadataCatalog(catalogs={len(self.catalogs)})"


def _table_from_config(name: str, data: Dict[str, Any]) -> Table:
    columns = []
    for col_name, type_str in data.get("columns", {}).items():
        columns.append(Column(name=col_name, data_type=DataType.from_string(str(type_str))))
    partitions = []
    for part_name, part_id in data.get("partitions", {}).items():
        partitions.append(Partition(id=int(part_id), name=part_name))
    return Table(id=int(data["id"]), name=name, columns=columns, partitions=partitions)
