"""Schema metadata classes."""

from dataclasses import dataclass
from typing import List, Optional, Dict
from .types import DataType


@dataclass
class Column:
    """Column metadata."""

    name: str
    data_type: DataType
    nullable: bool = True

    def __repr__(self) -> str:
        return f"Column({self.name}, {self.data_type.value})"


@dataclass
class Partition:
    """Named partition of a table."""

    id: int
    name: str

    def __repr__(self) -> str:
        return f"Partition({self.name}, id={self.id})"


@dataclass
class Table:
    """Table metadata."""

    id: int
    name: str
    columns: List[Column] = None
    partitions: List[Partition] = None

    def __post_init__(self):
        if self.columns is None:
            self.columns = []
        if self.partitions is None:
            self.partitions = []

    def get_column(self, name: str) -> Optional[Column]:
        """Get column by name, case-insensitively."""
        for col in self.columns:
            if col.name.lower() == name.lower():
                return col
        return None

    def get_partition(self, name: str) -> Optional[Partition]:
        """Get partition by name."""
        for partition in self.partitions:
            if partition.name == name:
                return partition
        return None

    def __repr__(self) -> str:
        return f"Table({self.name}, id={self.id}, cols={len(self.columns)})"


@dataclass
class Database:
    """Database metadata."""

    id: int
    name: str
    tables: Dict[str, Table] = None

    def __post_init__(self):
        if self.tables is None:
            self.tables = {}

    def get_table(self, name: str) -> Optional[Table]:
        """Get table by name."""
        return self.tables.get(name.lower())

    def add_table(self, table: Table) -> None:
        """Add a table to this database."""
        self.tables[table.name.lower()] = table

    def __repr__(self) -> str:
        return f"Database({self.name}, id={self.id}, tables={len(self.tables)})"


@dataclass
class Catalog:
    """A catalog owning databases."""

    id: int
    name: str
    databases: Dict[str, Database] = None

    def __post_init__(self):
        if self.databases is None:
            self.databases = {}

    def get_database(self, name: str) -> Optional[Database]:
        """Get database by name."""
        return self.databases.get(name.lower())

    def add_database(self, database: Database) -> None:
        """Add a database to this catalog."""
        self.databases[database.name.lower()] = database

    def __repr__(self) -> str:
        return f"Catalog({self.name}, id={self.id}, dbs={len(self.databases)})"
