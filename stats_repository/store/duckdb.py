"""DuckDB statistics store."""

from typing import Any, Dict, Iterator, Optional
import pyarrow as pa
import duckdb
import logging

from ..errors import StatisticsExecutionError
from .base import StatisticsStore

logger = logging.getLogger(__name__)


class DuckDBStatisticsStore(StatisticsStore):
    """Statistics store backed by an embedded DuckDB database."""

    def __init__(self, name: str = "duckdb", config: Optional[Dict[str, Any]] = None):
        """Initialize DuckDB store.

        Config may include:
            - path: Path to DuckDB database file (default: :memory:)
            - read_only: Whether to open in read-only mode (default: False)
        """
        super().__init__(name, config)
        self.db_path = self.config.get("path", ":memory:")
        self.read_only = self.config.get("read_only", False)

    def connect(self) -> None:
        """Establish connection to DuckDB."""
        logger.info(f"Connecting to DuckDB at '{self.db_path}'")
        try:
            self.connection = duckdb.connect(self.db_path, read_only=self.read_only)
        except duckdb.Error as e:
            raise StatisticsExecutionError(f"DuckDB connection failed: {e}") from e
        self._connected = True

    def disconnect(self) -> None:
        """Close DuckDB connection."""
        if self.connection:
            self.connection.close()
            logger.info(f"Disconnected from DuckDB: {self.name}")
            self.connection = None
            self._connected = False

    def execute_batches(self, query: str) -> Iterator[pa.RecordBatch]:
        """Execute query and yield Arrow record batches."""
        self.ensure_connected()
        logger.debug(f"Executing query on {self.name}: {query[:200]}")
        try:
            arrow_table = self.connection.execute(query).fetch_arrow_table()
        except duckdb.Error as e:
            logger.error(f"Query execution failed on {self.name}: {e}")
            raise StatisticsExecutionError(str(e)) from e

        for batch in arrow_table.to_batches(max_chunksize=10000):
            yield batch

    def exec_update(self, statement: str) -> None:
        """Execute a statement without a result set."""
        self.ensure_connected()
        logger.debug(f"Executing update on {self.name}: {statement[:200]}")
        try:
            self.connection.execute(statement)
        except duckdb.Error as e:
            logger.error(f"Update failed on {self.name}: {e}")
            raise StatisticsExecutionError(str(e)) from e
