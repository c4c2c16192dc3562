"""Base statistics store interface."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional
import pyarrow as pa

from .result_row import ResultRow, rows_from_batches


class StatisticsStore(ABC):
    """Execution engine the repository delegates every statement to.

    Implementations run one statement per call and raise
    StatisticsExecutionError when the round trip fails.
    """

    def __init__(self, name: str, config: Optional[Dict[str, Any]] = None):
        """Initialize the store.

        Args:
            name: Name used in log messages
            config: Driver configuration dictionary
        """
        self.name = name
        self.config = config or {}
        self.connection = None
        self._connected = False

    @property
    def dialect(self) -> str:
        """sqlglot dialect statements for this store are rendered in."""
        return "duckdb"

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the store."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close connection to the store."""
        pass

    @abstractmethod
    def execute_batches(self, query: str) -> Iterator[pa.RecordBatch]:
        """Run a query and yield Arrow record batches.

        Args:
            query: SQL query string
        """
        pass

    @abstractmethod
    def exec_update(self, statement: str) -> None:
        """Run a statement that returns no rows.

        Args:
            statement: SQL statement string
        """
        pass

    def execute_query(self, query: str) -> List[ResultRow]:
        """Run a query and materialize its result rows."""
        self.ensure_connected()
        return rows_from_batches(self.execute_batches(query))

    def is_connected(self) -> bool:
        return self._connected

    def ensure_connected(self) -> None:
        """Connect lazily on first use."""
        if not self.is_connected():
            self.connect()
            self._connected = True

    def __enter__(self):
        self.ensure_connected()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
        self._connected = False
        return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"
