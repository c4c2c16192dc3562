"""PostgreSQL statistics store."""

from typing import Any, Dict, Iterator, List, Optional
import pyarrow as pa
import psycopg2
from psycopg2 import pool
import logging

from ..errors import StatisticsExecutionError
from .base import StatisticsStore

logger = logging.getLogger(__name__)


class PostgreSQLStatisticsStore(StatisticsStore):
    """Statistics store backed by PostgreSQL with connection pooling."""

    def __init__(self, name: str = "postgresql", config: Optional[Dict[str, Any]] = None):
        """Initialize PostgreSQL store.

        Config should include:
            - host: Database host
            - port: Database port (default: 5432)
            - database: Database name
            - user: Username
            - password: Password
            - min_connections: Minimum connections in pool (default: 1)
            - max_connections: Maximum connections in pool (default: 5)
        """
        super().__init__(name, config)
        self._pool = None
        self._min_connections = self.config.get("min_connections", 1)
        self._max_connections = self.config.get("max_connections", 5)

    @property
    def dialect(self) -> str:
        return "postgres"

    def connect(self) -> None:
        """Establish connection pool to PostgreSQL."""
        try:
            logger.info(
                f"Connecting to PostgreSQL database '{self.config['database']}' at {self.config['host']}"
            )
            self._pool = pool.ThreadedConnectionPool(
                self._min_connections,
                self._max_connections,
                host=self.config["host"],
                port=self.config.get("port", 5432),
                database=self.config["database"],
                user=self.config["user"],
                password=self.config["password"],
            )
            self._connected = True
        except psycopg2.Error as e:
            logger.error(f"Failed to connect to PostgreSQL {self.name}: {e}")
            raise StatisticsExecutionError(f"PostgreSQL connection failed: {e}") from e

    def disconnect(self) -> None:
        """Close all connections in the pool."""
        if self._pool:
            self._pool.closeall()
            logger.info(f"Disconnected from PostgreSQL: {self.name}")
            self._pool = None
            self._connected = False

    def _get_connection(self):
        if not self._pool:
            raise StatisticsExecutionError(f"Not connected to {self.name}")
        return self._pool.getconn()

    def _return_connection(self, conn):
        if self._pool:
            self._pool.putconn(conn)

    def execute_batches(self, query: str) -> Iterator[pa.RecordBatch]:
        """Execute query and yield Arrow record batches."""
        self.ensure_connected()
        conn = self._get_connection()
        try:
            with conn.cursor() as cursor:
                logger.debug(f"Executing query on {self.name}: {query[:200]}")
                cursor.execute(query)
                columns = [desc[0] for desc in cursor.description]

                while True:
                    rows = cursor.fetchmany(10000)
                    if not rows:
                        break
                    yield pa.RecordBatch.from_pydict(self._build_column_data(columns, rows))
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Query execution failed on {self.name}: {e}")
            raise StatisticsExecutionError(str(e)) from e
        finally:
            self._return_connection(conn)

    def exec_update(self, statement: str) -> None:
        """Execute a statement in its own transaction."""
        self.ensure_connected()
        conn = self._get_connection()
        try:
            with conn.cursor() as cursor:
                logger.debug(f"Executing update on {self.name}: {statement[:200]}")
                cursor.execute(statement)
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Update failed on {self.name}: {e}")
            raise StatisticsExecutionError(str(e)) from e
        finally:
            self._return_connection(conn)

    def _build_column_data(self, columns: List[str], rows: List) -> Dict[str, List]:
        data = {}
        for col in columns:
            data[col] = []

        for row in rows:
            for i, col in enumerate(columns):
                data[col].append(row[i])

        return data
