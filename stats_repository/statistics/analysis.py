"""Analysis job descriptors and the table-level stats refresh hook."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Protocol, Set
import logging
import time

from ..catalog.schema import Table

logger = logging.getLogger(__name__)


class JobType(Enum):
    """How an analysis job was started."""

    MANUAL = "MANUAL"
    SYSTEM = "SYSTEM"


@dataclass(frozen=True)
class AnalysisJobInfo:
    """Descriptor of a job that refreshed statistics of a table."""

    job_type: JobType
    tbl_update_time: int
    col_name: str = ""
    col_to_partitions: Dict[str, Set[str]] = field(default_factory=dict)
    user_inject: bool = False

    @classmethod
    def manual_injection(cls, now_ms: Optional[int] = None) -> "AnalysisJobInfo":
        """Synthetic job describing a user altering statistics by hand."""
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        return cls(
            job_type=JobType.MANUAL,
            tbl_update_time=now_ms,
            col_name="",
            col_to_partitions={},
            user_inject=True,
        )


class TableStatsRefreshHook(Protocol):
    """Receives notice that statistics of a table changed."""

    def notify_table_stats_updated(self, job_info: AnalysisJobInfo, table: Table) -> None:
        ...


@dataclass
class TableStatsMeta:
    """Bookkeeping about the last statistics refresh of a table."""

    table_id: int
    updated_time: int
    job_type: JobType
    user_injected: bool
    refresh_count: int = 1


class TableStatsRegistry:
    """In-process record of table-level statistics refreshes."""

    def __init__(self):
        self._tables: Dict[int, TableStatsMeta] = {}

    def notify_table_stats_updated(self, job_info: AnalysisJobInfo, table: Table) -> None:
        meta = self._tables.get(table.id)
        if meta is None:
            self._tables[table.id] = TableStatsMeta(
                table_id=table.id,
                updated_time=job_info.tbl_update_time,
                job_type=job_info.job_type,
                user_injected=job_info.user_inject,
            )
        else:
            meta.updated_time = job_info.tbl_update_time
            meta.job_type = job_info.job_type
            meta.user_injected = job_info.user_inject
            meta.refresh_count += 1
        logger.debug(
            f"Table {table.name} (id={table.id}) stats refreshed by {job_info.job_type.value} job"
        )

    def find_table_stats(self, table_id: int) -> Optional[TableStatsMeta]:
        return self._tables.get(table_id)

    def __len__(self) -> int:
        return len(self._tables)
