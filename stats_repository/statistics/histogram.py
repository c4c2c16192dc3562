"""Histogram values stored next to column statistics."""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional
import json

from ..store.result_row import ResultRow


@dataclass(frozen=True)
class Bucket:
    """One equi-height bucket, bounds kept as literal text."""

    lower: str
    upper: str
    count: float
    pre_sum: float
    ndv: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bucket":
        return cls(
            lower=str(data["lower"]),
            upper=str(data["upper"]),
            count=float(data.get("count", 0)),
            pre_sum=float(data.get("pre_sum", 0)),
            ndv=float(data.get("ndv", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lower": self.lower,
            "upper": self.upper,
            "count": self.count,
            "pre_sum": self.pre_sum,
            "ndv": self.ndv,
        }


@dataclass(frozen=True)
class Histogram:
    """Bucketed value distribution of a column."""

    sample_rate: Optional[float] = None
    buckets: List[Bucket] = field(default_factory=list)
    is_unknown: bool = False

    UNKNOWN: ClassVar["Histogram"]

    @property
    def num_buckets(self) -> int:
        return len(self.buckets)

    @classmethod
    def from_result_row(cls, row: ResultRow) -> "Histogram":
        """Build a histogram from a stored row.

        Raises:
            ValueError: If the bucket column is not a JSON list
        """
        sample_rate = row.get("sample_rate")
        raw_buckets = row.get("buckets")
        buckets: List[Bucket] = []
        if raw_buckets:
            decoded = json.loads(raw_buckets)
            if not isinstance(decoded, list):
                raise ValueError("Histogram buckets must be a JSON list")
            buckets = [Bucket.from_dict(item) for item in decoded]
        return cls(
            sample_rate=float(sample_rate) if sample_rate is not None else None,
            buckets=buckets,
        )

    def buckets_json(self) -> str:
        return json.dumps([bucket.to_dict() for bucket in self.buckets])


Histogram.UNKNOWN = Histogram(is_unknown=True)
