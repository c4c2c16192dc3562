"""Column statistic values and their builder."""

from dataclasses import dataclass
from typing import Any, ClassVar, Optional

from ..catalog.types import DataType, convert_to_double
from ..store.result_row import ResultRow


@dataclass(frozen=True)
class ColumnStatistic:
    """Estimates for one column at one granularity.

    Value fields are None when unset. ``min_expr``/``max_expr`` hold the
    literal text of the bounds, ``min_value``/``max_value`` their numeric
    projection. ``is_original`` is False once a user has overridden ndv.
    """

    count: Optional[float] = None
    ndv: Optional[float] = None
    num_nulls: Optional[float] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    min_expr: Optional[str] = None
    max_expr: Optional[str] = None
    data_size: Optional[float] = None
    avg_size_byte: Optional[float] = None
    is_original: bool = True
    is_unknown: bool = False

    UNKNOWN: ClassVar["ColumnStatistic"]

    @classmethod
    def from_result_row(
        cls, row: ResultRow, data_type: Optional[DataType] = None
    ) -> "ColumnStatistic":
        """Build a statistic from a stored row.

        Args:
            row: Row of the column statistics table
            data_type: Column type used to project min/max onto doubles;
                bounds are parsed as plain numbers when omitted
        """
        builder = ColumnStatisticBuilder()
        builder.set_count(_as_float(row.get("count")))
        builder.set_ndv(_as_float(row.get("ndv")))
        builder.set_num_nulls(_as_float(row.get("null_count")))
        data_size = _as_float(row.get("data_size"))
        builder.set_data_size(data_size)
        count = builder.count
        if data_size and count and data_size > 0 and count > 0:
            builder.set_avg_size_byte(data_size / count)

        min_text = row.get("min")
        if min_text is not None:
            builder.set_min_expr(str(min_text))
            builder.set_min_value(_project(data_type, str(min_text)))
        max_text = row.get("max")
        if max_text is not None:
            builder.set_max_expr(str(max_text))
            builder.set_max_value(_project(data_type, str(max_text)))
        return builder.build()


ColumnStatistic.UNKNOWN = ColumnStatistic(is_original=False, is_unknown=True)


def _as_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    return float(value)


def _project(data_type: Optional[DataType], text: str) -> Optional[float]:
    if data_type is not None:
        return convert_to_double(data_type, text)
    try:
        return float(text)
    except ValueError:
        return None


class ColumnStatisticBuilder:
    """Incrementally assemble an immutable ColumnStatistic."""

    def __init__(self):
        self.count: Optional[float] = None
        self.ndv: Optional[float] = None
        self.num_nulls: Optional[float] = None
        self.min_value: Optional[float] = None
        self.max_value: Optional[float] = None
        self.min_expr: Optional[str] = None
        self.max_expr: Optional[str] = None
        self.data_size: Optional[float] = None
        self.avg_size_byte: Optional[float] = None
        self.is_original = True

    def set_count(self, count: Optional[float]) -> "ColumnStatisticBuilder":
        self.count = count
        return self

    def set_ndv(self, ndv: Optional[float]) -> "ColumnStatisticBuilder":
        self.ndv = ndv
        return self

    def set_num_nulls(self, num_nulls: Optional[float]) -> "ColumnStatisticBuilder":
        self.num_nulls = num_nulls
        return self

    def set_min_value(self, min_value: Optional[float]) -> "ColumnStatisticBuilder":
        self.min_value = min_value
        return self

    def set_max_value(self, max_value: Optional[float]) -> "ColumnStatisticBuilder":
        self.max_value = max_value
        return self

    def set_min_expr(self, min_expr: Optional[str]) -> "ColumnStatisticBuilder":
        self.min_expr = min_expr
        return self

    def set_max_expr(self, max_expr: Optional[str]) -> "ColumnStatisticBuilder":
        self.max_expr = max_expr
        return self

    def set_data_size(self, data_size: Optional[float]) -> "ColumnStatisticBuilder":
        self.data_size = data_size
        return self

    def set_avg_size_byte(self, avg_size_byte: Optional[float]) -> "ColumnStatisticBuilder":
        self.avg_size_byte = avg_size_byte
        return self

    def set_original(self, is_original: bool) -> "ColumnStatisticBuilder":
        self.is_original = is_original
        return self

    def build(self) -> ColumnStatistic:
        return ColumnStatistic(
            count=self.count,
            ndv=self.ndv,
            num_nulls=self.num_nulls,
            min_value=self.min_value,
            max_value=self.max_value,
            min_expr=self.min_expr,
            max_expr=self.max_expr,
            data_size=self.data_size,
            avg_size_byte=self.avg_size_byte,
            is_original=self.is_original,
        )
