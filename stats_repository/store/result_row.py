"""Generic result rows returned by a statistics store."""

from typing import Any, Dict, Iterable, List, Sequence, Union
import pyarrow as pa


class ResultRow:
    """One row of a query result, addressable by position or column name."""

    __slots__ = ("_columns", "_values", "_index")

    def __init__(self, columns: Sequence[str], values: Sequence[Any]):
        if len(columns) != len(values):
            raise ValueError(
                f"Row has {len(values)} values for {len(columns)} columns"
            )
        self._columns = list(columns)
        self._values = list(values)
        self._index = {name: i for i, name in enumerate(self._columns)}

    @property
    def columns(self) -> List[str]:
        return list(self._columns)

    @property
    def values(self) -> List[Any]:
        return list(self._values)

    def get(self, key: Union[int, str]) -> Any:
        """Get a value by position or column name.

        Raises:
            KeyError: If a column name is not part of the row
        """
        if isinstance(key, int):
            return self._values[key]
        return self._values[self._index[key]]

    def __getitem__(self, key: Union[int, str]) -> Any:
        return self.get(key)

    def __contains__(self, name: str) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ResultRow):
            return NotImplemented
        return self._columns == other._columns and self._values == other._values

    def as_dict(self) -> Dict[str, Any]:
        return dict(zip(self._columns, self._values))

    def __repr__(self) -> str:
        return f"ResultRow({self.as_dict()})"


def rows_from_batches(batches: Iterable[pa.RecordBatch]) -> List[ResultRow]:
    """Flatten Arrow record batches into result rows."""
    rows: List[ResultRow] = []
    for batch in batches:
        columns = batch.schema.names
        for record in batch.to_pylist():
            values = []
            for name in columns:
                values.append(record[name])
            rows.append(ResultRow(columns, values))
    return rows
