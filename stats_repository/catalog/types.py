"""Column data types and the value conversions used for min/max bounds."""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum


class DataType(Enum):
    """SQL data types a statistic column can carry."""

    TINYINT = "TINYINT"
    SMALLINT = "SMALLINT"
    INTEGER = "INTEGER"
    BIGINT = "BIGINT"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    DECIMAL = "DECIMAL"
    VARCHAR = "VARCHAR"
    TEXT = "TEXT"
    BOOLEAN = "BOOLEAN"
    DATE = "DATE"
    TIMESTAMP = "TIMESTAMP"

    @classmethod
    def from_string(cls, type_str: str) -> "DataType":
        """Map a database type string to a DataType.

        Args:
            type_str: Database type string, e.g. "varchar(32)" or "BIGINT"

        Returns:
            Mapped DataType, VARCHAR when nothing matches
        """
        type_str = type_str.upper()

        if "TINYINT" in type_str:
            return cls.TINYINT
        if "SMALLINT" in type_str:
            return cls.SMALLINT
        if "INT" in type_str or "SERIAL" in type_str:
            if "BIG" in type_str:
                return cls.BIGINT
            return cls.INTEGER

        if "FLOAT" in type_str or "REAL" in type_str:
            return cls.FLOAT
        if "DOUBLE" in type_str:
            return cls.DOUBLE
        if "NUMERIC" in type_str or "DECIMAL" in type_str:
            return cls.DECIMAL

        if "CHAR" in type_str or "STRING" in type_str:
            return cls.VARCHAR
        if "TEXT" in type_str:
            return cls.TEXT

        if "BOOL" in type_str:
            return cls.BOOLEAN

        if "TIMESTAMP" in type_str or "DATETIME" in type_str:
            return cls.TIMESTAMP
        if "DATE" in type_str:
            return cls.DATE

        return cls.VARCHAR

    @property
    def is_integer(self) -> bool:
        return self in (DataType.TINYINT, DataType.SMALLINT, DataType.INTEGER, DataType.BIGINT)

    @property
    def is_string(self) -> bool:
        return self in (DataType.VARCHAR, DataType.TEXT)


_TRUE_LITERALS = ("true", "1")
_FALSE_LITERALS = ("false", "0")


def _parse_boolean(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_LITERALS:
        return True
    if lowered in _FALSE_LITERALS:
        return False
    raise ValueError(f"Invalid boolean literal: {value!r}")


def _parse_datetime(data_type: DataType, value: str) -> datetime:
    text = value.strip()
    if data_type == DataType.DATE:
        parsed = date.fromisoformat(text)
        return datetime(parsed.year, parsed.month, parsed.day)
    return datetime.fromisoformat(text)


def readable_value(data_type: DataType, value: str) -> str:
    """Normalize a literal into its canonical text for the given type.

    Raises:
        ValueError: If the literal is not valid for the type
    """
    if data_type.is_integer:
        return str(int(value.strip()))
    if data_type in (DataType.FLOAT, DataType.DOUBLE):
        return str(float(value))
    if data_type == DataType.DECIMAL:
        try:
            return str(Decimal(value.strip()))
        except InvalidOperation as e:
            raise ValueError(f"Invalid decimal literal: {value!r}") from e
    if data_type == DataType.BOOLEAN:
        return "true" if _parse_boolean(value) else "false"
    if data_type == DataType.DATE:
        return _parse_datetime(data_type, value).date().isoformat()
    if data_type == DataType.TIMESTAMP:
        return _parse_datetime(data_type, value).isoformat(sep=" ")
    return value


def convert_to_double(data_type: DataType, value: str) -> float:
    """Project a literal onto a double for range arithmetic.

    Dates and timestamps map to the number yyyymmddHHMMSS so ordering is kept.
    Strings map to their first 8 UTF-8 bytes read as a big-endian base-256
    number, which keeps prefix ordering.

    Raises:
        ValueError: If the literal is not valid for the type
    """
    if data_type.is_integer:
        return float(int(value.strip()))
    if data_type in (DataType.FLOAT, DataType.DOUBLE, DataType.DECIMAL):
        try:
            return float(Decimal(value.strip()))
        except InvalidOperation as e:
            raise ValueError(f"Invalid numeric literal: {value!r}") from e
    if data_type == DataType.BOOLEAN:
        return 1.0 if _parse_boolean(value) else 0.0
    if data_type in (DataType.DATE, DataType.TIMESTAMP):
        ts = _parse_datetime(data_type, value)
        return float(
            ts.year * 10000000000
            + ts.month * 100000000
            + ts.day * 1000000
            + ts.hour * 10000
            + ts.minute * 100
            + ts.second
        )

    encoded = value.encode("utf-8")[:8]
    result = 0
    for position in range(8):
        result <<= 8
        if position < len(encoded):
            result += encoded[position]
    return float(result)
