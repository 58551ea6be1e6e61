"""Result rows: column metadata, data-row decoding and value conversion."""

from __future__ import annotations

import datetime as _dt
import enum
import logging
import re
import struct
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Sequence, Union

from verticaquery.rowcache import FileCache, MemoryCache, RowStore

_log = logging.getLogger(__name__)

_COLUMN_COUNT = struct.Struct(">H")
_COLUMN_LENGTH = struct.Struct(">i")
_NULL_LENGTH = -1

_ENDS_WITH_MINUTES = re.compile(r":\d{2}\Z", re.ASCII)
_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f%z"
_TIME_DATE_PREFIX = "0001-01-01 "


class ColumnType(enum.IntEnum):
    """Type OIDs the server reports in row descriptions."""

    BOOLEAN = 5
    INT64 = 6
    FLOAT64 = 7
    CHAR = 8
    VARCHAR = 9
    DATE = 10
    TIME = 11
    TIMESTAMP = 12
    TIMESTAMP_TZ = 13
    INTERVAL = 14
    TIME_TZ = 15
    NUMERIC = 16
    VARBINARY = 17
    UUID = 20
    INTERVAL_YM = 114
    LONG_VARCHAR = 115
    LONG_VARBINARY = 116
    BINARY = 117


_STRING_TYPES = frozenset(
    {ColumnType.VARCHAR, ColumnType.LONG_VARCHAR, ColumnType.CHAR, ColumnType.UUID}
)
_INTERVAL_TYPES = frozenset({ColumnType.INTERVAL, ColumnType.INTERVAL_YM})
_FLOAT_TYPES = frozenset({ColumnType.FLOAT64, ColumnType.NUMERIC})
_BINARY_TYPES = frozenset(
    {ColumnType.VARBINARY, ColumnType.LONG_VARBINARY, ColumnType.BINARY}
)
_TEMPORAL_PRECISION_TYPES = frozenset(
    {
        ColumnType.TIME,
        ColumnType.TIME_TZ,
        ColumnType.TIMESTAMP,
        ColumnType.TIMESTAMP_TZ,
        ColumnType.INTERVAL,
        ColumnType.INTERVAL_YM,
    }
)
_FIXED_LENGTH_TYPES = frozenset(
    {
        ColumnType.BOOLEAN,
        ColumnType.INT64,
        ColumnType.FLOAT64,
        ColumnType.DATE,
        ColumnType.TIMESTAMP,
        ColumnType.TIMESTAMP_TZ,
        ColumnType.TIME,
        ColumnType.TIME_TZ,
        ColumnType.INTERVAL,
        ColumnType.INTERVAL_YM,
        ColumnType.UUID,
    }
)
_SHORT_VARIABLE_TYPES = frozenset(
    {ColumnType.CHAR, ColumnType.VARCHAR, ColumnType.BINARY, ColumnType.VARBINARY}
)
_LONG_VARIABLE_TYPES = frozenset({ColumnType.LONG_VARCHAR, ColumnType.LONG_VARBINARY})

_SCAN_TYPES: dict[int, type] = {
    ColumnType.BOOLEAN: bool,
    ColumnType.INT64: int,
    ColumnType.FLOAT64: float,
    ColumnType.NUMERIC: float,
    **{oid: str for oid in _STRING_TYPES | _BINARY_TYPES | _INTERVAL_TYPES},
    ColumnType.DATE: _dt.date,
    ColumnType.TIMESTAMP: _dt.datetime,
    ColumnType.TIMESTAMP_TZ: _dt.datetime,
    ColumnType.TIME: _dt.time,
    ColumnType.TIME_TZ: _dt.time,
}


@dataclass(frozen=True)
class ColumnDef:
    """Description of one result column."""

    field_name: str
    data_type_oid: int
    data_type_name: str = ""
    length: int = 0
    nullable: bool = False
    data_type_mod: int = -1
    attrib_num: int = 0


Value = Union[None, bool, int, float, str, _dt.date, _dt.datetime, _dt.time]


def encode_data_row(values: Sequence[Union[bytes, str, None]]) -> bytes:
    """Build a data-row body: a column count, then each column's length and bytes."""
    parts = [_COLUMN_COUNT.pack(len(values))]
    for value in values:
        if value is None:
            parts.append(_COLUMN_LENGTH.pack(_NULL_LENGTH))
            continue
        data = value.encode("utf-8") if isinstance(value, str) else bytes(value)
        parts.append(_COLUMN_LENGTH.pack(len(data)))
        parts.append(data)
    return b"".join(parts)


def decode_data_row(body: bytes) -> list[Optional[bytes]]:
    """Split a data-row body into its column values; NULL columns become None."""
    if len(body) < _COLUMN_COUNT.size:
        raise ValueError("data row is too short to hold a column count")
    (count,) = _COLUMN_COUNT.unpack_from(body, 0)
    offset = _COLUMN_COUNT.size
    columns: list[Optional[bytes]] = []
    for _ in range(count):
        if offset + _COLUMN_LENGTH.size > len(body):
            raise ValueError("data row ends inside a column length")
        (length,) = _COLUMN_LENGTH.unpack_from(body, offset)
        offset += _COLUMN_LENGTH.size
        if length == _NULL_LENGTH:
            columns.append(None)
            continue
        if length < 0 or offset + length > len(body):
            raise ValueError("data row ends inside a column value")
        columns.append(bytes(body[offset:offset + length]))
        offset += length
    return columns


def parse_date_column(value: str) -> _dt.date:
    """Parse a ``YYYY-MM-DD`` date."""
    if value.endswith(" BC"):
        raise ValueError(f"cannot represent a date before Christ: {value!r}")
    try:
        return _dt.datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise ValueError(f"cannot parse date {value!r}") from exc


def parse_timestamp_tz_column(value: str) -> _dt.datetime:
    """Parse an ISO timestamp with a UTC offset such as ``2020-01-02 05:04:05.5+05:30``."""
    original = value
    if "infinity" in value:
        raise ValueError("cannot parse an infinity timestamp to a datetime")
    if " BC" in value:
        raise ValueError(f"cannot represent a timestamp before Christ: {original!r}")

    if not _ENDS_WITH_MINUTES.search(value):
        value += ":00"

    # Make sure the fractional seconds have exactly six digits.
    if value.find(".") == 19:
        needed = 32 - len(value)
        if needed > 0:
            cut = 26 - needed
            value = value[:cut] + "0" * needed + value[cut:]
    else:
        value = value[:19] + ".000000" + value[19:]

    try:
        return _dt.datetime.strptime(value, _TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise ValueError(f"cannot parse timestamp {original!r}") from exc


def _parse_time_column(value: str) -> _dt.time:
    return parse_timestamp_tz_column(_TIME_DATE_PREFIX + value).timetz()


class Rows:
    """Rows of one result set, read back in the order they were added."""

    def __init__(
        self,
        column_defs: Sequence[ColumnDef],
        store: RowStore,
        tz_offset: str = "",
        in_memory_row_limit: int = 0,
    ) -> None:
        self.column_defs = list(column_defs)
        self.tz_offset = tz_offset
        self.in_memory_row_limit = in_memory_row_limit
        self._store = store

    def columns(self) -> list[str]:
        """Return the names of all columns."""
        return [column.field_name for column in self.column_defs]

    def close(self) -> None:
        """Release the row store."""
        self._store.close()

    def add_row(self, row: bytes) -> None:
        """Store one encoded data row."""
        self._store.add_row(row)

    def finalize(self) -> None:
        """Mark the end of incoming rows."""
        self._store.finalize()

    def next_row(self) -> Optional[list[Value]]:
        """Return the next row converted to Python values, or None at the end."""
        raw = self._store.get_row()
        if raw is None:
            return None
        values = decode_data_row(raw)
        converted: list[Value] = []
        for column, data in zip(self.column_defs, values):
            try:
                converted.append(self._convert(column.data_type_oid, data))
            except ValueError as exc:
                _log.error("%s", exc)
                raise
        if len(values) > len(self.column_defs):
            raise ValueError(
                f"data row has {len(values)} columns but {len(self.column_defs)} are described"
            )
        return converted

    def __iter__(self) -> Iterator[list[Value]]:
        while (row := self.next_row()) is not None:
            yield row

    def __enter__(self) -> "Rows":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _convert(self, oid: int, data: Optional[bytes]) -> Value:
        if data is None:
            return None
        if oid == ColumnType.BOOLEAN:
            return data[:1] == b"t"
        if oid in _BINARY_TYPES:
            return data.hex()
        text = data.decode("utf-8")
        if oid == ColumnType.INT64:
            try:
                return int(text)
            except ValueError as exc:
                raise ValueError(f"cannot parse integer {text!r}") from exc
        if oid in _FLOAT_TYPES:
            try:
                return float(text)
            except ValueError as exc:
                raise ValueError(f"cannot parse float {text!r}") from exc
        if oid == ColumnType.DATE:
            return parse_date_column(text)
        if oid == ColumnType.TIMESTAMP:
            return parse_timestamp_tz_column(text + self.tz_offset)
        if oid == ColumnType.TIMESTAMP_TZ:
            return parse_timestamp_tz_column(text)
        if oid == ColumnType.TIME:
            return _parse_time_column(text + self.tz_offset)
        if oid == ColumnType.TIME_TZ:
            return _parse_time_column(text)
        return text

    def column_type_database_type_name(self, index: int) -> str:
        """Return the server's name for the column's type."""
        return self.column_defs[index].data_type_name

    def column_type_nullable(self, index: int) -> bool:
        """Return whether the column may hold NULL."""
        return self.column_defs[index].nullable

    def column_type_precision_scale(self, index: int) -> Optional[tuple[int, int]]:
        """Return ``(precision, scale)`` for numeric and temporal columns, else None.

        A type modifier of -1 means the size is unknown, and the maximum is assumed.
        """
        column = self.column_defs[index]
        type_mod = column.data_type_mod
        if column.data_type_oid == ColumnType.NUMERIC:
            if type_mod == -1:
                return 1024, 15
            return ((type_mod - 4) >> 16) & 0xFFFF, (type_mod - 4) & 0xFF
        if column.data_type_oid in _TEMPORAL_PRECISION_TYPES:
            if type_mod == -1:
                return 6, 0
            return type_mod & 0xF, 0
        return None

    def column_type_length(self, index: int) -> Optional[int]:
        """Return the length of a variable-length column, or None for other types."""
        column = self.column_defs[index]
        oid = column.data_type_oid
        type_mod = column.data_type_mod
        if oid in _FIXED_LENGTH_TYPES:
            return None
        if oid in _SHORT_VARIABLE_TYPES:
            return 65000 if type_mod == -1 else type_mod - 4
        if oid in _LONG_VARIABLE_TYPES:
            return 32000000 if type_mod == -1 else type_mod - 4
        if oid == ColumnType.NUMERIC:
            precision_scale = self.column_type_precision_scale(index)
            assert precision_scale is not None
            return (precision_scale[0] // 19 + 1) * 8
        return None

    def column_type_scan_type(self, index: int) -> type:
        """Return the Python type that values of the column convert to."""
        return _SCAN_TYPES.get(self.column_defs[index].data_type_oid, object)


def new_rows(
    column_defs: Sequence[ColumnDef],
    tz_offset: str = "",
    in_memory_row_limit: int = 0,
) -> Rows:
    """Create rows backed by a file cache when a row limit is set, else by memory."""
    store: RowStore
    if in_memory_row_limit != 0:
        try:
            store = FileCache(in_memory_row_limit)
        except OSError:
            store = MemoryCache()
    else:
        store = MemoryCache()
    return Rows(column_defs, store, tz_offset, in_memory_row_limit)


def empty_rows() -> Rows:
    """Create a result with no columns and no rows."""
    return new_rows([], "")


__all__: list[str] = [
    "ColumnDef",
    "ColumnType",
    "Rows",
    "decode_data_row",
    "empty_rows",
    "encode_data_row",
    "new_rows",
    "parse_date_column",
    "parse_timestamp_tz_column",
]

_unused: Any = None