"""Row stores that hold data rows between the wire and the reader."""

from __future__ import annotations

import os
import struct
import tempfile
from typing import Iterator, Optional, Protocol

_SIZE = struct.Struct("<I")
_WRITE_BUFFER = 1 << 16


class RowStore(Protocol):
    """The interface shared by the row caches."""

    def add_row(self, row: bytes) -> None: ...

    def finalize(self) -> None: ...

    def get_row(self) -> Optional[bytes]: ...

    def peek(self) -> Optional[bytes]: ...

    def close(self) -> None: ...


class MemoryCache:
    """A row store that keeps every row in memory."""

    def __init__(self) -> None:
        self._rows: list[bytes] = []
        self._read_idx = 0

    def add_row(self, row: bytes) -> None:
        """Append a row to the store."""
        self._rows.append(bytes(row))

    def finalize(self) -> None:
        """Mark the end of incoming rows; nothing to do in memory."""

    def get_row(self) -> Optional[bytes]:
        """Return the next row, or None when none remain."""
        if self._read_idx >= len(self._rows):
            return None
        row = self._rows[self._read_idx]
        self._read_idx += 1
        return row

    def peek(self) -> Optional[bytes]:
        """Return the first stored row without consuming anything."""
        return self._rows[0] if self._rows else None

    def close(self) -> None:
        """Release resources; nothing to do in memory."""

    def __iter__(self) -> Iterator[bytes]:
        while (row := self.get_row()) is not None:
            yield row

    def __enter__(self) -> "MemoryCache":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class FileCache:
    """A row store that keeps up to ``row_limit`` rows in memory.

    Rows beyond the limit are written to a temporary file as a little-endian
    32-bit length followed by the row bytes, and are read back in batches of
    ``row_limit`` once the in-memory rows are used up.
    """

    def __init__(self, row_limit: int) -> None:
        fd, self.path = tempfile.mkstemp(prefix=".verticaquery.", suffix=".dat")
        self._file = os.fdopen(fd, "w+b", buffering=_WRITE_BUFFER)
        self._max_in_memory = row_limit
        self._rows: list[bytes] = []
        self._read_idx = 0
        self._finalized = False
        self._closed = False
        self.row_count = 0

    def add_row(self, row: bytes) -> None:
        """Add a row, spilling it to the file once memory is full."""
        if self._finalized:
            raise RuntimeError("cannot add rows to a finalized cache")
        self.row_count += 1
        data = bytes(row)
        if len(self._rows) >= self._max_in_memory:
            self._file.write(_SIZE.pack(len(data)))
            self._file.write(data)
            return
        self._rows.append(data)

    def finalize(self) -> None:
        """Mark the end of incoming rows and ready the cache for reading."""
        self._file.flush()
        self._file.seek(0)
        self._finalized = True

    def get_row(self) -> Optional[bytes]:
        """Return the next row, or None when none remain."""
        if self._read_idx >= len(self._rows) and not self._reload():
            return None
        row = self._rows[self._read_idx]
        self._read_idx += 1
        return row

    def peek(self) -> Optional[bytes]:
        """Return the first row of the current batch without consuming anything."""
        return self._rows[0] if self._rows else None

    def close(self) -> None:
        """Close and delete the temporary file."""
        if self._closed:
            return
        self._closed = True
        self._file.close()
        os.remove(self.path)

    def _reload(self) -> bool:
        batch: list[bytes] = []
        limit = max(self._max_in_memory, 1)
        while len(batch) < limit:
            header = self._file.read(_SIZE.size)
            if not header:
                break
            if len(header) < _SIZE.size:
                return False
            (size,) = _SIZE.unpack(header)
            body = self._file.read(size)
            if len(body) < size:
                return False
            batch.append(body)
        if not batch:
            return False
        self._rows = batch
        self._read_idx = 0
        return True

    def __iter__(self) -> Iterator[bytes]:
        while (row := self.get_row()) is not None:
            yield row

    def __enter__(self) -> "FileCache":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()