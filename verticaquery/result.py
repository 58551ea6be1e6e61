"""The outcome of a statement that changes data."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Result:
    """Counts reported after executing a statement."""

    last_insert_id: int = 0
    rows_affected: int = 0