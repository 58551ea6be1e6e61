import dataclasses

import pytest

from verticaquery.result import Result


def test_defaults_are_zero():
    result = Result()
    assert result.last_insert_id == 0
    assert result.rows_affected == 0


def test_values_are_kept():
    result = Result(last_insert_id=7, rows_affected=42)
    assert result.last_insert_id == 7
    assert result.rows_affected == 42


def test_result_is_immutable():
    result = Result(rows_affected=3)
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.rows_affected = 4  # type: ignore[misc]
    assert result.rows_affected == 3


def test_equality_by_value():
    assert Result(rows_affected=5) == Result(last_insert_id=0, rows_affected=5)
    assert not (Result(rows_affected=5) == Result(rows_affected=6))