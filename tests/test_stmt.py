from datetime import date, datetime, timezone

import pytest

from verticaquery.stmt import NamedValue, Statement, clean_quotes, format_arg


@pytest.mark.parametrize(
    "command, args, expected",
    [
        ("select * from something", [], "select * from something"),
        (
            "select * from something where value = ?",
            [NamedValue(value=None)],
            "select * from something where value = NULL",
        ),
        (
            "select * from something where value = ?",
            [NamedValue(value=datetime(2000, 2, 16, 10, 12, 30, 456, tzinfo=timezone.utc))],
            "select * from something where value = '2000-02-16 10:12:30.000456000'",
        ),
        (
            "select * from something where value = ?",
            [NamedValue(value="taco")],
            "select * from something where value = 'taco'",
        ),
        (
            "select * from something where value = ? and otherVal = ?",
            [NamedValue(value="taco"), NamedValue(value=15.5)],
            "select * from something where value = 'taco' and otherVal = 15.5",
        ),
        (
            "select * from something where value = ?",
            [NamedValue(value="it's other's")],
            "select * from something where value = 'it''s other''s'",
        ),
        (
            "select * from something where value = ?",
            [NamedValue(value="it''s other''s")],
            "select * from something where value = 'it''s other''s'",
        ),
        (
            "select * from something where value = ? and test = '?bad'",
            [NamedValue(value="replace")],
            "select * from something where value = 'replace' and test = '?bad'",
        ),
    ],
)
def test_interpolate(command, args, expected):
    assert Statement(command).interpolate(args) == expected


def test_interpolate_named_after_injection():
    stmt = Statement("select * from t where a=@id and b=@name and c=@id")
    args = stmt.inject_named_args(
        [NamedValue(name="id", value=7), NamedValue(name="name", value="x")]
    )
    assert stmt.interpolate(args) == "select * from t where a=7 and b='x' and c=7"


def test_interpolate_too_few_arguments():
    stmt = Statement("select ?, ?")
    with pytest.raises(ValueError):
        stmt.interpolate([NamedValue(value=1)])


@pytest.mark.parametrize(
    "value, expected",
    [
        ("isn''t", "isn''t"),
        ("pair it'''", "pair it''''"),
        ("'pair it", "''pair it"),
        ("isn't wasn't", "isn''t wasn''t"),
        ("isn't", "isn''t"),
    ],
)
def test_clean_quotes(value, expected):
    assert clean_quotes(value) == expected


@pytest.mark.parametrize(
    "query, args, expected",
    [
        (
            "select * from table where a=?",
            [NamedValue(name="", value="hello")],
            ["hello"],
        ),
        (
            "select * from table where a=@first and b=@second",
            [NamedValue(name="first", value="hello"), NamedValue(name="second", value=123)],
            ["hello", 123],
        ),
        (
            "select * from table where a=@id and other=@test and b=@id",
            [NamedValue(name="id", value=123), NamedValue(name="test", value=456)],
            [123, 456, 123],
        ),
        (
            "select * from table where a=@id and other=@test and b=@id",
            [
                NamedValue(name="id", value=123),
                NamedValue(name="", value=NamedValue(name="test", value=456)),
            ],
            [123, 456, 123],
        ),
    ],
)
def test_inject_named_args(query, args, expected):
    result = Statement(query).inject_named_args(args)
    assert [r.value for r in result] == expected
    assert [r.ordinal for r in result] == list(range(len(expected)))


def test_inject_named_args_requires_names():
    stmt = Statement("select * from t where a=@id")
    with pytest.raises(ValueError, match="must have names"):
        stmt.inject_named_args([NamedValue(value=1)])


@pytest.mark.parametrize(
    "query, expected",
    [
        ("select * from table where a = ?", 1),
        ("select * from table where a = @name", 1),
        ("select * from table where a = @name and b = @name and c = @id", 2),
        ("select * --test?\n\t\t\tfrom table where a = 1", 0),
        ("select * from test where a = 'test?'", 0),
    ],
)
def test_num_input(query, expected):
    assert Statement(query).num_input() == expected


def test_named_params_rewritten_in_command():
    stmt = Statement("select * from t where a = @first and b = @Second")
    assert stmt.command == "select * from t where a = ? and b = ?"
    assert stmt.named_arg_positions == ["FIRST", "SECOND"]


def test_empty_statement_rejected():
    with pytest.raises(ValueError, match="empty statement"):
        Statement("")


def test_convert_to_named():
    result = Statement("select ?, ?").convert_to_named(["a", 2])
    assert result == [NamedValue(ordinal=0, value="a"), NamedValue(ordinal=1, value=2)]


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "NULL"),
        (True, "true"),
        (False, "false"),
        (42, "42"),
        (-7, "-7"),
        (15.5, "15.5"),
        (1.0, "1"),
        (1e21, "1e+21"),
        (0.0001, "0.0001"),
        (0.00001, "1e-05"),
        ("a'b", "'a''b'"),
        (date(2021, 3, 4), "'2021-03-04 00:00:00.000000000'"),
        (object(), "?unknown_type?"),
    ],
)
def test_format_arg(value, expected):
    assert format_arg(value) == expected