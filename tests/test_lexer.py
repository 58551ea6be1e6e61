import pytest

from verticaquery.lexer import Lexer, lex


def test_skip_until():
    query = "select * from a where test = 'b'"
    lexer = Lexer(query)
    lexer.skip_until("'")
    assert lexer.current() == "b"
    lexer.skip_until("'")
    assert lexer.position == len(query)


@pytest.mark.parametrize(
    "query, expected_named, expected_output",
    [
        ("", [], ""),
        (
            "select * from whatever where a = 'test'",
            [],
            "select * from whatever where a = 'test'",
        ),
        (
            "select * from whatever where a = @first and b = @second and c = '@fooledYou'",
            ["FIRST", "SECOND"],
            "select * from whatever where a = ? and b = ? and c = '@fooledYou'",
        ),
        (
            "select * from whatever where a in (@first, @second)",
            ["FIRST", "SECOND"],
            "select * from whatever where a in (?, ?)",
        ),
        (
            "select * from whatever where a in (@first)",
            ["FIRST"],
            "select * from whatever where a in (?)",
        ),
        (
            "select * from whatever where a = @first and b = @fIrSt",
            ["FIRST", "FIRST"],
            "select * from whatever where a = ? and b = ?",
        ),
        (
            "select * from whatever where a = @first and b = 'isn''t",
            ["FIRST"],
            "select * from whatever where a = ? and b = 'isn''t",
        ),
        (
            "select * from whatever where a = @first and b = 'isn'''t",
            ["FIRST"],
            "select * from whatever where a = ? and b = 'isn'''t",
        ),
        (
            "insert into table values('fo''[email]', 2020)",
            [],
            "insert into table values('fo''[email]', 2020)",
        ),
        (
            "select --some select stuff\n\t\t\t* from whatever where a = @param",
            ["PARAM"],
            "select --some select stuff\n\t\t\t* from whatever where a = ?",
        ),
        (
            "select\n\t\t\t* from table\n\t\t\twhere\n\t\t\ta = @param1\n\t\t\tand b = @param2",
            ["PARAM1", "PARAM2"],
            "select\n\t\t\t* from table\n\t\t\twhere\n\t\t\ta = ?\n\t\t\tand b = ?",
        ),
        (
            "select\n\t\t\t* from table\n\t\t\twhere\n\t\t\ta = @param1\n",
            ["PARAM1"],
            "select\n\t\t\t* from table\n\t\t\twhere\n\t\t\ta = ?\n",
        ),
    ],
    ids=[
        "empty string",
        "simple query, no params",
        "with some named parameters",
        "named params with in clause",
        "single named param with in clause",
        "with mixed case named parameters",
        "with a pre-escaped string",
        "do not choke on malformed query string",
        "with pre-escaped email string",
        "with a comment",
        "named params on line endings",
        "named params with ending newline",
    ],
)
def test_lex_named(query, expected_named, expected_output):
    names = []
    result = lex(query, on_named=names.append)
    assert result == expected_output
    assert names == expected_named


def _swap_pos():
    return "'replaced'"


@pytest.mark.parametrize(
    "query, expected",
    [
        (
            "select * from table where a = ? and b = 2",
            "select * from table where a = 'replaced' and b = 2",
        ),
        (
            "select * from table where a = ?",
            "select * from table where a = 'replaced'",
        ),
        (
            "select * from table where a = ? and b = '?fooledYou'",
            "select * from table where a = 'replaced' and b = '?fooledYou'",
        ),
        (
            "select\n\t\t\t* from -- maybe broken?\n\t\t\twhere a = ?",
            "select\n\t\t\t* from -- maybe broken?\n\t\t\twhere a = 'replaced'",
        ),
    ],
    ids=["single parameter", "end on parameter", "? hidden in a string", "? hidden in a comment"],
)
def test_lex_positional(query, expected):
    assert lex(query, on_positional=_swap_pos) == expected


def test_default_callbacks_leave_positional_and_rewrite_named():
    query = "select * from t where a = ? and b = @b"
    assert lex(query) == "select * from t where a = ? and b = ?"


def test_positional_callback_called_once_per_placeholder():
    calls = []

    def substitute():
        calls.append(len(calls))
        return str(len(calls))

    result = lex("values (?, ?, '?', ?)", on_positional=substitute)
    assert result == "values (1, 2, '?', 3)"
    assert len(calls) == 3


def test_placeholder_directly_after_string():
    assert lex("'a'?", on_positional=lambda: "X") == "'a'X"


def test_placeholder_at_start():
    names = []
    assert lex("@id", on_named=names.append) == "?"
    assert names == ["ID"]


def test_run_returns_lexed_text():
    lexer = Lexer("select ?", on_positional=lambda: "1")
    assert lexer.run() == "select 1"
    assert lexer.position == len("select ?")