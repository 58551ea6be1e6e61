"""A loose SQL lexer that finds parameter placeholders outside strings and comments."""

from __future__ import annotations

from typing import Callable, Optional

EOF = ""

OnNamedParam = Callable[[str], None]
SubstitutePosParam = Callable[[], str]

_IDENT_TERMINATORS = ",)"


def _keep_positional() -> str:
    """Default positional substitution: leave the placeholder in place."""
    return "?"


class Lexer:
    """Walks a SQL query, rewriting ``@name`` and ``?`` placeholders.

    Named parameters are replaced by ``?`` and reported, upper-cased, to
    ``on_named`` in the order they appear. Each ``?`` is replaced by whatever
    ``on_positional`` returns. Text inside quoted strings and ``--`` comments
    is left untouched.
    """

    def __init__(
        self,
        query: str,
        on_named: Optional[OnNamedParam] = None,
        on_positional: Optional[SubstitutePosParam] = None,
    ) -> None:
        self._input = query
        self._pos = 0
        self._start = 0
        self._width = 0
        self._on_named = on_named
        self._on_positional = on_positional or _keep_positional
        self._output: list[str] = []

    @property
    def position(self) -> int:
        """Index of the next character to be read."""
        return self._pos

    def run(self) -> str:
        """Lex the whole query and return the rewritten text."""
        state: Optional[Callable[[], object]] = self._lex_query
        while state is not None:
            state = state()  # type: ignore[assignment]
        return "".join(self._output)

    def skip_until(self, value: str) -> None:
        """Advance past the next occurrence of ``value`` or to the end of input."""
        while True:
            char = self._next()
            if char == value or char == EOF:
                return

    def current(self) -> str:
        """Return the character at the current position without consuming it."""
        if self._done():
            return EOF
        return self._input[self._pos]

    def _done(self) -> bool:
        return self._pos >= len(self._input)

    def _next(self) -> str:
        if self._done():
            self._width = 0
            return EOF
        char = self._input[self._pos]
        self._width = 1
        self._pos += 1
        return char

    def _backup(self) -> None:
        self._pos -= self._width

    def _peek(self) -> str:
        char = self._next()
        self._backup()
        return char

    def _is_end_ident(self, char: str) -> bool:
        should_end = char.isspace() or char in _IDENT_TERMINATORS
        if should_end:
            self._backup()
        return should_end

    def _consume_ident(self) -> None:
        while not self._done() and not self._is_end_ident(self._next()):
            pass

    def _write_chunk(self) -> None:
        self._output.append(self._input[self._start:self._pos])
        self._start = self._pos

    def _lex_query(self):
        char = self.current()
        # The current character has not been consumed yet.
        self._width = 0
        while char != EOF:
            if char == "-" and self._peek() == "-":
                return self._lex_comment
            if char == "'" and self._peek() != "'":
                return self._lex_string
            if char == "@":
                return self._lex_named_param
            if char == "?":
                return self._lex_positional
            char = self._next()
        self._write_chunk()
        return None

    def _lex_comment(self):
        self.skip_until("\n")
        self._write_chunk()
        return self._lex_query

    def _lex_string(self):
        # An escaped quote such as 'isn''t' brings the lexer straight back here.
        self.skip_until("'")
        self._write_chunk()
        return self._lex_query

    def _lex_named_param(self):
        self._backup()
        self._write_chunk()
        self._next()
        self._start = self._pos
        self._consume_ident()
        if self._on_named is not None:
            self._on_named(self._input[self._start:self._pos].upper())
        self._start = self._pos
        self._output.append("?")
        return self._lex_query

    def _lex_positional(self):
        self._backup()
        self._write_chunk()
        self._output.append(self._on_positional())
        self._next()
        self._start = self._pos
        return self._lex_query


def lex(
    query: str,
    on_named: Optional[OnNamedParam] = None,
    on_positional: Optional[SubstitutePosParam] = None,
) -> str:
    """Lex ``query``, calling the callbacks for each placeholder found."""
    return Lexer(query, on_named=on_named, on_positional=on_positional).run()