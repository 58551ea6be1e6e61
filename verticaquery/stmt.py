"""Statements: placeholder bookkeeping, named arguments and client-side interpolation."""

from __future__ import annotations

import dataclasses
import math
import os
import random
import re
import time
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Sequence

from verticaquery.lexer import lex

_QUOTE_RUN = re.compile(r"'+")
UNKNOWN_TYPE = "?unknown_type?"


@dataclass(frozen=True)
class NamedValue:
    """An argument value, optionally named, with its position in the argument list."""

    name: str = ""
    ordinal: int = 0
    value: Any = None


def clean_quotes(value: str) -> str:
    """Double every run of single quotes that has an odd length."""
    return _QUOTE_RUN.sub(
        lambda match: match.group(0) + ("'" if len(match.group(0)) % 2 else ""),
        value,
    )


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    sign, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    while len(digits) > 1 and digits.endswith("0"):
        digits = digits[:-1]
        exponent += 1
    magnitude = len(digits) + exponent - 1
    if magnitude < -4 or magnitude >= 21:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        text = f"{mantissa}e{'+' if magnitude >= 0 else '-'}{abs(magnitude):02d}"
    elif exponent >= 0:
        text = digits + "0" * exponent
    else:
        point = len(digits) + exponent
        if point > 0:
            text = digits[:point] + "." + digits[point:]
        else:
            text = "0." + "0" * (-point) + digits
    return ("-" if sign else "") + text


def format_arg(value: Any) -> str:
    """Render a value as an SQL literal for client-side interpolation."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, str):
        return f"'{clean_quotes(value)}'"
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    else:
        return UNKNOWN_TYPE
    return (
        f"'{moment.year:02d}-{moment.month:02d}-{moment.day:02d} "
        f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}."
        f"{moment.microsecond * 1000:09d}'"
    )


def _value_of(arg: Any) -> Any:
    return arg.value if isinstance(arg, NamedValue) else arg


class Statement:
    """A query whose ``@name`` and ``?`` placeholders have been catalogued.

    Named parameters are rewritten to ``?``; their upper-cased names are kept
    in order of appearance in ``named_arg_positions``.
    """

    def __init__(self, command: str) -> None:
        if not command:
            raise ValueError("cannot create an empty statement")
        self.prepared_name = (
            f"S{os.getpid()}{int(time.time())}{random.randrange(2**31)}"
        )
        self.named_arg_positions: list[str] = []
        self.positional_count = 0

        def count_positional() -> str:
            self.positional_count += 1
            return "?"

        self.command = lex(
            command,
            on_named=self.named_arg_positions.append,
            on_positional=count_positional,
        )

    def num_input(self) -> int:
        """Return the number of unique named parameters, or else of ``?`` placeholders."""
        if self.named_arg_positions:
            return len(set(self.named_arg_positions))
        return self.positional_count

    def convert_to_named(self, args: Iterable[Any]) -> list[NamedValue]:
        """Wrap plain values as unnamed arguments numbered from zero."""
        return [NamedValue(ordinal=idx, value=arg) for idx, arg in enumerate(args)]

    def inject_named_args(self, args: Sequence[NamedValue]) -> list[NamedValue]:
        """Order named arguments to match the placeholders in the statement.

        Raises ValueError if named placeholders are used and an argument has no name.
        """
        if not self.named_arg_positions:
            return list(args)
        symbols: dict[str, NamedValue] = {}
        for arg in args:
            if arg.name:
                symbols[arg.name.upper()] = arg
                continue
            nested = arg.value
            if not isinstance(nested, NamedValue) or not nested.name:
                raise ValueError(
                    "all parameters must have names when using named parameters"
                )
            symbols[nested.name.upper()] = nested
        return [
            dataclasses.replace(symbols.get(name, NamedValue()), ordinal=pos)
            for pos, name in enumerate(self.named_arg_positions)
        ]

    def interpolate(self, args: Sequence[Any]) -> str:
        """Return the command with each ``?`` replaced by the next argument's literal."""
        if self.num_input() == 0:
            return self.command
        remaining = iter(args)

        def substitute() -> str:
            try:
                arg = next(remaining)
            except StopIteration:
                raise ValueError("not enough arguments for the statement") from None
            return format_arg(_value_of(arg))

        return lex(self.command, on_positional=substitute)


__all__ = ["NamedValue", "Statement", "clean_quotes", "format_arg"]