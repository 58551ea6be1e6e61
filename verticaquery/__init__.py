"""SQL placeholder lexing, statement interpolation, result row decoding, row caching and transaction statements for Vertica clients."""

__version__ = "0.1.0"

__all__ = ["lexer", "rowcache", "result", "rows", "tx", "stmt"]