# verticaquery

Client-side building blocks for working with Vertica queries and results.
The package has no third-party dependencies.

## Modules

- **`verticaquery.lexer`**: `lex(query, on_named=None, on_positional=None)`
  walks a SQL query and finds placeholders outside quoted strings and `--`
  comments. Each `@name` parameter is replaced by `?` and its name,
  upper-cased, is passed to `on_named`. Each `?` is replaced by whatever
  `on_positional()` returns; by default it is left as `?`. The `Lexer` class
  does the same work through `Lexer(query, ...).run()`.
- **`verticaquery.stmt`**: `Statement(command)` rewrites named parameters to
  `?` and records them. An empty command raises `ValueError`.
  - `num_input()` returns the number of unique named parameters. If there are
    no named parameters, it returns the number of `?` placeholders.
  - `convert_to_named(args)` wraps plain values as `NamedValue`s numbered
    from zero.
  - `inject_named_args(args)` orders named arguments to match the placeholders.
    A repeated name yields the same value again. If the statement uses named
    parameters and an argument has no name, it raises `ValueError`.
  - `interpolate(args)` replaces each `?` with the next argument rendered as an
    SQL literal. It raises `ValueError` if there are too few arguments.

  `format_arg(value)` renders `None`, booleans, ints, floats, strings, dates
  and datetimes as literals. Any other type becomes `?unknown_type?`.
  `clean_quotes(value)` doubles every run of single quotes that has an odd
  length.
- **`verticaquery.rows`**: `Rows` holds the rows of one result set.
  - It converts encoded data rows into Python values:
    - booleans, ints and floats;
    - strings, with intervals kept as text;
    - `date`, `datetime` and `time` values, using the session offset `tz_offset`
      for types that carry no zone;
    - binary columns as hex strings.
  - `next_row()` returns one row, or `None` at the end. Iterating a `Rows` yields
    rows until none remain.
  - Column metadata comes from `columns()`, `column_type_database_type_name`,
    `column_type_nullable`, `column_type_precision_scale`,
    `column_type_length` and `column_type_scan_type`.
  - `ColumnDef` describes one column. `ColumnType` lists the type OIDs.
  - `encode_data_row` and `decode_data_row` build and split data-row bodies.
  - `parse_date_column` and `parse_timestamp_tz_column` parse the ISO text forms.
  - `new_rows(column_defs, tz_offset, in_memory_row_limit)` uses a
    `FileCache` when a limit is given, and a `MemoryCache` otherwise.
    `empty_rows()` returns a result with no columns.
- **`verticaquery.rowcache`**: both caches provide `add_row`, `finalize`,
  `get_row`, `peek` and `close`. They can be iterated and used as context
  managers.
  - `MemoryCache()` keeps every row in memory.
  - `FileCache(row_limit)` keeps up to `row_limit` rows in memory and writes the
    rest to a temporary file. That file is read back in batches once the rows in
    memory are used up. `close()` deletes the file.
- **`verticaquery.tx`**: `begin_statement(isolation, read_only)` builds the
  `START TRANSACTION ...` text for an `IsolationLevel`. Levels that are not
  supported raise `ValueError`. `begin(execute, isolation, read_only)` runs
  that statement through your `execute` callable and returns a `Transaction`.
  A `Transaction` has `commit()` and `rollback()`. Used as a context manager,
  it commits on a clean exit and rolls back if an exception escapes.
- **`verticaquery.result`**: `Result` is a frozen dataclass with
  `last_insert_id` and `rows_affected`.

## Examples

Lexing a query and collecting its named parameters:

```python
from verticaquery.lexer import lex

names = []
sql = lex("select * from t where a = @first and b = '@not_a_param'",
          on_named=names.append)
# sql   == "select * from t where a = ? and b = '@not_a_param'"
# names == ["FIRST"]
```

Interpolating arguments into a statement:

```python
from verticaquery.stmt import Statement, NamedValue

stmt = Statement("select * from t where value = ? and other = ?")
stmt.interpolate([NamedValue(value="it's"), NamedValue(value=15.5)])
# "select * from t where value = 'it''s' and other = 15.5"
```

Decoding rows:

```python
from verticaquery.rows import ColumnDef, ColumnType, new_rows, encode_data_row

rows = new_rows([ColumnDef("a", ColumnType.INT64, "integer")], "", 0)
rows.add_row(encode_data_row([b"123"]))
rows.finalize()
for row in rows:
    print(row)  # [123]
```

Running a transaction through your own executor:

```python
from verticaquery.tx import IsolationLevel, begin

executed = []
with begin(executed.append, IsolationLevel.SERIALIZABLE):
    pass
# executed == ["START TRANSACTION ISOLATION LEVEL SERIALIZABLE READ WRITE", "COMMIT"]
```

## What this package does not do

- It does not open connections to a server. It does not speak the wire protocol
  and does not send queries.
- Transactions run their statements through an `execute` callable that you
  supply.
- Dates and timestamps before Christ (`... BC`) cannot be represented and raise
  `ValueError`, as do infinity timestamps.

## Running the tests

```
pip install .[test]
pytest
```