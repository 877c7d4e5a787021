"""Load tables from delimited text.

Delimited text (CSV, TSV, ...) is the most common way to exchange
tabular data. Each line is a row, and the values of the row
are separated by a delimiter character::

    A,B,C
    1.1,1.3,-2.0
    5,6.3,-1.8

Values can be enclosed in quotes, in which case they can contain
the delimiter and even line breaks, a quote inside a quoted value
is written twice.

Splitting the rows into values is performed by :mod:`pyarrow.csv`,
but all values are loaded as text and the kind of each column
is then inferred trying, in order, integer, real, boolean and
datetime. The first kind that can parse all the values of the
column wins, if none does the column is text.
Like in :mod:`pyarrow`, reals accept the ``nan`` and ``inf`` spellings,
so a column holding only those values is real too.

>>> import io
>>> t = read_delimited(io.StringIO("A,B,C\\n1.1,1.3,-2.0\\n5,6.3,-1.8\\n"))
>>> t.kinds
{'A': <Kind.REAL: 'real'>, 'B': <Kind.REAL: 'real'>, 'C': <Kind.REAL: 'real'>}
>>> t.to_pydict()
{'A': [1.1, 5.0], 'B': [1.3, 6.3], 'C': [-2.0, -1.8]}
"""

import dataclasses
import io
import logging
import os
from typing import IO, Iterable, Iterator, Mapping

import pyarrow as pa
import pyarrow.compute as pc
import pyarrow.csv

from ..errors import ColumnNotFound, LocaleConflict, MalformedRow, ParseError
from ..model import Kind, Table

logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "t")
FALSE_VALUES = ("false", "f")

INFERENCE_ORDER = (Kind.INTEGER, Kind.REAL, Kind.BOOLEAN, Kind.DATETIME)


@dataclasses.dataclass(frozen=True)
class ReadOptions:
    """How delimited text has to be read.

    The options are validated when created, characters that
    play more than one role (like a comma used both as
    the delimiter and as the decimal mark) raise
    :class:`tidyground.errors.LocaleConflict`.
    """

    #: The character separating the values of a row.
    delimiter: str = ","
    #: If the first line contains the names of the columns.
    has_header: bool = True
    #: Lines starting with this prefix are ignored.
    comment_prefix: str | None = None
    #: How many lines to ignore at the beginning of the text.
    skip_rows: int = 0
    #: Force the kind of some columns, ``{column: Kind}``.
    column_overrides: Mapping[str, Kind] = dataclasses.field(default_factory=dict)
    #: The character enclosing values that contain delimiters or line breaks.
    quote_char: str = '"'
    #: The character separating the integer and fractional part of reals.
    decimal_mark: str = "."
    #: Values that have to be considered missing.
    na_values: tuple[str, ...] = ("", "NA")
    #: The encoding of the text, when reading from files or binary streams.
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        for option in ("delimiter", "quote_char", "decimal_mark"):
            if len(getattr(self, option)) != 1:
                raise ValueError(f"{option} must be a single character")
        if self.skip_rows < 0:
            raise ValueError("skip_rows must not be negative")
        if self.comment_prefix == "":
            raise ValueError("comment_prefix can't be empty")

        if self.decimal_mark == self.delimiter:
            raise LocaleConflict(
                f"The decimal mark {self.decimal_mark!r} can't also be the delimiter"
            )
        if self.quote_char in (self.delimiter, self.decimal_mark):
            raise LocaleConflict(
                f"The quote character {self.quote_char!r} can't also be "
                f"the delimiter or the decimal mark"
            )

        # Accept kinds by their name too, like {"year": "integer"}
        overrides = {name: Kind(kind) for name, kind in self.column_overrides.items()}
        if Kind.MISSING in overrides.values():
            raise ValueError("Columns can't be forced to only contain missing values")
        object.__setattr__(self, "column_overrides", overrides)
        object.__setattr__(self, "na_values", tuple(self.na_values))


def read_delimited(
    source: str | os.PathLike | IO,
    delimiter: str = ",",
    has_header: bool = True,
    comment_prefix: str | None = None,
    skip_rows: int = 0,
    column_overrides: Mapping[str, Kind | str] | None = None,
    options: ReadOptions | None = None,
    **other_options,
) -> Table:
    """Load a table from delimited text.

    The source is consumed in a single sequential pass:
    first ``skip_rows`` lines are skipped, then comment lines
    are discarded, and the next line is the header with the
    names of the columns (unless ``has_header=False``, in which case
    the columns are named ``col1``, ``col2``, ...).

    Empty values, and those listed in ``na_values``, are missing.

    >>> import io
    >>> text = "# Measurements\\nid;value;valid\\n1;1,5;true\\n2;;F\\n"
    >>> t = read_delimited(io.StringIO(text), delimiter=";", comment_prefix="#", decimal_mark=",")
    >>> t.to_pydict()
    {'id': [1, 2], 'value': [1.5, None], 'valid': [True, False]}

    :param source: The path of a local file, or a text or binary stream.
    :param delimiter: The character separating the values of a row.
    :param has_header: If the first line contains the names of the columns.
    :param comment_prefix: Lines starting with this prefix are ignored.
    :param skip_rows: How many lines to ignore at the beginning.
    :param column_overrides: Force the kind of some columns instead of inferring it.
    :param options: A :class:`ReadOptions` to use instead of the other arguments.
    :param other_options: Any other field of :class:`ReadOptions`,
                          like ``quote_char`` or ``decimal_mark``.
    """
    if options is None:
        options = ReadOptions(
            delimiter=delimiter,
            has_header=has_header,
            comment_prefix=comment_prefix,
            skip_rows=skip_rows,
            column_overrides=column_overrides or {},
            **other_options,
        )

    lines = _read_lines(source, options.encoding)[options.skip_rows :]
    if options.comment_prefix is not None:
        lines = list(_drop_comments(lines, options.comment_prefix, options.quote_char))
    while lines and not lines[0].strip():
        lines.pop(0)
    text = "".join(lines)
    if not text.strip():
        return Table()

    raw = _split_values(text.encode("utf-8"), options)
    if options.has_header:
        header = raw.slice(0, 1).to_pylist()[0]
        names = [header[field] or f"col{i + 1}" for i, field in enumerate(raw.column_names)]
        raw = raw.slice(1)
    else:
        names = [f"col{i + 1}" for i in range(raw.num_columns)]

    duplicated = sorted({name for name in names if names.count(name) > 1})
    if duplicated:
        raise ValueError(f"Column names must be unique, duplicated: {duplicated}")

    for name in options.column_overrides:
        if name not in names:
            raise ColumnNotFound(name, names)

    columns = {}
    for name, values in zip(names, raw.columns):
        values = _drop_na_values(values, options.na_values)
        kind = options.column_overrides.get(name)
        if kind is not None:
            columns[name] = _force_kind(name, values, kind, options.decimal_mark)
        else:
            columns[name] = _infer_kind(values, options.decimal_mark)

    table = Table.from_arrow(pa.table(columns))
    logger.debug(
        "Read %d rows with kinds %s",
        table.num_rows,
        {name: kind.value for name, kind in table.kinds.items()},
    )
    return table


def _read_lines(source: str | os.PathLike | IO, encoding: str) -> list[str]:
    """Read all the lines, keeping their line endings."""
    if hasattr(source, "read"):
        text = source.read()
        if isinstance(text, bytes):
            text = text.decode(encoding)
    else:
        with open(source, encoding=encoding, newline="") as f:
            text = f.read()
    # Only \n, \r and \r\n are line breaks, unlike str.splitlines
    return list(io.StringIO(text, newline=""))


def _drop_comments(lines: Iterable[str], prefix: str, quote_char: str) -> Iterator[str]:
    """Discard the comment lines, unless they are part of a quoted value.

    Escaped quotes are written twice, so an odd number of
    quote characters in a line means a quoted value
    was opened (or closed) and continues on the next line.
    """
    in_quoted_value = False
    for line in lines:
        if not in_quoted_value and line.startswith(prefix):
            continue
        yield line
        if line.count(quote_char) % 2:
            in_quoted_value = not in_quoted_value


def _parse_options(options: ReadOptions, invalid_row_handler) -> pyarrow.csv.ParseOptions:
    return pyarrow.csv.ParseOptions(
        delimiter=options.delimiter,
        quote_char=options.quote_char,
        double_quote=True,
        newlines_in_values=True,
        invalid_row_handler=invalid_row_handler,
    )


def _count_columns(data: bytes, options: ReadOptions) -> int:
    """How many fields the first record has, which sets the width of the table."""
    reader = pyarrow.csv.open_csv(
        io.BytesIO(data),
        read_options=pyarrow.csv.ReadOptions(
            autogenerate_column_names=True, use_threads=False
        ),
        parse_options=_parse_options(options, lambda row: "skip"),
    )
    return len(reader.schema)


def _split_values(data: bytes, options: ReadOptions) -> pa.Table:
    """Split the records in values, all read as text.

    The columns are named ``f0``, ``f1``, ... and when the text
    has a header, it is the first row of the result.
    """
    try:
        names = [f"f{i}" for i in range(_count_columns(data, options))]
    except pa.ArrowInvalid as e:
        raise MalformedRow(1, 0, None, str(e)) from e

    invalid_rows = []

    def collect_invalid_row(row) -> str:
        invalid_rows.append(row)
        return "skip"

    try:
        raw = pyarrow.csv.read_csv(
            io.BytesIO(data),
            read_options=pyarrow.csv.ReadOptions(column_names=names, use_threads=False),
            parse_options=_parse_options(options, collect_invalid_row),
            convert_options=pyarrow.csv.ConvertOptions(
                column_types={name: pa.string() for name in names},
                null_values=[],
                strings_can_be_null=False,
                quoted_strings_can_be_null=False,
            ),
        )
    except pa.ArrowInvalid as e:
        raise MalformedRow(None, len(names), None, str(e)) from e

    if invalid_rows:
        row = invalid_rows[0]
        raise MalformedRow(
            row.number if row.number is not None and row.number >= 0 else None,
            row.expected_columns,
            row.actual_columns,
            row.text,
        )
    return raw


def _drop_na_values(values: pa.ChunkedArray, na_values: tuple[str, ...]) -> pa.ChunkedArray:
    """Replace the values marking missing data with actual missing values."""
    if not na_values:
        return values
    is_na = pc.is_in(values, value_set=pa.array(list(na_values), type=pa.string()))
    return pc.if_else(is_na, pa.scalar(None, type=pa.string()), values)


def _convert(values: pa.ChunkedArray, kind: Kind, decimal_mark: str) -> pa.ChunkedArray:
    """Parse text values into the given kind.

    Raises :class:`pyarrow.ArrowInvalid` when any value can't be parsed.
    """
    if kind is Kind.TEXT:
        return values
    elif kind is Kind.REAL and decimal_mark != ".":
        values = pc.replace_substring(values, pattern=decimal_mark, replacement=".")
    elif kind is Kind.BOOLEAN:
        lowered = pc.utf8_lower(values)
        known = pc.is_in(lowered, value_set=pa.array(TRUE_VALUES + FALSE_VALUES))
        if not pc.all(pc.or_kleene(pc.is_null(lowered), known)).as_py():
            raise pa.ArrowInvalid("Values are not booleans")
        is_true = pc.is_in(lowered, value_set=pa.array(TRUE_VALUES))
        return pc.if_else(pc.is_valid(lowered), is_true, pa.scalar(None, type=pa.bool_()))
    return values.cast(kind.arrow_type)


def _infer_kind(values: pa.ChunkedArray, decimal_mark: str) -> pa.ChunkedArray:
    for kind in INFERENCE_ORDER:
        try:
            return _convert(values, kind, decimal_mark)
        except (pa.ArrowInvalid, pa.ArrowNotImplementedError):
            continue
    return values


def _force_kind(
    name: str, values: pa.ChunkedArray, kind: Kind, decimal_mark: str
) -> pa.ChunkedArray:
    try:
        return _convert(values, kind, decimal_mark)
    except (pa.ArrowInvalid, pa.ArrowNotImplementedError):
        pass

    # Look for the value that can't be parsed, to report where it is.
    for row, value in enumerate(values.to_pylist(), start=1):
        if value is None:
            continue
        try:
            _convert(pa.chunked_array([pa.array([value])]), kind, decimal_mark)
        except (pa.ArrowInvalid, pa.ArrowNotImplementedError):
            raise ParseError(name, kind.value, row=row, value=value) from None
    raise ParseError(name, kind.value)
