"""Errors raised by the tidyground engine.

All the verbs fail fast: when one of these errors is raised
no partial table is returned. Every error carries the details
(column names, row numbers) needed to locate the problem.
"""


class TableError(Exception):
    """Base class for all errors raised by tidyground."""


class ColumnNotFound(TableError, KeyError):
    """A column was referenced by name but the table has no such column.

    It is also a :class:`KeyError`, so it behaves like any
    other failed lookup by name.
    """

    def __init__(self, column: str, available: list[str] | None = None) -> None:
        self.column = column
        self.available = list(available or [])
        self.message = f"Column '{column}' not found"
        if self.available:
            self.message += f", available columns: {self.available}"
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class TypeMismatch(TableError):
    """An operation was applied to values of incompatible kinds."""


class AmbiguousPivot(TableError):
    """A pivot cell would receive more than one value."""

    def __init__(self, key: tuple, name: str) -> None:
        self.key = key
        self.name = name
        super().__init__(
            f"Values for column '{name}' are not uniquely identified, "
            f"multiple values found for identifying key {key!r}"
        )


class MalformedRow(TableError):
    """A delimited row has a different number of fields than the header."""

    def __init__(
        self, row: int | None, expected: int, actual: int | None, text: str | None = None
    ) -> None:
        self.row = row
        self.expected = expected
        self.actual = actual
        self.text = text
        where = f"Row {row}" if row is not None else "A row"
        found = f"{actual} fields" if actual is not None else "a different number of fields"
        super().__init__(
            f"{where} has {found}, expected {expected}" + (f": {text!r}" if text else "")
        )


class ParseError(TableError):
    """A field could not be parsed into the kind forced for its column."""

    def __init__(
        self, column: str, kind: str, row: int | None = None, value: str | None = None
    ) -> None:
        self.column = column
        self.kind = kind
        self.row = row
        self.value = value
        where = f" at row {row}" if row is not None else ""
        super().__init__(
            f"Unable to parse {value!r} as {kind} in column '{column}'{where}"
        )


class LocaleConflict(TableError):
    """The reader configuration uses the same character for two roles."""
