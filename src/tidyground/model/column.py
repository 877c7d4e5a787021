"""Columns and the kinds of values they can hold.

A column is an ordered sequence of values that all share the
same kind. Columns are stored as :class:`pyarrow.ChunkedArray`
which are immutable, so a column can be safely shared by multiple
tables: nobody will ever be able to change its content.

Missing values are represented by the Arrow ``null`` and surface
as ``None`` when the values are converted back to Python objects:

>>> c = Column("month", [1, None, 11])
>>> c.kind
<Kind.INTEGER: 'integer'>
>>> c.to_pylist()
[1, None, 11]
>>> c.null_count
1
"""

import enum
from typing import Any, Iterable, Iterator, Self

import pyarrow as pa

from ..errors import TypeMismatch


class Kind(enum.Enum):
    """The kind of the values stored in a column.

    Each kind maps to one canonical Arrow type, that is the type
    used when a column is created from Python values with an
    explicit kind.
    """

    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    MISSING = "missing"

    @property
    def arrow_type(self) -> pa.DataType:
        """The canonical arrow type for the kind."""
        return _CANONICAL_TYPES[self]

    @classmethod
    def of(cls, arrow_type: pa.DataType) -> "Kind":
        """Classify an arrow type into a Kind.

        >>> Kind.of(pa.float32())
        <Kind.REAL: 'real'>
        """
        if pa.types.is_boolean(arrow_type):
            return cls.BOOLEAN
        elif pa.types.is_integer(arrow_type):
            return cls.INTEGER
        elif pa.types.is_floating(arrow_type) or pa.types.is_decimal(arrow_type):
            return cls.REAL
        elif pa.types.is_string(arrow_type) or pa.types.is_large_string(arrow_type):
            return cls.TEXT
        elif pa.types.is_timestamp(arrow_type) or pa.types.is_date(arrow_type):
            return cls.DATETIME
        elif pa.types.is_null(arrow_type):
            return cls.MISSING
        raise TypeMismatch(f"Unsupported column type: {arrow_type}")


_CANONICAL_TYPES = {
    Kind.INTEGER: pa.int64(),
    Kind.REAL: pa.float64(),
    Kind.TEXT: pa.string(),
    Kind.BOOLEAN: pa.bool_(),
    Kind.DATETIME: pa.timestamp("us"),
    Kind.MISSING: pa.null(),
}


def as_chunked_array(
    values: Iterable[Any] | pa.Array | pa.ChunkedArray, kind: Kind | None = None
) -> pa.ChunkedArray:
    """Convert values to a ChunkedArray, optionally forcing their kind.

    Values that can't be represented as a single kind
    (like mixing text and numbers) raise :class:`TypeMismatch`.
    """
    arrow_type = kind.arrow_type if kind is not None else None
    try:
        if isinstance(values, pa.ChunkedArray):
            data = values
        elif isinstance(values, pa.Array):
            data = pa.chunked_array([values])
        else:
            data = pa.chunked_array([pa.array(list(values), type=arrow_type)])
        if arrow_type is not None and data.type != arrow_type:
            data = data.cast(arrow_type)
    except (pa.ArrowInvalid, pa.ArrowTypeError, pa.ArrowNotImplementedError) as e:
        raise TypeMismatch(f"Values can't be stored in a single column: {e}") from e
    return data


class Column:
    """A named, homogeneously typed sequence of values.

    Columns are immutable, every method that would change the
    column returns a new one.
    """

    __slots__ = ("_name", "_data", "_kind")

    def __init__(
        self,
        name: str,
        values: Iterable[Any] | pa.Array | pa.ChunkedArray,
        kind: Kind | None = None,
    ) -> None:
        """
        :param name: The name of the column.
        :param values: The values of the column, Python objects or arrow data.
                       ``None`` marks a missing value.
        :param kind: Force the kind of the values, inferred when omitted.
        """
        self._name = name
        self._data = as_chunked_array(values, kind)
        self._kind = Kind.of(self._data.type)

    @property
    def name(self) -> str:
        return self._name

    @property
    def kind(self) -> Kind:
        return self._kind

    @property
    def values(self) -> pa.ChunkedArray:
        """The arrow data of the column."""
        return self._data

    @property
    def null_count(self) -> int:
        """How many values are missing."""
        return self._data.null_count

    def rename(self, name: str) -> Self:
        """Return the same values under a different name."""
        return self.__class__(name, self._data)

    def is_missing(self, index: int) -> bool:
        return not self._data[index].is_valid

    def to_pylist(self) -> list[Any]:
        return self._data.to_pylist()

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, index: int) -> Any:
        return self._data[index].as_py()

    def __iter__(self) -> Iterator[Any]:
        return iter(self.to_pylist())

    def __str__(self) -> str:
        return f"Column({self._name}, kind={self._kind.value}, length={len(self)})"

    __repr__ = __str__
