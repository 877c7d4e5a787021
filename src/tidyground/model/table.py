"""The Table object itself."""

import logging
from typing import TYPE_CHECKING, Any, Iterable, Self

import pyarrow as pa

from ..errors import ColumnNotFound, TypeMismatch
from .column import Column, Kind

if TYPE_CHECKING:
    from .grouping import Grouping

logger = logging.getLogger(__name__)


class Table:
    """Data structure that handles data in rows and columns.

    A table is an ordered collection of named columns that all
    have the same length. Column names are unique within a table.

    Tables are immutable: all the verbs (``filter``, ``arrange``,
    ``mutate``, ...) return a new table and never change the
    table they are applied to. The data itself is kept
    in a :class:`pyarrow.Table`, thus tables derived from other
    tables can share the memory of columns they didn't change.

    >>> t = Table.from_pydict({"month": [1, 1, 11, 12], "day": [1, 2, 1, 1]})
    >>> t.column_names
    ['month', 'day']
    >>> t.num_rows
    4
    >>> print(t)
    month | day
    ----- | ---
    1     | 1
    1     | 2
    11    | 1
    12    | 1
    """

    __slots__ = ("_data",)

    def __init__(self, columns: Iterable[Column] = ()) -> None:
        """
        :param columns: The columns of the table, in order.
        """
        columns = list(columns)
        lengths = {len(c) for c in columns}
        if len(lengths) > 1:
            raise ValueError(
                f"All columns must have the same length, got: "
                f"{ {c.name: len(c) for c in columns} }"
            )
        self._data = self._validate(
            pa.Table.from_arrays(
                [c.values for c in columns], names=[c.name for c in columns]
            )
        )

    @classmethod
    def from_arrow(cls, data: pa.Table | pa.RecordBatch) -> Self:
        """Wrap a :class:`pyarrow.Table` without copying its data."""
        if isinstance(data, pa.RecordBatch):
            data = pa.Table.from_batches([data])
        if not isinstance(data, pa.Table):
            raise ValueError("Invalid input, expected a PyArrow Table or RecordBatch")
        table = cls.__new__(cls)
        table._data = cls._validate(data)
        return table

    @classmethod
    def from_pydict(
        cls, data: dict[str, Iterable[Any]], kinds: dict[str, Kind] | None = None
    ) -> Self:
        """Build a table from a dictionary of ``{name: values}``.

        :param data: The values of each column, ``None`` marks missing values.
        :param kinds: Force the kind of some columns instead of inferring it.
        """
        kinds = kinds or {}
        return cls(Column(name, values, kinds.get(name)) for name, values in data.items())

    @staticmethod
    def _validate(data: pa.Table) -> pa.Table:
        names = data.column_names
        if len(set(names)) != len(names):
            duplicates = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"Column names must be unique, duplicated: {duplicates}")
        for field in data.schema:
            try:
                Kind.of(field.type)
            except TypeMismatch as e:
                raise TypeMismatch(f"Column '{field.name}': {e}") from e
        return data

    @property
    def num_rows(self) -> int:
        return self._data.num_rows

    row_count = num_rows

    @property
    def num_columns(self) -> int:
        return self._data.num_columns

    @property
    def column_names(self) -> list[str]:
        return self._data.column_names

    @property
    def columns(self) -> list[Column]:
        return [Column(name, data) for name, data in zip(self.column_names, self._data.columns)]

    @property
    def kinds(self) -> dict[str, Kind]:
        """The kind of each column, by name."""
        return {field.name: Kind.of(field.type) for field in self._data.schema}

    def column(self, name: str) -> Column:
        """Get a column by name.

        Raises :class:`ColumnNotFound` when the table has no such column.
        """
        if name not in self._data.column_names:
            raise ColumnNotFound(name, self.column_names)
        return Column(name, self._data.column(name))

    def has_column(self, name: str) -> bool:
        return name in self._data.column_names

    def take(self, indices: pa.Array | list[int]) -> Self:
        """A new table with only the rows at the given indices, in that order."""
        return self.__class__.from_arrow(self._data.take(indices))

    def with_column(self, name: str, values: pa.Array | pa.ChunkedArray) -> Self:
        """A new table where ``name`` is replaced by or extended with ``values``.

        Replaced columns keep their position, new columns are appended.
        """
        if name in self._data.column_names:
            index = self._data.column_names.index(name)
            data = self._data.set_column(index, name, values)
        else:
            data = self._data.append_column(name, values)
        return self.__class__.from_arrow(data)

    def without_columns(self, names: Iterable[str]) -> Self:
        names = list(names)
        for name in names:
            if name not in self._data.column_names:
                raise ColumnNotFound(name, self.column_names)
        return self.__class__.from_arrow(self._data.drop_columns(names))

    def to_arrow(self) -> pa.Table:
        """The data of the table as a :class:`pyarrow.Table`."""
        return self._data

    def to_pydict(self) -> dict[str, list[Any]]:
        return self._data.to_pydict()

    def to_pylist(self) -> list[dict[str, Any]]:
        """The rows of the table, each as a ``{column: value}`` dictionary."""
        return self._data.to_pylist()

    def equals(self, other: "Table") -> bool:
        """Check if two tables have the same columns and values."""
        return isinstance(other, Table) and self._data.equals(other._data)

    def __len__(self) -> int:
        return self.num_rows

    def __contains__(self, name: str) -> bool:
        return self.has_column(name)

    def __getitem__(self, name: str) -> Column:
        return self.column(name)

    def __str__(self) -> str:
        from ..utils import tabulate

        return tabulate.tabulate(self)

    def __repr__(self) -> str:
        return f"Table(columns={self.column_names}, rows={self.num_rows})"

    # Verbs, the implementation is in the compute package.

    def filter(self, *predicates: Any) -> Self:
        """Keep only the rows where all predicates are true.

        See :func:`tidyground.compute.filtering.filter`.
        """
        from ..compute import filtering

        return filtering.filter(self, *predicates)

    def arrange(self, *keys: Any) -> Self:
        """Sort the rows, see :func:`tidyground.compute.sorting.arrange`."""
        from ..compute import sorting

        return sorting.arrange(self, *keys)

    def select(self, *rules: Any) -> Self:
        """Pick columns, see :func:`tidyground.compute.selection.select`."""
        from ..compute import selection

        return selection.select(self, *rules)

    def rename(self, mapping: dict[str, str] | None = None, **renames: str) -> Self:
        """Rename columns, see :func:`tidyground.compute.selection.rename`."""
        from ..compute import selection

        return selection.rename(self, mapping, **renames)

    def mutate(self, expressions: dict[str, Any] | None = None, **named: Any) -> Self:
        """Add or replace columns, see :func:`tidyground.compute.mutation.mutate`."""
        from ..compute import mutation

        return mutation.mutate(self, expressions, **named)

    def transmute(self, expressions: dict[str, Any] | None = None, **named: Any) -> Self:
        """Compute only new columns, see :func:`tidyground.compute.mutation.transmute`."""
        from ..compute import mutation

        return mutation.transmute(self, expressions, **named)

    def group_by(self, *keys: str) -> "Grouping":
        """Partition the rows, see :func:`tidyground.model.grouping.group_by`."""
        from .grouping import group_by

        return group_by(self, *keys)

    def summarize(self, aggregations: dict[str, Any] | None = None, **named: Any) -> Self:
        """Reduce the table to one row, see :func:`tidyground.compute.aggregate.summarize`."""
        from ..compute import aggregate

        return aggregate.summarize(self, aggregations, **named)

    def count(self, *columns: str, **options: Any) -> Self:
        """Count rows by value, see :func:`tidyground.compute.aggregate.count`."""
        from ..compute import aggregate

        return aggregate.count(self, *columns, **options)

    def head(self, n: int = 5) -> Self:
        from ..compute import pagination

        return pagination.head(self, n)

    def pivot_longer(self, columns: Any, **options: Any) -> Self:
        """Stack columns into rows, see :func:`tidyground.compute.reshape.pivot_longer`."""
        from ..compute import reshape

        return reshape.pivot_longer(self, columns, **options)

    def pivot_wider(self, names_from: str, values_from: str, **options: Any) -> Self:
        """Spread rows into columns, see :func:`tidyground.compute.reshape.pivot_wider`."""
        from ..compute import reshape

        return reshape.pivot_wider(self, names_from, values_from, **options)
