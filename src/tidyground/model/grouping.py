"""Partition the rows of a table by the values of key columns.

Grouping is the foundation of aggregations: to compute
the total number of employees per city we first need to
know which rows belong to each city.

Given the following data::

    city, shop, n_employees
    New York, Shop A, 10
    New York, Shop B, 15
    Los Angeles, Shop C, 8
    Los Angeles, Shop D, 12
    New York, Shop E, 20

Grouping by city leads to two groups::

    ("New York",)    -> rows [0, 1, 4]
    ("Los Angeles",) -> rows [2, 3]

Groups are listed in the order their key was first met
scanning the table top to bottom, and missing values are
a valid key, equal to themselves.

>>> from tidyground.model import Table
>>> t = Table.from_pydict({"city": ["NY", "NY", "LA", None, "LA", None]})
>>> g = group_by(t, "city")
>>> [(group.key, group.indices.to_pylist()) for group in g]
[(('NY',), [0, 1]), (('LA',), [2, 4]), ((None,), [3, 5])]
"""

import logging
import math
from typing import Any, Iterator, NamedTuple

import pyarrow as pa

from .table import Table

logger = logging.getLogger(__name__)


class Group(NamedTuple):
    """One group: the values of the keys and the rows that have them."""

    key: tuple[Any, ...]
    indices: pa.Array


class Grouping:
    """A table whose rows are partitioned in groups.

    The grouping references the table it was built from, which
    is never changed, and records for each group the indices
    of its rows. Each row belongs to exactly one group.

    Use :meth:`ungroup` to get back the plain table.
    """

    def __init__(self, base: Table, keys: list[str], groups: list[Group]) -> None:
        """
        :param base: The table being grouped.
        :param keys: The names of the columns the rows are grouped by.
        :param groups: The groups, in order of first appearance.
        """
        self.base = base
        self.keys = list(keys)
        self.groups = groups

    def __str__(self) -> str:
        return f"Grouping(keys={self.keys}, groups={len(self.groups)}, {self.base!r})"

    __repr__ = __str__

    def __len__(self) -> int:
        return len(self.groups)

    def __iter__(self) -> Iterator[Group]:
        return iter(self.groups)

    def tables(self) -> Iterator[tuple[tuple[Any, ...], Table]]:
        """Iterate over the groups as ``(key, table with the rows of the group)``."""
        for group in self.groups:
            yield group.key, self.base.take(group.indices)

    def first_indices(self) -> pa.Array:
        """The index of the first row of each group."""
        return pa.array([group.indices[0].as_py() for group in self.groups], type=pa.int64())

    def ungroup(self) -> Table:
        """Discard the grouping and return the table it was built from."""
        return self.base

    # Verbs that are aware of groups, see the compute package.

    def filter(self, *predicates: Any) -> "Grouping":
        from ..compute import filtering

        return filtering.filter(self, *predicates)

    def mutate(self, expressions: dict[str, Any] | None = None, **named: Any) -> "Grouping":
        from ..compute import mutation

        return mutation.mutate(self, expressions, **named)

    def transmute(self, expressions: dict[str, Any] | None = None, **named: Any) -> "Grouping":
        from ..compute import mutation

        return mutation.transmute(self, expressions, **named)

    def summarize(self, aggregations: dict[str, Any] | None = None, **named: Any) -> Table:
        from ..compute import aggregate

        return aggregate.summarize(self, aggregations, **named)

    def count(self, *columns: str, **options: Any) -> Table:
        from ..compute import aggregate

        return aggregate.count(self, *columns, **options)


def group_by(table: Table, *keys: str) -> Grouping:
    """Group the rows of a table by the values of one or more columns.

    Like for multiple keys aggregation, grouping is implemented
    in plain python by hashing the tuple of key values of each
    row. That's slower than relying on arrow kernels, but it
    makes obvious how first appearance order is preserved: a
    dictionary remembers the order its keys were inserted.

    ``None`` is equal to itself for python, thus all rows
    with missing values in the keys end up in the same group.
    NaN instead is never equal to itself, so all NaN keys are
    replaced by the same ``math.nan`` object, which python
    dictionaries match by identity, and NaN rows form one group too.

    :param table: The table to group.
    :param keys: The columns to group by.
    """
    if not keys:
        raise ValueError("At least one grouping key is required")
    key_values = [[_same_nan(v) for v in table.column(k).to_pylist()] for k in keys]

    partitions: dict[tuple[Any, ...], list[int]] = {}
    for row_index, row_key in enumerate(zip(*key_values)):
        partitions.setdefault(row_key, []).append(row_index)

    groups = [
        Group(key, pa.array(indices, type=pa.int64()))
        for key, indices in partitions.items()
    ]
    logger.debug("Grouped %d rows by %s into %d groups", table.num_rows, keys, len(groups))
    return Grouping(table, list(keys), groups)


def ungroup(grouping: Grouping) -> Table:
    """Discard the grouping metadata, the data is returned unchanged."""
    return grouping.ungroup()


def _same_nan(value: Any) -> Any:
    if isinstance(value, float) and math.isnan(value):
        return math.nan
    return value
