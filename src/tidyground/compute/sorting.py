"""Sorting of rows.

When computing ranks or looking for most significant
values, it's often necessary to sort the data based
on one or more columns.

Sorted data can also be easier to read, as related
values are next to each other.

This module implements the ``arrange`` verb.
"""

import logging
from typing import Any

import pyarrow.compute as pc

from ..model import Table
from .base import ColumnRef

logger = logging.getLogger(__name__)


class Descending:
    """Marks a sorting key that has to be sorted in descending order."""

    def __init__(self, key: str | ColumnRef) -> None:
        """
        :param key: The column to sort by, by name or reference.
        """
        self.name = _key_name(key)

    def __str__(self) -> str:
        return f"Descending({self.name})"

    __repr__ = __str__


desc = Descending


def _key_name(key: str | ColumnRef) -> str:
    if isinstance(key, ColumnRef):
        return key.name
    elif isinstance(key, str):
        return key
    raise ValueError(f"Sorting keys must be column names or col() references, got {key!r}")


def arrange(table: Table, *keys: str | ColumnRef | Descending) -> Table:
    """Sort the rows of a table based on one or more columns.

    The data will be sorted based on the columns in the order
    they are provided: rows are sorted by the first key, and the
    following keys are only used to sort rows that have the same
    values for all the previous keys. Rows that are equal for all
    the keys keep the order they had in the table (the sort is stable).

    Keys are sorted in ascending order unless they are wrapped
    in :func:`desc`. Missing values are always placed last,
    for both ascending and descending keys.

    >>> from tidyground.model import Table
    >>> t = Table.from_pydict({"values": [3, None, 1, 4, 2], "tag": list("abcde")})
    >>> arrange(t, "values").column("values").to_pylist()
    [1, 2, 3, 4, None]
    >>> arrange(t, desc("values")).column("tag").to_pylist()
    ['d', 'a', 'e', 'c', 'b']

    :param table: The table to sort.
    :param keys: The columns to sort by in the order they should be sorted.
    """
    sorting = []
    for key in keys:
        if isinstance(key, Descending):
            name, order = key.name, "descending"
        else:
            name, order = _key_name(key), "ascending"
        table.column(name)  # Raises ColumnNotFound for unknown keys.
        sorting.append((name, order))

    if not sorting:
        return table

    # sort_indices is guaranteed to be a stable sort.
    indices = pc.sort_indices(
        table.to_arrow(), sort_keys=sorting, null_placement="at_end"
    )
    logger.debug("Arranged %d rows by %s", table.num_rows, sorting)
    return table.take(indices)
