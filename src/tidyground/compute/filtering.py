"""Filtering of rows.

A common request in analyses is to filter the data to
pick only the rows that respect a specific condition.
An example is the ``WHERE`` condition in SQL queries.

This module implements the ``filter`` verb.
"""

import logging
from typing import Any

import pyarrow as pa
import pyarrow.compute as pc

from ..errors import TypeMismatch
from ..model import Grouping, Table, group_by
from .expressions import evaluate

logger = logging.getLogger(__name__)


def filter(data: Table | Grouping, *predicates: Any) -> Table | Grouping:
    """Keep only the rows for which all the predicates are true.

    Each predicate is an expression that when applied
    to the table being filtered returns ``true``, ``false``
    or missing for each row, to mark which rows have to be
    preserved and which rows have to be discarded.

    Rows where the predicate is missing are discarded, just like
    those where it is false. Multiple predicates are combined with
    a logical AND: they are applied left to right and each
    predicate only sees the rows kept by the previous ones.

    The rows that are kept preserve their original order.

    >>> from tidyground.model import Table
    >>> from tidyground.compute import col
    >>> t = Table.from_pydict({"month": [1, 1, 11, 12], "day": [1, 2, 1, None]})
    >>> filter(t, col("month").isin([11, 12])).to_pydict()
    {'month': [11, 12], 'day': [1, None]}
    >>> filter(t, col("day") == 1).to_pydict()
    {'month': [1, 11], 'day': [1, 1]}

    When applied to a :class:`tidyground.model.Grouping`
    the predicates are evaluated separately for each group,
    so that aggregations refer to the rows of the group,
    and a new grouping with the same keys is returned.

    :param data: The table or grouping to filter.
    :param predicates: The expressions representing the predicates,
                       for example ``col("A") > col("B")``.
    """
    if isinstance(data, Grouping):
        return _filter_groups(data, predicates)

    table = data
    for predicate in predicates:
        table = table.take(_matching_indices(table, predicate))
    logger.debug("Filter kept %d of %d rows", table.num_rows, data.num_rows)
    return table


def _matching_indices(table: Table, predicate: Any) -> pa.Array:
    """The indices of the rows where the predicate is true."""
    mask = evaluate(table, predicate)
    if pa.types.is_null(mask.type):
        # Missing for all rows, which means no row is kept.
        return pa.array([], type=pa.int64())
    if not pa.types.is_boolean(mask.type):
        raise TypeMismatch(
            f"Filter predicates must produce booleans, {predicate} produced {mask.type}"
        )
    # Missing values in the mask are never true, so they are not kept.
    return pc.indices_nonzero(mask.combine_chunks().fill_null(False))


def _filter_groups(grouping: Grouping, predicates: tuple[Any, ...]) -> Grouping:
    if not grouping.groups:
        # No rows, but predicates must still reference existing columns.
        return group_by(filter(grouping.base, *predicates), *grouping.keys)

    kept = []
    for group in grouping:
        indices = group.indices
        for predicate in predicates:
            matching = _matching_indices(grouping.base.take(indices), predicate)
            indices = indices.take(matching)
        kept.extend(indices.to_pylist())

    kept.sort()
    table = grouping.base.take(pa.array(kept, type=pa.int64()))
    logger.debug("Grouped filter kept %d of %d rows", table.num_rows, grouping.base.num_rows)
    return group_by(table, *grouping.keys)
