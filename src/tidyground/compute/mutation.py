"""Computation of new columns.

A common request in analyses is to derive new values
from the existing ones, like computing a speed out of
a distance and a time.
An example is an expression in the ``SELECT`` clause of SQL queries.

This module implements the ``mutate`` and ``transmute`` verbs.
"""

import logging
from typing import Any

import pyarrow as pa
import pyarrow.compute as pc

from ..errors import TypeMismatch
from ..model import Grouping, Table, group_by
from .expressions import evaluate

logger = logging.getLogger(__name__)


def mutate(
    data: Table | Grouping,
    expressions: dict[str, Any] | None = None,
    **named_expressions: Any,
) -> Table | Grouping:
    """Add new columns or replace existing ones.

    The expressions are applied sequentially, so each expression
    can reference the columns created by the previous ones:

    >>> from tidyground.model import Table
    >>> from tidyground.compute import col
    >>> t = Table.from_pydict({"distance": [100, 300], "air_time": [30, 60]})
    >>> mutate(t, hours=col("air_time") / 60, speed=col("distance") / col("hours")).to_pydict()
    {'distance': [100, 300], 'air_time': [30, 60], 'hours': [0.5, 1.0], 'speed': [200.0, 300.0]}

    Columns that already exist are replaced in place, new columns are
    appended at the end. Using ``None`` as the expression removes the column.
    Literal values are repeated for all the rows.

    When applied to a :class:`tidyground.model.Grouping` the
    expressions are evaluated separately for each group, so that
    aggregations like ``col("x") - mean("x")`` refer to the
    rows of each group, and a new grouping with the same keys is returned.

    :param data: The table or grouping to extend.
    :param expressions: The dict {name: Expression} of the columns to compute.
    :param named_expressions: Same as expressions, passed as keyword arguments.
    """
    expressions = {**(expressions or {}), **named_expressions}
    if isinstance(data, Grouping):
        return group_by(_mutate_groups(data, expressions), *data.keys)
    return _mutate_table(data, expressions)


def transmute(
    data: Table | Grouping,
    expressions: dict[str, Any] | None = None,
    **named_expressions: Any,
) -> Table | Grouping:
    """Like :func:`mutate` but keeping only the computed columns.

    >>> from tidyground.model import Table
    >>> from tidyground.compute import col
    >>> t = Table.from_pydict({"a": [1, 2], "b": [3, 4]})
    >>> transmute(t, ab=col("a") + col("b"), double=col("ab") * 2).to_pydict()
    {'ab': [4, 6], 'double': [8, 12]}

    When applied to a :class:`tidyground.model.Grouping` the keys
    of the grouping are kept too, ahead of the computed columns.
    """
    expressions = {**(expressions or {}), **named_expressions}
    computed = [name for name, expr in expressions.items() if expr is not None]
    if isinstance(data, Grouping):
        keys = [k for k in data.keys if k not in computed]
        table = _mutate_groups(data, expressions)
        return group_by(_keep(table, keys + computed), *data.keys)
    return _keep(_mutate_table(data, expressions), computed)


def _keep(table: Table, names: list[str]) -> Table:
    return Table.from_arrow(table.to_arrow().select(names))


def _mutate_table(table: Table, expressions: dict[str, Any]) -> Table:
    for name, expression in expressions.items():
        if expression is None:
            table = table.without_columns([name])
        else:
            table = table.with_column(name, evaluate(table, expression))
    logger.debug("Mutated columns %s of %d rows", list(expressions), table.num_rows)
    return table


def _mutate_groups(grouping: Grouping, expressions: dict[str, Any]) -> Table:
    """Mutate each group separately and put the rows back in their original order."""
    if not grouping.groups:
        return _mutate_table(grouping.base, expressions)

    pieces = []
    positions = []
    for group in grouping:
        pieces.append(_mutate_table(grouping.base.take(group.indices), expressions).to_arrow())
        positions.append(group.indices)

    # Groups might have produced different types for the same column,
    # like a column of missing values in one group and integers in another.
    try:
        combined = pa.concat_tables(pieces, promote_options="permissive")
    except (pa.ArrowInvalid, pa.ArrowTypeError) as e:
        raise TypeMismatch(f"Groups produced columns of different kinds: {e}") from e
    # positions is a permutation of the row indices, sorting it gives
    # for each original row the place where it ended up in combined.
    original_order = pc.sort_indices(pa.concat_arrays(positions))
    return Table.from_arrow(combined.take(original_order))
