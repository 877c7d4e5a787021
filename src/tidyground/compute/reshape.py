"""Reshaping of tables between the wide and long layouts.

The same data can be laid out in different ways.
In the *wide* layout the values of a variable are spread
across multiple columns, whose names are values themselves::

    country, 1999, 2000
    Brazil, 37737, 80488
    China, 212258, 213766

In the *long* layout the values are stacked into one column,
with another column telling which of the original columns
each value came from::

    country, year, cases
    Brazil, 1999, 37737
    Brazil, 2000, 80488
    China, 1999, 212258
    China, 2000, 213766

:func:`pivot_longer` converts from the wide layout to the long one,
:func:`pivot_wider` does the opposite.
"""

import logging
from typing import Any, Callable

import pyarrow as pa
import pyarrow.compute as pc

from ..errors import AmbiguousPivot, TypeMismatch
from ..model import Group, Kind, Table, group_by
from .selection import Selector, resolve_columns

logger = logging.getLogger(__name__)


def pivot_longer(
    table: Table,
    columns: str | Selector | list[str | Selector],
    names_to: str = "name",
    values_to: str = "value",
    names_transform: Callable[[str], Any] | None = None,
    values_drop_missing: bool = False,
) -> Table:
    """Stack the values of multiple columns into a single column.

    For each row of the table, one row is emitted for each of
    the stacked ``columns``, with all the other columns copied
    verbatim, the name of the stacked column in ``names_to``
    and its value for that row in ``values_to``.

    >>> from tidyground.model import Table
    >>> t = Table.from_pydict({"country": ["Brazil", "China"], "1999": [37737, 212258], "2000": [80488, 213766]})
    >>> longer = pivot_longer(t, ["1999", "2000"], names_to="year", values_to="cases", names_transform=int)
    >>> longer.to_pydict()
    {'country': ['Brazil', 'Brazil', 'China', 'China'], 'year': [1999, 2000, 1999, 2000], 'cases': [37737, 80488, 212258, 213766]}

    :param table: The table in wide layout.
    :param columns: The columns to stack, by name or selector.
    :param names_to: The name of the column receiving the stacked column names.
    :param values_to: The name of the column receiving the stacked values.
    :param names_transform: Convert the column names to values, like ``int``.
    :param values_drop_missing: Don't emit rows whose value is missing.
    """
    rules = columns if isinstance(columns, (list, tuple)) else [columns]
    value_columns = resolve_columns(table.column_names, rules)
    if not value_columns:
        raise ValueError("pivot_longer requires at least one column to stack")
    id_columns = [c for c in table.column_names if c not in value_columns]

    num_rows = table.num_rows
    num_stacked = len(value_columns)

    # Each row is repeated once for each stacked column.
    repeated_rows = pa.array(
        [row for row in range(num_rows) for _ in range(num_stacked)], type=pa.int64()
    )
    result = table.to_arrow().select(id_columns).take(repeated_rows)

    names = [names_transform(c) if names_transform else c for c in value_columns]
    try:
        names_array = pa.array(names * num_rows)
    except (pa.ArrowInvalid, pa.ArrowTypeError) as e:
        raise TypeMismatch(f"Transformed names are not of a single kind: {e}") from e

    # All stacked columns are concatenated one after the other, so the value of
    # column j for row i is at position j * num_rows + i.
    stacked_data = [table.column(c).values for c in value_columns]
    common_type = _common_type([data.type for data in stacked_data], value_columns)
    stacked = pa.chunked_array(
        [chunk for data in stacked_data for chunk in data.cast(common_type).chunks],
        type=common_type,
    )
    positions = pa.array(
        [j * num_rows + i for i in range(num_rows) for j in range(num_stacked)],
        type=pa.int64(),
    )
    result = result.append_column(names_to, names_array)
    result = result.append_column(values_to, stacked.take(positions))

    if values_drop_missing:
        result = result.filter(pc.is_valid(result.column(values_to)))

    logger.debug(
        "Pivoted %d columns of %d rows into %d rows", num_stacked, num_rows, result.num_rows
    )
    return Table.from_arrow(result)


def _common_type(types: list[pa.DataType], names: list[str]) -> pa.DataType:
    """The type all the stacked columns can be converted to.

    Integers and reals can be mixed, resulting in reals,
    missing values can be mixed with anything.
    """
    known = [t for t in types if not pa.types.is_null(t)]
    if not known:
        return pa.null()
    if all(t == known[0] for t in known):
        return known[0]

    kinds = {Kind.of(t) for t in known}
    if kinds == {Kind.INTEGER}:
        return Kind.INTEGER.arrow_type
    elif kinds <= {Kind.INTEGER, Kind.REAL}:
        return Kind.REAL.arrow_type
    elif len(kinds) == 1:
        return kinds.pop().arrow_type
    raise TypeMismatch(
        f"Can't combine columns {names} holding values of different kinds: "
        f"{sorted(k.value for k in kinds)}"
    )


def pivot_wider(
    table: Table,
    names_from: str,
    values_from: str,
    values_fill: Any = None,
) -> Table:
    """Spread the values of a column across multiple columns.

    The rows are grouped by all the columns except ``names_from``
    and ``values_from``, which are the identifying columns, and
    one row is emitted for each group.
    A new column is created for each distinct value of ``names_from``
    (in order of first appearance) holding the value of ``values_from``
    for that group, or a missing value if the group has no such row.

    >>> from tidyground.model import Table
    >>> t = Table.from_pydict({
    ...     "country": ["Brazil", "Brazil", "China", "China"],
    ...     "type": ["cases", "population", "cases", "population"],
    ...     "count": [37737, 172006362, 212258, 1272915272],
    ... })
    >>> pivot_wider(t, "type", "count").to_pydict()
    {'country': ['Brazil', 'China'], 'cases': [37737, 212258], 'population': [172006362, 1272915272]}

    No aggregation is ever performed, if more than one row of the
    same group has the same ``names_from`` value
    :class:`tidyground.errors.AmbiguousPivot` is raised.

    :param table: The table in long layout.
    :param names_from: The column whose values become the names of the new columns.
    :param values_from: The column whose values populate the new columns.
    :param values_fill: Use this instead of missing values for absent combinations.
    """
    names_data = table.column(names_from).to_pylist()
    values_data = table.column(values_from).values
    id_columns = [c for c in table.column_names if c not in (names_from, values_from)]

    if id_columns:
        grouping = group_by(table, *id_columns)
        groups = grouping.groups
        ids = table.to_arrow().select(id_columns).take(grouping.first_indices())
    else:
        groups = [Group((), pa.array(range(table.num_rows), type=pa.int64()))]
        if table.num_rows == 0:
            groups = []
        ids = pa.table({})

    # For each new column, the row providing the value of each group:
    #   cells = {"cases": [row_for_group0, row_for_group1, ...]}
    cells: dict[str, list[int | None]] = {}
    for name_value in names_data:
        name = _column_name(name_value)
        if name not in cells:
            if name in id_columns:
                raise ValueError(f"Column '{name}' would collide with an identifying column")
            cells[name] = [None] * len(groups)

    for group_index, group in enumerate(groups):
        for row in group.indices.to_pylist():
            name = _column_name(names_data[row])
            if cells[name][group_index] is not None:
                raise AmbiguousPivot(group.key, name)
            cells[name][group_index] = row

    result = {name: ids.column(name) for name in id_columns}
    for name, rows in cells.items():
        column = values_data.take(pa.array(rows, type=pa.int64()))
        if values_fill is not None:
            # Only the absent combinations are filled, missing values stay missing.
            absent = pa.chunked_array([[row is None for row in rows]], type=pa.bool_())
            fill = _fill_value(values_fill, column.type)
            column = pc.if_else(absent, fill, column.cast(fill.type))
        result[name] = column

    logger.debug(
        "Pivoted %d rows into %d rows and %d new columns",
        table.num_rows,
        len(groups),
        len(cells),
    )
    return Table.from_arrow(pa.table(result))


def _column_name(value: Any) -> str:
    return "NA" if value is None else str(value)


def _fill_value(value: Any, arrow_type: pa.DataType) -> pa.Scalar:
    """The fill value as a scalar of the column type.

    A column holding only missing values takes the kind of the fill value.
    """
    try:
        if pa.types.is_null(arrow_type):
            return pa.scalar(value)
        return pa.scalar(value, type=arrow_type)
    except (pa.ArrowInvalid, pa.ArrowTypeError) as e:
        raise TypeMismatch(f"Can't fill {arrow_type} values with {value!r}: {e}") from e
