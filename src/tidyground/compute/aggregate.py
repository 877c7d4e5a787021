"""Aggregations and the verbs that compute them.

Frequently when analysing data is necessary
to compute statistics like the min, max, average, etc...
of the data stored in tables.

The ``summarize`` verb is in charge of computing
those aggregations and projecting them as new
columns of a table with one row per group.

Typically the data will be grouped by a set of columns
and then the aggregations computed for each group.

For example, given the following data::

    city, shop, n_employees
    New York, Shop A, 10
    New York, Shop B, 15
    Los Angeles, Shop C, 8
    Los Angeles, Shop D, 12
    New York, Shop E, 20

We could group by city and compute the sum of the employees
to get::

    city, total_employees
    New York, 45
    Los Angeles, 20

Missing values are never dropped unless asked: when a group
contains a missing value the numeric aggregations of that
group are missing too, unless ``skip_missing=True`` is provided.

>>> from tidyground.model import Table
>>> t = Table.from_pydict({"x": [1, None, 3]})
>>> summarize(t, mean=mean("x"), mean_skip=mean("x", skip_missing=True), n=n()).to_pylist()
[{'mean': None, 'mean_skip': 2.0, 'n': 3}]
"""

import abc
import logging
from typing import Any

import pyarrow as pa
import pyarrow.compute as pc

from ..errors import TypeMismatch
from ..model import Grouping, Table, group_by
from .base import ColumnRef, Expression
from .expressions import apply_expression_if_needed

__all__ = (
    "summarize",
    "count",
    "Aggregation",
    "CountAggregation",
    "CountDistinctAggregation",
    "MeanAggregation",
    "MedianAggregation",
    "StdDevAggregation",
    "MinAggregation",
    "MaxAggregation",
    "SumAggregation",
    "NthAggregation",
)

logger = logging.getLogger(__name__)


def summarize(
    data: Table | Grouping,
    aggregations: dict[str, Expression] | None = None,
    **named_aggregations: Expression,
) -> Table:
    """Reduce each group to a single row of aggregated values.

    When applied to a :class:`tidyground.model.Grouping` the result
    has one row per group, in the same order of the groups, with
    the key columns followed by the aggregations in the order
    they were provided.

    When applied to a plain table, all the rows are a single group
    and the result is a table with exactly one row.

    >>> from tidyground.model import Table
    >>> t = Table.from_pydict({
    ...    'city': ['New York', 'New York', 'Los Angeles', 'Los Angeles', 'New York'],
    ...    'shop': ['Shop A', 'Shop B', 'Shop C', 'Shop D', 'Shop E'],
    ...    'n_employees': [10, 15, 8, 12, 20]
    ... })
    >>> summarize(t.group_by("city"), total_employees=sum_("n_employees")).to_pydict()
    {'city': ['New York', 'Los Angeles'], 'total_employees': [45, 20]}

    :param data: The table or grouping to summarize.
    :param aggregations: The aggregations in the form of {"new_col_name": Aggregation}.
    :param named_aggregations: Same as aggregations, passed as keyword arguments.
    """
    aggregations = {**(aggregations or {}), **named_aggregations}
    if isinstance(data, Grouping):
        grouping = data
        keys = grouping.keys
        clashing = [name for name in aggregations if name in keys]
        if clashing:
            raise ValueError(f"Aggregations can't replace the grouping keys: {clashing}")
        groups = list(grouping.tables())
        key_columns = {
            k: grouping.base.column(k).values.take(grouping.first_indices()) for k in keys
        }
    else:
        keys = []
        groups = [((), data)]
        key_columns = {}

    # Compute the aggregation results for each group, it will look like
    #   results_data = {aggr_name: [value_group1, value_group2, ...]}
    results_data: dict[str, list[pa.Scalar]] = {name: [] for name in aggregations}
    for _, group_table in groups:
        for name, aggregation in aggregations.items():
            results_data[name].append(_single_value(group_table, name, aggregation))

    result = pa.table(
        {
            **key_columns,
            **{name: scalars_to_array(values) for name, values in results_data.items()},
        }
    )
    logger.debug(
        "Summarized %d groups by %s into columns %s", len(groups), keys, list(aggregations)
    )
    return Table.from_arrow(result)


def count(
    data: Table | Grouping,
    *columns: str,
    weight: str | None = None,
    sort: bool = False,
    name: str = "n",
) -> Table:
    """Count the rows for each combination of values of ``columns``.

    This is a shorthand for grouping by ``columns`` and summarizing
    with :func:`n`, or with the sum of ``weight`` when provided
    (missing weights are skipped).

    >>> from tidyground.model import Table
    >>> t = Table.from_pydict({"cyl": [4, 6, 4, 8, 4]})
    >>> count(t, "cyl", sort=True).to_pydict()
    {'cyl': [4, 6, 8], 'n': [3, 1, 1]}

    :param data: The table or grouping whose rows have to be counted.
    :param columns: The columns to count by, in addition to the grouping keys.
    :param weight: Sum this column instead of counting the rows.
    :param sort: Show the largest groups first.
    :param name: The name of the column holding the counts.
    """
    if isinstance(data, Grouping):
        keys = data.keys + [c for c in columns if c not in data.keys]
        table = data.base
    else:
        keys = list(columns)
        table = data

    aggregation = n() if weight is None else sum_(weight, skip_missing=True)
    if keys:
        result = summarize(group_by(table, *keys), {name: aggregation})
    else:
        result = summarize(table, {name: aggregation})

    if sort:
        from .sorting import arrange, desc

        result = arrange(result, desc(name))
    return result


def _single_value(table: Table, name: str, aggregation: Any) -> pa.Scalar:
    """Apply an aggregation expecting it to produce a single value."""
    value = apply_expression_if_needed(table, aggregation)
    if isinstance(value, (pa.Array, pa.ChunkedArray)):
        if len(value) != 1:
            raise ValueError(
                f"Aggregation '{name}' must produce a single value per group, got {len(value)}"
            )
        value = value[0]
    elif not isinstance(value, pa.Scalar):
        value = pa.scalar(value)
    return value


def scalars_to_array(scalars: list[pa.Scalar]) -> pa.Array:
    """Combine scalars of the same kind into an array.

    Missing values might have been computed with the null type,
    so the type of the array is the first type that is not null.
    """
    arrow_type = next(
        (s.type for s in scalars if not pa.types.is_null(s.type)), pa.null()
    )
    try:
        return pa.array([s.as_py() for s in scalars], type=arrow_type)
    except (pa.ArrowInvalid, pa.ArrowTypeError) as e:
        raise TypeMismatch(f"Groups produced values of different kinds: {e}") from e


class Aggregation(Expression):
    """Base class for aggregations.

    An aggregation is an expression that reduces
    all the values of the table (or group) it is applied to
    into a single :class:`pyarrow.Scalar`.

    Subclasses only have to implement ``_aggregate``
    which receives the data of the aggregated column.
    """

    def __init__(self, column: str | Expression, skip_missing: bool = False) -> None:
        """
        :param column: The column to aggregate, or an expression computing the values.
        :param skip_missing: Ignore missing values instead of propagating them.
        """
        self.column = ColumnRef(column) if isinstance(column, str) else column
        self.skip_missing = skip_missing

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.column}, skip_missing={self.skip_missing})"

    def apply(self, table: Table) -> pa.Scalar:
        data = apply_expression_if_needed(table, self.column)
        if isinstance(data, pa.Scalar):
            data = pa.array([data.as_py()], type=data.type)
        try:
            return self._aggregate(data)
        except (pa.ArrowNotImplementedError, pa.ArrowTypeError) as e:
            raise TypeMismatch(f"Unable to compute {self} on {data.type} values: {e}") from e

    @abc.abstractmethod
    def _aggregate(self, data: pa.ChunkedArray | pa.Array) -> pa.Scalar: ...


class SumAggregation(Aggregation):
    """Compute the sum of an aggregated column, 0 when there are no values."""

    def _aggregate(self, data: Any) -> pa.Scalar:
        return pc.sum(data, skip_nulls=self.skip_missing, min_count=0)


class MinAggregation(Aggregation):
    """Compute the min of an aggregated column."""

    def _aggregate(self, data: Any) -> pa.Scalar:
        return pc.min(data, skip_nulls=self.skip_missing)


class MaxAggregation(Aggregation):
    """Compute the max of an aggregated column."""

    def _aggregate(self, data: Any) -> pa.Scalar:
        return pc.max(data, skip_nulls=self.skip_missing)


class MeanAggregation(Aggregation):
    """Compute the mean of an aggregated column."""

    def _aggregate(self, data: Any) -> pa.Scalar:
        return pc.mean(data, skip_nulls=self.skip_missing)


class MedianAggregation(Aggregation):
    """Compute the exact median of an aggregated column.

    Interpolates between the two middle values
    when the number of values is even.
    """

    def _aggregate(self, data: Any) -> pa.Scalar:
        return pc.quantile(
            data, q=0.5, interpolation="linear", skip_nulls=self.skip_missing
        )[0]


class StdDevAggregation(Aggregation):
    """Compute the sample standard deviation of an aggregated column.

    The result is missing when there are less than two values.
    """

    def _aggregate(self, data: Any) -> pa.Scalar:
        return pc.stddev(data, ddof=1, skip_nulls=self.skip_missing)


class NthAggregation(Aggregation):
    """Pick the value at a position of the aggregated column.

    Positions start from 0, negative positions count
    from the end. When there is no value at that position
    the result is missing.

    With ``skip_missing=True`` the position refers to the
    values that are not missing.
    """

    def __init__(
        self, column: str | Expression, index: int, skip_missing: bool = False
    ) -> None:
        super().__init__(column, skip_missing=skip_missing)
        self.index = index

    def __str__(self) -> str:
        return (
            f"{self.__class__.__name__}({self.column}, {self.index}, "
            f"skip_missing={self.skip_missing})"
        )

    def _aggregate(self, data: Any) -> pa.Scalar:
        if self.skip_missing:
            data = data.drop_null()
        index = self.index if self.index >= 0 else len(data) + self.index
        if not 0 <= index < len(data):
            return pa.scalar(None, type=data.type)
        return data[index]


class CountAggregation(Aggregation):
    """Count the rows, missing values included."""

    def __init__(self) -> None:
        self.column = None
        self.skip_missing = False

    def __str__(self) -> str:
        return f"{self.__class__.__name__}()"

    def apply(self, table: Table) -> pa.Scalar:
        return pa.scalar(table.num_rows, type=pa.int64())

    def _aggregate(self, data: Any) -> pa.Scalar:
        return pa.scalar(len(data), type=pa.int64())


class CountDistinctAggregation(Aggregation):
    """Count the distinct values of the aggregated column.

    Missing values are unknown, so strictly speaking two missing
    values can't be told equal. For the sake of counting, all
    missing values are considered as one additional distinct value,
    unless ``skip_missing=True`` in which case they are not counted at all.
    """

    def _aggregate(self, data: Any) -> pa.Scalar:
        mode = "only_valid" if self.skip_missing else "all"
        return pc.count_distinct(data, mode=mode).cast(pa.int64())


def n() -> CountAggregation:
    """The number of rows in the group."""
    return CountAggregation()


def first(column: str | Expression, skip_missing: bool = False) -> NthAggregation:
    return NthAggregation(column, 0, skip_missing=skip_missing)


def last(column: str | Expression, skip_missing: bool = False) -> NthAggregation:
    return NthAggregation(column, -1, skip_missing=skip_missing)


nth = NthAggregation
n_distinct = CountDistinctAggregation
mean = MeanAggregation
median = MedianAggregation
sd = StdDevAggregation
min_ = MinAggregation
max_ = MaxAggregation
sum_ = SumAggregation
