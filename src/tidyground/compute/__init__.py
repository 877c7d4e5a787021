"""The tidyground verbs.

The verbs are the functions that transform tables:

* :func:`filter` keeps the rows matching some predicates.
* :func:`arrange` sorts the rows.
* :func:`select` and :func:`rename` pick and relabel columns.
* :func:`mutate` and :func:`transmute` compute new columns.
* :func:`summarize` and :func:`count` reduce groups of rows to one row.
* :func:`pivot_longer` and :func:`pivot_wider` reshape tables.

Verbs never modify the table they receive, they always
return a new :class:`tidyground.model.Table` (or a
:class:`tidyground.model.Grouping` for the verbs that
accept one and preserve it).

The verbs are tightly bound to Apache Arrow, thus expressions
will always deal with :mod:`pyarrow` data and computations
are performed through :mod:`pyarrow.compute` functions.

This allows to easily build pipelines like::

    (Table)-->filter--(Table)-->group_by--(Grouping)-->summarize--(Table)-->...

Most verbs are also available as methods of the table itself:

>>> from tidyground.model import Table
>>> from tidyground.compute import col, desc, mean
>>> data = Table.from_pydict({
...    "animals": ["Flamingo", "Horse", "Brittle stars", "Centipede", "Spider"],
...    "n_legs": [2, 4, 5, 100, 8],
...    "class": ["bird", "mammal", "echinoderm", "myriapod", "arachnid"],
... })
>>> data.filter(col("n_legs") >= 5).arrange(desc("n_legs")).select("animals").to_pydict()
{'animals': ['Centipede', 'Spider', 'Brittle stars']}
"""

from ..model import group_by, ungroup
from .aggregate import (
    Aggregation,
    CountAggregation,
    CountDistinctAggregation,
    MaxAggregation,
    MeanAggregation,
    MedianAggregation,
    MinAggregation,
    NthAggregation,
    StdDevAggregation,
    SumAggregation,
    count,
    first,
    last,
    max_,
    mean,
    median,
    min_,
    n,
    n_distinct,
    nth,
    sd,
    sum_,
    summarize,
)
from .base import ColumnRef, Expression, Literal, col, lit
from .expressions import FunctionCallExpression, RowExpression, rowwise
from .filtering import filter
from .mutation import mutate, transmute
from .pagination import head, slice_rows
from .reshape import pivot_longer, pivot_wider
from .selection import (
    Selector,
    between,
    contains,
    ends_with,
    everything,
    exclude,
    matches,
    rename,
    select,
    starts_with,
)
from .sorting import Descending, arrange, desc

__all__ = (
    "Expression",
    "ColumnRef",
    "Literal",
    "col",
    "lit",
    "FunctionCallExpression",
    "RowExpression",
    "rowwise",
    "filter",
    "arrange",
    "desc",
    "Descending",
    "select",
    "rename",
    "Selector",
    "between",
    "starts_with",
    "ends_with",
    "contains",
    "matches",
    "everything",
    "exclude",
    "mutate",
    "transmute",
    "group_by",
    "ungroup",
    "summarize",
    "count",
    "head",
    "slice_rows",
    "pivot_longer",
    "pivot_wider",
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
    "n",
    "n_distinct",
    "mean",
    "median",
    "sd",
    "min_",
    "max_",
    "sum_",
    "first",
    "last",
    "nth",
)
