"""tidyground

A tidy table manipulation engine built from scratch for learning
and teaching purposes.

Tidy data has one variable per column, one observation per row
and one value per cell. tidyground provides the verbs to bring data
into that shape and to analyse it: filtering and sorting rows,
picking and computing columns, summarizing groups of rows and
reshaping tables between the wide and long layouts.

The engine is constituted by multiple components, each isolated
within its own package and each self documented:

* The Data Model (:mod:`tidyground.model`), tables, columns and groupings.
* The Verbs (:mod:`tidyground.compute`), in charge of transforming tables.
* The Readers (:mod:`tidyground.io`), loading tables from delimited text.

For the user guide and code documentation of each component, refer to the
component itself.

>>> import io
>>> import tidyground as tg
>>> flights = tg.read_delimited(io.StringIO(
...     "month,day,dep_delay\\n1,1,2\\n1,2,4\\n11,1,\\n12,1,-3\\n"
... ))
>>> (flights.filter(tg.col("month").isin([11, 12]))
...         .mutate(late=tg.col("dep_delay") > 0)
...         .to_pydict())
{'month': [11, 12], 'day': [1, 1], 'dep_delay': [None, -3], 'late': [None, False]}
"""

import logging

from . import compute, errors, io, model
from .compute import (
    arrange,
    col,
    count,
    desc,
    filter,
    lit,
    mutate,
    pivot_longer,
    pivot_wider,
    rename,
    select,
    summarize,
    transmute,
)
from .io import read_delimited
from .model import Column, Grouping, Kind, Table, group_by, ungroup

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = (
    "compute",
    "errors",
    "io",
    "model",
    "Column",
    "Kind",
    "Table",
    "Grouping",
    "group_by",
    "ungroup",
    "col",
    "lit",
    "desc",
    "filter",
    "arrange",
    "select",
    "rename",
    "mutate",
    "transmute",
    "summarize",
    "count",
    "pivot_longer",
    "pivot_wider",
    "read_delimited",
)
