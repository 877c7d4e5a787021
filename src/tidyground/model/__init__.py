"""The tidyground data model.

Data is represented as a :class:`Table`, an ordered collection
of named :class:`Column` objects all of the same length.

Each column holds values of a single :class:`Kind`, missing values
can appear in any column and are represented by the Arrow ``null``.

Tables can be partitioned into groups of rows sharing the same
values for a set of key columns, that is what a :class:`Grouping` is.
Groupings are the input of aggregations, which compute one
result for each group.
"""

from .column import Column, Kind
from .grouping import Group, Grouping, group_by, ungroup
from .table import Table

__all__ = (
    "Column",
    "Kind",
    "Table",
    "Group",
    "Grouping",
    "group_by",
    "ungroup",
)
