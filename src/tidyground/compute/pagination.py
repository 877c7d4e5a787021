"""Support limiting or skipping rows of a table.

Implements verbs whose purpose is to slice the data,
discarding the rows that are not part of the selected slice.
"""

from ..model import Table


def slice_rows(table: Table, offset: int, length: int | None = None) -> Table:
    """Keep only one page of the rows of the table.

    Given a starting index and a length, only keep
    ``length`` rows after the starting index is reached.

    For example if ``offset=1`` and ``length=1``
    only the second row will be kept::

        0: skip because < offset
        1: keep
        2: skip because > length=1 and one row was already kept.

    Pages past the end of the table are empty.

    :param offset: From which row to take data, first row is 0.
    :param length: How many rows to take after offset was reached,
                   all the remaining rows when omitted.
    """
    if offset < 0 or (length is not None and length < 0):
        raise ValueError("Offset and length must not be negative")
    offset = min(offset, table.num_rows)
    return Table.from_arrow(table.to_arrow().slice(offset, length))


def head(table: Table, n: int = 5) -> Table:
    """The first ``n`` rows of the table.

    >>> from tidyground.model import Table
    >>> head(Table.from_pydict({"x": list(range(10))}), 3).to_pydict()
    {'x': [0, 1, 2]}
    """
    return slice_rows(table, 0, n)
