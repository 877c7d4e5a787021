"""Render tables as aligned text.

:func:`tabulate` takes a :class:`tidyground.model.Table` and lays
out its rows in aligned columns, ready to be printed.
Reals are shown with 2 decimal places, missing values as ``NA``
and long texts are truncated. Only the first rows are shown,
followed by how many were left out.

    >>> from tidyground.model import Table
    >>> table = Table.from_pydict({
    ...     "country": ["Afghanistan", "Brazil", "China"],
    ...     "rate": [0.373, 2.19, None],
    ...     "recent": [False, True, True],
    ... })
    >>> print(tabulate(table))
    country     | rate | recent
    ----------- | ---- | ------
    Afghanistan | 0.37 | false
    Brazil      | 2.19 | true
    China       | NA   | true
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..model import Table

MISSING = "NA"
MAX_TEXT_WIDTH = 30


def tabulate(table: "Table", max_rows: int = 20) -> str:
    """Format the first ``max_rows`` rows of a table into aligned text.

    >>> from tidyground.model import Table
    >>> print(tabulate(Table.from_pydict({"x": [1, 2, 3]}), max_rows=2))
    x
    -
    1
    2
    ... and 1 more rows
    """
    names = table.column_names
    shown = table.to_arrow().slice(0, max_rows).to_pylist()
    cells = [[format_value(row[name]) for name in names] for row in shown]

    widths = column_widths(names, cells)
    lines = [align(names, widths), align(["-"] * len(names), widths, fillvalue="-")]
    lines.extend(align(row, widths) for row in cells)

    text = "\n".join(lines)
    hidden = table.num_rows - len(shown)
    if hidden > 0:
        text += f"\n... and {hidden} more rows"
    return text


def column_widths(names: list[str], cells: list[list[str]]) -> list[int]:
    """The width of the widest cell of each column, header included."""
    return [
        max([len(name)] + [len(row[idx]) for row in cells])
        for idx, name in enumerate(names)
    ]


def align(values: list[str], widths: list[int], fillvalue: str = " ") -> str:
    return " | ".join(v.ljust(w, fillvalue) for v, w in zip(values, widths))


def format_value(v: Any) -> str:
    """Text representation of a single cell."""
    if v is None:
        return MISSING
    elif isinstance(v, bool):
        return "true" if v else "false"
    elif isinstance(v, float):
        return f"{v:.2f}"

    v = str(v)
    if len(v) > MAX_TEXT_WIDTH:
        v = v[: MAX_TEXT_WIDTH - 3] + "..."
    return v
