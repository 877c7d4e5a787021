"""Selection and renaming of columns.

A common request in analyses is to pick only the columns
that are relevant, for example in SQL it's the list of
columns in the ``SELECT`` clause.

Columns can be picked by name or through selectors,
which match columns by position or by the shape of their name:

>>> from tidyground.model import Table
>>> t = Table.from_pydict({"year": [2013], "month": [1], "day": [1], "dep_time": [517]})
>>> select(t, "year", between("month", "day")).column_names
['year', 'month', 'day']
>>> select(t, ~starts_with("d")).column_names
['year', 'month']
>>> select(t, "dep_time", everything()).column_names
['dep_time', 'year', 'month', 'day']
"""

import abc
import logging
import re
from typing import Any

from ..errors import ColumnNotFound
from ..model import Table

logger = logging.getLogger(__name__)


class Selector(abc.ABC):
    """Match columns of a table by their names.

    Selectors can be negated with ``~`` to exclude
    the columns they match instead of including them.
    """

    @abc.abstractmethod
    def resolve(self, names: list[str]) -> list[str]:
        """The names matched by the selector, in the order of the table."""
        ...

    @abc.abstractmethod
    def __str__(self) -> str: ...

    def __repr__(self) -> str:
        return str(self)

    def __invert__(self) -> "Selector":
        return Negated(self)


class ColumnName(Selector):
    """Select a column by its exact name."""

    def __init__(self, name: str) -> None:
        self.name = name

    def resolve(self, names: list[str]) -> list[str]:
        if self.name not in names:
            raise ColumnNotFound(self.name, names)
        return [self.name]

    def __str__(self) -> str:
        return f"ColumnName({self.name})"


class Between(Selector):
    """Select all the columns between two columns, both included."""

    def __init__(self, start: str, end: str) -> None:
        self.start = start
        self.end = end

    def resolve(self, names: list[str]) -> list[str]:
        for name in (self.start, self.end):
            if name not in names:
                raise ColumnNotFound(name, names)
        first, last = names.index(self.start), names.index(self.end)
        if first <= last:
            return names[first : last + 1]
        return names[last : first + 1][::-1]

    def __str__(self) -> str:
        return f"Between({self.start}, {self.end})"


class NamePattern(Selector):
    """Select the columns whose name matches a regular expression."""

    def __init__(self, pattern: str, description: str | None = None) -> None:
        self.pattern = re.compile(pattern)
        self.description = description or f"Matches({pattern})"

    def resolve(self, names: list[str]) -> list[str]:
        return [name for name in names if self.pattern.search(name)]

    def __str__(self) -> str:
        return self.description


class Everything(Selector):
    """Select all the columns, usually to pick the ones not selected yet."""

    def resolve(self, names: list[str]) -> list[str]:
        return list(names)

    def __str__(self) -> str:
        return "Everything()"


class Negated(Selector):
    """Exclude the columns matched by another selector."""

    def __init__(self, selector: Selector) -> None:
        self.selector = selector

    def resolve(self, names: list[str]) -> list[str]:
        return self.selector.resolve(names)

    def __invert__(self) -> Selector:
        return self.selector

    def __str__(self) -> str:
        return f"~{self.selector}"


def between(start: str, end: str) -> Selector:
    return Between(start, end)


def starts_with(prefix: str) -> Selector:
    return NamePattern("^" + re.escape(prefix), f"StartsWith({prefix})")


def ends_with(suffix: str) -> Selector:
    return NamePattern(re.escape(suffix) + "$", f"EndsWith({suffix})")


def contains(text: str) -> Selector:
    return NamePattern(re.escape(text), f"Contains({text})")


def matches(pattern: str) -> Selector:
    return NamePattern(pattern)


def everything() -> Selector:
    return Everything()


def exclude(*names: str) -> list[Selector]:
    """Exclude the columns with the given names."""
    return [Negated(ColumnName(name)) for name in names]


def as_selector(rule: str | Selector) -> Selector:
    if isinstance(rule, Selector):
        return rule
    elif isinstance(rule, str):
        return ColumnName(rule)
    raise ValueError(f"Columns can be selected by name or selector, got {rule!r}")


def resolve_columns(names: list[str], rules: tuple[Any, ...] | list[Any]) -> list[str]:
    """Apply the selection rules to a list of column names.

    Rules are applied in order: each rule adds the columns it
    matches that were not selected yet, or removes them when
    it's negated. When the first rule is a negation
    the selection starts from all the columns.
    """
    flattened: list[Selector] = []
    for rule in rules:
        if isinstance(rule, (list, tuple)):
            flattened.extend(as_selector(r) for r in rule)
        else:
            flattened.append(as_selector(rule))

    selected: list[str] = []
    for position, selector in enumerate(flattened):
        if isinstance(selector, Negated):
            if position == 0:
                selected = list(names)
            excluded = set(selector.resolve(names))
            selected = [name for name in selected if name not in excluded]
        else:
            for name in selector.resolve(names):
                if name not in selected:
                    selected.append(name)
    return selected


def select(table: Table, *rules: str | Selector) -> Table:
    """Pick columns of a table.

    The resulting table contains the matched columns
    in the order the rules matched them, a column matched
    by more than one rule appears only once, where it
    was matched first.

    >>> from tidyground.model import Table
    >>> t = Table.from_pydict({"a": [1], "b": [2], "c": [3]})
    >>> select(t, "c", "a", "c").column_names
    ['c', 'a']

    :param table: The table to pick columns from.
    :param rules: Column names and selectors, see :func:`resolve_columns`.
    """
    selected = resolve_columns(table.column_names, rules)
    logger.debug("Selected columns %s", selected)
    return Table.from_arrow(table.to_arrow().select(selected))


def rename(
    table: Table, mapping: dict[str, str] | None = None, **renames: str
) -> Table:
    """Change the name of some columns, keeping all the others.

    The renamed columns keep their position and their values.

    >>> from tidyground.model import Table
    >>> t = Table.from_pydict({"a": [1], "b": [2]})
    >>> rename(t, alpha="a").column_names
    ['alpha', 'b']

    :param table: The table with the columns to rename.
    :param mapping: In the form of ``{new_name: old_name}``.
    :param renames: Same as mapping, passed as keyword arguments.
    """
    mapping = {**(mapping or {}), **renames}
    new_names_by_old = {}
    for new_name, old_name in mapping.items():
        if old_name not in table.column_names:
            raise ColumnNotFound(old_name, table.column_names)
        new_names_by_old[old_name] = new_name

    names = [new_names_by_old.get(name, name) for name in table.column_names]
    return Table.from_arrow(table.to_arrow().rename_columns(names))
