"""Base classes and interfaces for the verbs.

This module defines the expressions, the building block
used by verbs to know which values they have to compute
or which rows they have to keep.
"""

import abc
from typing import TYPE_CHECKING, Any

import pyarrow as pa
import pyarrow.compute as pc

if TYPE_CHECKING:
    from ..model import Table


class Expression(abc.ABC):
    """Expression to apply to a Table.

    Expressions are some form of operation that
    has to be applied to the data of a :class:`tidyground.model.Table`
    to create new data.

    Typical example of expressions are: A + B
    which is expected to sum column A of the Table
    to column B of the Table and return the result.

    The table an expression is applied to acts as the row context:
    column references are resolved against it when the expression is
    applied, not when it's built. The engine is column major, so
    applying an expression computes the value for all rows at once,
    resulting in a new column of data, or in a single
    :class:`pyarrow.Scalar` when the expression is an aggregation.

    Expressions can be combined with Python operators, which
    builds a :class:`tidyground.compute.expressions.FunctionCallExpression`
    invoking the matching compute function:

    >>> str(col("a") + 1)
    'pyarrow.compute.add(ColumnRef(a),1)'
    """

    @abc.abstractmethod
    def apply(self, table: "Table") -> pa.Array | pa.ChunkedArray | pa.Scalar:
        """Apply the expression to a Table.

        Expression classes must implement this method
        to dictate what will happen when an expression
        is applied.

        Suppose want to implement a ``SumExpression`` class
        that might look like::

            class SumExpression(Expression):
                def __init__(self, lcol, rcol):
                    self.lcol = lcol  # left column name
                    self.rcol = rcol  # right column name

                def apply(self, table):
                    return pyarrow.compute.add(
                        table.column(self.lcol).values,
                        table.column(self.rcol).values
                    )
        """
        ...

    @abc.abstractmethod
    def __str__(self) -> str:
        """Human readable representation of the expression."""
        ...

    def __repr__(self) -> str:
        return str(self)

    def __bool__(self) -> bool:
        raise TypeError(
            "Expressions have no truth value, combine them with & | ~ "
            "instead of and, or, not"
        )

    def _call(self, func: Any, *args: Any) -> "Expression":
        from .expressions import FunctionCallExpression

        return FunctionCallExpression(func, *args)

    # Arithmetic

    def __add__(self, other: Any) -> "Expression":
        return self._call(pc.add, self, other)

    def __radd__(self, other: Any) -> "Expression":
        return self._call(pc.add, other, self)

    def __sub__(self, other: Any) -> "Expression":
        return self._call(pc.subtract, self, other)

    def __rsub__(self, other: Any) -> "Expression":
        return self._call(pc.subtract, other, self)

    def __mul__(self, other: Any) -> "Expression":
        return self._call(pc.multiply, self, other)

    def __rmul__(self, other: Any) -> "Expression":
        return self._call(pc.multiply, other, self)

    def __truediv__(self, other: Any) -> "Expression":
        from .expressions import true_divide

        return self._call(true_divide, self, other)

    def __rtruediv__(self, other: Any) -> "Expression":
        from .expressions import true_divide

        return self._call(true_divide, other, self)

    def __pow__(self, other: Any) -> "Expression":
        return self._call(pc.power, self, other)

    def __neg__(self) -> "Expression":
        return self._call(pc.negate, self)

    # Comparison, any missing operand makes the result missing.

    def __eq__(self, other: Any) -> "Expression":  # type: ignore[override]
        return self._call(pc.equal, self, other)

    def __ne__(self, other: Any) -> "Expression":  # type: ignore[override]
        return self._call(pc.not_equal, self, other)

    def __lt__(self, other: Any) -> "Expression":
        return self._call(pc.less, self, other)

    def __le__(self, other: Any) -> "Expression":
        return self._call(pc.less_equal, self, other)

    def __gt__(self, other: Any) -> "Expression":
        return self._call(pc.greater, self, other)

    def __ge__(self, other: Any) -> "Expression":
        return self._call(pc.greater_equal, self, other)

    __hash__ = object.__hash__

    # Three-valued logic: true | missing is true, false & missing is false.

    def __and__(self, other: Any) -> "Expression":
        return self._call(pc.and_kleene, self, other)

    def __rand__(self, other: Any) -> "Expression":
        return self._call(pc.and_kleene, other, self)

    def __or__(self, other: Any) -> "Expression":
        return self._call(pc.or_kleene, self, other)

    def __ror__(self, other: Any) -> "Expression":
        return self._call(pc.or_kleene, other, self)

    def __invert__(self) -> "Expression":
        return self._call(pc.invert, self)

    def isin(self, values: Any) -> "Expression":
        """True when the value is one of ``values``, missing for missing values."""
        from .expressions import is_in

        return self._call(is_in, self, list(values))

    def is_missing(self) -> "Expression":
        return self._call(pc.is_null, self)

    def is_not_missing(self) -> "Expression":
        return self._call(pc.is_valid, self)


class ColumnRef(Expression):
    """References a column in a table.

    When another expression or a verb need
    to operate on a specific column, we will
    need a way to reference that column and its data.

    This expression is aware of the column and when
    applied to a table returns the data for that column.
    Referencing a column that doesn't exist raises
    :class:`tidyground.errors.ColumnNotFound`.
    """

    def __init__(self, name: str) -> None:
        """
        :param name: The name of the column being referenced.
        """
        self.name = name

    def apply(self, table: "Table") -> pa.ChunkedArray:
        """Get the data for the column."""
        return table.column(self.name).values

    def __str__(self) -> str:
        return f"ColumnRef({self.name})"


class Literal(Expression):
    """A constant value, the same for every row."""

    def __init__(self, value: Any) -> None:
        """
        :param value: The value, ``None`` for a missing value.
        """
        self.value = value

    def apply(self, table: "Table") -> pa.Scalar:
        if isinstance(self.value, pa.Scalar):
            return self.value
        return pa.scalar(self.value)

    def __str__(self) -> str:
        return f"Literal({self.value!r})"


col = ColumnRef
lit = Literal
