"""Expressions executed by the verbs.

Verbs will sometimes need to filter data
or compute new data. This will be performed by verbs that
need to know how the data must be filtered or computed.

Filters will need a ``predicate``, so an expression that
returns ``true``, ``false`` or missing for each row that has to be
filtered.

Mutations will need an expression that computes the rows
for the new column, for example ``A + B``.

Most expressions are column major and compute a whole column
at once through :mod:`pyarrow.compute` functions. When that's
not convenient, :func:`rowwise` allows to write a plain Python
function invoked once per row.
"""

import inspect
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Iterator

import pyarrow as pa
import pyarrow.compute as pc

from ..errors import ColumnNotFound, TypeMismatch
from ..model.column import Kind
from .base import Expression

if TYPE_CHECKING:
    from ..model import Table

ArrowData = pa.Array | pa.ChunkedArray | pa.Scalar


def apply_expression_if_needed(table: "Table", o: Any) -> Any:
    """Invoke Apply on expressions when needed

    If the provided object is an Expression,
    it will be applied to the target table.

    Otherwise it will treat it as if it's
    already the result of an expression
    or a literal value.

    This allows us to apply all arguments
    we receive without having to care if
    they are the data we need or if they
    are the expression resulting in that data.
    """
    if isinstance(o, Expression):
        o = o.apply(table)
    return o


def evaluate(table: "Table", o: Any) -> pa.ChunkedArray:
    """Compute the value of ``o`` for every row of ``table``.

    Scalars and single values (like the result of an aggregation)
    are repeated for all the rows, so that the result is always
    a column as long as the table.
    """
    return broadcast(apply_expression_if_needed(table, o), table.num_rows)


def broadcast(result: Any, length: int) -> pa.ChunkedArray:
    """Make a column of ``length`` rows out of an expression result."""
    try:
        if isinstance(result, pa.ChunkedArray):
            data = result
        elif isinstance(result, pa.Array):
            data = pa.chunked_array([result])
        elif isinstance(result, pa.Scalar):
            return pa.chunked_array([pa.repeat(result, length)])
        elif isinstance(result, (list, tuple)):
            data = pa.chunked_array([pa.array(result)])
        else:
            return pa.chunked_array([pa.repeat(pa.scalar(result), length)])
    except (pa.ArrowInvalid, pa.ArrowTypeError) as e:
        raise TypeMismatch(f"Unable to convert {result!r} to a column: {e}") from e

    if len(data) == length:
        return data
    elif len(data) == 1:
        return pa.chunked_array([pa.repeat(data[0], length)])
    raise ValueError(f"Expression produced {len(data)} values, expected {length}")


def callable_name(func: Callable) -> str:
    """Get the qualified name of a function, like ``module.function``.

    >>> callable_name(pc.add)
    'pyarrow.compute.add'
    """
    module = inspect.getmodule(func)
    module_name = module.__name__ if module is not None else "<unknown>"
    if hasattr(func, "__self__") and not inspect.ismodule(func.__self__):
        return f"{module_name}.{func.__self__.__class__.__name__}.{func.__name__}"
    name = getattr(func, "__qualname__", None) or func.__class__.__name__
    return f"{module_name}.{name}"


class FunctionCallExpression(Expression):
    """Call a compute function on its arguments.

    Given a compute function, and a set of arguments
    (other expressions, literals or data), execute
    the function on the provided arguments and return
    the resulting data.

    For example to sum two columns this would be used as::

        FunctionCallExpression(pyarrow.compute.add, ColumnRef("A"), ColumnRef("B"))

    Compute functions that have no implementation for the kind
    of the provided arguments (like adding text to numbers)
    raise :class:`tidyground.errors.TypeMismatch`.
    """

    def __init__(self, func: Callable, *args: Any) -> None:
        """
        :param func: The function accepting the arguments.
        :param *args: The arguments for the function.
        """
        self.func = func
        self.args = args

    def __str__(self) -> str:
        return f"{callable_name(self.func)}({','.join(map(str, self.args))})"

    def apply(self, table: "Table") -> ArrowData:
        """Invoke the function resolving all arguments on the table.

        When the function arguments are expressions themselves,
        this will apply the expressions on the provided table
        and the resulting data will be used as the arguments for the
        function.
        """
        args = tuple(apply_expression_if_needed(table, arg) for arg in self.args)
        try:
            return self.func(*args)
        except (pa.ArrowNotImplementedError, pa.ArrowTypeError) as e:
            raise TypeMismatch(f"Unable to compute {self}: {e}") from e


class Row(Mapping):
    """Read-only view of one row of a table, by column name."""

    def __init__(self, values: dict[str, Any], index: int) -> None:
        self._values = values
        self.index = index

    def __getitem__(self, name: str) -> Any:
        try:
            return self._values[name]
        except KeyError:
            raise ColumnNotFound(name, list(self._values)) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Row({self.index}, {self._values!r})"


class RowExpression(Expression):
    """Compute a value invoking a Python function for each row.

    The function receives a :class:`Row`, a read-only mapping of
    column names to the values of the row, with ``None`` for
    missing values. Returning ``None`` produces a missing value.

    >>> from tidyground.model import Table
    >>> t = Table.from_pydict({"a": [1, 2, None]})
    >>> rowwise(lambda row: row["a"] is not None and row["a"] > 1).apply(t).to_pylist()
    [False, True, False]
    """

    def __init__(self, func: Callable[[Row], Any], kind: Kind | None = None) -> None:
        """
        :param func: The function computing the value for a row.
        :param kind: Kind of the returned values, inferred when omitted.
        """
        self.func = func
        self.kind = kind

    def __str__(self) -> str:
        return f"RowExpression({callable_name(self.func)})"

    def apply(self, table: "Table") -> pa.Array:
        results = [
            self.func(Row(values, index))
            for index, values in enumerate(table.to_pylist())
        ]
        arrow_type = self.kind.arrow_type if self.kind is not None else None
        try:
            return pa.array(results, type=arrow_type)
        except (pa.ArrowInvalid, pa.ArrowTypeError) as e:
            raise TypeMismatch(f"{self} returned values of different kinds: {e}") from e


rowwise = RowExpression


def _as_real(value: Any) -> Any:
    if isinstance(value, (pa.Array, pa.ChunkedArray, pa.Scalar)):
        if pa.types.is_integer(value.type):
            return value.cast(pa.float64())
    elif isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    return value


def true_divide(dividend: Any, divisor: Any) -> ArrowData:
    """Divide always producing real numbers, ``7 / 2`` is ``3.5``."""
    return pc.divide(_as_real(dividend), _as_real(divisor))


def is_in(values: ArrowData, value_set: list[Any]) -> ArrowData:
    """Check membership of ``values`` into ``value_set``.

    Unlike :func:`pyarrow.compute.is_in` a missing value
    produces a missing result, as we can't know if the
    unknown value would be part of the set or not.
    """
    try:
        candidates = pa.array(value_set, type=values.type)
    except (pa.ArrowInvalid, pa.ArrowTypeError) as e:
        raise TypeMismatch(f"Can't compare {values.type} values with {value_set!r}") from e
    found = pc.is_in(values, value_set=candidates)
    return pc.if_else(pc.is_valid(values), found, pa.scalar(None, type=pa.bool_()))
