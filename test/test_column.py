import datetime

import pyarrow as pa
import pytest

from tidyground.errors import TypeMismatch
from tidyground.model import Column, Kind


@pytest.mark.parametrize(
    "values, kind",
    [
        ([1, 2, 3], Kind.INTEGER),
        ([1.5, None], Kind.REAL),
        (["a", "b"], Kind.TEXT),
        ([True, None, False], Kind.BOOLEAN),
        ([datetime.datetime(2013, 1, 1, 5, 17)], Kind.DATETIME),
        ([None, None], Kind.MISSING),
    ],
)
def test_kind_is_inferred(values, kind):
    assert Column("x", values).kind == kind


def test_forced_kind():
    column = Column("x", [1, 2, None], Kind.REAL)
    assert column.kind == Kind.REAL
    assert column.values.type == pa.float64()
    assert column.to_pylist() == [1.0, 2.0, None]


def test_mixed_values_are_rejected():
    with pytest.raises(TypeMismatch):
        Column("x", [1, "one"])


def test_unsupported_arrow_type():
    with pytest.raises(TypeMismatch):
        Column("x", pa.array([[1, 2]]))


def test_kind_of_arrow_types():
    assert Kind.of(pa.int8()) == Kind.INTEGER
    assert Kind.of(pa.large_string()) == Kind.TEXT
    assert Kind.of(pa.date32()) == Kind.DATETIME
    assert Kind.INTEGER.arrow_type == pa.int64()


def test_missing_values():
    column = Column("x", [1, None, 3])
    assert column.null_count == 1
    assert column.is_missing(1)
    assert not column.is_missing(0)
    assert column[1] is None
    assert column[2] == 3


def test_wraps_arrow_data():
    data = pa.chunked_array([[1, 2], [3]])
    column = Column("x", data)
    assert column.values is data
    assert len(column) == 3
    assert list(column) == [1, 2, 3]


def test_rename_keeps_values():
    column = Column("x", [1, 2])
    renamed = column.rename("y")
    assert renamed.name == "y"
    assert renamed.values is column.values
    assert column.name == "x"


def test_str():
    assert str(Column("month", [1, 2])) == "Column(month, kind=integer, length=2)"
