import pyarrow as pa
import pyarrow.compute as pc
import pytest

from tidyground.compute import col, lit, mean, mutate, rowwise, transmute
from tidyground.compute.expressions import FunctionCallExpression
from tidyground.errors import ColumnNotFound, TypeMismatch
from tidyground.model import Grouping, Table, group_by


@pytest.fixture
def mock_data():
    return Table.from_pydict({"a": [1, 2, 3], "b": [4, 5, 6], "c": [7, 8, 9]})


def test_mutate_appends_columns(mock_data):
    result = mutate(mock_data, sum_ab=FunctionCallExpression(pc.add, col("a"), col("b")))
    assert result.column_names == ["a", "b", "c", "sum_ab"]
    assert result.column("sum_ab").to_pylist() == [5, 7, 9]


def test_mutate_replaces_in_place(mock_data):
    result = mutate(mock_data, a=col("a") * 10)
    assert result.column_names == ["a", "b", "c"]
    assert result.column("a").to_pylist() == [10, 20, 30]
    assert mock_data.column("a").to_pylist() == [1, 2, 3]


def test_mutate_sees_previous_columns(mock_data):
    result = mutate(mock_data, d=col("a") + 1, e=col("d") * 2)
    assert result.column("e").to_pylist() == [4, 6, 8]


def test_mutate_with_dict(mock_data):
    result = mutate(mock_data, {"x": col("a") - col("c")})
    assert result.column("x").to_pylist() == [-6, -6, -6]


def test_mutate_literal_is_repeated(mock_data):
    result = mutate(mock_data, flag=lit(True), label="x")
    assert result.column("flag").to_pylist() == [True, True, True]
    assert result.column("label").to_pylist() == ["x", "x", "x"]


def test_mutate_aggregation_is_repeated(mock_data):
    result = mutate(mock_data, centered=col("a") - mean("a"))
    assert result.column("centered").to_pylist() == [-1.0, 0.0, 1.0]


def test_mutate_none_drops_column(mock_data):
    result = mutate(mock_data, b=None)
    assert result.column_names == ["a", "c"]


def test_mutate_missing_values():
    t = Table.from_pydict({"distance": [100, None], "air_time": [50, 20]})
    result = mutate(t, speed=col("distance") / col("air_time") * 60)
    assert result.column("speed").to_pylist() == [120.0, None]


def test_mutate_rowwise(mock_data):
    result = mutate(mock_data, biggest=rowwise(lambda row: max(row.values())))
    assert result.column("biggest").to_pylist() == [7, 8, 9]


def test_mutate_unknown_column(mock_data):
    with pytest.raises(ColumnNotFound):
        mutate(mock_data, d=col("z") + 1)


def test_mutate_type_mismatch():
    t = Table.from_pydict({"name": ["a", "b"], "n": [1, 2]})
    with pytest.raises(TypeMismatch):
        mutate(t, bad=col("name") * col("n"))


def test_mutate_wrong_length(mock_data):
    with pytest.raises(ValueError):
        mutate(mock_data, d=pa.array([1, 2]))


def test_mutate_grouping_keeps_row_order():
    t = Table.from_pydict(
        {"team": ["a", "b", "a", "b"], "score": [1, 10, 3, 20]}
    )
    result = mutate(group_by(t, "team"), centered=col("score") - mean("score"))
    assert isinstance(result, Grouping)
    assert result.keys == ["team"]
    table = result.ungroup()
    assert table.column("team").to_pylist() == ["a", "b", "a", "b"]
    assert table.column("centered").to_pylist() == [-1.0, -5.0, 1.0, 5.0]


def test_transmute(mock_data):
    result = transmute(mock_data, ab=col("a") + col("b"), abc=col("ab") + col("c"))
    assert result.column_names == ["ab", "abc"]
    assert result.column("abc").to_pylist() == [12, 15, 18]


def test_transmute_grouping_keeps_keys():
    t = Table.from_pydict({"team": ["a", "b", "a"], "score": [1, 10, 3]})
    result = transmute(group_by(t, "team"), best=col("score") == mean("score") + 1)
    assert isinstance(result, Grouping)
    assert result.ungroup().column_names == ["team", "best"]
    assert result.ungroup().column("best").to_pylist() == [False, False, True]


def test_mutate_grouping_kinds_differ_between_groups():
    t = Table.from_pydict({"g": ["a", "b"], "x": [1, 2]})
    label = rowwise(lambda row: 1 if row["g"] == "a" else "s")
    with pytest.raises(TypeMismatch):
        mutate(group_by(t, "g"), y=label)
