import pyarrow as pa
import pytest

from tidyground.compute import col, filter, lit, mean
from tidyground.errors import ColumnNotFound, TypeMismatch
from tidyground.model import Table, group_by

FLIGHTS = Table.from_pydict(
    {
        "month": [1, 1, 11, 12, 12, None],
        "day": [1, 2, 1, 25, None, 3],
        "dep_delay": [2, -4, 15, None, 30, 1],
    }
)


def test_filter_single_predicate():
    result = filter(FLIGHTS, col("month") == 1)
    assert result.column("day").to_pylist() == [1, 2]


def test_filter_keeps_order():
    result = filter(FLIGHTS, col("dep_delay") > 0)
    assert result.column("dep_delay").to_pylist() == [2, 15, 30, 1]


def test_filter_missing_predicate_drops_row():
    result = filter(FLIGHTS, col("month").isin([11, 12]))
    assert result.column("month").to_pylist() == [11, 12, 12]
    assert all(m in (11, 12) for m in result.column("month"))


def test_multiple_predicates_are_and():
    result = filter(FLIGHTS, col("month") == 12, col("day") == 25)
    combined = filter(FLIGHTS, (col("month") == 12) & (col("day") == 25))
    assert result.equals(combined)
    assert result.num_rows == 1


def test_filter_composition():
    p1 = col("month") >= 11
    p2 = col("dep_delay") > 10
    nested = filter(filter(FLIGHTS, p1), p2)
    assert nested.equals(filter(FLIGHTS, p1 & p2))
    assert nested.equals(FLIGHTS.filter(p1, p2))


def test_filter_with_aggregation():
    result = filter(FLIGHTS, col("dep_delay") > mean("dep_delay", skip_missing=True))
    assert result.column("dep_delay").to_pylist() == [15, 30]


def test_filter_no_predicates():
    assert filter(FLIGHTS).equals(FLIGHTS)


def test_filter_missing_literal_keeps_nothing():
    result = filter(FLIGHTS, lit(None))
    assert result.num_rows == 0
    assert result.column_names == FLIGHTS.column_names


def test_filter_on_empty_table():
    empty = FLIGHTS.take(pa.array([], type=pa.int64()))
    assert filter(empty, col("month") == 1).num_rows == 0


def test_filter_unknown_column():
    with pytest.raises(ColumnNotFound):
        filter(FLIGHTS, col("year") == 2013)


def test_filter_predicate_must_be_boolean():
    with pytest.raises(TypeMismatch):
        filter(FLIGHTS, col("month") + 1)


def test_filter_grouping():
    grouping = group_by(FLIGHTS, "month")
    result = filter(grouping, col("dep_delay") == mean("dep_delay"))
    # Only the single row groups have a row equal to the mean,
    # groups with missing values have a missing mean.
    assert result.keys == ["month"]
    assert result.ungroup().column("month").to_pylist() == [11, None]


def test_filter_grouping_checks_every_predicate():
    grouping = group_by(FLIGHTS, "month")
    # The first predicate leaves every group empty.
    with pytest.raises(ColumnNotFound):
        filter(grouping, col("dep_delay") > 100, col("year") == 2013)


def test_filter_empty_grouping_checks_columns():
    empty = group_by(FLIGHTS.take(pa.array([], type=pa.int64())), "month")
    assert len(empty) == 0
    with pytest.raises(ColumnNotFound):
        filter(empty, col("year") == 2013)
    assert filter(empty, col("day") == 1).ungroup().num_rows == 0
