import pytest

from tidyground.compute import (
    between,
    contains,
    ends_with,
    everything,
    exclude,
    matches,
    rename,
    select,
    starts_with,
)
from tidyground.compute.selection import resolve_columns
from tidyground.errors import ColumnNotFound
from tidyground.model import Table


@pytest.fixture
def flights():
    return Table.from_pydict(
        {
            "year": [2013, 2013],
            "month": [1, 1],
            "day": [1, 2],
            "dep_time": [517, 533],
            "arr_time": [830, 850],
            "carrier": ["UA", "AA"],
        }
    )


def test_select_by_name(flights):
    result = select(flights, "carrier", "year")
    assert result.column_names == ["carrier", "year"]
    assert result.column("carrier").to_pylist() == ["UA", "AA"]


def test_select_duplicates_appear_once(flights):
    assert select(flights, "day", "year", "day").column_names == ["day", "year"]


def test_select_everything_is_identity(flights):
    assert select(flights, everything()).equals(flights)


def test_select_moves_columns_first(flights):
    assert select(flights, "carrier", everything()).column_names == [
        "carrier",
        "year",
        "month",
        "day",
        "dep_time",
        "arr_time",
    ]


def test_between(flights):
    assert select(flights, between("year", "day")).column_names == [
        "year",
        "month",
        "day",
    ]
    assert select(flights, between("day", "year")).column_names == [
        "day",
        "month",
        "year",
    ]


def test_negated_selectors(flights):
    assert select(flights, ~between("year", "day")).column_names == [
        "dep_time",
        "arr_time",
        "carrier",
    ]
    assert select(flights, exclude("year", "carrier")).column_names == [
        "month",
        "day",
        "dep_time",
        "arr_time",
    ]


def test_negation_after_inclusion(flights):
    result = select(flights, ends_with("_time"), "day", ~starts_with("arr"))
    assert result.column_names == ["dep_time", "day"]


def test_name_patterns(flights):
    assert select(flights, starts_with("d")).column_names == ["day", "dep_time"]
    assert select(flights, ends_with("time")).column_names == ["dep_time", "arr_time"]
    assert select(flights, contains("ar")).column_names == [
        "year",
        "arr_time",
        "carrier",
    ]
    assert select(flights, matches(r"^[a-z]{3}$")).column_names == ["day"]


def test_patterns_are_literal(flights):
    assert select(flights, contains(".")).column_names == []


def test_select_unknown_column(flights):
    with pytest.raises(ColumnNotFound) as err:
        select(flights, "year", "hour")
    assert err.value.column == "hour"
    with pytest.raises(ColumnNotFound):
        select(flights, between("year", "hour"))


def test_select_invalid_rule(flights):
    with pytest.raises(ValueError):
        select(flights, 1)


def test_resolve_columns_flattens_lists():
    assert resolve_columns(["a", "b", "c"], [["c", "a"], "b"]) == ["c", "a", "b"]


def test_select_on_table_method(flights):
    assert flights.select("month").column_names == ["month"]


def test_rename(flights):
    result = rename(flights, yr="year", dep="dep_time")
    assert result.column_names == ["yr", "month", "day", "dep", "arr_time", "carrier"]
    assert result.column("yr").to_pylist() == [2013, 2013]


def test_rename_with_mapping(flights):
    result = flights.rename({"airline": "carrier"})
    assert result.column_names[-1] == "airline"


def test_rename_unknown_column(flights):
    with pytest.raises(ColumnNotFound):
        rename(flights, hour="dep_hour")
