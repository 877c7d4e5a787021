import pytest

from tidyground.compute import arrange, pivot_longer, pivot_wider, starts_with
from tidyground.errors import AmbiguousPivot, ColumnNotFound, TypeMismatch
from tidyground.model import Kind, Table

CASES_WIDE = Table.from_pydict(
    {
        "country": ["Afghanistan", "Brazil", "China"],
        "1999": [745, 37737, 212258],
        "2000": [2666, 80488, 213766],
    }
)

CASES_LONG = Table.from_pydict(
    {
        "country": ["Afghanistan", "Afghanistan", "Brazil", "Brazil"],
        "year": [1999, 1999, 2000, 2000],
        "type": ["cases", "population", "cases", "population"],
        "count": [745, 19987071, 80488, 174504898],
    }
)


def test_pivot_longer():
    result = pivot_longer(CASES_WIDE, ["1999", "2000"], names_to="year", values_to="cases")
    assert result.column_names == ["country", "year", "cases"]
    assert result.num_rows == CASES_WIDE.num_rows * 2
    assert result.column("country").to_pylist() == [
        "Afghanistan",
        "Afghanistan",
        "Brazil",
        "Brazil",
        "China",
        "China",
    ]
    assert result.column("year").to_pylist() == ["1999", "2000"] * 3
    assert result.column("cases").to_pylist() == [
        745,
        2666,
        37737,
        80488,
        212258,
        213766,
    ]


def test_pivot_longer_default_names():
    result = pivot_longer(CASES_WIDE, ["1999"])
    assert result.column_names == ["country", "2000", "name", "value"]


def test_pivot_longer_names_transform():
    result = pivot_longer(
        CASES_WIDE, ["1999", "2000"], names_to="year", values_to="cases", names_transform=int
    )
    assert result.column("year").kind == Kind.INTEGER


def test_pivot_longer_selector():
    t = Table.from_pydict({"id": [1], "wk1": [5], "wk2": [None]})
    result = pivot_longer(t, starts_with("wk"), names_to="week")
    assert result.to_pydict() == {"id": [1, 1], "week": ["wk1", "wk2"], "value": [5, None]}


def test_pivot_longer_drop_missing():
    t = Table.from_pydict({"id": [1, 2], "wk1": [5, None], "wk2": [None, 7]})
    result = pivot_longer(t, ["wk1", "wk2"], values_drop_missing=True)
    assert result.to_pydict() == {"id": [1, 2], "name": ["wk1", "wk2"], "value": [5, 7]}


def test_pivot_longer_promotes_numbers():
    t = Table.from_pydict({"id": [1], "a": [1], "b": [2.5]})
    result = pivot_longer(t, ["a", "b"])
    assert result.column("value").kind == Kind.REAL
    assert result.column("value").to_pylist() == [1.0, 2.5]


def test_pivot_longer_incompatible_kinds():
    t = Table.from_pydict({"id": [1], "a": [1], "b": ["x"]})
    with pytest.raises(TypeMismatch):
        pivot_longer(t, ["a", "b"])


def test_pivot_longer_unknown_column():
    with pytest.raises(ColumnNotFound):
        pivot_longer(CASES_WIDE, ["1999", "2001"])


def test_pivot_wider():
    result = pivot_wider(CASES_LONG, names_from="type", values_from="count")
    assert result.to_pydict() == {
        "country": ["Afghanistan", "Brazil"],
        "year": [1999, 2000],
        "cases": [745, 80488],
        "population": [19987071, 174504898],
    }


def test_pivot_wider_absent_combinations():
    t = Table.from_pydict(
        {"id": ["a", "a", "b"], "key": ["x", "y", "x"], "val": [1, 2, None]}
    )
    result = pivot_wider(t, "key", "val")
    assert result.to_pydict() == {"id": ["a", "b"], "x": [1, None], "y": [2, None]}
    filled = pivot_wider(t, "key", "val", values_fill=0)
    # Only absent combinations are filled, missing values are kept.
    assert filled.to_pydict() == {"id": ["a", "b"], "x": [1, None], "y": [2, 0]}


def test_pivot_wider_missing_name():
    t = Table.from_pydict({"id": [1, 1], "key": ["x", None], "val": [1, 2]})
    assert pivot_wider(t, "key", "val").column_names == ["id", "x", "NA"]


def test_pivot_wider_without_id_columns():
    t = Table.from_pydict({"key": ["x", "y"], "val": [1, 2]})
    assert pivot_wider(t, "key", "val").to_pydict() == {"x": [1], "y": [2]}


def test_pivot_wider_ambiguous():
    t = Table.from_pydict(
        {"id": ["a", "a"], "key": ["x", "x"], "val": [1, 2]}
    )
    with pytest.raises(AmbiguousPivot) as err:
        pivot_wider(t, "key", "val")
    assert err.value.key == ("a",)
    assert err.value.name == "x"


def test_pivot_wider_unknown_column():
    with pytest.raises(ColumnNotFound):
        pivot_wider(CASES_LONG, "kind", "count")


def test_longer_then_wider_roundtrip():
    longer = pivot_longer(CASES_WIDE, ["1999", "2000"], names_to="year", values_to="cases")
    wider = pivot_wider(longer, names_from="year", values_from="cases")
    assert wider.equals(arrange(CASES_WIDE, "country"))


def test_pivot_wider_fill_missing_only_column():
    t = Table.from_pydict({"id": [1, 2], "key": ["a", "b"], "val": [None, None]})
    result = pivot_wider(t, "key", "val", values_fill=0)
    assert result.to_pydict() == {"id": [1, 2], "a": [None, 0], "b": [0, None]}
    assert result.column("a").kind == Kind.INTEGER


def test_pivot_wider_fill_wrong_kind():
    t = Table.from_pydict({"id": [1, 2], "key": ["a", "b"], "val": [1, 2]})
    with pytest.raises(TypeMismatch):
        pivot_wider(t, "key", "val", values_fill="none")
