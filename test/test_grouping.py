import pytest

from tidyground.compute import col, mean, n
from tidyground.errors import ColumnNotFound
from tidyground.model import Grouping, Table, group_by, ungroup

TEST_DATA = Table.from_pydict(
    {
        "city": ["New York", "New York", "Los Angeles", "Los Angeles", "New York"],
        "shop": ["Shop A", "Shop B", "Shop A", "Shop A2", "Shop B"],
        "n_employees": [10, 15, 8, 12, 20],
    }
)


def test_groups_in_order_of_first_appearance():
    grouping = group_by(TEST_DATA, "city")
    assert isinstance(grouping, Grouping)
    assert len(grouping) == 2
    assert [g.key for g in grouping] == [("New York",), ("Los Angeles",)]
    assert [g.indices.to_pylist() for g in grouping] == [[0, 1, 4], [2, 3]]


def test_multiple_keys():
    grouping = TEST_DATA.group_by("city", "shop")
    assert [g.key for g in grouping] == [
        ("New York", "Shop A"),
        ("New York", "Shop B"),
        ("Los Angeles", "Shop A"),
        ("Los Angeles", "Shop A2"),
    ]
    assert grouping.keys == ["city", "shop"]


def test_every_row_in_exactly_one_group():
    grouping = group_by(TEST_DATA, "shop")
    rows = sorted(i for g in grouping for i in g.indices.to_pylist())
    assert rows == list(range(TEST_DATA.num_rows))


def test_missing_values_form_one_group():
    t = Table.from_pydict({"k": [None, 1, None], "v": [1, 2, 3]})
    grouping = group_by(t, "k")
    assert [(g.key, g.indices.to_pylist()) for g in grouping] == [
        ((None,), [0, 2]),
        ((1,), [1]),
    ]


def test_group_tables():
    grouping = group_by(TEST_DATA, "city")
    tables = dict(grouping.tables())
    assert tables[("Los Angeles",)].column("n_employees").to_pylist() == [8, 12]


def test_ungroup_returns_the_same_table():
    grouping = group_by(TEST_DATA, "city")
    assert ungroup(grouping) is TEST_DATA
    assert grouping.ungroup().equals(TEST_DATA)


def test_group_by_requires_keys():
    with pytest.raises(ValueError):
        group_by(TEST_DATA)


def test_group_by_unknown_column():
    with pytest.raises(ColumnNotFound):
        group_by(TEST_DATA, "country")


def test_empty_table():
    t = Table.from_pydict({"k": []})
    assert len(group_by(t, "k")) == 0


def test_grouped_filter_uses_group_aggregations():
    grouping = group_by(TEST_DATA, "city")
    result = grouping.filter(col("n_employees") > mean("n_employees"))
    assert isinstance(result, Grouping)
    assert result.keys == ["city"]
    assert result.ungroup().column("shop").to_pylist() == ["Shop A2", "Shop B"]


def test_grouped_summarize():
    result = group_by(TEST_DATA, "city").summarize(n=n())
    assert result.to_pydict() == {"city": ["New York", "Los Angeles"], "n": [3, 2]}


def test_str():
    grouping = group_by(TEST_DATA, "city")
    assert str(grouping) == (
        "Grouping(keys=['city'], groups=2, "
        "Table(columns=['city', 'shop', 'n_employees'], rows=5))"
    )


def test_nan_keys_form_one_group():
    t = Table.from_pydict({"k": [float("nan"), 1.0, float("nan")], "v": [1, 2, 3]})
    grouping = group_by(t, "k")
    assert len(grouping) == 2
    assert [g.indices.to_pylist() for g in grouping] == [[0, 2], [1]]
