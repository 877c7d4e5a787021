import datetime

from tidyground.model import Table
from tidyground.utils.tabulate import format_value, tabulate


def test_tabulate():
    t = Table.from_pydict({"Product": ["Videogame", "Laptop"], "Price": [66.5, 38.72]})
    assert tabulate(t).splitlines() == [
        "Product   | Price",
        "--------- | -----",
        "Videogame | 66.50",
        "Laptop    | 38.72",
    ]


def test_tabulate_truncates_rows():
    t = Table.from_pydict({"x": list(range(25))})
    lines = tabulate(t).splitlines()
    assert len(lines) == 2 + 20 + 1
    assert lines[-1] == "... and 5 more rows"


def test_format_value():
    assert format_value(None) == "NA"
    assert format_value(True) == "true"
    assert format_value(1.0) == "1.00"
    assert format_value(7) == "7"
    assert format_value("x" * 40) == "x" * 27 + "..."
    assert format_value(datetime.date(2013, 1, 1)) == "2013-01-01"
