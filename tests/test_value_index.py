"""Tests for value indexes and table profiling."""

import pytest

from valibook.core.types import TableKind
from valibook.core.value_index import ValueIndex, cell, profile_table


def test_cell_trims_and_pads():
    """Cells are trimmed; missing and None cells are empty."""
    row = [" a ", None, "b"]
    assert cell(row, 0) == "a"
    assert cell(row, 1) == ""
    assert cell(row, 5) == ""


def test_profile_table_names_blank_headers():
    """Blank headers get positional names."""
    table = profile_table("t", TableKind.SOURCE, ["id", "  ", None], [["1", "x", "y"]])
    assert [c.name for c in table.columns] == ["id", "Column_2", "Column_3"]
    assert [c.id for c in table.columns] == ["t:0", "t:1", "t:2"]
    assert table.row_count == 1


def test_profile_table_statistics():
    """Unique and null counts cover all rows; at most three samples shown."""
    rows = [["a"], ["b"], ["a"], [""], ["c"], ["d"]]
    table = profile_table("t", TableKind.TARGET, ["code"], rows)
    col = table.columns[0]

    assert col.unique_count == 4
    assert col.null_count == 1
    assert col.sample_values == ["a", "b", "c"]


def test_value_index_respects_sample_limit():
    """Value sets only hold values from the leading sample rows."""
    table = profile_table("t", TableKind.SOURCE, ["id"], [])
    rows = [[str(i)] for i in range(10)]
    index = ValueIndex.build(table, rows, sample_limit=3)

    assert index.values(0) == {"0", "1", "2"}
    assert index.stats(0).unique_count == 10
    assert index.uniqueness(0) == 1.0
    assert index.values(7) == set()


def test_uniqueness_of_repeated_values():
    """Uniqueness is distinct values over row count."""
    table = profile_table("t", TableKind.SOURCE, ["k"], [])
    index = ValueIndex.build(table, [["1"], ["1"], ["2"], ["3"]])
    assert index.uniqueness(0) == 0.75


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
