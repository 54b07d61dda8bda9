"""Tests for referential integrity checks."""

import pytest

from valibook.core.types import Column
from valibook.core.validation import IntegrityChecker


@pytest.fixture
def columns():
    fk = Column(id="orders:1", table_name="orders", name="customer_id", index=1)
    pk = Column(id="customers:0", table_name="customers", name="id", index=0)
    return fk, pk


def test_all_present(columns):
    """No error when every foreign value exists."""
    fk, pk = columns
    assert IntegrityChecker().check(fk, ["1", "2", "", "1"], pk, {"1", "2"}) is None


def test_missing_values(columns):
    """Missing counts rows; samples are distinct values in order."""
    fk, pk = columns
    error = IntegrityChecker().check(fk, ["1", "9", "9", "", "8", "2"], pk, {"1", "2"})

    assert error.missing_count == 3
    assert error.missing_values == ("9", "8")
    assert error.total_fk_values == 5
    assert error.more_count == 0
    assert error.to_dict()["fkColumn"] == "customer_id"
    assert error.to_dict()["pkTable"] == "customers"


def test_display_limit(columns):
    """Values beyond the display limit are counted, not shown."""
    fk, pk = columns
    values = [str(v) for v in range(15)]
    error = IntegrityChecker(display_limit=10).check(fk, values, pk, set())

    assert len(error.missing_values) == 10
    assert error.more_count == 5
    assert error.missing_count == 15


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
