"""Tests for row reconciliation."""

import pytest

from valibook.core.types import TableKind
from valibook.core.validation import FindingKind, ReconciliationChecker, ScopeFilter
from valibook.errors import SetupError


def reconcile(builder, source, target, scope=None, codebooks=None):
    """Reconcile two tables of a built project using their stored links."""
    store = builder.store
    context = builder.context()
    links = [
        link
        for link in store.links()
        if store.table_of(link.checked_column_id).name == target
        and store.table_of(link.reference_column_id).name == source
    ]
    key_link = next((link for link in links if link.is_key), None)
    value_links = [link for link in links if link is not key_link]
    return ReconciliationChecker().reconcile(
        source=store.table(source),
        source_rows=context.rows(source),
        target=store.table(target),
        target_rows=context.rows(target),
        key_link=key_link,
        value_links=value_links,
        scope=scope,
        codebooks=codebooks,
    )


def test_mismatch_and_missing_row(scenario_a):
    """Changed values and absent rows are both reported."""
    result = reconcile(scenario_a, "src", "tgt")

    assert [(f.kind, f.key) for f in result.findings] == [
        (FindingKind.MISMATCH, "2"),
        (FindingKind.MISSING_ROW, "3"),
    ]
    mismatch = result.mismatches[0]
    assert mismatch.column == "amt"
    assert mismatch.expected == "20"
    assert mismatch.actual == "25"
    assert mismatch.join_key == "id"
    assert result.compared_rows == 2
    assert result.source_rows == 3


def test_extra_rows_are_informational(builder):
    """Checked rows without a source row are reported but do not fail."""
    builder.add("src", TableKind.SOURCE, {"id": [1], "amt": [10]})
    builder.add("tgt", TableKind.TARGET, {"id": [1, 4], "amt": [10, 40]})
    builder.link("tgt.id", "src.id", is_key=True)
    builder.link("tgt.amt", "src.amt")

    result = reconcile(builder, "src", "tgt")

    assert [f.key for f in result.extra_rows] == ["4"]
    assert result.failures == []


def test_first_checked_row_wins(builder):
    """Repeated checked keys are compared using their first row."""
    builder.add("src", TableKind.SOURCE, {"id": [1], "amt": [10]})
    builder.add("tgt", TableKind.TARGET, {"id": [1, 1], "amt": [10, 99]})
    builder.link("tgt.id", "src.id", is_key=True)
    builder.link("tgt.amt", "src.amt")

    assert reconcile(builder, "src", "tgt").findings == []


def test_duplicate_source_key(builder):
    """A non-unique source key cannot be reconciled."""
    builder.add("src", TableKind.SOURCE, {"id": [1, 1, 2], "amt": [10, 11, 20]})
    builder.add("tgt", TableKind.TARGET, {"id": [1, 2], "amt": [10, 20]})
    builder.link("tgt.id", "src.id", is_key=True)
    builder.link("tgt.amt", "src.amt")

    with pytest.raises(SetupError, match="Duplicate key values"):
        reconcile(builder, "src", "tgt")


def test_missing_key_link(builder):
    """Pairs without a key link are a setup error."""
    builder.add("src", TableKind.SOURCE, {"id": [1], "amt": [10]})
    builder.add("tgt", TableKind.TARGET, {"id": [1], "amt": [10]})
    builder.link("tgt.amt", "src.amt")

    with pytest.raises(SetupError, match="No Primary Key defined for src vs tgt"):
        reconcile(builder, "src", "tgt")


def test_scope_limits_source_rows(scenario_a):
    """Out-of-scope source rows are neither missing nor compared."""
    result = reconcile(scenario_a, "src", "tgt", scope=ScopeFilter("id", frozenset({"1"})))

    assert result.findings == []
    assert result.source_rows == 1
    assert result.compared_rows == 1


def test_empty_scope(scenario_a):
    """An empty scope leaves nothing to reconcile."""
    result = reconcile(scenario_a, "src", "tgt", scope=ScopeFilter("id", frozenset()))

    assert result.findings == []
    assert result.source_rows == 0


def test_unknown_scope_column(scenario_a):
    """The scope column must exist in the source table."""
    with pytest.raises(SetupError, match="Scope column region"):
        reconcile(scenario_a, "src", "tgt", scope=ScopeFilter("region", frozenset({"1"})))


def test_codebook_violation(builder):
    """Values outside a linked codebook are reported."""
    builder.add("codes", TableKind.FORBIDDEN, {"code": ["CZ", "SK"]})
    builder.add("src", TableKind.SOURCE, {"id": [1, 2], "country": ["CZ", "XX"]})
    builder.add("tgt", TableKind.TARGET, {"id": [1, 2], "country": ["CZ", "XX"]})
    builder.link("tgt.id", "src.id", is_key=True)
    builder.link("tgt.country", "src.country", forbidden_table_id="codes")

    result = reconcile(builder, "src", "tgt", codebooks={"codes": {"CZ", "SK"}})

    assert result.mismatches == []
    assert [(f.key, f.actual) for f in result.codebook_violations] == [("2", "XX")]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
