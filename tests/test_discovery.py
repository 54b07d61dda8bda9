"""Tests for link discovery."""

import pytest

from valibook.core.linkage import DiscoveryEngine, DiscoveryMode
from valibook.core.types import LinkType, TableKind


def _discover(builder, mode=DiscoveryMode.ALL):
    store = builder.store
    return DiscoveryEngine().discover(
        store.tables(), builder.context(), mode=mode, existing_links=store.links()
    )


def test_mapping_with_key(builder):
    """Matched columns come from the winning source; id is the key."""
    builder.add("customers", TableKind.SOURCE, {"id": [1, 2, 3], "name": ["a", "b", "c"]})
    builder.add("crm", TableKind.TARGET, {"id": [1, 2], "name": ["a", "b"]})

    suggestions = _discover(builder, DiscoveryMode.MAPPINGS)

    pairs = {(s.target_column_id, s.source_column_id): s for s in suggestions}
    assert set(pairs) == {("crm:0", "customers:0"), ("crm:1", "customers:1")}
    key = pairs[("crm:0", "customers:0")]
    assert key.is_key
    assert key.match_percentage == 100
    assert key.common_values == 2
    assert not pairs[("crm:1", "customers:1")].is_key
    assert all(s.link_type == LinkType.MAPPING for s in suggestions)


def test_winner_is_single_table(builder):
    """All mappings of one target table come from the best-scoring table."""
    builder.add("weak", TableKind.SOURCE, {"code": ["A", "B", "Z"]})
    builder.add("strong", TableKind.SOURCE, {"code": ["A", "B"], "label": ["x", "y"]})
    builder.add("checked", TableKind.TARGET, {"code": ["A", "B"], "label": ["x", "y"]})

    suggestions = _discover(builder, DiscoveryMode.MAPPINGS)

    assert {s.source_column_id.split(":")[0] for s in suggestions} == {"strong"}
    assert len(suggestions) == 2


def test_ties_keep_first_table(builder):
    """Equal aggregate scores keep the first table in input order."""
    builder.add("first", TableKind.SOURCE, {"code": ["A", "B"]})
    builder.add("second", TableKind.SOURCE, {"code": ["A", "B"]})
    builder.add("checked", TableKind.TARGET, {"code": ["A", "B"]})

    suggestions = _discover(builder, DiscoveryMode.MAPPINGS)

    assert [s.source_column_id for s in suggestions] == ["first:0"]


def test_forbidden_winner_carries_table(builder):
    """Suggestions into a FORBIDDEN table name it as codebook."""
    builder.add("states", TableKind.FORBIDDEN, {"state": ["CZ", "SK"]})
    builder.add("orders", TableKind.TARGET, {"state": ["CZ", "SK", "CZ"]})

    suggestions = _discover(builder, DiscoveryMode.MAPPINGS)

    assert len(suggestions) == 1
    assert suggestions[0].forbidden_table_id == "states"


def test_no_matches_is_empty(builder):
    """Unrelated tables produce no suggestions."""
    builder.add("a", TableKind.SOURCE, {"alpha": ["1", "2"]})
    builder.add("b", TableKind.TARGET, {"beta": ["x", "y"]})

    assert _discover(builder) == []


def test_reference_suggested(builder):
    """A covered identifier pointing at a unique column is a reference."""
    builder.add("orders", TableKind.TARGET, {"customer_id": [1, 2, 2, 3]})
    builder.add("customers", TableKind.TARGET, {"customer_id": [1, 2, 3, 4]})

    suggestions = _discover(builder, DiscoveryMode.REFERENCES)

    assert len(suggestions) == 1
    ref = suggestions[0]
    assert ref.link_type == LinkType.REFERENCE
    assert ref.target_column_id == "orders:0"
    assert ref.source_column_id == "customers:0"
    assert ref.match_percentage == 100


def test_reference_needs_overlap_above_threshold(builder):
    """Two of three values shared is not enough for a reference."""
    builder.add("t1", TableKind.TARGET, {"orderId": [1, 2, 3]})
    builder.add("t2", TableKind.TARGET, {"orderId": [1, 2, 9]})

    assert _discover(builder, DiscoveryMode.REFERENCES) == []


def test_discovery_is_idempotent(builder):
    """Repeated runs agree, and accepted suggestions are not proposed again."""
    builder.add("customers", TableKind.SOURCE, {"id": [1, 2, 3], "name": ["a", "b", "c"]})
    builder.add("crm", TableKind.TARGET, {"id": [1, 2], "name": ["a", "b"]})

    first = _discover(builder)
    second = _discover(builder)
    assert [s.to_dict() for s in first] == [s.to_dict() for s in second]

    builder.store.accept_all(first)
    assert _discover(builder) == []


def test_candidate_values_beyond_sample(builder):
    """Candidate columns are searched past the sampled rows."""
    builder.add(
        "customers", TableKind.SOURCE, {"customer": [f"C{i}" for i in range(1, 1001)]}
    )
    builder.add("orders", TableKind.TARGET, {"client": [f"C{i}" for i in range(500, 520)]})

    suggestions = _discover(builder, DiscoveryMode.MAPPINGS)

    assert len(suggestions) == 1
    assert suggestions[0].source_column_id == "customers:0"
    assert suggestions[0].target_column_id == "orders:0"
    assert suggestions[0].match_percentage == 100
    assert suggestions[0].common_values == 20


def test_reference_values_beyond_sample(builder):
    """Referenced columns are searched past the sampled rows."""
    builder.add("invoices", TableKind.TARGET, {"orderId": list(range(1, 1001))})
    builder.add("lines", TableKind.TARGET, {"orderId": list(range(600, 700))})

    suggestions = _discover(builder, DiscoveryMode.REFERENCES)

    assert [(s.target_column_id, s.source_column_id) for s in suggestions] == [
        ("lines:0", "invoices:0")
    ]
    assert suggestions[0].match_percentage == 100
    assert suggestions[0].link_type == LinkType.REFERENCE

if __name__ == "__main__":
    pytest.main([__file__, "-v"])
