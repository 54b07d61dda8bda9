"""Tests for the project store."""

import pytest

from valibook.core.rules import rule_from_dict
from valibook.core.store import ProjectStore
from valibook.core.types import LinkMetadata, LinkSuggestion, LinkType, TableKind
from valibook.core.value_index import profile_table
from valibook.errors import TableExistsError, UnknownColumnError, UnknownTableError


@pytest.fixture
def store():
    store = ProjectStore()
    store.add_table(profile_table("src", TableKind.SOURCE, ["id", "name"], [["1", "a"]]))
    store.add_table(profile_table("tgt", TableKind.TARGET, ["id", "name"], [["1", "a"]]))
    return store


def test_duplicate_table_rejected(store):
    """Adding an existing table needs overwrite."""
    with pytest.raises(TableExistsError):
        store.add_table(profile_table("src", TableKind.SOURCE, ["id"], []))

    store.add_table(profile_table("src", TableKind.FORBIDDEN, ["id"], []), overwrite=True)
    assert store.table("src").kind == TableKind.FORBIDDEN


def test_unknown_lookups(store):
    """Unknown tables and columns raise KeyError subclasses."""
    with pytest.raises(UnknownTableError):
        store.table("nope")
    with pytest.raises(UnknownColumnError):
        store.column("src:9")
    with pytest.raises(KeyError):
        store.find_column("src", "missing")


def test_link_last_write_wins(store):
    """A column has at most one link; the latest replaces earlier ones."""
    store.apply_link("tgt:0", "src:0")
    store.apply_link("tgt:0", "src:1", LinkMetadata(is_key=True))

    link = store.link_of("tgt:0")
    assert link.reference_column_id == "src:1"
    assert link.is_key
    assert len(store.links()) == 1
    assert store.column("tgt:0").linked_to_column_id == "src:1"


def test_self_link_rejected(store):
    """A column cannot link to itself."""
    with pytest.raises(ValueError):
        store.apply_link("tgt:0", "tgt:0")


def test_remove_table_cascades_links(store):
    """Removing a table drops links in both directions."""
    store.apply_link("tgt:0", "src:0")
    store.apply_link("tgt:1", "src:1")

    store.remove_table("src")

    assert store.links() == []
    assert store.column("tgt:0").linked_to_column_id is None
    assert not store.has_table("src")


def test_accept_key_suggestion_marks_primary_key(store):
    """Accepting a key suggestion flags the reference column as key."""
    suggestion = LinkSuggestion(
        source_column_id="src:0",
        target_column_id="tgt:0",
        match_percentage=100,
        common_values=1,
        score=1.4,
        link_type=LinkType.MAPPING,
        is_key=True,
    )
    link = store.accept(suggestion)

    assert link.metadata.auto_discovered
    assert link.metadata.is_key
    assert store.table("src").primary_key.name == "id"


def test_single_primary_key(store):
    """Setting a key clears the previous one."""
    store.set_primary_key("src", "id")
    store.set_primary_key("src", "name")
    assert [c.name for c in store.table("src").columns if c.is_primary_key] == ["name"]


def test_rules_skip_unknown_columns(store):
    """Rules for unknown columns are not stored."""
    added = store.add_rules(
        [
            rule_from_dict({"id": "r1", "table": "src", "column": "id", "type": "NOT_NULL"}),
            rule_from_dict({"id": "r2", "table": "src", "column": "nope", "type": "UNIQUE"}),
        ]
    )
    assert [r.id for r in added] == ["r1"]
    assert store.delete_rule("r1")
    assert not store.delete_rule("r1")


def test_save_and_load(store, tmp_path):
    """Tables, locations, links and rules survive a save/load cycle."""
    store.add_table(
        profile_table("codes", TableKind.FORBIDDEN, ["code"], [["X"]]), location="codes.csv"
    )
    store.set_validation_scope("tgt", "id")
    store.apply_link("tgt:1", "src:1", LinkMetadata(forbidden_table_id="codes"))
    store.add_rules(
        [rule_from_dict({"id": "r1", "table": "tgt", "column": "name", "type": "REGEX", "value": "^[a-z]+$"})]
    )

    path = store.save(tmp_path / "project.json")
    loaded = ProjectStore.load(path)

    assert [t.name for t in loaded.tables()] == ["src", "tgt", "codes"]
    assert loaded.location_of("codes") == "codes.csv"
    assert loaded.table("tgt").scope_column.name == "id"
    assert loaded.link_of("tgt:1").metadata.forbidden_table_id == "codes"
    assert loaded.rule("r1").rule_value == "^[a-z]+$"


def test_open_missing_project(tmp_path):
    """Opening a missing project starts an empty one."""
    store = ProjectStore.open(tmp_path / "new.json")
    assert store.tables() == []
    assert store.path == tmp_path / "new.json"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
