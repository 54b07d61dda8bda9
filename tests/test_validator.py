"""Tests for the validation run."""

import pytest

from valibook.core.rules import rule_from_dict
from valibook.core.types import TableKind
from valibook.core.validation import CheckStatus, CheckType, FindingKind, Validator


def validate(builder, **kwargs):
    return Validator(builder.store, builder.loader).validate(**kwargs)


def test_scenario_summary(scenario_a):
    """Integrity passes; one missing row and one mismatch fail."""
    report = validate(scenario_a)

    assert report.summary == {"totalChecks": 3, "passed": 1, "failed": 2}
    assert report.errors == ()
    assert [c.label for c in report.checks] == [
        "tgt.id -> src.id",
        "tgt rows present in src",
        "tgt.amt vs src.amt",
    ]
    assert [c.type for c in report.checks] == [
        CheckType.INTEGRITY,
        CheckType.RECONCILIATION,
        CheckType.RECONCILIATION,
    ]
    assert [f.key for f in report.findings(FindingKind.MISSING_ROW)] == ["3"]
    assert [f.key for f in report.findings(FindingKind.MISMATCH)] == ["2"]
    assert not report.is_clean


def test_integrity_error(builder):
    """Values missing from a referenced table fail integrity."""
    builder.add("customers", TableKind.TARGET, {"id": [1, 2]})
    builder.add("orders", TableKind.TARGET, {"customer_id": [1, 3, 3]})
    builder.link("orders.customer_id", "customers.id")

    report = validate(builder)

    assert len(report.errors) == 1
    assert report.errors[0].missing_values == ("3",)
    assert report.errors[0].missing_count == 2
    assert report.checks[0].checked == 3
    assert report.checks[0].failed == 2
    assert report.reconciliation == ()


def test_duplicate_source_key_is_setup_error(builder):
    """A duplicated source key is reported once and nothing is compared."""
    builder.add("src", TableKind.SOURCE, {"id": [1, 1, 2], "amt": [10, 11, 20]})
    builder.add("tgt", TableKind.TARGET, {"id": [1, 2], "amt": [10, 99]})
    builder.link("tgt.id", "src.id", is_key=True)
    builder.link("tgt.amt", "src.amt")

    report = validate(builder)

    assert len(report.setup_errors) == 1
    assert "Duplicate key values" in report.setup_errors[0].message
    assert report.findings(FindingKind.MISMATCH) == []
    assert report.checks[-1].type == CheckType.SETUP
    assert report.checks[-1].status == CheckStatus.ERROR


def test_setup_error_is_isolated_to_its_pair(builder):
    """A broken pair does not stop other pairs from being reconciled."""
    builder.add("src1", TableKind.SOURCE, {"id": [1, 1], "amt": [1, 2]})
    builder.add("tgt1", TableKind.TARGET, {"id": [1], "amt": [1]})
    builder.link("tgt1.id", "src1.id", is_key=True)
    builder.link("tgt1.amt", "src1.amt")
    builder.add("src2", TableKind.SOURCE, {"id": [1, 2, 3], "amt": [10, 20, 30]})
    builder.add("tgt2", TableKind.TARGET, {"id": [1, 2], "amt": [10, 25]})
    builder.link("tgt2.id", "src2.id", is_key=True)
    builder.link("tgt2.amt", "src2.amt")

    report = validate(builder)

    assert [s.pair for s in report.setup_errors] == ["src1 vs tgt1"]
    missing = report.findings(FindingKind.MISSING_ROW)
    assert [(f.target_table, f.key) for f in missing] == [("tgt2", "3")]
    mismatches = report.findings(FindingKind.MISMATCH)
    assert [(f.target_table, f.key, f.expected, f.actual) for f in mismatches] == [
        ("tgt2", "2", "20", "25")
    ]


def test_missing_key_is_setup_error(builder):
    """Source pairs without a key link cannot be reconciled."""
    builder.add("src", TableKind.SOURCE, {"id": [1], "amt": [10]})
    builder.add("tgt", TableKind.TARGET, {"id": [1], "amt": [10]})
    builder.link("tgt.amt", "src.amt")

    report = validate(builder)

    assert report.setup_errors[0].message == "No Primary Key defined for src vs tgt"


def test_forbidden_values(builder):
    """Blacklisted values in checked tables are reported."""
    builder.add("banned", TableKind.FORBIDDEN, {"value": ["X"]})
    builder.add("orders", TableKind.TARGET, {"code": ["A", "X", "X"]})

    report = validate(builder)

    assert len(report.forbidden) == 1
    assert report.forbidden[0].found_values == ("X",)
    assert report.forbidden[0].count == 1
    assert report.summary == {"totalChecks": 1, "passed": 0, "failed": 1}


def test_codebook_is_not_a_blacklist(builder):
    """A table used as a codebook only flags values outside it."""
    builder.add("codes", TableKind.FORBIDDEN, {"code": ["CZ", "SK"]})
    builder.add("src", TableKind.SOURCE, {"id": [1, 2], "country": ["CZ", "XX"]})
    builder.add("tgt", TableKind.TARGET, {"id": [1, 2], "country": ["CZ", "XX"]})
    builder.link("tgt.id", "src.id", is_key=True)
    builder.link("tgt.country", "src.country", forbidden_table_id="codes")

    report = validate(builder)

    assert report.forbidden == ()
    violations = report.findings(FindingKind.CODEBOOK_VIOLATION)
    assert [(f.key, f.actual) for f in violations] == [("2", "XX")]


def test_rule_failure(builder):
    """Stored rules are evaluated on their column."""
    builder.add("customers", TableKind.TARGET, {"id": [1, 2, 3], "vat": ["CZ1", "", ""]})
    builder.store.add_rules(
        [rule_from_dict({"table": "customers", "column": "vat", "type": "NOT_NULL"})]
    )

    report = validate(builder)

    assert len(report.rule_failures) == 1
    failure = report.rule_failures[0]
    assert failure.failed_count == 2
    assert failure.rule_type == "NOT_NULL"
    assert report.checks[0].type == CheckType.RULE


def test_unreadable_table_warns(scenario_a):
    """A table whose file is gone is skipped with a warning."""
    (scenario_a.root / "tgt.csv").unlink()

    report = validate(scenario_a)

    assert any(w.startswith("Skipping table tgt") for w in report.warnings)
    assert len(report.findings(FindingKind.MISSING_ROW)) == 3


def test_table_selection(scenario_a):
    """Only links from selected tables are checked."""
    assert validate(scenario_a, tables=["src"]).checks == ()

    report = validate(scenario_a, tables=["tgt", "nope"])
    assert report.summary["totalChecks"] == 3
    assert "Unknown table nope ignored" in report.warnings


def test_scope_table(scenario_a):
    """Source rows outside the scope table are ignored."""
    scenario_a.add("active", TableKind.RANGE, {"id": [1]})

    report = validate(scenario_a, scope_table="active")

    assert report.is_clean
    assert report.reconciliation == ()


def test_unknown_scope_table(scenario_a):
    """A missing scope table is a setup error."""
    report = validate(scenario_a, scope_table="nope")

    assert report.setup_errors[0].message == "Scope table nope not found"
    assert report.checks[0].type == CheckType.SETUP


def test_report_output(scenario_a):
    """The report serializes with its protocol."""
    report = validate(scenario_a)
    data = report.to_dict()

    assert set(data) == {
        "errors",
        "reconciliation",
        "forbidden",
        "ruleFailures",
        "summary",
        "setupErrors",
        "warnings",
        "checks",
        "protocol",
        "generatedAt",
    }
    assert data["reconciliation"][0]["type"] == "MISMATCH"
    assert report.protocol.startswith("VALIDATION PROTOCOL")
    assert "Status: FAILED" in report.protocol
    assert "[CONCLUSION]" in report.protocol


def test_results_are_deterministic(scenario_a):
    """Parallel runs produce the same checks in the same order."""
    first = Validator(scenario_a.store, scenario_a.loader, {"max_workers": 1}).validate()
    second = Validator(scenario_a.store, scenario_a.loader, {"max_workers": 8}).validate()

    assert first.checks == second.checks
    assert first.reconciliation == second.reconciliation


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
