"""Tests for rule parsing and evaluation."""

import pytest

from valibook.core.rules import CrossColumn, Range, Regex, rule_from_dict
from valibook.core.validation import RuleEvaluator
from valibook.errors import RuleDefinitionError


def _rule(rule_type, **extra):
    return rule_from_dict({"table": "t", "column": "c", "type": rule_type, **extra})


def test_parse_descriptors():
    """Descriptors become typed predicates."""
    assert isinstance(_rule("regex", value="^A").predicate, Regex)
    assert _rule("RANGE", min="1", max=5).predicate == Range(minimum=1.0, maximum=5.0)
    cross = _rule("CROSS_COLUMN", dependsOn="country", whenValue="CZ")
    assert cross.predicate == CrossColumn(depends_on="country", when_value="CZ")
    assert cross.rule_value == "country=CZ"
    assert _rule("NOT_NULL").severity == "ERROR"
    assert len(_rule("UNIQUE").id) == 12


@pytest.mark.parametrize(
    "descriptor",
    [
        {"table": "t", "column": "c", "type": "SOUNDEX"},
        {"table": "t", "type": "NOT_NULL"},
        {"table": "t", "column": "c", "type": "REGEX", "value": "(unclosed"},
        {"table": "t", "column": "c", "type": "REGEX"},
        {"table": "t", "column": "c", "type": "RANGE"},
        {"table": "t", "column": "c", "type": "RANGE", "min": 5, "max": 1},
        {"table": "t", "column": "c", "type": "RANGE", "min": "low"},
        {"table": "t", "column": "c", "type": "CROSS_COLUMN"},
        "not a mapping",
    ],
)
def test_invalid_descriptors(descriptor):
    """Malformed descriptors are rejected."""
    with pytest.raises(RuleDefinitionError):
        rule_from_dict(descriptor)


def test_not_null():
    """Empty values fail."""
    result = RuleEvaluator().evaluate(_rule("NOT_NULL"), ["a", "", "b", ""])
    assert result.failed_count == 2
    assert result.samples == ["(empty) row 2", "(empty) row 4"]


def test_unique():
    """Repeats fail, samples carry the occurrence count."""
    result = RuleEvaluator().evaluate(_rule("UNIQUE"), ["a", "b", "a", "a", "", ""])
    assert result.failed_count == 2
    assert result.samples == ["a (3x)"]


def test_regex():
    """Non-empty values not matching the pattern fail."""
    rule = _rule("REGEX", value="^[A-Z]{2}[0-9]+$")
    result = RuleEvaluator().evaluate(rule, ["CZ123", "cz1", "", "XX", "cz1"])
    assert result.failed_count == 3
    assert result.samples == ["cz1", "XX"]


def test_range():
    """Values outside the bounds and non-numbers fail."""
    rule = _rule("RANGE", min=0, max=100)
    result = RuleEvaluator().evaluate(rule, ["0", "100", "50.5", "101", "-1", "abc", ""])
    assert result.failed_count == 3
    assert result.samples == ["101", "-1", "abc"]


def test_cross_column():
    """The column is required where the dependency holds."""
    rule = _rule("CROSS_COLUMN", dependsOn="country", whenValue="CZ")
    result = RuleEvaluator().evaluate(
        rule, ["123", "", "", ""], dependency={0: "CZ", 1: "CZ", 2: "SK", 3: ""}
    )
    assert result.failed_count == 1
    assert result.samples == ["row 2: country=CZ"]

    any_value = _rule("CROSS_COLUMN", dependsOn="country")
    result = RuleEvaluator().evaluate(any_value, ["", ""], dependency={0: "SK", 1: ""})
    assert result.failed_count == 1


def test_sample_limit():
    """Samples are capped."""
    result = RuleEvaluator(sample_limit=2).evaluate(_rule("NOT_NULL"), [""] * 5)
    assert result.failed_count == 5
    assert len(result.samples) == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
