"""Evaluation of structured rules against column values."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence

from valibook.core.rules import CrossColumn, NotNull, Range, Regex, Unique, ValidationRule
from valibook.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RuleResult:
    """Outcome of one rule over one column."""

    rule: ValidationRule
    checked: int
    failed_count: int = 0
    samples: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.failed_count == 0


def _as_number(value: str) -> Optional[float]:
    try:
        return float(value)
    except ValueError:
        return None


class RuleEvaluator:
    """Apply a rule's predicate to every row of its column.

    Example:
        >>> result = RuleEvaluator().evaluate(rule, ["a", "", "b"])
        >>> result.failed_count
        1
    """

    def __init__(self, sample_limit: int = 10):
        self.sample_limit = sample_limit

    def evaluate(
        self,
        rule: ValidationRule,
        column_values: Sequence[str],
        dependency: Optional[Mapping[int, str]] = None,
    ) -> RuleResult:
        """Evaluate a rule.

        Args:
            rule: Rule to apply
            column_values: Trimmed value of the rule's column per row
            dependency: Row index to value of the column a CrossColumn rule
                depends on

        Returns:
            RuleResult with the failing row count and sample values
        """
        p = rule.predicate
        result = RuleResult(rule=rule, checked=len(column_values))

        if isinstance(p, NotNull):
            failing = [i for i, v in enumerate(column_values) if not v]
            result.failed_count = len(failing)
            result.samples = [f"(empty) row {i + 1}" for i in failing[: self.sample_limit]]

        elif isinstance(p, Unique):
            counts = Counter(v for v in column_values if v)
            repeated = [(v, n) for v, n in counts.items() if n > 1]
            result.failed_count = sum(n - 1 for _, n in repeated)
            result.samples = [f"{v} ({n}x)" for v, n in repeated[: self.sample_limit]]

        elif isinstance(p, Regex):
            failing = [v for v in column_values if v and not p.compiled.search(v)]
            result.failed_count = len(failing)
            result.samples = self._distinct(failing)

        elif isinstance(p, Range):
            failing = [v for v in column_values if v and not self._in_range(p, v)]
            result.failed_count = len(failing)
            result.samples = self._distinct(failing)

        elif isinstance(p, CrossColumn):
            dependency = dependency or {}
            failing_rows = []
            for i, value in enumerate(column_values):
                other = dependency.get(i, "")
                required = bool(other) if p.when_value is None else other == p.when_value
                if required and not value:
                    failing_rows.append((i, other))
            result.failed_count = len(failing_rows)
            result.samples = [
                f"row {i + 1}: {p.depends_on}={other}"
                for i, other in failing_rows[: self.sample_limit]
            ]

        else:
            raise TypeError(f"Unsupported rule predicate: {p!r}")

        if result.failed_count:
            logger.debug(
                f"Rule {rule.id} ({rule.rule_type}) on {rule.table}.{rule.column}: "
                f"{result.failed_count} failures"
            )
        return result

    @staticmethod
    def _in_range(p: Range, value: str) -> bool:
        number = _as_number(value)
        if number is None:
            return False
        if p.minimum is not None and number < p.minimum:
            return False
        if p.maximum is not None and number > p.maximum:
            return False
        return True

    def _distinct(self, values: Sequence[str]) -> List[str]:
        return list(dict.fromkeys(values))[: self.sample_limit]
