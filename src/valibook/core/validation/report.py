"""Validation findings and the report value object."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple


class CheckType(str, Enum):
    INTEGRITY = "INTEGRITY"
    RECONCILIATION = "RECONCILIATION"
    FORBIDDEN = "FORBIDDEN"
    RULE = "RULE"
    SETUP = "SETUP"


class CheckStatus(str, Enum):
    OK = "OK"
    ERROR = "ERROR"


class FindingKind(str, Enum):
    """Kinds of reconciliation findings."""

    MISMATCH = "MISMATCH"
    MISSING_ROW = "MISSING_ROW"
    EXTRA_ROW = "EXTRA_ROW"  # informational, never a failure
    CODEBOOK_VIOLATION = "CODEBOOK_VIOLATION"


@dataclass(frozen=True)
class CheckRecord:
    """One executed check and its outcome."""

    type: CheckType
    label: str
    status: CheckStatus
    checked: int = 0
    failed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "label": self.label,
            "status": self.status.value,
            "checked": self.checked,
            "failed": self.failed,
        }


@dataclass(frozen=True)
class SetupIssue:
    """A table pair or rule that could not be checked as configured."""

    pair: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"pair": self.pair, "message": self.message}


@dataclass(frozen=True)
class IntegrityError:
    """Foreign values absent from the referenced column."""

    fk_table: str
    fk_column: str
    pk_table: str
    pk_column: str
    missing_values: Tuple[str, ...]
    missing_count: int
    total_fk_values: int
    more_count: int = 0  # distinct missing values not shown

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fkTable": self.fk_table,
            "fkColumn": self.fk_column,
            "pkTable": self.pk_table,
            "pkColumn": self.pk_column,
            "missingValues": list(self.missing_values),
            "missingCount": self.missing_count,
            "totalFkValues": self.total_fk_values,
            "moreCount": self.more_count,
        }


@dataclass(frozen=True)
class ReconciliationFinding:
    """A row-level difference between a source table and a checked table."""

    kind: FindingKind
    source_table: str
    target_table: str
    join_key: str
    key: str
    column: Optional[str] = None
    expected: Optional[str] = None
    actual: Optional[str] = None

    @property
    def is_failure(self) -> bool:
        return self.kind != FindingKind.EXTRA_ROW

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "sourceTable": self.source_table,
            "targetTable": self.target_table,
            "joinKey": self.join_key,
            "key": self.key,
            "column": self.column,
            "expected": self.expected,
            "actual": self.actual,
        }


@dataclass(frozen=True)
class ForbiddenError:
    """Checked-column values found in a blacklist table."""

    target_table: str
    column: str
    forbidden_table: str
    forbidden_column: str
    found_values: Tuple[str, ...]
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "targetTable": self.target_table,
            "column": self.column,
            "forbiddenTable": self.forbidden_table,
            "forbiddenColumn": self.forbidden_column,
            "foundValues": list(self.found_values),
            "count": self.count,
        }


@dataclass(frozen=True)
class RuleFailure:
    """Rows of a column failing a validation rule."""

    rule_id: str
    table: str
    column: str
    rule_type: str
    rule_value: Optional[str]
    description: str
    severity: str
    failed_count: int
    samples: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ruleId": self.rule_id,
            "table": self.table,
            "column": self.column,
            "ruleType": self.rule_type,
            "ruleValue": self.rule_value,
            "description": self.description,
            "severity": self.severity,
            "failedCount": self.failed_count,
            "samples": list(self.samples),
        }


@dataclass
class PartialReport:
    """Findings of one unit of work, concatenated into the final report."""

    errors: List[IntegrityError] = field(default_factory=list)
    reconciliation: List[ReconciliationFinding] = field(default_factory=list)
    forbidden: List[ForbiddenError] = field(default_factory=list)
    rule_failures: List[RuleFailure] = field(default_factory=list)
    setup_errors: List[SetupIssue] = field(default_factory=list)
    checks: List[CheckRecord] = field(default_factory=list)

    def add_check(
        self, check_type: CheckType, label: str, checked: int, failed: int
    ) -> CheckRecord:
        record = CheckRecord(
            type=check_type,
            label=label,
            status=CheckStatus.ERROR if failed else CheckStatus.OK,
            checked=checked,
            failed=failed,
        )
        self.checks.append(record)
        return record

    def add_setup_error(self, pair: str, message: str) -> None:
        self.setup_errors.append(SetupIssue(pair=pair, message=message))
        self.checks.append(
            CheckRecord(type=CheckType.SETUP, label=pair, status=CheckStatus.ERROR)
        )


@dataclass(frozen=True)
class ValidationReport:
    """Result of one validation run. Built fresh each time, never mutated."""

    errors: Tuple[IntegrityError, ...] = ()
    reconciliation: Tuple[ReconciliationFinding, ...] = ()
    forbidden: Tuple[ForbiddenError, ...] = ()
    rule_failures: Tuple[RuleFailure, ...] = ()
    setup_errors: Tuple[SetupIssue, ...] = ()
    warnings: Tuple[str, ...] = ()
    checks: Tuple[CheckRecord, ...] = ()
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_parts(
        cls, parts: Iterable[PartialReport], warnings: Iterable[str] = ()
    ) -> ValidationReport:
        """Concatenate partial results in the given order."""
        parts = list(parts)
        return cls(
            errors=tuple(e for p in parts for e in p.errors),
            reconciliation=tuple(f for p in parts for f in p.reconciliation),
            forbidden=tuple(f for p in parts for f in p.forbidden),
            rule_failures=tuple(r for p in parts for r in p.rule_failures),
            setup_errors=tuple(s for p in parts for s in p.setup_errors),
            warnings=tuple(warnings),
            checks=tuple(c for p in parts for c in p.checks),
        )

    @property
    def passed(self) -> int:
        return sum(1 for c in self.checks if c.status == CheckStatus.OK)

    @property
    def failed(self) -> int:
        return sum(1 for c in self.checks if c.status == CheckStatus.ERROR)

    @property
    def summary(self) -> Dict[str, int]:
        return {
            "totalChecks": len(self.checks),
            "passed": self.passed,
            "failed": self.failed,
        }

    @property
    def is_clean(self) -> bool:
        return self.failed == 0

    def findings(self, kind: FindingKind) -> List[ReconciliationFinding]:
        return [f for f in self.reconciliation if f.kind == kind]

    @property
    def protocol(self) -> str:
        return render_protocol(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "errors": [e.to_dict() for e in self.errors],
            "reconciliation": [f.to_dict() for f in self.reconciliation],
            "forbidden": [f.to_dict() for f in self.forbidden],
            "ruleFailures": [r.to_dict() for r in self.rule_failures],
            "summary": self.summary,
            "setupErrors": [s.to_dict() for s in self.setup_errors],
            "warnings": list(self.warnings),
            "checks": [c.to_dict() for c in self.checks],
            "protocol": self.protocol,
            "generatedAt": self.generated_at.isoformat(),
        }

    def __repr__(self) -> str:
        return (
            f"ValidationReport(checks={len(self.checks)}, passed={self.passed}, "
            f"failed={self.failed})"
        )


def render_protocol(report: ValidationReport) -> str:
    """Plain-text trace of every check, setup error and warning."""
    lines = [
        "VALIDATION PROTOCOL",
        "===================",
        f"Date: {report.generated_at.strftime('%Y-%m-%d %H:%M:%S %Z')}",
        f"Status: {'FAILED' if report.failed else 'PASSED'}",
        "-" * 40,
        f"Total checks: {len(report.checks)}",
        f"Passed: {report.passed}",
        f"Failed: {report.failed}",
        "",
        "[CHECKS]",
    ]
    for check in report.checks:
        status = "OK" if check.status == CheckStatus.OK else "ERROR"
        lines.append(
            f"[{status}] {check.type.value}: {check.label} "
            f"(checked: {check.checked}, failed: {check.failed})"
        )

    if report.setup_errors:
        lines += ["", "[SETUP ERRORS]"]
        lines += [f"- {s.pair}: {s.message}" for s in report.setup_errors]

    if report.warnings:
        lines += ["", "[WARNINGS]"]
        lines += [f"- {w}" for w in report.warnings]

    if report.failed:
        lines += ["", "[DETAILS]"]
        if report.forbidden:
            lines.append("--- FORBIDDEN VALUES ---")
            for e in report.forbidden:
                lines.append(
                    f"- {e.target_table}.{e.column} contains {e.count} values from "
                    f"{e.forbidden_table}.{e.forbidden_column} (e.g. {', '.join(e.found_values)})"
                )
        if report.errors:
            lines.append("--- INTEGRITY ---")
            for e in report.errors:
                more = f" (+{e.more_count} more)" if e.more_count else ""
                lines.append(
                    f"- {e.fk_table}.{e.fk_column} -> {e.pk_table}.{e.pk_column}: "
                    f"{e.missing_count} missing, e.g. {', '.join(e.missing_values)}{more}"
                )
        failures = [f for f in report.reconciliation if f.is_failure]
        if failures:
            lines.append("--- RECONCILIATION ---")
            for f in failures:
                if f.kind == FindingKind.MISSING_ROW:
                    lines.append(
                        f"- {f.target_table}: row {f.join_key}={f.key} missing (in {f.source_table})"
                    )
                else:
                    lines.append(
                        f"- {f.target_table}.{f.column} [{f.join_key}={f.key}]: "
                        f"expected {f.expected!r}, found {f.actual!r} ({f.kind.value})"
                    )
        if report.rule_failures:
            lines.append("--- RULES ---")
            for r in report.rule_failures:
                lines.append(
                    f"- {r.table}.{r.column} ({r.rule_type}): {r.failed_count} failures. "
                    f"{r.description}".rstrip()
                )
        lines += ["", "[CONCLUSION]", f"Validation found {report.failed} failed checks."]
    else:
        lines += ["", "[CONCLUSION]", "All checked data is consistent."]

    return "\n".join(lines) + "\n"
