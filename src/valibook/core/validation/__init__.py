"""Validation pipeline: integrity, reconciliation, blacklists and rules."""

from valibook.core.validation.evaluator import RuleEvaluator, RuleResult
from valibook.core.validation.forbidden import ForbiddenValueChecker
from valibook.core.validation.integrity import IntegrityChecker
from valibook.core.validation.reconciliation import (
    ReconciliationChecker,
    ReconciliationResult,
    ScopeFilter,
)
from valibook.core.validation.report import (
    CheckRecord,
    CheckStatus,
    CheckType,
    FindingKind,
    ForbiddenError,
    IntegrityError,
    ReconciliationFinding,
    RuleFailure,
    SetupIssue,
    ValidationReport,
)
from valibook.core.validation.validator import Validator

__all__ = [
    "CheckRecord",
    "CheckStatus",
    "CheckType",
    "FindingKind",
    "ForbiddenError",
    "ForbiddenValueChecker",
    "IntegrityChecker",
    "IntegrityError",
    "ReconciliationChecker",
    "ReconciliationFinding",
    "ReconciliationResult",
    "RuleEvaluator",
    "RuleFailure",
    "RuleResult",
    "ScopeFilter",
    "SetupIssue",
    "ValidationReport",
    "Validator",
]
