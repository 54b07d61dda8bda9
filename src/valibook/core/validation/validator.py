"""Validation run orchestration."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from valibook.connectors.base import BaseLoader
from valibook.core.context import RunContext
from valibook.core.rules import CrossColumn, ValidationRule
from valibook.core.store import ColumnStore
from valibook.core.types import Link, Table, TableKind
from valibook.core.validation.evaluator import RuleEvaluator
from valibook.core.validation.forbidden import ForbiddenValueChecker
from valibook.core.validation.integrity import IntegrityChecker
from valibook.core.validation.reconciliation import ReconciliationChecker, ScopeFilter
from valibook.core.validation.report import (
    CheckType,
    PartialReport,
    RuleFailure,
    ValidationReport,
)
from valibook.errors import SetupError
from valibook.utils.config import get_config
from valibook.utils.logging import get_logger
from valibook.utils.timing import timed

logger = get_logger(__name__)

RECONCILED_KINDS = (TableKind.SOURCE, TableKind.FORBIDDEN)
CHECKED_KINDS = (TableKind.SOURCE, TableKind.TARGET)


@dataclass
class LinkGroup:
    """Links from one checked table into one reference table."""

    checked: Table
    reference: Table
    links: List[Link] = field(default_factory=list)

    @property
    def label(self) -> str:
        return f"{self.reference.name} vs {self.checked.name}"

    @property
    def key_link(self) -> Optional[Link]:
        return next((link for link in self.links if link.is_key), None)

    @property
    def value_links(self) -> List[Link]:
        key = self.key_link
        return [link for link in self.links if link is not key]


class Validator:
    """Run every check over a project and collect a ValidationReport.

    Table pairs, blacklist tables and rules are independent units of work
    executed on a thread pool. Their partial results are concatenated in
    submission order, so the report does not depend on scheduling.

    Example:
        >>> validator = Validator(store, TabularLoader())
        >>> report = validator.validate(scope_table="active_accounts")
        >>> print(report.summary)
    """

    def __init__(
        self,
        store: ColumnStore,
        loader: Optional[BaseLoader] = None,
        config: Optional[Dict] = None,
    ):
        """Initialize validator.

        Args:
            store: Column metadata store
            loader: Loader used to read stored tables
            config: Validation config dict (uses global config if None)
        """
        self.store = store
        self.loader = loader
        self.config = config if config is not None else get_config().get("validation", {})

        self.max_workers = max(1, int(self.config.get("max_workers", 4)))
        self.sample_limit = get_config().get("discovery.sample_limit", 200)

        display_limit = self.config.get("display_limit", 10)
        self.integrity = IntegrityChecker(display_limit=display_limit)
        self.reconciliation = ReconciliationChecker()
        self.forbidden = ForbiddenValueChecker(
            display_limit=display_limit,
            case_insensitive=bool(self.config.get("forbidden_case_insensitive", False)),
        )
        self.evaluator = RuleEvaluator(sample_limit=self.config.get("rule_sample_limit", 10))

    @timed("validation")
    def validate(
        self,
        tables: Optional[Sequence[str]] = None,
        scope_table: Optional[str] = None,
        context: Optional[RunContext] = None,
    ) -> ValidationReport:
        """Validate the project.

        Args:
            tables: Restrict checks to these checked tables (all if None)
            scope_table: Table whose key values limit reconciled source rows
            context: Run context to reuse (a fresh one is created if None)

        Returns:
            ValidationReport
        """
        context = context or RunContext(self.store, self.loader, self.sample_limit)
        all_tables = self.store.tables()
        selected = self._select(all_tables, tables, context)

        setup = PartialReport()
        scope = self._scope_keys(scope_table, setup, context)
        links = self.store.links()

        tasks: List[Callable[[], PartialReport]] = []
        for group in self._group_links(links, selected, context):
            tasks.append(lambda g=group: self._check_group(g, context, scope))
        for forbidden_table in (t for t in all_tables if t.kind == TableKind.FORBIDDEN):
            tasks.append(
                lambda f=forbidden_table: self._check_forbidden(f, selected, links, context)
            )
        for rule in self.store.rules():
            if rule.table in selected:
                tasks.append(lambda r=rule: self._check_rule(r, context))

        logger.info(
            f"Validating {len(selected)} tables: {len(links)} links, {len(tasks)} units of work "
            f"({self.max_workers} workers)"
        )

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(task) for task in tasks]
            parts = [setup] + [future.result() for future in futures]

        report = ValidationReport.from_parts(parts, warnings=context.warnings)
        logger.info(
            f"Validation finished: {report.summary['totalChecks']} checks, "
            f"{report.summary['failed']} failed"
        )
        return report

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def _select(
        self, all_tables: Sequence[Table], names: Optional[Sequence[str]], context: RunContext
    ) -> Set[str]:
        known = {t.name for t in all_tables}
        if not names:
            return known
        for name in names:
            if name not in known:
                context.warn(f"Unknown table {name} ignored")
        return {name for name in names if name in known}

    def _group_links(
        self, links: Sequence[Link], selected: Set[str], context: RunContext
    ) -> List[LinkGroup]:
        groups: Dict[Tuple[str, str], LinkGroup] = {}
        for link in links:
            try:
                checked = self.store.table_of(link.checked_column_id)
                reference = self.store.table_of(link.reference_column_id)
            except KeyError as e:
                context.warn(f"Ignoring dangling link: {e}")
                continue
            if checked.name not in selected:
                continue
            key = (checked.name, reference.name)
            if key not in groups:
                groups[key] = LinkGroup(checked=checked, reference=reference)
            groups[key].links.append(link)
        return list(groups.values())

    def _scope_keys(
        self, scope_table: Optional[str], setup: PartialReport, context: RunContext
    ) -> Optional[Tuple[str, frozenset]]:
        """Allowed keys of the scope table, with the name of its key column."""
        if not scope_table:
            return None
        if not self.store.has_table(scope_table):
            setup.add_setup_error(scope_table, f"Scope table {scope_table} not found")
            return None

        table = self.store.table(scope_table)
        column = table.scope_column or table.key_column
        if column is None:
            setup.add_setup_error(scope_table, f"Scope table {scope_table} has no columns")
            return None

        allowed = frozenset(context.value_set(column.id))
        logger.info(f"Validation scoped to {len(allowed)} keys of {column.qualified_name}")
        return column.name, allowed

    def _scope_filter(
        self, source: Table, scope: Optional[Tuple[str, frozenset]]
    ) -> Optional[ScopeFilter]:
        if scope is None:
            return None
        column_name, allowed = scope
        column = source.scope_column or source.column(column_name)
        if column is None:
            logger.info(f"{source.name} has no scope column; validated unscoped")
            return None
        return ScopeFilter(column_name=column.name, allowed_keys=allowed)

    # ------------------------------------------------------------------
    # Units of work
    # ------------------------------------------------------------------

    def _check_group(
        self,
        group: LinkGroup,
        context: RunContext,
        scope: Optional[Tuple[str, frozenset]],
    ) -> PartialReport:
        part = PartialReport()

        if group.reference.kind not in RECONCILED_KINDS:
            for link in group.links:
                self._check_integrity(link, part, context)
            return part

        key_link = group.key_link
        if key_link is not None:
            self._check_integrity(key_link, part, context)

        try:
            result = self.reconciliation.reconcile(
                source=group.reference,
                source_rows=context.rows(group.reference.name),
                target=group.checked,
                target_rows=context.rows(group.checked.name),
                key_link=key_link,
                value_links=group.value_links,
                scope=self._scope_filter(group.reference, scope),
                codebooks=self._codebooks(group.value_links, context),
            )
        except SetupError as e:
            logger.warning(f"Setup error for {group.label}: {e}")
            part.add_setup_error(e.pair or group.label, str(e))
            return part

        part.reconciliation.extend(result.findings)
        part.add_check(
            CheckType.RECONCILIATION,
            f"{group.checked.name} rows present in {group.reference.name}",
            checked=result.source_rows,
            failed=len(result.missing_rows),
        )
        for link in group.value_links:
            column = self.store.column(link.checked_column_id)
            failed = sum(1 for f in result.failures if f.column == column.name)
            part.add_check(
                CheckType.RECONCILIATION,
                f"{column.qualified_name} vs "
                f"{self.store.column(link.reference_column_id).qualified_name}",
                checked=result.compared_rows,
                failed=failed,
            )
        return part

    def _check_integrity(self, link: Link, part: PartialReport, context: RunContext) -> None:
        fk = self.store.column(link.checked_column_id)
        pk = self.store.column(link.reference_column_id)
        fk_values = context.column_values(fk.id)

        error = self.integrity.check(fk, fk_values, pk, context.value_set(pk.id))
        if error is not None:
            part.errors.append(error)
        part.add_check(
            CheckType.INTEGRITY,
            f"{fk.qualified_name} -> {pk.qualified_name}",
            checked=sum(1 for v in fk_values if v),
            failed=error.missing_count if error else 0,
        )

    def _codebooks(self, links: Sequence[Link], context: RunContext) -> Dict[str, Set[str]]:
        codebooks: Dict[str, Set[str]] = {}
        for link in links:
            name = link.metadata.forbidden_table_id
            if not name or name in codebooks:
                continue
            if not self.store.has_table(name):
                raise SetupError(f"Codebook table {name} not found", pair=name)
            key = self.store.table(name).key_column
            codebooks[name] = context.value_set(key.id) if key is not None else set()
        return codebooks

    def _check_forbidden(
        self,
        forbidden_table: Table,
        selected: Set[str],
        links: Sequence[Link],
        context: RunContext,
    ) -> PartialReport:
        part = PartialReport()
        key = forbidden_table.key_column
        if key is None:
            return part

        # Columns linked into this table use it as a codebook, not a blacklist
        own_columns = {col.id for col in forbidden_table.columns}
        codebook_users = {
            link.checked_column_id
            for link in links
            if link.reference_column_id in own_columns
            or link.metadata.forbidden_table_id == forbidden_table.name
        }
        codebook_users.update(
            link.reference_column_id
            for link in links
            if link.metadata.forbidden_table_id == forbidden_table.name
        )

        blacklist = context.value_set(key.id)
        for table in self.store.tables():
            if table.name not in selected or table.kind not in CHECKED_KINDS:
                continue

            errors = []
            for column in table.columns:
                if column.id in codebook_users:
                    continue
                error = self.forbidden.check_forbidden(
                    column, context.column_values(column.id), key, blacklist
                )
                if error is not None:
                    errors.append(error)

            part.forbidden.extend(errors)
            part.add_check(
                CheckType.FORBIDDEN,
                f"{table.name} vs {forbidden_table.name}",
                checked=len(table.columns),
                failed=sum(e.count for e in errors),
            )
        return part

    def _check_rule(self, rule: ValidationRule, context: RunContext) -> PartialReport:
        part = PartialReport()
        label = f"{rule.table}.{rule.column} ({rule.rule_type})"

        table = self.store.table(rule.table)
        column = table.column(rule.column)
        if column is None:
            part.add_setup_error(label, f"Rule {rule.id}: unknown column {rule.column}")
            return part

        dependency = None
        if isinstance(rule.predicate, CrossColumn):
            other = table.column(rule.predicate.depends_on)
            if other is None:
                part.add_setup_error(
                    label, f"Rule {rule.id}: unknown column {rule.predicate.depends_on}"
                )
                return part
            dependency = dict(enumerate(context.column_values(other.id)))

        result = self.evaluator.evaluate(rule, context.column_values(column.id), dependency)
        if not result.passed:
            part.rule_failures.append(
                RuleFailure(
                    rule_id=rule.id,
                    table=rule.table,
                    column=rule.column,
                    rule_type=rule.rule_type,
                    rule_value=rule.rule_value,
                    description=rule.description,
                    severity=rule.severity,
                    failed_count=result.failed_count,
                    samples=tuple(result.samples),
                )
            )
        part.add_check(CheckType.RULE, label, checked=result.checked, failed=result.failed_count)
        return part
