"""Row-level comparison of a checked table against its source of truth."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, FrozenSet, List, Mapping, Optional, Sequence

from valibook.core.types import Column, Link, Table
from valibook.core.validation.report import FindingKind, ReconciliationFinding
from valibook.core.value_index import cell
from valibook.errors import SetupError
from valibook.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScopeFilter:
    """Restrict source rows to those whose scope column value is allowed."""

    column_name: str
    allowed_keys: FrozenSet[str]

    def admits(self, value: str) -> bool:
        return value in self.allowed_keys


@dataclass
class ReconciliationResult:
    """Findings of one source/checked table pair."""

    source_table: str
    target_table: str
    findings: List[ReconciliationFinding] = field(default_factory=list)
    compared_rows: int = 0
    source_rows: int = 0

    def of_kind(self, kind: FindingKind) -> List[ReconciliationFinding]:
        return [f for f in self.findings if f.kind == kind]

    @property
    def mismatches(self) -> List[ReconciliationFinding]:
        return self.of_kind(FindingKind.MISMATCH)

    @property
    def missing_rows(self) -> List[ReconciliationFinding]:
        return self.of_kind(FindingKind.MISSING_ROW)

    @property
    def extra_rows(self) -> List[ReconciliationFinding]:
        return self.of_kind(FindingKind.EXTRA_ROW)

    @property
    def codebook_violations(self) -> List[ReconciliationFinding]:
        return self.of_kind(FindingKind.CODEBOOK_VIOLATION)

    @property
    def failures(self) -> List[ReconciliationFinding]:
        return [f for f in self.findings if f.is_failure]


def _column(table: Table, column_id: str) -> Column:
    for col in table.columns:
        if col.id == column_id:
            return col
    raise SetupError(
        f"Linked column {column_id} does not belong to {table.name}", pair=table.name
    )


class ReconciliationChecker:
    """Compare rows of a checked table with a source table by join key.

    Source rows are keyed by the key link's reference column, checked rows
    by its checked column. Every value link is compared cell by cell.
    """

    def reconcile(
        self,
        source: Table,
        source_rows: Sequence[Sequence[str]],
        target: Table,
        target_rows: Sequence[Sequence[str]],
        key_link: Optional[Link],
        value_links: Sequence[Link],
        scope: Optional[ScopeFilter] = None,
        codebooks: Optional[Mapping[str, AbstractSet[str]]] = None,
    ) -> ReconciliationResult:
        """Reconcile one table pair.

        Args:
            source: Source-of-truth (or codebook) table
            source_rows: Its data rows
            target: Checked table
            target_rows: Its data rows
            key_link: Link joining the two tables
            value_links: Links whose values must agree
            scope: Optional filter on source rows
            codebooks: Allowed values per codebook table, for links carrying
                a forbidden table id

        Returns:
            ReconciliationResult

        Raises:
            SetupError: If the pair has no key, a duplicated source key or a
                missing scope column
        """
        pair = f"{source.name} vs {target.name}"
        if key_link is None:
            raise SetupError(f"No Primary Key defined for {pair}", pair=pair)

        source_key = _column(source, key_link.reference_column_id)
        target_key = _column(target, key_link.checked_column_id)
        columns = [
            (
                link,
                _column(source, link.reference_column_id),
                _column(target, link.checked_column_id),
            )
            for link in value_links
        ]

        scope_index = None
        if scope is not None:
            scope_column = source.column(scope.column_name)
            if scope_column is None:
                raise SetupError(
                    f"Scope column {scope.column_name} not found in {source.name}",
                    pair=pair,
                )
            scope_index = scope_column.index

        source_map: Dict[str, Sequence[str]] = {}
        key_counts: Counter = Counter()
        out_of_scope = set()
        for row in source_rows:
            key = cell(row, source_key.index)
            if not key:
                continue
            if scope_index is not None and not scope.admits(cell(row, scope_index)):
                out_of_scope.add(key)
                continue
            key_counts[key] += 1
            source_map.setdefault(key, row)

        duplicates = [key for key, count in key_counts.items() if count > 1]
        if duplicates:
            raise SetupError(
                f"Duplicate key values in {source_key.qualified_name}: "
                f"{len(duplicates)} keys occur more than once (e.g. {duplicates[0]!r})",
                pair=pair,
            )

        target_map: Dict[str, Sequence[str]] = {}
        for row in target_rows:
            key = cell(row, target_key.index)
            if key:
                target_map.setdefault(key, row)

        result = ReconciliationResult(
            source_table=source.name,
            target_table=target.name,
            source_rows=len(source_map),
        )
        codebooks = codebooks or {}

        def finding(kind: FindingKind, key: str, **kwargs) -> ReconciliationFinding:
            return ReconciliationFinding(
                kind=kind,
                source_table=source.name,
                target_table=target.name,
                join_key=target_key.name,
                key=key,
                **kwargs,
            )

        for key, row in source_map.items():
            target_row = target_map.get(key)
            if target_row is None:
                result.findings.append(finding(FindingKind.MISSING_ROW, key))
                continue

            result.compared_rows += 1
            for link, source_col, target_col in columns:
                expected = cell(row, source_col.index)
                actual = cell(target_row, target_col.index)
                if expected != actual:
                    result.findings.append(
                        finding(
                            FindingKind.MISMATCH,
                            key,
                            column=target_col.name,
                            expected=expected,
                            actual=actual,
                        )
                    )

                allowed = codebooks.get(link.metadata.forbidden_table_id or "")
                if allowed is not None and actual and actual not in allowed:
                    result.findings.append(
                        finding(
                            FindingKind.CODEBOOK_VIOLATION,
                            key,
                            column=target_col.name,
                            expected=None,
                            actual=actual,
                        )
                    )

        for key in target_map:
            if key not in source_map and key not in out_of_scope:
                result.findings.append(finding(FindingKind.EXTRA_ROW, key))

        logger.info(
            f"Reconciled {pair}: {result.compared_rows} rows compared, "
            f"{len(result.failures)} failures"
        )
        return result
