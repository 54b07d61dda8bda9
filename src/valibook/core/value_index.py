"""Per-column value sets and counts built from loaded rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from valibook.core.types import Column, Table, TableKind, column_id_for
from valibook.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SAMPLE_LIMIT = 200
SHOWN_SAMPLE_VALUES = 3


def cell(row: Sequence[object], index: int) -> str:
    """Return the trimmed string value of a cell; missing cells are empty."""
    if index >= len(row):
        return ""
    value = row[index]
    if value is None:
        return ""
    return str(value).strip()


@dataclass
class ColumnStats:
    """Value set and counts of one column."""

    values: Set[str] = field(default_factory=set)  # sampled, non-empty
    unique_count: int = 0  # over all rows
    null_count: int = 0  # over all rows
    first_values: List[str] = field(default_factory=list)


@dataclass
class ValueIndex:
    """Sampled distinct values for every column of a table."""

    table_name: str
    row_count: int
    sample_limit: int
    columns: Dict[int, ColumnStats] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        table: Table,
        rows: Sequence[Sequence[object]],
        sample_limit: int = DEFAULT_SAMPLE_LIMIT,
    ) -> ValueIndex:
        """Index the data rows (header excluded) of a table.

        Value sets hold trimmed, non-empty values from the first
        ``sample_limit`` rows; unique and null counts cover every row.

        Args:
            table: Table whose columns are indexed
            rows: Data rows, header excluded
            sample_limit: Number of leading rows that feed the value sets

        Returns:
            ValueIndex instance
        """
        index = cls(
            table_name=table.name, row_count=len(rows), sample_limit=sample_limit
        )

        for col in table.columns:
            stats = ColumnStats()
            distinct: Set[str] = set()

            for row_number, row in enumerate(rows):
                value = cell(row, col.index)
                if not value:
                    stats.null_count += 1
                    continue
                if value not in distinct:
                    distinct.add(value)
                    if len(stats.first_values) < SHOWN_SAMPLE_VALUES:
                        stats.first_values.append(value)
                if row_number < sample_limit:
                    stats.values.add(value)

            stats.unique_count = len(distinct)
            index.columns[col.index] = stats

        logger.debug(
            f"Indexed {table.name}: {len(table.columns)} columns, "
            f"{index.row_count} rows (sample limit {sample_limit})"
        )
        return index

    def values(self, column_index: int) -> Set[str]:
        """Sampled value set of a column (empty for unknown columns)."""
        stats = self.columns.get(column_index)
        return stats.values if stats else set()

    def stats(self, column_index: int) -> Optional[ColumnStats]:
        return self.columns.get(column_index)

    def uniqueness(self, column_index: int) -> float:
        """Distinct values relative to the table's row count."""
        stats = self.columns.get(column_index)
        if stats is None or self.row_count == 0:
            return 0.0
        return stats.unique_count / self.row_count


def profile_table(
    name: str,
    kind: TableKind,
    headers: Sequence[object],
    rows: Sequence[Sequence[object]],
    sample_limit: int = DEFAULT_SAMPLE_LIMIT,
) -> Table:
    """Build a Table with column statistics from loaded rows.

    Blank headers are named ``Column_<n>`` (1-based).
    """
    columns = []
    for position, header in enumerate(headers):
        header_text = str(header).strip() if header is not None else ""
        columns.append(
            Column(
                id=column_id_for(name, position),
                table_name=name,
                name=header_text or f"Column_{position + 1}",
                index=position,
            )
        )

    table = Table(name=name, kind=kind, row_count=len(rows), columns=columns)
    index = ValueIndex.build(table, rows, sample_limit=sample_limit)

    for col in table.columns:
        stats = index.stats(col.index)
        if stats is None:
            continue
        col.unique_count = stats.unique_count
        col.null_count = stats.null_count
        col.sample_values = list(stats.first_values)

    logger.info(
        f"Profiled {name} ({kind.value}): {len(columns)} columns, {len(rows)} rows"
    )
    return table
