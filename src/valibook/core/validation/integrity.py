"""Referential integrity: every foreign value must exist in its reference."""

from __future__ import annotations

from typing import AbstractSet, List, Optional, Sequence

from valibook.core.types import Column
from valibook.core.validation.report import IntegrityError
from valibook.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DISPLAY_LIMIT = 10


class IntegrityChecker:
    """Check a linked column's values against the referenced column.

    Example:
        >>> checker = IntegrityChecker(display_limit=10)
        >>> error = checker.check(fk_col, fk_values, pk_col, pk_values)
    """

    def __init__(self, display_limit: int = DEFAULT_DISPLAY_LIMIT):
        self.display_limit = display_limit

    def check(
        self,
        fk_column: Column,
        fk_values: Sequence[str],
        pk_column: Column,
        pk_values: AbstractSet[str],
    ) -> Optional[IntegrityError]:
        """Find foreign values with no counterpart.

        Empty foreign values are ignored.

        Args:
            fk_column: Checked column
            fk_values: Value of the checked column in every row
            pk_column: Referenced column
            pk_values: Distinct non-empty values of the referenced column

        Returns:
            IntegrityError, or None if every foreign value is present
        """
        total = 0
        missing_count = 0
        missing_distinct: List[str] = []
        seen = set()

        for value in fk_values:
            if not value:
                continue
            total += 1
            if value in pk_values:
                continue
            missing_count += 1
            if value not in seen:
                seen.add(value)
                missing_distinct.append(value)

        if missing_count == 0:
            return None

        shown = missing_distinct[: self.display_limit]
        logger.info(
            f"Integrity {fk_column.qualified_name} -> {pk_column.qualified_name}: "
            f"{missing_count}/{total} values missing"
        )
        return IntegrityError(
            fk_table=fk_column.table_name,
            fk_column=fk_column.name,
            pk_table=pk_column.table_name,
            pk_column=pk_column.name,
            missing_values=tuple(shown),
            missing_count=missing_count,
            total_fk_values=total,
            more_count=len(missing_distinct) - len(shown),
        )
