"""Blacklist check: values that must not appear in checked tables."""

from __future__ import annotations

from typing import AbstractSet, Iterable, Optional

from valibook.core.types import Column
from valibook.core.validation.report import ForbiddenError
from valibook.utils.logging import get_logger

logger = get_logger(__name__)


class ForbiddenValueChecker:
    """Intersect a checked column with a blacklist value set.

    Matching is exact on trimmed values unless ``case_insensitive`` is set.
    """

    def __init__(self, display_limit: int = 10, case_insensitive: bool = False):
        self.display_limit = display_limit
        self.case_insensitive = case_insensitive

    def _fold(self, value: str) -> str:
        return value.lower() if self.case_insensitive else value

    def check_forbidden(
        self,
        checked_column: Column,
        checked_values: Iterable[str],
        forbidden_column: Column,
        forbidden_values: AbstractSet[str],
    ) -> Optional[ForbiddenError]:
        """Report checked values that occur in the blacklist.

        Args:
            checked_column: Column being checked
            checked_values: Its values (empty values are ignored)
            forbidden_column: Blacklist key column
            forbidden_values: Distinct non-empty blacklist values

        Returns:
            ForbiddenError with sorted distinct matches, or None
        """
        if not forbidden_values:
            return None

        blacklist = {self._fold(v) for v in forbidden_values}
        found = {v for v in checked_values if v and self._fold(v) in blacklist}

        if not found:
            return None

        ordered = sorted(found)
        logger.info(
            f"Forbidden values in {checked_column.qualified_name} "
            f"(from {forbidden_column.qualified_name}): {len(ordered)}"
        )
        return ForbiddenError(
            target_table=checked_column.table_name,
            column=checked_column.name,
            forbidden_table=forbidden_column.table_name,
            forbidden_column=forbidden_column.name,
            found_values=tuple(ordered[: self.display_limit]),
            count=len(ordered),
        )
