"""Column linkage: pair scoring and link discovery."""

from valibook.core.linkage.discovery import (
    CandidateResult,
    ColumnMatch,
    DiscoveryEngine,
    DiscoveryMode,
)
from valibook.core.linkage.scorer import (
    best_match,
    is_acceptable,
    name_score,
    overlap_score,
    score,
)

__all__ = [
    "CandidateResult",
    "ColumnMatch",
    "DiscoveryEngine",
    "DiscoveryMode",
    "best_match",
    "is_acceptable",
    "name_score",
    "overlap_score",
    "score",
]
