"""Name and value-overlap scoring of candidate column pairs."""

from __future__ import annotations

from typing import AbstractSet, Iterable, Optional, Tuple, TypeVar

from valibook.core.names import normalize_name

EXACT_NAME_SCORE = 0.4
PARTIAL_NAME_SCORE = 0.2
MIN_ACCEPTED_SCORE = 0.5

T = TypeVar("T")


def common_count(
    target_values: AbstractSet[str], candidate_values: AbstractSet[str]
) -> int:
    """Number of distinct target values present in the candidate."""
    return sum(1 for value in target_values if value in candidate_values)


def name_score(
    target_name: object,
    candidate_name: object,
    exact: float = EXACT_NAME_SCORE,
    partial: float = PARTIAL_NAME_SCORE,
) -> float:
    """Score two column names after normalization.

    Equal names score ``exact``; one containing the other (both non-empty)
    scores ``partial``; anything else scores 0.
    """
    n1 = normalize_name(target_name)
    n2 = normalize_name(candidate_name)

    if not n1 or not n2:
        return 0.0
    if n1 == n2:
        return exact
    if n1 in n2 or n2 in n1:
        return partial
    return 0.0


def overlap_score(
    target_values: AbstractSet[str], candidate_values: AbstractSet[str]
) -> float:
    """Fraction of the target's distinct values found in the candidate.

    Asymmetric: a candidate holding a superset of the target values
    scores 1.0.
    """
    if not target_values:
        return 0.0
    return common_count(target_values, candidate_values) / len(target_values)


def score(
    target_name: object,
    target_values: AbstractSet[str],
    candidate_name: object,
    candidate_values: AbstractSet[str],
    exact: float = EXACT_NAME_SCORE,
    partial: float = PARTIAL_NAME_SCORE,
) -> float:
    """Combined score of a (candidate column, target column) pair.

    Example:
        >>> score("state", {"A", "B"}, "status", {"A", "B", "C"})
        1.0
    """
    return overlap_score(target_values, candidate_values) + name_score(
        target_name, candidate_name, exact=exact, partial=partial
    )


def is_acceptable(pair_score: float, threshold: float = MIN_ACCEPTED_SCORE) -> bool:
    """A pair is a match only when its score is strictly above threshold."""
    return pair_score > threshold


def best_match(
    scored: Iterable[Tuple[T, float]], threshold: float = MIN_ACCEPTED_SCORE
) -> Optional[Tuple[T, float]]:
    """Pick the acceptable candidate with the strictly greatest score.

    Ties keep the first candidate in iteration order.
    """
    best: Optional[Tuple[T, float]] = None
    for candidate, pair_score in scored:
        if not is_acceptable(pair_score, threshold):
            continue
        if best is None or pair_score > best[1]:
            best = (candidate, pair_score)
    return best
