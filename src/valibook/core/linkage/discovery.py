"""Discovery of column links between uploaded tables."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from valibook.core.context import RunContext
from valibook.core.linkage import scorer
from valibook.core.names import normalize_name
from valibook.core.types import Column, Link, LinkSuggestion, LinkType, Table, TableKind
from valibook.utils.config import get_config
from valibook.utils.logging import get_logger
from valibook.utils.timing import timed

logger = get_logger(__name__)

CANDIDATE_KINDS = (TableKind.SOURCE, TableKind.FORBIDDEN)


class DiscoveryMode(str, Enum):
    """Which kinds of suggestions a discovery run produces."""

    MAPPINGS = "mappings"
    REFERENCES = "references"
    ALL = "all"


@dataclass
class ColumnMatch:
    """Best candidate column found for one target column."""

    target_column: Column
    candidate_column: Column
    score: float
    overlap: float
    common_values: int


@dataclass
class CandidateResult:
    """Matches of one target table against one candidate table."""

    table: Table
    matches: List[ColumnMatch] = field(default_factory=list)

    @property
    def aggregate_score(self) -> float:
        return sum(m.score for m in self.matches)


class DiscoveryEngine:
    """Propose key links, value links and cross-table references.

    For each TARGET table the SOURCE/FORBIDDEN table with the highest
    aggregate column score wins, so all mapped columns of one target
    table come from a single table. Identifier columns shared between
    TARGET tables are proposed as references when one side is nearly
    unique and covers the other's values.

    Example:
        >>> engine = DiscoveryEngine()
        >>> suggestions = engine.discover(store.tables(), RunContext(store, loader))
    """

    def __init__(self, config: Optional[Dict] = None):
        """Initialize discovery engine.

        Args:
            config: Discovery config dict (uses global config if None)
        """
        self.config = config if config is not None else get_config().get("discovery", {})

        self.exact_name_score = self.config.get("exact_name_score", scorer.EXACT_NAME_SCORE)
        self.partial_name_score = self.config.get(
            "partial_name_score", scorer.PARTIAL_NAME_SCORE
        )
        self.min_score = self.config.get("min_score", scorer.MIN_ACCEPTED_SCORE)
        self.key_vocabulary = {
            normalize_name(word)
            for word in self.config.get(
                "key_vocabulary",
                ["id", "code", "key", "accountnum", "accountnumber", "kod"],
            )
        }
        self.identifier_pattern = re.compile(
            self.config.get("identifier_pattern", "id|code|num|key|kod|cislo|klic")
        )
        self.reference_min_uniqueness = self.config.get("reference_min_uniqueness", 0.9)
        self.reference_min_overlap = self.config.get("reference_min_overlap", 0.7)

    @timed("discovery")
    def discover(
        self,
        tables: Sequence[Table],
        context: RunContext,
        mode: DiscoveryMode = DiscoveryMode.ALL,
        existing_links: Iterable[Link] = (),
    ) -> List[LinkSuggestion]:
        """Propose links between the given tables.

        Args:
            tables: Tables to consider, in a stable order
            context: Run context providing value indexes
            mode: Produce mappings, references or both
            existing_links: Accepted links; suggestions they already cover
                are not emitted again

        Returns:
            List of LinkSuggestion objects (possibly empty)
        """
        mode = DiscoveryMode(mode)
        targets = [t for t in tables if t.kind == TableKind.TARGET]
        candidates = [t for t in tables if t.kind in CANDIDATE_KINDS]

        logger.info(
            f"Discovering links for {len(targets)} target tables "
            f"against {len(candidates)} candidate tables (mode={mode.value})"
        )

        suggestions: List[LinkSuggestion] = []
        if mode in (DiscoveryMode.MAPPINGS, DiscoveryMode.ALL):
            for target in targets:
                suggestions.extend(self._discover_mappings(target, candidates, context))
        if mode in (DiscoveryMode.REFERENCES, DiscoveryMode.ALL):
            suggestions.extend(self._discover_references(targets, context))

        accepted = {
            (link.checked_column_id, link.reference_column_id) for link in existing_links
        }
        fresh = [
            s
            for s in suggestions
            if (s.target_column_id, s.source_column_id) not in accepted
        ]

        if len(fresh) != len(suggestions):
            logger.info(
                f"Skipped {len(suggestions) - len(fresh)} suggestions already accepted"
            )
        logger.info(f"Discovery produced {len(fresh)} suggestions")
        return fresh

    # ------------------------------------------------------------------
    # Source-of-truth mappings
    # ------------------------------------------------------------------

    def _discover_mappings(
        self, target: Table, candidates: Sequence[Table], context: RunContext
    ) -> List[LinkSuggestion]:
        best: Optional[CandidateResult] = None

        for candidate in candidates:
            result = self.score_candidate_table(target, candidate, context)
            if not result.matches:
                continue
            logger.debug(
                f"  {target.name} vs {candidate.name}: "
                f"{len(result.matches)} matches, score {result.aggregate_score:.2f}"
            )
            # Strictly greater: ties keep the first table in input order
            if best is None or result.aggregate_score > best.aggregate_score:
                best = result

        if best is None:
            logger.info(f"No candidate table matches {target.name}")
            return []

        logger.info(
            f"{target.name} matched with {best.table.name} "
            f"(score {best.aggregate_score:.2f}, {len(best.matches)} columns)"
        )

        key_match = self.select_key(best.matches)
        forbidden_table_id = best.table.name if best.table.kind == TableKind.FORBIDDEN else None

        return [
            LinkSuggestion(
                source_column_id=m.candidate_column.id,
                target_column_id=m.target_column.id,
                match_percentage=round(m.overlap * 100),
                common_values=m.common_values,
                score=m.score,
                link_type=LinkType.MAPPING,
                is_key=m is key_match,
                forbidden_table_id=forbidden_table_id,
            )
            for m in best.matches
        ]

    def score_candidate_table(
        self, target: Table, candidate: Table, context: RunContext
    ) -> CandidateResult:
        """Find the best candidate column for every target column.

        Target values come from the sampled index; each candidate column is
        searched in full.
        """
        target_index = context.value_index(target.name)
        result = CandidateResult(table=candidate)

        for target_col in target.columns:
            target_values = target_index.values(target_col.index)

            scored: List[Tuple[Column, float]] = [
                (
                    candidate_col,
                    scorer.score(
                        target_col.name,
                        target_values,
                        candidate_col.name,
                        context.value_set(candidate_col.id),
                        exact=self.exact_name_score,
                        partial=self.partial_name_score,
                    ),
                )
                for candidate_col in candidate.columns
            ]
            best = scorer.best_match(scored, threshold=self.min_score)
            if best is None:
                continue

            candidate_col, pair_score = best
            common = scorer.common_count(target_values, context.value_set(candidate_col.id))
            result.matches.append(
                ColumnMatch(
                    target_column=target_col,
                    candidate_column=candidate_col,
                    score=pair_score,
                    overlap=common / len(target_values),
                    common_values=common,
                )
            )

        return result

    def select_key(self, matches: Sequence[ColumnMatch]) -> Optional[ColumnMatch]:
        """Pick the join-key pair among a winning table's matches.

        Vocabulary names first (id, code, key, ...), then the first name
        containing "id".
        """
        for m in matches:
            if m.candidate_column.normalized_name in self.key_vocabulary:
                return m
        for m in matches:
            if "id" in m.candidate_column.normalized_name:
                return m
        return None

    # ------------------------------------------------------------------
    # Target-to-target references
    # ------------------------------------------------------------------

    def _discover_references(
        self, targets: Sequence[Table], context: RunContext
    ) -> List[LinkSuggestion]:
        suggestions: List[LinkSuggestion] = []
        seen: Set[frozenset] = set()

        for table in targets:
            index = context.value_index(table.name)

            for col in table.columns:
                name = col.normalized_name
                if not name or not self.identifier_pattern.search(name):
                    continue
                values = index.values(col.index)
                if not values:
                    continue

                for other in targets:
                    if other.name == table.name:
                        continue
                    reference = next(
                        (c for c in other.columns if c.normalized_name == name), None
                    )
                    if reference is None:
                        continue

                    other_index = context.value_index(other.name)
                    if other_index.uniqueness(reference.index) < self.reference_min_uniqueness:
                        continue

                    common = scorer.common_count(values, context.value_set(reference.id))
                    overlap = common / len(values)
                    if overlap <= self.reference_min_overlap:
                        continue

                    pair = frozenset((col.id, reference.id))
                    if pair in seen:
                        continue
                    seen.add(pair)

                    logger.debug(
                        f"  Reference {col.qualified_name} -> {reference.qualified_name} "
                        f"({overlap:.0%})"
                    )
                    suggestions.append(
                        LinkSuggestion(
                            source_column_id=reference.id,
                            target_column_id=col.id,
                            match_percentage=round(overlap * 100),
                            common_values=common,
                            score=overlap,
                            link_type=LinkType.REFERENCE,
                        )
                    )

        return suggestions
