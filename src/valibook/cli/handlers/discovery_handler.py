"""Business logic for link discovery."""

from __future__ import annotations

from typing import List

from valibook.cli.handlers.project_handler import ProjectHandler
from valibook.core.context import RunContext
from valibook.core.linkage import DiscoveryEngine, DiscoveryMode
from valibook.core.types import LinkSuggestion
from valibook.utils.config import Config


class DiscoveryHandler:
    """Handler for discovery operations.

    Example:
        >>> handler = DiscoveryHandler(config, project)
        >>> suggestions = handler.discover(DiscoveryMode.ALL)
    """

    def __init__(self, config: Config, project: ProjectHandler):
        self.config = config
        self.project = project
        self.engine = DiscoveryEngine(config.section("discovery"))

    def discover(
        self, mode: DiscoveryMode = DiscoveryMode.ALL, apply: bool = False
    ) -> List[LinkSuggestion]:
        """Run discovery over every registered table.

        Args:
            mode: Kinds of suggestions to produce
            apply: Accept every suggestion and save the project

        Returns:
            The suggestions produced
        """
        store = self.project.store
        context = RunContext(
            store,
            self.project.loader,
            sample_limit=self.config.get("discovery.sample_limit", 200),
        )
        suggestions = self.engine.discover(
            store.tables(), context, mode=mode, existing_links=store.links()
        )

        if apply and suggestions:
            store.accept_all(suggestions)
            self.project.save()
        return suggestions

    def describe(self, suggestion: LinkSuggestion) -> str:
        store = self.project.store
        target = store.column(suggestion.target_column_id)
        source = store.column(suggestion.source_column_id)
        key = " [key]" if suggestion.is_key else ""
        return (
            f"{target.qualified_name} -> {source.qualified_name} "
            f"({suggestion.link_type.value}, {suggestion.match_percentage}% match, "
            f"score {suggestion.score:.2f}){key}"
        )
