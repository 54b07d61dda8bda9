"""CLI command handlers containing business logic."""

from valibook.cli.handlers.discovery_handler import DiscoveryHandler
from valibook.cli.handlers.project_handler import ProjectHandler, split_column_ref
from valibook.cli.handlers.rules_handler import RulesHandler
from valibook.cli.handlers.validation_handler import ValidationHandler

__all__ = [
    "DiscoveryHandler",
    "ProjectHandler",
    "RulesHandler",
    "ValidationHandler",
    "split_column_ref",
]
