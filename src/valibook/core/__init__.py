"""Core engine: data model, value indexes, stores, discovery and validation."""

from valibook.core.context import RunContext
from valibook.core.linkage import DiscoveryEngine, DiscoveryMode
from valibook.core.rules import ValidationRule, rule_from_dict
from valibook.core.store import ColumnStore, ProjectStore
from valibook.core.types import (
    Column,
    Link,
    LinkMetadata,
    LinkSuggestion,
    LinkType,
    Table,
    TableKind,
)
from valibook.core.validation import ValidationReport, Validator

__all__ = [
    "Column",
    "ColumnStore",
    "DiscoveryEngine",
    "DiscoveryMode",
    "Link",
    "LinkMetadata",
    "LinkSuggestion",
    "LinkType",
    "ProjectStore",
    "RunContext",
    "Table",
    "TableKind",
    "ValidationReport",
    "ValidationRule",
    "Validator",
    "rule_from_dict",
]
