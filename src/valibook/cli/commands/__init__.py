"""CLI command modules."""

from . import links, rules_group, serve, tables, validate

__all__ = ["links", "rules_group", "serve", "tables", "validate"]
