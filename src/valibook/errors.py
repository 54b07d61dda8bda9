"""Exception types for Valibook.

Only setup and loading problems are exceptions. Validation findings are
always data in the report, never raised.
"""

from __future__ import annotations


class ValibookError(Exception):
    """Base class for all Valibook errors."""


class LoadError(ValibookError):
    """A stored table could not be read (missing, empty, no sheet)."""

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"Cannot load {location}: {reason}")


class SetupError(ValibookError):
    """A table pair cannot be validated as configured."""

    def __init__(self, message: str, pair: str = ""):
        self.pair = pair
        super().__init__(message)


class RuleDefinitionError(ValibookError):
    """An externally supplied rule descriptor is malformed."""


class TableExistsError(ValibookError):
    """A table with the same name is already registered."""

    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(f"Table already exists: {table_name}")


class UnknownTableError(ValibookError, KeyError):
    """Referenced table is not registered in the store."""

    def __str__(self) -> str:
        return f"Unknown table: {self.args[0]}"


class UnknownColumnError(ValibookError, KeyError):
    """Referenced column is not registered in the store."""

    def __str__(self) -> str:
        return f"Unknown column: {self.args[0]}"
