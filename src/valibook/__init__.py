"""Valibook - column linkage discovery and spreadsheet validation."""

__version__ = "0.1.0"

# Connectors
from valibook.connectors import BaseLoader, LoaderFactory, TabularLoader

# Core modules
from valibook.core import (
    Column,
    DiscoveryEngine,
    DiscoveryMode,
    Link,
    LinkSuggestion,
    ProjectStore,
    RunContext,
    Table,
    TableKind,
    ValidationReport,
    Validator,
)

# Errors
from valibook.errors import LoadError, RuleDefinitionError, SetupError, ValibookError

# Utils
from valibook.utils.config import Config, get_config, load_config

__all__ = [
    # Version
    "__version__",
    # Core
    "Column",
    "DiscoveryEngine",
    "DiscoveryMode",
    "Link",
    "LinkSuggestion",
    "ProjectStore",
    "RunContext",
    "Table",
    "TableKind",
    "ValidationReport",
    "Validator",
    # Connectors
    "BaseLoader",
    "LoaderFactory",
    "TabularLoader",
    # Errors
    "ValibookError",
    "LoadError",
    "SetupError",
    "RuleDefinitionError",
    # Config
    "Config",
    "get_config",
    "load_config",
]
