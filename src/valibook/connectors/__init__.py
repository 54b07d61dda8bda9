"""Tabular loaders for Valibook."""

from valibook.connectors.base import BaseLoader, LoadedTable
from valibook.connectors.registry import LOADER_REGISTRY, LoaderFactory
from valibook.connectors.tabular_loader import TabularLoader

__all__ = [
    "BaseLoader",
    "LoadedTable",
    "LoaderFactory",
    "LOADER_REGISTRY",
    "TabularLoader",
]
