"""Loader registry and factory."""

from __future__ import annotations

from typing import Dict, Type

from valibook.connectors.base import BaseLoader
from valibook.connectors.tabular_loader import TabularLoader
from valibook.utils.logging import get_logger

logger = get_logger(__name__)

# Registry of available loaders
LOADER_REGISTRY: Dict[str, Type[BaseLoader]] = {
    "tabular": TabularLoader,
    "csv": TabularLoader,  # Alias
    "excel": TabularLoader,  # Alias
}


class LoaderFactory:
    """Factory for creating loader instances."""

    @staticmethod
    def create_loader(loader_type: str = "tabular", **kwargs) -> BaseLoader:
        """Create loader instance.

        Args:
            loader_type: Registered loader name ('tabular', 'csv', 'excel')
            **kwargs: Loader-specific configuration

        Returns:
            BaseLoader instance

        Raises:
            ValueError: If loader type is not registered
        """
        loader_type_lower = loader_type.lower().strip()

        if loader_type_lower not in LOADER_REGISTRY:
            available = ", ".join(sorted(LOADER_REGISTRY.keys()))
            raise ValueError(
                f"Unknown loader type: {loader_type}. Available: {available}"
            )

        loader_class = LOADER_REGISTRY[loader_type_lower]
        logger.debug(f"Creating {loader_class.__name__} loader")

        return loader_class(**kwargs)

    @staticmethod
    def register_loader(name: str, loader_class: Type[BaseLoader]) -> None:
        """Register a custom loader.

        Example:
            >>> class ParquetLoader(BaseLoader):
            ...     def load(self, location): ...
            >>> LoaderFactory.register_loader("parquet", ParquetLoader)
        """
        if not issubclass(loader_class, BaseLoader):
            raise TypeError(
                f"Loader class must inherit from BaseLoader, got {loader_class}"
            )

        LOADER_REGISTRY[name.lower()] = loader_class
        logger.info(f"Registered custom loader: {name}")

    @staticmethod
    def list_loaders() -> list[str]:
        return sorted(LOADER_REGISTRY.keys())
