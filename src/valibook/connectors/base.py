"""Base loader interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from valibook.errors import LoadError
from valibook.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class LoadedTable:
    """Rows of a table as read from storage, all cells as strings."""

    name: str
    headers: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @classmethod
    def empty(cls, name: str) -> LoadedTable:
        return cls(name=name)

    def __repr__(self) -> str:
        return f"LoadedTable({self.name}, columns={len(self.headers)}, rows={len(self.rows)})"


class BaseLoader(ABC):
    """Abstract base class for tabular loaders."""

    def __init__(self, **kwargs):
        """Initialize loader.

        Args:
            **kwargs: Loader-specific configuration
        """
        self.config = kwargs
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def load(self, location: str | Path) -> List[List[str]]:
        """Read a stored table.

        Args:
            location: Where the table is stored

        Returns:
            Ordered rows of ordered string cells, header row first

        Raises:
            LoadError: If the location is missing, empty or unreadable
        """
        pass

    def load_table(self, name: str, location: str | Path) -> LoadedTable:
        """Read a stored table and split off its header row."""
        rows = self.load(location)
        if not rows:
            raise LoadError(str(location), "file is empty")
        return LoadedTable(name=name, headers=list(rows[0]), rows=[list(r) for r in rows[1:]])

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.config})"
