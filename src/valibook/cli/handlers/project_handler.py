"""Business logic for project and table commands."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from valibook.connectors import BaseLoader, LoaderFactory
from valibook.core.store import ProjectStore
from valibook.core.types import Column, Link, LinkMetadata, Table, TableKind
from valibook.errors import TableExistsError
from valibook.utils.config import Config
from valibook.utils.logging import get_logger

logger = get_logger(__name__)


def split_column_ref(ref: str) -> Tuple[str, str]:
    """Split ``table.column`` into its parts.

    Raises:
        ValueError: If the reference has no table part
    """
    table, sep, column = ref.partition(".")
    if not sep or not table or not column:
        raise ValueError(f"Expected TABLE.COLUMN, got {ref!r}")
    return table, column


class ProjectHandler:
    """Handler for project operations.

    Owns the project store and the loader, keeping CLI commands thin and
    focused on user interaction.

    Example:
        >>> handler = ProjectHandler(config, "./data/project.json")
        >>> table = handler.upload("customers.xlsx", TableKind.SOURCE)
    """

    def __init__(self, config: Config, project_path: Optional[str | Path] = None):
        """Initialize handler.

        Args:
            config: Configuration instance
            project_path: Project JSON file (default: data.project_file)
        """
        self.config = config
        self.project_path = Path(project_path or config.get("data.project_file"))
        self.uploads_dir = Path(config.get("data.uploads_dir", "./data/uploads"))
        self._store: Optional[ProjectStore] = None
        self._loader: Optional[BaseLoader] = None

    @property
    def store(self) -> ProjectStore:
        if self._store is None:
            self._store = ProjectStore.open(self.project_path)
        return self._store

    @property
    def loader(self) -> BaseLoader:
        if self._loader is None:
            self._loader = LoaderFactory.create_loader("tabular")
        return self._loader

    def save(self) -> Path:
        return self.store.save(self.project_path)

    def upload(
        self,
        file_path: str | Path,
        kind: TableKind,
        name: Optional[str] = None,
        overwrite: bool = False,
    ) -> Table:
        """Copy a spreadsheet into the uploads directory and register it.

        Args:
            file_path: Spreadsheet to upload (.csv, .tsv, .xlsx, .xls)
            kind: Role of the table
            name: Table name (default: file name without suffix)
            overwrite: Replace an existing table of the same name

        Returns:
            Registered Table

        Raises:
            TableExistsError: If the name is taken and overwrite is False
        """
        file_path = Path(file_path)
        name = name or file_path.stem
        if self.store.has_table(name) and not overwrite:
            raise TableExistsError(name)

        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        stored = self.uploads_dir / f"{name}{file_path.suffix.lower()}"
        if file_path.resolve() != stored.resolve():
            shutil.copyfile(file_path, stored)

        sample_limit = self.config.get("discovery.sample_limit", 200)
        table = self.store.register_upload(
            name, TableKind(kind), stored, self.loader, overwrite, sample_limit
        )
        self.save()
        return table

    def list_tables(self) -> List[Dict]:
        """Summary of every registered table."""
        summaries = []
        for table in self.store.tables():
            pk = table.primary_key
            scope = table.scope_column
            summaries.append(
                {
                    "name": table.name,
                    "kind": table.kind.value,
                    "row_count": table.row_count,
                    "num_columns": len(table.columns),
                    "primary_key": pk.name if pk else None,
                    "scope_column": scope.name if scope else None,
                    "linked_columns": sum(
                        1 for col in table.columns if self.store.link_of(col.id)
                    ),
                }
            )
        return summaries

    def describe_link(self, link: Link) -> str:
        checked = self.store.column(link.checked_column_id)
        reference = self.store.column(link.reference_column_id)
        flags = []
        if link.is_key:
            flags.append("key")
        if link.metadata.forbidden_table_id:
            flags.append(f"codebook={link.metadata.forbidden_table_id}")
        if link.metadata.auto_discovered:
            flags.append("auto")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        return f"{checked.qualified_name} -> {reference.qualified_name}{suffix}"

    def remove_table(self, name: str) -> None:
        """Remove a table with its links and stored upload."""
        location = self.store.location_of(name)
        self.store.remove_table(name)

        if location:
            stored = Path(location)
            if stored.parent.resolve() == self.uploads_dir.resolve() and stored.exists():
                stored.unlink()
                logger.debug(f"Deleted stored upload {stored}")
        self.save()

    def set_primary_key(self, table: str, column: str, value: bool = True) -> Column:
        col = self.store.set_primary_key(table, column, value)
        self.save()
        return col

    def set_validation_scope(self, table: str, column: str, value: bool = True) -> Column:
        col = self.store.set_validation_scope(table, column, value)
        self.save()
        return col

    def link(
        self,
        checked_ref: str,
        reference_ref: str,
        is_key: bool = False,
        codebook: Optional[str] = None,
    ) -> Link:
        """Create (or replace) a link between two ``table.column`` references."""
        checked = self.store.find_column(*split_column_ref(checked_ref))
        reference = self.store.find_column(*split_column_ref(reference_ref))
        if codebook is not None:
            self.store.table(codebook)

        link = self.store.apply_link(
            checked.id,
            reference.id,
            LinkMetadata(is_key=is_key, forbidden_table_id=codebook),
        )
        self.save()
        return link

    def unlink(self, checked_ref: str) -> bool:
        checked = self.store.find_column(*split_column_ref(checked_ref))
        if self.store.link_of(checked.id) is None:
            return False
        self.store.remove_link(checked.id)
        self.save()
        return True
