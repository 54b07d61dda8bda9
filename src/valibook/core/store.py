"""Column metadata store: tables, links and rules of a project."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from valibook.connectors.base import BaseLoader
from valibook.core.rules import ValidationRule, rule_from_dict
from valibook.core.types import (
    Column,
    Link,
    LinkMetadata,
    LinkSuggestion,
    Table,
    TableKind,
)
from valibook.core.value_index import DEFAULT_SAMPLE_LIMIT, profile_table
from valibook.errors import TableExistsError, UnknownColumnError, UnknownTableError
from valibook.utils.logging import get_logger

logger = get_logger(__name__)


class ColumnStore(ABC):
    """Read/write access to column metadata and links.

    The engine never assumes a storage backend; it only needs these
    operations.
    """

    @abstractmethod
    def tables(self) -> List[Table]:
        """All registered tables in registration order."""
        pass

    @abstractmethod
    def columns_of(self, table_name: str) -> List[Column]:
        pass

    @abstractmethod
    def link_of(self, column_id: str) -> Optional[Link]:
        pass

    @abstractmethod
    def links(self) -> List[Link]:
        pass

    @abstractmethod
    def apply_link(
        self,
        column_id: str,
        target_column_id: str,
        metadata: Optional[LinkMetadata] = None,
    ) -> Link:
        """Persist ``column_id -> target_column_id``, replacing any earlier link."""
        pass

    @abstractmethod
    def location_of(self, table_name: str) -> Optional[str]:
        pass

    @abstractmethod
    def rules(self) -> List[ValidationRule]:
        pass

    def table(self, name: str) -> Table:
        for table in self.tables():
            if table.name == name:
                return table
        raise UnknownTableError(name)

    def has_table(self, name: str) -> bool:
        return any(table.name == name for table in self.tables())

    def column(self, column_id: str) -> Column:
        for table in self.tables():
            for col in table.columns:
                if col.id == column_id:
                    return col
        raise UnknownColumnError(column_id)

    def find_column(self, table_name: str, column_name: str) -> Column:
        col = self.table(table_name).column(column_name)
        if col is None:
            raise UnknownColumnError(f"{table_name}.{column_name}")
        return col

    def table_of(self, column_id: str) -> Table:
        return self.table(self.column(column_id).table_name)


class ProjectStore(ColumnStore):
    """In-memory store with JSON file persistence.

    Example:
        >>> store = ProjectStore.open("./data/project.json")
        >>> store.register_upload("customers", TableKind.SOURCE, "customers.xlsx", loader)
        >>> store.save()
    """

    def __init__(self, name: str = "project", path: Optional[str | Path] = None):
        self.name = name
        self.path = Path(path) if path else None
        self._tables: Dict[str, Table] = {}
        self._locations: Dict[str, str] = {}
        self._links: Dict[str, Link] = {}
        self._rules: Dict[str, ValidationRule] = {}

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def tables(self) -> List[Table]:
        return list(self._tables.values())

    def columns_of(self, table_name: str) -> List[Column]:
        return list(self.table(table_name).columns)

    def location_of(self, table_name: str) -> Optional[str]:
        return self._locations.get(table_name)

    def add_table(
        self, table: Table, location: Optional[str] = None, overwrite: bool = False
    ) -> Table:
        """Register a table.

        Raises:
            TableExistsError: If the name is taken and ``overwrite`` is False
        """
        if table.name in self._tables:
            if not overwrite:
                raise TableExistsError(table.name)
            logger.info(f"Overwriting existing table {table.name}")
            self.remove_table(table.name)

        self._tables[table.name] = table
        if location is not None:
            self._locations[table.name] = str(location)
        logger.debug(f"Registered {table}")
        return table

    def register_upload(
        self,
        name: str,
        kind: TableKind,
        location: str | Path,
        loader: BaseLoader,
        overwrite: bool = False,
        sample_limit: int = DEFAULT_SAMPLE_LIMIT,
    ) -> Table:
        """Load a stored file, profile its columns and register it."""
        if name in self._tables and not overwrite:
            raise TableExistsError(name)

        loaded = loader.load_table(name, location)
        table = profile_table(
            name, kind, loaded.headers, loaded.rows, sample_limit=sample_limit
        )
        return self.add_table(table, location=str(location), overwrite=overwrite)

    def remove_table(self, name: str) -> None:
        """Delete a table, its columns and every link touching them."""
        table = self.table(name)
        column_ids = {col.id for col in table.columns}

        dropped = [
            checked
            for checked, link in self._links.items()
            if checked in column_ids or link.reference_column_id in column_ids
        ]
        for checked in dropped:
            self.remove_link(checked)

        del self._tables[name]
        self._locations.pop(name, None)
        logger.info(f"Removed table {name} ({len(dropped)} links dropped)")

    def set_primary_key(self, table_name: str, column_name: str, value: bool = True) -> Column:
        """Mark (or unmark) the key column; a table has at most one."""
        target = self.find_column(table_name, column_name)
        if value:
            for col in self.table(table_name).columns:
                col.is_primary_key = False
        target.is_primary_key = value
        return target

    def set_validation_scope(
        self, table_name: str, column_name: str, value: bool = True
    ) -> Column:
        target = self.find_column(table_name, column_name)
        target.is_validation_scope = value
        return target

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def link_of(self, column_id: str) -> Optional[Link]:
        return self._links.get(column_id)

    def links(self) -> List[Link]:
        return list(self._links.values())

    def apply_link(
        self,
        column_id: str,
        target_column_id: str,
        metadata: Optional[LinkMetadata] = None,
    ) -> Link:
        if column_id == target_column_id:
            raise ValueError(f"Cannot link column {column_id} to itself")

        checked = self.column(column_id)
        self.column(target_column_id)

        link = Link(
            checked_column_id=column_id,
            reference_column_id=target_column_id,
            metadata=metadata or LinkMetadata(),
        )
        self._links[column_id] = link
        checked.linked_to_column_id = target_column_id
        return link

    def remove_link(self, column_id: str) -> None:
        if self._links.pop(column_id, None) is None:
            return
        self.column(column_id).linked_to_column_id = None

    def accept(self, suggestion: LinkSuggestion) -> Link:
        """Persist a discovery suggestion as a link."""
        link = self.apply_link(
            suggestion.target_column_id,
            suggestion.source_column_id,
            LinkMetadata(
                is_key=suggestion.is_key,
                forbidden_table_id=suggestion.forbidden_table_id,
                auto_discovered=True,
                score=round(suggestion.score, 4),
            ),
        )

        if suggestion.is_key:
            reference = self.column(suggestion.source_column_id)
            reference_table = self.table(reference.table_name)
            if reference_table.primary_key is None:
                reference.is_primary_key = True

        return link

    def accept_all(self, suggestions: Iterable[LinkSuggestion]) -> List[Link]:
        return [self.accept(s) for s in suggestions]

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def rules(self) -> List[ValidationRule]:
        return list(self._rules.values())

    def rule(self, rule_id: str) -> Optional[ValidationRule]:
        return self._rules.get(rule_id)

    def add_rules(self, rules: Iterable[ValidationRule]) -> List[ValidationRule]:
        """Store rules whose table and column exist; others are skipped."""
        added = []
        for rule in rules:
            if not self.has_table(rule.table) or self.table(rule.table).column(rule.column) is None:
                logger.warning(
                    f"Skipping rule {rule.id}: unknown column {rule.table}.{rule.column}"
                )
                continue
            self._rules[rule.id] = rule
            added.append(rule)
        return added

    def delete_rule(self, rule_id: str) -> bool:
        return self._rules.pop(rule_id, None) is not None

    def clear_rules(self) -> int:
        count = len(self._rules)
        self._rules.clear()
        return count

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "tables": [
                {**table.to_dict(), "location": self._locations.get(table.name)}
                for table in self._tables.values()
            ],
            "links": [link.to_dict() for link in self._links.values()],
            "rules": [rule.to_dict() for rule in self._rules.values()],
        }

    @classmethod
    def from_dict(cls, data: Dict, path: Optional[str | Path] = None) -> ProjectStore:
        store = cls(name=data.get("name", "project"), path=path)
        for table_data in data.get("tables", []):
            store.add_table(Table.from_dict(table_data), location=table_data.get("location"))
        for link_data in data.get("links", []):
            link = Link.from_dict(link_data)
            store._links[link.checked_column_id] = link
        for rule_data in data.get("rules", []):
            rule = rule_from_dict(rule_data)
            store._rules[rule.id] = rule
        return store

    def save(self, path: Optional[str | Path] = None) -> Path:
        """Save project metadata to a JSON file."""
        path = Path(path) if path else self.path
        if path is None:
            raise ValueError("No path given for saving the project")
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

        self.path = path
        logger.info(f"Saved project metadata to {path}")
        return path

    @classmethod
    def load(cls, path: str | Path) -> ProjectStore:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data, path=path)

    @classmethod
    def open(cls, path: str | Path, name: str = "project") -> ProjectStore:
        """Load the project at ``path``, or start an empty one there."""
        path = Path(path)
        if path.exists():
            return cls.load(path)
        logger.info(f"Starting new project at {path}")
        return cls(name=name, path=path)

    def __repr__(self) -> str:
        return (
            f"ProjectStore({self.name}, tables={len(self._tables)}, "
            f"links={len(self._links)}, rules={len(self._rules)})"
        )
