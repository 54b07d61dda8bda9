"""Table, column and link data types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from valibook.core.names import normalize_name


class TableKind(str, Enum):
    """Role of an uploaded table."""

    SOURCE = "SOURCE"  # Source of truth
    TARGET = "TARGET"  # Table being checked
    FORBIDDEN = "FORBIDDEN"  # Blacklist / codebook
    RANGE = "RANGE"  # Scope definition


class LinkType(str, Enum):
    """Kind of relationship a suggestion describes."""

    MAPPING = "MAPPING"  # source-of-truth column -> checked column
    REFERENCE = "REFERENCE"  # checked table -> another checked table


def column_id_for(table_name: str, index: int) -> str:
    """Build the deterministic id of a column."""
    return f"{table_name}:{index}"


@dataclass
class Column:
    """A single column of an uploaded table."""

    id: str
    table_name: str
    name: str
    index: int
    is_primary_key: bool = False
    is_validation_scope: bool = False
    unique_count: int = 0
    null_count: int = 0
    sample_values: List[str] = field(default_factory=list)
    linked_to_column_id: Optional[str] = None

    @property
    def normalized_name(self) -> str:
        return normalize_name(self.name)

    @property
    def qualified_name(self) -> str:
        return f"{self.table_name}.{self.name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "tableName": self.table_name,
            "columnName": self.name,
            "columnIndex": self.index,
            "isPrimaryKey": self.is_primary_key,
            "isValidationScope": self.is_validation_scope,
            "uniqueCount": self.unique_count,
            "nullCount": self.null_count,
            "sampleValues": list(self.sample_values),
            "linkedToColumnId": self.linked_to_column_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Column:
        return cls(
            id=data["id"],
            table_name=data["tableName"],
            name=data["columnName"],
            index=data["columnIndex"],
            is_primary_key=data.get("isPrimaryKey", False),
            is_validation_scope=data.get("isValidationScope", False),
            unique_count=data.get("uniqueCount", 0),
            null_count=data.get("nullCount", 0),
            sample_values=data.get("sampleValues", []),
            linked_to_column_id=data.get("linkedToColumnId"),
        )

    def __repr__(self) -> str:
        return f"Column({self.qualified_name}, index={self.index})"


@dataclass
class Table:
    """An uploaded table and its ordered columns."""

    name: str
    kind: TableKind
    row_count: int = 0
    columns: List[Column] = field(default_factory=list)

    def column(self, name: str) -> Optional[Column]:
        """Find a column by exact name, then by normalized name."""
        for col in self.columns:
            if col.name == name:
                return col
        wanted = normalize_name(name)
        for col in self.columns:
            if col.normalized_name == wanted:
                return col
        return None

    def column_at(self, index: int) -> Optional[Column]:
        for col in self.columns:
            if col.index == index:
                return col
        return None

    @property
    def primary_key(self) -> Optional[Column]:
        for col in self.columns:
            if col.is_primary_key:
                return col
        return None

    @property
    def scope_column(self) -> Optional[Column]:
        for col in self.columns:
            if col.is_validation_scope:
                return col
        return None

    @property
    def key_column(self) -> Optional[Column]:
        """Column holding the table's lookup values.

        Blacklists and codebooks use their first column, except a TARGET
        table acting as a cross-reference, which uses its declared key.
        """
        if self.kind == TableKind.TARGET and self.primary_key is not None:
            return self.primary_key
        return self.columns[0] if self.columns else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tableName": self.name,
            "tableType": self.kind.value,
            "rowCount": self.row_count,
            "columns": [col.to_dict() for col in self.columns],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Table:
        return cls(
            name=data["tableName"],
            kind=TableKind(data["tableType"]),
            row_count=data.get("rowCount", 0),
            columns=[Column.from_dict(c) for c in data.get("columns", [])],
        )

    def __repr__(self) -> str:
        return (
            f"Table({self.name}, kind={self.kind.value}, "
            f"columns={len(self.columns)}, rows={self.row_count})"
        )


@dataclass
class LinkSuggestion:
    """A proposed link, not persisted until accepted."""

    source_column_id: str  # reference side (source of truth, or referenced table)
    target_column_id: str  # checked side
    match_percentage: int  # 0-100
    common_values: int
    score: float = 0.0
    link_type: LinkType = LinkType.MAPPING
    is_key: bool = False
    forbidden_table_id: Optional[str] = None

    def __post_init__(self):
        if self.source_column_id == self.target_column_id:
            raise ValueError(
                f"Suggestion cannot link column {self.source_column_id} to itself"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sourceColumnId": self.source_column_id,
            "targetColumnId": self.target_column_id,
            "matchPercentage": self.match_percentage,
            "commonValues": self.common_values,
            "score": round(self.score, 4),
            "linkType": self.link_type.value,
            "isKey": self.is_key,
            "forbiddenTableId": self.forbidden_table_id,
        }

    def __repr__(self) -> str:
        key = ", key" if self.is_key else ""
        return (
            f"Suggestion({self.target_column_id} -> {self.source_column_id}, "
            f"{self.link_type.value}, match={self.match_percentage}%{key})"
        )


@dataclass(frozen=True)
class LinkMetadata:
    """Typed metadata attached to an accepted link."""

    is_key: bool = False
    forbidden_table_id: Optional[str] = None
    auto_discovered: bool = False
    score: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isKey": self.is_key,
            "forbiddenTableId": self.forbidden_table_id,
            "autoDiscovered": self.auto_discovered,
            "score": self.score,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> LinkMetadata:
        return cls(
            is_key=bool(data.get("isKey", False)),
            forbidden_table_id=data.get("forbiddenTableId"),
            auto_discovered=bool(data.get("autoDiscovered", False)),
            score=data.get("score"),
        )


@dataclass(frozen=True)
class Link:
    """Accepted directional edge: checked column -> reference column."""

    checked_column_id: str
    reference_column_id: str
    metadata: LinkMetadata = field(default_factory=LinkMetadata)

    @property
    def is_key(self) -> bool:
        return self.metadata.is_key

    def to_dict(self) -> Dict[str, Any]:
        return {
            "checkedColumnId": self.checked_column_id,
            "referenceColumnId": self.reference_column_id,
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Link:
        return cls(
            checked_column_id=data["checkedColumnId"],
            reference_column_id=data["referenceColumnId"],
            metadata=LinkMetadata.from_dict(data.get("metadata", {})),
        )
