"""Pydantic models for API requests and responses."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Valibook version")
    project_loaded: bool = Field(..., description="Whether a project is loaded")
    num_tables: int = Field(0, description="Registered tables")
    num_links: int = Field(0, description="Accepted links")
    latency: Dict[str, Any] = Field(
        default_factory=dict, description="Timing statistics per operation"
    )


class ColumnInfo(BaseModel):
    """Column metadata."""

    id: str
    name: str
    index: int
    is_primary_key: bool = False
    is_validation_scope: bool = False
    unique_count: int = 0
    null_count: int = 0
    sample_values: List[str] = Field(default_factory=list)
    linked_to_column_id: Optional[str] = None


class TableInfo(BaseModel):
    """Table metadata."""

    name: str = Field(..., description="Table name")
    kind: str = Field(..., description="SOURCE, TARGET, FORBIDDEN or RANGE")
    row_count: int = Field(..., description="Number of data rows")
    columns: List[ColumnInfo] = Field(default_factory=list)


class TablesResponse(BaseModel):
    """All project tables."""

    tables: List[TableInfo]
    total: int


class DiscoverRequest(BaseModel):
    """Link discovery request."""

    mode: str = Field("all", description="'mappings', 'references' or 'all'")
    apply: bool = Field(False, description="Accept every suggestion")

    model_config = {"json_schema_extra": {"examples": [{"mode": "all", "apply": False}]}}


class SuggestionItem(BaseModel):
    """A proposed link."""

    source_column_id: str = Field(..., description="Reference-side column")
    target_column_id: str = Field(..., description="Checked-side column")
    match_percentage: int = Field(..., ge=0, le=100)
    common_values: int
    score: float
    link_type: str
    is_key: bool = False
    forbidden_table_id: Optional[str] = None


class DiscoverResponse(BaseModel):
    """Link discovery response."""

    mode: str
    applied: bool
    suggestions: List[SuggestionItem]


class ValidateRequest(BaseModel):
    """Validation request."""

    tables: Optional[List[str]] = Field(None, description="Restrict to these tables")
    scope_table: Optional[str] = Field(None, description="Table whose keys limit checked rows")

    model_config = {
        "json_schema_extra": {"examples": [{"tables": ["crm_export"], "scope_table": None}]}
    }


class ValidationSummary(BaseModel):
    """Check counts of a validation run."""

    total_checks: int = Field(..., alias="totalChecks")
    passed: int
    failed: int

    model_config = {"populate_by_name": True}


class ValidationResponse(BaseModel):
    """Full validation report."""

    errors: List[Dict[str, Any]] = Field(default_factory=list)
    reconciliation: List[Dict[str, Any]] = Field(default_factory=list)
    forbidden: List[Dict[str, Any]] = Field(default_factory=list)
    rule_failures: List[Dict[str, Any]] = Field(default_factory=list, alias="ruleFailures")
    summary: ValidationSummary
    setup_errors: List[Dict[str, Any]] = Field(default_factory=list, alias="setupErrors")
    warnings: List[str] = Field(default_factory=list)
    checks: List[Dict[str, Any]] = Field(default_factory=list)
    protocol: str = ""
    generated_at: str = Field(..., alias="generatedAt")

    model_config = {"populate_by_name": True}
