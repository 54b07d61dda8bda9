"""Table metadata endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from valibook.api.models import ColumnInfo, TableInfo, TablesResponse
from valibook.core.types import Table

router = APIRouter(prefix="/api/v1", tags=["tables"])


def to_table_info(table: Table) -> TableInfo:
    return TableInfo(
        name=table.name,
        kind=table.kind.value,
        row_count=table.row_count,
        columns=[
            ColumnInfo(
                id=col.id,
                name=col.name,
                index=col.index,
                is_primary_key=col.is_primary_key,
                is_validation_scope=col.is_validation_scope,
                unique_count=col.unique_count,
                null_count=col.null_count,
                sample_values=col.sample_values,
                linked_to_column_id=col.linked_to_column_id,
            )
            for col in table.columns
        ],
    )


@router.get("/tables", response_model=TablesResponse)
async def list_tables(request: Request) -> TablesResponse:
    """List project tables with column statistics."""
    tables = [to_table_info(t) for t in request.app.state.store.tables()]
    return TablesResponse(tables=tables, total=len(tables))


@router.get("/tables/{name}", response_model=TableInfo)
async def get_table(name: str, request: Request) -> TableInfo:
    """Get one table.

    Raises:
        HTTPException: If the table does not exist
    """
    store = request.app.state.store
    if not store.has_table(name):
        raise HTTPException(status_code=404, detail=f"Table not found: {name}")
    return to_table_info(store.table(name))
