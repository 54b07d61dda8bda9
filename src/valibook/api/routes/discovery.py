"""Link discovery endpoint."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from valibook.api.models import DiscoverRequest, DiscoverResponse, SuggestionItem
from valibook.core.context import RunContext
from valibook.core.linkage import DiscoveryEngine, DiscoveryMode
from valibook.core.types import LinkSuggestion
from valibook.utils.config import get_config
from valibook.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["discovery"])


@router.post("/discover", response_model=DiscoverResponse)
async def discover(request: DiscoverRequest, http_request: Request) -> DiscoverResponse:
    """Suggest column links, optionally accepting them.

    Raises:
        HTTPException: If the mode is unknown
    """
    try:
        mode = DiscoveryMode(request.mode.lower())
    except ValueError:
        raise HTTPException(
            status_code=422,
            detail=f"Unknown mode {request.mode!r}; use mappings, references or all",
        )

    state = http_request.app.state
    config = get_config()

    def run() -> List[LinkSuggestion]:
        with state.lock:
            store = state.store
            context = RunContext(
                store, state.loader, config.get("discovery.sample_limit", 200)
            )
            suggestions = DiscoveryEngine(config.section("discovery")).discover(
                store.tables(), context, mode=mode, existing_links=store.links()
            )
            if request.apply and suggestions:
                store.accept_all(suggestions)
                store.save()
            return suggestions

    suggestions = await run_in_threadpool(run)
    logger.info(f"API discovery ({mode.value}) returned {len(suggestions)} suggestions")

    return DiscoverResponse(
        mode=mode.value,
        applied=request.apply,
        suggestions=[
            SuggestionItem(
                source_column_id=s.source_column_id,
                target_column_id=s.target_column_id,
                match_percentage=s.match_percentage,
                common_values=s.common_values,
                score=round(s.score, 4),
                link_type=s.link_type.value,
                is_key=s.is_key,
                forbidden_table_id=s.forbidden_table_id,
            )
            for s in suggestions
        ],
    )
