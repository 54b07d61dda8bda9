"""Validation endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool

from valibook.api.models import ValidateRequest, ValidationResponse
from valibook.core.validation import ValidationReport, Validator
from valibook.utils.config import get_config
from valibook.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["validation"])


@router.post("/validate", response_model=ValidationResponse)
async def validate(request: ValidateRequest, http_request: Request) -> ValidationResponse:
    """Validate the project and return the full report.

    Findings never produce an error status; they are entries of the
    report.
    """
    state = http_request.app.state

    def run() -> ValidationReport:
        with state.lock:
            validator = Validator(
                state.store, state.loader, config=get_config().section("validation")
            )
            return validator.validate(
                tables=request.tables, scope_table=request.scope_table
            )

    report = await run_in_threadpool(run)
    logger.info(f"API validation finished: {report.summary}")
    return ValidationResponse(**report.to_dict())
