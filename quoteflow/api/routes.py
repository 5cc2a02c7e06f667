"""HTTP routes for quotes, their workflows and the persona catalog."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel

from ..contracts import CamelModel, Persona, Quote, QuoteStatus, StepDescriptor
from ..engine import WorkflowEngine
from ..listing import QuoteStats, filter_quotes, sort_quotes, summarize
from ..personas import list_personas

logger = logging.getLogger(__name__)
router = APIRouter(tags=["quotes"])


def get_engine(request: Request) -> WorkflowEngine:
    """Return the engine bound to the running application."""
    return request.app.state.engine


# ── Request / Response models ────────────────────────────────────────


class WorkflowUpdateRequest(CamelModel):
    workflow: List[StepDescriptor]


class WorkflowUpdateResponse(BaseModel):
    success: bool = True
    quote: Quote


class CompleteStepRequest(CamelModel):
    quote_id: str
    step_id: str


# ── Endpoints ────────────────────────────────────────────────────────


@router.get("/quotes", response_model=List[Quote])
async def list_quotes(
    search: Optional[str] = None,
    status: Optional[QuoteStatus] = None,
    sort: Optional[str] = Query(default=None, description="date-desc, date-asc, amount-desc, amount-asc or customer"),
    engine: WorkflowEngine = Depends(get_engine),
) -> List[Quote]:
    """List quotes, optionally searched, filtered by status and sorted."""
    quotes = await engine.list_quotes()
    return sort_quotes(filter_quotes(quotes, search=search, status=status), sort)


@router.get("/quotes/stats", response_model=QuoteStats)
async def quote_stats(engine: WorkflowEngine = Depends(get_engine)) -> QuoteStats:
    return summarize(await engine.list_quotes())


@router.get("/quotes/{quote_id}", response_model=Quote)
async def get_quote(quote_id: str, engine: WorkflowEngine = Depends(get_engine)) -> Quote:
    return await engine.get_quote(quote_id)


@router.put("/quotes/{quote_id}/workflow", response_model=WorkflowUpdateResponse)
async def replace_workflow(
    quote_id: str,
    body: WorkflowUpdateRequest,
    engine: WorkflowEngine = Depends(get_engine),
) -> WorkflowUpdateResponse:
    """Replace a quote's workflow with the submitted step sequence."""
    quote = await engine.replace_workflow(quote_id, body.workflow)
    return WorkflowUpdateResponse(quote=quote)


@router.post("/workflow/complete-step", response_model=Quote)
async def complete_step(
    body: CompleteStepRequest, engine: WorkflowEngine = Depends(get_engine)
) -> Quote:
    """Mark a workflow step complete and advance to the next one."""
    return await engine.advance_step(body.quote_id, body.step_id)


@router.get("/workflow-personas", response_model=List[Persona])
async def workflow_personas() -> List[Persona]:
    return list_personas()
