"""Approval workflow engine for quotes.

A quote's workflow is an ordered list of steps. Steps before the current
step are ``completed``, the current step is ``pending`` and the steps after
it are ``waiting``. Two mutations exist: completing the current step, which
advances the pointer, and replacing the whole sequence, which restarts it.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator, Callable, Dict, List, Optional, Sequence

from .contracts import Quote, QuoteStatus, StepDescriptor, StepStatus, WorkflowStep
from .errors import ConflictError, DuplicateStepError, NotFoundError, ValidationError
from .personas import UNASSIGNED, default_assignee, get_persona
from .persistence import QuoteRepository, get_repository

logger = logging.getLogger(__name__)


def resolve_assignee(persona_id: str, assignee: Optional[str]) -> str:
    """Return ``assignee`` unless it is blank or the unassigned placeholder."""
    if assignee and assignee.strip() and assignee.strip() != UNASSIGNED:
        return assignee.strip()
    return default_assignee(persona_id)


def add_step(
    steps: Sequence[StepDescriptor], persona_id: str, assignee: Optional[str] = None
) -> List[StepDescriptor]:
    """Append a catalog persona to an in-progress step list.

    Raises:
        ValidationError: ``persona_id`` is not in the catalog.
        DuplicateStepError: the persona is already part of ``steps``.
    """
    persona = get_persona(persona_id)
    if persona is None:
        raise ValidationError(f"Unknown workflow step: {persona_id}")
    if any(s.id == persona_id for s in steps):
        raise DuplicateStepError(persona_id, persona.name)
    return [
        *steps,
        StepDescriptor(
            id=persona.id,
            name=persona.name,
            assignee=resolve_assignee(persona.id, assignee),
        ),
    ]


def build_workflow(steps: Sequence[StepDescriptor], today: date) -> List[WorkflowStep]:
    """Turn editor descriptors into a freshly started workflow.

    The first step is completed on ``today``, the second becomes the pending
    step and everything after it waits.
    """
    if not steps:
        raise ValidationError("Workflow must have at least one step")

    seen: set[str] = set()
    workflow: List[WorkflowStep] = []
    for index, descriptor in enumerate(steps):
        persona = get_persona(descriptor.id)
        if persona is None:
            raise ValidationError(f"Unknown workflow step: {descriptor.id}")
        if descriptor.id in seen:
            raise DuplicateStepError(descriptor.id, persona.name)
        seen.add(descriptor.id)

        if index == 0:
            status, completed = StepStatus.COMPLETED, today
        elif index == 1:
            status, completed = StepStatus.PENDING, None
        else:
            status, completed = StepStatus.WAITING, None
        workflow.append(
            WorkflowStep(
                id=descriptor.id,
                name=descriptor.name or persona.name,
                assignee=resolve_assignee(descriptor.id, descriptor.assignee),
                status=status,
                completed_date=completed,
            )
        )
    return workflow


def complete_step(quote: Quote, step_id: str, today: date) -> Quote:
    """Return a copy of ``quote`` with ``step_id`` completed and the pointer moved.

    Only the step awaiting action may be completed: re-completing a finished
    step or skipping ahead to a waiting one raises :class:`ConflictError`.
    """
    index = quote.step_index(step_id)
    if index == -1:
        raise NotFoundError("Workflow step not found")

    step = quote.workflow[index]
    if step.status == StepStatus.COMPLETED:
        raise ConflictError(f"Workflow step '{step_id}' is already completed")
    if step.status != StepStatus.PENDING and step_id != quote.current_step:
        raise ConflictError(f"Workflow step '{step_id}' is not the current step")

    updated = quote.model_copy(deep=True)
    done = updated.workflow[index]
    done.status = StepStatus.COMPLETED
    done.completed_date = today

    if index + 1 < len(updated.workflow):
        following = updated.workflow[index + 1]
        following.status = StepStatus.PENDING
        updated.current_step = following.id
    else:
        updated.current_step = None
        updated.status = QuoteStatus.APPROVED
    return updated


class WorkflowEngine:
    """Applies workflow transitions to quotes held in a repository.

    Operations on the same quote id are serialised with a per-quote lock;
    each one reads the quote, computes the new workflow on a copy and writes
    it back with a single repository call.
    """

    def __init__(
        self,
        repository: QuoteRepository | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._repository = repository or get_repository()
        self._today = today
        # entries live only while some call holds or waits on the lock
        self._locks: Dict[str, asyncio.Lock] = {}
        self._waiters: Dict[str, int] = {}

    @property
    def repository(self) -> QuoteRepository:
        return self._repository

    @asynccontextmanager
    async def _quote_lock(self, quote_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(quote_id)
        if lock is None:
            lock = self._locks[quote_id] = asyncio.Lock()
        self._waiters[quote_id] = self._waiters.get(quote_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[quote_id] -= 1
            if self._waiters[quote_id] == 0:
                del self._waiters[quote_id]
                del self._locks[quote_id]

    async def get_quote(self, quote_id: str) -> Quote:
        quote = await self._repository.get_quote(quote_id)
        if quote is None:
            raise NotFoundError("Quote not found")
        return quote

    async def list_quotes(self) -> List[Quote]:
        return await self._repository.list_quotes()

    async def advance_step(self, quote_id: str, step_id: str) -> Quote:
        """Mark ``step_id`` complete and activate the step after it."""
        async with self._quote_lock(quote_id):
            quote = await self.get_quote(quote_id)
            try:
                updated = complete_step(quote, step_id, self._today())
            except (NotFoundError, ConflictError) as e:
                logger.warning(f"Rejected advance of {step_id} on quote {quote_id}: {e}")
                raise
            await self._persist(updated)

        if updated.current_step is None:
            logger.info(f"Workflow completed for quote {quote_id}; quote approved")
        else:
            logger.info(
                f"Completed step {step_id} for quote {quote_id}; "
                f"current step is now {updated.current_step}"
            )
        return updated

    async def replace_workflow(
        self, quote_id: str, steps: Sequence[StepDescriptor]
    ) -> Quote:
        """Replace the whole step sequence and restart it."""
        try:
            workflow = build_workflow(steps, self._today())
        except ValidationError as e:
            logger.warning(f"Rejected workflow for quote {quote_id}: {e}")
            raise

        async with self._quote_lock(quote_id):
            quote = await self.get_quote(quote_id)
            updated = quote.model_copy(update={"workflow": workflow})
            if len(workflow) > 1:
                updated.current_step = workflow[1].id
                updated.status = QuoteStatus.PENDING
            else:
                updated.current_step = None
                updated.status = QuoteStatus.APPROVED
            await self._persist(updated)

        logger.info(
            f"Replaced workflow for quote {quote_id} with "
            f"{[s.id for s in workflow]}"
        )
        return updated

    async def _persist(self, quote: Quote) -> None:
        await self._repository.update_workflow(
            quote.id, quote.workflow, quote.current_step, quote.status
        )
