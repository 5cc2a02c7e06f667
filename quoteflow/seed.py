"""Demo quotes loaded into an empty store."""

from __future__ import annotations

import logging
from datetime import date
from typing import List

from .contracts import Quote, QuoteStatus, StepStatus, WorkflowStep
from .personas import default_assignee, get_persona
from .persistence import QuoteRepository

logger = logging.getLogger(__name__)


def _steps(persona_ids: List[str], completed: List[date]) -> List[WorkflowStep]:
    """Build a workflow whose first ``len(completed)`` steps are done."""
    steps = []
    for index, persona_id in enumerate(persona_ids):
        if index < len(completed):
            status, done_on = StepStatus.COMPLETED, completed[index]
        elif index == len(completed):
            status, done_on = StepStatus.PENDING, None
        else:
            status, done_on = StepStatus.WAITING, None
        steps.append(
            WorkflowStep(
                id=persona_id,
                name=get_persona(persona_id).name,
                assignee=default_assignee(persona_id),
                status=status,
                completed_date=done_on,
            )
        )
    return steps


def _current(steps: List[WorkflowStep]) -> str | None:
    return next((s.id for s in steps if s.status == StepStatus.PENDING), None)


def demo_quotes() -> List[Quote]:
    standard = ["configuration", "pricing", "quoting", "contract-negotiation"]
    quotes = [
        Quote(
            id="Q-2025-001",
            customer="Acme Corp",
            amount=245000,
            discount=15,
            created_by="Sarah Johnson",
            created_date=date(2025, 1, 15),
            products=["Enterprise Suite", "Premium Support", "Training Package"],
            workflow=_steps(standard, [date(2025, 1, 15), date(2025, 1, 16)]),
        ),
        Quote(
            id="Q-2025-002",
            customer="TechStart Inc",
            amount=125000,
            discount=8,
            created_by="Mike Chen",
            created_date=date(2025, 1, 18),
            products=["Professional Plan", "API Access"],
            workflow=_steps(["configuration", "pricing", "quoting"], [date(2025, 1, 18)]),
        ),
        Quote(
            id="Q-2025-003",
            customer="Global Systems",
            amount=450000,
            discount=20,
            created_by="Sarah Johnson",
            created_date=date(2025, 1, 10),
            products=["Enterprise Suite", "Custom Integration", "Dedicated CSM"],
            workflow=_steps(
                ["configuration", "pricing", "contract-creation"],
                [date(2025, 1, 10), date(2025, 1, 12), date(2025, 1, 14)],
            ),
            status=QuoteStatus.APPROVED,
        ),
        Quote(
            id="Q-2025-004",
            customer="Innovation Labs",
            amount=89000,
            discount=5,
            created_by="Alex Rivera",
            created_date=date(2025, 1, 20),
            products=["Starter Plan", "Onboarding"],
            workflow=_steps(
                ["configuration", "pricing", "contract-creation", "contract-execution"],
                [date(2025, 1, 20), date(2025, 1, 21), date(2025, 1, 23)],
            ),
        ),
    ]
    for quote in quotes:
        quote.current_step = _current(quote.workflow)
    return quotes


async def seed_repository(repository: QuoteRepository) -> int:
    """Populate ``repository`` with demo quotes when it holds none.

    Returns the number of quotes written.
    """
    if await repository.list_quotes():
        return 0
    quotes = demo_quotes()
    for quote in quotes:
        await repository.save_quote(quote)
    logger.info(f"Seeded quote store with {len(quotes)} demo quotes")
    return len(quotes)
