from __future__ import annotations

from datetime import date

import pytest

from quoteflow.contracts import Quote, StepStatus, WorkflowStep

TODAY = date(2025, 2, 3)


def build_quote(
    steps: list[tuple[str, str]],
    quote_id: str = "Q-2025-001",
    current_step: str | None = None,
) -> Quote:
    """Build a quote from ``(step_id, status)`` pairs."""
    workflow = [
        WorkflowStep(
            id=step_id,
            name=step_id.replace("-", " ").title(),
            assignee="Someone",
            status=StepStatus(status),
            completed_date=date(2025, 1, 15) if status == "completed" else None,
        )
        for step_id, status in steps
    ]
    if current_step is None:
        current_step = next((s.id for s in workflow if s.status == StepStatus.PENDING), None)
    return Quote(
        id=quote_id,
        customer="Acme Corp",
        amount=245000,
        discount=15,
        created_by="Sarah Johnson",
        created_date=date(2025, 1, 15),
        products=["Enterprise Suite"],
        workflow=workflow,
        current_step=current_step,
    )


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_quote():
    return build_quote
