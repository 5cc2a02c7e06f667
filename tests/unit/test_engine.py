"""Workflow engine transition tests."""

import asyncio

import pytest

from quoteflow.contracts import QuoteStatus, StepDescriptor, StepStatus
from quoteflow.engine import WorkflowEngine, add_step, build_workflow, complete_step
from quoteflow.errors import (
    ConflictError,
    DuplicateStepError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from quoteflow.persistence import InMemoryQuoteRepository


def _assert_progression(quote) -> None:
    statuses = [s.status for s in quote.workflow]
    pending = [s for s in quote.workflow if s.status == StepStatus.PENDING]
    assert len(pending) <= 1
    # completed steps form a prefix of the sequence
    first_open = next(
        (i for i, s in enumerate(statuses) if s != StepStatus.COMPLETED), len(statuses)
    )
    assert all(s != StepStatus.COMPLETED for s in statuses[first_open:])
    for step in quote.workflow:
        assert (step.completed_date is not None) == (step.status == StepStatus.COMPLETED)
    if pending:
        assert quote.current_step == pending[0].id
    else:
        assert quote.current_step is None
        assert quote.status == QuoteStatus.APPROVED


@pytest.fixture
def repo():
    return InMemoryQuoteRepository()


@pytest.fixture
def engine(repo, today):
    return WorkflowEngine(repo, today=lambda: today)


@pytest.mark.asyncio
async def test_advance_moves_to_next_step(engine, repo, make_quote, today):
    quote = make_quote(
        [("ae", "completed"), ("deal-desk", "pending"), ("customer", "waiting")]
    )
    await repo.save_quote(quote)

    result = await engine.advance_step(quote.id, "deal-desk")

    deal_desk = result.find_step("deal-desk")
    assert deal_desk.status == StepStatus.COMPLETED
    assert deal_desk.completed_date == today
    assert result.find_step("customer").status == StepStatus.PENDING
    assert result.current_step == "customer"
    assert result.status == QuoteStatus.PENDING
    _assert_progression(result)

    stored = await repo.get_quote(quote.id)
    assert stored == result


@pytest.mark.asyncio
async def test_advance_last_step_approves_quote(engine, repo, make_quote):
    quote = make_quote([("ae", "completed"), ("customer", "pending")])
    await repo.save_quote(quote)

    result = await engine.advance_step(quote.id, "customer")

    assert result.current_step is None
    assert result.status == QuoteStatus.APPROVED
    assert result.is_finished()
    _assert_progression(result)


@pytest.mark.asyncio
async def test_advance_unknown_step_does_not_mutate(engine, repo, make_quote):
    quote = make_quote([("ae", "completed"), ("deal-desk", "pending")])
    await repo.save_quote(quote)

    with pytest.raises(NotFoundError, match="Workflow step not found"):
        await engine.advance_step(quote.id, "nonexistent")

    assert await repo.get_quote(quote.id) == quote


@pytest.mark.asyncio
async def test_advance_unknown_quote(engine):
    with pytest.raises(NotFoundError, match="Quote not found"):
        await engine.advance_step("Q-missing", "ae")


@pytest.mark.asyncio
async def test_double_advance_fails_without_changing_state(engine, repo, make_quote):
    quote = make_quote(
        [("ae", "completed"), ("deal-desk", "pending"), ("customer", "waiting")]
    )
    await repo.save_quote(quote)
    first = await engine.advance_step(quote.id, "deal-desk")

    with pytest.raises(ConflictError):
        await engine.advance_step(quote.id, "deal-desk")

    stored = await repo.get_quote(quote.id)
    assert stored.current_step == "customer"
    assert stored.find_step("deal-desk").completed_date == first.find_step(
        "deal-desk"
    ).completed_date


@pytest.mark.asyncio
async def test_advance_cannot_skip_waiting_step(engine, repo, make_quote):
    quote = make_quote(
        [("ae", "completed"), ("deal-desk", "pending"), ("customer", "waiting")]
    )
    await repo.save_quote(quote)

    with pytest.raises(ConflictError, match="not the current step"):
        await engine.advance_step(quote.id, "customer")

    assert await repo.get_quote(quote.id) == quote


def test_complete_step_accepts_current_waiting_step(make_quote, today):
    # workflows saved by older editors point at a step still marked waiting
    quote = make_quote(
        [("configuration", "completed"), ("pricing", "waiting"), ("quoting", "waiting")],
        current_step="pricing",
    )

    result = complete_step(quote, "pricing", today)

    assert result.current_step == "quoting"
    assert result.find_step("quoting").status == StepStatus.PENDING
    assert quote.find_step("pricing").status == StepStatus.WAITING


@pytest.mark.asyncio
async def test_advance_through_whole_workflow_keeps_invariants(engine, repo, make_quote):
    quote = make_quote(
        [
            ("configuration", "completed"),
            ("pricing", "pending"),
            ("quoting", "waiting"),
            ("contract-creation", "waiting"),
        ]
    )
    await repo.save_quote(quote)

    current = quote
    while current.current_step is not None:
        current = await engine.advance_step(quote.id, current.current_step)
        _assert_progression(current)

    assert current.status == QuoteStatus.APPROVED


@pytest.mark.asyncio
async def test_replace_workflow_restarts_sequence(engine, repo, make_quote, today):
    quote = make_quote(
        [("configuration", "completed"), ("pricing", "completed"), ("quoting", "pending")]
    )
    await repo.save_quote(quote)
    steps = [
        StepDescriptor(id="quoting", assignee="Dana"),
        StepDescriptor(id="configuration"),
        StepDescriptor(id="contract-negotiation", assignee="Unassigned"),
    ]

    result = await engine.replace_workflow(quote.id, steps)

    assert [s.id for s in result.workflow] == ["quoting", "configuration", "contract-negotiation"]
    first, second, third = result.workflow
    assert first.status == StepStatus.COMPLETED and first.completed_date == today
    assert second.status == StepStatus.PENDING and second.completed_date is None
    assert third.status == StepStatus.WAITING and third.completed_date is None
    assert result.current_step == "configuration"
    assert result.status == QuoteStatus.PENDING
    assert first.assignee == "Dana"
    assert second.assignee == "Account Executive"
    assert third.assignee == "Chief Revenue Officer"
    assert second.name == "Configuration"
    _assert_progression(result)

    stored = await repo.get_quote(quote.id)
    assert [s.id for s in stored.workflow] == [s.id for s in steps]


@pytest.mark.asyncio
async def test_replace_empty_workflow_rejected(engine, repo, make_quote):
    quote = make_quote([("configuration", "completed"), ("pricing", "pending")])
    await repo.save_quote(quote)

    with pytest.raises(ValidationError, match="Workflow must have at least one step"):
        await engine.replace_workflow(quote.id, [])

    assert await repo.get_quote(quote.id) == quote


@pytest.mark.asyncio
async def test_replace_blank_assignee_uses_persona_default(engine, repo, make_quote):
    quote = make_quote([("configuration", "completed"), ("quoting", "pending")])
    await repo.save_quote(quote)

    result = await engine.replace_workflow(
        quote.id,
        [StepDescriptor(id="configuration"), StepDescriptor(id="pricing", assignee="")],
    )

    assert result.find_step("pricing").assignee == "Finance Team"


@pytest.mark.asyncio
async def test_replace_single_step_finishes_workflow(engine, repo, make_quote):
    quote = make_quote([("configuration", "completed"), ("pricing", "pending")])
    await repo.save_quote(quote)

    result = await engine.replace_workflow(quote.id, [StepDescriptor(id="pricing")])

    assert result.current_step is None
    assert result.status == QuoteStatus.APPROVED
    _assert_progression(result)


@pytest.mark.asyncio
async def test_replace_rejects_duplicates_and_unknown_personas(engine, repo, make_quote):
    quote = make_quote([("configuration", "completed"), ("pricing", "pending")])
    await repo.save_quote(quote)

    with pytest.raises(DuplicateStepError):
        await engine.replace_workflow(
            quote.id, [StepDescriptor(id="pricing"), StepDescriptor(id="pricing")]
        )
    with pytest.raises(ValidationError, match="Unknown workflow step"):
        await engine.replace_workflow(quote.id, [StepDescriptor(id="astrology")])

    assert await repo.get_quote(quote.id) == quote


@pytest.mark.asyncio
async def test_replace_unknown_quote(engine):
    with pytest.raises(NotFoundError, match="Quote not found"):
        await engine.replace_workflow("Q-missing", [StepDescriptor(id="pricing")])


def test_build_workflow_ignores_submitted_status(today):
    workflow = build_workflow(
        [
            StepDescriptor.model_validate(
                {"id": "configuration", "status": "waiting", "completedDate": None}
            ),
            StepDescriptor.model_validate(
                {"id": "pricing", "status": "completed", "completedDate": "2024-12-01"}
            ),
        ],
        today,
    )

    assert [s.status for s in workflow] == [StepStatus.COMPLETED, StepStatus.PENDING]
    assert workflow[1].completed_date is None


def test_add_step_appends_with_default_assignee():
    steps = add_step([], "configuration")
    steps = add_step(steps, "pricing", assignee="Jordan")

    assert [s.id for s in steps] == ["configuration", "pricing"]
    assert steps[0].assignee == "Account Executive"
    assert steps[0].name == "Configuration"
    assert steps[1].assignee == "Jordan"


def test_add_step_flags_duplicate_and_unknown():
    steps = add_step([], "billing")

    with pytest.raises(DuplicateStepError, match="Billing is already in the workflow") as exc:
        add_step(steps, "billing")
    assert exc.value.persona_id == "billing"

    with pytest.raises(ValidationError):
        add_step(steps, "not-a-persona")


@pytest.mark.asyncio
async def test_locks_are_released_after_each_call(engine, repo, make_quote):
    for i in range(50):
        with pytest.raises(NotFoundError):
            await engine.advance_step(f"Q-missing-{i}", "pricing")
        with pytest.raises(NotFoundError):
            await engine.replace_workflow(f"Q-missing-{i}", [StepDescriptor(id="pricing")])
    assert engine._locks == {}
    assert engine._waiters == {}

    quote = make_quote([("configuration", "completed"), ("pricing", "pending"), ("quoting", "waiting")])
    await repo.save_quote(quote)
    await asyncio.gather(
        engine.advance_step(quote.id, "pricing"),
        engine.advance_step(quote.id, "quoting"),
    )
    assert engine._locks == {}
    assert (await repo.get_quote(quote.id)).status == QuoteStatus.APPROVED


class BrokenWriteRepository(InMemoryQuoteRepository):
    async def update_workflow(self, quote_id, workflow, current_step, status):
        raise StoreError("Quote store write failed: disk full")


@pytest.mark.asyncio
async def test_store_failure_leaves_quote_unchanged(make_quote, today):
    repo = BrokenWriteRepository()
    engine = WorkflowEngine(repo, today=lambda: today)
    quote = make_quote([("configuration", "completed"), ("pricing", "pending"), ("quoting", "waiting")])
    await repo.save_quote(quote)

    with pytest.raises(StoreError, match="disk full"):
        await engine.advance_step(quote.id, "pricing")
    with pytest.raises(StoreError):
        await engine.replace_workflow(quote.id, [StepDescriptor(id="billing")])

    assert await repo.get_quote(quote.id) == quote
    assert engine._locks == {}
