"""Command line interface for quote workflows."""

from __future__ import annotations

import asyncio
from typing import List, NoReturn, Optional

import typer

from quoteflow import WorkflowEngine, add_step, get_repository
from quoteflow.config import configure_logging, load_config
from quoteflow.contracts import Quote, QuoteStatus, StepDescriptor
from quoteflow.errors import DuplicateStepError, QuoteflowError
from quoteflow.listing import filter_quotes, sort_quotes, summarize
from quoteflow.personas import list_personas
from quoteflow.seed import seed_repository

app = typer.Typer(help="CLI for Quoteflow approval workflows")

# Command groups
quote_app = typer.Typer(help="Commands for inspecting quotes")
workflow_app = typer.Typer(help="Commands for changing quote workflows")
persona_app = typer.Typer(help="Commands for the workflow persona catalog")

app.add_typer(quote_app, name="quote")
app.add_typer(workflow_app, name="workflow")
app.add_typer(persona_app, name="persona")


@app.callback()
def main() -> None:
    """Quoteflow CLI entry point."""
    pass


def _engine() -> WorkflowEngine:
    config = load_config()
    repository = get_repository(config=config)
    if config.seed_demo_data:
        try:
            asyncio.run(seed_repository(repository))
        except QuoteflowError as exc:
            _fail(exc)
    return WorkflowEngine(repository)


def _fail(exc: QuoteflowError) -> NoReturn:
    typer.secho(exc.message, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _echo_quote(quote: Quote) -> None:
    typer.echo(f"Quote {quote.id}: {quote.status.value}")
    typer.echo(f"Customer: {quote.customer}")
    typer.echo(f"Amount: ${quote.amount:,.0f} ({quote.discount:g}% discount)")
    if quote.products:
        typer.echo(f"Products: {', '.join(quote.products)}")
    typer.echo(f"Current step: {quote.current_step or '-'}")
    for step in quote.workflow:
        typer.echo(
            f"- {step.id}: {step.status.value} ({step.assignee})"
            + (f" completed {step.completed_date.isoformat()}" if step.completed_date else "")
        )


@app.command("serve")
def serve(
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> None:
    """
    Run the HTTP API.

    Host and port default to the ``api`` section of the configuration.

    Example:
        quoteflow serve --port 8080
    """
    import uvicorn

    from quoteflow.api import create_app

    config = load_config()
    configure_logging(config.log_level)
    uvicorn.run(
        create_app(config),
        host=host or config.api.host,
        port=port or config.api.port,
    )


@quote_app.command("list")
def quote_list(
    status: Optional[QuoteStatus] = None,
    search: Optional[str] = None,
    sort: Optional[str] = typer.Option(
        None, help="date-desc, date-asc, amount-desc, amount-asc or customer"
    ),
) -> None:
    """
    List quotes with their status and current workflow step.

    Example:
        quoteflow quote list --status pending --sort amount-desc
        # Output: Q-2025-001    Acme Corp    pending    quoting
    """
    engine = _engine()
    try:
        quotes = sort_quotes(
            filter_quotes(asyncio.run(engine.list_quotes()), search=search, status=status),
            sort,
        )
    except QuoteflowError as exc:
        _fail(exc)
    if not quotes:
        typer.echo("No quotes found")
        return
    for quote in quotes:
        typer.echo(
            f"{quote.id}\t{quote.customer}\t{quote.status.value}\t{quote.current_step or '-'}"
        )


@quote_app.command("show")
def quote_show(quote_id: str) -> None:
    """Show a quote and each step of its approval workflow."""
    engine = _engine()
    try:
        quote = asyncio.run(engine.get_quote(quote_id))
    except QuoteflowError as exc:
        _fail(exc)
    _echo_quote(quote)


@quote_app.command("stats")
def quote_stats() -> None:
    """Print quote counts by status and the total quoted value."""
    engine = _engine()
    try:
        stats = summarize(asyncio.run(engine.list_quotes()))
    except QuoteflowError as exc:
        _fail(exc)
    typer.echo(f"Total: {stats.total}")
    typer.echo(f"Pending: {stats.pending}")
    typer.echo(f"Approved: {stats.approved}")
    typer.echo(f"Rejected: {stats.rejected}")
    typer.echo(f"Total value: ${stats.total_value:,.0f}")


@workflow_app.command("advance")
def workflow_advance(quote_id: str, step_id: str) -> None:
    """
    Mark the current workflow step complete.

    Example:
        quoteflow workflow advance Q-2025-001 quoting
    """
    engine = _engine()
    try:
        quote = asyncio.run(engine.advance_step(quote_id, step_id))
    except QuoteflowError as exc:
        _fail(exc)
    typer.secho(f"Step {step_id} marked as complete", fg=typer.colors.GREEN)
    _echo_quote(quote)


@workflow_app.command("set")
def workflow_set(
    quote_id: str,
    steps: List[str] = typer.Argument(
        ..., help="Persona ids in order, optionally as persona=Assignee"
    ),
) -> None:
    """
    Replace a quote's workflow and restart it at the first step.

    Personas listed twice are skipped with a warning.

    Example:
        quoteflow workflow set Q-2025-002 configuration pricing="Jane Doe" quoting
    """
    engine = _engine()
    descriptors: List[StepDescriptor] = []
    try:
        for raw in steps:
            persona_id, _, assignee = raw.partition("=")
            try:
                descriptors = add_step(descriptors, persona_id.strip(), assignee or None)
            except DuplicateStepError as exc:
                typer.secho(exc.message, fg=typer.colors.YELLOW)
        quote = asyncio.run(engine.replace_workflow(quote_id, descriptors))
    except QuoteflowError as exc:
        _fail(exc)
    typer.secho("Workflow updated", fg=typer.colors.GREEN)
    _echo_quote(quote)


@persona_app.command("list")
def persona_list() -> None:
    """List the personas a workflow step can be built from."""
    for persona in list_personas():
        typer.echo(f"{persona.id}\t{persona.name}\t{persona.default_assignee}")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
