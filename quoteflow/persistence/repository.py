"""Repository abstraction for quote persistence."""

from __future__ import annotations

from typing import Optional, Protocol

from ..contracts import Quote, QuoteStatus, WorkflowStep


class QuoteRepository(Protocol):
    """Protocol for quote persistence backends.

    Backends raise :class:`~quoteflow.errors.StoreError` when the underlying
    storage fails. ``update_workflow`` writes the workflow, current step and
    status together so callers never observe a partial update.
    """

    async def save_quote(self, quote: Quote) -> None:
        """Insert or fully overwrite a quote."""

    async def get_quote(self, quote_id: str) -> Quote | None:
        """Retrieve the quote by id."""

    async def list_quotes(self) -> list[Quote]:
        """Return all persisted quotes."""

    async def update_workflow(
        self,
        quote_id: str,
        workflow: list[WorkflowStep],
        current_step: Optional[str],
        status: QuoteStatus,
    ) -> None:
        """Persist a quote's workflow, current step and status."""
