"""In-memory implementation of the quote repository."""

from __future__ import annotations

from typing import Dict, Optional

from ..contracts import Quote, QuoteStatus, WorkflowStep
from ..errors import StoreError
from .repository import QuoteRepository


class InMemoryQuoteRepository(QuoteRepository):
    """Store quotes in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts. Quotes are copied on the way in and
    out so callers cannot mutate stored state behind the repository's back.
    """

    def __init__(self) -> None:
        self._quotes: Dict[str, Quote] = {}

    async def save_quote(self, quote: Quote) -> None:
        self._quotes[quote.id] = quote.model_copy(deep=True)

    async def get_quote(self, quote_id: str) -> Quote | None:
        quote = self._quotes.get(quote_id)
        return quote.model_copy(deep=True) if quote else None

    async def list_quotes(self) -> list[Quote]:
        return [q.model_copy(deep=True) for q in self._quotes.values()]

    async def update_workflow(
        self,
        quote_id: str,
        workflow: list[WorkflowStep],
        current_step: Optional[str],
        status: QuoteStatus,
    ) -> None:
        stored = self._quotes.get(quote_id)
        if stored is None:
            raise StoreError(f"Quote {quote_id} is not in the store")
        self._quotes[quote_id] = stored.model_copy(
            deep=True,
            update={
                "workflow": [s.model_copy() for s in workflow],
                "current_step": current_step,
                "status": status,
            },
        )
