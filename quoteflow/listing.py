"""Read-side helpers for the quote list: search, filter, sort and totals."""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .contracts import Quote, QuoteStatus
from .errors import ValidationError

SORT_ORDERS = ("date-desc", "date-asc", "amount-desc", "amount-asc", "customer")


class QuoteStats(BaseModel):
    """Summary figures shown above the quote list."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    total_value: float = 0


def _matches_search(quote: Quote, term: str) -> bool:
    # amount is matched on its plain rendering, e.g. "125000"
    value = float(quote.amount)
    amount = str(int(value)) if value.is_integer() else str(value)
    return (
        term in quote.id.lower()
        or term in quote.customer.lower()
        or term in amount
    )


def filter_quotes(
    quotes: Iterable[Quote],
    search: Optional[str] = None,
    status: Optional[QuoteStatus] = None,
) -> List[Quote]:
    """Keep quotes whose id, customer or amount contains ``search``
    (case-insensitive) and whose status equals ``status`` when given."""
    term = (search or "").strip().lower()
    return [
        q
        for q in quotes
        if (not term or _matches_search(q, term))
        and (status is None or q.status == status)
    ]


def sort_quotes(quotes: Iterable[Quote], order: Optional[str] = None) -> List[Quote]:
    """Sort quotes by one of :data:`SORT_ORDERS`; ``None`` keeps input order."""
    items = list(quotes)
    if order is None:
        return items
    if order not in SORT_ORDERS:
        raise ValidationError(
            f"Unsupported sort order '{order}'; expected one of {', '.join(SORT_ORDERS)}"
        )

    if order in ("date-desc", "date-asc"):
        return sorted(
            items,
            key=lambda q: q.created_date or date.min,
            reverse=order == "date-desc",
        )
    if order in ("amount-desc", "amount-asc"):
        return sorted(items, key=lambda q: q.amount, reverse=order == "amount-desc")
    return sorted(items, key=lambda q: q.customer.lower())


def summarize(quotes: Iterable[Quote]) -> QuoteStats:
    stats = QuoteStats()
    for quote in quotes:
        stats.total += 1
        stats.total_value += quote.amount
        if quote.status == QuoteStatus.PENDING:
            stats.pending += 1
        elif quote.status == QuoteStatus.APPROVED:
            stats.approved += 1
        elif quote.status == QuoteStatus.REJECTED:
            stats.rejected += 1
    return stats
