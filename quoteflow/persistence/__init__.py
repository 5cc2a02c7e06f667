"""Quote stores and the factory that opens them from a database URL."""

from __future__ import annotations

from typing import Dict, Optional

from ..config import QuoteflowConfig, load_config
from .inmemory import InMemoryQuoteRepository
from .repository import QuoteRepository
from .sqlite import SQLiteQuoteRepository

try:  # pragma: no cover - optional dependency
    from .postgres import PostgresQuoteRepository
except ImportError:  # pragma: no cover - optional dependency
    PostgresQuoteRepository = None  # type: ignore

# One open store per database URL; "" is the in-memory store.
_repositories: Dict[str, QuoteRepository] = {}


def _open_repository(database_url: str) -> QuoteRepository:
    if not database_url:
        return InMemoryQuoteRepository()
    if database_url.startswith("sqlite://"):
        return SQLiteQuoteRepository(database_url[len("sqlite://"):])
    if database_url.startswith(("postgres://", "postgresql://")):
        if PostgresQuoteRepository is None:
            raise RuntimeError("Postgres support not available")
        return PostgresQuoteRepository(database_url)
    raise ValueError(f"Unsupported database backend: {database_url}")


def get_repository(
    database_url: Optional[str] = None, config: Optional[QuoteflowConfig] = None
) -> QuoteRepository:
    """Return the quote store for ``database_url``.

    Without an explicit URL the store named by ``config`` (or the loaded
    configuration, which already applies ``QUOTEFLOW_DATABASE_URL`` and
    ``DATABASE_URL``) is used. No URL at all means the in-memory store.
    Callers asking for the same URL share one repository.
    """
    if database_url is None:
        database_url = (config or load_config()).database_url
    key = database_url or ""
    repository = _repositories.get(key)
    if repository is None:
        repository = _repositories[key] = _open_repository(key)
    return repository


__all__ = [
    "QuoteRepository",
    "InMemoryQuoteRepository",
    "SQLiteQuoteRepository",
    "PostgresQuoteRepository",
    "get_repository",
]
