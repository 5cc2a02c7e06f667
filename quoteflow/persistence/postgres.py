"""PostgreSQL implementation of the quote repository."""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import asyncpg

from ..contracts import Quote, QuoteStatus, WorkflowStep
from ..errors import StoreError
from .repository import QuoteRepository

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, customer, amount, discount, created_by, created_date, products, "
    "workflow, current_step, status"
)


def _load_json(value: Any) -> Any:
    # asyncpg hands JSONB back as text unless a codec is registered
    return json.loads(value) if isinstance(value, str) else value


class PostgresQuoteRepository(QuoteRepository):
    """Persist quotes using PostgreSQL."""

    def __init__(self, dsn: str):
        self._dsn = dsn
        self._initialized = False

    async def _connect(self) -> asyncpg.Connection:
        conn = await asyncpg.connect(self._dsn)
        if not self._initialized:
            await self._ensure_schema(conn)
            self._initialized = True
        return conn

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[asyncpg.Connection]:
        try:
            conn = await self._connect()
        except (asyncpg.PostgresError, OSError) as exc:
            logger.error(f"Could not connect to PostgreSQL quote store: {exc}")
            raise StoreError(f"Quote store unavailable: {exc}") from exc
        try:
            yield conn
        except asyncpg.PostgresError as exc:
            logger.error(f"PostgreSQL quote store query failed: {exc}")
            raise StoreError(f"Quote store query failed: {exc}") from exc
        finally:
            await conn.close()

    async def _ensure_schema(self, conn: asyncpg.Connection) -> None:
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS quotes (
                id TEXT PRIMARY KEY,
                customer TEXT NOT NULL,
                amount DOUBLE PRECISION NOT NULL,
                discount DOUBLE PRECISION NOT NULL,
                created_by TEXT NOT NULL,
                created_date DATE,
                products JSONB NOT NULL,
                workflow JSONB NOT NULL,
                current_step TEXT,
                status TEXT NOT NULL
            )
            """
        )

    @staticmethod
    def _row_to_quote(row: asyncpg.Record) -> Quote:
        return Quote(
            id=row["id"],
            customer=row["customer"],
            amount=row["amount"],
            discount=row["discount"],
            created_by=row["created_by"],
            created_date=row["created_date"],
            products=_load_json(row["products"]),
            workflow=[WorkflowStep.model_validate(s) for s in _load_json(row["workflow"])],
            current_step=row["current_step"],
            status=QuoteStatus(row["status"]),
        )

    # ------------------------------------------------------------------
    async def save_quote(self, quote: Quote) -> None:
        async with self._connection() as conn:
            await conn.execute(
                f"""
                INSERT INTO quotes ({_COLUMNS})
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                ON CONFLICT (id) DO UPDATE SET
                    customer = EXCLUDED.customer,
                    amount = EXCLUDED.amount,
                    discount = EXCLUDED.discount,
                    created_by = EXCLUDED.created_by,
                    created_date = EXCLUDED.created_date,
                    products = EXCLUDED.products,
                    workflow = EXCLUDED.workflow,
                    current_step = EXCLUDED.current_step,
                    status = EXCLUDED.status
                """,
                quote.id,
                quote.customer,
                quote.amount,
                quote.discount,
                quote.created_by,
                quote.created_date,
                json.dumps(quote.products),
                json.dumps([s.model_dump(mode="json", by_alias=True) for s in quote.workflow]),
                quote.current_step,
                quote.status.value,
            )

    async def get_quote(self, quote_id: str) -> Quote | None:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"SELECT {_COLUMNS} FROM quotes WHERE id = $1", quote_id
            )
        if not row:
            return None
        return self._row_to_quote(row)

    async def list_quotes(self) -> list[Quote]:
        async with self._connection() as conn:
            rows = await conn.fetch(f"SELECT {_COLUMNS} FROM quotes ORDER BY id")
        return [self._row_to_quote(r) for r in rows]

    async def update_workflow(
        self,
        quote_id: str,
        workflow: list[WorkflowStep],
        current_step: Optional[str],
        status: QuoteStatus,
    ) -> None:
        async with self._connection() as conn:
            result = await conn.execute(
                "UPDATE quotes SET workflow = $1, current_step = $2, status = $3 WHERE id = $4",
                json.dumps([s.model_dump(mode="json", by_alias=True) for s in workflow]),
                current_step,
                status.value,
                quote_id,
            )
        if result == "UPDATE 0":
            raise StoreError(f"Quote {quote_id} is not in the store")
