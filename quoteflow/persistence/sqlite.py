"""SQLite implementation of the quote repository."""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import threading
from datetime import date
from pathlib import Path
from typing import Any, Optional

from ..contracts import Quote, QuoteStatus, WorkflowStep
from ..errors import StoreError
from .repository import QuoteRepository

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, customer, amount, discount, created_by, created_date, products, "
    "workflow, current_step, status"
)


def _dump_workflow(workflow: list[WorkflowStep]) -> str:
    return json.dumps([s.model_dump(mode="json", by_alias=True) for s in workflow])


class SQLiteQuoteRepository(QuoteRepository):
    """Persist quotes using SQLite."""

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        # one connection is shared by the worker threads of asyncio.to_thread
        self._lock = threading.Lock()
        self._ensure_schema()

    # ------------------------------------------------------------------
    # Schema management
    def _ensure_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS quotes (
                id TEXT PRIMARY KEY,
                customer TEXT NOT NULL,
                amount REAL NOT NULL,
                discount REAL NOT NULL,
                created_by TEXT NOT NULL,
                created_date TEXT,
                products TEXT NOT NULL,
                workflow TEXT NOT NULL,
                current_step TEXT,
                status TEXT NOT NULL
            )
            """
        )
        self._conn.commit()

    # ------------------------------------------------------------------
    # Helper methods
    def _execute(self, query: str, *params: Any) -> int:
        with self._lock:
            try:
                cur = self._conn.cursor()
                cur.execute(query, params)
                self._conn.commit()
                return cur.rowcount
            except sqlite3.Error as exc:
                self._conn.rollback()
                logger.error(f"SQLite write failed on {self.db_path}: {exc}")
                raise StoreError(f"Quote store write failed: {exc}") from exc

    def _fetchone(self, query: str, *params: Any) -> sqlite3.Row | None:
        with self._lock:
            try:
                cur = self._conn.cursor()
                cur.execute(query, params)
                return cur.fetchone()
            except sqlite3.Error as exc:
                logger.error(f"SQLite read failed on {self.db_path}: {exc}")
                raise StoreError(f"Quote store read failed: {exc}") from exc

    def _fetchall(self, query: str, *params: Any) -> list[sqlite3.Row]:
        with self._lock:
            try:
                cur = self._conn.cursor()
                cur.execute(query, params)
                return cur.fetchall()
            except sqlite3.Error as exc:
                logger.error(f"SQLite read failed on {self.db_path}: {exc}")
                raise StoreError(f"Quote store read failed: {exc}") from exc

    @staticmethod
    def _row_to_quote(row: sqlite3.Row) -> Quote:
        return Quote(
            id=row["id"],
            customer=row["customer"],
            amount=row["amount"],
            discount=row["discount"],
            created_by=row["created_by"],
            created_date=date.fromisoformat(row["created_date"]) if row["created_date"] else None,
            products=json.loads(row["products"]),
            workflow=[WorkflowStep.model_validate(s) for s in json.loads(row["workflow"])],
            current_step=row["current_step"],
            status=QuoteStatus(row["status"]),
        )

    def close(self) -> None:
        self._conn.close()

    # ------------------------------------------------------------------
    # Repository API
    async def save_quote(self, quote: Quote) -> None:
        await asyncio.to_thread(
            self._execute,
            f"INSERT OR REPLACE INTO quotes ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            quote.id,
            quote.customer,
            quote.amount,
            quote.discount,
            quote.created_by,
            quote.created_date.isoformat() if quote.created_date else None,
            json.dumps(quote.products),
            _dump_workflow(quote.workflow),
            quote.current_step,
            quote.status.value,
        )

    async def get_quote(self, quote_id: str) -> Quote | None:
        row = await asyncio.to_thread(
            self._fetchone,
            f"SELECT {_COLUMNS} FROM quotes WHERE id = ?",
            quote_id,
        )
        if not row:
            return None
        return self._row_to_quote(row)

    async def list_quotes(self) -> list[Quote]:
        rows = await asyncio.to_thread(
            self._fetchall, f"SELECT {_COLUMNS} FROM quotes ORDER BY id"
        )
        return [self._row_to_quote(r) for r in rows]

    async def update_workflow(
        self,
        quote_id: str,
        workflow: list[WorkflowStep],
        current_step: Optional[str],
        status: QuoteStatus,
    ) -> None:
        updated = await asyncio.to_thread(
            self._execute,
            "UPDATE quotes SET workflow = ?, current_step = ?, status = ? WHERE id = ?",
            _dump_workflow(workflow),
            current_step,
            status.value,
            quote_id,
        )
        if updated == 0:
            raise StoreError(f"Quote {quote_id} is not in the store")
