"""Transactions repository adapters over the `transactions` table."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from itertools import count
from threading import Lock
from typing import Callable, Protocol

from backend.db.supabase_client import SupabaseClient
from shared.models import Transaction, TransactionCreateRequest, TransactionDirection


_TABLE = "transactions"
_COLUMNS = "id,user_id,title,amount,category,created_at"
_CENTS = Decimal("0.01")


class TransactionsRepository(Protocol):
    def insert_transaction(self, request: TransactionCreateRequest) -> Transaction:
        """Insert a row and return it with its assigned id and creation time."""

    def list_transactions(self, user_id: str) -> list[Transaction]:
        """Return the user's rows, most recent first."""

    def delete_transaction(self, transaction_id: int) -> Transaction | None:
        """Delete a row and return it, or None when no row has this id."""

    def sum_amounts(self, user_id: str, direction: TransactionDirection) -> Decimal:
        """Return the sum of the user's amounts matching the sign filter, 0 when none."""


def _matches_direction(amount: Decimal, direction: TransactionDirection) -> bool:
    if direction == TransactionDirection.DEBIT_ONLY:
        return amount < 0
    if direction == TransactionDirection.CREDIT_ONLY:
        return amount > 0
    return True


class InMemoryTransactionsRepository:
    """In-memory repository used for local dev/tests when Supabase is not configured."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._rows: dict[int, Transaction] = {}
        self._ids = count(1)
        self._lock = Lock()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def insert_transaction(self, request: TransactionCreateRequest) -> Transaction:
        with self._lock:
            transaction = Transaction(
                id=next(self._ids),
                user_id=request.user_id,
                title=request.title,
                amount=request.amount.quantize(_CENTS, rounding=ROUND_HALF_UP),
                category=request.category,
                created_at=self._clock(),
            )
            self._rows[transaction.id] = transaction
        return transaction

    def list_transactions(self, user_id: str) -> list[Transaction]:
        with self._lock:
            rows = [row for row in self._rows.values() if row.user_id == user_id]
        return sorted(rows, key=lambda row: (row.created_at, row.id), reverse=True)

    def delete_transaction(self, transaction_id: int) -> Transaction | None:
        with self._lock:
            return self._rows.pop(transaction_id, None)

    def sum_amounts(self, user_id: str, direction: TransactionDirection) -> Decimal:
        with self._lock:
            amounts = [
                row.amount
                for row in self._rows.values()
                if row.user_id == user_id and _matches_direction(row.amount, direction)
            ]
        return sum(amounts, Decimal("0"))


class SupabaseTransactionsRepository:
    """Supabase repository over `public.transactions` through PostgREST."""

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    def insert_transaction(self, request: TransactionCreateRequest) -> Transaction:
        rows = self._client.post_rows(
            table=_TABLE,
            payload={
                "user_id": request.user_id,
                "title": request.title,
                "amount": str(request.amount),
                "category": request.category,
            },
        )
        if not rows:
            raise RuntimeError("Supabase insert returned no row")
        return Transaction.model_validate(rows[0])

    def list_transactions(self, user_id: str) -> list[Transaction]:
        rows = self._client.get_rows(
            table=_TABLE,
            query=[
                ("user_id", f"eq.{user_id}"),
                ("select", _COLUMNS),
                ("order", "created_at.desc,id.desc"),
            ],
        )
        return [Transaction.model_validate(row) for row in rows]

    def delete_transaction(self, transaction_id: int) -> Transaction | None:
        rows = self._client.delete_rows(table=_TABLE, query=[("id", f"eq.{transaction_id}")])
        if not rows:
            return None
        return Transaction.model_validate(rows[0])

    def sum_amounts(self, user_id: str, direction: TransactionDirection) -> Decimal:
        # Aggregate functions must be enabled on PostgREST (`db-aggregates-enabled`).
        query: list[tuple[str, str | int]] = [
            ("user_id", f"eq.{user_id}"),
            ("select", "total:amount.sum()"),
        ]
        if direction == TransactionDirection.DEBIT_ONLY:
            query.append(("amount", "lt.0"))
        elif direction == TransactionDirection.CREDIT_ONLY:
            query.append(("amount", "gt.0"))

        rows = self._client.get_rows(table=_TABLE, query=query)
        if not rows or rows[0].get("total") is None:
            return Decimal("0")
        return Decimal(str(rows[0]["total"]))
