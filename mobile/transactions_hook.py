"""Client-side state for one user's transactions and summary.

`load_data` runs both fetches concurrently and waits for both, success or
failure, before clearing `is_loading`. A failed fetch keeps the previous state.
Overlapping `load_data` calls are not serialized.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from mobile.api_client import WalletApiClient
from shared.models import Transaction, TransactionSummary

logger = logging.getLogger(__name__)

DELETE_SUCCESS_MESSAGE = "Transaction deleted successfully"


class Notifier(Protocol):
    def alert(self, title: str, message: str) -> None:
        """Show a user-visible notification."""


class LoggingNotifier:
    def alert(self, title: str, message: str) -> None:
        logger.info("user_alert title=%s message=%s", title, message)


class TransactionsHook:
    def __init__(
        self,
        user_id: str | None,
        client: WalletApiClient,
        notifier: Notifier | None = None,
    ) -> None:
        self.user_id = user_id
        self.client = client
        self.notifier = notifier or LoggingNotifier()
        self.transactions: list[Transaction] = []
        self.summary = TransactionSummary()
        self.is_loading = True

    async def _fetch_transactions(self) -> None:
        self.transactions = await self.client.list_transactions(self.user_id)

    async def _fetch_summary(self) -> None:
        self.summary = await self.client.get_summary(self.user_id)

    async def load_data(self) -> None:
        """Refresh transactions and summary in parallel."""
        if not self.user_id:
            return

        self.is_loading = True
        try:
            results = await asyncio.gather(
                self._fetch_transactions(),
                self._fetch_summary(),
                return_exceptions=True,
            )
            for name, result in zip(("transactions", "summary"), results):
                if isinstance(result, BaseException):
                    logger.error(
                        "load_data_fetch_failed resource=%s user_id=%s",
                        name,
                        self.user_id,
                        exc_info=result,
                    )
        finally:
            self.is_loading = False

    async def delete_transaction(self, transaction_id: int | str) -> bool:
        """Delete a transaction, refresh state and notify the user of the outcome."""
        try:
            await self.client.delete_transaction(transaction_id)
        except Exception as exc:
            logger.exception("delete_transaction_failed id=%s", transaction_id)
            self.notifier.alert("Error", str(exc) or "Failed to delete transaction")
            return False

        await self.load_data()
        self.notifier.alert("Success", DELETE_SUCCESS_MESSAGE)
        return True
