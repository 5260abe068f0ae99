"""Async HTTP client for the wallet API."""

from __future__ import annotations

from urllib.parse import quote

import httpx

from shared import config
from shared.models import Transaction, TransactionDeleteResult, TransactionSummary


class WalletApiError(Exception):
    """Raised when the wallet API answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class WalletApiClient:
    """Thin async wrapper around the wallet REST API."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or config.wallet_api_url()).rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "WalletApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        message = response.reason_phrase or f"HTTP {response.status_code}"
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and isinstance(payload.get("message"), str):
            message = payload["message"]
        raise WalletApiError(response.status_code, message)

    # -- endpoints -----------------------------------------------------------

    async def list_transactions(self, user_id: str) -> list[Transaction]:
        resp = await self._client.get(f"/transactions/{quote(str(user_id), safe='')}")
        self._raise_for_status(resp)
        return [Transaction.model_validate(item) for item in resp.json()]

    async def get_summary(self, user_id: str) -> TransactionSummary:
        resp = await self._client.get(f"/transactions/summary/{quote(str(user_id), safe='')}")
        self._raise_for_status(resp)
        return TransactionSummary.model_validate(resp.json())

    async def delete_transaction(self, transaction_id: int | str) -> TransactionDeleteResult:
        resp = await self._client.delete(f"/transactions/{quote(str(transaction_id), safe='')}")
        self._raise_for_status(resp)
        return TransactionDeleteResult.model_validate(resp.json())
