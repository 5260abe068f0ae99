"""Transaction business logic over a transactions repository.

Every operation returns its result model or a `ToolError`; repository
failures never escape as exceptions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from backend.repositories.transactions_repository import TransactionsRepository
from shared.models import (
    ToolError,
    ToolErrorCode,
    Transaction,
    TransactionCreateRequest,
    TransactionDeleteResult,
    TransactionDirection,
    TransactionSummary,
)


logger = logging.getLogger(__name__)


MISSING_FIELDS_MESSAGE = "All fields are required: userId, title, amount, category"
INVALID_AMOUNT_MESSAGE = "Amount must be a number"
AMOUNT_OUT_OF_RANGE_MESSAGE = "Amount must be less than 100000000 in absolute value"
INVALID_ID_MESSAGE = "Invalid transaction ID format"
NOT_FOUND_MESSAGE = "Transaction not found"
DELETED_MESSAGE = "Transaction deleted successfully"
INTERNAL_ERROR_MESSAGE = "Internal server error"


def _backend_error() -> ToolError:
    return ToolError(code=ToolErrorCode.BACKEND_ERROR, message=INTERNAL_ERROR_MESSAGE)


def _is_missing(value: object) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def _parse_transaction_id(raw_id: object) -> int | None:
    if isinstance(raw_id, bool):
        return None
    if isinstance(raw_id, int):
        return raw_id
    if not isinstance(raw_id, str):
        return None
    candidate = raw_id.strip()
    if not candidate or not candidate.lstrip("-").isdigit():
        return None
    return int(candidate)


@dataclass(slots=True)
class TransactionService:
    transactions_repository: TransactionsRepository

    def create_transaction(self, payload: dict[str, Any]) -> Transaction | ToolError:
        user_id = payload.get("userId", payload.get("user_id"))
        required_values = (user_id, payload.get("title"), payload.get("amount"), payload.get("category"))
        if any(_is_missing(value) for value in required_values):
            return ToolError(code=ToolErrorCode.VALIDATION_ERROR, message=MISSING_FIELDS_MESSAGE)

        try:
            request = TransactionCreateRequest.model_validate(payload)
        except ValidationError as exc:
            errors = exc.errors()
            amount_errors = [str(error.get("msg")) for error in errors if error.get("loc") == ("amount",)]
            if any("out of range" in error for error in amount_errors):
                message = AMOUNT_OUT_OF_RANGE_MESSAGE
            elif amount_errors:
                message = INVALID_AMOUNT_MESSAGE
            else:
                message = MISSING_FIELDS_MESSAGE
            return ToolError(
                code=ToolErrorCode.VALIDATION_ERROR,
                message=message,
                details={"errors": [str(error.get("msg")) for error in errors]},
            )

        try:
            transaction = self.transactions_repository.insert_transaction(request)
        except Exception:
            logger.exception("transaction_create_failed user_id=%s", request.user_id)
            return _backend_error()

        logger.info("transaction_created id=%s user_id=%s", transaction.id, transaction.user_id)
        return transaction

    def list_transactions(self, user_id: str) -> list[Transaction] | ToolError:
        try:
            return self.transactions_repository.list_transactions(user_id)
        except Exception:
            logger.exception("transaction_list_failed user_id=%s", user_id)
            return _backend_error()

    def delete_transaction(self, transaction_id: object) -> TransactionDeleteResult | ToolError:
        parsed_id = _parse_transaction_id(transaction_id)
        if parsed_id is None:
            return ToolError(code=ToolErrorCode.VALIDATION_ERROR, message=INVALID_ID_MESSAGE)

        try:
            deleted = self.transactions_repository.delete_transaction(parsed_id)
        except Exception:
            logger.exception("transaction_delete_failed id=%s", parsed_id)
            return _backend_error()

        if deleted is None:
            return ToolError(code=ToolErrorCode.NOT_FOUND, message=NOT_FOUND_MESSAGE)

        logger.info("transaction_deleted id=%s user_id=%s", deleted.id, deleted.user_id)
        return TransactionDeleteResult(message=DELETED_MESSAGE, deleted_item=deleted)

    def transactions_summary(self, user_id: str) -> TransactionSummary | ToolError:
        repository = self.transactions_repository
        try:
            return TransactionSummary(
                balance=repository.sum_amounts(user_id, TransactionDirection.ALL),
                income=repository.sum_amounts(user_id, TransactionDirection.CREDIT_ONLY),
                expense=repository.sum_amounts(user_id, TransactionDirection.DEBIT_ONLY),
            )
        except Exception:
            logger.exception("transaction_summary_failed user_id=%s", user_id)
            return _backend_error()
