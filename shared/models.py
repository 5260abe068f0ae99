"""Pydantic contracts shared across backend and mobile client."""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Annotated

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PlainSerializer, field_validator


# Amounts travel as JSON numbers, not as the decimal strings pydantic emits by default.
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

# Stored as DECIMAL(10, 2): the rounded magnitude must stay below 10^8.
AMOUNT_LIMIT = Decimal("1e8")
_CENTS = Decimal("0.01")


class ToolErrorCode(str, Enum):
    """Stable error codes for service contracts across layers."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    BACKEND_ERROR = "BACKEND_ERROR"


class ToolError(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: ToolErrorCode
    message: str
    details: dict[str, object] | None = None


class Transaction(BaseModel):
    """A stored transaction row of the `transactions` table."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: int
    user_id: str
    title: str
    amount: Amount
    category: str
    created_at: datetime


class TransactionCreateRequest(BaseModel):
    """Body of `POST /api/transactions`."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    user_id: str = Field(min_length=1, validation_alias=AliasChoices("userId", "user_id"))
    title: str = Field(min_length=1)
    amount: Decimal
    category: str = Field(min_length=1)

    @field_validator("amount", mode="before")
    @classmethod
    def ensure_numeric_amount(cls, value: object) -> object:
        # JSON numbers only: booleans and numeric strings are rejected.
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            raise ValueError("Amount must be a number")
        return value

    @field_validator("amount")
    @classmethod
    def ensure_finite_amount(cls, value: Decimal) -> Decimal:
        if not value.is_finite():
            raise ValueError("Amount must be a number")
        if abs(value) >= AMOUNT_LIMIT or abs(value.quantize(_CENTS, rounding=ROUND_HALF_UP)) >= AMOUNT_LIMIT:
            raise ValueError("Amount is out of range")
        return value


class TransactionSummary(BaseModel):
    """Aggregates over one user's transactions.

    `expense` is the sum of negative amounts, so it is zero or negative.
    """

    model_config = ConfigDict(extra="forbid")

    balance: Amount = Decimal("0")
    income: Amount = Decimal("0")
    expense: Amount = Decimal("0")


class TransactionDeleteResult(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    message: str
    deleted_item: Transaction = Field(alias="deletedItem")


class TransactionDirection(str, Enum):
    """Sign filter applied to amounts in aggregate queries."""

    ALL = "ALL"
    DEBIT_ONLY = "DEBIT_ONLY"
    CREDIT_ONLY = "CREDIT_ONLY"
