"""
Transaction model for Finance4All data.
"""

import re
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from finance4all.models.common import UUIDStr, reject_nulls, to_naive_utc

DATE_ONLY_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"


class Transaction(BaseModel):
    """
    Represents a single money movement on an account.

    Amounts are always positive; the direction comes from ``type``.
    """

    model_config = {"strict": True, "populate_by_name": True, "from_attributes": True}

    # Required fields
    id: str
    user_id: str
    account_id: str
    amount: float
    type: TransactionType
    date: datetime

    # Categorization
    category_id: Optional[str] = None

    # Details
    description: Optional[str] = None
    notes: Optional[str] = None

    # Recurrence
    is_recurring: bool = False
    recurring_id: Optional[str] = None

    # Metadata
    created_at: datetime
    updated_at: datetime


class CreateTransactionInput(BaseModel):
    account_id: UUIDStr
    category_id: Optional[UUIDStr] = None
    amount: float = Field(gt=0, allow_inf_nan=False)
    type: TransactionType
    description: Optional[str] = Field(default=None, max_length=200)
    notes: Optional[str] = Field(default=None, max_length=500)
    date: datetime
    is_recurring: bool = False
    recurring_id: Optional[UUIDStr] = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class UpdateTransactionInput(BaseModel):
    account_id: Optional[UUIDStr] = None
    category_id: Optional[UUIDStr] = None
    amount: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    type: Optional[TransactionType] = None
    description: Optional[str] = Field(default=None, max_length=200)
    notes: Optional[str] = Field(default=None, max_length=500)
    date: Optional[datetime] = None
    is_recurring: Optional[bool] = None
    recurring_id: Optional[UUIDStr] = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_required_not_null(self) -> "UpdateTransactionInput":
        reject_nulls(self, "account_id", "amount", "type", "date", "is_recurring")
        return self


class TransactionFilter(BaseModel):
    account_id: Optional[UUIDStr] = None
    category_id: Optional[UUIDStr] = None
    type: Optional[TransactionType] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    min_amount: Optional[float] = Field(default=None, ge=0)
    max_amount: Optional[float] = Field(default=None, gt=0)

    @field_validator("end_date", mode="before")
    @classmethod
    def end_of_day(cls, v: Any) -> Any:
        """A bare date as the end bound covers that whole day."""
        if isinstance(v, str) and DATE_ONLY_PATTERN.fullmatch(v):
            v = date.fromisoformat(v)
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime.combine(v, time.max)
        return v

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_ranges(self) -> "TransactionFilter":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("Start date must be before end date")
        if (
            self.min_amount is not None
            and self.max_amount is not None
            and self.min_amount > self.max_amount
        ):
            raise ValueError("Minimum amount must be less than maximum amount")
        return self


class Pagination(BaseModel):
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=50, ge=1, le=100)


class TransactionConnection(BaseModel):
    """One page of transactions plus the size of the full result."""

    transactions: list[Transaction]
    total: int
    has_more: bool
