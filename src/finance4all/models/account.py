"""
Account model for Finance4All data.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field, model_validator

from finance4all.models.common import reject_nulls


class AccountType(str, Enum):
    ASSET = "ASSET"
    INVESTMENT = "INVESTMENT"
    DEBT = "DEBT"
    LIABILITY = "LIABILITY"


class Account(BaseModel):
    """
    Represents a financial account owned by a user.

    Debt and liability balances are stored as negative numbers.
    """

    model_config = {"strict": True, "populate_by_name": True, "from_attributes": True}

    # Required fields
    id: str
    user_id: str
    name: str
    type: AccountType
    balance: float
    currency: str = "USD"
    is_active: bool = True

    # Classification
    subtype: Optional[str] = None  # Checking, Savings, Credit Card, ...

    # Institution
    institution: Optional[str] = None
    account_number: Optional[str] = None
    interest_rate: Optional[float] = None

    # Metadata
    created_at: datetime
    updated_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_liability(self) -> bool:
        """Whether this account counts against net worth."""
        return self.type in (AccountType.DEBT, AccountType.LIABILITY)


class CreateAccountInput(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    type: AccountType
    subtype: Optional[str] = Field(default=None, max_length=50)
    balance: float = Field(allow_inf_nan=False)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    institution: Optional[str] = Field(default=None, max_length=100)
    account_number: Optional[str] = Field(default=None, max_length=20)
    interest_rate: Optional[float] = Field(default=None, ge=0, le=100)


class UpdateAccountInput(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    type: Optional[AccountType] = None
    subtype: Optional[str] = Field(default=None, max_length=50)
    balance: Optional[float] = Field(default=None, allow_inf_nan=False)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    institution: Optional[str] = Field(default=None, max_length=100)
    account_number: Optional[str] = Field(default=None, max_length=20)
    interest_rate: Optional[float] = Field(default=None, ge=0, le=100)
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def check_required_not_null(self) -> "UpdateAccountInput":
        reject_nulls(self, "name", "type", "balance", "currency", "is_active")
        return self


class AccountFilter(BaseModel):
    type: Optional[AccountType] = None
    is_active: Optional[bool] = None
