"""
Pydantic models for Finance4All data structures.
"""

from finance4all.models.account import (
    Account,
    AccountFilter,
    AccountType,
    CreateAccountInput,
    UpdateAccountInput,
)
from finance4all.models.category import (
    Category,
    CategoryType,
    CreateCategoryInput,
    UpdateCategoryInput,
)
from finance4all.models.transaction import (
    CreateTransactionInput,
    Pagination,
    Transaction,
    TransactionConnection,
    TransactionFilter,
    TransactionType,
    UpdateTransactionInput,
)
from finance4all.models.user import CreateUserInput, UpdateUserInput, User, UserRole

__all__ = [
    "Account",
    "AccountFilter",
    "AccountType",
    "Category",
    "CategoryType",
    "CreateAccountInput",
    "CreateCategoryInput",
    "CreateTransactionInput",
    "CreateUserInput",
    "Pagination",
    "Transaction",
    "TransactionConnection",
    "TransactionFilter",
    "TransactionType",
    "UpdateAccountInput",
    "UpdateCategoryInput",
    "UpdateTransactionInput",
    "UpdateUserInput",
    "User",
    "UserRole",
]
