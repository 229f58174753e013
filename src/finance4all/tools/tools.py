"""
MCP tool definitions for Finance4All.

Each tool acts on behalf of one authenticated caller and only ever
touches records that caller owns (admins may also read other users).
"""

from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, model_validator

from finance4all.auth.firebase import AuthenticatedUser
from finance4all.core import calculations
from finance4all.core.database import FinanceDatabase
from finance4all.core.exceptions import (
    ForbiddenError,
    NotAuthenticatedError,
    NotFoundError,
    UserAlreadyExistsError,
)
from finance4all.core.validation import validate_input
from finance4all.models.account import (
    Account,
    AccountFilter,
    CreateAccountInput,
    UpdateAccountInput,
)
from finance4all.models.category import (
    Category,
    CategoryType,
    CreateCategoryInput,
    UpdateCategoryInput,
)
from finance4all.models.reports import ProjectionAssumptions
from finance4all.models.transaction import (
    CreateTransactionInput,
    Pagination,
    Transaction,
    TransactionConnection,
    TransactionFilter,
    UpdateTransactionInput,
)
from finance4all.models.user import CreateUserInput, UpdateUserInput, User, UserRole
from finance4all.utils.date_utils import PERIODS, parse_period

WELCOME_MESSAGE = "Welcome to Finance4All API! 🚀"


class DateRangeInput(BaseModel):
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_order(self) -> "DateRangeInput":
        if self.start_date > self.end_date:
            raise ValueError("Start date must be before end date")
        return self


class Finance4AllTools:
    """Collection of MCP tools for reading and editing Finance4All data."""

    def __init__(self, database: FinanceDatabase, caller: Optional[AuthenticatedUser] = None):
        """
        Initialize tools with a database connection.

        Args:
            database: FinanceDatabase instance
            caller: Identity the tools act for. None means unauthenticated;
                   every tool except ``hello`` will then refuse to run.
        """
        self.db = database
        self.caller = caller

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def hello(self) -> Dict[str, Any]:
        return {"message": WELCOME_MESSAGE}

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def me(self) -> Dict[str, Any]:
        return self._current_user().model_dump(mode="json")

    def get_user(self, id: str) -> Dict[str, Any]:
        """
        Get a user by id.

        Raises:
            NotFoundError: If the user does not exist
            ForbiddenError: If it is someone else and the caller is not an admin
        """
        caller = self._require_caller()
        user = self.db.get_user(id)
        if user is None:
            raise NotFoundError("User not found")
        if user.firebase_uid != caller.uid and caller.role != UserRole.ADMIN:
            raise ForbiddenError()
        return user.model_dump(mode="json")

    def list_users(self) -> Dict[str, Any]:
        """List every user, newest first. Admins only."""
        caller = self._require_caller()
        if caller.role != UserRole.ADMIN:
            raise ForbiddenError()
        users = self.db.list_users()
        return {"count": len(users), "users": [u.model_dump(mode="json") for u in users]}

    def create_user(self, **arguments: Any) -> Dict[str, Any]:
        """
        Create the caller's user record.

        Raises:
            UserAlreadyExistsError: If the caller already has a record
            ForbiddenError: If the Firebase UID is not the caller's
        """
        caller = self._require_caller()
        data = validate_input(CreateUserInput, arguments)
        if self.db.get_user_by_firebase_uid(caller.uid) is not None:
            raise UserAlreadyExistsError()
        if data.firebase_uid != caller.uid:
            raise ForbiddenError("Cannot create a user for another identity")

        user = self.db.create_user(
            firebase_uid=data.firebase_uid,
            email=str(data.email),
            display_name=data.display_name,
            photo_url=str(data.photo_url) if data.photo_url else None,
            role=UserRole.USER,
        )
        return user.model_dump(mode="json")

    def update_user(self, **arguments: Any) -> Dict[str, Any]:
        """Update the caller's profile; omitted fields keep their value, null clears them."""
        user = self._current_user()
        data = validate_input(UpdateUserInput, arguments)
        changes = data.model_dump(exclude_unset=True, mode="json")

        updated = self.db.update_user(user.id, changes)
        if updated is None:
            raise NotFoundError("User not found")
        return updated.model_dump(mode="json")

    def delete_user(self) -> Dict[str, Any]:
        """Delete the caller's record and all of their data."""
        user = self._current_user()
        self.db.delete_user(user.id)
        return {"deleted": True, "id": user.id}

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def get_accounts(
        self, type: Optional[str] = None, is_active: Optional[bool] = None
    ) -> Dict[str, Any]:
        """
        Get the caller's accounts, newest first.

        Args:
            type: Optional filter by account type (ASSET, INVESTMENT, DEBT, LIABILITY)
            is_active: Optional filter by active flag

        Returns:
            Dict with account count and list of accounts
        """
        user = self._current_user()
        filters = validate_input(AccountFilter, {"type": type, "is_active": is_active})
        accounts = self.db.get_accounts(
            user.id, account_type=filters.type, is_active=filters.is_active
        )
        return {
            "count": len(accounts),
            "accounts": [acc.model_dump(mode="json") for acc in accounts],
        }

    def get_account(self, id: str, include_transactions: bool = False) -> Dict[str, Any]:
        user = self._current_user()
        account = self._owned_account(user, id)
        result = account.model_dump(mode="json")
        if include_transactions:
            result["transactions"] = [
                txn.model_dump(mode="json") for txn in self.db.get_account_transactions(id)
            ]
        return result

    def create_account(self, **arguments: Any) -> Dict[str, Any]:
        user = self._current_user()
        data = validate_input(CreateAccountInput, arguments)
        account = self.db.create_account(user.id, data.model_dump())
        return account.model_dump(mode="json")

    def update_account(self, id: str, **arguments: Any) -> Dict[str, Any]:
        user = self._current_user()
        changes = validate_input(UpdateAccountInput, arguments)
        self._owned_account(user, id)
        account = self.db.update_account(id, _changes(changes))
        return account.model_dump(mode="json")

    def delete_account(self, id: str) -> Dict[str, Any]:
        """Delete an account and its transactions."""
        user = self._current_user()
        self._owned_account(user, id)
        self.db.delete_account(id)
        return {"deleted": True, "id": id}

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def get_categories(self, type: Optional[str] = None) -> Dict[str, Any]:
        """Get the caller's categories sorted by name, optionally of one type."""
        user = self._current_user()
        category_type = CategoryType(type) if type else None
        categories = self.db.get_categories(user.id, category_type=category_type)
        return {
            "count": len(categories),
            "categories": [cat.model_dump(mode="json") for cat in categories],
        }

    def get_category(self, id: str) -> Dict[str, Any]:
        """Get a category together with its direct children."""
        user = self._current_user()
        category = self._owned_category(user, id)
        result = category.model_dump(mode="json")
        result["children"] = [
            child.model_dump(mode="json") for child in self.db.get_child_categories(id)
        ]
        return result

    def create_category(self, **arguments: Any) -> Dict[str, Any]:
        user = self._current_user()
        data = validate_input(CreateCategoryInput, arguments)
        if data.parent_id:
            self._owned_category(user, data.parent_id)
        category = self.db.create_category(user.id, data.model_dump())
        return category.model_dump(mode="json")

    def update_category(self, id: str, **arguments: Any) -> Dict[str, Any]:
        user = self._current_user()
        changes = validate_input(UpdateCategoryInput, arguments)
        self._owned_category(user, id)
        if changes.parent_id:
            if changes.parent_id == id:
                raise ForbiddenError("A category cannot be its own parent")
            self._owned_category(user, changes.parent_id)
        category = self.db.update_category(id, _changes(changes))
        return category.model_dump(mode="json")

    def delete_category(self, id: str) -> Dict[str, Any]:
        """Delete a category. Its transactions become uncategorized."""
        user = self._current_user()
        self._owned_category(user, id)
        self.db.delete_category(id)
        return {"deleted": True, "id": id}

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def get_transactions(
        self,
        period: Optional[str] = None,
        account_id: Optional[str] = None,
        category_id: Optional[str] = None,
        type: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        min_amount: Optional[float] = None,
        max_amount: Optional[float] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> Dict[str, Any]:
        """
        Get a page of the caller's transactions, newest first.

        Args:
            period: Period shorthand (this_month, last_30_days, ytd, etc.);
                   overrides start_date/end_date
            account_id: Filter by account
            category_id: Filter by category
            type: Filter by transaction type (INCOME, EXPENSE, TRANSFER)
            start_date: Filter by date >= this
            end_date: Filter by date <= this
            min_amount: Filter by amount >= this
            max_amount: Filter by amount <= this
            offset: Number of matching transactions to skip (default: 0)
            limit: Page size, 1-100 (default: 50)

        Returns:
            Dict with the page, the total match count and whether more remain
        """
        user = self._current_user()
        filter_args: Dict[str, Any] = {
            "account_id": account_id,
            "category_id": category_id,
            "type": type,
            "start_date": start_date,
            "end_date": end_date,
            "min_amount": min_amount,
            "max_amount": max_amount,
        }
        if period:
            filter_args["start_date"], filter_args["end_date"] = parse_period(period)

        filters = validate_input(TransactionFilter, filter_args)
        page = validate_input(Pagination, {"offset": offset, "limit": limit})

        transactions, total = self.db.get_transactions(
            user.id, filters, offset=page.offset, limit=page.limit
        )
        connection = TransactionConnection(
            transactions=transactions,
            total=total,
            has_more=page.offset + len(transactions) < total,
        )
        return connection.model_dump(mode="json")

    def get_transaction(self, id: str) -> Dict[str, Any]:
        user = self._current_user()
        return self._owned_transaction(user, id).model_dump(mode="json")

    def create_transaction(self, **arguments: Any) -> Dict[str, Any]:
        user = self._current_user()
        data = self._checked_transaction_input(user, arguments)
        transaction = self.db.create_transaction(user.id, data.model_dump())
        return transaction.model_dump(mode="json")

    def update_transaction(self, id: str, **arguments: Any) -> Dict[str, Any]:
        user = self._current_user()
        changes = validate_input(UpdateTransactionInput, arguments)
        self._owned_transaction(user, id)
        if changes.account_id:
            self._usable_account(user, changes.account_id)
        if changes.category_id:
            self._usable_category(user, changes.category_id)
        transaction = self.db.update_transaction(id, _changes(changes))
        return transaction.model_dump(mode="json")

    def delete_transaction(self, id: str) -> Dict[str, Any]:
        user = self._current_user()
        self._owned_transaction(user, id)
        self.db.delete_transaction(id)
        return {"deleted": True, "id": id}

    def bulk_create_transactions(self, transactions: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Create many transactions at once.

        Every item is validated and checked before anything is written, so
        one bad item rejects the whole batch.
        """
        user = self._current_user()
        items = [self._checked_transaction_input(user, item) for item in transactions]
        created = self.db.create_transactions(user.id, [item.model_dump() for item in items])
        return {
            "count": len(created),
            "transactions": [txn.model_dump(mode="json") for txn in created],
        }

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def get_net_worth(self) -> Dict[str, Any]:
        user = self._current_user()
        return calculations.calculate_net_worth(self.db, user.id).model_dump(mode="json")

    def get_cash_flow(
        self,
        period: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Income, expenses and net cash flow for a date range.

        Args:
            period: Period shorthand; used when no explicit dates are given
                   (default: this_month)
            start_date: Range start (YYYY-MM-DD)
            end_date: Range end, inclusive (YYYY-MM-DD)
        """
        user = self._current_user()
        if start_date or end_date:
            dates = validate_input(
                DateRangeInput, {"start_date": start_date, "end_date": end_date}
            )
            start = datetime.combine(dates.start_date, time.min)
            end = datetime.combine(dates.end_date, time.max)
        else:
            start, end = parse_period(period or "this_month")

        result = calculations.calculate_cash_flow(self.db, user.id, start, end)
        return result.model_dump(mode="json")

    def get_projection(self, user_age: Optional[int] = None, **arguments: Any) -> Dict[str, Any]:
        """30-year net worth projection under the given growth assumptions."""
        user = self._current_user()
        assumptions = validate_input(ProjectionAssumptions, arguments)
        result = calculations.calculate_projection(self.db, user.id, assumptions, user_age)
        return result.model_dump(mode="json")

    def get_dashboard_summary(self) -> Dict[str, Any]:
        user = self._current_user()
        return calculations.calculate_dashboard_summary(self.db, user.id).model_dump(mode="json")

    # ------------------------------------------------------------------
    # Access checks
    # ------------------------------------------------------------------

    def _require_caller(self) -> AuthenticatedUser:
        if self.caller is None:
            raise NotAuthenticatedError()
        return self.caller

    def _current_user(self) -> User:
        caller = self._require_caller()
        user = self.db.get_user_by_firebase_uid(caller.uid)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def _owned_account(self, user: User, account_id: str) -> Account:
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError("Account not found")
        if account.user_id != user.id:
            raise ForbiddenError()
        return account

    def _owned_category(self, user: User, category_id: str) -> Category:
        category = self.db.get_category(category_id)
        if category is None:
            raise NotFoundError("Category not found")
        if category.user_id != user.id:
            raise ForbiddenError()
        return category

    def _owned_transaction(self, user: User, transaction_id: str) -> Transaction:
        transaction = self.db.get_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError("Transaction not found")
        if transaction.user_id != user.id:
            raise ForbiddenError()
        return transaction

    def _usable_account(self, user: User, account_id: str) -> None:
        account = self.db.get_account(account_id)
        if account is None or account.user_id != user.id:
            raise ForbiddenError("Account not found or forbidden")

    def _usable_category(self, user: User, category_id: str) -> None:
        category = self.db.get_category(category_id)
        if category is None or category.user_id != user.id:
            raise ForbiddenError("Category not found or forbidden")

    def _checked_transaction_input(
        self, user: User, arguments: Dict[str, Any]
    ) -> CreateTransactionInput:
        data = validate_input(CreateTransactionInput, arguments)
        self._usable_account(user, data.account_id)
        if data.category_id:
            self._usable_category(user, data.category_id)
        return data


def _changes(update: BaseModel) -> Dict[str, Any]:
    """Fields the caller actually supplied. An explicit null clears the column."""
    return update.model_dump(exclude_unset=True)


def _model_schema(
    model: Type[BaseModel],
    extra_properties: Optional[Dict[str, Any]] = None,
    extra_required: tuple = (),
) -> Dict[str, Any]:
    """JSON schema for a tool whose arguments are a pydantic input model."""
    schema = model.model_json_schema()
    schema.pop("title", None)
    if extra_properties:
        schema["properties"] = {**extra_properties, **schema.get("properties", {})}
    required = list(extra_required) + schema.get("required", [])
    if required:
        schema["required"] = required
    return schema


_ID_PROPERTY = {"id": {"type": "string", "description": "Record ID"}}
_ID_ONLY = {"type": "object", "properties": _ID_PROPERTY, "required": ["id"]}
_NO_ARGUMENTS: Dict[str, Any] = {"type": "object", "properties": {}}
_PERIOD_PROPERTY = {
    "type": "string",
    "enum": list(PERIODS),
    "description": (
        "Period shorthand: this_month, last_month, last_7_days, "
        "last_30_days, last_90_days, ytd, this_year, last_year"
    ),
}


def create_tool_schemas() -> List[Dict[str, Any]]:
    """
    Create MCP tool schemas for all tools.

    Returns:
        List of tool schema definitions
    """
    return [
        {
            "name": "hello",
            "description": "Health check. Returns a welcome message.",
            "inputSchema": _NO_ARGUMENTS,
        },
        # Users
        {
            "name": "me",
            "description": "Get the signed-in user's record.",
            "inputSchema": _NO_ARGUMENTS,
        },
        {
            "name": "get_user",
            "description": "Get a user by ID. Non-admins can only read themselves.",
            "inputSchema": _ID_ONLY,
        },
        {
            "name": "list_users",
            "description": "List all users, newest first. Admins only.",
            "inputSchema": _NO_ARGUMENTS,
        },
        {
            "name": "create_user",
            "description": "Create the signed-in user's record after Firebase sign-up.",
            "inputSchema": _model_schema(CreateUserInput),
        },
        {
            "name": "update_user",
            "description": "Update the signed-in user's display name or photo URL.",
            "inputSchema": _model_schema(UpdateUserInput),
        },
        {
            "name": "delete_user",
            "description": "Delete the signed-in user and all of their data.",
            "inputSchema": _NO_ARGUMENTS,
        },
        # Accounts
        {
            "name": "get_accounts",
            "description": (
                "Get the user's accounts, newest first. Optionally filter by "
                "type (ASSET, INVESTMENT, DEBT, LIABILITY) or active flag."
            ),
            "inputSchema": _model_schema(AccountFilter),
        },
        {
            "name": "get_account",
            "description": "Get one account, optionally with its transactions.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    **_ID_PROPERTY,
                    "include_transactions": {
                        "type": "boolean",
                        "description": "Include the account's transactions (default: false)",
                        "default": False,
                    },
                },
                "required": ["id"],
            },
        },
        {
            "name": "create_account",
            "description": "Create an account. Debt balances are negative.",
            "inputSchema": _model_schema(CreateAccountInput),
        },
        {
            "name": "update_account",
            "description": "Update fields of an account.",
            "inputSchema": _model_schema(UpdateAccountInput, _ID_PROPERTY, ("id",)),
        },
        {
            "name": "delete_account",
            "description": "Delete an account and its transactions.",
            "inputSchema": _ID_ONLY,
        },
        # Categories
        {
            "name": "get_categories",
            "description": "Get the user's categories sorted by name.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "type": {
                        "type": "string",
                        "enum": [t.value for t in CategoryType],
                        "description": "Filter by category type",
                    },
                },
            },
        },
        {
            "name": "get_category",
            "description": "Get one category with its subcategories.",
            "inputSchema": _ID_ONLY,
        },
        {
            "name": "create_category",
            "description": "Create an income or expense category.",
            "inputSchema": _model_schema(CreateCategoryInput),
        },
        {
            "name": "update_category",
            "description": "Update fields of a category.",
            "inputSchema": _model_schema(UpdateCategoryInput, _ID_PROPERTY, ("id",)),
        },
        {
            "name": "delete_category",
            "description": "Delete a category. Its transactions become uncategorized.",
            "inputSchema": _ID_ONLY,
        },
        # Transactions
        {
            "name": "get_transactions",
            "description": (
                "Get a page of transactions, newest first. Supports account, "
                "category, type, date range and amount filters plus offset/limit "
                "pagination. Use 'period' for common date ranges."
            ),
            "inputSchema": _model_schema(
                TransactionFilter,
                {
                    "period": _PERIOD_PROPERTY,
                    "offset": {
                        "type": "integer",
                        "description": "Matches to skip (default: 0)",
                        "default": 0,
                    },
                    "limit": {
                        "type": "integer",
                        "description": "Page size, 1-100 (default: 50)",
                        "default": 50,
                    },
                },
            ),
        },
        {
            "name": "get_transaction",
            "description": "Get one transaction by ID.",
            "inputSchema": _ID_ONLY,
        },
        {
            "name": "create_transaction",
            "description": "Record a transaction on one of the user's accounts.",
            "inputSchema": _model_schema(CreateTransactionInput),
        },
        {
            "name": "update_transaction",
            "description": "Update fields of a transaction.",
            "inputSchema": _model_schema(UpdateTransactionInput, _ID_PROPERTY, ("id",)),
        },
        {
            "name": "delete_transaction",
            "description": "Delete a transaction.",
            "inputSchema": _ID_ONLY,
        },
        {
            "name": "bulk_create_transactions",
            "description": "Create several transactions. Any invalid item rejects the batch.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "transactions": {
                        "type": "array",
                        "items": _model_schema(CreateTransactionInput),
                    },
                },
                "required": ["transactions"],
            },
        },
        # Reports
        {
            "name": "get_net_worth",
            "description": "Net worth across active accounts with per-type totals.",
            "inputSchema": _NO_ARGUMENTS,
        },
        {
            "name": "get_cash_flow",
            "description": (
                "Income, expenses and net cash flow with per-category and "
                "monthly breakdowns. Give start_date/end_date or a period "
                "(default: this_month)."
            ),
            "inputSchema": {
                "type": "object",
                "properties": {
                    "period": _PERIOD_PROPERTY,
                    "start_date": {
                        "type": "string",
                        "description": "Start date (YYYY-MM-DD)",
                        "pattern": r"^\d{4}-\d{2}-\d{2}$",
                    },
                    "end_date": {
                        "type": "string",
                        "description": "End date, inclusive (YYYY-MM-DD)",
                        "pattern": r"^\d{4}-\d{2}-\d{2}$",
                    },
                },
            },
        },
        {
            "name": "get_projection",
            "description": (
                "Project net worth 30 years ahead from annual growth, return "
                "and inflation rates (percentages)."
            ),
            "inputSchema": _model_schema(
                ProjectionAssumptions,
                {"user_age": {"type": "integer", "description": "Current age, if known"}},
            ),
        },
        {
            "name": "get_dashboard_summary",
            "description": (
                "Net worth, monthly income, monthly expenses and cash flow, "
                "each compared with the previous month."
            ),
            "inputSchema": _NO_ARGUMENTS,
        },
    ]
