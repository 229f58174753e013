"""
Unit tests for Pydantic models and input validation.
"""

import uuid
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from finance4all.core.exceptions import InputValidationError
from finance4all.core.validation import validate_input, validate_optional
from finance4all.models.account import (
    Account,
    AccountType,
    CreateAccountInput,
    UpdateAccountInput,
)
from finance4all.models.category import CategoryType, CreateCategoryInput, UpdateCategoryInput
from finance4all.models.reports import ProjectionAssumptions
from finance4all.models.transaction import (
    CreateTransactionInput,
    Pagination,
    TransactionFilter,
    TransactionType,
    UpdateTransactionInput,
)
from finance4all.models.user import CreateUserInput

ACCOUNT_ID = str(uuid.uuid4())
NOW = datetime(2026, 1, 15, 12, 0, 0)


def _account(**overrides) -> Account:
    fields = {
        "id": "acc-1",
        "user_id": "user-1",
        "name": "Checking",
        "type": AccountType.ASSET,
        "balance": 100.0,
        "created_at": NOW,
        "updated_at": NOW,
    }
    fields.update(overrides)
    return Account(**fields)


@pytest.mark.unit
class TestAccount:
    """Tests for Account model."""

    def test_defaults(self) -> None:
        account = _account()
        assert account.currency == "USD"
        assert account.is_active is True
        assert account.subtype is None

    @pytest.mark.parametrize(
        "account_type, expected",
        [
            (AccountType.ASSET, False),
            (AccountType.INVESTMENT, False),
            (AccountType.DEBT, True),
            (AccountType.LIABILITY, True),
        ],
    )
    def test_is_liability(self, account_type, expected) -> None:
        assert _account(type=account_type).is_liability is expected

    def test_is_liability_in_dump(self) -> None:
        dumped = _account(type=AccountType.DEBT, balance=-50.0).model_dump(mode="json")
        assert dumped["is_liability"] is True
        assert dumped["type"] == "DEBT"

    def test_strict_rejects_string_balance(self) -> None:
        with pytest.raises(ValidationError):
            _account(balance="100")


@pytest.mark.unit
class TestCreateAccountInput:
    def test_valid_input(self) -> None:
        data = CreateAccountInput(name="Savings", type="ASSET", balance=1000)
        assert data.type == AccountType.ASSET
        assert data.currency == "USD"

    def test_name_required(self) -> None:
        with pytest.raises(ValidationError):
            CreateAccountInput(name="", type="ASSET", balance=0)

    def test_currency_must_be_three_letters(self) -> None:
        with pytest.raises(ValidationError):
            CreateAccountInput(name="Savings", type="ASSET", balance=0, currency="EURO")

    def test_interest_rate_bounds(self) -> None:
        with pytest.raises(ValidationError):
            CreateAccountInput(name="Loan", type="DEBT", balance=-10, interest_rate=101)

    def test_balance_must_be_finite(self) -> None:
        with pytest.raises(ValidationError):
            CreateAccountInput(name="Savings", type="ASSET", balance=float("inf"))

    def test_unknown_type(self) -> None:
        with pytest.raises(ValidationError):
            CreateAccountInput(name="Savings", type="CRYPTO", balance=0)


@pytest.mark.unit
class TestUpdateInputs:
    """Partial updates: omitted fields are untouched, null clears nullable columns."""

    def test_null_rejected_for_required_column(self) -> None:
        with pytest.raises(ValidationError, match="name cannot be null"):
            UpdateAccountInput(name=None)

    def test_omitted_fields_not_checked(self) -> None:
        data = UpdateAccountInput(balance=10)
        assert data.model_dump(exclude_unset=True) == {"balance": 10}

    def test_null_allowed_for_nullable_column(self) -> None:
        data = UpdateAccountInput(institution=None)
        assert data.model_dump(exclude_unset=True) == {"institution": None}

    def test_category_parent_can_be_cleared(self) -> None:
        data = UpdateCategoryInput(parent_id=None)
        assert data.model_dump(exclude_unset=True) == {"parent_id": None}

    def test_category_type_cannot_be_null(self) -> None:
        with pytest.raises(ValidationError, match="type cannot be null"):
            UpdateCategoryInput(type=None)

    def test_transaction_category_can_be_cleared(self) -> None:
        data = UpdateTransactionInput(category_id=None, recurring_id=None)
        assert data.model_dump(exclude_unset=True) == {
            "category_id": None,
            "recurring_id": None,
        }

    @pytest.mark.parametrize("field", ["account_id", "amount", "type", "date", "is_recurring"])
    def test_transaction_required_columns_cannot_be_null(self, field) -> None:
        with pytest.raises(ValidationError, match=f"{field} cannot be null"):
            UpdateTransactionInput(**{field: None})


@pytest.mark.unit
class TestCreateCategoryInput:
    def test_valid_color(self) -> None:
        data = CreateCategoryInput(name="Food", type="EXPENSE", color="#1a73E8")
        assert data.type == CategoryType.EXPENSE

    @pytest.mark.parametrize("color", ["1A73E8", "#1A73E", "#GGGGGG", "red"])
    def test_invalid_color(self, color) -> None:
        with pytest.raises(ValidationError):
            CreateCategoryInput(name="Food", type="EXPENSE", color=color)

    def test_parent_id_must_be_uuid(self) -> None:
        with pytest.raises(ValidationError, match="Invalid ID"):
            CreateCategoryInput(name="Food", type="EXPENSE", parent_id="not-a-uuid")


@pytest.mark.unit
class TestCreateTransactionInput:
    def test_valid_input(self) -> None:
        data = CreateTransactionInput(
            account_id=ACCOUNT_ID, amount=12.5, type="EXPENSE", date="2026-01-10T09:00:00"
        )
        assert data.type == TransactionType.EXPENSE
        assert data.date == datetime(2026, 1, 10, 9, 0, 0)
        assert data.is_recurring is False

    def test_aware_date_normalized_to_utc(self) -> None:
        data = CreateTransactionInput(
            account_id=ACCOUNT_ID, amount=1, type="INCOME", date="2026-01-10T09:00:00+02:00"
        )
        assert data.date == datetime(2026, 1, 10, 7, 0, 0)
        assert data.date.tzinfo is None

    @pytest.mark.parametrize("amount", [0, -5])
    def test_amount_must_be_positive(self, amount) -> None:
        with pytest.raises(ValidationError):
            CreateTransactionInput(account_id=ACCOUNT_ID, amount=amount, type="EXPENSE", date=NOW)

    def test_description_length(self) -> None:
        with pytest.raises(ValidationError):
            CreateTransactionInput(
                account_id=ACCOUNT_ID,
                amount=1,
                type="EXPENSE",
                date=NOW,
                description="x" * 201,
            )


@pytest.mark.unit
class TestTransactionFilter:
    def test_start_after_end(self) -> None:
        with pytest.raises(ValidationError, match="Start date must be before end date"):
            TransactionFilter(start_date="2026-02-01", end_date="2026-01-01")

    def test_min_above_max(self) -> None:
        with pytest.raises(ValidationError, match="Minimum amount must be less than maximum"):
            TransactionFilter(min_amount=100, max_amount=10)

    def test_zero_min_amount_allowed(self) -> None:
        filters = TransactionFilter(min_amount=0, max_amount=10)
        assert filters.min_amount == 0

    def test_aware_dates_normalized(self) -> None:
        filters = TransactionFilter(start_date=datetime(2026, 1, 1, tzinfo=timezone.utc))
        assert filters.start_date == datetime(2026, 1, 1)

    def test_date_only_end_covers_whole_day(self) -> None:
        filters = TransactionFilter(start_date="2026-01-15", end_date="2026-01-15")
        assert filters.start_date == datetime(2026, 1, 15)
        assert filters.end_date == datetime(2026, 1, 15, 23, 59, 59, 999999)

    def test_end_datetime_kept_as_given(self) -> None:
        filters = TransactionFilter(end_date="2026-01-15T08:30:00")
        assert filters.end_date == datetime(2026, 1, 15, 8, 30)


@pytest.mark.unit
class TestPagination:
    def test_defaults(self) -> None:
        page = Pagination()
        assert page.offset == 0
        assert page.limit == 50

    @pytest.mark.parametrize("limit", [0, 101])
    def test_limit_bounds(self, limit) -> None:
        with pytest.raises(ValidationError):
            Pagination(limit=limit)

    def test_negative_offset(self) -> None:
        with pytest.raises(ValidationError):
            Pagination(offset=-1)


@pytest.mark.unit
class TestProjectionAssumptions:
    def test_inflation_bounds(self) -> None:
        with pytest.raises(ValidationError):
            ProjectionAssumptions(income_growth_rate=3, investment_return=7, inflation_rate=51)

    def test_negative_salary_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ProjectionAssumptions(
                income_growth_rate=3, investment_return=7, inflation_rate=2, expected_salary=-1
            )


@pytest.mark.unit
class TestValidateInput:
    def test_returns_model(self) -> None:
        data = validate_input(CreateUserInput, {"firebase_uid": "uid", "email": "a@b.com"})
        assert data.email == "a@b.com"

    def test_passes_instances_through(self) -> None:
        page = Pagination(limit=10)
        assert validate_input(Pagination, page) is page

    def test_collects_every_error(self) -> None:
        with pytest.raises(InputValidationError) as exc_info:
            validate_input(CreateUserInput, {"firebase_uid": "", "email": "not-an-email"})

        message = str(exc_info.value)
        assert message.startswith("Validation error: ")
        assert "firebase_uid" in message
        assert "email" in message
        assert exc_info.value.code == "VALIDATION_ERROR"

    def test_validate_optional_none(self) -> None:
        assert validate_optional(Pagination, None) is None
