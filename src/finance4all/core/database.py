"""
Database abstraction layer for Finance4All data.

Wraps a SQLAlchemy engine and returns pydantic models, so callers never
hold on to ORM objects or sessions.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Tuple

from sqlalchemy import create_engine, func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from finance4all.core.schema import (
    AccountRecord,
    Base,
    CategoryRecord,
    TransactionRecord,
    UserRecord,
)
from finance4all.models.account import Account, AccountType
from finance4all.models.category import Category, CategoryType
from finance4all.models.transaction import Transaction, TransactionFilter
from finance4all.models.user import User, UserRole

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///finance4all.db"


class FinanceDatabase:
    """
    Abstraction layer for storing and querying Finance4All data.

    Ownership checks are not done here; every method trusts the ids it
    is given.
    """

    def __init__(self, url: Optional[str] = None, echo: bool = False):
        """
        Initialize database connection.

        Args:
            url: SQLAlchemy database URL.
                If None, uses a SQLite file in the working directory.
            echo: Log every SQL statement.
        """
        self.url = url or DEFAULT_DATABASE_URL

        engine_kwargs: Dict[str, Any] = {"echo": echo}
        if self.url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection, otherwise each session sees an empty database
                engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(self.url, **engine_kwargs)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def create_schema(self) -> None:
        """Create all tables that do not exist yet."""
        Base.metadata.create_all(self.engine)

    def drop_schema(self) -> None:
        Base.metadata.drop_all(self.engine)

    def is_available(self) -> bool:
        """Check if the database accepts connections."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Database not available at {self.engine.url!r}: {e}")
            return False

    def close(self) -> None:
        self.engine.dispose()

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Session that commits on success and rolls back on error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[User]:
        with self.session() as session:
            record = session.get(UserRecord, user_id)
            return User.model_validate(record) if record else None

    def get_user_by_firebase_uid(self, firebase_uid: str) -> Optional[User]:
        with self.session() as session:
            record = session.scalar(
                select(UserRecord).where(UserRecord.firebase_uid == firebase_uid)
            )
            return User.model_validate(record) if record else None

    def list_users(self) -> List[User]:
        """All users, newest first."""
        with self.session() as session:
            records = session.scalars(
                select(UserRecord).order_by(UserRecord.created_at.desc())
            )
            return [User.model_validate(r) for r in records]

    def create_user(
        self,
        firebase_uid: str,
        email: str,
        display_name: Optional[str] = None,
        photo_url: Optional[str] = None,
        role: UserRole = UserRole.USER,
    ) -> User:
        with self.session() as session:
            record = UserRecord(
                firebase_uid=firebase_uid,
                email=email,
                display_name=display_name,
                photo_url=photo_url,
                role=role,
            )
            session.add(record)
            session.flush()
            return User.model_validate(record)

    def upsert_user(
        self,
        email: str,
        firebase_uid: str,
        display_name: Optional[str] = None,
        role: UserRole = UserRole.USER,
    ) -> User:
        """Return the user with this email, creating it if missing."""
        with self.session() as session:
            record = session.scalar(select(UserRecord).where(UserRecord.email == email))
            if record is None:
                record = UserRecord(
                    firebase_uid=firebase_uid,
                    email=email,
                    display_name=display_name,
                    role=role,
                )
                session.add(record)
                session.flush()
            return User.model_validate(record)

    def update_user(self, user_id: str, changes: Dict[str, Any]) -> Optional[User]:
        return self._update(UserRecord, User, user_id, changes)

    def delete_user(self, user_id: str) -> bool:
        """Delete a user together with everything they own."""
        return self._delete(UserRecord, user_id)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def get_accounts(
        self,
        user_id: str,
        account_type: Optional[AccountType] = None,
        is_active: Optional[bool] = None,
    ) -> List[Account]:
        """
        Get a user's accounts.

        Args:
            user_id: Owner of the accounts
            account_type: Optional filter by account type
            is_active: Optional filter by active flag

        Returns:
            List of accounts, newest first
        """
        stmt = select(AccountRecord).where(AccountRecord.user_id == user_id)
        if account_type is not None:
            stmt = stmt.where(AccountRecord.type == account_type)
        if is_active is not None:
            stmt = stmt.where(AccountRecord.is_active == is_active)
        stmt = stmt.order_by(AccountRecord.created_at.desc())

        with self.session() as session:
            return [Account.model_validate(r) for r in session.scalars(stmt)]

    def get_account(self, account_id: str) -> Optional[Account]:
        with self.session() as session:
            record = session.get(AccountRecord, account_id)
            return Account.model_validate(record) if record else None

    def create_account(self, user_id: str, data: Dict[str, Any]) -> Account:
        with self.session() as session:
            record = AccountRecord(user_id=user_id, **data)
            session.add(record)
            session.flush()
            return Account.model_validate(record)

    def update_account(self, account_id: str, changes: Dict[str, Any]) -> Optional[Account]:
        return self._update(AccountRecord, Account, account_id, changes)

    def delete_account(self, account_id: str) -> bool:
        """Delete an account and its transactions."""
        return self._delete(AccountRecord, account_id)

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def get_categories(
        self, user_id: str, category_type: Optional[CategoryType] = None
    ) -> List[Category]:
        """Get a user's categories sorted by name."""
        stmt = select(CategoryRecord).where(CategoryRecord.user_id == user_id)
        if category_type is not None:
            stmt = stmt.where(CategoryRecord.type == category_type)
        stmt = stmt.order_by(CategoryRecord.name.asc())

        with self.session() as session:
            return [Category.model_validate(r) for r in session.scalars(stmt)]

    def get_category(self, category_id: str) -> Optional[Category]:
        with self.session() as session:
            record = session.get(CategoryRecord, category_id)
            return Category.model_validate(record) if record else None

    def get_child_categories(self, category_id: str) -> List[Category]:
        with self.session() as session:
            records = session.scalars(
                select(CategoryRecord).where(CategoryRecord.parent_id == category_id)
            )
            return [Category.model_validate(r) for r in records]

    def create_category(
        self, user_id: str, data: Dict[str, Any], is_default: bool = False
    ) -> Category:
        with self.session() as session:
            record = CategoryRecord(user_id=user_id, is_default=is_default, **data)
            session.add(record)
            session.flush()
            return Category.model_validate(record)

    def update_category(self, category_id: str, changes: Dict[str, Any]) -> Optional[Category]:
        return self._update(CategoryRecord, Category, category_id, changes)

    def delete_category(self, category_id: str) -> bool:
        """Delete a category; its transactions and children are detached."""
        return self._delete(CategoryRecord, category_id)

    def delete_categories_for_user(self, user_id: str) -> int:
        """Delete every category a user owns. Returns the number removed."""
        with self.session() as session:
            records = list(
                session.scalars(
                    select(CategoryRecord).where(CategoryRecord.user_id == user_id)
                )
            )
            for record in records:
                session.delete(record)
            return len(records)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def get_transactions(
        self,
        user_id: str,
        filters: Optional[TransactionFilter] = None,
        offset: int = 0,
        limit: Optional[int] = 50,
    ) -> Tuple[List[Transaction], int]:
        """
        Get a page of transactions with optional filters.

        Args:
            user_id: Owner of the transactions
            filters: Account, category, type, date range and amount range
            offset: Number of matching transactions to skip
            limit: Maximum number of transactions to return (None for all)

        Returns:
            Tuple of (page sorted by date descending, total matching count)
        """
        conditions = [TransactionRecord.user_id == user_id]
        if filters is not None:
            if filters.account_id:
                conditions.append(TransactionRecord.account_id == filters.account_id)
            if filters.category_id:
                conditions.append(TransactionRecord.category_id == filters.category_id)
            if filters.type:
                conditions.append(TransactionRecord.type == filters.type)
            if filters.start_date:
                conditions.append(TransactionRecord.date >= filters.start_date)
            if filters.end_date:
                conditions.append(TransactionRecord.date <= filters.end_date)
            if filters.min_amount is not None:
                conditions.append(TransactionRecord.amount >= filters.min_amount)
            if filters.max_amount is not None:
                conditions.append(TransactionRecord.amount <= filters.max_amount)

        stmt = (
            select(TransactionRecord)
            .where(*conditions)
            .order_by(TransactionRecord.date.desc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        count_stmt = select(func.count()).select_from(TransactionRecord).where(*conditions)

        with self.session() as session:
            page = [Transaction.model_validate(r) for r in session.scalars(stmt)]
            total = session.scalar(count_stmt) or 0
            return page, total

    def get_transactions_between(
        self, user_id: str, start_date: datetime, end_date: datetime
    ) -> List[Transaction]:
        """All of a user's transactions in [start_date, end_date], oldest first."""
        stmt = (
            select(TransactionRecord)
            .where(
                TransactionRecord.user_id == user_id,
                TransactionRecord.date >= start_date,
                TransactionRecord.date <= end_date,
            )
            .order_by(TransactionRecord.date.asc())
        )
        with self.session() as session:
            return [Transaction.model_validate(r) for r in session.scalars(stmt)]

    def get_account_transactions(self, account_id: str) -> List[Transaction]:
        stmt = (
            select(TransactionRecord)
            .where(TransactionRecord.account_id == account_id)
            .order_by(TransactionRecord.date.desc())
        )
        with self.session() as session:
            return [Transaction.model_validate(r) for r in session.scalars(stmt)]

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        with self.session() as session:
            record = session.get(TransactionRecord, transaction_id)
            return Transaction.model_validate(record) if record else None

    def create_transaction(self, user_id: str, data: Dict[str, Any]) -> Transaction:
        return self.create_transactions(user_id, [data])[0]

    def create_transactions(
        self, user_id: str, items: List[Dict[str, Any]]
    ) -> List[Transaction]:
        """Create several transactions in one database transaction."""
        with self.session() as session:
            records = [TransactionRecord(user_id=user_id, **data) for data in items]
            session.add_all(records)
            session.flush()
            return [Transaction.model_validate(r) for r in records]

    def update_transaction(
        self, transaction_id: str, changes: Dict[str, Any]
    ) -> Optional[Transaction]:
        return self._update(TransactionRecord, Transaction, transaction_id, changes)

    def delete_transaction(self, transaction_id: str) -> bool:
        return self._delete(TransactionRecord, transaction_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _update(self, record_cls, model_cls, record_id: str, changes: Dict[str, Any]):
        with self.session() as session:
            record = session.get(record_cls, record_id)
            if record is None:
                return None
            for field, value in changes.items():
                setattr(record, field, value)
            session.flush()
            return model_cls.model_validate(record)

    def _delete(self, record_cls, record_id: str) -> bool:
        with self.session() as session:
            record = session.get(record_cls, record_id)
            if record is None:
                return False
            session.delete(record)
            return True
