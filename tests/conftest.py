"""
Pytest configuration and fixtures for finance4all tests.
"""

from typing import Iterator

import pytest

from finance4all.auth.firebase import AuthenticatedUser
from finance4all.core.database import FinanceDatabase
from finance4all.core.seed import TEST_USER_FIREBASE_UID, SeedResult, seed_database
from finance4all.models.user import UserRole
from finance4all.tools.tools import Finance4AllTools


@pytest.fixture
def db() -> Iterator[FinanceDatabase]:
    """Empty in-memory database with the schema created."""
    database = FinanceDatabase("sqlite://")
    database.create_schema()
    yield database
    database.close()


@pytest.fixture
def seeded(db: FinanceDatabase) -> SeedResult:
    """Database loaded with the sample user, categories and accounts."""
    return seed_database(db)


@pytest.fixture
def caller(seeded: SeedResult) -> AuthenticatedUser:
    return AuthenticatedUser(uid=TEST_USER_FIREBASE_UID, email=seeded.user.email)


@pytest.fixture
def tools(db: FinanceDatabase, caller: AuthenticatedUser) -> Finance4AllTools:
    """Tools acting as the seeded test user."""
    return Finance4AllTools(db, caller)


@pytest.fixture
def other_user_tools(db: FinanceDatabase, seeded: SeedResult) -> Finance4AllTools:
    """Tools acting as a second, unrelated user."""
    db.create_user(firebase_uid="other-uid", email="other@example.com")
    return Finance4AllTools(db, AuthenticatedUser(uid="other-uid"))


@pytest.fixture
def admin_tools(db: FinanceDatabase, seeded: SeedResult) -> Finance4AllTools:
    db.create_user(firebase_uid="admin-uid", email="admin@example.com", role=UserRole.ADMIN)
    return Finance4AllTools(db, AuthenticatedUser(uid="admin-uid", role=UserRole.ADMIN))
