"""
Sample data for local development.

Creates a test user with default income and expense categories and
three sample accounts. Re-running replaces the test user's categories
but keeps the user record.
"""

import logging
from typing import List, NamedTuple

from finance4all.core.database import FinanceDatabase
from finance4all.models.account import Account, AccountType
from finance4all.models.category import Category, CategoryType
from finance4all.models.user import User, UserRole

logger = logging.getLogger(__name__)

TEST_USER_EMAIL = "test@finance4all.com"
TEST_USER_FIREBASE_UID = "test-firebase-uid-123"
TEST_USER_DISPLAY_NAME = "Test User"

EXPENSE_CATEGORIES = [
    {"name": "Housing", "color": "#1A73E8", "icon": "home"},
    {"name": "Transportation", "color": "#34A853", "icon": "car"},
    {"name": "Food & Dining", "color": "#FBBC04", "icon": "restaurant"},
    {"name": "Utilities", "color": "#EA4335", "icon": "bolt"},
    {"name": "Healthcare", "color": "#A142F4", "icon": "medical"},
    {"name": "Entertainment", "color": "#FF6B6B", "icon": "movie"},
    {"name": "Shopping", "color": "#4ECDC4", "icon": "shopping"},
    {"name": "Personal Care", "color": "#95E1D3", "icon": "spa"},
    {"name": "Education", "color": "#F38181", "icon": "school"},
    {"name": "Miscellaneous", "color": "#AA96DA", "icon": "more"},
]

INCOME_CATEGORIES = [
    {"name": "Salary", "color": "#34A853", "icon": "payments"},
    {"name": "Freelance", "color": "#1A73E8", "icon": "work"},
    {"name": "Investments", "color": "#FBBC04", "icon": "trending_up"},
    {"name": "Other Income", "color": "#A142F4", "icon": "attach_money"},
]

SAMPLE_ACCOUNTS = [
    {
        "name": "Main Checking",
        "type": AccountType.ASSET,
        "subtype": "Checking",
        "balance": 5000.0,
        "currency": "USD",
        "institution": "Test Bank",
    },
    {
        "name": "Emergency Fund",
        "type": AccountType.ASSET,
        "subtype": "Savings",
        "balance": 15000.0,
        "currency": "USD",
        "institution": "Test Bank",
        "interest_rate": 2.5,
    },
    {
        "name": "Credit Card",
        "type": AccountType.DEBT,
        "subtype": "Credit Card",
        "balance": -2500.0,
        "currency": "USD",
        "institution": "Test Credit Union",
        "interest_rate": 18.99,
    },
]


class SeedResult(NamedTuple):
    user: User
    categories: List[Category]
    accounts: List[Account]


def seed_database(db: FinanceDatabase) -> SeedResult:
    """Populate the database with the sample user, categories and accounts."""
    logger.info("Starting database seeding...")
    db.create_schema()

    user = db.upsert_user(
        email=TEST_USER_EMAIL,
        firebase_uid=TEST_USER_FIREBASE_UID,
        display_name=TEST_USER_DISPLAY_NAME,
        role=UserRole.USER,
    )
    logger.info(f"✓ Created test user: {user.email}")

    removed = db.delete_categories_for_user(user.id)
    if removed:
        logger.debug(f"Removed {removed} existing categories for {user.email}")

    categories = [
        db.create_category(user.id, {**cat, "type": CategoryType.EXPENSE}, is_default=True)
        for cat in EXPENSE_CATEGORIES
    ]
    logger.info("✓ Created default expense categories")

    categories += [
        db.create_category(user.id, {**cat, "type": CategoryType.INCOME}, is_default=True)
        for cat in INCOME_CATEGORIES
    ]
    logger.info("✓ Created default income categories")

    accounts = [db.create_account(user.id, dict(data)) for data in SAMPLE_ACCOUNTS]
    logger.info("✓ Created sample accounts")

    logger.info("Database seeding completed successfully!")
    return SeedResult(user=user, categories=categories, accounts=accounts)
