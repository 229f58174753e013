"""
Core functionality for Finance4All.
"""

from finance4all.core.database import FinanceDatabase
from finance4all.core.exceptions import (
    AuthError,
    Finance4AllError,
    ForbiddenError,
    InputValidationError,
    NotAuthenticatedError,
    NotFoundError,
    UserAlreadyExistsError,
)
from finance4all.core.seed import seed_database

__all__ = [
    "FinanceDatabase",
    "seed_database",
    "Finance4AllError",
    "AuthError",
    "ForbiddenError",
    "InputValidationError",
    "NotAuthenticatedError",
    "NotFoundError",
    "UserAlreadyExistsError",
]
