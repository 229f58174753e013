"""
Authentication against Firebase.
"""

from finance4all.auth.firebase import AuthenticatedUser, FirebaseAuthClient, FirebaseUser
from finance4all.auth.session import AuthSession
from finance4all.auth.verifier import TokenVerifier

__all__ = [
    "AuthenticatedUser",
    "AuthSession",
    "FirebaseAuthClient",
    "FirebaseUser",
    "TokenVerifier",
]
