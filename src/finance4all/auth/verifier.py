"""
Server-side resolution of the caller's identity.
"""

import logging
from typing import Optional

from finance4all.auth.firebase import AuthenticatedUser, FirebaseAuthClient
from finance4all.core.exceptions import AuthError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class TokenVerifier:
    """Turns an ``Authorization`` header into an authenticated user, or None."""

    def __init__(self, client: FirebaseAuthClient):
        self.client = client

    def authenticate(self, authorization: Optional[str]) -> Optional[AuthenticatedUser]:
        """
        Resolve a bearer token.

        Missing headers, other schemes and rejected tokens all yield None,
        leaving the caller unauthenticated.
        """
        if not authorization or not authorization.startswith(BEARER_PREFIX):
            return None

        token = authorization[len(BEARER_PREFIX):].strip()
        try:
            return self.client.verify_id_token(token)
        except AuthError as e:
            logger.warning(f"Invalid Firebase token: {e}")
            return None
