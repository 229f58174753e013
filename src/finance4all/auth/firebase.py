"""
Firebase Authentication over its REST API.

Covers the Identity Toolkit endpoints used for email/password accounts
and for checking ID tokens presented to the server. Works against the
Firebase Auth emulator when an emulator host is given.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from finance4all.config import Settings
from finance4all.core.exceptions import AuthError
from finance4all.models.user import UserRole

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"

# Firebase error codes mapped to messages suitable for display
ERROR_MESSAGES = {
    "EMAIL_EXISTS": "An account with this email already exists",
    "EMAIL_NOT_FOUND": "No account found with this email",
    "INVALID_PASSWORD": "Incorrect password",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password",
    "INVALID_EMAIL": "Invalid email address",
    "WEAK_PASSWORD": "Password should be at least 6 characters",
    "USER_DISABLED": "This account has been disabled",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts, try again later",
    "INVALID_ID_TOKEN": "Session expired, please sign in again",
    "TOKEN_EXPIRED": "Session expired, please sign in again",
    "USER_NOT_FOUND": "User not found",
}


class FirebaseUser(BaseModel):
    """A signed-in Firebase user with their current tokens."""

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    email_verified: bool = False
    id_token: str
    refresh_token: Optional[str] = None


class AuthenticatedUser(BaseModel):
    """Identity behind a verified ID token."""

    uid: str
    email: Optional[str] = None
    role: UserRole = UserRole.USER


class FirebaseAuthClient:
    """Client for the Firebase Authentication REST API."""

    def __init__(
        self,
        api_key: str,
        emulator_host: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Firebase Web API key
            emulator_host: host:port of the Auth emulator, if used
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key
        if emulator_host:
            self.base_url = f"http://{emulator_host}/identitytoolkit.googleapis.com/v1"
            logger.info(f"Using Firebase Auth emulator at {emulator_host}")
        else:
            self.base_url = IDENTITY_TOOLKIT_URL
        self.client = httpx.Client(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: Optional[httpx.BaseTransport] = None
    ) -> "FirebaseAuthClient":
        """
        Build a client from configuration.

        Raises:
            AuthError: If the API key or project id is missing
        """
        if not settings.firebase.api_key or not settings.firebase.project_id:
            raise AuthError(
                "Firebase configuration is incomplete. Check environment variables.",
                "CONFIGURATION_NOT_FOUND",
            )
        emulator = settings.auth_emulator_host if settings.use_firestore_emulator else None
        return cls(
            settings.firebase.api_key,
            emulator_host=emulator,
            timeout=settings.api_timeout_seconds,
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "FirebaseAuthClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # Account operations

    def sign_up(self, email: str, password: str) -> FirebaseUser:
        data = self._post(
            "accounts:signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return self._to_user(data)

    def sign_in(self, email: str, password: str) -> FirebaseUser:
        data = self._post(
            "accounts:signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return self._to_user(data)

    def send_password_reset(self, email: str) -> None:
        self._post("accounts:sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})

    def send_email_verification(self, id_token: str) -> None:
        self._post("accounts:sendOobCode", {"requestType": "VERIFY_EMAIL", "idToken": id_token})

    def update_profile(
        self,
        id_token: str,
        display_name: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Update display name and/or photo URL. Returns the updated profile fields."""
        payload: Dict[str, Any] = {"idToken": id_token, "returnSecureToken": True}
        if display_name is not None:
            payload["displayName"] = display_name
        if photo_url is not None:
            payload["photoUrl"] = photo_url
        return self._post("accounts:update", payload)

    def lookup(self, id_token: str) -> Dict[str, Any]:
        """
        Fetch the account behind an ID token.

        Raises:
            AuthError: If the token is invalid, expired or unknown
        """
        data = self._post("accounts:lookup", {"idToken": id_token})
        users = data.get("users") or []
        if not users:
            raise AuthError(ERROR_MESSAGES["USER_NOT_FOUND"], "USER_NOT_FOUND")
        return users[0]

    def verify_id_token(self, id_token: str) -> AuthenticatedUser:
        """
        Verify an ID token and return the identity behind it.

        The role comes from the ``role`` custom claim, USER when absent.
        """
        info = self.lookup(id_token)
        role = UserRole.USER
        custom = info.get("customAttributes")
        if custom:
            try:
                claims = json.loads(custom)
                role = UserRole(claims.get("role", UserRole.USER.value))
            except (ValueError, AttributeError):
                logger.warning(f"Ignoring malformed custom claims for {info.get('localId')}")
        return AuthenticatedUser(uid=info["localId"], email=info.get("email"), role=role)

    # Internals

    def _post(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.client.post(
                f"{self.base_url}/{endpoint}",
                params={"key": self.api_key},
                json=payload,
            )
        except httpx.HTTPError as e:
            logger.error(f"Firebase Auth request failed: {e}")
            raise AuthError(f"Network error: {e}", "NETWORK_ERROR") from e

        if response.is_error:
            raise self._error_from_response(response)
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Firebase Auth returned a non-JSON body for {endpoint}")
            raise AuthError("Invalid response from Firebase", "INVALID_RESPONSE") from e

    @staticmethod
    def _error_from_response(response: httpx.Response) -> AuthError:
        try:
            message = response.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            message = f"HTTP {response.status_code}"
        # Messages look like "WEAK_PASSWORD : Password should be at least 6 characters"
        code = message.split(" : ", 1)[0].strip()
        return AuthError(ERROR_MESSAGES.get(code, message), code)

    @staticmethod
    def _to_user(data: Dict[str, Any]) -> FirebaseUser:
        return FirebaseUser(
            uid=data["localId"],
            email=data.get("email"),
            display_name=data.get("displayName") or None,
            photo_url=data.get("photoUrl"),
            email_verified=bool(data.get("emailVerified", False)),
            id_token=data["idToken"],
            refresh_token=data.get("refreshToken"),
        )
