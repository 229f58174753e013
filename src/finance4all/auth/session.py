"""
Client-side authentication state.

``AuthSession`` holds the signed-in user, the last error and a loading
flag, and forwards every operation to Firebase. Listeners registered with
``on_auth_state_changed`` are called with the current user right away and
again whenever it changes.
"""

import logging
from typing import Callable, List, Optional, TypeVar

from finance4all.auth.firebase import FirebaseAuthClient, FirebaseUser
from finance4all.core.exceptions import AuthError, NotAuthenticatedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

AuthListener = Callable[[Optional[FirebaseUser]], None]


class AuthSession:
    """Mirror of the signed-in Firebase user for one client."""

    def __init__(self, client: FirebaseAuthClient):
        self.client = client
        self.user: Optional[FirebaseUser] = None
        self.loading = False
        self.error: Optional[Exception] = None
        self._listeners: List[AuthListener] = []

    @property
    def id_token(self) -> Optional[str]:
        return self.user.id_token if self.user else None

    def on_auth_state_changed(self, listener: AuthListener) -> Callable[[], None]:
        """Register a listener. Returns a function that unregisters it."""
        self._listeners.append(listener)
        listener(self.user)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def clear_error(self) -> None:
        self.error = None

    def signup(
        self, email: str, password: str, display_name: Optional[str] = None
    ) -> FirebaseUser:
        """Create an account, sign it in and set its display name if given."""

        def _signup() -> FirebaseUser:
            user = self.client.sign_up(email, password)
            if display_name:
                self.client.update_profile(user.id_token, display_name=display_name)
                user = user.model_copy(update={"display_name": display_name})
            return user

        user = self._run(_signup)
        self._set_user(user)
        return user

    def login(self, email: str, password: str) -> FirebaseUser:
        user = self._run(lambda: self.client.sign_in(email, password))
        self._set_user(user)
        return user

    def logout(self) -> None:
        # Firebase sign-out only drops local credentials
        self.clear_error()
        self._set_user(None)

    def reset_password(self, email: str) -> None:
        self._run(lambda: self.client.send_password_reset(email))

    def update_user_profile(self, display_name: str, photo_url: Optional[str] = None) -> None:
        user = self._require_user()
        self._run(lambda: self.client.update_profile(user.id_token, display_name, photo_url))
        self._set_user(
            user.model_copy(
                update={"display_name": display_name, "photo_url": photo_url or user.photo_url}
            )
        )

    def send_verification_email(self) -> None:
        user = self._require_user()
        self._run(lambda: self.client.send_email_verification(user.id_token))

    def _require_user(self) -> FirebaseUser:
        if self.user is None:
            self.error = NotAuthenticatedError("No user is currently signed in")
            raise self.error
        return self.user

    def _run(self, operation: Callable[[], T]) -> T:
        """Run a Firebase call, recording any failure on the session before re-raising."""
        self.clear_error()
        self.loading = True
        try:
            return operation()
        except AuthError as e:
            logger.debug(f"Auth operation failed: {e.provider_code or e}")
            self.error = e
            raise
        finally:
            self.loading = False

    def _set_user(self, user: Optional[FirebaseUser]) -> None:
        self.user = user
        for listener in list(self._listeners):
            listener(user)
