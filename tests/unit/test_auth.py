"""
Unit tests for Firebase authentication over a mocked HTTP transport.
"""

import json

import httpx
import pytest

from finance4all.auth.firebase import FirebaseAuthClient
from finance4all.auth.session import AuthSession
from finance4all.auth.verifier import TokenVerifier
from finance4all.config import FirebaseSettings, Settings
from finance4all.core.exceptions import AuthError, NotAuthenticatedError
from finance4all.models.user import UserRole

SIGNED_IN = {
    "localId": "uid-123",
    "email": "jane@example.com",
    "displayName": "",
    "idToken": "token-abc",
    "refreshToken": "refresh-abc",
}


class FakeFirebase:
    """Records requests and answers them like the Identity Toolkit API."""

    def __init__(self):
        self.requests = []
        self.errors = {}
        self.lookup_users = [{"localId": "uid-123", "email": "jane@example.com"}]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        endpoint = request.url.path.rsplit("/", 1)[-1]
        body = json.loads(request.content)
        self.requests.append((endpoint, body, request))

        if endpoint in self.errors:
            return httpx.Response(400, json={"error": {"message": self.errors[endpoint]}})
        if endpoint in ("accounts:signUp", "accounts:signInWithPassword"):
            return httpx.Response(200, json={**SIGNED_IN, "email": body["email"]})
        if endpoint == "accounts:lookup":
            return httpx.Response(200, json={"users": self.lookup_users})
        return httpx.Response(200, json={"localId": "uid-123"})

    def endpoints(self):
        return [endpoint for endpoint, _, _ in self.requests]


@pytest.fixture
def firebase():
    return FakeFirebase()


@pytest.fixture
def client(firebase):
    with FirebaseAuthClient("test-key", transport=httpx.MockTransport(firebase)) as c:
        yield c


@pytest.fixture
def session(client):
    return AuthSession(client)


@pytest.mark.unit
class TestFirebaseAuthClient:
    def test_sign_up(self, client, firebase):
        user = client.sign_up("jane@example.com", "secret1")

        endpoint, body, request = firebase.requests[0]
        assert endpoint == "accounts:signUp"
        assert body == {
            "email": "jane@example.com",
            "password": "secret1",
            "returnSecureToken": True,
        }
        assert request.url.params["key"] == "test-key"
        assert user.uid == "uid-123"
        assert user.id_token == "token-abc"
        assert user.display_name is None

    def test_error_code_mapped_to_message(self, client, firebase):
        firebase.errors["accounts:signUp"] = "WEAK_PASSWORD : Password should be at least 6"

        with pytest.raises(AuthError) as exc_info:
            client.sign_up("jane@example.com", "123")

        assert exc_info.value.provider_code == "WEAK_PASSWORD"
        assert str(exc_info.value) == "Password should be at least 6 characters"
        assert exc_info.value.code == "AUTH_ERROR"

    def test_unknown_error_code_keeps_message(self, client, firebase):
        firebase.errors["accounts:signInWithPassword"] = "SOMETHING_ODD"

        with pytest.raises(AuthError, match="SOMETHING_ODD"):
            client.sign_in("jane@example.com", "pw")

    def test_network_error(self):
        def fail(request):
            raise httpx.ConnectError("connection refused")

        client = FirebaseAuthClient("k", transport=httpx.MockTransport(fail))
        with pytest.raises(AuthError) as exc_info:
            client.sign_in("a@b.com", "pw")
        assert exc_info.value.provider_code == "NETWORK_ERROR"

    def test_non_json_success_body(self):
        def html(request):
            return httpx.Response(200, text="<html>maintenance</html>")

        client = FirebaseAuthClient("k", transport=httpx.MockTransport(html))
        with pytest.raises(AuthError) as exc_info:
            client.sign_in("a@b.com", "pw")
        assert exc_info.value.provider_code == "INVALID_RESPONSE"

    def test_password_reset_request(self, client, firebase):
        client.send_password_reset("jane@example.com")

        endpoint, body, _ = firebase.requests[0]
        assert endpoint == "accounts:sendOobCode"
        assert body == {"requestType": "PASSWORD_RESET", "email": "jane@example.com"}

    def test_update_profile_sends_only_given_fields(self, client, firebase):
        client.update_profile("token-abc", display_name="Jane")

        _, body, _ = firebase.requests[0]
        assert body["displayName"] == "Jane"
        assert "photoUrl" not in body

    def test_verify_id_token_default_role(self, client):
        user = client.verify_id_token("token-abc")
        assert user.uid == "uid-123"
        assert user.email == "jane@example.com"
        assert user.role == UserRole.USER

    def test_verify_id_token_admin_claim(self, client, firebase):
        firebase.lookup_users[0]["customAttributes"] = json.dumps({"role": "ADMIN"})
        assert client.verify_id_token("token-abc").role == UserRole.ADMIN

    def test_verify_id_token_malformed_claims(self, client, firebase):
        firebase.lookup_users[0]["customAttributes"] = "{not json"
        assert client.verify_id_token("token-abc").role == UserRole.USER

    def test_lookup_unknown_user(self, client, firebase):
        firebase.lookup_users = []
        with pytest.raises(AuthError) as exc_info:
            client.lookup("token-abc")
        assert exc_info.value.provider_code == "USER_NOT_FOUND"

    def test_emulator_base_url(self, firebase):
        client = FirebaseAuthClient(
            "k", emulator_host="localhost:9099", transport=httpx.MockTransport(firebase)
        )
        client.sign_in("a@b.com", "pw")

        _, _, request = firebase.requests[0]
        assert request.url.host == "localhost"
        assert request.url.port == 9099
        assert request.url.path == "/identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"

    def test_from_settings_requires_configuration(self):
        with pytest.raises(AuthError) as exc_info:
            FirebaseAuthClient.from_settings(Settings())
        assert exc_info.value.provider_code == "CONFIGURATION_NOT_FOUND"

    def test_from_settings_uses_emulator(self):
        settings = Settings(
            firebase=FirebaseSettings(api_key="k", project_id="demo"),
            use_firestore_emulator=True,
            auth_emulator_host="localhost:9099",
            api_timeout=5000,
        )
        client = FirebaseAuthClient.from_settings(settings)
        assert client.base_url.startswith("http://localhost:9099/")
        assert client.client.timeout.read == 5.0
        client.close()


@pytest.mark.unit
class TestAuthSession:
    def test_listener_called_immediately(self, session):
        seen = []
        session.on_auth_state_changed(seen.append)
        assert seen == [None]

    def test_signup_sets_display_name(self, session, firebase):
        seen = []
        session.on_auth_state_changed(seen.append)

        user = session.signup("jane@example.com", "secret1", display_name="Jane")

        assert firebase.endpoints() == ["accounts:signUp", "accounts:update"]
        assert user.display_name == "Jane"
        assert session.user == user
        assert seen[-1] == user
        assert session.loading is False

    def test_login_and_logout(self, session):
        session.login("jane@example.com", "secret1")
        assert session.id_token == "token-abc"

        session.logout()
        assert session.user is None
        assert session.id_token is None

    def test_error_recorded_then_raised(self, session, firebase):
        firebase.errors["accounts:signInWithPassword"] = "INVALID_LOGIN_CREDENTIALS"

        with pytest.raises(AuthError):
            session.login("jane@example.com", "wrong")

        assert str(session.error) == "Invalid email or password"
        assert session.user is None
        assert session.loading is False

    def test_garbled_response_recorded_on_session(self):
        def html(request):
            return httpx.Response(200, text="<html>maintenance</html>")

        client = FirebaseAuthClient("k", transport=httpx.MockTransport(html))
        session = AuthSession(client)
        with pytest.raises(AuthError):
            session.login("jane@example.com", "secret1")

        assert session.error.provider_code == "INVALID_RESPONSE"
        assert session.user is None
        assert session.loading is False

    def test_next_operation_clears_error(self, session, firebase):
        firebase.errors["accounts:signInWithPassword"] = "INVALID_PASSWORD"
        with pytest.raises(AuthError):
            session.login("jane@example.com", "wrong")

        del firebase.errors["accounts:signInWithPassword"]
        session.login("jane@example.com", "right")
        assert session.error is None

    def test_update_profile_requires_user(self, session):
        with pytest.raises(NotAuthenticatedError, match="No user is currently signed in"):
            session.update_user_profile("Jane")
        assert isinstance(session.error, NotAuthenticatedError)

    def test_update_profile(self, session, firebase):
        session.login("jane@example.com", "secret1")

        session.update_user_profile("Jane", "https://example.com/jane.png")

        assert session.user.display_name == "Jane"
        assert session.user.photo_url == "https://example.com/jane.png"
        _, body, _ = firebase.requests[-1]
        assert body["idToken"] == "token-abc"

    def test_reset_password(self, session, firebase):
        session.reset_password("jane@example.com")
        assert firebase.endpoints() == ["accounts:sendOobCode"]

    def test_send_verification_email(self, session, firebase):
        session.login("jane@example.com", "secret1")
        session.send_verification_email()

        _, body, _ = firebase.requests[-1]
        assert body == {"requestType": "VERIFY_EMAIL", "idToken": "token-abc"}

    def test_unsubscribe(self, session):
        seen = []
        unsubscribe = session.on_auth_state_changed(seen.append)
        unsubscribe()

        session.login("jane@example.com", "secret1")
        assert seen == [None]


@pytest.mark.unit
class TestTokenVerifier:
    def test_bearer_token(self, client, firebase):
        user = TokenVerifier(client).authenticate("Bearer token-abc")

        assert user.uid == "uid-123"
        _, body, _ = firebase.requests[0]
        assert body == {"idToken": "token-abc"}

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "token-abc"])
    def test_missing_or_other_scheme(self, client, firebase, header):
        assert TokenVerifier(client).authenticate(header) is None
        assert firebase.requests == []

    def test_invalid_token_logs_warning(self, client, firebase, caplog):
        firebase.errors["accounts:lookup"] = "INVALID_ID_TOKEN"

        with caplog.at_level("WARNING"):
            assert TokenVerifier(client).authenticate("Bearer bad") is None

        assert "Invalid Firebase token" in caplog.text
