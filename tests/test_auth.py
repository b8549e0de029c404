import pytest
from flask_login import current_user

from invoice_dashboard.services.authentication import (
    AuthError,
    authenticate,
    sign_in,
    verify_credentials,
)
from tests.utils import create_user, login


def _raising(error):
    def _sign_in(provider, credentials):
        raise error

    return _sign_in


def test_authenticate_returns_none_on_success():
    calls = []

    def _sign_in(provider, credentials):
        calls.append((provider, credentials))

    credentials = {"email": "a@b.com", "password": "secret1"}
    assert authenticate(credentials, sign_in=_sign_in) is None
    assert calls == [("credentials", credentials)]


def test_authenticate_classifies_bad_credentials():
    result = authenticate({}, sign_in=_raising(AuthError("CredentialsSignin")))
    assert result == "Invalid credentials."


@pytest.mark.parametrize("kind", ["AccessDenied", "Configuration", "CallbackRouteError"])
def test_authenticate_classifies_other_auth_errors(kind):
    assert authenticate({}, sign_in=_raising(AuthError(kind))) == "Something went wrong."


def test_authenticate_propagates_unrecognised_errors():
    with pytest.raises(RuntimeError, match="boom"):
        authenticate({}, sign_in=_raising(RuntimeError("boom")))


def test_verify_credentials_accepts_valid_user(app):
    create_user(app, "valid@example.com", "password")
    with app.app_context():
        user = verify_credentials({"email": "valid@example.com", "password": "password"})
        assert user.email == "valid@example.com"


@pytest.mark.parametrize(
    "credentials",
    [
        {"email": "valid@example.com", "password": "wrong-password"},
        {"email": "nobody@example.com", "password": "password"},
        {"email": "not-an-email", "password": "password"},
        {"email": "valid@example.com", "password": "short"},
        {},
    ],
)
def test_verify_credentials_rejects_bad_credentials(app, credentials):
    create_user(app, "valid@example.com", "password")
    with app.app_context():
        with pytest.raises(AuthError) as excinfo:
            verify_credentials(credentials)
        assert excinfo.value.kind == "CredentialsSignin"


def test_verify_credentials_denies_inactive_user(app):
    create_user(app, "inactive@example.com", "password", active=False)
    with app.app_context():
        with pytest.raises(AuthError) as excinfo:
            verify_credentials({"email": "inactive@example.com", "password": "password"})
        assert excinfo.value.kind == "AccessDenied"


def test_sign_in_rejects_unknown_provider(app):
    with app.test_request_context():
        with pytest.raises(AuthError) as excinfo:
            sign_in("github", {})
        assert excinfo.value.kind == "Configuration"


def test_sign_in_logs_user_in(app):
    create_user(app, "valid@example.com", "password")
    with app.test_request_context():
        sign_in("credentials", {"email": "valid@example.com", "password": "password"})
        assert current_user.is_authenticated
        assert current_user.email == "valid@example.com"


def test_login_redirects_to_dashboard(client, app):
    create_user(app, "test@example.com", "password")

    response = client.post(
        "/login",
        data={"email": "test@example.com", "password": "password"},
    )

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/dashboard")


def test_login_honours_local_next(client, app):
    create_user(app, "test@example.com", "password")

    response = client.post(
        "/login",
        data={
            "email": "test@example.com",
            "password": "password",
            "next": "/dashboard/sellers",
        },
    )
    assert response.headers["Location"].endswith("/dashboard/sellers")

    client.get("/logout")
    response = client.post(
        "/login",
        data={
            "email": "test@example.com",
            "password": "password",
            "next": "https://evil.example.com/",
        },
    )
    assert response.headers["Location"].endswith("/dashboard")


def test_login_with_wrong_password_shows_message(client, app):
    create_user(app, "test@example.com", "password")

    response = login(client, "test@example.com", "nope-nope")

    assert response.status_code == 200
    assert b"Invalid credentials." in response.data


def test_login_with_inactive_account_shows_generic_message(client, app):
    create_user(app, "idle@example.com", "password", active=False)

    response = login(client, "idle@example.com", "password")

    assert b"Something went wrong." in response.data


def test_dashboard_requires_login(client):
    response = client.get("/dashboard")
    assert response.status_code == 302
    assert "/login" in response.headers["Location"]


def test_logout_ends_session(client, app):
    create_user(app, "test@example.com", "password")
    login(client, "test@example.com", "password")

    response = client.get("/logout")

    assert response.headers["Location"].endswith("/login")
    assert client.get("/dashboard").status_code == 302
