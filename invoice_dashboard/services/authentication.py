"""Credential sign-in and the user-facing classification of its failures."""

from __future__ import annotations

from typing import Callable, Mapping, Optional

from flask_login import login_user
from werkzeug.datastructures import MultiDict
from werkzeug.security import check_password_hash

from invoice_dashboard.forms import CredentialsSchema
from invoice_dashboard.models import User
from invoice_dashboard.utils.activity import log_activity

CREDENTIALS_PROVIDER = "credentials"

CREDENTIALS_SIGNIN = "CredentialsSignin"
ACCESS_DENIED = "AccessDenied"
CONFIGURATION = "Configuration"


class AuthError(Exception):
    """Authentication failure of a known ``kind``."""

    def __init__(self, kind: str, message: Optional[str] = None):
        super().__init__(message or kind)
        self.kind = kind


def _credentials_formdata(credentials) -> MultiDict:
    if hasattr(credentials, "getlist"):
        return credentials
    return MultiDict(
        {key: value for key, value in (credentials or {}).items() if value is not None}
    )


def verify_credentials(credentials: Mapping[str, str]) -> User:
    """Return the active user matching ``credentials`` or raise :class:`AuthError`."""

    schema = CredentialsSchema(_credentials_formdata(credentials))
    if not schema.validate():
        raise AuthError(CREDENTIALS_SIGNIN, "Credentials failed validation")

    user = User.query.filter_by(email=schema.email.data.strip()).first()
    if user is None or not check_password_hash(user.password, schema.password.data):
        raise AuthError(CREDENTIALS_SIGNIN, "Unknown email or wrong password")
    if not user.active:
        raise AuthError(ACCESS_DENIED, f"User {user.id} is not active")
    return user


def sign_in(provider: str, credentials: Mapping[str, str]) -> User:
    """Verify ``credentials`` with ``provider`` and start a session."""

    if provider != CREDENTIALS_PROVIDER:
        raise AuthError(CONFIGURATION, f"Unknown sign-in provider {provider!r}")
    user = verify_credentials(credentials)
    login_user(user)
    log_activity("Logged in", user.id)
    return user


def authenticate(
    credentials: Mapping[str, str],
    *,
    sign_in: Callable[[str, Mapping[str, str]], object] = sign_in,
) -> Optional[str]:
    """Sign in and return ``None``, or a message describing the failure.

    Errors that are not :class:`AuthError` propagate to the caller.
    """

    try:
        sign_in(CREDENTIALS_PROVIDER, credentials)
    except AuthError as error:
        if error.kind == CREDENTIALS_SIGNIN:
            return "Invalid credentials."
        return "Something went wrong."
    return None
