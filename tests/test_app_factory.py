import os

from sqlalchemy import text

from invoice_dashboard import _database_uri, db
from tests.utils import create_user, extract_csrf_token


def test_security_headers_are_applied(client):
    response = client.get("/login")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Referrer-Policy"] == "no-referrer"
    csp = response.headers["Content-Security-Policy"]
    assert "nonce-" in csp


def test_options_requests_are_rejected(client):
    assert client.open("/login", method="OPTIONS").status_code == 405


def test_demo_flag_is_read_from_arguments(app):
    assert app.config["DEMO"] is True


def test_missing_csrf_token_renders_error_page(client, app):
    app.config["WTF_CSRF_ENABLED"] = True
    create_user(app, "csrf@example.com", "password")

    response = client.post(
        "/login", data={"email": "csrf@example.com", "password": "password"}
    )

    assert response.status_code == 400
    assert b"The form could not be submitted" in response.data


def test_login_with_csrf_token(client, app):
    app.config["WTF_CSRF_ENABLED"] = True
    create_user(app, "csrf@example.com", "password")

    token = extract_csrf_token(client.get("/login"))
    response = client.post(
        "/login",
        data={"email": "csrf@example.com", "password": "password", "csrf_token": token},
    )

    assert response.status_code == 302


def test_database_uri_prefers_database_url(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", "postgres://user:pw@db/invoices")
    assert _database_uri(str(tmp_path)) == "postgresql://user:pw@db/invoices"


def test_database_uri_defaults_to_sqlite_file(monkeypatch, tmp_path):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("DATABASE_PATH", raising=False)
    expected = os.path.join(str(tmp_path), "invoices.db")
    assert _database_uri(str(tmp_path)) == f"sqlite:///{expected}"


def test_database_uri_accepts_directory(monkeypatch, tmp_path):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path))
    assert _database_uri("/unused").endswith(os.path.join(str(tmp_path), "invoices.db"))


def test_default_database_lives_in_the_working_directory(app, tmp_path):
    uri = app.config["SQLALCHEMY_DATABASE_URI"]

    assert uri.startswith("sqlite:///")
    assert os.path.realpath(uri[len("sqlite:///"):]) == os.path.realpath(
        tmp_path / "invoices.db"
    )


def test_sqlite_connections_enforce_foreign_keys(app):
    with app.app_context():
        assert db.session.execute(text("PRAGMA foreign_keys")).scalar() == 1
