"""Utility helpers shared across the test-suite."""

from __future__ import annotations

import os
import re
from datetime import date
from typing import Any

from werkzeug.security import generate_password_hash

from invoice_dashboard import db
from invoice_dashboard.models import Invoice, User

_CSRF_RE = re.compile(r'name=["\']csrf_token["\'][^>]*value=["\']([^"\']+)["\']', re.IGNORECASE)


def extract_csrf_token(response: Any, *, required: bool = True) -> str:
    """Return the first CSRF token found in ``response`` HTML content."""

    if hasattr(response, "data"):
        html: str = response.data.decode("utf-8")
    elif isinstance(response, (bytes, bytearray)):
        html = response.decode("utf-8")
    else:
        html = str(response)
    match = _CSRF_RE.search(html)
    if not match:
        if required:
            raise AssertionError("CSRF token not found in response")
        return ""
    return match.group(1)


def login(client, email: str, password: str):
    """Helper to login a user in tests, respecting CSRF protection."""

    login_page = client.get("/login")
    token = extract_csrf_token(login_page, required=False)
    form_data = {"email": email, "password": password}
    if token:
        form_data["csrf_token"] = token
    return client.post(
        "/login",
        data=form_data,
        follow_redirects=True,
    )


def create_user(app, email: str = "user@example.com", password: str = "password", active: bool = True) -> str:
    with app.app_context():
        user = User(
            name="Test User",
            email=email,
            password=generate_password_hash(password),
            active=active,
        )
        db.session.add(user)
        db.session.commit()
        return user.email


def create_invoice_record(
    seller_id: str,
    amount: int = 1000,
    status: str = "awaiting",
    when: date = date(2023, 9, 15),
) -> str:
    """Insert an invoice directly; call inside an app context."""

    invoice = Invoice(seller_id=seller_id, amount=amount, status=status, date=when)
    db.session.add(invoice)
    db.session.commit()
    return invoice.id


def login_admin(client):
    """Log in as the bootstrap admin user created by the app fixture."""

    return login(
        client,
        os.getenv("ADMIN_EMAIL", "admin@example.com"),
        os.getenv("ADMIN_PASS", "adminpass"),
    )
