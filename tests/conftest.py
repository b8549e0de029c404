from __future__ import annotations

import os
import sys

import pytest

from invoice_dashboard import create_admin_user, create_app, db
from invoice_dashboard.models import Seller

# Ensure the project root is importable when tests change directories
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, BASE_DIR)


@pytest.fixture
def app(tmp_path):
    os.environ.setdefault("SECRET_KEY", "testsecret")
    os.environ.setdefault("ADMIN_EMAIL", "admin@example.com")
    os.environ.setdefault("ADMIN_PASS", "adminpass")
    os.environ.setdefault("RATELIMIT_ENABLED", "0")
    os.environ.pop("DATABASE_URL", None)
    os.environ.pop("DATABASE_PATH", None)

    # Each test gets its own SQLite file inside the temp directory
    cwd = os.getcwd()
    os.chdir(tmp_path)
    app, _ = create_app(["--demo"])
    os.chdir(cwd)

    app.config.update({"TESTING": True, "WTF_CSRF_ENABLED": False})

    with app.app_context():
        db.create_all()
        create_admin_user()

        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


class RecordingCache:
    """Stand-in view cache that records invalidated tags."""

    def __init__(self, on_invalidate=None):
        self.invalidated = []
        self.on_invalidate = on_invalidate

    def invalidate(self, tag):
        if self.on_invalidate is not None:
            self.on_invalidate(tag)
        self.invalidated.append(tag)


@pytest.fixture
def cache():
    return RecordingCache()


@pytest.fixture
def seller(app):
    with app.app_context():
        record = Seller(name="Lee Robinson", email="lee@robinson.com")
        db.session.add(record)
        db.session.commit()
        return record.id
