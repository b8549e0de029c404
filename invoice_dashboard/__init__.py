import os
import secrets
import sqlite3
from datetime import datetime, timedelta

from dotenv import load_dotenv
from flask import Flask, Response, current_app, g, render_template, request
from flask_bootstrap import Bootstrap5
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_socketio import SocketIO
from flask_sqlalchemy import SQLAlchemy
from flask_wtf import CSRFProtect
from flask_wtf.csrf import CSRFError
from sqlalchemy import event
from sqlalchemy.engine import Engine
from werkzeug.security import generate_password_hash

load_dotenv()
db = SQLAlchemy()
login_manager = LoginManager()
login_manager.login_view = "auth.login"
login_manager.login_message = "Please log in to access the dashboard."
storage_uri = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
limiter = Limiter(key_func=get_remote_address, storage_uri=storage_uri)
csrf = CSRFProtect()
socketio = None


def _get_bool_env(var_name: str, default: bool = False) -> bool:
    """Return a boolean environment variable value."""

    value = os.getenv(var_name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


DEFAULT_CSP_TEMPLATE = (
    "default-src 'self'; "
    "img-src 'self' data: https:; "
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "script-src 'self' https://cdn.jsdelivr.net 'nonce-{nonce}'; "
    "font-src 'self' data:; "
    "connect-src 'self' ws: wss: https://cdn.jsdelivr.net; "
    "frame-ancestors 'self'; "
    "form-action 'self'; "
    "object-src 'none'; "
    "base-uri 'self'"
)
NAV_LINKS = {
    "main.dashboard": "Home",
    "invoice.view_invoices": "Invoices",
    "seller.view_sellers": "Sellers",
}


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Turn on foreign key enforcement, which SQLite keeps off per connection."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@login_manager.user_loader
def load_user(user_id):
    """Retrieve a user by ID for Flask-Login."""
    from invoice_dashboard.models import User

    return db.session.get(User, int(user_id))


def create_admin_user():
    """Ensure the bootstrap user configured in the environment exists."""
    from invoice_dashboard.models import User

    db.create_all()

    admin_email = os.getenv("ADMIN_EMAIL")
    if not admin_email:
        raise RuntimeError("ADMIN_EMAIL environment variable not set")
    if User.query.filter_by(email=admin_email).first() is not None:
        return

    raw_password = os.getenv("ADMIN_PASS")
    if raw_password is None:
        raise RuntimeError("ADMIN_PASS environment variable not set")
    admin_user = User(
        name=os.getenv("ADMIN_NAME", "Admin"),
        email=admin_email,
        password=generate_password_hash(raw_password),
        active=True,
    )
    db.session.add(admin_user)
    db.session.commit()
    current_app.logger.info("Admin user %s created.", admin_email)


def _database_uri(base_dir: str) -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        # Heroku style URLs are rejected by SQLAlchemy 1.4+
        if url.startswith("postgres://"):
            url = "postgresql://" + url[len("postgres://") :]
        return url

    # DATABASE_PATH may point at a file or at a mounted directory.
    default_db_path = os.path.join(base_dir, "invoices.db")
    db_path = os.getenv("DATABASE_PATH", default_db_path)
    if os.path.isdir(db_path):
        db_path = os.path.join(db_path, "invoices.db")
    os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    return f"sqlite:///{os.path.abspath(db_path)}"


def create_app(args: list):
    """Application factory used by Flask."""
    global socketio
    app = Flask(__name__)
    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY")
    app.config["DEMO"] = "--demo" in args
    session_cookie_secure = _get_bool_env(
        "SESSION_COOKIE_SECURE", default=not app.config["DEMO"]
    )
    app.config.update(
        SESSION_COOKIE_SECURE=session_cookie_secure,
        REMEMBER_COOKIE_SECURE=session_cookie_secure,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        PERMANENT_SESSION_LIFETIME=timedelta(minutes=30),
        ENFORCE_HTTPS=_get_bool_env("ENFORCE_HTTPS", default=False),
        RATELIMIT_ENABLED=_get_bool_env("RATELIMIT_ENABLED", default=True),
        DEFAULT_LOCALE=os.getenv("DEFAULT_LOCALE", "en-US"),
        START_TIME=datetime.utcnow(),
    )
    app.logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

    repo_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
    # The default SQLite file lives in the working directory, not the package
    app.config["SQLALCHEMY_DATABASE_URI"] = _database_uri(os.getcwd())

    db.init_app(app)
    from flask_migrate import Migrate

    Migrate(app, db, directory=os.path.join(repo_dir, "migrations"))
    login_manager.init_app(app)
    limiter.init_app(app)
    Bootstrap5(app)
    socketio = SocketIO(app)

    from invoice_dashboard.utils.view_cache import ViewCache

    app.extensions["view_cache"] = ViewCache(socketio)

    from invoice_dashboard.utils.formatting import (
        format_currency,
        format_date_to_local,
    )

    def _format_date(value, locale=None):
        return format_date_to_local(
            value, locale or app.config["DEFAULT_LOCALE"]
        )

    app.jinja_env.filters["format_currency"] = format_currency
    app.jinja_env.filters["format_date_to_local"] = _format_date

    @app.context_processor
    def inject_nav_links():
        """Provide navigation labels to templates."""
        return dict(NAV_LINKS=NAV_LINKS)

    @app.before_request
    def set_csp_nonce():
        """Generate a nonce for inline scripts allowed by the CSP."""

        g.csp_nonce = secrets.token_urlsafe(16)

    @app.after_request
    def apply_security_headers(response):
        """Attach standard security headers to every response."""
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if request.is_secure or app.config.get("ENFORCE_HTTPS", False):
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        nonce = getattr(g, "csp_nonce", "")
        if not nonce:
            nonce = secrets.token_urlsafe(16)
            g.csp_nonce = nonce
        csp_template = app.config.get(
            "CONTENT_SECURITY_POLICY", DEFAULT_CSP_TEMPLATE
        )
        response.headers.setdefault(
            "Content-Security-Policy", csp_template.format(nonce=nonce)
        )
        return response

    @app.context_processor
    def inject_csp_nonce():
        """Expose the CSP nonce to templates for inline scripts."""

        return {"csp_nonce": getattr(g, "csp_nonce", "")}

    @app.before_request
    def block_http_options():
        """Return a 405 for HTTP OPTIONS requests to reduce information leakage."""
        if request.method == "OPTIONS":
            return Response(status=405)

    with app.app_context():
        # Models must be imported before create_all so their tables exist
        # even when migrations have not been run.
        from . import models  # noqa: F401

        db.create_all()

        from invoice_dashboard.routes.auth_routes import auth
        from invoice_dashboard.routes.invoice_routes import invoice
        from invoice_dashboard.routes.main_routes import main
        from invoice_dashboard.routes.seller_routes import seller

        app.register_blueprint(auth)
        app.register_blueprint(main)
        app.register_blueprint(invoice)
        app.register_blueprint(seller)

        csrf.init_app(app)

        @app.errorhandler(CSRFError)
        def handle_csrf_error(error):
            """Render a helpful page when CSRF validation fails."""
            return (
                render_template(
                    "errors/csrf_error.html",
                    reason=error.description,
                ),
                400,
            )

    return app, socketio
