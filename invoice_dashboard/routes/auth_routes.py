from urllib.parse import urlparse

from flask import (
    Blueprint,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)
from flask_login import current_user, login_required, logout_user

from invoice_dashboard import limiter
from invoice_dashboard.forms import LoginForm
from invoice_dashboard.services.authentication import authenticate
from invoice_dashboard.utils.activity import log_activity

auth = Blueprint("auth", __name__)


def _safe_next(target):
    """Return ``target`` only when it stays on this site."""
    if not target:
        return None
    cleaned = target.replace("\\", "")
    parsed = urlparse(cleaned)
    if parsed.scheme or parsed.netloc:
        return None
    return cleaned


@auth.route("/login", methods=["GET", "POST"])
@limiter.limit("5 per minute", methods=["POST"])
def login():
    """Authenticate a user and start their session."""
    if current_user.is_authenticated:
        return redirect(url_for("main.dashboard"))

    form = LoginForm()
    if request.method == "GET":
        form.next.data = request.args.get("next", "")

    if form.validate_on_submit():
        error = authenticate(
            {"email": form.email.data, "password": form.password.data}
        )
        if error is None:
            return redirect(_safe_next(form.next.data) or url_for("main.dashboard"))
        flash(error, "danger")
    elif request.method == "POST":
        flash("Invalid credentials.", "danger")

    return render_template(
        "auth/login.html", form=form, demo=current_app.config["DEMO"]
    )


@auth.route("/logout")
@login_required
def logout():
    """Log the current user out."""
    user_id = current_user.id
    logout_user()
    log_activity("Logged out", user_id)
    return redirect(url_for("auth.login"))
