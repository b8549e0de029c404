from flask import Blueprint, redirect, render_template, url_for
from flask_login import current_user, login_required

from invoice_dashboard.services.dashboard_data import dashboard_context

main = Blueprint("main", __name__)


@main.route("/")
def home():
    """Send visitors to the dashboard, or to the login page first."""
    return redirect(url_for("main.dashboard"))


@main.route("/dashboard")
@login_required
def dashboard():
    """Render the overview with cards, the income chart and latest invoices."""

    context = dashboard_context()
    return render_template("dashboard.html", user=current_user, context=context)
