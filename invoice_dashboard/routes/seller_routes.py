from flask import Blueprint, render_template, request
from flask_login import login_required

from invoice_dashboard.services.dashboard_data import fetch_filtered_sellers

seller = Blueprint("seller", __name__)


@seller.route("/dashboard/sellers")
@login_required
def view_sellers():
    """List sellers with their invoice totals, optionally filtered."""
    query = request.args.get("query", "").strip()
    sellers = fetch_filtered_sellers(query)
    return render_template("sellers/view_sellers.html", sellers=sellers, query=query)
