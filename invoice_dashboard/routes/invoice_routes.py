from flask import (
    Blueprint,
    abort,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)
from flask_login import login_required

from invoice_dashboard.forms import DeleteForm, InvoiceSchema
from invoice_dashboard.services.dashboard_data import (
    fetch_filtered_invoices,
    fetch_invoice_by_id,
    fetch_invoices_pages,
    fetch_sellers,
)
from invoice_dashboard.services.invoice_actions import (
    Redirect,
    create_invoice as create_invoice_action,
    delete_invoice as delete_invoice_action,
    update_invoice as update_invoice_action,
)
from invoice_dashboard.utils.pagination import (
    build_pagination_args,
    generate_pagination,
    get_page,
)
from invoice_dashboard.utils.view_cache import INVOICES_TAG, get_view_cache

invoice = Blueprint("invoice", __name__)


def _seller_choices():
    return [(s["id"], s["name"]) for s in fetch_sellers()]


def _render_form(template, form, state, **context):
    return render_template(
        template,
        form=form,
        errors=(state.errors or {}) if state else {},
        message=state.message if state else None,
        **context,
    )


@invoice.route("/dashboard/invoices")
@login_required
def view_invoices():
    """List invoices matching the search query, one page at a time."""
    query = request.args.get("query", "").strip()
    page = get_page()

    def load():
        return (
            fetch_filtered_invoices(query, page),
            fetch_invoices_pages(query),
        )

    invoices, total_pages = get_view_cache().get_or_set(
        INVOICES_TAG, (query, page), load
    )
    return render_template(
        "invoices/view_invoices.html",
        invoices=invoices,
        query=query,
        page=page,
        total_pages=total_pages,
        pages=generate_pagination(page, total_pages) if total_pages else [],
        pagination_args=build_pagination_args(),
        delete_form=DeleteForm(),
        invalidation_tag=INVOICES_TAG,
    )


@invoice.route("/dashboard/invoices/create", methods=["GET", "POST"])
@login_required
def create_invoice():
    """Create an invoice from the submitted form."""
    state = None
    if request.method == "POST":
        outcome = create_invoice_action(request.form)
        if isinstance(outcome, Redirect):
            flash("Invoice created.", "success")
            return redirect(outcome.path)
        state = outcome.state
        form = InvoiceSchema(request.form, seller_choices=_seller_choices())
    else:
        form = InvoiceSchema(seller_choices=_seller_choices())
    return _render_form(
        "invoices/invoice_form.html",
        form,
        state,
        title="Create Invoice",
        action=url_for("invoice.create_invoice"),
        submit_label="Create Invoice",
    )


@invoice.route("/dashboard/invoices/<invoice_id>/edit", methods=["GET", "POST"])
@login_required
def edit_invoice(invoice_id):
    """Edit seller, amount and status of an invoice."""
    state = None
    if request.method == "POST":
        outcome = update_invoice_action(invoice_id, request.form)
        if isinstance(outcome, Redirect):
            flash("Invoice updated.", "success")
            return redirect(outcome.path)
        state = outcome.state
        form = InvoiceSchema(request.form, seller_choices=_seller_choices())
    else:
        existing = fetch_invoice_by_id(invoice_id)
        if existing is None:
            abort(404)
        form = InvoiceSchema(data=existing, seller_choices=_seller_choices())
    return _render_form(
        "invoices/invoice_form.html",
        form,
        state,
        title="Edit Invoice",
        action=url_for("invoice.edit_invoice", invoice_id=invoice_id),
        submit_label="Edit Invoice",
    )


@invoice.route("/dashboard/invoices/<invoice_id>/delete", methods=["POST"])
@login_required
def delete_invoice(invoice_id):
    """Delete an invoice and return to the list the user was viewing."""
    form = DeleteForm()
    if not form.validate_on_submit():
        abort(400)
    state = delete_invoice_action(invoice_id)
    if state is not None:
        flash(state.message, "danger")
    return redirect(
        url_for(
            "invoice.view_invoices",
            query=request.args.get("query") or None,
            page=request.args.get("page", type=int),
        )
    )
