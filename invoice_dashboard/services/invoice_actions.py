"""Invoice mutations: validate, persist, invalidate the list view, redirect.

Every operation runs its steps strictly in that order.  A validation failure
never reaches the database and a database failure never invalidates the
cached invoice list.  Successful create/update calls end with a
:class:`Redirect` to the invoice list; the HTTP layer performs the actual
redirect.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Mapping, Optional, Union

from flask import current_app
from sqlalchemy import delete, insert, update
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import MultiDict

from invoice_dashboard import db
from invoice_dashboard.forms import AMOUNT_MESSAGE, InvoiceSchema
from invoice_dashboard.models import Invoice
from invoice_dashboard.utils.activity import add_activity
from invoice_dashboard.utils.numeric import to_minor_units
from invoice_dashboard.utils.view_cache import INVOICES_TAG, get_view_cache

INVOICES_PATH = "/dashboard/invoices"


@dataclass
class State:
    """What a form needs to re-render after a failed submission."""

    errors: Optional[Dict[str, List[str]]] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class Redirect:
    path: str


@dataclass(frozen=True)
class Result:
    state: State = field(default_factory=State)


Outcome = Union[Redirect, Result]


class PersistenceError(Exception):
    """A keyed statement did not affect the expected row."""


@dataclass(frozen=True)
class InvoiceFields:
    seller_id: str
    amount_in_cents: int
    status: str


def _as_formdata(form_input) -> MultiDict:
    if form_input is None:
        return MultiDict()
    if hasattr(form_input, "getlist"):
        return form_input
    return MultiDict(
        {key: "" if value is None else str(value) for key, value in form_input.items()}
    )


def validate_invoice_fields(
    form_input: Mapping[str, object],
) -> Union[InvoiceFields, Dict[str, List[str]]]:
    """Return parsed fields, or the error messages keyed by field name."""

    schema = InvoiceSchema(_as_formdata(form_input))
    if not schema.validate():
        return {name: list(messages) for name, messages in schema.errors.items()}
    try:
        amount_in_cents = to_minor_units(schema.amount.data)
    except ValueError:
        return {"amount": [AMOUNT_MESSAGE]}
    return InvoiceFields(
        seller_id=schema.seller_id.data.strip(),
        amount_in_cents=amount_in_cents,
        status=schema.status.data,
    )


def _execute_single(statement, activity: str, *, expect_row: bool = False) -> None:
    """Run one statement and record ``activity`` in the same transaction."""

    try:
        result = db.session.execute(statement)
        if expect_row and result.rowcount == 0:
            raise PersistenceError("No invoice matched the statement")
        add_activity(activity)
        db.session.commit()
    except (SQLAlchemyError, PersistenceError):
        db.session.rollback()
        raise


def _cache(cache):
    return cache if cache is not None else get_view_cache()


def create_invoice(
    form_input: Mapping[str, object],
    *,
    cache=None,
    today: Optional[date] = None,
) -> Outcome:
    """Validate and insert a new invoice dated today."""

    fields = validate_invoice_fields(form_input)
    if not isinstance(fields, InvoiceFields):
        return Result(
            State(errors=fields, message="Missing Fields. Failed to Create Invoice.")
        )

    invoice_date = today or date.today()
    try:
        _execute_single(
            insert(Invoice).values(
                seller_id=fields.seller_id,
                amount=fields.amount_in_cents,
                status=fields.status,
                date=invoice_date,
            ),
            f"Created invoice for seller {fields.seller_id} "
            f"({fields.amount_in_cents} cents)",
        )
    except (SQLAlchemyError, PersistenceError):
        current_app.logger.exception("Failed to create invoice")
        return Result(State(message="Database Error: Failed to Create Invoice."))

    _cache(cache).invalidate(INVOICES_TAG)
    return Redirect(INVOICES_PATH)


def update_invoice(
    invoice_id: str, form_input: Mapping[str, object], *, cache=None
) -> Outcome:
    """Validate and overwrite seller, amount and status of an invoice."""

    fields = validate_invoice_fields(form_input)
    if not isinstance(fields, InvoiceFields):
        return Result(
            State(errors=fields, message="Missing Fields. Failed to Update Invoice.")
        )

    try:
        _execute_single(
            update(Invoice)
            .where(Invoice.id == invoice_id)
            .values(
                seller_id=fields.seller_id,
                amount=fields.amount_in_cents,
                status=fields.status,
            ),
            f"Updated invoice {invoice_id}",
            expect_row=True,
        )
    except (SQLAlchemyError, PersistenceError):
        current_app.logger.exception("Failed to update invoice %s", invoice_id)
        return Result(State(message="Database Error: Failed to Update Invoice."))

    _cache(cache).invalidate(INVOICES_TAG)
    return Redirect(INVOICES_PATH)


def delete_invoice(invoice_id: str, *, cache=None) -> Optional[State]:
    """Delete an invoice; returns ``None`` on success.

    Deleting an id that no longer exists is reported as a database error.
    """

    try:
        _execute_single(
            delete(Invoice).where(Invoice.id == invoice_id),
            f"Deleted invoice {invoice_id}",
            expect_row=True,
        )
    except (SQLAlchemyError, PersistenceError):
        current_app.logger.exception("Failed to delete invoice %s", invoice_id)
        return State(message="Database Error: Failed to Delete Invoice.")

    _cache(cache).invalidate(INVOICES_TAG)
    return None
