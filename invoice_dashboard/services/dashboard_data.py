"""Queries behind the dashboard overview, invoice list and seller list."""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from sqlalchemy import String, case, cast, func, or_

from invoice_dashboard import db
from invoice_dashboard.models import Income, Invoice, Seller
from invoice_dashboard.utils.formatting import format_currency, generate_y_axis
from invoice_dashboard.utils.numeric import from_minor_units

ITEMS_PER_PAGE = 6


def _coalesce_scalar(query) -> int:
    """Return an integer scalar result or ``0`` when ``None``."""

    result = query.scalar()
    return int(result or 0)


def fetch_income() -> List[Dict[str, Any]]:
    """Return monthly income in insertion order."""

    return [
        {"month": row.month, "income": row.income}
        for row in Income.query.order_by(Income.id.asc()).all()
    ]


def fetch_latest_invoices(limit: int = 5) -> List[Dict[str, Any]]:
    """Return the newest invoices with their seller and formatted amount."""

    rows = (
        db.session.query(Invoice, Seller)
        .join(Seller, Invoice.seller_id == Seller.id)
        .order_by(Invoice.date.desc(), Invoice.id.desc())
        .limit(limit)
        .all()
    )
    return [
        {
            "id": invoice.id,
            "name": seller.name,
            "email": seller.email,
            "image_url": seller.image_url,
            "amount": format_currency(invoice.amount),
        }
        for invoice, seller in rows
    ]


def fetch_card_data() -> Dict[str, Any]:
    """Return counts and totals for the overview cards."""

    number_of_invoices = _coalesce_scalar(db.session.query(func.count(Invoice.id)))
    number_of_sellers = _coalesce_scalar(db.session.query(func.count(Seller.id)))
    fulfilled, awaiting = db.session.query(
        func.sum(case((Invoice.status == "fulfilled", Invoice.amount), else_=0)),
        func.sum(case((Invoice.status == "awaiting", Invoice.amount), else_=0)),
    ).one()

    return {
        "number_of_invoices": number_of_invoices,
        "number_of_sellers": number_of_sellers,
        "total_fulfilled_invoices": format_currency(int(fulfilled or 0)),
        "total_awaiting_invoices": format_currency(int(awaiting or 0)),
    }


def _invoice_search(query: str):
    base = db.session.query(Invoice, Seller).join(
        Seller, Invoice.seller_id == Seller.id
    )
    if not query:
        return base
    pattern = f"%{query}%"
    return base.filter(
        or_(
            Seller.name.ilike(pattern),
            Seller.email.ilike(pattern),
            cast(Invoice.amount, String).ilike(pattern),
            cast(Invoice.date, String).ilike(pattern),
            Invoice.status.ilike(pattern),
        )
    )


def fetch_filtered_invoices(query: str, current_page: int) -> List[Dict[str, Any]]:
    """Return one page of invoices matching ``query``, newest first."""

    offset = (max(current_page, 1) - 1) * ITEMS_PER_PAGE
    rows = (
        _invoice_search(query)
        .order_by(Invoice.date.desc(), Invoice.id.desc())
        .limit(ITEMS_PER_PAGE)
        .offset(offset)
        .all()
    )
    return [
        {
            "id": invoice.id,
            "seller_id": invoice.seller_id,
            "name": seller.name,
            "email": seller.email,
            "image_url": seller.image_url,
            "date": invoice.date,
            "amount": invoice.amount,
            "status": invoice.status,
        }
        for invoice, seller in rows
    ]


def fetch_invoices_pages(query: str) -> int:
    """Return how many pages :func:`fetch_filtered_invoices` can serve."""

    count = _invoice_search(query).count()
    return math.ceil(count / ITEMS_PER_PAGE)


def fetch_invoice_by_id(invoice_id: str) -> Optional[Dict[str, Any]]:
    """Return an invoice prepared for the edit form, amount in dollars."""

    invoice = db.session.get(Invoice, invoice_id)
    if invoice is None:
        return None
    return {
        "id": invoice.id,
        "seller_id": invoice.seller_id,
        "amount": from_minor_units(invoice.amount),
        "status": invoice.status,
    }


def fetch_sellers() -> List[Dict[str, str]]:
    return [
        {"id": seller.id, "name": seller.name}
        for seller in Seller.query.order_by(Seller.name.asc()).all()
    ]


def fetch_filtered_sellers(query: str) -> List[Dict[str, Any]]:
    """Return sellers matching ``query`` with invoice counts and totals."""

    pattern = f"%{query or ''}%"
    rows = (
        db.session.query(
            Seller,
            func.count(Invoice.id),
            func.sum(case((Invoice.status == "awaiting", Invoice.amount), else_=0)),
            func.sum(case((Invoice.status == "fulfilled", Invoice.amount), else_=0)),
        )
        .outerjoin(Invoice, Invoice.seller_id == Seller.id)
        .filter(or_(Seller.name.ilike(pattern), Seller.email.ilike(pattern)))
        .group_by(Seller.id)
        .order_by(Seller.name.asc())
        .all()
    )
    return [
        {
            "id": seller.id,
            "name": seller.name,
            "email": seller.email,
            "image_url": seller.image_url,
            "total_invoices": int(total or 0),
            "total_awaiting": format_currency(int(awaiting or 0)),
            "total_fulfilled": format_currency(int(fulfilled or 0)),
        }
        for seller, total, awaiting, fulfilled in rows
    ]


def dashboard_context() -> Dict[str, Any]:
    """Aggregate everything the overview page shows."""

    income = fetch_income()
    return {
        "cards": fetch_card_data(),
        "income": income,
        # An empty chart has no axis to draw
        "y_axis": generate_y_axis(income) if income else None,
        "latest_invoices": fetch_latest_invoices(),
    }
