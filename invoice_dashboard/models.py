import uuid
from datetime import date, datetime

from flask_login import UserMixin
from sqlalchemy.orm import relationship

from invoice_dashboard import db

INVOICE_STATUSES = ("awaiting", "fulfilled")


def _new_id() -> str:
    return str(uuid.uuid4())


class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, server_default="")
    email = db.Column(db.String(120), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)
    active = db.Column(db.Boolean, default=False, nullable=False)

    @property
    def is_active(self):
        return self.active


class Seller(db.Model):
    __tablename__ = "sellers"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    image_url = db.Column(
        db.String(255), nullable=False, default="", server_default=""
    )

    invoices = db.relationship(
        "Invoice", backref="seller", lazy=True, passive_deletes=True
    )

    __table_args__ = (db.Index("ix_sellers_name", "name"),)


class Invoice(db.Model):
    __tablename__ = "invoices"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    seller_id = db.Column(
        db.String(36),
        db.ForeignKey("sellers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Stored in cents
    amount = db.Column(db.Integer, nullable=False)
    status = db.Column(
        db.Enum(*INVOICE_STATUSES, name="invoice_status", native_enum=False),
        nullable=False,
    )
    date = db.Column(db.Date, nullable=False, default=date.today, index=True)

    __table_args__ = (
        db.CheckConstraint("amount >= 0", name="ck_invoices_amount_positive"),
    )


class Income(db.Model):
    __tablename__ = "income"

    id = db.Column(db.Integer, primary_key=True)
    month = db.Column(db.String(4), unique=True, nullable=False)
    income = db.Column(db.Integer, nullable=False)


class ActivityLog(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=True)
    activity = db.Column(db.String(255), nullable=False)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", backref="activity_logs")
