"""Create users, sellers, invoices, income and activity log tables."""

import sqlalchemy as sa
from alembic import op


def _has_table(table_name: str, bind) -> bool:
    inspector = sa.inspect(bind)
    return inspector.has_table(table_name)


# revision identifiers, used by Alembic.
revision = "202410190001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()

    if not _has_table("user", bind):
        op.create_table(
            "user",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
            sa.Column("email", sa.String(length=120), nullable=False, unique=True),
            sa.Column("password", sa.String(length=255), nullable=False),
            sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        )

    if not _has_table("sellers", bind):
        op.create_table(
            "sellers",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=False),
            sa.Column("image_url", sa.String(length=255), nullable=False, server_default=""),
        )
        op.create_index("ix_sellers_name", "sellers", ["name"])

    if not _has_table("invoices", bind):
        op.create_table(
            "invoices",
            sa.Column("id", sa.String(length=36), primary_key=True),
            sa.Column("seller_id", sa.String(length=36), nullable=False),
            sa.Column("amount", sa.Integer(), nullable=False),
            sa.Column(
                "status",
                sa.Enum("awaiting", "fulfilled", name="invoice_status", native_enum=False),
                nullable=False,
            ),
            sa.Column("date", sa.Date(), nullable=False),
            sa.CheckConstraint("amount >= 0", name="ck_invoices_amount_positive"),
            sa.ForeignKeyConstraint(
                ["seller_id"], ["sellers.id"], ondelete="CASCADE",
                name="fk_invoices_seller_id",
            ),
        )
        op.create_index("ix_invoices_seller_id", "invoices", ["seller_id"])
        op.create_index("ix_invoices_date", "invoices", ["date"])

    if not _has_table("income", bind):
        op.create_table(
            "income",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("month", sa.String(length=4), nullable=False, unique=True),
            sa.Column("income", sa.Integer(), nullable=False),
        )

    if not _has_table("activity_log", bind):
        op.create_table(
            "activity_log",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.Integer(), nullable=True),
            sa.Column("activity", sa.String(length=255), nullable=False),
            sa.Column("timestamp", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.ForeignKeyConstraint(["user_id"], ["user.id"], name="fk_activity_log_user_id"),
        )


def downgrade():
    bind = op.get_bind()
    for table_name in ("activity_log", "income", "invoices", "sellers", "user"):
        if _has_table(table_name, bind):
            op.drop_table(table_name)
