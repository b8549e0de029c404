from datetime import date

from invoice_dashboard import create_app, create_admin_user, db
from invoice_dashboard.models import Income, Invoice, Seller

SELLERS = [
    ("3958dc9e-712f-4377-85e9-fec4b6a6442a", "Delba de Oliveira", "delba@oliveira.com"),
    ("3958dc9e-742f-4377-85e9-fec4b6a6442a", "Lee Robinson", "lee@robinson.com"),
    ("3958dc9e-737f-4377-85e9-fec4b6a6442a", "Hector Simpson", "hector@simpson.com"),
    ("50ca3e18-62cd-11ee-8c99-0242ac120002", "Steven Tey", "steven@tey.com"),
    ("3958dc9e-787f-4377-85e9-fec4b6a6442a", "Steph Dietz", "steph@dietz.com"),
    ("76d65c26-f784-44a2-ac19-586678f7c2f2", "Michael Novotny", "michael@novotny.com"),
]

INVOICES = [
    (0, 15795, "awaiting", date(2022, 12, 6)),
    (1, 20348, "awaiting", date(2022, 11, 14)),
    (4, 3040, "fulfilled", date(2022, 10, 29)),
    (3, 44800, "fulfilled", date(2023, 9, 10)),
    (5, 34577, "awaiting", date(2023, 8, 5)),
    (2, 54246, "awaiting", date(2023, 7, 16)),
    (0, 666, "awaiting", date(2023, 6, 27)),
    (3, 32545, "fulfilled", date(2023, 6, 9)),
    (4, 1250, "fulfilled", date(2023, 6, 17)),
    (5, 8546, "fulfilled", date(2023, 6, 7)),
    (1, 500, "fulfilled", date(2023, 8, 19)),
    (5, 8945, "fulfilled", date(2023, 6, 3)),
    (2, 32545, "fulfilled", date(2023, 6, 18)),
]

INCOME = [
    ("Jan", 2000),
    ("Feb", 1800),
    ("Mar", 2200),
    ("Apr", 2500),
    ("May", 2300),
    ("Jun", 3200),
    ("Jul", 3500),
    ("Aug", 3700),
    ("Sep", 2500),
    ("Oct", 2800),
    ("Nov", 3000),
    ("Dec", 4800),
]


def seed_initial_data() -> None:
    """Seed the database with the admin user and placeholder dashboard data."""
    app, _ = create_app([])
    with app.app_context():
        create_admin_user()

        for seller_id, name, email in SELLERS:
            if db.session.get(Seller, seller_id) is None:
                db.session.add(Seller(id=seller_id, name=name, email=email))
        db.session.flush()

        if Invoice.query.count() == 0:
            for seller_index, amount, status, issued in INVOICES:
                db.session.add(
                    Invoice(
                        seller_id=SELLERS[seller_index][0],
                        amount=amount,
                        status=status,
                        date=issued,
                    )
                )

        for month, income in INCOME:
            record = Income.query.filter_by(month=month).first()
            if record is None:
                db.session.add(Income(month=month, income=income))
            else:
                record.income = income

        db.session.commit()
        app.logger.info("Admin user and placeholder data created.")


if __name__ == "__main__":
    seed_initial_data()
