# scripts/seed_demo_db.py
"""Create (or reset) a demo database with one customer, contact and opportunity."""
import argparse
import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--db", type=str, default=os.environ.get("ESTIMATOR_DB_PATH", str(PROJECT_ROOT / "estimates.db")))
    parser.add_argument("--reset", action="store_true", help="delete the database file first")
    args = parser.parse_args()

    db_path = Path(args.db)
    if args.reset and db_path.exists():
        db_path.unlink()
        print(f"[INFO] removed {db_path}")

    from crm_estimator import create_app, db
    from crm_estimator.models import Contact, Customer, Opportunity

    app = create_app({"SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}"})
    with app.app_context():
        customer = Customer.query.filter_by(name="Demo Customer").first()
        if customer is None:
            customer = Customer(
                name="Demo Customer",
                company_name="Demo Manufacturing Inc.",
                address="100 Industrial Pkwy, Huntsville, AL",
                phone="(256) 555-0100",
            )
            db.session.add(customer)
            db.session.flush()
            db.session.add(Contact(
                customer_id=customer.id,
                first_name="Dana",
                last_name="Smith",
                email="dana.smith@example.com",
                is_primary=True,
            ))
        opportunity = Opportunity.query.filter_by(customer_id=customer.id).first()
        if opportunity is None:
            opportunity = Opportunity(
                customer_id=customer.id,
                description="Annual switchgear maintenance testing",
                quote_number="Q-1001",
            )
            db.session.add(opportunity)
        db.session.commit()
        print(f"[INFO] DB={db_path}")
        print(f"[INFO] customer_id={customer.id} opportunity_id={opportunity.id}")


if __name__ == "__main__":
    main()
