"""
Shared fixtures: a fresh app on a temporary SQLite file per test, its test
client, and a seeded customer/contact/opportunity.
"""
import pytest

from crm_estimator import create_app, db
from crm_estimator.models import Contact, Customer, Opportunity


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}",
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def seeded(app):
    """ids of one customer (with a primary contact) and one of its opportunities."""
    with app.app_context():
        customer = Customer(
            name="Acme Power",
            company_name="Acme Power Cooperative",
            address="12 Grid Rd, Decatur, AL",
        )
        db.session.add(customer)
        db.session.flush()
        db.session.add(Contact(customer_id=customer.id, first_name="Jordan", last_name="Lee", is_primary=True))
        opportunity = Opportunity(
            customer_id=customer.id,
            description="Substation acceptance testing",
            quote_number="Q-2040",
        )
        db.session.add(opportunity)
        db.session.commit()
        return {"customer_id": customer.id, "opportunity_id": opportunity.id}


def line(item="", quantity=0, material=0, expense=0, men=0, hours=0):
    return {
        "item": item,
        "quantity": quantity,
        "materialPrice": material,
        "expensePrice": expense,
        "laborMen": men,
        "laborHours": hours,
        "notes": "",
    }


@pytest.fixture
def make_line():
    return line
